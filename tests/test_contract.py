"""Tests for the manufacturing contract."""
import json

import pytest

from conftest import make_spec
from stand_engine.contracts import BrandMeta, StandType
from stand_engine.manufacturing_contract import (
    FORBIDDEN_EDITS,
    SCHEMA_BRIEF_V1,
    Contract,
    build_preservation_brief,
    canonical_json_dumps,
    contract_checksum,
    contract_from_json,
    contract_to_json,
    to_contract,
    verification_tag,
)

CONTRACT_FIELDS = [
    "standWidth",
    "standDepth",
    "standHeight",
    "shelfThickness",
    "shelfCount",
    "productWidth",
    "productHeight",
    "productDepth",
    "productCount",
    "brand",
    "product",
    "material",
]


class TestToContract:

    def test_reference_contract(self, spec_a, brand_meta):
        contract = to_contract(spec_a, brand_meta)
        assert contract.to_dict() == {
            "standWidth": 15.0,
            "standDepth": 30.0,
            "standHeight": 30.0,
            "shelfThickness": 2.0,
            "shelfCount": 1,
            "productWidth": 13.0,
            "productHeight": 5.0,
            "productDepth": 2.5,
            "productCount": 12,
            "brand": "Ülker",
            "product": "Çikolatalı Gofret",
            "material": "wood",
        }

    def test_field_order_is_stable(self, spec_a):
        assert list(to_contract(spec_a).to_dict()) == CONTRACT_FIELDS

    def test_default_brand_meta(self, spec_a):
        contract = to_contract(spec_a)
        assert (contract.brand, contract.product, contract.material) == (
            "Brand", "Product", "plastic",
        )

    def test_material_label_resolved(self, spec_a):
        contract = to_contract(spec_a, BrandMeta(material="Ahşap (Wood)"))
        assert contract.material == "wood"

    def test_unknown_material_rejected(self, spec_a):
        with pytest.raises(ValueError, match="Unknown stand material"):
            to_contract(spec_a, BrandMeta(material="unobtainium"))

    def test_product_count_covers_all_shelves(self, two_column_spec):
        assert to_contract(two_column_spec).product_count == 24

    def test_product_count_follows_tiers(self, two_column_spec, with_type):
        spec = with_type(two_column_spec, StandType.MULTI_TIER)
        assert to_contract(spec).product_count == 13

    def test_idempotent(self, spec_b, brand_meta):
        assert to_contract(spec_b, brand_meta) == to_contract(spec_b, brand_meta)

    def test_projection_does_not_validate(self):
        spec = make_spec(depth_count=14)
        assert to_contract(spec).product_count == 14


class TestSerialization:

    def test_json_round_trip(self, spec_b, brand_meta):
        contract = to_contract(spec_b, brand_meta)
        assert contract_from_json(contract_to_json(contract)) == contract

    def test_canonical_json_is_sorted_and_compact(self, spec_a):
        text = contract_to_json(to_contract(spec_a))
        assert " " not in text
        assert list(json.loads(text)) == sorted(CONTRACT_FIELDS)

    def test_canonical_dumps_ignores_insertion_order(self):
        assert canonical_json_dumps({"b": 1, "a": 2}) == canonical_json_dumps({"a": 2, "b": 1})

    def test_from_dict_requires_every_field(self, spec_a):
        payload = to_contract(spec_a).to_dict()
        del payload["productCount"]
        with pytest.raises(ValueError, match="productCount"):
            Contract.from_dict(payload)

    def test_checksum_is_stable(self, spec_a, brand_meta):
        first = contract_checksum(to_contract(spec_a, brand_meta))
        second = contract_checksum(to_contract(spec_a, brand_meta))
        assert first == second
        assert len(first) == 64

    def test_checksum_tracks_content(self, spec_a, spec_b):
        assert contract_checksum(to_contract(spec_a)) != contract_checksum(to_contract(spec_b))


class TestPreservationBrief:

    def test_reference_brief(self, spec_a, brand_meta):
        contract = to_contract(spec_a, brand_meta)
        brief = build_preservation_brief(contract, spec_a)
        assert brief["schema_version"] == SCHEMA_BRIEF_V1
        assert brief["contract"] == contract.to_dict()
        assert brief["contract_sha256"] == contract_checksum(contract)
        assert brief["arrangement"]["columns_across"] == 1
        assert brief["arrangement"]["depth_count"] == 12
        assert brief["forbid"] == list(FORBIDDEN_EDITS)
        assert brief["checksum"] == {
            "total_products": 12,
            "used_depth_cm": 30.0,
            "verification": "1x12_zero_gaps",
        }

    def test_custom_camera(self, spec_a):
        brief = build_preservation_brief(to_contract(spec_a), spec_a, camera="front")
        assert brief["camera"] == "front"

    def test_verification_tag_with_gaps(self, spec_b):
        assert verification_tag(spec_b) == "1x9_0.8_gaps"

    def test_brief_is_json_serializable(self, two_column_spec, brand_meta):
        brief = build_preservation_brief(to_contract(two_column_spec, brand_meta), two_column_spec)
        assert json.loads(json.dumps(brief)) == brief
