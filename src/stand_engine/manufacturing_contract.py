"""Manufacturing contract: the flat, stable projection of a Spec for later stages."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from hashlib import sha256
from typing import Any, Dict, Optional

from .catalog import resolve_material_key
from .contracts import BrandMeta, Spec
from .layout import LayoutConfig, solve_layout, used_depth

SCHEMA_BRIEF_V1 = "stand.preservation_brief.1"

FORBIDDEN_EDITS = (
    "change_dimensions",
    "extra_rows",
    "stagger",
    "count_drift",
    "rotate_products",
    "add_products",
    "remove_products",
    "change_layout",
)

DEFAULT_CAMERA = "orthographic 3/4"

# Wire name -> attribute name. Order is the published field order.
_WIRE_FIELDS = (
    ("standWidth", "stand_width"),
    ("standDepth", "stand_depth"),
    ("standHeight", "stand_height"),
    ("shelfThickness", "shelf_thickness"),
    ("shelfCount", "shelf_count"),
    ("productWidth", "product_width"),
    ("productHeight", "product_height"),
    ("productDepth", "product_depth"),
    ("productCount", "product_count"),
    ("brand", "brand"),
    ("product", "product"),
    ("material", "material"),
)

_FLOAT_FIELDS = {
    "stand_width", "stand_depth", "stand_height", "shelf_thickness",
    "product_width", "product_height", "product_depth",
}
_INT_FIELDS = {"shelf_count", "product_count"}


@dataclass(frozen=True)
class Contract:
    stand_width: float
    stand_depth: float
    stand_height: float
    shelf_thickness: float
    shelf_count: int
    product_width: float
    product_height: float
    product_depth: float
    product_count: int
    brand: str
    product: str
    material: str

    def to_dict(self) -> Dict[str, Any]:
        values = asdict(self)
        return {wire: values[attr] for wire, attr in _WIRE_FIELDS}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Contract":
        missing = [wire for wire, _ in _WIRE_FIELDS if wire not in payload]
        if missing:
            raise ValueError(f"Contract payload missing fields: {missing}")
        kwargs: Dict[str, Any] = {}
        for wire, attr in _WIRE_FIELDS:
            value = payload[wire]
            if attr in _FLOAT_FIELDS:
                kwargs[attr] = float(value)
            elif attr in _INT_FIELDS:
                kwargs[attr] = int(value)
            else:
                kwargs[attr] = str(value)
        return cls(**kwargs)


def canonical_json_dumps(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def to_contract(
    spec: Spec,
    brand_meta: Optional[BrandMeta] = None,
    layout_config: Optional[LayoutConfig] = None,
) -> Contract:
    """Project a spec and brand facts into a Contract. No validation happens here."""
    if brand_meta is None:
        brand_meta = BrandMeta()
    plan = solve_layout(spec, layout_config)
    return Contract(
        stand_width=spec.stand.width,
        stand_depth=spec.stand.depth,
        stand_height=spec.stand.height,
        shelf_thickness=spec.stand.shelf_thickness,
        shelf_count=spec.shelf_count,
        product_width=spec.product.width,
        product_height=spec.product.height,
        product_depth=spec.product.depth,
        product_count=plan.total_capacity,
        brand=brand_meta.brand,
        product=brand_meta.product,
        material=resolve_material_key(brand_meta.material),
    )


def contract_to_json(contract: Contract) -> str:
    return canonical_json_dumps(contract.to_dict())


def contract_from_json(text: str) -> Contract:
    return Contract.from_dict(json.loads(text))


def contract_checksum(contract: Contract) -> str:
    return sha256(contract_to_json(contract).encode("utf-8")).hexdigest()


def verification_tag(spec: Spec) -> str:
    gaps = spec.layout.gaps_depth
    gap_text = "zero" if gaps == 0 else f"{gaps:g}"
    return f"{spec.layout.columns}x{spec.layout.depth_count}_{gap_text}_gaps"


def build_preservation_brief(
    contract: Contract,
    spec: Spec,
    camera: str = DEFAULT_CAMERA,
) -> Dict[str, Any]:
    """Arrangement and forbidden edits that an image stage must respect."""
    return {
        "schema_version": SCHEMA_BRIEF_V1,
        "contract": contract.to_dict(),
        "contract_sha256": contract_checksum(contract),
        "arrangement": {
            "columns_across": spec.layout.columns,
            "depth_count": spec.layout.depth_count,
            "gaps_depth_cm": spec.layout.gaps_depth,
            "shelf_count": spec.shelf_count,
            "stand_type": spec.stand_type.value,
        },
        "camera": camera,
        "forbid": list(FORBIDDEN_EDITS),
        "checksum": {
            "total_products": contract.product_count,
            "used_depth_cm": used_depth(spec),
            "verification": verification_tag(spec),
        },
    }

