"""End-to-end pipeline tests."""
import logging

import pytest

from conftest import make_spec
from stand_engine import EngineConfig, SpecNormalizationError, run_form, run_spec
from stand_engine.catalog import SPEC_A
from stand_engine.validate import ValidationConfig


class TestRunForm:

    def test_wafer_form_builds(self, wafer_form, brand_meta):
        result = run_form(wafer_form, brand_meta)
        assert result.spec == SPEC_A
        assert result.status == "built"
        assert result.issues == []
        assert len(result.scene.products) == 12
        assert result.contract.product_count == 12
        assert result.contract.material == "wood"

    def test_overflowing_form_rejected(self, wafer_form):
        wafer_form["backToBackCount"] = 14
        result = run_form(wafer_form)
        assert result.status == "rejected"
        assert result.scene is None
        assert result.contract is None
        assert result.validation.measurements.calculated_depth == 35.0

    def test_bad_form_raises(self, wafer_form):
        wafer_form["standWidth"] = "wide"
        with pytest.raises(SpecNormalizationError):
            run_form(wafer_form)

    def test_config_reaches_normalizer(self):
        config = EngineConfig.from_dict({"normalizer": {"profile_key": "chocolate_bar"}})
        result = run_form({}, config=config)
        assert result.spec.layout.depth_count == 18


class TestRunSpec:

    def test_scene_and_contract_agree(self, two_column_spec, brand_meta):
        result = run_spec(two_column_spec, brand_meta)
        assert result.scene.total_products == result.contract.product_count == 24
        assert result.scene.spec == two_column_spec

    def test_warnings_are_logged(self, caplog):
        spec = make_spec(depth_count=2)
        with caplog.at_level(logging.WARNING, logger="stand_engine.pipeline"):
            result = run_spec(spec)
        assert result.status == "built"
        assert any("DEPTH UNDERUTILIZATION" in r.getMessage() for r in caplog.records)

    def test_errors_are_logged(self, caplog):
        with caplog.at_level(logging.ERROR, logger="stand_engine.pipeline"):
            run_spec(make_spec(columns=2))
        assert any("WIDTH OVERFLOW" in r.getMessage() for r in caplog.records)

    def test_validation_config_applies(self):
        spec = make_spec(depth_count=2)
        config = EngineConfig(validation=ValidationConfig(min_depth_utilization=0.0))
        assert run_spec(spec, config=config).validation.warnings == ()
