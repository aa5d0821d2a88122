"""Public API for the parametric stand geometry engine."""

from stand_engine.catalog import SPEC_A, SPEC_B
from stand_engine.config import EngineConfig, load_engine_config
from stand_engine.contracts import (
    BrandMeta,
    Layout,
    ProductDims,
    Spec,
    StandDims,
    StandType,
    ValidationResult,
)
from stand_engine.geometry import SceneGraph, build_scene
from stand_engine.layout import LayoutPlan, solve_layout
from stand_engine.manufacturing_contract import Contract, to_contract
from stand_engine.normalize import SpecNormalizationError, normalize_form
from stand_engine.pipeline import StandRunResult, run_form, run_spec
from stand_engine.validate import SpecValidationError, validate, validate_with_report

__all__ = [
    "SPEC_A",
    "SPEC_B",
    "BrandMeta",
    "Contract",
    "EngineConfig",
    "Layout",
    "LayoutPlan",
    "ProductDims",
    "SceneGraph",
    "Spec",
    "SpecNormalizationError",
    "SpecValidationError",
    "StandDims",
    "StandRunResult",
    "StandType",
    "ValidationResult",
    "build_scene",
    "load_engine_config",
    "normalize_form",
    "run_form",
    "run_spec",
    "solve_layout",
    "to_contract",
    "validate",
    "validate_with_report",
]
