"""
End-to-end stand pipeline.

form -> normalize -> validation gate -> scene + contract

The gate result is recomputed right before building; geometry and contract
are only produced for specs that pass it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from .audit import SceneIssue, audit_scene
from .config import EngineConfig
from .contracts import BrandMeta, Spec, ValidationResult
from .geometry import SceneGraph, build_scene
from .manufacturing_contract import Contract, to_contract
from .normalize import normalize_form
from .validate import validate_with_report

logger = logging.getLogger(__name__)


@dataclass
class StandRunResult:
    """Everything one pipeline pass produced for one input."""

    spec: Spec
    validation: ValidationResult
    scene: Optional[SceneGraph] = None
    contract: Optional[Contract] = None
    issues: List[SceneIssue] = field(default_factory=list)

    @property
    def status(self) -> str:
        if not self.validation.is_valid:
            return "rejected"
        if self.issues:
            return "built_with_issues"
        return "built"


def run_spec(
    spec: Spec,
    brand_meta: Optional[BrandMeta] = None,
    config: Optional[EngineConfig] = None,
) -> StandRunResult:
    """Gate, build and project an already-normalized spec."""
    if config is None:
        config = EngineConfig()

    report = validate_with_report(spec, config.validation)
    result = StandRunResult(spec=spec, validation=report)
    for warning in report.warnings:
        logger.warning("%s", warning)
    if not report.is_valid:
        for error in report.errors:
            logger.error("%s", error)
        return result

    result.scene = build_scene(spec, config.geometry)
    result.issues = audit_scene(result.scene)
    result.contract = to_contract(spec, brand_meta, config.layout)
    logger.info("Pipeline status: %s", result.status)
    return result


def run_form(
    form: Mapping[str, Any],
    brand_meta: Optional[BrandMeta] = None,
    config: Optional[EngineConfig] = None,
) -> StandRunResult:
    """Normalize raw form data, then run ``run_spec``."""
    if config is None:
        config = EngineConfig()
    spec = normalize_form(form, config.normalizer)
    return run_spec(spec, brand_meta, config)
