"""
Math gates for stand specs.

Checks a Spec against the hard physical constraints (depth, width and height
overflow, layout counts) plus advisory checks (depth underutilization, tight
width fit, thin shelves, shelf spacing). All rules run on every call; fatal
findings are collected before anything is raised or returned.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .contracts import GateViolation, Spec, ValidationResult, messages_of
from .layout import measure, used_depth, used_width

logger = logging.getLogger(__name__)

FATAL = "fatal"
WARNING = "warning"


@dataclass(frozen=True)
class ValidationConfig:
    """Advisory thresholds."""

    min_depth_utilization: float = 0.30  # fraction of stand depth
    tight_fit_clearance_cm: float = 1.0
    min_shelf_thickness_cm: float = 1.5
    check_shelf_spacing: bool = True


class SpecValidationError(ValueError):
    """Raised by ``validate`` when at least one fatal rule fires."""

    def __init__(self, result: ValidationResult):
        self.result = result
        self.errors = list(result.errors)
        lines = "\n".join(f"• {e}" for e in result.errors)
        super().__init__(f"VALIDATION FAILED:\n{lines}")


@dataclass(frozen=True)
class GatePassed:
    result: ValidationResult


@dataclass(frozen=True)
class GateFailed:
    result: ValidationResult

    @property
    def errors(self) -> List[str]:
        return list(self.result.errors)


GateOutcome = Union[GatePassed, GateFailed]


def _fmt(value: float) -> str:
    return f"{value:g}"


def evaluate_gate(spec: Spec, config: Optional[ValidationConfig] = None) -> GateOutcome:
    """Run every rule once and classify the spec.

    Args:
        spec: Spec to check.
        config: Advisory thresholds.

    Returns:
        ``GatePassed`` when no fatal rule fired, otherwise ``GateFailed``.
        Both carry the full ValidationResult (warnings and measurements too).
    """
    if config is None:
        config = ValidationConfig()

    violations: List[GateViolation] = []
    violations.extend(_check_depth(spec, config))
    violations.extend(_check_layout_counts(spec))
    violations.extend(_check_width(spec, config))
    violations.extend(_check_height(spec))
    violations.extend(_check_shelf(spec, config))

    errors = tuple(messages_of(violations, FATAL))
    warnings = tuple(messages_of(violations, WARNING))
    result = ValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        measurements=measure(spec),
        violations=tuple(violations),
    )

    for v in violations:
        logger.debug("Gate rule %s (%s): %s", v.code, v.severity, v.message)
    if errors:
        return GateFailed(result)
    return GatePassed(result)


def validate(spec: Spec, config: Optional[ValidationConfig] = None) -> ValidationResult:
    """Return the report for a valid spec; raise SpecValidationError otherwise."""
    outcome = evaluate_gate(spec, config)
    if isinstance(outcome, GateFailed):
        raise SpecValidationError(outcome.result)
    return outcome.result


def validate_with_report(spec: Spec, config: Optional[ValidationConfig] = None) -> ValidationResult:
    """Same rules as ``validate`` but failure is encoded in ``is_valid``."""
    outcome = evaluate_gate(spec, config)
    if isinstance(outcome, GateFailed):
        logger.info("Spec rejected with %d error(s)", len(outcome.result.errors))
    return outcome.result


def is_valid(spec: Spec, config: Optional[ValidationConfig] = None) -> bool:
    return isinstance(evaluate_gate(spec, config), GatePassed)


# ─── Individual rules ────────────────────────────────────────────────────────


def _check_depth(spec: Spec, config: ValidationConfig) -> List[GateViolation]:
    violations = []
    needed = used_depth(spec)
    available = spec.stand.depth

    if needed > available:
        violations.append(
            GateViolation(
                code="depth_overflow",
                severity=FATAL,
                message=(
                    f"DEPTH OVERFLOW: Products need {_fmt(needed)}cm but stand only has "
                    f"{_fmt(available)}cm available. "
                    "Reduce product count, product depth, or increase stand depth."
                ),
                value=needed,
                limit=available,
            )
        )

    floor = available * config.min_depth_utilization
    if needed < floor:
        percent = round(needed / available * 100) if available > 0 else 0
        violations.append(
            GateViolation(
                code="depth_underutilization",
                severity=WARNING,
                message=(
                    f"DEPTH UNDERUTILIZATION: Products only use {_fmt(needed)}cm of "
                    f"{_fmt(available)}cm available ({percent}%). "
                    "Consider adding more products or reducing stand depth."
                ),
                value=needed,
                limit=floor,
            )
        )
    return violations


def _check_layout_counts(spec: Spec) -> List[GateViolation]:
    violations = []
    layout = spec.layout
    if layout.columns < 1:
        violations.append(
            GateViolation(
                code="layout_error",
                severity=FATAL,
                message=f"LAYOUT ERROR: Must have at least 1 column, got {layout.columns}.",
                value=layout.columns,
                limit=1,
            )
        )
    if layout.depth_count < 1:
        violations.append(
            GateViolation(
                code="count_error",
                severity=FATAL,
                message=(
                    "COUNT ERROR: Must have at least 1 product deep, "
                    f"got {layout.depth_count}."
                ),
                value=layout.depth_count,
                limit=1,
            )
        )
    if layout.gaps_depth < 0:
        violations.append(
            GateViolation(
                code="gaps_error",
                severity=FATAL,
                message=(
                    "GAPS ERROR: Gaps cannot be negative, "
                    f"got {_fmt(layout.gaps_depth)}cm gaps."
                ),
                value=layout.gaps_depth,
                limit=0.0,
            )
        )
    return violations


def _check_width(spec: Spec, config: ValidationConfig) -> List[GateViolation]:
    needed = used_width(spec)
    available = spec.stand.width
    if needed > available:
        return [
            GateViolation(
                code="width_overflow",
                severity=FATAL,
                message=(
                    f"WIDTH OVERFLOW: {spec.layout.columns} columns × "
                    f"{_fmt(spec.product.width)}cm = {_fmt(needed)}cm needed, "
                    f"but stand only {_fmt(available)}cm wide. "
                    "Reduce columns, product width, or increase stand width."
                ),
                value=needed,
                limit=available,
            )
        ]

    clearance = available - needed
    if 0 <= clearance < config.tight_fit_clearance_cm:
        return [
            GateViolation(
                code="tight_width_fit",
                severity=WARNING,
                message=f"Tight width fit: Only {_fmt(clearance)}cm clearance.",
                value=clearance,
                limit=config.tight_fit_clearance_cm,
            )
        ]
    return []


def _check_height(spec: Spec) -> List[GateViolation]:
    available = spec.stand.height - spec.stand.shelf_thickness
    if spec.product.height > available:
        return [
            GateViolation(
                code="height_overflow",
                severity=FATAL,
                message=(
                    f"HEIGHT OVERFLOW: Product {_fmt(spec.product.height)}cm taller than "
                    f"available space {_fmt(available)}cm."
                ),
                value=spec.product.height,
                limit=available,
            )
        ]
    return []


def _check_shelf(spec: Spec, config: ValidationConfig) -> List[GateViolation]:
    violations = []
    thickness = spec.stand.shelf_thickness
    if thickness < config.min_shelf_thickness_cm:
        violations.append(
            GateViolation(
                code="thin_shelf",
                severity=WARNING,
                message=(
                    f"Thin shelf: {_fmt(thickness)}cm thickness may be structurally weak."
                ),
                value=thickness,
                limit=config.min_shelf_thickness_cm,
            )
        )

    if config.check_shelf_spacing and spec.shelf_count > 1:
        pitch = spec.stand.height / spec.shelf_count
        needed = thickness + spec.product.height
        if pitch < needed:
            violations.append(
                GateViolation(
                    code="shelf_spacing",
                    severity=WARNING,
                    message=(
                        f"SHELF SPACING: {spec.shelf_count} shelves leave "
                        f"{_fmt(pitch)}cm per level but each level needs "
                        f"{_fmt(needed)}cm (shelf + product)."
                    ),
                    value=pitch,
                    limit=needed,
                )
            )
    return violations
