"""
Form input -> canonical Spec.

Raw stand request forms carry optional fields, strings with units, and
bilingual stand-type labels. ``normalize_form`` turns them into a fully
numeric Spec in centimeters, filling gaps from a product-category profile.
"""

import logging
import math
import re
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Mapping, Optional

from .catalog import (
    CM_PER_UNIT, DEFAULT_PROFILE_KEY, UNIT_ALIASES, ProductProfile, get_profile,
)
from .contracts import Layout, ProductDims, Spec, StandDims, StandType

logger = logging.getLogger(__name__)

_LENGTH_RE = re.compile(r"^\s*([-+]?\d+(?:[.,]\d+)?)\s*([a-zA-Z\"']*)\s*$")

_STAND_TYPE_KEYWORDS = (
    (StandType.MULTI_TIER, ("multi-tier", "multi tier", "multi_tier", "çok katlı")),
    (StandType.WALL_MOUNT, ("wall mount", "wall_mount", "wall-mount", "duvar")),
    (StandType.ROTATING, ("rotating", "dönen")),
    (StandType.CORNER, ("corner", "köşe")),
    (StandType.FLOOR, ("floor", "ayaklı")),
    (StandType.TABLETOP, ("tabletop", "table top", "masa üstü")),
)


class SpecNormalizationError(ValueError):
    """Form input that cannot be turned into a Spec."""


@dataclass(frozen=True)
class NormalizerDefaults:
    """Fallbacks for fields a form may omit."""

    profile_key: str = DEFAULT_PROFILE_KEY
    unit: str = "cm"
    columns: int = 1
    shelf_count: int = 1
    gaps_depth: float = 0.0
    stand_type: StandType = StandType.TABLETOP
    floor_min_height_cm: float = 120.0
    floor_autoscale_below_cm: float = 50.0


def _lookup(form: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in form:
            value = form[key]
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            return value
    return None


def resolve_unit(unit: str) -> str:
    text = str(unit).strip().lower()
    text = UNIT_ALIASES.get(text, text)
    if text not in CM_PER_UNIT:
        raise SpecNormalizationError(f"Unknown length unit: {unit!r}")
    return text


def parse_length(value: Any, unit: str = "cm") -> float:
    """Parse a number or a ``"<number> <unit>"`` string into centimeters.

    Bare numbers use ``unit``. A decimal comma is accepted (``"2,5"``).
    """
    if isinstance(value, bool):
        raise SpecNormalizationError(f"Expected a length, got {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise SpecNormalizationError(f"Length must be finite, got {value!r}")
        number = Fraction(value)
        suffix = ""
    else:
        match = _LENGTH_RE.match(str(value))
        if match is None:
            raise SpecNormalizationError(f"Cannot parse length {value!r}")
        number = Fraction(match.group(1).replace(",", "."))
        suffix = match.group(2)
    factor = CM_PER_UNIT[resolve_unit(suffix or unit)]
    return float(number * factor)


def parse_count(value: Any) -> int:
    """Parse an integral count; range checks are left to the validation gate."""
    if isinstance(value, bool):
        raise SpecNormalizationError(f"Expected a count, got {value!r}")
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError) as exc:
        raise SpecNormalizationError(f"Cannot parse count {value!r}") from exc
    if not math.isfinite(number) or number != int(number):
        raise SpecNormalizationError(f"Count must be a whole number, got {value!r}")
    return int(number)


def parse_stand_type(value: Any, default: StandType = StandType.TABLETOP) -> StandType:
    """Match enum values, English names and bilingual form labels."""
    if value is None:
        return default
    if isinstance(value, StandType):
        return value
    text = str(value).strip().lower()
    if not text:
        return default
    for stand_type in StandType:
        if text == stand_type.value:
            return stand_type
    for stand_type, keywords in _STAND_TYPE_KEYWORDS:
        if any(k in text for k in keywords):
            return stand_type
    raise SpecNormalizationError(f"Unknown stand type: {value!r}")


def _positive_length(form, keys, fallback, unit, label) -> float:
    raw = _lookup(form, *keys)
    if raw is None:
        return fallback
    value = parse_length(raw, unit)
    if value <= 0:
        raise SpecNormalizationError(f"{label} must be positive, got {raw!r}")
    return value


def normalize_form(
    form: Mapping[str, Any],
    defaults: Optional[NormalizerDefaults] = None,
) -> Spec:
    """Build a Spec from raw form data.

    Args:
        form: Form fields (camelCase or snake_case). Optional ``unit`` sets the
            unit for bare numbers, optional ``productCategory`` picks the
            profile used for missing values.
        defaults: Fallback policy.

    Returns:
        Canonical Spec in centimeters.
    """
    if defaults is None:
        defaults = NormalizerDefaults()

    try:
        profile: ProductProfile = get_profile(
            _lookup(form, "productCategory", "product_category") or defaults.profile_key
        )
    except ValueError as exc:
        raise SpecNormalizationError(str(exc)) from exc
    unit = resolve_unit(_lookup(form, "unit", "units") or defaults.unit)

    stand_type = parse_stand_type(
        _lookup(form, "standType", "stand_type"), defaults.stand_type
    )
    raw_shelves = _lookup(form, "shelfCount", "shelf_count")
    shelf_count = defaults.shelf_count if raw_shelves is None else parse_count(raw_shelves)
    if shelf_count < 1:
        raise SpecNormalizationError(f"shelfCount must be at least 1, got {raw_shelves!r}")

    stand_width = _positive_length(
        form, ("standWidth", "stand_width"), profile.stand.width, unit, "standWidth")
    stand_depth = _positive_length(
        form, ("standDepth", "stand_depth"), profile.stand.depth, unit, "standDepth")
    stand_height = _positive_length(
        form, ("standHeight", "stand_height"), profile.stand.height, unit, "standHeight")
    shelf_thickness = _positive_length(
        form, ("shelfThickness", "shelf_thickness", "shelfThick"),
        profile.stand.shelf_thickness, unit, "shelfThickness")

    product_width = _positive_length(
        form, ("productWidth", "product_width"), profile.product.width, unit, "productWidth")
    product_height = _positive_length(
        form, ("productHeight", "product_height"), profile.product.height, unit, "productHeight")
    product_depth = _positive_length(
        form, ("productDepth", "product_depth"), profile.product.depth, unit, "productDepth")

    raw_columns = _lookup(form, "frontFaceCount", "columns")
    columns = defaults.columns if raw_columns is None else parse_count(raw_columns)
    raw_depth_count = _lookup(form, "backToBackCount", "depthCount", "depth_count")
    depth_count = (
        profile.depth_count if raw_depth_count is None else parse_count(raw_depth_count)
    )
    raw_gaps = _lookup(form, "gapsDepth", "gaps_depth")
    gaps_depth = defaults.gaps_depth if raw_gaps is None else parse_length(raw_gaps, unit)

    if (
        stand_type is StandType.FLOOR
        and stand_height <= defaults.floor_autoscale_below_cm
    ):
        raised = max(defaults.floor_min_height_cm, shelf_count * 25.0 + 20.0)
        logger.info(
            "Auto-scaling floor stand height from %.1fcm to %.1fcm",
            stand_height, raised,
        )
        stand_height = raised

    spec = Spec(
        stand=StandDims(
            width=stand_width,
            depth=stand_depth,
            height=stand_height,
            shelf_thickness=shelf_thickness,
        ),
        product=ProductDims(
            width=product_width,
            height=product_height,
            depth=product_depth,
        ),
        layout=Layout(columns=columns, depth_count=depth_count, gaps_depth=gaps_depth),
        stand_type=stand_type,
        shelf_count=shelf_count,
    )
    logger.debug("Normalized form into %s", spec)
    return spec
