"""Core records for the stand geometry engine.

All lengths are centimeters. Records are frozen so a ``Spec`` can be hashed,
compared structurally and safely shared between concurrent pipeline calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

Vec3 = Tuple[float, float, float]


class StandType(Enum):
    """Supported display stand families."""

    TABLETOP = "tabletop"
    FLOOR = "floor"
    WALL_MOUNT = "wall_mount"
    CORNER = "corner"
    ROTATING = "rotating"
    MULTI_TIER = "multi_tier"


@dataclass(frozen=True)
class StandDims:
    """Outer stand envelope and shelf board thickness (cm)."""

    width: float
    depth: float
    height: float
    shelf_thickness: float


@dataclass(frozen=True)
class ProductDims:
    """Size of a single product package (cm)."""

    width: float
    height: float
    depth: float


@dataclass(frozen=True)
class Layout:
    """Product repetition on one shelf.

    Attributes:
        columns: Lateral repeat count (front-facing products).
        depth_count: Front-to-back repeat count.
        gaps_depth: Spacing between depth-wise neighbours (cm).
    """

    columns: int
    depth_count: int
    gaps_depth: float = 0.0



def _whole(value: Any, name: str) -> int:
    """Integral count from a wire payload; fractional values are rejected."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    return int(number)

@dataclass(frozen=True)
class Spec:
    """Canonical numeric description of a stand and the product it holds."""

    stand: StandDims
    product: ProductDims
    layout: Layout
    stand_type: StandType = StandType.TABLETOP
    shelf_count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stand": {
                "W": self.stand.width,
                "D": self.stand.depth,
                "H": self.stand.height,
                "shelfThick": self.stand.shelf_thickness,
            },
            "product": {
                "W": self.product.width,
                "H": self.product.height,
                "D": self.product.depth,
            },
            "layout": {
                "columns": self.layout.columns,
                "depthCount": self.layout.depth_count,
                "gapsDepth": self.layout.gaps_depth,
            },
            "metadata": {
                "standType": self.stand_type.value,
                "shelfCount": self.shelf_count,
            },
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Spec":
        stand = payload["stand"]
        product = payload["product"]
        layout = payload["layout"]
        metadata = payload.get("metadata", {}) or {}
        return cls(
            stand=StandDims(
                width=float(stand["W"]),
                depth=float(stand["D"]),
                height=float(stand["H"]),
                shelf_thickness=float(stand["shelfThick"]),
            ),
            product=ProductDims(
                width=float(product["W"]),
                height=float(product["H"]),
                depth=float(product["D"]),
            ),
            layout=Layout(
                columns=_whole(layout["columns"], "columns"),
                depth_count=_whole(layout["depthCount"], "depthCount"),
                gaps_depth=float(layout.get("gapsDepth", 0.0)),
            ),
            stand_type=StandType(metadata.get("standType", StandType.TABLETOP.value)),
            shelf_count=_whole(metadata.get("shelfCount", 1), "shelfCount"),
        )


@dataclass(frozen=True)
class BrandMeta:
    """Brand facts attached to a contract; ``material`` is a catalog key."""

    brand: str = "Brand"
    product: str = "Product"
    material: str = "plastic"


@dataclass(frozen=True)
class Measurements:
    """Needed-vs-available numbers shown next to validation messages."""

    calculated_depth: float
    available_depth: float
    depth_difference: float
    total_products: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "calculatedDepth": self.calculated_depth,
            "availableDepth": self.available_depth,
            "depthDifference": self.depth_difference,
            "totalProducts": self.total_products,
        }


@dataclass(frozen=True)
class GateViolation:
    """A single triggered gate rule."""

    code: str
    severity: str  # "fatal" or "warning"
    message: str
    value: float = 0.0
    limit: float = 0.0


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validation pass. Rebuilt on every call."""

    is_valid: bool
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    measurements: Measurements
    violations: Tuple[GateViolation, ...] = field(default=(), compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "measurements": self.measurements.to_dict(),
        }


def messages_of(violations: Sequence[GateViolation], severity: str) -> List[str]:
    return [v.message for v in violations if v.severity == severity]
