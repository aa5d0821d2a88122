"""
Packing arithmetic for a stand spec.

The depth/width usage helpers are shared with the validation gate so that the
numbers a user sees on failure are the same numbers the geometry is built from.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .contracts import Measurements, Spec, StandType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutConfig:
    """Shelf-count policy knobs."""

    tier_shrink: float = 0.15  # each multi-tier level is 15% smaller
    min_tier_scale: float = 0.25


@dataclass(frozen=True)
class LayoutPlan:
    """Derived packing facts for a valid spec.

    Attributes:
        shelf_grids: (columns, depth_count) actually placed on each shelf.
        tier_scales: Footprint scale of each shelf (1.0 except multi-tier).
        shelf_footprints: (width, depth) of each shelf board. Never smaller
            than the grid it carries.
        lateral_pitch: Center-to-center distance between columns.
        depth_pitch: Center-to-center distance between depth slots.
    """

    shelf_grids: Tuple[Tuple[int, int], ...]
    tier_scales: Tuple[float, ...]
    shelf_footprints: Tuple[Tuple[float, float], ...]
    per_shelf_capacity: int
    total_capacity: int
    lateral_pitch: float
    depth_pitch: float
    gaps_depth: float
    used_width: float
    used_depth: float
    width_clearance: float
    depth_clearance: float

    @property
    def shelf_count(self) -> int:
        return len(self.shelf_grids)

    def capacity_of(self, shelf_index: int) -> int:
        columns, depth_count = self.shelf_grids[shelf_index]
        return columns * depth_count

    def column_offsets(self, shelf_index: int = 0) -> Tuple[float, ...]:
        """Lateral centers of each column, symmetric about x=0."""
        columns, _ = self.shelf_grids[shelf_index]
        start = -(columns - 1) * self.lateral_pitch / 2.0
        return tuple(start + c * self.lateral_pitch for c in range(columns))

    def slot_offsets(self, shelf_depth: float, product_depth: float,
                     shelf_index: int = 0) -> Tuple[float, ...]:
        """Depth centers of each slot, front slot touching the front edge (+y)."""
        _, depth_count = self.shelf_grids[shelf_index]
        front = shelf_depth / 2.0 - product_depth / 2.0
        return tuple(front - s * self.depth_pitch for s in range(depth_count))


def _queue_depth(count: int, product_depth: float, gaps_depth: float) -> float:
    return count * product_depth + (count - 1) * gaps_depth


def used_depth(spec: Spec) -> float:
    """Depth consumed by one front-to-back queue including gaps."""
    return _queue_depth(spec.layout.depth_count, spec.product.depth, spec.layout.gaps_depth)


def used_width(spec: Spec) -> float:
    """Width consumed by the columns; columns touch with zero lateral gap."""
    return spec.layout.columns * spec.product.width


def grid_product_count(spec: Spec) -> int:
    return spec.layout.columns * spec.layout.depth_count


def measure(spec: Spec) -> Measurements:
    """Needed-vs-available snapshot; defined for any spec, valid or not."""
    depth_needed = used_depth(spec)
    return Measurements(
        calculated_depth=depth_needed,
        available_depth=spec.stand.depth,
        depth_difference=abs(depth_needed - spec.stand.depth),
        total_products=grid_product_count(spec),
    )


def tier_scale(level: int, config: LayoutConfig) -> float:
    return max(config.min_tier_scale, 1.0 - level * config.tier_shrink)


def solve_layout(spec: Spec, config: Optional[LayoutConfig] = None) -> LayoutPlan:
    """Compute packing quantities for a spec that already passed the gate.

    Every shelf holds the full columns x depth_count grid. Multi-tier stands
    shrink each level and place ``max(1, floor(n * scale))`` in each direction;
    a tier board is widened or deepened back to its grid when the scaled
    footprint would be too small for it.
    """
    if config is None:
        config = LayoutConfig()

    columns = spec.layout.columns
    depth_count = spec.layout.depth_count

    grids = []
    scales = []
    footprints = []
    for level in range(spec.shelf_count):
        if spec.stand_type is StandType.MULTI_TIER:
            scale = tier_scale(level, config)
            tier_columns = max(1, math.floor(columns * scale))
            tier_depth_count = max(1, math.floor(depth_count * scale))
            # A shrunk tier still has to hold its own grid.
            footprints.append((
                max(spec.stand.width * scale, tier_columns * spec.product.width),
                max(
                    spec.stand.depth * scale,
                    _queue_depth(tier_depth_count, spec.product.depth, spec.layout.gaps_depth),
                ),
            ))
            grids.append((tier_columns, tier_depth_count))
        else:
            scale = 1.0
            footprints.append((spec.stand.width, spec.stand.depth))
            grids.append((columns, depth_count))
        scales.append(scale)

    total = sum(c * d for c, d in grids)
    width_needed = used_width(spec)
    depth_needed = used_depth(spec)

    plan = LayoutPlan(
        shelf_grids=tuple(grids),
        tier_scales=tuple(scales),
        shelf_footprints=tuple(footprints),
        per_shelf_capacity=columns * depth_count,
        total_capacity=total,
        lateral_pitch=spec.product.width,
        depth_pitch=spec.product.depth + spec.layout.gaps_depth,
        gaps_depth=spec.layout.gaps_depth,
        used_width=width_needed,
        used_depth=depth_needed,
        width_clearance=spec.stand.width - width_needed,
        depth_clearance=spec.stand.depth - depth_needed,
    )
    logger.debug(
        "Layout: %dx%d per shelf, %d shelves, %d products",
        columns, depth_count, plan.shelf_count, total,
    )
    return plan
