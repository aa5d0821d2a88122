"""
Stand scene construction.

Builds the authoritative primitive arena for a validated Spec: the stand
envelope, structural panels, shelf planes, one placeholder per product slot and
dimension anchors for overlays. The builder trusts its input; run the
validation gate first.

Frame: x lateral (centered on 0), y depth (front edge at +D/2), z up (floor at
0). Primitive positions are centers, sizes are full extents along x, y, z.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .contracts import Measurements, Spec, StandType, Vec3
from .layout import LayoutConfig, LayoutPlan, measure, solve_layout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeometryConfig:
    """Structural sizes used by the stand builders (cm)."""

    wall_thickness: float = 0.5
    floor_plinth_min_height: float = 4.0
    floor_pillar_width: float = 3.0
    floor_back_panel_min_height: float = 60.0
    floor_support_min_width: float = 30.0
    floor_support_min_depth: float = 40.0
    support_rail_width: float = 2.0
    wall_plate_thickness: float = 1.0
    wall_arm_height: float = 1.0
    wall_arm_width: float = 2.0
    wall_bracket_max_diameter: float = 4.0
    wall_bracket_depth: float = 0.5
    corner_rotation_deg: float = 45.0
    turntable_margin: float = 2.0
    turntable_height: float = 2.0
    dimension_offset: float = 3.0
    label_offset: float = 2.0
    layout: LayoutConfig = field(default_factory=LayoutConfig)


@dataclass(frozen=True)
class Primitive:
    """A sized, positioned solid.

    ``shape`` is "box" or "cylinder"; cylinders use size[0] as diameter and
    lie along ``axis``. Product placeholders carry (shelf, column, slot).
    """

    name: str
    kind: str
    shape: str
    size: Vec3
    center: Vec3
    axis: str = "z"
    shelf: Optional[int] = None
    column: Optional[int] = None
    slot: Optional[int] = None

    @property
    def index(self) -> Optional[Tuple[int, int, int]]:
        if self.shelf is None or self.column is None or self.slot is None:
            return None
        return (self.shelf, self.column, self.slot)

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        center = np.asarray(self.center, dtype=float)
        half = np.asarray(self.size, dtype=float) / 2.0
        if self.shape == "cylinder" and self.axis == "y":
            half = np.array([half[0], half[2], half[0]])
        return center - half, center + half

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "shape": self.shape,
            "size": list(self.size),
            "center": list(self.center),
            "axis": self.axis,
        }
        if self.shelf is not None:
            payload["shelf"] = self.shelf
        if self.index is not None:
            payload["column"] = self.column
            payload["slot"] = self.slot
        return payload


@dataclass(frozen=True)
class DimensionAnchor:
    """Endpoints and label for a dimension line drawn by the rendering layer."""

    name: str
    start: Vec3
    end: Vec3
    label: str
    value: float
    label_position: Vec3
    facts: Tuple[Tuple[str, float], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "start": list(self.start),
            "end": list(self.end),
            "label": self.label,
            "value": self.value,
            "labelPosition": list(self.label_position),
            "facts": dict(self.facts),
        }


@dataclass(frozen=True)
class SceneGraph:
    """Primitive arena for one stand. Rebuilt, never mutated, on spec change."""

    name: str
    spec: Spec
    primitives: Tuple[Primitive, ...]
    anchors: Tuple[DimensionAnchor, ...]
    measurements: Measurements
    total_products: int
    rotation_z_deg: float = 0.0

    def by_kind(self, kind: str) -> Tuple[Primitive, ...]:
        return tuple(p for p in self.primitives if p.kind == kind)

    @property
    def shell(self) -> Primitive:
        return self.by_kind("shell")[0]

    @property
    def shelves(self) -> Tuple[Primitive, ...]:
        return self.by_kind("shelf")

    @property
    def products(self) -> Tuple[Primitive, ...]:
        return self.by_kind("product")

    def product_at(self, shelf: int, column: int, slot: int) -> Primitive:
        for p in self.primitives:
            if p.kind == "product" and p.index == (shelf, column, slot):
                return p
        raise KeyError((shelf, column, slot))

    def anchor(self, name: str) -> DimensionAnchor:
        for a in self.anchors:
            if a.name == name:
                return a
        raise KeyError(name)

    def bounding_box(self) -> Tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounds of all primitives in the unrotated frame."""
        lows, highs = zip(*(p.bounds() for p in self.primitives))
        return np.min(np.stack(lows), axis=0), np.max(np.stack(highs), axis=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "standType": self.spec.stand_type.value,
            "rotationZDeg": self.rotation_z_deg,
            "totalProducts": self.total_products,
            "measurements": self.measurements.to_dict(),
            "primitives": [p.to_dict() for p in self.primitives],
            "anchors": [a.to_dict() for a in self.anchors],
        }


# ─── Public entry points ─────────────────────────────────────────────────────


def build_scene(spec: Spec, config: Optional[GeometryConfig] = None) -> SceneGraph:
    """Build the scene for a spec that passed the validation gate.

    Args:
        spec: Validated Spec.
        config: Structural sizes.

    Returns:
        SceneGraph; structurally equal for structurally equal inputs.
    """
    if config is None:
        config = GeometryConfig()
    plan = solve_layout(spec, config.layout)

    builder = _BUILDERS.get(spec.stand_type, _build_tabletop)
    name, primitives, rotation = builder(spec, plan, config)
    anchors = _dimension_anchors(spec, primitives, config)

    scene = SceneGraph(
        name=name,
        spec=spec,
        primitives=tuple(primitives),
        anchors=tuple(anchors),
        measurements=measure(spec),
        total_products=plan.total_capacity,
        rotation_z_deg=rotation,
    )
    logger.info(
        "Built %s: %d primitives, %d shelves, %d products",
        name, len(scene.primitives), plan.shelf_count, plan.total_capacity,
    )
    return scene


@lru_cache(maxsize=64)
def build_scene_cached(spec: Spec, config: Optional[GeometryConfig] = None) -> SceneGraph:
    """Memoized ``build_scene``; safe because specs and scenes are immutable."""
    return build_scene(spec, config)


# ─── Shared pieces ───────────────────────────────────────────────────────────


def _shell(spec: Spec) -> Primitive:
    s = spec.stand
    return Primitive(
        name="stand_shell",
        kind="shell",
        shape="box",
        size=(s.width, s.depth, s.height),
        center=(0.0, 0.0, s.height / 2.0),
    )


def _shelf_with_products(
    spec: Spec,
    plan: LayoutPlan,
    shelf_index: int,
    z_bottom: float,
    width: float,
    depth: float,
    prefix: str = "shelf",
) -> List[Primitive]:
    """One shelf plane plus its product grid, products resting on its top face."""
    t = spec.stand.shelf_thickness
    product = spec.product
    items = [
        Primitive(
            name=f"{prefix}_{shelf_index}",
            kind="shelf",
            shape="box",
            size=(width, depth, t),
            center=(0.0, 0.0, z_bottom + t / 2.0),
            shelf=shelf_index,
        )
    ]
    z_center = z_bottom + t + product.height / 2.0
    xs = plan.column_offsets(shelf_index)
    ys = plan.slot_offsets(depth, product.depth, shelf_index)
    for c, x in enumerate(xs):
        for d, y in enumerate(ys):
            items.append(
                Primitive(
                    name=f"product_{shelf_index}_{c}_{d}",
                    kind="product",
                    shape="box",
                    size=(product.width, product.depth, product.height),
                    center=(x, y, z_center),
                    shelf=shelf_index,
                    column=c,
                    slot=d,
                )
            )
    return items


def _shelf_levels(spec: Spec, z_floor: float) -> List[float]:
    """Evenly spaced shelf bottoms between ``z_floor`` and the stand top."""
    pitch = (spec.stand.height - z_floor) / spec.shelf_count
    return [z_floor + i * pitch for i in range(spec.shelf_count)]


def _base_lift(spec: Spec, wanted: float) -> float:
    """Height a base structure may raise the lowest shelf.

    Capped by the headroom left above a product on the lowest shelf, so a
    spec that fits the height rule also fits the raised stand.
    """
    s = spec.stand
    headroom = s.height - s.shelf_thickness - spec.product.height
    return max(0.0, min(wanted, headroom))


# ─── Stand builders ──────────────────────────────────────────────────────────


def _build_tabletop(spec: Spec, plan: LayoutPlan, config: GeometryConfig):
    s = spec.stand
    wt = config.wall_thickness
    prims = [_shell(spec)]
    prims.append(Primitive(
        name="wall_left", kind="panel", shape="box",
        size=(wt, s.depth, s.height),
        center=(-s.width / 2.0 + wt / 2.0, 0.0, s.height / 2.0),
    ))
    prims.append(Primitive(
        name="wall_right", kind="panel", shape="box",
        size=(wt, s.depth, s.height),
        center=(s.width / 2.0 - wt / 2.0, 0.0, s.height / 2.0),
    ))
    prims.append(Primitive(
        name="wall_back", kind="panel", shape="box",
        size=(s.width, wt, s.height),
        center=(0.0, -s.depth / 2.0 + wt / 2.0, s.height / 2.0),
    ))
    # Shelf 0 doubles as the base.
    for i, z in enumerate(_shelf_levels(spec, 0.0)):
        prims.extend(_shelf_with_products(spec, plan, i, z, s.width, s.depth))
    return "tabletop_stand", prims, 0.0


def _build_floor(spec: Spec, plan: LayoutPlan, config: GeometryConfig):
    s = spec.stand
    plinth = _base_lift(
        spec, max(2.0 * s.shelf_thickness, config.floor_plinth_min_height)
    )
    pw = config.floor_pillar_width
    upright = s.height - plinth
    prims = [_shell(spec)]
    if plinth > 0:
        prims.append(Primitive(
            name="plinth", kind="panel", shape="box",
            size=(s.width, s.depth, plinth),
            center=(0.0, 0.0, plinth / 2.0),
        ))
    corners = [
        (-s.width / 2.0 + pw / 2.0, -s.depth / 2.0 + pw / 2.0),
        (s.width / 2.0 - pw / 2.0, -s.depth / 2.0 + pw / 2.0),
        (-s.width / 2.0 + pw / 2.0, s.depth / 2.0 - pw / 2.0),
        (s.width / 2.0 - pw / 2.0, s.depth / 2.0 - pw / 2.0),
    ]
    for i, (x, y) in enumerate(corners):
        prims.append(Primitive(
            name=f"pillar_{i}", kind="pillar", shape="box",
            size=(pw, pw, upright),
            center=(x, y, plinth + upright / 2.0),
        ))
    if s.height > config.floor_back_panel_min_height:
        prims.append(Primitive(
            name="back_panel", kind="panel", shape="box",
            size=(s.width - 2.0 * pw, 1.0, upright),
            center=(0.0, -s.depth / 2.0 + 0.5, plinth + upright / 2.0),
        ))

    needs_supports = (
        s.width > config.floor_support_min_width
        or s.depth > config.floor_support_min_depth
    )
    for i, z in enumerate(_shelf_levels(spec, plinth)):
        prims.extend(_shelf_with_products(spec, plan, i, z, s.width, s.depth))
        if needs_supports and i > 0:
            for k, x in enumerate((-s.width / 4.0, s.width / 4.0)):
                prims.append(Primitive(
                    name=f"support_{i}_{k}", kind="support", shape="box",
                    size=(config.support_rail_width, s.depth - pw, s.shelf_thickness),
                    center=(x, 0.0, z - s.shelf_thickness / 2.0),
                    shelf=i,
                ))
    return "floor_stand", prims, 0.0


def _build_wall_mount(spec: Spec, plan: LayoutPlan, config: GeometryConfig):
    s = spec.stand
    plate = config.wall_plate_thickness
    arm_h = config.wall_arm_height
    prims = [_shell(spec)]
    prims.append(Primitive(
        name="back_plate", kind="panel", shape="box",
        size=(s.width, plate, s.height),
        center=(0.0, -s.depth / 2.0 - plate / 2.0, s.height / 2.0),
    ))
    diameter = min(s.width / 8.0, config.wall_bracket_max_diameter)
    bracket_spots = [
        (-s.width / 3.0, s.height * 0.8),
        (s.width / 3.0, s.height * 0.8),
        (-s.width / 3.0, s.height * 0.2),
        (s.width / 3.0, s.height * 0.2),
    ]
    for i, (x, z) in enumerate(bracket_spots):
        prims.append(Primitive(
            name=f"bracket_{i}", kind="bracket", shape="cylinder",
            size=(diameter, diameter, config.wall_bracket_depth),
            center=(x, -s.depth / 2.0 - plate / 2.0, z),
            axis="y",
        ))
    # Arms hang below each shelf, so the lowest shelf is lifted by its arms.
    lift = _base_lift(spec, arm_h)
    for i, z in enumerate(_shelf_levels(spec, lift)):
        prims.extend(_shelf_with_products(spec, plan, i, z, s.width, s.depth))
        arm = arm_h if i > 0 else lift
        if arm <= 0:
            continue
        for k, x in enumerate((-s.width / 3.0, s.width / 3.0)):
            prims.append(Primitive(
                name=f"arm_{i}_{k}", kind="support", shape="box",
                size=(config.wall_arm_width, s.depth, arm),
                center=(x, 0.0, z - arm / 2.0),
                shelf=i,
            ))
    return "wall_mount_stand", prims, 0.0


def _build_corner(spec: Spec, plan: LayoutPlan, config: GeometryConfig):
    _, prims, _ = _build_tabletop(spec, plan, config)
    return "corner_stand", prims, config.corner_rotation_deg


def _build_rotating(spec: Spec, plan: LayoutPlan, config: GeometryConfig):
    s = spec.stand
    _, prims, _ = _build_tabletop(spec, plan, config)
    diameter = max(s.width, s.depth) + 2.0 * config.turntable_margin
    prims.append(Primitive(
        name="turntable", kind="turntable", shape="cylinder",
        size=(diameter, diameter, config.turntable_height),
        center=(0.0, 0.0, -config.turntable_height / 2.0),
    ))
    return "rotating_stand", prims, 0.0


def _build_multi_tier(spec: Spec, plan: LayoutPlan, config: GeometryConfig):
    prims = [_shell(spec)]
    for i, z in enumerate(_shelf_levels(spec, 0.0)):
        width, depth = plan.shelf_footprints[i]
        prims.extend(_shelf_with_products(
            spec, plan, i, z, width, depth, prefix="tier",
        ))
    return "multi_tier_stand", prims, 0.0


_BUILDERS = {
    StandType.TABLETOP: _build_tabletop,
    StandType.FLOOR: _build_floor,
    StandType.WALL_MOUNT: _build_wall_mount,
    StandType.CORNER: _build_corner,
    StandType.ROTATING: _build_rotating,
    StandType.MULTI_TIER: _build_multi_tier,
}


# ─── Dimension anchors ───────────────────────────────────────────────────────


def _anchor(name: str, start: Vec3, end: Vec3, label: str, value: float,
            config: GeometryConfig, facts=()) -> DimensionAnchor:
    mid = (np.asarray(start) + np.asarray(end)) / 2.0
    return DimensionAnchor(
        name=name,
        start=start,
        end=end,
        label=label,
        value=value,
        label_position=(float(mid[0]), float(mid[1]), float(mid[2]) + config.label_offset),
        facts=tuple(facts),
    )


def _dimension_anchors(
    spec: Spec,
    primitives: List[Primitive],
    config: GeometryConfig,
) -> List[DimensionAnchor]:
    W, D, H = spec.stand.width, spec.stand.depth, spec.stand.height
    off = config.dimension_offset
    m = measure(spec)

    anchors = [
        _anchor("width", (-W / 2.0, D / 2.0 + 1.0, H + off), (W / 2.0, D / 2.0 + 1.0, H + off),
                f"{W:g} cm", W, config),
        _anchor("depth", (W / 2.0 + off, -D / 2.0, H + 1.0), (W / 2.0 + off, D / 2.0, H + 1.0),
                f"{D:g} cm", D, config),
        _anchor("height", (-W / 2.0 - off, -D / 2.0 - 1.0, 0.0), (-W / 2.0 - off, -D / 2.0 - 1.0, H),
                f"{H:g} cm", H, config),
    ]

    # Depth usage runs along the first shelf's queue, front edge backwards.
    first_shelf = next(p for p in primitives if p.kind == "shelf")
    shelf_top = first_shelf.center[2] + first_shelf.size[2] / 2.0
    front = first_shelf.size[1] / 2.0
    x = W / 2.0 + off
    anchors.append(_anchor(
        "depth_usage",
        (x, front, shelf_top),
        (x, front - m.calculated_depth, shelf_top),
        f"{m.calculated_depth:g} / {m.available_depth:g} cm",
        m.calculated_depth,
        config,
        facts=(
            ("calculatedDepth", m.calculated_depth),
            ("availableDepth", m.available_depth),
            ("depthDifference", m.depth_difference),
            ("totalProducts", float(m.total_products)),
        ),
    ))
    return anchors
