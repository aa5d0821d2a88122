"""Post-build geometric self-check of a stand scene.

Footprints are compared in the xy plane with shapely; heights are compared
directly. An empty issue list means the scene is consistent with its spec.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional

from shapely.geometry import Polygon, box

from .contracts import Spec
from .geometry import Primitive, SceneGraph
from .layout import LayoutConfig, solve_layout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SceneIssue:
    code: str
    message: str
    primitive: Optional[str] = None


def footprint(primitive: Primitive) -> Polygon:
    low, high = primitive.bounds()
    return box(float(low[0]), float(low[1]), float(high[0]), float(high[1]))


def audit_scene(scene: SceneGraph, tolerance: float = 1e-6) -> List[SceneIssue]:
    """Check product placement against shelves, neighbours and the stand top."""
    issues: List[SceneIssue] = []
    shelves: Dict[int, Primitive] = {
        p.shelf: p for p in scene.shelves if p.shelf is not None
    }
    stand_top = scene.spec.stand.height

    by_shelf: Dict[int, List[Primitive]] = defaultdict(list)
    for product in scene.products:
        by_shelf[product.shelf].append(product)

        shelf = shelves.get(product.shelf)
        if shelf is None:
            issues.append(SceneIssue(
                code="orphan_product",
                message=f"{product.name} references missing shelf {product.shelf}",
                primitive=product.name,
            ))
            continue

        if not footprint(shelf).buffer(tolerance).contains(footprint(product)):
            issues.append(SceneIssue(
                code="off_shelf",
                message=f"{product.name} footprint extends past {shelf.name}",
                primitive=product.name,
            ))

        _, shelf_high = shelf.bounds()
        low, high = product.bounds()
        if abs(float(low[2]) - float(shelf_high[2])) > tolerance:
            issues.append(SceneIssue(
                code="not_resting",
                message=f"{product.name} is not resting on {shelf.name}",
                primitive=product.name,
            ))
        if float(high[2]) > stand_top + tolerance:
            issues.append(SceneIssue(
                code="above_stand_top",
                message=(
                    f"{product.name} top at {float(high[2]):.2f}cm exceeds "
                    f"stand height {stand_top:.2f}cm"
                ),
                primitive=product.name,
            ))

    for shelf_index, products in sorted(by_shelf.items()):
        prints = [footprint(p) for p in products]
        for i in range(len(products)):
            for j in range(i + 1, len(products)):
                if prints[i].intersection(prints[j]).area > tolerance:
                    issues.append(SceneIssue(
                        code="product_overlap",
                        message=(
                            f"{products[i].name} overlaps {products[j].name} "
                            f"on shelf {shelf_index}"
                        ),
                        primitive=products[i].name,
                    ))

    if issues:
        logger.warning("Scene audit found %d issue(s)", len(issues))
    return issues


def matches_spec(
    scene: SceneGraph, spec: Spec, layout_config: Optional[LayoutConfig] = None
) -> bool:
    """True when the scene was built from ``spec`` and holds the planned count."""
    if scene.spec != spec:
        return False
    plan = solve_layout(spec, layout_config)
    return len(scene.products) == plan.total_capacity == scene.total_products
