"""
Shared test fixtures for the stand geometry engine.
"""
import sys
from dataclasses import replace
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stand_engine.catalog import SPEC_A, SPEC_B
from stand_engine.contracts import (
    BrandMeta, Layout, ProductDims, Spec, StandDims, StandType,
)


def make_spec(
    stand=(15.0, 30.0, 30.0, 2.0),
    product=(13.0, 5.0, 2.5),
    columns=1,
    depth_count=12,
    gaps_depth=0.0,
    stand_type=StandType.TABLETOP,
    shelf_count=1,
) -> Spec:
    """Spec from plain tuples: stand (W, D, H, shelfThick), product (W, H, D)."""
    return Spec(
        stand=StandDims(*stand),
        product=ProductDims(*product),
        layout=Layout(columns=columns, depth_count=depth_count, gaps_depth=gaps_depth),
        stand_type=stand_type,
        shelf_count=shelf_count,
    )


@pytest.fixture
def spec_a():
    """Reference wafer stand: 1x12 queue filling 30cm exactly."""
    return SPEC_A


@pytest.fixture
def spec_b():
    """Reference wafer stand with 0.8cm gaps (1x9)."""
    return SPEC_B


@pytest.fixture
def two_column_spec():
    """40x30x60 stand, 3 shelves, 2x4 grid of 13x5x6 packs with 1cm gaps."""
    return make_spec(
        stand=(40.0, 30.0, 60.0, 2.0),
        product=(13.0, 5.0, 6.0),
        columns=2,
        depth_count=4,
        gaps_depth=1.0,
        shelf_count=3,
    )


@pytest.fixture
def brand_meta():
    return BrandMeta(brand="Ülker", product="Çikolatalı Gofret", material="wood")


@pytest.fixture
def wafer_form():
    """Raw form as submitted by the stand request UI."""
    return {
        "brand": "Ülker",
        "product": "Çikolatalı Gofret",
        "productWidth": 13,
        "productHeight": "5 cm",
        "productDepth": "25mm",
        "frontFaceCount": 1,
        "backToBackCount": "12",
        "standType": "Masa Üstü Stant (Tabletop Stand)",
        "standWidth": 15,
        "standDepth": 30,
        "standHeight": 30,
        "shelfCount": 1,
        "materials": ["Ahşap (Wood)"],
    }


@pytest.fixture
def with_type():
    """Return a copy of a spec with another stand type / shelf count."""
    def _with_type(spec, stand_type, shelf_count=None):
        return replace(
            spec,
            stand_type=stand_type,
            shelf_count=spec.shelf_count if shelf_count is None else shelf_count,
        )
    return _with_type
