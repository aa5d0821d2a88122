"""Tests for packing arithmetic."""
import pytest

from conftest import make_spec
from stand_engine.contracts import StandType
from stand_engine.layout import (
    LayoutConfig,
    grid_product_count,
    measure,
    solve_layout,
    tier_scale,
    used_depth,
    used_width,
)


class TestUsage:

    def test_used_depth_without_gaps(self, spec_a):
        assert used_depth(spec_a) == 30.0

    def test_used_depth_counts_gaps_between_products_only(self, spec_b):
        assert used_depth(spec_b) == pytest.approx(9 * 2.5 + 8 * 0.8)

    def test_used_width(self, two_column_spec):
        assert used_width(two_column_spec) == 26.0

    def test_grid_product_count(self, two_column_spec):
        assert grid_product_count(two_column_spec) == 8

    def test_measure(self, spec_b):
        m = measure(spec_b)
        assert m.available_depth == 30.0
        assert m.depth_difference == pytest.approx(30.0 - 28.9)
        assert m.total_products == 9


class TestSolveLayout:

    def test_single_shelf(self, spec_a):
        plan = solve_layout(spec_a)
        assert plan.shelf_grids == ((1, 12),)
        assert plan.per_shelf_capacity == 12
        assert plan.total_capacity == 12
        assert plan.depth_pitch == 2.5
        assert plan.lateral_pitch == 13.0
        assert plan.depth_clearance == 0.0
        assert plan.width_clearance == 2.0

    def test_every_shelf_holds_the_full_grid(self, two_column_spec):
        plan = solve_layout(two_column_spec)
        assert plan.shelf_count == 3
        assert plan.shelf_grids == ((2, 4),) * 3
        assert plan.tier_scales == (1.0, 1.0, 1.0)
        assert plan.total_capacity == 24

    def test_column_offsets_are_centered(self, two_column_spec):
        plan = solve_layout(two_column_spec)
        assert plan.column_offsets() == (-6.5, 6.5)

    def test_slot_offsets_start_at_front_edge(self, two_column_spec):
        plan = solve_layout(two_column_spec)
        # front slot centre = 15 - 3, then every 6 + 1
        assert plan.slot_offsets(30.0, 6.0) == (12.0, 5.0, -2.0, -9.0)

    def test_exact_fit_queue_reaches_back_edge(self, spec_a):
        plan = solve_layout(spec_a)
        slots = plan.slot_offsets(30.0, 2.5)
        assert slots[0] + 1.25 == 15.0
        assert slots[-1] - 1.25 == pytest.approx(-15.0)


class TestMultiTier:

    def test_tier_scale(self):
        config = LayoutConfig()
        assert tier_scale(0, config) == 1.0
        assert tier_scale(2, config) == pytest.approx(0.7)
        assert tier_scale(10, config) == 0.25

    def test_tiers_shrink(self):
        spec = make_spec(
            stand=(40.0, 30.0, 60.0, 2.0),
            product=(6.0, 5.0, 2.5),
            columns=4,
            depth_count=8,
            stand_type=StandType.MULTI_TIER,
            shelf_count=3,
        )
        plan = solve_layout(spec)
        # scales 1.0, 0.85, 0.7
        assert plan.shelf_grids == ((4, 8), (3, 6), (2, 5))
        assert plan.total_capacity == 32 + 18 + 10
        assert plan.capacity_of(2) == 10

    def test_tier_grid_never_empty(self):
        spec = make_spec(
            columns=1,
            depth_count=1,
            product=(13.0, 2.0, 2.5),
            stand_type=StandType.MULTI_TIER,
            shelf_count=4,
        )
        plan = solve_layout(spec)
        assert plan.shelf_grids == ((1, 1),) * 4

    def test_custom_shrink(self):
        spec = make_spec(
            columns=1,
            depth_count=10,
            stand_type=StandType.MULTI_TIER,
            shelf_count=2,
        )
        plan = solve_layout(spec, LayoutConfig(tier_shrink=0.5))
        assert plan.shelf_grids == ((1, 10), (1, 5))

    def test_tier_footprints_scale(self):
        spec = make_spec(
            stand=(40.0, 30.0, 60.0, 2.0),
            product=(6.0, 5.0, 2.5),
            columns=4,
            depth_count=8,
            stand_type=StandType.MULTI_TIER,
            shelf_count=2,
        )
        plan = solve_layout(spec)
        assert plan.shelf_footprints[0] == (40.0, 30.0)
        assert plan.shelf_footprints[1] == pytest.approx((34.0, 25.5))

    def test_tier_footprint_never_smaller_than_its_grid(self):
        spec = make_spec(
            gaps_depth=0.0,
            stand_type=StandType.MULTI_TIER,
            shelf_count=3,
        )
        plan = solve_layout(spec)
        for (columns, depth_count), (width, depth) in zip(plan.shelf_grids, plan.shelf_footprints):
            assert width >= columns * spec.product.width
            assert depth >= depth_count * spec.product.depth
        # one 13cm column on a 15cm stand: tier 1 is widened back to 13cm
        assert plan.shelf_footprints[1][0] == 13.0

    def test_regular_shelves_use_stand_footprint(self, two_column_spec):
        plan = solve_layout(two_column_spec)
        assert plan.shelf_footprints == ((40.0, 30.0),) * 3
