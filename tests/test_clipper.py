# tests/test_clipper.py
import pytest

from station_zones.geometry.clipper import difference, intersect, subtract_all
from station_zones.geometry.polygon import is_clockwise, ring_bounds, signed_area
from station_zones.geometry.types import Region

from conftest import square

U_SHAPE = [(0, 0), (10, 0), (10, 10), (6, 10), (6, 3), (3, 3), (3, 10), (0, 10)]


class TestIntersect:
    def test_overlapping_squares(self):
        ring = intersect(square(0, 0, 10, 10), square(5, 5, 15, 15))
        assert ring[0] == ring[-1]
        assert is_clockwise(ring)
        assert abs(signed_area(ring)) == pytest.approx(25.0)
        box = ring_bounds(ring)
        assert (box.min_x, box.min_y, box.max_x, box.max_y) == pytest.approx((5, 5, 10, 10))

    def test_disjoint_is_none(self):
        assert intersect(square(0, 0, 1, 1), square(5, 5, 6, 6)) is None

    def test_touching_edges_is_none(self):
        assert intersect(square(0, 0, 1, 1), square(1, 0, 2, 1)) is None

    def test_degenerate_operand_is_none(self):
        assert intersect([(0, 0), (1, 1)], square(0, 0, 2, 2)) is None
        assert intersect(square(0, 0, 2, 2), [(0, 0), (1, 1), (2, 2)]) is None

    def test_inputs_not_mutated(self):
        a = square(0, 0, 10, 10)
        b = square(5, 5, 15, 15)
        a_before, b_before = list(a), list(b)
        intersect(a, b)
        assert a == a_before
        assert b == b_before

    def test_non_convex_keeps_anchor_part(self):
        band = square(-1, 5, 11, 8)
        left = intersect(band, U_SHAPE, anchor=(1, 6))
        right = intersect(band, U_SHAPE, anchor=(8, 6))
        assert ring_bounds(left).max_x == pytest.approx(3.0)
        assert ring_bounds(right).min_x == pytest.approx(6.0)

    def test_non_convex_without_anchor_keeps_largest(self):
        band = square(-1, 5, 11, 8)
        ring = intersect(band, U_SHAPE)
        # right arm is 4 wide, left arm 3 wide
        assert abs(signed_area(ring)) == pytest.approx(12.0)


class TestDifference:
    def test_partial_overlap(self):
        region = difference(square(0, 0, 10, 10), square(5, -1, 11, 11))
        assert region.holes == ()
        assert region.area == pytest.approx(50.0)

    def test_obstacle_strictly_inside_leaves_hole(self):
        region = difference(square(0, 0, 10, 10), square(4, 4, 6, 6))
        assert len(region.holes) == 1
        assert is_clockwise(region.exterior)
        assert signed_area(region.holes[0]) > 0
        assert region.area == pytest.approx(96.0)

    def test_covering_obstacle_is_none(self):
        assert difference(square(2, 2, 3, 3), square(0, 0, 10, 10)) is None

    def test_no_overlap_returns_a(self):
        region = difference(square(0, 0, 10, 10), square(20, 20, 30, 30))
        assert region.area == pytest.approx(100.0)

    def test_degenerate_operands(self):
        assert difference([(0, 0), (1, 1)], square(0, 0, 2, 2)) is None
        region = difference(square(0, 0, 2, 2), [(0, 0), (1, 1)])
        assert region.area == pytest.approx(4.0)

    def test_split_keeps_anchor_part(self):
        # a vertical wall splits the square in two
        wall = square(1, -1, 3, 11)
        region = difference(square(0, 0, 10, 10), wall, anchor=(0.5, 5))
        assert region.contains((0.5, 5))
        assert region.area == pytest.approx(10.0)


class TestSubtractAll:
    def test_overlapping_obstacles_are_unioned(self):
        cell = Region(exterior=tuple(square(0, 0, 10, 10)))
        obstacles = [square(2, 2, 6, 6), square(4, 4, 8, 8)]
        forward = subtract_all(cell, obstacles)
        backward = subtract_all(cell, list(reversed(obstacles)))
        assert forward.area == pytest.approx(100.0 - 28.0)
        assert backward.area == pytest.approx(forward.area)

    def test_degenerate_obstacles_ignored(self):
        cell = Region(exterior=tuple(square(0, 0, 10, 10)))
        region = subtract_all(cell, [[(1, 1), (2, 2)]])
        assert region.area == pytest.approx(100.0)

    def test_existing_holes_are_kept(self):
        cell = Region(
            exterior=tuple(reversed(square(0, 0, 10, 10))),
            holes=(tuple(square(1, 1, 2, 2)),),
        )
        region = subtract_all(cell, [square(7, 7, 8, 8)])
        assert len(region.holes) == 2
        assert region.area == pytest.approx(98.0)
