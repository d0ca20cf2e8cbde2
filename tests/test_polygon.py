# tests/test_polygon.py
import pytest

from station_zones.geometry.polygon import (
    Winding,
    close_ring,
    distinct_points,
    is_clockwise,
    is_degenerate,
    is_usable_ring,
    normalize_winding,
    point_in_polygon,
    points_equal,
    ring_bounds,
    signed_area,
)
from station_zones.geometry.types import Point

from conftest import square


class TestCloseRing:
    def test_appends_first_point(self):
        ring = close_ring([(0, 0), (1, 0), (1, 1)])
        assert len(ring) == 4
        assert ring[0] == ring[-1] == Point(0.0, 0.0)

    def test_closed_ring_is_unchanged(self):
        once = close_ring([(0, 0), (1, 0), (1, 1)])
        assert close_ring(once) == once

    def test_empty_and_single_point(self):
        assert close_ring([]) == ()
        assert close_ring([(2, 3)]) == (Point(2.0, 3.0), Point(2.0, 3.0))


class TestDegenerate:
    def test_two_distinct_points(self):
        assert is_degenerate([(0, 0), (1, 1), (0, 0)])

    def test_near_duplicates_collapse(self):
        ring = [(0, 0), (1e-12, 0), (1, 1)]
        assert len(distinct_points(ring)) == 2
        assert is_degenerate(ring)

    def test_triangle_is_not_degenerate(self):
        assert not is_degenerate([(0, 0), (1, 0), (0, 1)])

    def test_usable_ring_needs_area(self):
        assert is_usable_ring([(0, 0), (1, 0), (0, 1)])
        # three distinct points, but collinear
        assert not is_degenerate([(0, 0), (5, 5), (10, 10)])
        assert not is_usable_ring([(0, 0), (5, 5), (10, 10)])
        assert not is_usable_ring([(0, 0), (1, 1)])


class TestWinding:
    def test_signed_area_sign(self):
        ccw = square(0, 0, 2, 2)
        assert signed_area(ccw) == pytest.approx(4.0)
        assert signed_area(list(reversed(ccw))) == pytest.approx(-4.0)

    def test_normalize_to_clockwise(self):
        ring = normalize_winding(square(0, 0, 2, 2), Winding.CLOCKWISE)
        assert ring[0] == ring[-1]
        assert is_clockwise(ring)

    def test_normalize_to_counterclockwise(self):
        cw = list(reversed(square(0, 0, 2, 2)))
        ring = normalize_winding(cw, Winding.COUNTERCLOCKWISE)
        assert signed_area(ring) > 0

    def test_zero_area_ring_left_alone(self):
        ring = normalize_winding([(0, 0), (1, 1), (2, 2)])
        assert ring == close_ring([(0, 0), (1, 1), (2, 2)])

    @pytest.mark.parametrize("desired", [Winding.CLOCKWISE, Winding.COUNTERCLOCKWISE])
    def test_normalize_is_idempotent(self, desired):
        ccw = square(0, 0, 2, 2)
        cw = list(reversed(ccw))
        for ring in (ccw, cw):
            once = normalize_winding(ring, desired)
            assert normalize_winding(once, desired) == once

    def test_input_not_mutated(self):
        ring = square(0, 0, 2, 2)
        before = list(ring)
        normalize_winding(ring, Winding.CLOCKWISE)
        assert ring == before


class TestPointInPolygon:
    def test_inside_and_outside(self, unit_square):
        assert point_in_polygon((5, 5), unit_square)
        assert not point_in_polygon((15, 5), unit_square)
        assert not point_in_polygon((5, -0.1), unit_square)

    def test_closed_ring_gives_same_answer(self, unit_square):
        closed = close_ring(unit_square)
        assert point_in_polygon((5, 5), closed)
        assert not point_in_polygon((-1, 5), closed)

    def test_concave_ring(self):
        # U shape, the notch is outside
        u = [(0, 0), (10, 0), (10, 10), (7, 10), (7, 3), (3, 3), (3, 10), (0, 10)]
        assert point_in_polygon((1, 8), u)
        assert not point_in_polygon((5, 8), u)

    def test_degenerate_ring_contains_nothing(self):
        assert not point_in_polygon((0, 0), [(0, 0), (1, 1)])


def test_points_equal_tolerance():
    assert points_equal((1.0, 1.0), (1.0 + 1e-10, 1.0))
    assert not points_equal((1.0, 1.0), (1.001, 1.0))
    assert points_equal((1.0, 1.0), (1.001, 1.0), epsilon=0.01)


def test_ring_bounds(unit_square):
    box = ring_bounds(unit_square)
    assert (box.min_x, box.min_y, box.max_x, box.max_y) == (0, 0, 10, 10)
    assert ring_bounds([]) is None
