# tests/test_voronoi.py
"""
Voronoi generator: bounded cells, duplicate handling, working box.
"""

import numpy as np
import pytest

from station_zones.geometry.polygon import is_clockwise, point_in_polygon, signed_area
from station_zones.geometry.types import BoundingBox, Point
from station_zones.geometry.voronoi import dedupe_points, dedupe_tolerance, generate, working_bounds

from conftest import square


def _total_area(cells):
    return sum(abs(signed_area(c)) for c in cells)


class TestDedupe:
    def test_collapses_onto_first_occurrence(self):
        sites, source, duplicates = dedupe_points([(0, 0), (1, 1), (0, 0), (1, 1 + 1e-12)])
        assert sites == [Point(0.0, 0.0), Point(1.0, 1.0)]
        assert source == [0, 1]
        assert duplicates == {2: 0, 3: 1}

    def test_epsilon_is_configurable(self):
        sites, _, duplicates = dedupe_points([(0, 0), (0.5, 0)], epsilon=1.0)
        assert len(sites) == 1
        assert duplicates == {1: 0}


class TestWorkingBounds:
    def test_points_strictly_inside(self):
        pts = [Point(0, 0), Point(10, 0), Point(5, 10)]
        box = working_bounds(pts)
        for p in pts:
            assert box.min_x < p.x < box.max_x
            assert box.min_y < p.y < box.max_y

    def test_outer_ring_drives_the_box(self, unit_square):
        box = working_bounds([Point(5, 5)], outer=tuple(unit_square), margin=0.1)
        assert box == BoundingBox(-1, -1, 11, 11)

    def test_points_outside_outer_still_enclosed(self, unit_square):
        box = working_bounds([Point(50, 5)], outer=tuple(unit_square))
        assert box.max_x > 50

    def test_no_points(self):
        assert working_bounds([]) is None


class TestGenerate:
    def test_three_points(self):
        pts = [(0, 0), (10, 0), (5, 10)]
        diagram = generate(pts)
        assert len(diagram.cells) == 3
        for p, cell in zip(pts, diagram.cells):
            assert cell[0] == cell[-1]
            assert is_clockwise(cell)
            assert point_in_polygon(p, cell)
        box = diagram.bounds
        assert _total_area(diagram.cells) == pytest.approx(box.width * box.height, rel=1e-6)

    def test_two_points_split_the_box(self):
        diagram = generate([(0, 0), (10, 0)])
        assert len(diagram.cells) == 2
        left, right = diagram.cells
        assert max(p.x for p in left) == pytest.approx(5.0)
        assert min(p.x for p in right) == pytest.approx(5.0)

    def test_collinear_points(self):
        diagram = generate([(0, 0), (1, 1), (2, 2), (3, 3)])
        assert len(diagram.cells) == 4
        assert all(len(c) >= 4 for c in diagram.cells)

    def test_fewer_than_two_sites(self):
        diagram = generate([(3, 4), (3, 4)])
        assert diagram.cells == []
        assert diagram.sites == [Point(3.0, 4.0)]
        assert diagram.duplicates == {1: 0}
        assert diagram.bounds is not None

        empty = generate([])
        assert empty.cells == []
        assert empty.bounds is None

    def test_duplicates_share_a_cell(self):
        diagram = generate([(0, 0), (10, 10), (0, 0)])
        assert len(diagram.cells) == 2
        assert diagram.cell_for_input(2) == diagram.cells[0]

    def test_bounds_override(self):
        box = BoundingBox(-100, -100, 100, 100)
        diagram = generate([(0, 0), (10, 10)], bounds=box)
        assert diagram.bounds == box
        assert _total_area(diagram.cells) == pytest.approx(200.0 * 200.0, rel=1e-6)

    def test_bounds_grown_to_enclose_points(self):
        diagram = generate([(0, 0), (10, 10)], bounds=BoundingBox(0, 0, 5, 5))
        assert diagram.bounds.max_x > 10
        assert diagram.bounds.min_x < 0

    def test_cells_tile_without_overlap(self):
        rng = np.random.default_rng(7)
        pts = [tuple(p) for p in rng.uniform(0, 100, size=(25, 2))]
        diagram = generate(pts)
        assert len(diagram.cells) == 25
        for p, cell in zip(pts, diagram.cells):
            assert point_in_polygon(p, cell)
        box = diagram.bounds
        assert _total_area(diagram.cells) == pytest.approx(box.width * box.height, rel=1e-6)

    def test_deterministic(self):
        pts = [(0, 0), (10, 0), (5, 10), (3, 3)]
        assert generate(pts) == generate(pts)

    def test_inputs_not_mutated(self):
        pts = square(0, 0, 1, 1)
        before = list(pts)
        generate(pts)
        assert pts == before


class TestGeographicScale:
    """Lon/lat inputs: small extents far from the origin."""

    def _sites(self, d):
        return [(-43.2, -22.96), (-43.2 + d, -22.96), (-43.19, -22.97)]

    def test_tolerance_follows_coordinate_scale(self):
        box = BoundingBox(-43.3, -23.0, -43.1, -22.9)
        assert dedupe_tolerance(box, [(-43.2, -22.96)]) == pytest.approx(43.2e-9)
        assert dedupe_tolerance(BoundingBox(0, 0, 1, 1), [(0.5, 0.5)]) == 1e-9
        assert dedupe_tolerance(None, []) == 1e-9

    @pytest.mark.parametrize("d", [1e-8, 5e-9])
    def test_sub_precision_sites_collapse(self, d):
        diagram = generate(self._sites(d))
        assert diagram.duplicates == {1: 0}
        assert len(diagram.cells) == 2
        box = diagram.bounds
        assert _total_area(diagram.cells) == pytest.approx(box.width * box.height, rel=1e-6)

    @pytest.mark.parametrize("d", [1e-6, 1e-7])
    def test_close_sites_still_tile_the_box(self, d):
        sites = self._sites(d)
        diagram = generate(sites)
        assert diagram.duplicates == {}
        assert len(diagram.cells) == 3
        for p, cell in zip(sites, diagram.cells):
            assert point_in_polygon(p, cell)
        box = diagram.bounds
        assert _total_area(diagram.cells) == pytest.approx(box.width * box.height, rel=1e-6)
