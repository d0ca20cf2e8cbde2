# station_zones/geometry/constraints.py
"""
Applies a ConstraintSet to facility points and to Voronoi cells.

Each stage builds a new list; a cell whose clip fails keeps its pre-clip
shape and its index is reported, the partition as a whole never aborts.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import structlog

from station_zones.geometry.clipper import intersect, subtract_all
from station_zones.geometry.errors import ClipFailure, DegeneratePolygonError
from station_zones.geometry.polygon import Winding, normalize_winding, point_in_polygon
from station_zones.geometry.types import ConstraintSet, Point, Region, Ring

logger = structlog.get_logger()


@dataclass(frozen=True)
class CellClipResult:
    regions: List[Region]
    failures: List[int] = field(default_factory=list)


def surviving_indices(points: Sequence[Point], constraints: ConstraintSet) -> List[int]:
    """
    Indices of the points inside the outer ring and outside every obstacle.

    An empty outer ring means "no constraint": the step is skipped and every
    index survives.
    """
    if not constraints.has_outer:
        return list(range(len(points)))

    keep: List[int] = []
    for idx, p in enumerate(points):
        if not point_in_polygon(p, constraints.outer):
            continue
        if any(point_in_polygon(p, ring) for ring in constraints.inner):
            continue
        keep.append(idx)
    return keep


def filter_points(points: Sequence[Point], constraints: ConstraintSet) -> List[Point]:
    return [points[i] for i in surviving_indices(points, constraints)]


def _anchor(anchors: Optional[Sequence[Point]], idx: int) -> Optional[Point]:
    if anchors is None or idx >= len(anchors):
        return None
    return anchors[idx]


def clip_to_outer(
    cells: Sequence[Ring],
    outer: Ring,
    anchors: Optional[Sequence[Point]] = None,
) -> Tuple[List[Region], List[int]]:
    """
    Intersects every cell with the outer ring. A cell whose intersection is
    empty or fails keeps its original shape.
    """
    regions: List[Region] = []
    failures: List[int] = []

    for idx, cell in enumerate(cells):
        try:
            clipped = intersect(cell, outer, anchor=_anchor(anchors, idx))
        except ClipFailure as exc:
            logger.warning("constraints.outer_clip_failed", cell=idx, error=str(exc))
            clipped = None

        if clipped is None:
            logger.warning("constraints.outer_clip_fallback", cell=idx)
            failures.append(idx)
            regions.append(Region(exterior=normalize_winding(cell, Winding.CLOCKWISE)))
        else:
            regions.append(Region(exterior=clipped))

    return regions, failures


def subtract_obstacles(
    regions: Sequence[Region],
    obstacles: Sequence[Ring],
    anchors: Optional[Sequence[Point]] = None,
) -> Tuple[List[Region], List[int]]:
    """
    Removes the union of all obstacles from every region. A region that
    would vanish or fails to clip keeps its pre-subtraction shape.
    """
    if not obstacles:
        return list(regions), []

    result: List[Region] = []
    failures: List[int] = []

    for idx, region in enumerate(regions):
        try:
            subtracted = subtract_all(region, obstacles, anchor=_anchor(anchors, idx))
        except (ClipFailure, DegeneratePolygonError) as exc:
            logger.warning("constraints.obstacle_clip_failed", cell=idx, error=str(exc))
            subtracted = None

        if subtracted is None:
            failures.append(idx)
            result.append(region)
        else:
            result.append(subtracted)

    return result, failures


def apply_to_cells(
    cells: Sequence[Ring],
    constraints: ConstraintSet,
    anchors: Optional[Sequence[Point]] = None,
) -> CellClipResult:
    """
    Clips each cell to the outer ring (when there is one), then subtracts
    the inner obstacles. `anchors` are the facility points, index-aligned
    with `cells`; they pick which part survives a multi-part clip.
    """
    if constraints.has_outer:
        regions, outer_failures = clip_to_outer(cells, constraints.outer, anchors)
    else:
        regions = [Region(exterior=normalize_winding(c, Winding.CLOCKWISE)) for c in cells]
        outer_failures = []

    regions, inner_failures = subtract_obstacles(regions, constraints.inner, anchors)

    failures = sorted(set(outer_failures) | set(inner_failures))
    return CellClipResult(regions=regions, failures=failures)
