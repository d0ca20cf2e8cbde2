# station_zones/geometry/voronoi.py
"""
Voronoi cells for a finite set of facility points, closed against a working
bounding box.

Uses scipy.spatial.Voronoi (Qhull). To keep every cell finite, each site is
mirrored across the four edges of the box before triangulating: the
bisector between a site and its mirror image is the box edge itself, so
the region of every real site is bounded by the box.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog
from scipy.spatial import Voronoi

from station_zones.geometry.clipper import intersect
from station_zones.geometry.polygon import (
    EPSILON,
    Winding,
    is_usable_ring,
    normalize_winding,
    points_equal,
    ring_bounds,
)
from station_zones.geometry.types import BoundingBox, Point, Ring, VoronoiDiagram

logger = structlog.get_logger()

DEFAULT_MARGIN = 0.1
DEFAULT_PADDING_FLOOR = 1e-3

# Sites closer than this fraction of the coordinate scale are merged before Qhull.
RELATIVE_SITE_TOLERANCE = 1e-9


def dedupe_points(
    points: Sequence[Sequence[float]],
    epsilon: float = EPSILON,
) -> Tuple[List[Point], List[int], Dict[int, int]]:
    """
    Collapses coincident points (within epsilon) onto their first occurrence.

    Returns (sites, source_indices, duplicates):
      - sites: distinct points, in input order
      - source_indices[i]: input index of sites[i]
      - duplicates: input index -> input index of the site it collapsed onto
    """
    sites: List[Point] = []
    source_indices: List[int] = []
    duplicates: Dict[int, int] = {}

    for idx, p in enumerate(points):
        point = Point(float(p[0]), float(p[1]))
        for pos, site in enumerate(sites):
            if points_equal(point, site, epsilon):
                duplicates[idx] = source_indices[pos]
                break
        else:
            sites.append(point)
            source_indices.append(idx)

    return sites, source_indices, duplicates


def _strictly_inside(inner: BoundingBox, outer: BoundingBox) -> bool:
    return (
        outer.min_x < inner.min_x
        and outer.min_y < inner.min_y
        and inner.max_x < outer.max_x
        and inner.max_y < outer.max_y
    )


def _enclose(
    box: BoundingBox,
    points: Sequence[Point],
    margin: float,
    floor: float,
) -> BoundingBox:
    """Grows `box` so every point lies strictly inside it."""
    point_box = BoundingBox.from_points(points)
    if point_box is None or _strictly_inside(point_box, box):
        return box
    return box.union(point_box.padded(margin, floor))


def working_bounds(
    points: Sequence[Point],
    outer: Optional[Ring] = None,
    margin: float = DEFAULT_MARGIN,
    floor: float = DEFAULT_PADDING_FLOOR,
) -> Optional[BoundingBox]:
    """
    Box used to close the perimeter cells.

    Without an outer constraint the box is the padded extent of the points,
    so the rendered diagram looks reasonable. With one, it is the padded
    extent of the outer ring, since the clip discards everything outside it.
    Either way every point ends up strictly inside.
    """
    base = None
    if outer and is_usable_ring(outer):
        base = ring_bounds(outer)
    if base is None:
        base = BoundingBox.from_points(points)
    if base is None:
        return None
    return _enclose(base.padded(margin, floor), points, margin, floor)


def dedupe_tolerance(
    box: Optional[BoundingBox],
    points: Sequence[Sequence[float]],
    epsilon: float = EPSILON,
) -> float:
    """
    Tolerance used to collapse coincident sites: `epsilon`, raised to the
    working precision of the box when coordinates are large relative to it.
    """
    scale = max((max(abs(p[0]), abs(p[1])) for p in points), default=0.0)
    if box is not None:
        scale = max(scale, box.width, box.height)
    return max(epsilon, RELATIVE_SITE_TOLERANCE * scale)


def _mirror_sites(coords: np.ndarray, box: BoundingBox) -> np.ndarray:
    left = coords.copy()
    left[:, 0] = 2.0 * box.min_x - coords[:, 0]
    right = coords.copy()
    right[:, 0] = 2.0 * box.max_x - coords[:, 0]
    bottom = coords.copy()
    bottom[:, 1] = 2.0 * box.min_y - coords[:, 1]
    top = coords.copy()
    top[:, 1] = 2.0 * box.max_y - coords[:, 1]
    return np.vstack([coords, left, right, bottom, top])


def _bounded_cells(sites: List[Point], box: BoundingBox) -> List[Ring]:
    # Qhull runs on box-centred coordinates; lon/lat offsets would eat its precision
    center = np.array(
        [(box.min_x + box.max_x) / 2.0, (box.min_y + box.max_y) / 2.0], dtype=float
    )
    local_box = BoundingBox(
        box.min_x - center[0],
        box.min_y - center[1],
        box.max_x - center[0],
        box.max_y - center[1],
    )
    coords = np.array(sites, dtype=float) - center
    vor = Voronoi(_mirror_sites(coords, local_box))
    box_ring = box.to_ring()

    cells: List[Ring] = []
    for i, site in enumerate(sites):
        region = vor.regions[vor.point_region[i]]

        if not region or -1 in region:
            # A mirrored site should never have an open region; keep the box.
            logger.warning("voronoi.open_region", site=i)
            cells.append(box_ring)
            continue

        # Voronoi cells are convex: order vertices by angle around the site
        vs = vor.vertices[region]
        angles = np.arctan2(vs[:, 1] - coords[i, 1], vs[:, 0] - coords[i, 0])
        ordered = [Point(float(x), float(y)) for x, y in vs[np.argsort(angles)] + center]

        # Trim Qhull round-off against the box
        cell = intersect(ordered, box_ring, anchor=site)
        if cell is None:
            cell = normalize_winding(ordered, Winding.CLOCKWISE)
        cells.append(cell)

    return cells


def generate(
    points: Sequence[Sequence[float]],
    bounds: Optional[BoundingBox] = None,
    epsilon: float = EPSILON,
    margin: float = DEFAULT_MARGIN,
    floor: float = DEFAULT_PADDING_FLOOR,
) -> VoronoiDiagram:
    """
    Voronoi diagram over `points`.

    Coincident points are collapsed first; the diagram has one cell per
    distinct point, in input order, and `duplicates` reports the collapsed
    indices. Points closer than the working precision of the box count as
    coincident even when they differ by more than `epsilon`. Fewer than 2
    distinct points yield no cells (no diagram is meaningful), but sites
    and bounds are still reported.

    `bounds` overrides the derived working box; it is grown when a point
    falls on or outside it.
    """
    points = [Point(float(p[0]), float(p[1])) for p in points]

    if bounds is None:
        box = working_bounds(points, margin=margin, floor=floor)
    else:
        box = _enclose(bounds, points, margin, floor)

    tolerance = dedupe_tolerance(box, points, epsilon)
    sites, source_indices, duplicates = dedupe_points(points, tolerance)

    if duplicates:
        logger.info("voronoi.duplicates_collapsed", count=len(duplicates), tolerance=tolerance)

    if len(sites) < 2 or box is None:
        return VoronoiDiagram(
            cells=[],
            sites=sites,
            source_indices=source_indices,
            duplicates=duplicates,
            bounds=box,
        )

    cells = _bounded_cells(sites, box)
    logger.debug("voronoi.generated", cells=len(cells))

    return VoronoiDiagram(
        cells=cells,
        sites=sites,
        source_indices=source_indices,
        duplicates=duplicates,
        bounds=box,
    )
