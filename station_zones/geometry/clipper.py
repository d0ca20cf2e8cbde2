# station_zones/geometry/clipper.py
"""
Boolean operations between simple rings, on top of shapely.

Operands are closed and oriented clockwise before every operation and are
never mutated. Results are new rings (exterior clockwise, holes
counter-clockwise) or None when nothing polygonal is left.
"""

from typing import Iterable, List, Optional, Sequence

from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.ops import unary_union
from shapely.validation import make_valid

from station_zones.geometry.errors import ClipFailure, DegeneratePolygonError
from station_zones.geometry.polygon import Winding, is_degenerate, normalize_winding, signed_area
from station_zones.geometry.types import Point, Region, Ring

# Parts smaller than this fraction of the operand area are slivers.
RELATIVE_AREA_TOLERANCE = 1e-12


def _polygon_parts(geom: BaseGeometry, min_area: float = 0.0) -> List[ShapelyPolygon]:
    """Polygonal pieces of any shapely result (Polygon, Multi*, GeometryCollection)."""
    if geom is None or geom.is_empty:
        return []
    if isinstance(geom, ShapelyPolygon):
        return [geom] if geom.area > min_area else []
    parts: List[ShapelyPolygon] = []
    for sub in getattr(geom, "geoms", []):
        parts.extend(_polygon_parts(sub, min_area))
    return parts


def _select_part(parts: List[ShapelyPolygon], anchor: Optional[Sequence[float]]) -> ShapelyPolygon:
    """
    Picks one part of a multi-part result: the one holding the anchor
    (the facility) when there is one, otherwise the largest.
    """
    if anchor is not None and len(parts) > 1:
        anchor_point = ShapelyPoint(float(anchor[0]), float(anchor[1]))
        for part in parts:
            if part.covers(anchor_point):
                return part
    return max(parts, key=lambda p: p.area)


def _repair(shape: ShapelyPolygon) -> ShapelyPolygon:
    if shape.is_valid:
        return shape
    parts = _polygon_parts(make_valid(shape))
    if not parts:
        raise ClipFailure("operand has no polygonal part after repair")
    return max(parts, key=lambda p: p.area)


def ring_to_shape(ring: Iterable[Sequence[float]]) -> ShapelyPolygon:
    """
    Closed, clockwise shapely polygon for `ring`.
    Raises DegeneratePolygonError for fewer than 3 distinct points.
    """
    ring = tuple(ring)
    if is_degenerate(ring):
        raise DegeneratePolygonError(f"ring has fewer than 3 distinct points ({len(ring)} given)")
    closed = normalize_winding(ring, Winding.CLOCKWISE)
    if signed_area(closed) == 0.0:
        raise DegeneratePolygonError("ring has zero area (collinear points)")
    return _repair(ShapelyPolygon(closed))


def region_to_shape(region: Region) -> ShapelyPolygon:
    if is_degenerate(region.exterior):
        raise DegeneratePolygonError("region exterior has fewer than 3 distinct points")
    holes = [h for h in region.holes if not is_degenerate(h)]
    return _repair(ShapelyPolygon(region.exterior, holes))


def _coords(coords) -> Ring:
    return tuple(Point(float(x), float(y)) for x, y in coords)


def shape_to_region(shape: ShapelyPolygon) -> Optional[Region]:
    # sign=-1.0: exterior clockwise, interiors counter-clockwise
    shape = orient(shape, sign=-1.0)
    exterior = _coords(shape.exterior.coords)
    if is_degenerate(exterior):
        return None
    holes = tuple(
        _coords(interior.coords)
        for interior in shape.interiors
        if not is_degenerate(_coords(interior.coords))
    )
    return Region(exterior=exterior, holes=holes)


def intersect(
    a: Iterable[Sequence[float]],
    b: Iterable[Sequence[float]],
    anchor: Optional[Sequence[float]] = None,
) -> Optional[Ring]:
    """
    Overlapping area of A and B as a single ring, or None when either is
    degenerate or they do not overlap with positive area.

    A non-convex operand may split the overlap into several parts; the
    part containing `anchor` is kept, else the largest.
    """
    try:
        sa = ring_to_shape(a)
        sb = ring_to_shape(b)
    except DegeneratePolygonError:
        return None

    min_area = max(sa.area, sb.area) * RELATIVE_AREA_TOLERANCE
    parts = _polygon_parts(sa.intersection(sb), min_area)
    if not parts:
        return None

    region = shape_to_region(_select_part(parts, anchor))
    return region.exterior if region is not None else None


def _subtract(
    shape: ShapelyPolygon,
    obstacle: BaseGeometry,
    anchor: Optional[Sequence[float]],
) -> Optional[Region]:
    min_area = shape.area * RELATIVE_AREA_TOLERANCE

    # no overlap: A comes back unchanged
    if not _polygon_parts(shape.intersection(obstacle), min_area):
        return shape_to_region(shape)

    parts = _polygon_parts(shape.difference(obstacle), min_area)
    if not parts:
        return None
    return shape_to_region(_select_part(parts, anchor))


def difference(
    a: Iterable[Sequence[float]],
    b: Iterable[Sequence[float]],
    anchor: Optional[Sequence[float]] = None,
) -> Optional[Region]:
    """
    A minus its overlap with B.

    - A degenerate: None.
    - B degenerate or no overlap: A unchanged.
    - B covers A: None.
    - B strictly inside A: A with a hole.
    """
    try:
        sa = ring_to_shape(a)
    except DegeneratePolygonError:
        return None
    try:
        sb = ring_to_shape(b)
    except DegeneratePolygonError:
        return shape_to_region(sa)
    return _subtract(sa, sb, anchor)


def subtract_all(
    region: Region,
    obstacles: Iterable[Iterable[Sequence[float]]],
    anchor: Optional[Sequence[float]] = None,
) -> Optional[Region]:
    """
    Removes every obstacle from `region`. Obstacles are unioned first and
    subtracted once, so overlapping obstacles compose the same way in any order.
    """
    shape = region_to_shape(region)
    shapes = []
    for ring in obstacles:
        try:
            shapes.append(ring_to_shape(ring))
        except DegeneratePolygonError:
            continue
    if not shapes:
        return shape_to_region(shape)
    return _subtract(shape, unary_union(shapes), anchor)
