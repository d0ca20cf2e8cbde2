# station_zones/geometry/polygon.py
"""
Normalization primitives shared by the clipper, the Voronoi generator
and the constraint applier: closing rings, winding order, point-in-polygon
and tolerance-based point equality.
"""

from enum import Enum
from typing import Iterable, List, Optional, Sequence

from station_zones.geometry.types import BoundingBox, Point, Ring

# Planar tolerance; geographic callers pass their own.
EPSILON = 1e-9


class Winding(str, Enum):
    CLOCKWISE = "cw"
    COUNTERCLOCKWISE = "ccw"


def points_equal(a: Sequence[float], b: Sequence[float], epsilon: float = EPSILON) -> bool:
    return abs(a[0] - b[0]) < epsilon and abs(a[1] - b[1]) < epsilon


def close_ring(ring: Iterable[Sequence[float]], epsilon: float = EPSILON) -> Ring:
    """
    Appends the first point to the end unless the ring is already closed.
    Closing a closed ring is a no-op.
    """
    pts = tuple(Point(float(p[0]), float(p[1])) for p in ring)
    if not pts:
        return ()
    if len(pts) > 1 and points_equal(pts[0], pts[-1], epsilon):
        return pts
    return pts + (pts[0],)


def distinct_points(ring: Iterable[Sequence[float]], epsilon: float = EPSILON) -> List[Point]:
    """Open list of the ring's points with tolerance-equal repeats removed."""
    distinct: List[Point] = []
    for p in close_ring(ring, epsilon)[:-1]:
        if not any(points_equal(p, q, epsilon) for q in distinct):
            distinct.append(p)
    return distinct


def is_degenerate(ring: Iterable[Sequence[float]], epsilon: float = EPSILON) -> bool:
    return len(distinct_points(ring, epsilon)) < 3


def signed_area(ring: Sequence[Sequence[float]]) -> float:
    """
    Shoelace formula. Positive = counter-clockwise, negative = clockwise.
    Works on open or closed rings (the closing edge has zero length).
    """
    n = len(ring)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        x1, y1 = ring[i][0], ring[i][1]
        x2, y2 = ring[(i + 1) % n][0], ring[(i + 1) % n][1]
        area += x1 * y2 - x2 * y1
    return area / 2.0


def is_usable_ring(ring: Iterable[Sequence[float]], epsilon: float = EPSILON) -> bool:
    """At least 3 distinct points and a non-zero area (collinear rings are not)."""
    ring = tuple(ring)
    if is_degenerate(ring, epsilon):
        return False
    return signed_area(close_ring(ring, epsilon)) != 0.0


def is_clockwise(ring: Sequence[Sequence[float]]) -> bool:
    return signed_area(ring) < 0.0


def normalize_winding(
    ring: Iterable[Sequence[float]],
    desired: Winding = Winding.CLOCKWISE,
    epsilon: float = EPSILON,
) -> Ring:
    """
    Closes the ring and reverses it when its orientation does not match
    `desired`. Zero-area rings are returned closed but otherwise untouched.
    """
    closed = close_ring(ring, epsilon)
    area = signed_area(closed)
    if area == 0.0:
        return closed
    clockwise = area < 0.0
    if clockwise != (desired == Winding.CLOCKWISE):
        return tuple(reversed(closed))
    return closed


def point_in_polygon(point: Sequence[float], ring: Sequence[Sequence[float]]) -> bool:
    """
    Even-odd ray casting. Points exactly on an edge get whatever the
    crossing count gives; the answer is stable for a given ring.
    """
    x, y = point[0], point[1]
    n = len(ring)
    if n < 3:
        return False

    inside = False
    for i in range(n):
        j = (i - 1) % n
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]

        intersect = ((yi > y) != (yj > y)) and (
            x < (xj - xi) * (y - yi) / ((yj - yi) or 1e-12) + xi
        )
        if intersect:
            inside = not inside

    return inside


def ring_bounds(points: Iterable[Sequence[float]]) -> Optional[BoundingBox]:
    return BoundingBox.from_points(Point(float(p[0]), float(p[1])) for p in points)
