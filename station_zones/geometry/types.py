# station_zones/geometry/types.py

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple

import structlog

from station_zones.geometry.errors import InvalidGeometryError

logger = structlog.get_logger()


class Point(NamedTuple):
    # Axis meaning is opaque to the engine; loaders use x = lon, y = lat.
    x: float
    y: float


Ring = Tuple[Point, ...]


def _as_coordinate(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidGeometryError(f"coordinate {name!r} must be numeric, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidGeometryError(f"coordinate {name!r} must be finite, got {value!r}")
    return value


def as_point(value: Any) -> Point:
    """
    Validates one coordinate pair at the input boundary.

    Accepts a Point, a 2-sequence (x, y), or a mapping with either
    x/y keys or lat plus lon/lng keys (x = lon, y = lat).
    """
    if isinstance(value, Point):
        return Point(_as_coordinate(value.x, "x"), _as_coordinate(value.y, "y"))

    if isinstance(value, Mapping):
        if "x" in value and "y" in value:
            return Point(_as_coordinate(value["x"], "x"), _as_coordinate(value["y"], "y"))
        lon = value.get("lon", value.get("lng"))
        if "lat" not in value or lon is None:
            raise InvalidGeometryError(f"point is missing coordinates: {dict(value)!r}")
        return Point(_as_coordinate(lon, "lon"), _as_coordinate(value["lat"], "lat"))

    if isinstance(value, (str, bytes)):
        raise InvalidGeometryError(f"point must be a pair of numbers, got {value!r}")

    try:
        coords = list(value)
    except TypeError:
        raise InvalidGeometryError(f"point must be a pair of numbers, got {value!r}") from None

    if len(coords) != 2:
        raise InvalidGeometryError(f"point must have exactly 2 coordinates, got {len(coords)}")
    return Point(_as_coordinate(coords[0], "x"), _as_coordinate(coords[1], "y"))


def as_ring(values: Optional[Iterable[Any]]) -> Ring:
    if values is None:
        return ()
    return tuple(as_point(v) for v in values)


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> Optional["BoundingBox"]:
        pts = list(points)
        if not pts:
            return None
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        return cls(min(xs), min(ys), max(xs), max(ys))

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def padded(self, margin: float, floor: float = 0.0) -> "BoundingBox":
        """Grows the box by `margin` times its larger side, at least `floor` per side."""
        pad = max(max(self.width, self.height) * margin, floor)
        return BoundingBox(
            self.min_x - pad,
            self.min_y - pad,
            self.max_x + pad,
            self.max_y + pad,
        )

    def union(self, other: Optional["BoundingBox"]) -> "BoundingBox":
        if other is None:
            return self
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def contains(self, point: Point) -> bool:
        x, y = point
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def to_ring(self) -> Ring:
        """Closed clockwise rectangle, ready for rendering or clipping."""
        return (
            Point(self.min_x, self.min_y),
            Point(self.min_x, self.max_y),
            Point(self.max_x, self.max_y),
            Point(self.max_x, self.min_y),
            Point(self.min_x, self.min_y),
        )


@dataclass(frozen=True)
class Region:
    """
    Result of clipping a cell: an exterior ring plus holes.

    Holes only appear when an obstacle lies strictly inside a cell.
    Exterior rings are closed and clockwise; holes are closed and
    counter-clockwise.
    """
    exterior: Ring
    holes: Tuple[Ring, ...] = ()

    @property
    def area(self) -> float:
        # local imports: polygon.py imports this module
        from station_zones.geometry.polygon import signed_area

        return abs(signed_area(self.exterior)) - sum(abs(signed_area(h)) for h in self.holes)

    def contains(self, point: Point) -> bool:
        from station_zones.geometry.polygon import point_in_polygon

        if not point_in_polygon(point, self.exterior):
            return False
        return not any(point_in_polygon(point, h) for h in self.holes)


@dataclass(frozen=True)
class ConstraintSet:
    outer: Ring = ()
    inner: Tuple[Ring, ...] = ()

    @property
    def has_outer(self) -> bool:
        from station_zones.geometry.polygon import is_usable_ring

        return bool(self.outer) and is_usable_ring(self.outer)

    @property
    def is_active(self) -> bool:
        return self.has_outer or bool(self.inner)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "ConstraintSet":
        """
        Builds a constraint set from the JSON shape
        {"outer": [point, ...], "inner": [[point, ...], ...]}.

        Degenerate and zero-area rings are dropped: an empty or unusable outer ring
        means "unconstrained", never "constrain to nothing".
        """
        from station_zones.geometry.polygon import is_usable_ring

        if not data:
            return cls()

        outer = as_ring(data.get("outer") or [])
        if outer and not is_usable_ring(outer):
            logger.warning("constraints.outer_degenerate", points=len(outer))
            outer = ()

        inner: List[Ring] = []
        for idx, raw in enumerate(data.get("inner") or []):
            ring = as_ring(raw)
            if not is_usable_ring(ring):
                logger.warning("constraints.inner_degenerate", index=idx, points=len(ring))
                continue
            inner.append(ring)

        return cls(outer=outer, inner=tuple(inner))


@dataclass(frozen=True)
class VoronoiDiagram:
    cells: List[Ring]
    sites: List[Point]
    source_indices: List[int]
    duplicates: Dict[int, int] = field(default_factory=dict)
    bounds: Optional[BoundingBox] = None

    def cell_for_input(self, index: int) -> Optional[Ring]:
        """Cell of the input point at `index`, following duplicates to the kept point."""
        index = self.duplicates.get(index, index)
        if index not in self.source_indices:
            return None
        pos = self.source_indices.index(index)
        return self.cells[pos] if pos < len(self.cells) else None


@dataclass(frozen=True)
class Facility:
    id: str
    point: Point
    name: str = ""
    tag: Optional[str] = None

    def moved_to(self, point: Point) -> "Facility":
        return Facility(id=self.id, point=point, name=self.name, tag=self.tag)
