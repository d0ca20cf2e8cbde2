# station_zones/geometry/errors.py

from typing import Any, List, Optional


class GeometryError(ValueError):
    """Base class for everything the partition engine raises."""


class InvalidGeometryError(GeometryError):
    """
    Malformed coordinates at the input boundary: a missing coordinate,
    a non-numeric or non-finite value, or the wrong number of values.
    """


class DegeneratePolygonError(InvalidGeometryError):
    """Ring with fewer than 3 distinct points once closed."""


class ClipFailure(GeometryError):
    """A boolean operation could not produce a polygonal result."""


class UnresolvedIdentityError(LookupError):
    """
    A facility lookup (by id or by position) did not resolve to exactly one
    facility. `matches` holds the ids that did match (empty if none).
    """

    def __init__(
        self,
        message: str,
        facility_id: Optional[str] = None,
        point: Optional[Any] = None,
        matches: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.facility_id = facility_id
        self.point = point
        self.matches = list(matches or [])
