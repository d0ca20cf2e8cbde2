# station_zones/services/registry.py
"""
Caller-owned state: the facility list and the constraint set.

Facilities are identified by a stable id, never by their coordinate.
The registry is not thread-safe; callers serialize mutations against
partition requests.
"""

import itertools
from typing import Dict, List, Optional, Sequence

import structlog

from station_zones.geometry.errors import UnresolvedIdentityError
from station_zones.geometry.polygon import EPSILON, points_equal
from station_zones.geometry.types import ConstraintSet, Facility, as_point
from station_zones.geometry.voronoi import DEFAULT_MARGIN, DEFAULT_PADDING_FLOOR
from station_zones.services.partition import PartitionResult, compute_partition

logger = structlog.get_logger()


class FacilityRegistry:
    def __init__(
        self,
        facilities: Optional[Sequence[Facility]] = None,
        constraints: Optional[ConstraintSet] = None,
        epsilon: float = EPSILON,
        apply_constraints: bool = True,
        margin: float = DEFAULT_MARGIN,
        floor: float = DEFAULT_PADDING_FLOOR,
    ):
        self._facilities: Dict[str, Facility] = {}
        self._counter = itertools.count(1)
        self.constraints = constraints or ConstraintSet()
        self.epsilon = epsilon
        self.apply_constraints = apply_constraints
        self.margin = margin
        self.floor = floor

        for facility in facilities or []:
            self._insert(facility)

    def __len__(self) -> int:
        return len(self._facilities)

    def __contains__(self, facility_id: str) -> bool:
        return facility_id in self._facilities

    @property
    def facilities(self) -> List[Facility]:
        """Facilities in insertion order."""
        return list(self._facilities.values())

    def _next_id(self) -> str:
        while True:
            candidate = f"st-{next(self._counter)}"
            if candidate not in self._facilities:
                return candidate

    def _insert(self, facility: Facility) -> Facility:
        if facility.id in self._facilities:
            raise ValueError(f"facility id already registered: {facility.id!r}")
        self._facilities[facility.id] = facility
        return facility

    def add(
        self,
        point,
        name: str = "",
        tag: Optional[str] = None,
        facility_id: Optional[str] = None,
    ) -> Facility:
        facility = Facility(
            id=facility_id or self._next_id(),
            point=as_point(point),
            name=name,
            tag=tag,
        )
        self._insert(facility)
        logger.info("registry.added", facility_id=facility.id)
        return facility

    def get(self, facility_id: str) -> Facility:
        try:
            return self._facilities[facility_id]
        except KeyError:
            raise UnresolvedIdentityError(
                f"unknown facility id: {facility_id!r}", facility_id=facility_id
            ) from None

    def move(self, facility_id: str, point) -> Facility:
        moved = self.get(facility_id).moved_to(as_point(point))
        self._facilities[facility_id] = moved
        logger.info("registry.moved", facility_id=facility_id)
        return moved

    def remove(self, facility_id: str) -> Facility:
        facility = self.get(facility_id)
        del self._facilities[facility_id]
        logger.info("registry.removed", facility_id=facility_id)
        return facility

    def clear(self) -> None:
        self._facilities.clear()

    def find_by_position(self, point, epsilon: Optional[float] = None) -> Facility:
        """
        Re-identifies a facility by coordinate (e.g. the pre-drag position of a
        marker). Raises UnresolvedIdentityError unless exactly one matches.
        """
        target = as_point(point)
        eps = self.epsilon if epsilon is None else epsilon
        matches = [f for f in self._facilities.values() if points_equal(f.point, target, eps)]

        if len(matches) == 1:
            return matches[0]

        if not matches:
            message = f"no facility at {tuple(target)}"
        else:
            message = f"{len(matches)} facilities at {tuple(target)}; use the facility id"
        logger.warning("registry.unresolved_position", point=tuple(target), matches=len(matches))
        raise UnresolvedIdentityError(message, point=target, matches=[f.id for f in matches])

    def set_constraints(self, constraints: Optional[ConstraintSet]) -> None:
        self.constraints = constraints or ConstraintSet()

    def partition(self, apply_constraints: Optional[bool] = None) -> PartitionResult:
        if apply_constraints is None:
            apply_constraints = self.apply_constraints
        return compute_partition(
            self.facilities,
            self.constraints,
            apply_constraints=apply_constraints,
            epsilon=self.epsilon,
            margin=self.margin,
            floor=self.floor,
        )
