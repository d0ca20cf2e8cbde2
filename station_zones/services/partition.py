# station_zones/services/partition.py
"""
Public entry point of the engine: facilities + constraints -> clipped cells.

Pipeline (fixed order):
  1. filter facilities against the constraints (when active)
  2. Voronoi diagram over the surviving coordinates
  3. clip cells to the outer ring, subtract the inner obstacles (when active)
  4. bounding rectangle of the working box, for display

Nothing is kept between calls: the same input always gives the same output.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import structlog

from station_zones.geometry.constraints import apply_to_cells, surviving_indices
from station_zones.geometry.polygon import EPSILON
from station_zones.geometry.types import BoundingBox, ConstraintSet, Facility, Region, Ring
from station_zones.geometry.voronoi import (
    DEFAULT_MARGIN,
    DEFAULT_PADDING_FLOOR,
    generate,
    working_bounds,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class PartitionResult:
    # facilities[i] owns cells[i]
    facilities: List[Facility]
    cells: List[Region]
    bounding_polygon: Ring
    bounds: Optional[BoundingBox] = None
    dropped: List[str] = field(default_factory=list)        # filtered out by constraints
    duplicates: Dict[str, str] = field(default_factory=dict)  # collapsed id -> kept id
    clip_failures: List[str] = field(default_factory=list)   # kept their pre-clip shape

    def cell_for(self, facility_id: str) -> Optional[Region]:
        facility_id = self.duplicates.get(facility_id, facility_id)
        for facility, cell in zip(self.facilities, self.cells):
            if facility.id == facility_id:
                return cell
        return None


def compute_partition(
    facilities: Iterable[Facility],
    constraints: Optional[ConstraintSet] = None,
    apply_constraints: bool = True,
    bounds: Optional[BoundingBox] = None,
    epsilon: float = EPSILON,
    margin: float = DEFAULT_MARGIN,
    floor: float = DEFAULT_PADDING_FLOOR,
) -> PartitionResult:
    """
    Computes one service area per facility.

    - `apply_constraints=False` ignores `constraints` entirely (plain diagram).
    - `bounds` overrides the working box (otherwise: outer ring extent when an
      outer constraint is active, facility extent when not).
    - Coincident facilities collapse onto the first one; the cell list stays
      index-aligned with `result.facilities`, which holds the survivors only.
    """
    facilities = list(facilities)
    constraints = constraints or ConstraintSet()
    active = apply_constraints and constraints.is_active

    # 1. filter facilities
    if active:
        keep = surviving_indices([f.point for f in facilities], constraints)
        kept_set = set(keep)
        survivors = [facilities[i] for i in keep]
        dropped = [f.id for i, f in enumerate(facilities) if i not in kept_set]
        if dropped:
            logger.info("partition.facilities_dropped", count=len(dropped))
    else:
        survivors = facilities
        dropped = []

    points = [f.point for f in survivors]

    # 2. Voronoi over the survivors
    if bounds is None:
        outer = constraints.outer if active and constraints.has_outer else None
        bounds = working_bounds(points, outer=outer, margin=margin, floor=floor)

    diagram = generate(points, bounds=bounds, epsilon=epsilon, margin=margin, floor=floor)

    owners = [survivors[i] for i in diagram.source_indices]
    duplicates = {
        survivors[dup].id: survivors[kept].id for dup, kept in diagram.duplicates.items()
    }

    cells: List[Ring] = list(diagram.cells)
    if len(owners) == 1 and diagram.bounds is not None:
        # A lone facility serves the whole working area
        cells = [diagram.bounds.to_ring()]

    # 3. constraints
    clip_failures: List[str] = []
    if active and cells:
        clipped = apply_to_cells(cells, constraints, anchors=[f.point for f in owners])
        regions = clipped.regions
        clip_failures = [owners[i].id for i in clipped.failures]
    else:
        regions = [Region(exterior=c) for c in cells]

    # 4. display rectangle
    bounding_polygon: Ring = diagram.bounds.to_ring() if diagram.bounds is not None else ()

    logger.debug(
        "partition.computed",
        facilities=len(facilities),
        cells=len(regions),
        dropped=len(dropped),
        duplicates=len(duplicates),
        clip_failures=len(clip_failures),
    )

    return PartitionResult(
        facilities=owners,
        cells=regions,
        bounding_polygon=bounding_polygon,
        bounds=diagram.bounds,
        dropped=dropped,
        duplicates=duplicates,
        clip_failures=clip_failures,
    )
