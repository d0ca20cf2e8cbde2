# station_zones/models.py
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, FiniteFloat

from station_zones.geometry.types import ConstraintSet, Facility, Point, Region, Ring
from station_zones.services.partition import PartitionResult


class LatLon(BaseModel):
    lat: FiniteFloat
    lon: FiniteFloat

    def to_point(self) -> Point:
        # x = lon, y = lat
        return Point(self.lon, self.lat)

    @classmethod
    def from_point(cls, point: Point) -> "LatLon":
        return cls(lat=point.y, lon=point.x)


def _ring_out(ring: Ring) -> List[LatLon]:
    return [LatLon.from_point(p) for p in ring]


# --------- FACILITIES ---------

class FacilityIn(BaseModel):
    id: Optional[str] = None
    name: str = ""
    tag: Optional[str] = None
    lat: FiniteFloat
    lon: FiniteFloat


class FacilityOut(BaseModel):
    id: str
    name: str
    tag: Optional[str] = None
    lat: float
    lon: float

    @classmethod
    def from_facility(cls, facility: Facility) -> "FacilityOut":
        return cls(
            id=facility.id,
            name=facility.name,
            tag=facility.tag,
            lat=facility.point.y,
            lon=facility.point.x,
        )


class FacilityList(BaseModel):
    facilities: List[FacilityOut]


class LocateRequest(BaseModel):
    lat: FiniteFloat
    lon: FiniteFloat
    epsilon: Optional[float] = Field(default=None, gt=0)


# --------- CONSTRAINTS ---------

class ConstraintSetModel(BaseModel):
    outer: List[LatLon] = Field(default_factory=list)
    inner: List[List[LatLon]] = Field(default_factory=list)

    def to_constraints(self) -> ConstraintSet:
        return ConstraintSet.from_mapping(
            {
                "outer": [p.model_dump() for p in self.outer],
                "inner": [[p.model_dump() for p in ring] for ring in self.inner],
            }
        )

    @classmethod
    def from_constraints(cls, constraints: ConstraintSet) -> "ConstraintSetModel":
        return cls(
            outer=_ring_out(constraints.outer),
            inner=[_ring_out(ring) for ring in constraints.inner],
        )


# --------- PARTITION ---------

class PartitionRequest(BaseModel):
    facilities: List[FacilityIn]
    constraints: ConstraintSetModel = Field(default_factory=ConstraintSetModel)
    apply_constraints: bool = True


class PartitionCell(BaseModel):
    id: str
    name: str
    lat: float
    lon: float
    polygon: List[LatLon]
    holes: List[List[LatLon]] = Field(default_factory=list)

    @classmethod
    def from_region(cls, facility: Facility, region: Region) -> "PartitionCell":
        return cls(
            id=facility.id,
            name=facility.name,
            lat=facility.point.y,
            lon=facility.point.x,
            polygon=_ring_out(region.exterior),
            holes=[_ring_out(h) for h in region.holes],
        )


class PartitionResponse(BaseModel):
    cells: List[PartitionCell]
    bounding_polygon: List[LatLon]
    dropped: List[str] = Field(default_factory=list)
    duplicates: Dict[str, str] = Field(default_factory=dict)
    clip_failures: List[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: PartitionResult) -> "PartitionResponse":
        return cls(
            cells=[
                PartitionCell.from_region(f, cell)
                for f, cell in zip(result.facilities, result.cells)
            ],
            bounding_polygon=_ring_out(result.bounding_polygon),
            dropped=list(result.dropped),
            duplicates=dict(result.duplicates),
            clip_failures=list(result.clip_failures),
        )
