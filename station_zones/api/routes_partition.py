# station_zones/api/routes_partition.py

from fastapi import APIRouter, Depends, HTTPException, Query

from station_zones.config import get_settings
from station_zones.geometry.errors import InvalidGeometryError, UnresolvedIdentityError
from station_zones.models import (
    ConstraintSetModel,
    FacilityIn,
    FacilityList,
    FacilityOut,
    LatLon,
    LocateRequest,
    PartitionRequest,
    PartitionResponse,
)
from station_zones.services.loader import facilities_from_records
from station_zones.services.partition import compute_partition
from station_zones.services.registry import FacilityRegistry
from station_zones.services.repository import get_registry

router = APIRouter(tags=["partition"])


def _unresolved(exc: UnresolvedIdentityError) -> HTTPException:
    # several matches: conflict; none: not found
    status = 409 if len(exc.matches) > 1 else 404
    return HTTPException(
        status_code=status,
        detail={"message": str(exc), "matches": exc.matches},
    )


# --------- STATELESS ---------

@router.post("/partition", response_model=PartitionResponse)
def post_partition(req: PartitionRequest):
    """
    Partition for the facilities and constraints in the body;
    the shared registry is left untouched.
    """
    settings = get_settings()
    try:
        facilities = facilities_from_records([f.model_dump() for f in req.facilities])
        constraints = req.constraints.to_constraints()
    except InvalidGeometryError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    result = compute_partition(
        facilities,
        constraints,
        apply_constraints=req.apply_constraints,
        epsilon=settings.epsilon,
        margin=settings.bounds_margin,
        floor=settings.min_bounds_padding,
    )
    return PartitionResponse.from_result(result)


# --------- REGISTRY ---------

@router.get("/partition", response_model=PartitionResponse)
def get_partition(
    apply_constraints: bool | None = Query(None, description="Override the configured mode"),
    registry: FacilityRegistry = Depends(get_registry),
):
    return PartitionResponse.from_result(registry.partition(apply_constraints=apply_constraints))


@router.get("/facilities", response_model=FacilityList)
def list_facilities(registry: FacilityRegistry = Depends(get_registry)):
    return FacilityList(facilities=[FacilityOut.from_facility(f) for f in registry.facilities])


@router.post("/facilities", response_model=FacilityOut, status_code=201)
def add_facility(req: FacilityIn, registry: FacilityRegistry = Depends(get_registry)):
    if req.id is not None and req.id in registry:
        raise HTTPException(status_code=409, detail=f"facility id already registered: {req.id!r}")
    facility = registry.add(
        {"lat": req.lat, "lon": req.lon},
        name=req.name,
        tag=req.tag,
        facility_id=req.id,
    )
    return FacilityOut.from_facility(facility)


@router.put("/facilities/{facility_id}", response_model=FacilityOut)
def move_facility(
    facility_id: str,
    position: LatLon,
    registry: FacilityRegistry = Depends(get_registry),
):
    try:
        facility = registry.move(facility_id, position.to_point())
    except UnresolvedIdentityError as exc:
        raise _unresolved(exc) from exc
    return FacilityOut.from_facility(facility)


@router.delete("/facilities/{facility_id}", response_model=FacilityOut)
def remove_facility(facility_id: str, registry: FacilityRegistry = Depends(get_registry)):
    try:
        facility = registry.remove(facility_id)
    except UnresolvedIdentityError as exc:
        raise _unresolved(exc) from exc
    return FacilityOut.from_facility(facility)


@router.post("/facilities/locate", response_model=FacilityOut)
def locate_facility(req: LocateRequest, registry: FacilityRegistry = Depends(get_registry)):
    """
    Re-identifies a facility by position (e.g. a marker's pre-drag coordinate).
    404 when nothing matches, 409 when several facilities share the position.
    """
    try:
        facility = registry.find_by_position({"lat": req.lat, "lon": req.lon}, epsilon=req.epsilon)
    except UnresolvedIdentityError as exc:
        raise _unresolved(exc) from exc
    return FacilityOut.from_facility(facility)


@router.get("/constraints", response_model=ConstraintSetModel)
def get_constraints(registry: FacilityRegistry = Depends(get_registry)):
    return ConstraintSetModel.from_constraints(registry.constraints)


@router.put("/constraints", response_model=ConstraintSetModel)
def put_constraints(req: ConstraintSetModel, registry: FacilityRegistry = Depends(get_registry)):
    try:
        registry.set_constraints(req.to_constraints())
    except InvalidGeometryError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ConstraintSetModel.from_constraints(registry.constraints)
