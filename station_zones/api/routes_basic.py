# station_zones/api/routes_basic.py
from fastapi import APIRouter, Depends

from station_zones.services.registry import FacilityRegistry
from station_zones.services.repository import get_registry

router = APIRouter(tags=["basic"])


@router.get("/")
def root():
    return {"service": "station-zones", "docs": "/docs"}


@router.get("/health")
def health(registry: FacilityRegistry = Depends(get_registry)):
    """Liveness plus a summary of the shared registry."""
    return {
        "status": "ok",
        "facilities": len(registry),
        "constraints_active": registry.constraints.is_active,
        "apply_constraints": registry.apply_constraints,
    }
