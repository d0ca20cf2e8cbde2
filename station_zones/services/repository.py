# station_zones/services/repository.py

from typing import Optional

import structlog

from station_zones.config import get_settings
from station_zones.services.loader import load_optional_constraints, load_stations_csv
from station_zones.services.registry import FacilityRegistry

logger = structlog.get_logger()

# In-memory registry shared by the API
_registry: Optional[FacilityRegistry] = None


def _build_registry() -> FacilityRegistry:
    """
    Seeds the registry from the datasets configured in settings, when present.
    Missing files just mean an empty registry / no constraints.
    """
    settings = get_settings()

    facilities = []
    if settings.stations_csv.exists():
        facilities = load_stations_csv(settings.stations_csv)
    else:
        logger.info("repository.no_stations_file", path=str(settings.stations_csv))

    return FacilityRegistry(
        facilities=facilities,
        constraints=load_optional_constraints(settings.constraints_json),
        epsilon=settings.epsilon,
        apply_constraints=settings.apply_constraints,
        margin=settings.bounds_margin,
        floor=settings.min_bounds_padding,
    )


def get_registry() -> FacilityRegistry:
    """Shared registry, built on first use."""
    global _registry

    if _registry is None:
        _registry = _build_registry()
    return _registry


def reset_registry(registry: Optional[FacilityRegistry] = None) -> None:
    global _registry
    _registry = registry
