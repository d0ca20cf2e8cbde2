# station_zones/services/loader.py

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import structlog

from station_zones.geometry.errors import InvalidGeometryError
from station_zones.geometry.types import ConstraintSet, Facility, as_point

logger = structlog.get_logger()


def _parse_number(raw: Any, field: str, row: int) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise InvalidGeometryError(f"row {row}: {field!r} is not a number: {raw!r}") from None


def facilities_from_records(
    records: Iterable[Mapping[str, Any]],
    id_key: str = "id",
) -> List[Facility]:
    """
    Maps {name, lat, lon|lng[, id]} records onto Facility.
    x = lon, y = lat. Rows without an id get "st-<row>".
    """
    facilities: List[Facility] = []
    seen: Dict[str, int] = {}

    for row, record in enumerate(records, start=1):
        lon_raw = record.get("lon", record.get("lng"))
        if record.get("lat") in (None, "") or lon_raw in (None, ""):
            raise InvalidGeometryError(f"row {row}: missing lat/lon in {dict(record)!r}")

        point = as_point(
            {
                "lat": _parse_number(record["lat"], "lat", row),
                "lon": _parse_number(lon_raw, "lon", row),
            }
        )

        facility_id = str(record.get(id_key) or f"st-{row}")
        if facility_id in seen:
            raise InvalidGeometryError(
                f"row {row}: duplicate id {facility_id!r} (first seen in row {seen[facility_id]})"
            )
        seen[facility_id] = row

        facilities.append(
            Facility(
                id=facility_id,
                point=point,
                name=str(record.get("name") or ""),
                tag=record.get("tag"),
            )
        )

    return facilities


def load_stations_csv(path: Path) -> List[Facility]:
    """
    Loads stations from a CSV with name, lat and lng (or lon) columns.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stations file not found: {path}")

    with path.open("r", encoding="utf-8", newline="") as f:
        facilities = facilities_from_records(csv.DictReader(f))

    logger.info("loader.stations_loaded", path=str(path), count=len(facilities))
    return facilities


def load_constraints_json(path: Path) -> ConstraintSet:
    """
    Loads the constraint set from a JSON file shaped like:
      {
        "outer": [ { "lat": float, "lng": float }, ... ],
        "inner": [ [ { "lat": float, "lng": float }, ... ], ... ]
      }
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Constraints file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a JSON object")

    constraints = ConstraintSet.from_mapping(data)
    logger.info(
        "loader.constraints_loaded",
        path=str(path),
        outer=len(constraints.outer),
        inner=len(constraints.inner),
    )
    return constraints


def load_optional_constraints(path: Optional[Path]) -> ConstraintSet:
    """Like load_constraints_json, but a missing file means "unconstrained"."""
    if path is None or not Path(path).exists():
        return ConstraintSet()
    return load_constraints_json(path)
