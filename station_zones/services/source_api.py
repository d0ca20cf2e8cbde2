# station_zones/services/source_api.py

from typing import List, Optional

import httpx
import structlog

from station_zones.config import get_settings
from station_zones.geometry.types import Facility
from station_zones.services.loader import facilities_from_records

logger = structlog.get_logger()


def fetch_gbfs_stations(
    url: Optional[str] = None,
    timeout: Optional[float] = None,
    client: Optional[httpx.Client] = None,
) -> List[Facility]:
    """
    Calls a GBFS station_information feed and maps it to Facility records.

    Expected shape: {"data": {"stations": [{"station_id", "name", "lat", "lon"}, ...]}}
    """
    settings = get_settings()
    url = url or settings.gbfs_url
    timeout = settings.http_timeout_s if timeout is None else timeout

    if client is None:
        resp = httpx.get(url, timeout=timeout)
    else:
        resp = client.get(url, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()

    try:
        raw_items = data["data"]["stations"]
    except (KeyError, TypeError):
        raise ValueError(f"unexpected GBFS payload from {url}: missing data.stations") from None

    facilities = facilities_from_records(raw_items, id_key="station_id")
    logger.info("source_api.stations_fetched", url=url, count=len(facilities))
    return facilities
