# build_station_partition.py
"""
Builds the constrained service-area partition for the configured station
dataset and writes it to settings.output_json.

Stations come from the CSV in settings.stations_csv, or from the GBFS feed
in settings.gbfs_url with --remote. Constraints come from
settings.constraints_json when the file exists.
"""

import argparse
import json
from pathlib import Path

import structlog

from station_zones.config import get_settings
from station_zones.logging_config import configure_logging
from station_zones.models import PartitionResponse
from station_zones.services.loader import load_optional_constraints, load_stations_csv
from station_zones.services.partition import compute_partition
from station_zones.services.source_api import fetch_gbfs_stations

logger = structlog.get_logger()


def main(argv=None):
    settings = get_settings()

    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--remote", action="store_true", help="load stations from the GBFS feed")
    parser.add_argument("--no-constraints", action="store_true", help="plain Voronoi diagram")
    parser.add_argument("--output", type=Path, default=settings.output_json)
    args = parser.parse_args(argv)

    configure_logging(settings.log_level, settings.log_format)

    if args.remote:
        facilities = fetch_gbfs_stations(settings.gbfs_url, settings.http_timeout_s)
    else:
        facilities = load_stations_csv(settings.stations_csv)
    if not facilities:
        raise RuntimeError("No stations to partition")

    constraints = load_optional_constraints(settings.constraints_json)

    result = compute_partition(
        facilities,
        constraints,
        apply_constraints=settings.apply_constraints and not args.no_constraints,
        epsilon=settings.epsilon,
        margin=settings.bounds_margin,
        floor=settings.min_bounds_padding,
    )

    payload = PartitionResponse.from_result(result).model_dump()

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with args.output.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)

    logger.info(
        "build.partition_written",
        path=str(args.output),
        cells=len(result.cells),
        dropped=len(result.dropped),
        clip_failures=len(result.clip_failures),
    )
    return payload


if __name__ == "__main__":
    main()
