"""List hotels from the SQLite store matching the given filters."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from hotel_listing.config.settings import Settings
from hotel_listing.core.logging import configure_logging
from hotel_listing.hotels import FilterCriteria, HotelRecord, ListingAssembler, build_criteria
from hotel_listing.storage import JsonStore, SqliteStore

logger = logging.getLogger("list_hotels")


def _criteria_args(args: argparse.Namespace) -> dict[str, Any]:
    criteria: dict[str, Any] = {}
    if args.criteria_json:
        criteria.update(json.loads(args.criteria_json.read_text()))
    overrides = {
        "search": args.search,
        "lat": args.lat,
        "lng": args.lng,
        "distance": args.distance,
        "bedrooms": args.bedrooms,
        "bathrooms": args.bathrooms,
    }
    criteria.update({key: value for key, value in overrides.items() if value is not None})
    for name in ("price", "surface"):
        low = getattr(args, f"{name}_min")
        high = getattr(args, f"{name}_max")
        if low is None and high is None:
            continue
        bounds = dict(criteria.get(name) or {})
        if low is not None:
            bounds["min"] = low
        if high is not None:
            bounds["max"] = high
        criteria[name] = bounds
    if args.types:
        criteria["types"] = list(args.types)
    return criteria


async def run(settings: Settings, criteria: FilterCriteria, output: Optional[Path]) -> list[dict[str, object]]:
    async with SqliteStore.from_settings(settings) as store:
        assembler = ListingAssembler.from_settings(store, settings)
        hotels = await assembler.list(criteria)
    items = HotelRecord.from_iterable(hotels)
    if output is not None:
        writer = JsonStore(output.parent)
        path = writer.write(items, filename=output.name, criteria=criteria.to_dict())
        logger.info("Wrote %s hotels to %s", len(items), path)
    return items


def main() -> None:
    parser = argparse.ArgumentParser(description="List hotels matching room and location filters")
    parser.add_argument("--db", type=Path, help="Path to the hotels SQLite database")
    parser.add_argument("--search", help="Free text search (carried, not filtered on)")
    parser.add_argument("--lat", type=float, help="Search origin latitude")
    parser.add_argument("--lng", type=float, help="Search origin longitude")
    parser.add_argument("--distance", type=float, help="Search radius in kilometres")
    parser.add_argument("--price-min", type=float)
    parser.add_argument("--price-max", type=float)
    parser.add_argument("--surface-min", type=float)
    parser.add_argument("--surface-max", type=float)
    parser.add_argument("--bedrooms", type=int, help="Minimum bedroom count")
    parser.add_argument("--bathrooms", type=int, help="Minimum bathroom count")
    parser.add_argument("--type", dest="types", action="append", help="Allowed room type (repeatable)")
    parser.add_argument("--criteria-json", type=Path, help="JSON file with criteria; flags override it")
    parser.add_argument("--output", type=Path, help="Write results to this JSON file instead of stdout")
    parser.add_argument("--concurrency", type=int, help="Hotels evaluated concurrently")
    parser.add_argument("--batch", action="store_true", help="Bulk-load hotel data before filtering")
    parser.add_argument("--log-level", help="Override LISTING_LOG_LEVEL")
    args = parser.parse_args()
    try:
        criteria = build_criteria(_criteria_args(args))
    except (TypeError, ValueError) as exc:
        parser.error(str(exc))

    overrides: dict[str, Any] = {}
    if args.db:
        overrides["sqlite_path"] = args.db
    if args.concurrency:
        overrides["max_concurrency"] = args.concurrency
    if args.batch:
        overrides["batch_loading"] = True
    if args.log_level:
        overrides["log_level"] = args.log_level
    settings = Settings(**overrides)
    configure_logging(settings.log_level, settings.log_dir)

    started = datetime.now(timezone.utc)
    items = asyncio.run(run(settings, criteria, args.output))
    logger.info("Listing finished in %.3fs", (datetime.now(timezone.utc) - started).total_seconds())
    if args.output is None:
        print(json.dumps(items, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
