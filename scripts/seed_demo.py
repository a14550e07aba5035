"""Create a small demo database of Paris and London hotels."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from hotel_listing.storage import SqliteStore

DEFAULT_DB = Path("data/hotels.sqlite3")

DEMO_HOTELS: tuple[dict[str, object], ...] = (
    {
        "name": "Hôtel du Louvre",
        "attributes": {
            "address_1": "1 Place André Malraux",
            "address_2": "",
            "address_city": "Paris",
            "address_zip": "75001",
            "address_country": "France",
            "geo_lat": 48.8635,
            "geo_lng": 2.3358,
            "coverImage": "https://example.com/louvre.jpg",
            "phone": "+33 1 44 58 38 38",
        },
        "rooms": (
            {"title": "Classic", "price": 180.0, "surface": 22, "bedrooms": 1, "bathrooms": 1, "type": "double"},
            {"title": "Suite", "price": 420.0, "surface": 48, "bedrooms": 2, "bathrooms": 2, "type": "suite"},
        ),
        "reviews": (4, 5, 5),
    },
    {
        "name": "Le Marais Lodge",
        "attributes": {
            "address_1": "12 Rue des Archives",
            "address_2": "2e étage",
            "address_city": "Paris",
            "address_zip": "75004",
            "address_country": "France",
            "geo_lat": 48.8580,
            "geo_lng": 2.3540,
            "coverImage": "https://example.com/marais.jpg",
            "phone": "+33 1 42 72 00 00",
        },
        "rooms": (
            {"title": "Single", "price": 80.0, "surface": 12, "bedrooms": 1, "bathrooms": 1, "type": "single"},
            {"title": "Double", "price": 120.0, "surface": 18, "bedrooms": 1, "bathrooms": 1, "type": "double"},
            {"title": "Family", "price": 95.0, "surface": 30, "bedrooms": 2, "bathrooms": 1, "type": "family"},
        ),
        "reviews": (3, 4),
    },
    {
        "name": "Covent Garden Inn",
        "attributes": {
            "address_1": "5 Long Acre",
            "address_2": "",
            "address_city": "London",
            "address_zip": "WC2E 9LH",
            "address_country": "United Kingdom",
            "geo_lat": 51.5074,
            "geo_lng": -0.1278,
            "coverImage": "https://example.com/covent.jpg",
            "phone": "+44 20 7000 0000",
        },
        "rooms": (
            {"title": "Double", "price": 150.0, "surface": 20, "bedrooms": 1, "bathrooms": 1, "type": "double"},
        ),
        "reviews": (),
    },
)


async def seed(db_path: Path) -> None:
    async with SqliteStore(db_path) as store:
        for hotel in DEMO_HOTELS:
            hotel_id = await store.add_hotel(str(hotel["name"]))
            await store.set_attributes(hotel_id, hotel["attributes"])  # type: ignore[arg-type]
            for room in hotel["rooms"]:  # type: ignore[union-attr]
                await store.add_room(hotel_id, **room)
            for rating in hotel["reviews"]:  # type: ignore[union-attr]
                await store.add_review(hotel_id, rating)
            print(f"Seeded hotel {hotel_id}: {hotel['name']}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo hotels database")
    parser.add_argument("--db", type=Path, default=DEFAULT_DB, help="Path to the SQLite database to create")
    parser.add_argument("--force", action="store_true", help="Delete an existing database first")
    args = parser.parse_args()
    if args.db.exists():
        if not args.force:
            raise SystemExit(f"{args.db} already exists; pass --force to recreate it")
        args.db.unlink()
    asyncio.run(seed(args.db))


if __name__ == "__main__":
    main()
