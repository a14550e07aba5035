from __future__ import annotations

import json

from hotel_listing.hotels import FilterCriteria, HotelRecord, RoomRecord, ValueRange
from hotel_listing.storage import JsonStore


def test_json_store_writes_listing_with_criteria(tmp_path) -> None:
    hotel = HotelRecord(id=1, name="Le Marais Lodge", rating=5, rating_count=3)
    hotel.cheapest_room = RoomRecord(
        id=10, hotel_id=1, price=80.0, surface=12.0, bedrooms=1, bathrooms=1, type="single", title="Single"
    )
    criteria = FilterCriteria(price=ValueRange(max=100))

    path = JsonStore(tmp_path / "out").write(
        HotelRecord.from_iterable([hotel]), filename="listing.json", criteria=criteria.to_dict(), subdir="paris"
    )

    assert path == tmp_path / "out" / "paris" / "listing.json"
    payload = json.loads(path.read_text())
    assert payload["count"] == 1
    assert payload["criteria"]["price"] == {"min": None, "max": 100}
    assert payload["items"][0]["cheapest_room"]["title"] == "Single"
    assert payload["items"][0]["address"]["city"] == ""
    assert payload["generated_at"].endswith("Z")
