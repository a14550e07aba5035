from __future__ import annotations

import pytest

from hotel_listing.hotels import Excluded, FilterCriteria, Matched, NoMatchError, RoomFilterEngine, RoomRecord, ValueRange
from hotel_listing.hotels.rooms import room_from_row, unmet_criteria


def _room(room_id: int, price: float, **overrides) -> RoomRecord:
    values = {
        "id": room_id,
        "hotel_id": 1,
        "price": price,
        "surface": 20.0,
        "bedrooms": 1,
        "bathrooms": 1,
        "type": "double",
    }
    values.update(overrides)
    return RoomRecord(**values)


def test_cheapest_room_under_price_ceiling() -> None:
    rooms = [_room(1, 80), _room(2, 120), _room(3, 95)]
    engine = RoomFilterEngine()

    cheapest = engine.select_cheapest(rooms, FilterCriteria(price=ValueRange(max=100)))

    assert cheapest.id == 1
    assert cheapest.price == 80


def test_no_room_under_ceiling_raises_no_match() -> None:
    rooms = [_room(1, 80), _room(2, 120)]
    engine = RoomFilterEngine()

    with pytest.raises(NoMatchError):
        engine.select_cheapest(rooms, FilterCriteria(price=ValueRange(max=50)))
    assert isinstance(engine.filter(rooms, FilterCriteria(price=ValueRange(max=50))), Excluded)


def test_empty_inventory_is_excluded() -> None:
    outcome = RoomFilterEngine().filter([], FilterCriteria())
    assert isinstance(outcome, Excluded)


def test_ranges_are_inclusive() -> None:
    rooms = [_room(1, 100, surface=30.0), _room(2, 90, surface=29.5)]
    criteria = FilterCriteria(price=ValueRange(min=100, max=100), surface=ValueRange(min=30, max=30))

    outcome = RoomFilterEngine().filter(rooms, criteria)

    assert isinstance(outcome, Matched)
    assert outcome.value.id == 1


def test_all_active_criteria_must_pass() -> None:
    rooms = [
        _room(1, 50, bedrooms=1, bathrooms=1, type="single"),
        _room(2, 70, bedrooms=2, bathrooms=1, type="suite"),
        _room(3, 90, bedrooms=3, bathrooms=2, type="suite"),
    ]
    criteria = FilterCriteria(bedrooms=2, bathrooms=2, types=frozenset({"suite"}))

    assert RoomFilterEngine().select_cheapest(rooms, criteria).id == 3


def test_empty_type_whitelist_does_not_restrict() -> None:
    rooms = [_room(1, 60, type="dorm"), _room(2, 40, type="loft")]
    assert RoomFilterEngine().select_cheapest(rooms, FilterCriteria(types=frozenset())).id == 2


def test_ties_keep_first_room() -> None:
    rooms = [_room(1, 75), _room(2, 75), _room(3, 75)]
    assert RoomFilterEngine("exact").select_cheapest(rooms, FilterCriteria()).id == 1


def test_truncated_price_comparison_treats_fractions_as_ties() -> None:
    rooms = [_room(1, 80.9), _room(2, 80.1)]

    assert RoomFilterEngine("truncate").select_cheapest(rooms, FilterCriteria()).id == 1
    assert RoomFilterEngine("exact").select_cheapest(rooms, FilterCriteria()).id == 2


def test_truncation_does_not_loosen_range_checks() -> None:
    rooms = [_room(1, 100.5), _room(2, 130)]
    with pytest.raises(NoMatchError):
        RoomFilterEngine("truncate").select_cheapest(rooms, FilterCriteria(price=ValueRange(max=100)))


def test_unknown_price_comparison_rejected() -> None:
    with pytest.raises(ValueError):
        RoomFilterEngine("rounded")  # type: ignore[arg-type]


def test_unmet_criteria_names_each_failure() -> None:
    room = _room(1, 300, surface=10.0, bedrooms=1, bathrooms=0, type="single")
    criteria = FilterCriteria(
        price=ValueRange(max=200),
        surface=ValueRange(min=15),
        bedrooms=2,
        bathrooms=1,
        types=frozenset({"suite"}),
    )
    assert unmet_criteria(room, criteria) == ["surface", "price", "bedrooms", "bathrooms", "type"]
    assert unmet_criteria(room, FilterCriteria()) == []


def test_room_from_row_parses_text_columns() -> None:
    room = room_from_row(
        {
            "ID": "7",
            "hotel_id": 3,
            "post_title": "Suite",
            "price": "149.90",
            "surface": "32",
            "bedrooms": "2",
            "bathrooms": "1.0",
            "type": "suite",
            "image": "",
        }
    )
    assert room == RoomRecord(
        id=7, hotel_id=3, title="Suite", price=149.9, surface=32.0, bedrooms=2, bathrooms=1, type="suite", image=None
    )


def test_room_from_row_defaults_missing_numbers_to_zero() -> None:
    room = room_from_row({"ID": 1, "hotel_id": 2, "price": None, "type": None})
    assert room.price == 0.0
    assert room.surface == 0.0
    assert room.bedrooms == 0
    assert room.type == ""


def test_room_from_row_rejects_garbage_price() -> None:
    with pytest.raises(ValueError):
        room_from_row({"ID": 1, "hotel_id": 2, "price": "cheap"})


@pytest.mark.parametrize("field", ["price", "surface", "bedrooms", "bathrooms"])
@pytest.mark.parametrize("value", ["nan", "inf", "-inf", "1e400"])
def test_room_from_row_rejects_non_finite_numbers(field: str, value: str) -> None:
    with pytest.raises(ValueError):
        room_from_row({"ID": 1, "hotel_id": 2, field: value})
