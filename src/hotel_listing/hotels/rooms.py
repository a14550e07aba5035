"""Select the cheapest room of a hotel that satisfies the filter criteria."""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, List, Literal, Mapping, Sequence

from .exceptions import NoMatchError
from .models import Excluded, FilterCriteria, Matched, RoomRecord

logger = logging.getLogger(__name__)

PriceComparison = Literal["truncate", "exact"]


def _number(row: Mapping[str, Any], key: str, cast: Callable[[Any], Any], default: Any = 0) -> Any:
    value = row.get(key)
    if value in (None, ""):
        return default
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{key} must be a finite number, got {value!r}")
    return cast(number)


def room_from_row(row: Mapping[str, Any]) -> RoomRecord:
    """Convert a gateway room row into a ``RoomRecord``; absent numbers count as zero."""
    return RoomRecord(
        id=int(row["ID"]),
        hotel_id=int(row["hotel_id"]),
        title=row.get("post_title"),
        price=_number(row, "price", float, 0.0),
        surface=_number(row, "surface", float, 0.0),
        bedrooms=_number(row, "bedrooms", int),
        bathrooms=_number(row, "bathrooms", int),
        type=str(row.get("type") or ""),
        image=row.get("image") or None,
    )


def unmet_criteria(room: RoomRecord, criteria: FilterCriteria) -> List[str]:
    """Names of the active criteria the room fails; empty when it qualifies."""
    unmet: List[str] = []
    if not criteria.surface.contains(room.surface):
        unmet.append("surface")
    if not criteria.price.contains(room.price):
        unmet.append("price")
    if criteria.bedrooms is not None and room.bedrooms < criteria.bedrooms:
        unmet.append("bedrooms")
    if criteria.bathrooms is not None and room.bathrooms < criteria.bathrooms:
        unmet.append("bathrooms")
    if criteria.types and room.type not in criteria.types:
        unmet.append("type")
    return unmet


def room_matches(room: RoomRecord, criteria: FilterCriteria) -> bool:
    return not unmet_criteria(room, criteria)


class RoomFilterEngine:
    """Cheapest qualifying room, ties going to the first room in input order.

    With ``price_comparison="truncate"`` prices are compared in whole units
    (80.9 and 80.1 tie), which is how listings have always been ranked.
    Range checks always use the exact price.
    """

    def __init__(self, price_comparison: PriceComparison = "truncate") -> None:
        if price_comparison not in ("truncate", "exact"):
            raise ValueError(f"Unsupported price comparison '{price_comparison}'")
        self.price_comparison = price_comparison

    def _price_key(self, room: RoomRecord) -> float:
        if self.price_comparison == "truncate":
            return int(room.price)
        return room.price

    def qualifying(self, rooms: Sequence[RoomRecord], criteria: FilterCriteria) -> List[RoomRecord]:
        qualified: List[RoomRecord] = []
        for room in rooms:
            unmet = unmet_criteria(room, criteria)
            if unmet:
                logger.debug("Room %s of hotel %s rejected on %s", room.id, room.hotel_id, ", ".join(unmet))
                continue
            qualified.append(room)
        return qualified

    def filter(self, rooms: Sequence[RoomRecord], criteria: FilterCriteria) -> Matched[RoomRecord] | Excluded:
        qualified = self.qualifying(rooms, criteria)
        if not qualified:
            return Excluded(f"none of {len(rooms)} rooms match the criteria")

        cheapest = qualified[0]
        for room in qualified[1:]:
            # strict comparison keeps the first room on ties
            if self._price_key(room) < self._price_key(cheapest):
                cheapest = room
        return Matched(cheapest)

    def select_cheapest(self, rooms: Sequence[RoomRecord], criteria: FilterCriteria) -> RoomRecord:
        """Like ``filter`` but raises ``NoMatchError`` when no room qualifies."""
        outcome = self.filter(rooms, criteria)
        if isinstance(outcome, Excluded):
            raise NoMatchError(outcome.reason)
        return outcome.value
