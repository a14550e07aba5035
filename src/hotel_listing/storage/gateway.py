"""Data store gateway contract and an in-memory, batch-loaded implementation."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


class DataStoreGateway(Protocol):
    """Reads hotels and their related rows.

    Rows are plain mappings:

    * hotels: ``ID``, ``display_name``
    * attributes: ``meta_key``, ``meta_value``
    * review stats: ``count``, ``average`` (raw mean, ``None`` without reviews)
    * rooms: ``ID``, ``hotel_id``, ``post_title``, ``price``, ``surface``,
      ``bedrooms``, ``bathrooms``, ``type``, ``image``
    """

    async def fetch_hotels(self) -> List[Row]: ...

    async def fetch_attributes(self, hotel_id: int) -> List[Row]: ...

    async def fetch_review_stats(self, hotel_id: int) -> Row: ...

    async def fetch_rooms(self, hotel_id: int) -> List[Row]: ...


@runtime_checkable
class BulkDataStoreGateway(Protocol):
    """Optional bulk reads keyed by hotel id."""

    async def fetch_attributes_bulk(self, hotel_ids: Sequence[int]) -> Dict[int, List[Row]]: ...

    async def fetch_review_stats_bulk(self, hotel_ids: Sequence[int]) -> Dict[int, Row]: ...

    async def fetch_rooms_bulk(self, hotel_ids: Sequence[int]) -> Dict[int, List[Row]]: ...


_EMPTY_STATS: Row = {"count": 0, "average": None}


class PreloadedGateway:
    """Serves per-hotel reads from rows loaded up front in three bulk queries."""

    def __init__(
        self,
        hotels: Sequence[Row],
        *,
        attributes: Mapping[int, List[Row]],
        review_stats: Mapping[int, Row],
        rooms: Mapping[int, List[Row]],
    ) -> None:
        self._hotels = [dict(row) for row in hotels]
        self._attributes = attributes
        self._review_stats = review_stats
        self._rooms = rooms

    @classmethod
    async def load(
        cls,
        gateway: BulkDataStoreGateway,
        hotels: Sequence[Row],
    ) -> "PreloadedGateway":
        hotel_ids = [int(row["ID"]) for row in hotels]
        attributes = await gateway.fetch_attributes_bulk(hotel_ids)
        review_stats = await gateway.fetch_review_stats_bulk(hotel_ids)
        rooms = await gateway.fetch_rooms_bulk(hotel_ids)
        logger.debug(
            "Preloaded %s hotels (%s attribute rows, %s rooms)",
            len(hotel_ids),
            sum(len(rows) for rows in attributes.values()),
            sum(len(rows) for rows in rooms.values()),
        )
        return cls(hotels, attributes=attributes, review_stats=review_stats, rooms=rooms)

    async def fetch_hotels(self) -> List[Row]:
        return list(self._hotels)

    async def fetch_attributes(self, hotel_id: int) -> List[Row]:
        return list(self._attributes.get(hotel_id, []))

    async def fetch_review_stats(self, hotel_id: int) -> Row:
        stats: Optional[Row] = self._review_stats.get(hotel_id)
        return dict(stats) if stats is not None else dict(_EMPTY_STATS)

    async def fetch_rooms(self, hotel_id: int) -> List[Row]:
        return list(self._rooms.get(hotel_id, []))
