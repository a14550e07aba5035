"""Review count and rounded average rating per hotel."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Optional

from hotel_listing.storage.gateway import DataStoreGateway

from .models import ReviewStats


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero (4.5 -> 5, -4.5 -> -5)."""
    return int(Decimal(repr(float(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def stats_from_row(row: Mapping[str, Any]) -> ReviewStats:
    count = int(row.get("count") or 0)
    if count == 0:
        return ReviewStats(count=0, average=None)
    average: Optional[Any] = row.get("average")
    if average is None:
        return ReviewStats(count=count, average=None)
    return ReviewStats(count=count, average=round_half_away_from_zero(float(average)))


class ReviewAggregator:
    def __init__(self, gateway: DataStoreGateway) -> None:
        self._gateway = gateway

    async def aggregate(self, hotel_id: int) -> ReviewStats:
        return stats_from_row(await self._gateway.fetch_review_stats(hotel_id))
