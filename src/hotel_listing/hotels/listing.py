"""Assemble filtered, fully enriched hotel listings."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Literal, Mapping, Optional, Sequence, Union

from hotel_listing.core.timers import Timers
from hotel_listing.storage.gateway import BulkDataStoreGateway, DataStoreGateway, PreloadedGateway

from .distance import DistanceEvaluator
from .exceptions import DataIntegrityError, ListingTimeoutError
from .metadata import MetadataResolver
from .models import Excluded, FilterCriteria, HotelRecord, Matched
from .reviews import ReviewAggregator
from .rooms import PriceComparison, RoomFilterEngine, room_from_row

if TYPE_CHECKING:  # pragma: no cover - import for type checking only
    from hotel_listing.config.settings import Settings

logger = logging.getLogger(__name__)

IntegrityPolicy = Literal["skip", "raise"]
HotelOutcome = Union[Matched[HotelRecord], Excluded]


@dataclass(frozen=True)
class _Sources:
    gateway: DataStoreGateway
    metadata: MetadataResolver
    reviews: ReviewAggregator

    @classmethod
    def over(cls, gateway: DataStoreGateway) -> "_Sources":
        return cls(gateway=gateway, metadata=MetadataResolver(gateway), reviews=ReviewAggregator(gateway))


class ListingAssembler:
    """Lists hotels matching ``FilterCriteria``.

    Every hotel runs through metadata, reviews, cheapest room and distance in
    that order. A hotel failing a filter comes back as ``Excluded`` and is left
    out; the rest of the listing is unaffected. Results keep the order in which
    the gateway returned the hotels, whatever ``max_concurrency`` is.
    ``timers`` are reset at the start of each listing, so their summary covers
    the latest request only.
    """

    def __init__(
        self,
        gateway: DataStoreGateway,
        *,
        price_comparison: PriceComparison = "truncate",
        integrity_policy: IntegrityPolicy = "skip",
        max_concurrency: int = 1,
        batch_loading: bool = False,
        request_timeout_s: Optional[float] = None,
        timers: Optional[Timers] = None,
    ) -> None:
        if integrity_policy not in ("skip", "raise"):
            raise ValueError(f"Unsupported integrity policy '{integrity_policy}'")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.gateway = gateway
        self.integrity_policy = integrity_policy
        self.max_concurrency = max_concurrency
        self.batch_loading = batch_loading
        self.request_timeout_s = request_timeout_s
        self.room_filter = RoomFilterEngine(price_comparison)
        self.distance = DistanceEvaluator()
        self.timers = timers or Timers()

    @classmethod
    def from_settings(cls, gateway: DataStoreGateway, settings: "Settings") -> "ListingAssembler":
        return cls(
            gateway,
            price_comparison=settings.price_comparison,
            integrity_policy=settings.integrity_policy,
            max_concurrency=settings.max_concurrency,
            batch_loading=settings.batch_loading,
            request_timeout_s=settings.request_timeout_s,
        )

    async def list(self, criteria: Optional[FilterCriteria] = None) -> List[HotelRecord]:
        criteria = criteria or FilterCriteria()
        if self.request_timeout_s is None:
            return await self._list(criteria)
        try:
            return await asyncio.wait_for(self._list(criteria), timeout=self.request_timeout_s)
        except asyncio.TimeoutError as exc:
            raise ListingTimeoutError(f"Listing exceeded {self.request_timeout_s}s deadline") from exc

    async def evaluate(self, row: Mapping[str, Any], criteria: FilterCriteria) -> HotelOutcome:
        """Run a single hotel row through the pipeline against the injected gateway."""
        return await self._evaluate(_Sources.over(self.gateway), row, criteria)

    async def _list(self, criteria: FilterCriteria) -> List[HotelRecord]:
        self.timers.reset()
        with self.timers.timed("hotels"):
            rows = await self.gateway.fetch_hotels()
        sources = _Sources.over(await self._source_for(rows))

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _guarded(row: Mapping[str, Any]) -> HotelOutcome:
            async with semaphore:
                return await self._evaluate(sources, row, criteria)

        tasks = [asyncio.ensure_future(_guarded(row)) for row in rows]
        try:
            outcomes = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        results = [outcome.value for outcome in outcomes if isinstance(outcome, Matched)]
        logger.info("Listed %s of %s hotels", len(results), len(rows))
        self.timers.log_summary()
        return results

    async def _source_for(self, rows: Sequence[Mapping[str, Any]]) -> DataStoreGateway:
        if not self.batch_loading:
            return self.gateway
        if not isinstance(self.gateway, BulkDataStoreGateway):
            logger.warning(
                "Batch loading requested but %s has no bulk reads; falling back to per-hotel queries",
                type(self.gateway).__name__,
            )
            return self.gateway
        with self.timers.timed("preload"):
            return await PreloadedGateway.load(self.gateway, rows)

    async def _evaluate(self, sources: _Sources, row: Mapping[str, Any], criteria: FilterCriteria) -> HotelOutcome:
        hotel = HotelRecord(id=int(row["ID"]), name=str(row.get("display_name") or ""))
        try:
            return await self._enrich(sources, hotel, criteria)
        except DataIntegrityError as exc:
            if self.integrity_policy == "raise":
                raise
            logger.warning("Skipping hotel %s (%s): %s", hotel.id, hotel.name, exc)
            return Excluded(str(exc))

    async def _enrich(self, sources: _Sources, hotel: HotelRecord, criteria: FilterCriteria) -> HotelOutcome:
        with self.timers.timed("meta"):
            profile = await sources.metadata.resolve(hotel.id)
        hotel.apply_profile(profile)

        with self.timers.timed("reviews"):
            stats = await sources.reviews.aggregate(hotel.id)
        hotel.apply_reviews(stats)

        with self.timers.timed("rooms"):
            room_rows = await sources.gateway.fetch_rooms(hotel.id)
        try:
            rooms = [room_from_row(room_row) for room_row in room_rows]
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise DataIntegrityError(hotel.id, detail=f"malformed room row: {exc}") from exc

        room_outcome = self.room_filter.filter(rooms, criteria)
        if isinstance(room_outcome, Excluded):
            logger.debug("Hotel %s excluded: %s", hotel.id, room_outcome.reason)
            return room_outcome
        hotel.cheapest_room = room_outcome.value

        origin, radius = criteria.origin, criteria.radius
        if origin is not None and radius is not None:
            distance_outcome = self.distance.check(origin, profile.location, radius)
            if isinstance(distance_outcome, Excluded):
                logger.debug("Hotel %s excluded: %s", hotel.id, distance_outcome.reason)
                return distance_outcome
            hotel.distance = distance_outcome.value

        return Matched(hotel)
