"""Dataclasses for hotel listings, filter criteria and per-hotel outcomes."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class ValueRange:
    """Inclusive numeric range; either bound may be omitted."""

    min: Optional[float] = None
    max: Optional[float] = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """Caller supplied constraints for a listing request.

    ``search`` is carried for callers but does not filter anything. The geo
    filter only applies when both ``origin`` and ``radius`` are set.
    """

    search: Optional[str] = None
    origin: Optional[GeoPoint] = None
    radius: Optional[float] = None
    price: ValueRange = field(default_factory=ValueRange)
    surface: ValueRange = field(default_factory=ValueRange)
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    types: FrozenSet[str] = frozenset()

    @property
    def geo_filter_active(self) -> bool:
        return self.origin is not None and self.radius is not None

    def to_dict(self) -> dict[str, object]:
        return {
            "search": self.search,
            "lat": self.origin.lat if self.origin else None,
            "lng": self.origin.lng if self.origin else None,
            "distance": self.radius,
            "price": {"min": self.price.min, "max": self.price.max},
            "surface": {"min": self.surface.min, "max": self.surface.max},
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "types": sorted(self.types),
        }


@dataclass(frozen=True, slots=True)
class RoomRecord:
    """A bookable room; read-only once loaded from the store."""

    id: int
    hotel_id: int
    price: float
    surface: float
    bedrooms: int
    bathrooms: int
    type: str
    title: Optional[str] = None
    image: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "hotel_id": self.hotel_id,
            "title": self.title,
            "price": self.price,
            "surface": self.surface,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "type": self.type,
            "image": self.image,
        }


@dataclass(frozen=True, slots=True)
class ReviewStats:
    """Review aggregate; ``average`` is None whenever ``count`` is zero."""

    count: int = 0
    average: Optional[int] = None

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError("Review count cannot be negative")
        if self.count == 0 and self.average is not None:
            raise ValueError("A hotel without reviews cannot have an average rating")


@dataclass(slots=True)
class Address:
    line1: str = ""
    line2: str = ""
    city: str = ""
    zip: str = ""
    country: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "zip": self.zip,
            "country": self.country,
        }


@dataclass(slots=True)
class HotelProfile:
    """Structured view of a hotel's scattered key/value attributes."""

    address: Address
    geo_lat: float
    geo_lng: float
    cover_image: str
    phone: str

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(self.geo_lat, self.geo_lng)


@dataclass(slots=True)
class HotelRecord:
    """A hotel as returned by a listing request."""

    id: int
    name: str
    address: Address = field(default_factory=Address)
    geo_lat: Optional[float] = None
    geo_lng: Optional[float] = None
    cover_image: Optional[str] = None
    phone: Optional[str] = None
    rating: Optional[int] = None
    rating_count: int = 0
    cheapest_room: Optional[RoomRecord] = None
    distance: Optional[float] = None

    def apply_profile(self, profile: HotelProfile) -> None:
        self.address = profile.address
        self.geo_lat = profile.geo_lat
        self.geo_lng = profile.geo_lng
        self.cover_image = profile.cover_image
        self.phone = profile.phone

    def apply_reviews(self, stats: ReviewStats) -> None:
        self.rating = stats.average
        self.rating_count = stats.count

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address.to_dict(),
            "geo_lat": self.geo_lat,
            "geo_lng": self.geo_lng,
            "cover_image": self.cover_image,
            "phone": self.phone,
            "rating": self.rating,
            "rating_count": self.rating_count,
            "cheapest_room": self.cheapest_room.to_dict() if self.cheapest_room else None,
            "distance": self.distance,
        }

    @classmethod
    def from_iterable(cls, records: Iterable["HotelRecord"]) -> List[dict[str, object]]:
        return [record.to_dict() for record in records]


@dataclass(frozen=True, slots=True)
class Matched(Generic[T]):
    """A filter step passed; carries its value onwards."""

    value: T


@dataclass(frozen=True, slots=True)
class Excluded:
    """A filter step rejected the hotel. Not an error."""

    reason: str
