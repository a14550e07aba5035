"""Hotel listing pipeline: metadata, reviews, cheapest room and distance filtering."""

from .exceptions import (
    DataIntegrityError,
    GatewayError,
    ListingError,
    ListingTimeoutError,
    NoMatchError,
)
from .models import (
    Address,
    Excluded,
    FilterCriteria,
    GeoPoint,
    HotelProfile,
    HotelRecord,
    Matched,
    ReviewStats,
    RoomRecord,
    ValueRange,
)
from .criteria import build_criteria
from .distance import DistanceEvaluator, compute_distance
from .metadata import MetadataResolver
from .reviews import ReviewAggregator
from .rooms import RoomFilterEngine
from .listing import ListingAssembler

__all__ = [
    "Address",
    "DataIntegrityError",
    "DistanceEvaluator",
    "Excluded",
    "FilterCriteria",
    "GatewayError",
    "GeoPoint",
    "HotelProfile",
    "HotelRecord",
    "ListingAssembler",
    "ListingError",
    "ListingTimeoutError",
    "Matched",
    "MetadataResolver",
    "NoMatchError",
    "ReviewAggregator",
    "ReviewStats",
    "RoomFilterEngine",
    "RoomRecord",
    "ValueRange",
    "build_criteria",
    "compute_distance",
]
