"""Fold a hotel's key/value attribute rows into a structured profile."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping

from hotel_listing.storage.gateway import DataStoreGateway

from .exceptions import DataIntegrityError
from .models import Address, HotelProfile

logger = logging.getLogger(__name__)

ADDRESS_KEYS: Dict[str, str] = {
    "line1": "address_1",
    "line2": "address_2",
    "city": "address_city",
    "zip": "address_zip",
    "country": "address_country",
}
GEO_LAT_KEY = "geo_lat"
GEO_LNG_KEY = "geo_lng"
COVER_IMAGE_KEY = "coverImage"
PHONE_KEY = "phone"

REQUIRED_KEYS: tuple[str, ...] = (
    *ADDRESS_KEYS.values(),
    GEO_LAT_KEY,
    GEO_LNG_KEY,
    COVER_IMAGE_KEY,
    PHONE_KEY,
)


def fold_attributes(rows: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Collapse ``meta_key``/``meta_value`` rows; a repeated key keeps its last value."""
    folded: Dict[str, Any] = {}
    for row in rows:
        key = row.get("meta_key")
        if key is None:
            continue
        folded[str(key)] = row.get("meta_value")
    return folded


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_coordinate(hotel_id: int, key: str, value: Any, bound: float) -> float:
    try:
        coordinate = float(value)
    except (TypeError, ValueError) as exc:
        raise DataIntegrityError(hotel_id, detail=f"{key}={value!r} is not a number") from exc
    if not -bound <= coordinate <= bound:
        raise DataIntegrityError(hotel_id, detail=f"{key}={coordinate} is out of range")
    return coordinate


def build_profile(hotel_id: int, attributes: Mapping[str, Any]) -> HotelProfile:
    """Build a profile from folded attributes, failing on any missing required key."""
    missing = [key for key in REQUIRED_KEYS if key not in attributes]
    if missing:
        raise DataIntegrityError(hotel_id, missing)

    address = Address(**{field: _as_text(attributes[key]) for field, key in ADDRESS_KEYS.items()})
    return HotelProfile(
        address=address,
        geo_lat=_parse_coordinate(hotel_id, GEO_LAT_KEY, attributes[GEO_LAT_KEY], 90.0),
        geo_lng=_parse_coordinate(hotel_id, GEO_LNG_KEY, attributes[GEO_LNG_KEY], 180.0),
        cover_image=_as_text(attributes[COVER_IMAGE_KEY]),
        phone=_as_text(attributes[PHONE_KEY]),
    )


class MetadataResolver:
    """Loads attribute rows through the gateway and folds them into a ``HotelProfile``."""

    def __init__(self, gateway: DataStoreGateway) -> None:
        self._gateway = gateway

    async def resolve(self, hotel_id: int) -> HotelProfile:
        rows = await self._gateway.fetch_attributes(hotel_id)
        logger.debug("Hotel %s: %s attribute rows", hotel_id, len(rows))
        return build_profile(hotel_id, fold_attributes(rows))
