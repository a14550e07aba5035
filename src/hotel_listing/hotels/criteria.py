"""Build ``FilterCriteria`` from loosely typed request arguments."""
from __future__ import annotations

import math
from typing import Any, FrozenSet, Iterable, Mapping, Optional

from .models import FilterCriteria, GeoPoint, ValueRange


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _optional_float(value: Any, name: str) -> Optional[float]:
    if _blank(value):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    return number


def _optional_int(value: Any, name: str) -> Optional[int]:
    number = _optional_float(value, name)
    if number is None:
        return None
    if not number.is_integer():
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    return int(number)


def _range(value: Any, name: str) -> ValueRange:
    if _blank(value):
        return ValueRange()
    if not isinstance(value, Mapping):
        raise TypeError(f"{name} must be a mapping with 'min' and/or 'max'")
    return ValueRange(
        min=_optional_float(value.get("min"), f"{name}.min"),
        max=_optional_float(value.get("max"), f"{name}.max"),
    )


def _types(value: Any) -> FrozenSet[str]:
    if _blank(value):
        return frozenset()
    items: Iterable[Any]
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, Iterable):
        items = value
    else:
        raise TypeError("types must be provided as a comma-separated string or list")
    return frozenset(str(item).strip() for item in items if str(item).strip())


def _first(args: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in args and not _blank(args[key]):
            return args[key]
    return None


def build_criteria(args: Mapping[str, Any] | None = None) -> FilterCriteria:
    """Accepts ``search``, ``lat``, ``lng``, ``distance``, ``price``/``surface``
    ranges, ``rooms``/``bedrooms``, ``bathRooms``/``bathrooms`` and ``types``.

    An origin is only set when both ``lat`` and ``lng`` are present.
    """
    args = args or {}
    lat = _optional_float(args.get("lat"), "lat")
    lng = _optional_float(args.get("lng"), "lng")
    origin = GeoPoint(lat, lng) if lat is not None and lng is not None else None

    radius = _optional_float(args.get("distance"), "distance")
    if radius is not None and radius < 0:
        raise ValueError("distance cannot be negative")

    search = args.get("search")
    return FilterCriteria(
        search=None if _blank(search) else str(search).strip(),
        origin=origin,
        radius=radius,
        price=_range(args.get("price"), "price"),
        surface=_range(args.get("surface"), "surface"),
        bedrooms=_optional_int(_first(args, "bedrooms", "rooms"), "bedrooms"),
        bathrooms=_optional_int(_first(args, "bathrooms", "bathRooms"), "bathrooms"),
        types=_types(args.get("types")),
    )
