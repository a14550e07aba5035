"""Errors raised while assembling hotel listings."""
from __future__ import annotations

from typing import Iterable


class ListingError(RuntimeError):
    """Base class for listing failures."""


class NoMatchError(ListingError):
    """Raised when a hotel fails the active criteria. Callers convert it into an exclusion."""


class DataIntegrityError(ListingError):
    """Raised when a hotel's stored attributes are missing or malformed."""

    def __init__(self, hotel_id: int, missing: Iterable[str] = (), detail: str | None = None) -> None:
        self.hotel_id = hotel_id
        self.missing = tuple(missing)
        self.detail = detail
        parts = []
        if self.missing:
            parts.append(f"missing attributes: {', '.join(self.missing)}")
        if detail:
            parts.append(detail)
        super().__init__(f"Hotel {hotel_id} has invalid metadata ({'; '.join(parts) or 'unknown'})")


class GatewayError(ListingError):
    """Raised when the data store cannot serve a request."""


class ListingTimeoutError(ListingError):
    """Raised when a listing request exceeds its deadline."""
