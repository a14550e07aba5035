"""Runtime configuration for hotel listings.

Relies on pydantic-settings so that environment variables (prefixed with ``LISTING_``)
can override defaults. See `.env.example` for common values.
"""
from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


VALID_JOURNAL_MODES = frozenset({"delete", "truncate", "persist", "memory", "wal", "off"})
VALID_SYNCHRONOUS_MODES = frozenset({"off", "normal", "full", "extra"})


class Settings(BaseSettings):
    """Captures runtime configuration for the listing service."""

    sqlite_path: Path = Field(
        default=Path("data/hotels.sqlite3"), description="SQLite database holding hotels, rooms and reviews"
    )
    sqlite_busy_timeout_ms: int = Field(default=2000, description="SQLite busy timeout in milliseconds")
    sqlite_journal_mode: Optional[str] = Field(default="wal", description="SQLite journal_mode pragma")
    sqlite_synchronous: Optional[str] = Field(default="normal", description="SQLite synchronous pragma")
    table_prefix: str = Field(default="wp_", description="Prefix applied to every table name")

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("data/logs"))
    output_dir: Path = Field(default=Path("data/listings"), description="Where listing JSON files are written")

    integrity_policy: Literal["skip", "raise"] = Field(
        default="skip",
        description="'skip' drops hotels with missing metadata, 'raise' fails the whole listing",
    )
    price_comparison: Literal["truncate", "exact"] = Field(
        default="truncate",
        description="'truncate' compares whole price units when picking the cheapest room",
    )
    max_concurrency: int = Field(default=1, description="Hotels evaluated concurrently per listing")
    batch_loading: bool = Field(
        default=False, description="Load attributes, reviews and rooms for all hotels in bulk"
    )
    request_timeout_s: Optional[float] = Field(
        default=None, description="Deadline for a whole listing request; None disables it"
    )
    gateway_retries: int = Field(default=2, description="Retries for transient SQLite read failures")
    gateway_retry_backoff_s: float = Field(default=0.05, description="Initial retry backoff in seconds")

    model_config = SettingsConfigDict(
        env_prefix="LISTING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    @field_validator("sqlite_path", "log_dir", "output_dir", mode="before")
    def _expand_path(cls, value: str | Path) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        return Path(value).expanduser()

    @field_validator("sqlite_journal_mode", mode="before")
    def _validate_journal_mode(cls, value: str | None) -> Optional[str]:
        if value in (None, ""):
            return None
        mode = str(value).strip().lower()
        if mode not in VALID_JOURNAL_MODES:
            raise ValueError(f"sqlite_journal_mode must be one of {sorted(VALID_JOURNAL_MODES)}")
        return mode

    @field_validator("sqlite_synchronous", mode="before")
    def _validate_synchronous(cls, value: str | None) -> Optional[str]:
        if value in (None, ""):
            return None
        mode = str(value).strip().lower()
        if mode not in VALID_SYNCHRONOUS_MODES:
            raise ValueError(f"sqlite_synchronous must be one of {sorted(VALID_SYNCHRONOUS_MODES)}")
        return mode

    @field_validator("max_concurrency")
    def _validate_concurrency(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_concurrency must be at least 1")
        return value

    @field_validator("request_timeout_s", mode="before")
    def _parse_timeout(cls, value: object) -> Optional[float]:
        if value in (None, ""):
            return None
        timeout = float(value)  # type: ignore[arg-type]
        if timeout <= 0:
            raise ValueError("request_timeout_s must be positive")
        return timeout

    @field_validator("gateway_retries")
    def _validate_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("gateway_retries cannot be negative")
        return value

    @field_validator("gateway_retry_backoff_s")
    def _validate_backoff(cls, value: float) -> float:
        if value < 0:
            raise ValueError("gateway_retry_backoff_s cannot be negative")
        return value

    def ensure_directories(self) -> None:
        """Create directories that must exist at runtime."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)

    def store_kwargs(self) -> dict[str, object]:
        return {
            "busy_timeout_ms": self.sqlite_busy_timeout_ms,
            "journal_mode": self.sqlite_journal_mode,
            "synchronous": self.sqlite_synchronous,
            "table_prefix": self.table_prefix,
            "retries": self.gateway_retries,
            "retry_backoff_s": self.gateway_retry_backoff_s,
        }
