from __future__ import annotations

import pytest
from pydantic import ValidationError

from hotel_listing.config.settings import Settings


def test_settings_defaults(tmp_path) -> None:
    settings = Settings(_env_file=None, sqlite_path=tmp_path / "db" / "hotels.sqlite3")

    assert settings.integrity_policy == "skip"
    assert settings.price_comparison == "truncate"
    assert settings.max_concurrency == 1
    assert settings.batch_loading is False
    assert settings.request_timeout_s is None
    assert settings.sqlite_journal_mode == "wal"


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LISTING_MAX_CONCURRENCY", "4")
    monkeypatch.setenv("LISTING_INTEGRITY_POLICY", "raise")
    monkeypatch.setenv("LISTING_REQUEST_TIMEOUT_S", "2.5")
    monkeypatch.setenv("LISTING_SQLITE_JOURNAL_MODE", "DELETE")

    settings = Settings(_env_file=None)

    assert settings.max_concurrency == 4
    assert settings.integrity_policy == "raise"
    assert settings.request_timeout_s == 2.5
    assert settings.sqlite_journal_mode == "delete"


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_concurrency": 0},
        {"integrity_policy": "ignore"},
        {"price_comparison": "rounded"},
        {"request_timeout_s": -1},
        {"gateway_retries": -1},
        {"sqlite_synchronous": "sometimes"},
    ],
)
def test_settings_reject_invalid_values(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_settings_ensure_directories(tmp_path) -> None:
    settings = Settings(
        _env_file=None,
        sqlite_path=tmp_path / "storage" / "hotels.sqlite3",
        log_dir=tmp_path / "logs",
        output_dir=tmp_path / "out",
    )

    settings.ensure_directories()

    assert settings.sqlite_path.parent.exists()
    assert settings.log_dir.exists()
    assert settings.output_dir.exists()


def test_store_kwargs_follow_settings() -> None:
    settings = Settings(_env_file=None, table_prefix="hl_", gateway_retries=5, sqlite_synchronous="full")
    kwargs = settings.store_kwargs()
    assert kwargs["table_prefix"] == "hl_"
    assert kwargs["retries"] == 5
    assert kwargs["synchronous"] == "full"
