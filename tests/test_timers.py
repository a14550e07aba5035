from __future__ import annotations

import pytest

from hotel_listing.core.timers import Timers


def test_overlapping_timers_with_the_same_name() -> None:
    timers = Timers()

    first = timers.start("rooms")
    second = timers.start("rooms")
    timers.stop("rooms", second)
    timers.stop("rooms", first)

    summary = timers.summary()
    assert summary["rooms"]["calls"] == 2
    assert summary["rooms"]["total_ms"] >= summary["rooms"]["max_ms"] >= 0


def test_timed_context_records_on_error() -> None:
    timers = Timers()

    with pytest.raises(RuntimeError):
        with timers.timed("meta"):
            raise RuntimeError("boom")

    assert timers.summary()["meta"]["calls"] == 1


def test_stopping_unknown_timer_fails() -> None:
    timers = Timers()
    with pytest.raises(KeyError):
        timers.stop("reviews", 99)


def test_reset_clears_totals() -> None:
    timers = Timers()
    with timers.timed("hotels"):
        pass
    timers.reset()
    assert timers.summary() == {}


def test_reset_keeps_running_timers_stoppable() -> None:
    timers = Timers()
    timer_id = timers.start("rooms")
    timers.reset()
    timers.stop("rooms", timer_id)
    assert timers.summary()["rooms"]["calls"] == 1
