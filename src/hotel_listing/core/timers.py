"""Named wall-clock timers used to profile gateway round-trips."""
from __future__ import annotations

import itertools
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TimerTotals:
    """Accumulated timings for one timer name."""

    calls: int = 0
    total_s: float = 0.0
    max_s: float = 0.0

    def add(self, elapsed: float) -> None:
        self.calls += 1
        self.total_s += elapsed
        if elapsed > self.max_s:
            self.max_s = elapsed

    def to_dict(self) -> dict[str, object]:
        return {
            "calls": self.calls,
            "total_ms": round(self.total_s * 1000, 3),
            "max_ms": round(self.max_s * 1000, 3),
        }


class Timers:
    """Start/stop timers keyed by name.

    Several timers with the same name may run at once (concurrent hotels), so
    ``start`` hands back an id that must be passed to ``stop``.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._running: Dict[Tuple[str, int], float] = {}
        self._totals: Dict[str, TimerTotals] = {}

    def start(self, name: str) -> int:
        timer_id = next(self._ids)
        self._running[(name, timer_id)] = time.perf_counter()
        return timer_id

    def stop(self, name: str, timer_id: int) -> float:
        started = self._running.pop((name, timer_id), None)
        if started is None:
            raise KeyError(f"Timer '{name}' #{timer_id} was never started")
        elapsed = time.perf_counter() - started
        self._totals.setdefault(name, TimerTotals()).add(elapsed)
        return elapsed

    @contextmanager
    def timed(self, name: str) -> Iterator[None]:
        timer_id = self.start(name)
        try:
            yield
        finally:
            self.stop(name, timer_id)

    def summary(self) -> dict[str, dict[str, object]]:
        return {name: totals.to_dict() for name, totals in sorted(self._totals.items())}

    def reset(self) -> None:
        """Drop accumulated totals; timers still running can be stopped as usual."""
        self._totals.clear()

    def log_summary(self, level: int = logging.DEBUG) -> None:
        if not logger.isEnabledFor(level):
            return
        for name, totals in self.summary().items():
            logger.log(
                level,
                "Timer %s: %s calls, %s ms total, %s ms max",
                name,
                totals["calls"],
                totals["total_ms"],
                totals["max_ms"],
            )
