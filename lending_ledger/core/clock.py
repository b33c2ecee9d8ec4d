"""Tick sources passed explicitly into time-sensitive ledger operations."""

from datetime import datetime, timezone
import threading
from typing import Callable, Optional

from ..common.risk_math import SECONDS_PER_TICK

TickSource = Callable[[], int]


def _now_epoch() -> int:
    """Return current UTC epoch seconds."""
    return int(datetime.now(timezone.utc).timestamp())


class ManualTickSource:
    """Deterministic tick source driven by tests and replays."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("start tick must be >= 0")
        self._tick = start
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            return self._tick

    def advance(self, ticks: int = 1) -> int:
        if ticks < 0:
            raise ValueError("tick source is monotonic")
        with self._lock:
            self._tick += ticks
            return self._tick

    def set(self, tick: int) -> None:
        with self._lock:
            if tick < self._tick:
                raise ValueError("tick source is monotonic")
            self._tick = tick


class WallClockTickSource:
    """Ticks elapsed since *genesis_epoch*, one tick per *seconds_per_tick*."""

    def __init__(
        self,
        genesis_epoch: int = 0,
        seconds_per_tick: int = SECONDS_PER_TICK,
        now: Optional[Callable[[], int]] = None,
    ) -> None:
        if seconds_per_tick <= 0:
            raise ValueError("seconds_per_tick must be > 0")
        self._genesis_epoch = genesis_epoch
        self._seconds_per_tick = seconds_per_tick
        self._now = now or _now_epoch

    def __call__(self) -> int:
        elapsed = self._now() - self._genesis_epoch
        return max(elapsed, 0) // self._seconds_per_tick
