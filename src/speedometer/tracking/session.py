from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from speedometer.geometry.distance import haversine_m
from speedometer.utils.types import RawFix


logger = logging.getLogger("speedometer.tracking.session")


@dataclass(frozen=True)
class SessionStats:
    started_at_s: Optional[float]
    fix_count: int
    distance_m: float
    last_timestamp_ms: Optional[int]

    def elapsed_s(self, now_s: float) -> float:
        if self.started_at_s is None:
            return 0.0
        return max(0.0, float(now_s) - float(self.started_at_s))


EMPTY_SESSION = SessionStats(started_at_s=None, fix_count=0, distance_m=0.0, last_timestamp_ms=None)


class SessionTracker:
    """Per-session counters: start time, fix count and distance travelled."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._started_at_s: Optional[float] = None
        self._fix_count = 0
        self._distance_m = 0.0
        self._last_latlon: Optional[Tuple[float, float]] = None
        self._last_ts_ms: Optional[int] = None

    def reset(self) -> SessionStats:
        self._started_at_s = float(self._clock())
        self._fix_count = 0
        self._distance_m = 0.0
        self._last_latlon = None
        self._last_ts_ms = None
        return self.snapshot()

    def update(self, fix: RawFix) -> SessionStats:
        if self._last_ts_ms is not None and fix.timestamp_ms < self._last_ts_ms:
            logger.warning("Fix timestamp went backwards: %d < %d", fix.timestamp_ms, self._last_ts_ms)
        if self._last_latlon is not None:
            self._distance_m += haversine_m(self._last_latlon[0], self._last_latlon[1], fix.latitude, fix.longitude)
        self._last_latlon = (float(fix.latitude), float(fix.longitude))
        self._last_ts_ms = int(fix.timestamp_ms)
        self._fix_count += 1
        return self.snapshot()

    def snapshot(self) -> SessionStats:
        return SessionStats(
            started_at_s=self._started_at_s,
            fix_count=self._fix_count,
            distance_m=float(self._distance_m),
            last_timestamp_ms=self._last_ts_ms,
        )
