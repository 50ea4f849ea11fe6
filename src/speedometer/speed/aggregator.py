from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from speedometer.speed.history import SpeedHistory
from speedometer.speed.units import ZERO_SPEED, Speed


@dataclass(frozen=True)
class AggregatorConfig:
    history_size: int = 50

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AggregatorConfig":
        size = int(d.get("size", 50))
        if size < 1:
            raise ValueError("history.size must be >= 1")
        return AggregatorConfig(history_size=size)


@dataclass(frozen=True)
class AggregateSnapshot:
    current: Speed
    maximum: Speed
    average: Speed
    count: int


class RollingSpeedAggregator:
    """Running maximum and moving average over the most recent readings.

    History holds km/h values; the average is converted back to a
    :class:`Speed` on every :meth:`record`.
    """

    def __init__(self, cfg: AggregatorConfig = AggregatorConfig()) -> None:
        self._cfg = cfg
        self._history = SpeedHistory(cfg.history_size)
        self._max: Speed = ZERO_SPEED
        self._avg: Speed = ZERO_SPEED

    @property
    def max_speed(self) -> Speed:
        return self._max

    @property
    def average_speed(self) -> Speed:
        return self._avg

    @property
    def history(self) -> List[float]:
        return self._history.values()

    @property
    def count(self) -> int:
        return len(self._history)

    def reset(self) -> None:
        self._history.clear()
        self._max = ZERO_SPEED
        self._avg = ZERO_SPEED

    def record(self, speed: Speed) -> AggregateSnapshot:
        self._history.append(speed.kmh)
        if speed.kmh > self._max.kmh:
            self._max = speed
        self._avg = Speed.from_kmh(self._history.mean())
        return AggregateSnapshot(current=speed, maximum=self._max, average=self._avg, count=len(self._history))
