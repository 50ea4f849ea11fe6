from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional

from speedometer.speed.accuracy import AccuracyTier
from speedometer.speed.units import Speed
from speedometer.tracking.session import SessionStats
from speedometer.tracking.state import StateKind, TrackingState

if TYPE_CHECKING:
    from speedometer.tracking.machine import TrackingStateMachine


logger = logging.getLogger("speedometer.output.display")

UNIT_LABELS = {"kmh": "km/h", "mph": "mph", "mps": "m/s"}


def format_speed(speed: Speed, units: str = "kmh", precision: int = 1) -> str:
    u = str(units).lower()
    return f"{speed.in_units(u):.{int(precision)}f} {UNIT_LABELS[u]}"


def format_state(state: TrackingState) -> str:
    if state.kind is StateKind.ERROR:
        return f"Error: {state.message}"
    return state.kind.value.capitalize()


def format_accuracy(tier: Optional[AccuracyTier]) -> str:
    if tier is None:
        return "-"
    return tier.value.upper()


@dataclass
class LogDisplay:
    """Logs every published speedometer value in the chosen display unit."""

    units: str = "kmh"
    level: str = "INFO"
    _unsubscribers: List[Callable[[], None]] = field(default_factory=list)

    def attach(self, machine: "TrackingStateMachine") -> None:
        self._unsubscribers.extend(
            [
                machine.state.subscribe(lambda s: self._log("state=%s", format_state(s))),
                machine.current_speed.subscribe(lambda v: self._log("speed=%s", format_speed(v, self.units))),
                machine.max_speed.subscribe(lambda v: self._log("max=%s", format_speed(v, self.units))),
                machine.average_speed.subscribe(lambda v: self._log("avg=%s", format_speed(v, self.units))),
                machine.accuracy.subscribe(lambda t: self._log("accuracy=%s", format_accuracy(t))),
                machine.session.subscribe(self._log_session),
            ]
        )

    def detach(self) -> None:
        for unsub in self._unsubscribers:
            unsub()
        self._unsubscribers.clear()

    def _log_session(self, stats: SessionStats) -> None:
        if stats.fix_count == 0:
            return
        self._log("fixes=%d distance=%.1f m", stats.fix_count, stats.distance_m)

    def _log(self, msg: str, *args: object) -> None:
        lvl = getattr(logging, str(self.level).upper(), logging.INFO)
        logger.log(lvl, msg, *args)
