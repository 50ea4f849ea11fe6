from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from speedometer.io.fix_source import FixRequest, FixSource, failure_kind
from speedometer.speed.accuracy import AccuracyThresholds, AccuracyTier, classify_accuracy
from speedometer.speed.aggregator import AggregatorConfig, RollingSpeedAggregator
from speedometer.speed.units import ZERO_SPEED, Speed
from speedometer.tracking.session import EMPTY_SESSION, SessionStats, SessionTracker
from speedometer.tracking.state import IDLE, Effect, EventKind, TrackingEvent, TrackingState, transition
from speedometer.output.observable import LatestValue
from speedometer.utils.config import get_section
from speedometer.utils.types import RawFix


logger = logging.getLogger("speedometer.tracking.machine")

DISPLAY_UNITS = {"kmh", "mph", "mps"}


@dataclass(frozen=True)
class TrackingConfig:
    aggregator: AggregatorConfig = field(default_factory=AggregatorConfig)
    accuracy: AccuracyThresholds = field(default_factory=AccuracyThresholds)
    request: FixRequest = field(default_factory=FixRequest)
    display_units: str = "kmh"

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TrackingConfig":
        display = get_section(d, "display")
        units = str(display.get("units", "kmh")).lower()
        if units not in DISPLAY_UNITS:
            raise ValueError("display.units must be one of: kmh, mph, mps")
        return TrackingConfig(
            aggregator=AggregatorConfig.from_dict(get_section(d, "history")),
            accuracy=AccuracyThresholds.from_dict(get_section(d, "accuracy")),
            request=FixRequest.from_dict(get_section(d, "request")),
            display_units=units,
        )


@dataclass(frozen=True)
class Readout:
    state: TrackingState
    current: Speed
    maximum: Speed
    average: Speed
    accuracy: Optional[AccuracyTier]
    session: SessionStats


class _SubscriptionListener:
    """Routes source callbacks to the machine, tagged with the subscription they belong to."""

    def __init__(self, machine: "TrackingStateMachine", generation: int) -> None:
        self._machine = machine
        self._generation = generation

    def on_fix(self, fix: RawFix) -> None:
        self._machine._dispatch(TrackingEvent.fix(), generation=self._generation, fix=fix)

    def on_failure(self, error: BaseException) -> None:
        self._machine._dispatch(TrackingEvent.failed(failure_kind(error), str(error)), generation=self._generation)

    def on_availability(self, available: bool) -> None:
        self._machine._dispatch(TrackingEvent.availability(available), generation=self._generation)


class TrackingStateMachine:
    """Owns the tracking lifecycle, the fix source subscription and the derived speeds.

    Every event, whether a caller action or a source callback, is applied
    under one lock, so fixes are processed one at a time in delivery order.
    Each subscription gets a generation number; callbacks from an older
    generation are discarded, which is how fixes racing with :meth:`stop`
    are dropped. Observers run under the lock and must not block.
    """

    def __init__(
        self,
        source: FixSource,
        cfg: Optional[TrackingConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._source = source
        self._cfg = cfg or TrackingConfig()
        self._lock = threading.RLock()
        self._state: TrackingState = IDLE
        self._generation = 0
        self._subscribed = False
        self._aggregator = RollingSpeedAggregator(self._cfg.aggregator)
        self._session = SessionTracker(clock=clock)

        self.state: LatestValue[TrackingState] = LatestValue("state", IDLE)
        self.current_speed: LatestValue[Speed] = LatestValue("current_speed", ZERO_SPEED)
        self.max_speed: LatestValue[Speed] = LatestValue("max_speed", ZERO_SPEED)
        self.average_speed: LatestValue[Speed] = LatestValue("average_speed", ZERO_SPEED)
        self.accuracy: LatestValue[Optional[AccuracyTier]] = LatestValue("accuracy", None)
        self.session: LatestValue[SessionStats] = LatestValue("session", EMPTY_SESSION)

    @property
    def config(self) -> TrackingConfig:
        return self._cfg

    @property
    def current_state(self) -> TrackingState:
        with self._lock:
            return self._state

    @property
    def is_subscribed(self) -> bool:
        with self._lock:
            return self._subscribed

    @property
    def aggregator(self) -> RollingSpeedAggregator:
        return self._aggregator

    def start(self) -> TrackingState:
        return self._dispatch(TrackingEvent.start())

    def stop(self) -> TrackingState:
        return self._dispatch(TrackingEvent.stop())

    def acknowledge_error(self) -> TrackingState:
        return self._dispatch(TrackingEvent.acknowledge())

    def reset_max_speed(self) -> None:
        with self._lock:
            self._aggregator.reset()
            self.max_speed.publish(ZERO_SPEED)
            self.average_speed.publish(ZERO_SPEED)
        logger.info("Max and average speed reset")

    def close(self) -> None:
        self.stop()

    # Listener interface for callers that feed fixes directly.
    def on_fix(self, fix: RawFix) -> None:
        self._dispatch(TrackingEvent.fix(), fix=fix)

    def on_failure(self, error: BaseException) -> None:
        self._dispatch(TrackingEvent.failed(failure_kind(error), str(error)))

    def on_availability(self, available: bool) -> None:
        self._dispatch(TrackingEvent.availability(available))

    def readout(self) -> Readout:
        with self._lock:
            return Readout(
                state=self._state,
                current=self.current_speed.value,
                maximum=self.max_speed.value,
                average=self.average_speed.value,
                accuracy=self.accuracy.value,
                session=self.session.value,
            )

    def _dispatch(self, event: TrackingEvent, generation: Optional[int] = None, fix: Optional[RawFix] = None) -> TrackingState:
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Dropping %s from stale subscription %d (current %d)", event.kind.value, generation, self._generation)
                return self._state
            self._apply(event, fix)
            return self._state

    def _apply(self, event: TrackingEvent, fix: Optional[RawFix]) -> None:
        tr = transition(self._state, event)
        prev = self._state
        self._state = tr.state
        if tr.state != prev:
            if event.kind is EventKind.FAILURE:
                logger.warning("Tracking failed: %s -> %s", prev, tr.state)
            else:
                logger.info("Tracking state %s -> %s", prev, tr.state)
            self.state.publish(tr.state)

        for effect in tr.effects:
            if effect is Effect.RESET_SESSION:
                self._reset_session()
            elif effect is Effect.SUBSCRIBE:
                if not self._subscribe():
                    break
            elif effect is Effect.RECORD_FIX:
                if fix is None:
                    raise ValueError("fix event without a fix")
                self._record(fix)
            elif effect is Effect.DROP_FIX:
                logger.debug("Ignoring fix while %s", self._state)
            elif effect is Effect.UNSUBSCRIBE:
                self._unsubscribe()
            elif effect is Effect.PUBLISH_ZERO_SPEED:
                self.current_speed.publish(ZERO_SPEED)
            elif effect is Effect.LOG_AVAILABILITY:
                if event.available:
                    logger.info("Location available again")
                else:
                    logger.warning("Location temporarily unavailable; keeping subscription")

    def _reset_session(self) -> None:
        self._aggregator.reset()
        self.current_speed.publish(ZERO_SPEED)
        self.max_speed.publish(ZERO_SPEED)
        self.average_speed.publish(ZERO_SPEED)
        self.accuracy.publish(None)
        self.session.publish(self._session.reset())

    def _subscribe(self) -> bool:
        self._generation += 1
        gen = self._generation
        listener = _SubscriptionListener(self, gen)
        try:
            self._source.subscribe(listener, self._cfg.request)
        except Exception as e:
            logger.warning("Fix source subscription failed: %s: %s", type(e).__name__, e)
            self._apply(TrackingEvent.failed(failure_kind(e), str(e)), None)
            return False
        # The source may already have reported a failure from inside subscribe().
        self._subscribed = self._state.is_active and gen == self._generation
        return self._subscribed

    def _unsubscribe(self) -> None:
        self._generation += 1
        self._subscribed = False
        try:
            self._source.unsubscribe()
        except Exception:
            logger.exception("Fix source unsubscribe failed")

    def _record(self, fix: RawFix) -> None:
        speed = Speed.from_mps(fix.speed_mps)
        tier = classify_accuracy(fix.accuracy_m, self._cfg.accuracy)
        prev_max = self._aggregator.max_speed
        snap = self._aggregator.record(speed)
        stats = self._session.update(fix)

        self.current_speed.publish(snap.current)
        if snap.maximum != prev_max:
            self.max_speed.publish(snap.maximum)
        self.average_speed.publish(snap.average)
        self.accuracy.publish(tier)
        self.session.publish(stats)
