"""Tracking states, lifecycle events and the transition table.

:func:`transition` is pure: it maps ``(state, event)`` to the next state plus
the effects the owner must carry out. All side effects live in
:class:`speedometer.tracking.machine.TrackingStateMachine`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from speedometer.io.fix_source import FailureKind


class StateKind(Enum):
    IDLE = "idle"
    STARTING = "starting"
    TRACKING = "tracking"
    ERROR = "error"


@dataclass(frozen=True)
class TrackingState:
    kind: StateKind
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is StateKind.ERROR and not self.message:
            raise ValueError("error state requires a message")
        if self.kind is not StateKind.ERROR and self.message is not None:
            raise ValueError(f"{self.kind.value} state carries no message")

    @staticmethod
    def error(message: str) -> "TrackingState":
        return TrackingState(StateKind.ERROR, message)

    @property
    def is_active(self) -> bool:
        return self.kind in (StateKind.STARTING, StateKind.TRACKING)

    def __str__(self) -> str:
        if self.kind is StateKind.ERROR:
            return f"error({self.message})"
        return self.kind.value


IDLE = TrackingState(StateKind.IDLE)
STARTING = TrackingState(StateKind.STARTING)
TRACKING = TrackingState(StateKind.TRACKING)


class EventKind(Enum):
    START = "start"
    FIX = "fix"
    FAILURE = "failure"
    STOP = "stop"
    ACKNOWLEDGE = "acknowledge"
    AVAILABILITY = "availability"


@dataclass(frozen=True)
class TrackingEvent:
    kind: EventKind
    failure: Optional[FailureKind] = None
    message: Optional[str] = None
    available: Optional[bool] = None

    @staticmethod
    def start() -> "TrackingEvent":
        return TrackingEvent(EventKind.START)

    @staticmethod
    def fix() -> "TrackingEvent":
        return TrackingEvent(EventKind.FIX)

    @staticmethod
    def failed(kind: FailureKind, message: Optional[str] = None) -> "TrackingEvent":
        return TrackingEvent(EventKind.FAILURE, failure=kind, message=message)

    @staticmethod
    def stop() -> "TrackingEvent":
        return TrackingEvent(EventKind.STOP)

    @staticmethod
    def acknowledge() -> "TrackingEvent":
        return TrackingEvent(EventKind.ACKNOWLEDGE)

    @staticmethod
    def availability(available: bool) -> "TrackingEvent":
        return TrackingEvent(EventKind.AVAILABILITY, available=bool(available))


class Effect(Enum):
    RESET_SESSION = "reset_session"
    SUBSCRIBE = "subscribe"
    RECORD_FIX = "record_fix"
    DROP_FIX = "drop_fix"
    UNSUBSCRIBE = "unsubscribe"
    PUBLISH_ZERO_SPEED = "publish_zero_speed"
    LOG_AVAILABILITY = "log_availability"


@dataclass(frozen=True)
class Transition:
    state: TrackingState
    effects: Tuple[Effect, ...] = ()


PERMISSION_REQUIRED_MESSAGE = "Location permission required"
POSITIONING_UNAVAILABLE_MESSAGE = "GPS not available"
GENERIC_FAILURE_MESSAGE = "Failed to start location tracking"


def error_message(kind: FailureKind, message: Optional[str] = None) -> str:
    if kind is FailureKind.PERMISSION_DENIED:
        return PERMISSION_REQUIRED_MESSAGE
    if kind is FailureKind.POSITIONING_DISABLED:
        return POSITIONING_UNAVAILABLE_MESSAGE
    text = (message or "").strip()
    return text if text else GENERIC_FAILURE_MESSAGE


def transition(state: TrackingState, event: TrackingEvent) -> Transition:
    kind = event.kind
    active = state.is_active

    if kind is EventKind.START:
        if active:
            return Transition(state)
        return Transition(STARTING, (Effect.RESET_SESSION, Effect.SUBSCRIBE))

    if kind is EventKind.FIX:
        if not active:
            return Transition(state, (Effect.DROP_FIX,))
        return Transition(TRACKING, (Effect.RECORD_FIX,))

    if kind is EventKind.FAILURE:
        if not active:
            return Transition(state)
        failure = event.failure if event.failure is not None else FailureKind.OTHER
        return Transition(
            TrackingState.error(error_message(failure, event.message)),
            (Effect.UNSUBSCRIBE, Effect.PUBLISH_ZERO_SPEED),
        )

    if kind is EventKind.STOP:
        if state.kind is StateKind.IDLE:
            return Transition(IDLE)
        return Transition(IDLE, (Effect.UNSUBSCRIBE, Effect.PUBLISH_ZERO_SPEED))

    if kind is EventKind.ACKNOWLEDGE:
        if state.kind is StateKind.ERROR:
            return Transition(IDLE)
        return Transition(state)

    if kind is EventKind.AVAILABILITY:
        return Transition(state, (Effect.LOG_AVAILABILITY,))

    raise ValueError(f"Unhandled tracking event: {kind}")
