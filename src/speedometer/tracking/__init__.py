from .machine import Readout, TrackingConfig, TrackingStateMachine
from .session import EMPTY_SESSION, SessionStats, SessionTracker
from .state import (
    IDLE,
    STARTING,
    TRACKING,
    Effect,
    EventKind,
    StateKind,
    TrackingEvent,
    TrackingState,
    Transition,
    error_message,
    transition,
)

__all__ = [
    "EMPTY_SESSION",
    "IDLE",
    "STARTING",
    "TRACKING",
    "Effect",
    "EventKind",
    "Readout",
    "SessionStats",
    "SessionTracker",
    "StateKind",
    "TrackingConfig",
    "TrackingEvent",
    "TrackingState",
    "TrackingStateMachine",
    "Transition",
    "error_message",
    "transition",
]
