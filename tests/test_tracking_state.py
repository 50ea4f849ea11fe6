import pytest

from speedometer.io.fix_source import FailureKind
from speedometer.tracking.state import (
    IDLE,
    STARTING,
    TRACKING,
    Effect,
    StateKind,
    TrackingEvent,
    TrackingState,
    error_message,
    transition,
)


ERROR = TrackingState.error("boom")


def test_start_from_idle_resets_and_subscribes() -> None:
    tr = transition(IDLE, TrackingEvent.start())
    assert tr.state == STARTING
    assert tr.effects == (Effect.RESET_SESSION, Effect.SUBSCRIBE)


def test_start_is_noop_while_active() -> None:
    for state in (STARTING, TRACKING):
        tr = transition(state, TrackingEvent.start())
        assert tr.state == state
        assert tr.effects == ()


def test_start_from_error_retries() -> None:
    tr = transition(ERROR, TrackingEvent.start())
    assert tr.state == STARTING
    assert Effect.SUBSCRIBE in tr.effects


def test_fix_moves_to_tracking_only_when_active() -> None:
    assert transition(STARTING, TrackingEvent.fix()).state == TRACKING
    assert transition(TRACKING, TrackingEvent.fix()).effects == (Effect.RECORD_FIX,)
    for state in (IDLE, ERROR):
        tr = transition(state, TrackingEvent.fix())
        assert tr.state == state
        assert tr.effects == (Effect.DROP_FIX,)


@pytest.mark.parametrize(
    "kind,message,expected",
    [
        (FailureKind.PERMISSION_DENIED, "denied", "Location permission required"),
        (FailureKind.POSITIONING_DISABLED, "off", "GPS not available"),
        (FailureKind.OTHER, "radio exploded", "radio exploded"),
        (FailureKind.OTHER, "", "Failed to start location tracking"),
    ],
)
def test_failures_map_to_error_messages(kind: FailureKind, message: str, expected: str) -> None:
    for state in (STARTING, TRACKING):
        tr = transition(state, TrackingEvent.failed(kind, message))
        assert tr.state.kind is StateKind.ERROR
        assert tr.state.message == expected
        assert Effect.UNSUBSCRIBE in tr.effects
    assert error_message(kind, message) == expected


def test_failure_ignored_when_inactive() -> None:
    for state in (IDLE, ERROR):
        tr = transition(state, TrackingEvent.failed(FailureKind.OTHER, "late"))
        assert tr.state == state
        assert tr.effects == ()


def test_stop_from_any_state() -> None:
    for state in (STARTING, TRACKING, ERROR):
        tr = transition(state, TrackingEvent.stop())
        assert tr.state == IDLE
        assert tr.effects == (Effect.UNSUBSCRIBE, Effect.PUBLISH_ZERO_SPEED)
    assert transition(IDLE, TrackingEvent.stop()).effects == ()


def test_acknowledge_only_leaves_error() -> None:
    assert transition(ERROR, TrackingEvent.acknowledge()).state == IDLE
    for state in (IDLE, STARTING, TRACKING):
        assert transition(state, TrackingEvent.acknowledge()).state == state


def test_availability_never_changes_state() -> None:
    for state in (IDLE, STARTING, TRACKING, ERROR):
        tr = transition(state, TrackingEvent.availability(False))
        assert tr.state == state
        assert tr.effects == (Effect.LOG_AVAILABILITY,)


def test_error_state_requires_message() -> None:
    with pytest.raises(ValueError):
        TrackingState(StateKind.ERROR)
    with pytest.raises(ValueError):
        TrackingState(StateKind.IDLE, "nope")
    assert str(ERROR) == "error(boom)"
    assert not ERROR.is_active
