from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Protocol

from speedometer.utils.types import RawFix


class FixSourceError(Exception):
    """Unexpected failure of a fix source. The message is shown to the user as is."""


class PermissionDenied(FixSourceError):
    """The caller must obtain location authorization before retrying."""


class PositioningDisabled(FixSourceError):
    """The positioning service is switched off; the user must enable it."""


class FailureKind(Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITIONING_DISABLED = "positioning_disabled"
    OTHER = "other"


def failure_kind(error: BaseException) -> FailureKind:
    if isinstance(error, PermissionDenied):
        return FailureKind.PERMISSION_DENIED
    if isinstance(error, PositioningDisabled):
        return FailureKind.POSITIONING_DISABLED
    return FailureKind.OTHER


@dataclass(frozen=True)
class FixRequest:
    interval_ms: int = 500
    min_interval_ms: int = 250
    max_delay_ms: int = 750
    high_accuracy: bool = True

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "FixRequest":
        req = FixRequest(
            interval_ms=int(d.get("interval_ms", 500)),
            min_interval_ms=int(d.get("min_interval_ms", 250)),
            max_delay_ms=int(d.get("max_delay_ms", 750)),
            high_accuracy=bool(d.get("high_accuracy", True)),
        )
        if req.interval_ms <= 0 or req.min_interval_ms <= 0:
            raise ValueError("request.interval_ms and request.min_interval_ms must be > 0")
        if req.min_interval_ms > req.interval_ms:
            raise ValueError("request.min_interval_ms must be <= request.interval_ms")
        if req.max_delay_ms < 0:
            raise ValueError("request.max_delay_ms must be >= 0")
        return req


class FixListener(Protocol):
    def on_fix(self, fix: RawFix) -> None:
        ...

    def on_failure(self, error: BaseException) -> None:
        ...

    def on_availability(self, available: bool) -> None:
        ...


class FixSource(Protocol):
    """Producer of raw fixes.

    ``subscribe`` returns once the subscription is registered; fixes are then
    pushed to the listener, possibly from another thread. It may raise a
    :class:`FixSourceError` immediately or report one later through
    ``listener.on_failure``. ``unsubscribe`` must be safe to call when nothing
    is subscribed and must not wait for callbacks already in flight; the
    consumer discards anything delivered after it unsubscribed.
    """

    def subscribe(self, listener: FixListener, request: FixRequest) -> None:
        ...

    def unsubscribe(self) -> None:
        ...
