from .fix_source import (
    FailureKind,
    FixListener,
    FixRequest,
    FixSource,
    FixSourceError,
    PermissionDenied,
    PositioningDisabled,
    failure_kind,
)
from .replay import ReplayConfig, ReplayFixSource, load_fix_log

__all__ = [
    "FailureKind",
    "FixListener",
    "FixRequest",
    "FixSource",
    "FixSourceError",
    "PermissionDenied",
    "PositioningDisabled",
    "ReplayConfig",
    "ReplayFixSource",
    "failure_kind",
    "load_fix_log",
]
