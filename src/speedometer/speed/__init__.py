from .accuracy import AccuracyThresholds, AccuracyTier, classify_accuracy
from .aggregator import AggregateSnapshot, AggregatorConfig, RollingSpeedAggregator
from .history import SpeedHistory
from .units import ZERO_SPEED, Speed, kmh_to_mps, mps_to_kmh, mps_to_mph, speed_from_mps

__all__ = [
    "AccuracyThresholds",
    "AccuracyTier",
    "AggregateSnapshot",
    "AggregatorConfig",
    "RollingSpeedAggregator",
    "Speed",
    "SpeedHistory",
    "ZERO_SPEED",
    "classify_accuracy",
    "kmh_to_mps",
    "mps_to_kmh",
    "mps_to_mph",
    "speed_from_mps",
]
