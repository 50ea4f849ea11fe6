from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class AccuracyTier(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class AccuracyThresholds:
    high_max_m: float = 5.0
    medium_max_m: float = 15.0

    def __post_init__(self) -> None:
        if not (0.0 < self.high_max_m <= self.medium_max_m):
            raise ValueError(
                f"accuracy thresholds must satisfy 0 < high_max_m <= medium_max_m, "
                f"got high_max_m={self.high_max_m} medium_max_m={self.medium_max_m}"
            )

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AccuracyThresholds":
        return AccuracyThresholds(
            high_max_m=float(d.get("high_max_m", 5.0)),
            medium_max_m=float(d.get("medium_max_m", 15.0)),
        )


DEFAULT_THRESHOLDS = AccuracyThresholds()


def classify_accuracy(radius_m: float, thresholds: AccuracyThresholds = DEFAULT_THRESHOLDS) -> AccuracyTier:
    # Each fix is classified on its own; tiers may flip between consecutive fixes.
    r = float(radius_m)
    if math.isnan(r):
        return AccuracyTier.LOW
    if r <= thresholds.high_max_m:
        return AccuracyTier.HIGH
    if r <= thresholds.medium_max_m:
        return AccuracyTier.MEDIUM
    return AccuracyTier.LOW
