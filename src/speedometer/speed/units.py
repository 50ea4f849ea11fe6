from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

KMH_PER_MPS = 3.6
MPH_PER_MPS = 2.237


def mps_to_kmh(v_mps: float) -> float:
    return float(v_mps) * KMH_PER_MPS


def mps_to_mph(v_mps: float) -> float:
    return float(v_mps) * MPH_PER_MPS


def kmh_to_mps(v_kmh: float) -> float:
    return float(v_kmh) / KMH_PER_MPS


def clamp_speed_mps(v_mps: Optional[float]) -> float:
    if v_mps is None:
        return 0.0
    v = float(v_mps)
    if not math.isfinite(v) or v < 0.0:
        return 0.0
    return v


@dataclass(frozen=True)
class Speed:
    """A speed magnitude with its km/h and mph projections.

    Build instances with :meth:`from_mps`; it clamps missing, negative and
    non-finite input to zero so a display never shows a negative value.
    """

    mps: float
    kmh: float
    mph: float

    @staticmethod
    def from_mps(v_mps: Optional[float]) -> "Speed":
        v = clamp_speed_mps(v_mps)
        return Speed(mps=v, kmh=mps_to_kmh(v), mph=mps_to_mph(v))

    @staticmethod
    def from_kmh(v_kmh: float) -> "Speed":
        return Speed.from_mps(kmh_to_mps(v_kmh))

    @staticmethod
    def zero() -> "Speed":
        return ZERO_SPEED

    def in_units(self, units: str) -> float:
        u = str(units).lower()
        if u == "kmh":
            return self.kmh
        if u == "mph":
            return self.mph
        if u == "mps":
            return self.mps
        raise ValueError(f"Unknown speed units: {units}")


ZERO_SPEED = Speed(mps=0.0, kmh=0.0, mph=0.0)


def speed_from_mps(v_mps: Optional[float]) -> Speed:
    return Speed.from_mps(v_mps)
