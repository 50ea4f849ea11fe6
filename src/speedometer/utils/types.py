from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RawFix:
    """One positioning sample as delivered by a fix source.

    ``speed_mps`` is ``None`` when the source could not measure speed and
    ``bearing_deg`` is ``None`` when it could not measure heading. Latitude and
    longitude are informational; speed math only uses ``speed_mps``.
    """

    latitude: float
    longitude: float
    speed_mps: Optional[float]
    accuracy_m: float
    bearing_deg: Optional[float]
    timestamp_ms: int

    @property
    def has_speed(self) -> bool:
        return self.speed_mps is not None and math.isfinite(float(self.speed_mps))

    @property
    def timestamp_s(self) -> float:
        return float(self.timestamp_ms) / 1000.0

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RawFix":
        return RawFix(
            latitude=float(d["latitude"]),
            longitude=float(d["longitude"]),
            speed_mps=_optional_float(d.get("speed_mps")),
            accuracy_m=float(d.get("accuracy_m", float("inf"))),
            bearing_deg=_optional_float(d.get("bearing_deg")),
            timestamp_ms=int(float(d["timestamp_ms"])),
        )


def _optional_float(x: Any) -> Optional[float]:
    if x is None:
        return None
    if isinstance(x, str) and not x.strip():
        return None
    return float(x)
