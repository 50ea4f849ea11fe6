import math

import pytest

from speedometer.speed.accuracy import AccuracyThresholds, AccuracyTier, classify_accuracy
from speedometer.speed.units import Speed, kmh_to_mps, mps_to_kmh, mps_to_mph, speed_from_mps


def test_speed_projections() -> None:
    for v in (0.0, 1.0, 10.0, 27.7778, 123.4):
        s = speed_from_mps(v)
        assert abs(s.mps - v) < 1e-9
        assert abs(s.kmh - v * 3.6) < 1e-9
        assert abs(s.mph - v * 2.237) < 1e-9


def test_speed_clamps_negative_missing_and_nan() -> None:
    for v in (-3.0, None, float("nan"), float("-inf")):
        s = Speed.from_mps(v)
        assert s == Speed.zero()
        assert s.kmh == 0.0 and s.mph == 0.0


def test_kmh_round_trip_helpers() -> None:
    assert abs(mps_to_kmh(10.0) - 36.0) < 1e-9
    assert abs(mps_to_mph(10.0) - 22.37) < 1e-9
    assert abs(kmh_to_mps(36.0) - 10.0) < 1e-9
    assert abs(Speed.from_kmh(72.0).mps - 20.0) < 1e-9


def test_speed_in_units() -> None:
    s = Speed.from_mps(10.0)
    assert abs(s.in_units("KMH") - 36.0) < 1e-9
    assert abs(s.in_units("mph") - 22.37) < 1e-9
    assert s.in_units("mps") == 10.0


def test_accuracy_boundaries() -> None:
    assert classify_accuracy(0.0) is AccuracyTier.HIGH
    assert classify_accuracy(5.0) is AccuracyTier.HIGH
    assert classify_accuracy(5.0001) is AccuracyTier.MEDIUM
    assert classify_accuracy(15.0) is AccuracyTier.MEDIUM
    assert classify_accuracy(15.0001) is AccuracyTier.LOW
    assert classify_accuracy(250.0) is AccuracyTier.LOW
    assert classify_accuracy(math.inf) is AccuracyTier.LOW
    assert classify_accuracy(float("nan")) is AccuracyTier.LOW


def test_accuracy_has_no_hysteresis() -> None:
    radii = [4.0, 16.0, 4.0, 10.0, 4.0]
    tiers = [classify_accuracy(r) for r in radii]
    assert tiers == [AccuracyTier.HIGH, AccuracyTier.LOW, AccuracyTier.HIGH, AccuracyTier.MEDIUM, AccuracyTier.HIGH]


def test_accuracy_custom_thresholds() -> None:
    th = AccuracyThresholds.from_dict({"high_max_m": 3.0, "medium_max_m": 8.0})
    assert classify_accuracy(4.0, th) is AccuracyTier.MEDIUM
    assert classify_accuracy(9.0, th) is AccuracyTier.LOW


def test_accuracy_thresholds_rejects_inverted() -> None:
    with pytest.raises(ValueError):
        AccuracyThresholds(high_max_m=20.0, medium_max_m=10.0)
