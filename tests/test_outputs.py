import logging
import threading
from pathlib import Path
from typing import List

import pytest

from speedometer.geometry.distance import haversine_m
from speedometer.output.display import LogDisplay, format_accuracy, format_speed, format_state
from speedometer.output.observable import LatestValue
from speedometer.speed.accuracy import AccuracyTier
from speedometer.speed.units import Speed
from speedometer.tracking.machine import TrackingStateMachine
from speedometer.tracking.state import IDLE, TrackingState
from speedometer.utils.config import get_section, load_yaml, merge_overrides, resolve_path
from speedometer.utils.types import RawFix


def test_latest_value_replays_only_latest() -> None:
    lv: LatestValue[int] = LatestValue("n", 0)
    for i in range(1, 5):
        lv.publish(i)
    seen: List[int] = []
    unsub = lv.subscribe(seen.append)
    assert seen == [4]
    lv.publish(5)
    unsub()
    lv.publish(6)
    assert seen == [4, 5]
    assert lv.value == 6


def test_latest_value_subscriber_never_ends_on_stale_value() -> None:
    lv: LatestValue[int] = LatestValue("state", 0)
    seen: List[int] = []
    entered = threading.Event()
    release = threading.Event()

    def _slow_observer(v: int) -> None:
        if not seen:
            entered.set()
            release.wait(timeout=5.0)
        seen.append(v)

    subscriber = threading.Thread(target=lv.subscribe, args=(_slow_observer,))
    subscriber.start()
    assert entered.wait(timeout=5.0)
    publisher = threading.Thread(target=lv.publish, args=(1,))
    publisher.start()
    publisher.join(timeout=0.2)
    release.set()
    subscriber.join(timeout=5.0)
    publisher.join(timeout=5.0)
    assert seen == [0, 1]
    assert seen[-1] == lv.value == 1


def test_formatters() -> None:
    s = Speed.from_mps(10.0)
    assert format_speed(s, "kmh") == "36.0 km/h"
    assert format_speed(s, "mph", precision=2) == "22.37 mph"
    assert format_speed(s, "mps", precision=0) == "10 m/s"
    assert format_state(IDLE) == "Idle"
    assert format_state(TrackingState.error("GPS not available")) == "Error: GPS not available"
    assert format_accuracy(None) == "-"
    assert format_accuracy(AccuracyTier.MEDIUM) == "MEDIUM"


class _Source:
    def __init__(self) -> None:
        self.listener = None

    def subscribe(self, listener, request) -> None:
        self.listener = listener

    def unsubscribe(self) -> None:
        pass


def test_log_display_logs_updates(caplog: pytest.LogCaptureFixture) -> None:
    src = _Source()
    m = TrackingStateMachine(src)
    display = LogDisplay(units="kmh")
    with caplog.at_level(logging.INFO, logger="speedometer.output.display"):
        display.attach(m)
        m.start()
        src.listener.on_fix(RawFix(0.0, 0.0, 10.0, 3.0, None, 0))
    text = caplog.text
    assert "state=Starting" in text
    assert "speed=36.0 km/h" in text
    assert "accuracy=HIGH" in text
    display.detach()
    caplog.clear()
    with caplog.at_level(logging.INFO, logger="speedometer.output.display"):
        m.stop()
    assert "state=Idle" not in caplog.text


def test_haversine_known_distance() -> None:
    d = haversine_m(0.0, 0.0, 0.0, 1.0)
    assert abs(d - 111194.93) < 1.0
    assert haversine_m(52.0, 13.0, 52.0, 13.0) == 0.0


def test_config_helpers(tmp_path: Path) -> None:
    p = tmp_path / "cfg.yaml"
    p.write_text("history:\n  size: 20\ndisplay: []\n", encoding="utf-8")
    cfg = load_yaml(str(p))
    assert get_section(cfg, "history") == {"size": 20}
    assert get_section(cfg, "request") == {}
    with pytest.raises(ValueError):
        get_section(cfg, "display")
    merged = merge_overrides({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}, "d": 4})
    assert merged == {"a": {"b": 1, "c": 3}, "d": 4}
    assert resolve_path("x.csv", str(tmp_path)) == str((tmp_path / "x.csv").resolve())
    with pytest.raises(FileNotFoundError):
        load_yaml(str(tmp_path / "nope.yaml"))
