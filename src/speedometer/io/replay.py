from __future__ import annotations

import csv
import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from speedometer.io.fix_source import FixListener, FixRequest, FixSourceError
from speedometer.utils.types import RawFix


logger = logging.getLogger("speedometer.io.replay")

ReplayItem = Union[RawFix, bool]


@dataclass(frozen=True)
class ReplayConfig:
    path: str
    realtime: bool = False
    speedup: float = 1.0

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ReplayConfig":
        path = str(d.get("path", ""))
        if not path:
            raise ValueError("replay.path is required")
        speedup = float(d.get("speedup", 1.0))
        if speedup <= 0.0:
            raise ValueError("replay.speedup must be > 0")
        return ReplayConfig(path=path, realtime=bool(d.get("realtime", False)), speedup=speedup)


def load_fix_log(path: str) -> List[ReplayItem]:
    """Read a CSV or JSONL fix log.

    JSONL lines of the form ``{"type": "availability", "available": false}``
    become availability notices; every other row is a :class:`RawFix`.
    """
    p = Path(path)
    if not p.is_file():
        raise FixSourceError(f"Fix log not found: {path}")
    if p.suffix.lower() in {".jsonl", ".ndjson"}:
        return _load_jsonl(p)
    return _load_csv(p)


def _load_csv(p: Path) -> List[ReplayItem]:
    out: List[ReplayItem] = []
    with open(p, "r", newline="", encoding="utf-8") as f:
        r = csv.DictReader(f)
        missing = [c for c in ("latitude", "longitude", "timestamp_ms") if c not in (r.fieldnames or [])]
        if missing:
            raise ValueError(f"{p}: missing CSV columns: {', '.join(missing)}")
        for line_no, row in enumerate(r, start=2):
            try:
                out.append(RawFix.from_dict(_drop_empty(row)))
            except (KeyError, ValueError) as e:
                raise ValueError(f"{p}:{line_no}: invalid fix row: {e}") from e
    return out


def _load_jsonl(p: Path) -> List[ReplayItem]:
    out: List[ReplayItem] = []
    with open(p, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
                if not isinstance(obj, dict):
                    raise ValueError("expected a JSON object")
                if str(obj.get("type", "fix")).lower() == "availability":
                    out.append(bool(obj.get("available", True)))
                else:
                    out.append(RawFix.from_dict(obj))
            except (KeyError, ValueError) as e:
                raise ValueError(f"{p}:{line_no}: invalid fix row: {e}") from e
    return out


def _drop_empty(row: Dict[str, Optional[str]]) -> Dict[str, Any]:
    return {k: v for k, v in row.items() if k is not None and v is not None and str(v).strip() != ""}


@dataclass
class _ReplayRun:
    stop: threading.Event = field(default_factory=threading.Event)
    finished: threading.Event = field(default_factory=threading.Event)
    delivered: int = 0
    thread: Optional[threading.Thread] = None


class ReplayFixSource:
    """Fix source that plays back a recorded fix log on a background thread.

    ``unsubscribe`` only signals the replay thread to stop; call :meth:`close`
    once the consumer is done to wait for the thread to exit.
    """

    def __init__(self, cfg: ReplayConfig) -> None:
        self._cfg = cfg
        self._lock = threading.Lock()
        self._active: Optional[_ReplayRun] = None
        self._last = _ReplayRun()
        self._last.finished.set()

    @property
    def delivered(self) -> int:
        return self._last.delivered

    def subscribe(self, listener: FixListener, request: FixRequest) -> None:
        with self._lock:
            if self._active is not None:
                raise FixSourceError("Replay source already has an active subscription")
            try:
                items = load_fix_log(self._cfg.path)
            except ValueError as e:
                raise FixSourceError(str(e)) from e
            logger.info(
                "Replaying %d items from %s (realtime=%s, interval=%d ms)",
                len(items),
                self._cfg.path,
                self._cfg.realtime,
                request.interval_ms,
            )
            run = _ReplayRun()
            run.thread = threading.Thread(
                target=self._run,
                args=(items, listener, run),
                name="fix-replay",
                daemon=True,
            )
            self._active = run
            self._last = run
            run.thread.start()

    def unsubscribe(self) -> None:
        # Never joins: the replay thread may be blocked inside a listener callback.
        with self._lock:
            run = self._active
            self._active = None
        if run is not None:
            run.stop.set()

    def wait_finished(self, timeout_s: Optional[float] = None) -> bool:
        return self._last.finished.wait(timeout_s)

    def close(self, timeout_s: Optional[float] = 5.0) -> bool:
        """Stop replaying and wait for the replay thread; False if it is still alive."""
        self.unsubscribe()
        t = self._last.thread
        if t is None or t is threading.current_thread():
            return True
        t.join(timeout_s)
        if t.is_alive():
            logger.warning("Replay thread did not exit within %.1f s", timeout_s or 0.0)
            return False
        return True

    def _run(self, items: List[ReplayItem], listener: FixListener, run: _ReplayRun) -> None:
        prev_ms: Optional[int] = None
        try:
            for item in items:
                if run.stop.is_set():
                    break
                if isinstance(item, bool):
                    listener.on_availability(item)
                    continue
                if self._cfg.realtime and prev_ms is not None:
                    delay_s = max(0.0, (item.timestamp_ms - prev_ms) / 1000.0 / self._cfg.speedup)
                    if run.stop.wait(delay_s):
                        break
                prev_ms = item.timestamp_ms
                listener.on_fix(item)
                run.delivered += 1
        except Exception as e:
            logger.exception("Fix replay failed")
            listener.on_failure(FixSourceError(f"Fix replay failed: {e}"))
        finally:
            run.finished.set()
