from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from speedometer.io.replay import ReplayConfig, ReplayFixSource
from speedometer.output.display import LogDisplay, format_accuracy, format_speed, format_state
from speedometer.tracking.machine import TrackingConfig, TrackingStateMachine
from speedometer.utils.config import get_section, load_yaml, merge_overrides, resolve_path
from speedometer.utils.logging import setup_logging


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay a fix log through the speedometer")
    ap.add_argument("--config", default="configs/speedometer.yaml", help="Speedometer YAML")
    ap.add_argument("--fixes", default=None, help="CSV or JSONL fix log (overrides replay.path)")
    ap.add_argument("--realtime", action="store_true", help="Pace fixes by their timestamps")
    ap.add_argument("--speedup", type=float, default=None, help="Replay speed factor in realtime mode")
    ap.add_argument("--units", default=None, choices=["kmh", "mph", "mps"])
    ap.add_argument("--log-level", default="INFO")
    ap.add_argument("--log-file", default=None)
    args = ap.parse_args()

    base_dir = os.getcwd()
    setup_logging(level=args.log_level, log_file=args.log_file)

    cfg = load_yaml(resolve_path(args.config, base_dir))
    overrides: dict = {"replay": {}}
    if args.fixes is not None:
        overrides["replay"]["path"] = args.fixes
    if args.realtime:
        overrides["replay"]["realtime"] = True
    if args.speedup is not None:
        overrides["replay"]["speedup"] = args.speedup
    if args.units is not None:
        overrides["display"] = {"units": args.units}
    cfg = merge_overrides(cfg, overrides)

    replay_cfg = ReplayConfig.from_dict(get_section(cfg, "replay"))
    replay_cfg = ReplayConfig(
        path=resolve_path(replay_cfg.path, base_dir),
        realtime=replay_cfg.realtime,
        speedup=replay_cfg.speedup,
    )
    tracking_cfg = TrackingConfig.from_dict(cfg)

    source = ReplayFixSource(replay_cfg)
    machine = TrackingStateMachine(source, tracking_cfg)
    display = LogDisplay(units=tracking_cfg.display_units)
    display.attach(machine)

    machine.start()
    try:
        while not source.wait_finished(timeout_s=0.25):
            pass
    except KeyboardInterrupt:
        pass

    r = machine.readout()
    machine.close()
    source.close()
    display.detach()

    units = tracking_cfg.display_units
    print(
        f"state={format_state(r.state)} fixes={r.session.fix_count} "
        f"max={format_speed(r.maximum, units)} avg={format_speed(r.average, units)} "
        f"accuracy={format_accuracy(r.accuracy)} distance_m={r.session.distance_m:.1f} "
        f"elapsed_s={r.session.elapsed_s(time.time()):.1f}"
    )
    if r.state.message:
        sys.exit(1)


if __name__ == "__main__":
    main()
