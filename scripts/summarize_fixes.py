from __future__ import annotations

import argparse
import sys
from collections import Counter
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from speedometer.io.replay import load_fix_log
from speedometer.speed.accuracy import AccuracyThresholds, classify_accuracy
from speedometer.speed.aggregator import AggregatorConfig, RollingSpeedAggregator
from speedometer.speed.units import Speed
from speedometer.utils.types import RawFix


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--fixes", required=True, help="CSV or JSONL fix log")
    ap.add_argument("--history-size", type=int, default=50)
    ap.add_argument("--high-max-m", type=float, default=5.0)
    ap.add_argument("--medium-max-m", type=float, default=15.0)
    args = ap.parse_args()

    fixes = [item for item in load_fix_log(args.fixes) if isinstance(item, RawFix)]
    if not fixes:
        raise RuntimeError("No fixes found")

    agg = RollingSpeedAggregator(AggregatorConfig(history_size=args.history_size))
    thresholds = AccuracyThresholds(high_max_m=args.high_max_m, medium_max_m=args.medium_max_m)
    tiers: Counter = Counter()
    no_speed = 0
    for fix in fixes:
        if not fix.has_speed:
            no_speed += 1
        agg.record(Speed.from_mps(fix.speed_mps))
        tiers[classify_accuracy(fix.accuracy_m, thresholds).value] += 1

    print(
        f"fixes={len(fixes)} no_speed={no_speed} "
        f"max_kmh={agg.max_speed.kmh:.2f} avg_kmh={agg.average_speed.kmh:.2f} window={agg.count}"
    )
    print(" ".join(f"{tier}={tiers.get(tier, 0)}" for tier in ("high", "medium", "low")))


if __name__ == "__main__":
    main()
