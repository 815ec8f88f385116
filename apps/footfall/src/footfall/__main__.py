from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, replace
from pathlib import Path

from footfall.common.error_log import ErrorLog
from footfall.locomotion.tracker import LocomotionTracker
from footfall.locomotion.tuning import tuning_field_names
from footfall.sim.export import export_events, summarize
from footfall.sim.scenarios import SCENARIOS, build_scenario, run_scenario
from footfall.state import load_tuning, state_dir, update_tuning_overrides


def _parse_override(text: str) -> tuple[str, float]:
    key, sep, raw = str(text).partition("=")
    key = key.strip()
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got {text!r}")
    if key not in tuning_field_names():
        raise argparse.ArgumentTypeError(f"Unknown tuning field: {key}")
    try:
        return key, float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Not a number: {raw!r}") from None


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="footfall", description="Footstep/landing trigger simulator")
    parser.add_argument(
        "--scenario",
        default="walk",
        choices=sorted(SCENARIOS),
        help="Scripted locomotion to run through the tracker (default: walk).",
    )
    parser.add_argument("--tick-rate", type=int, default=60, help="Simulation ticks per second (default: 60).")
    parser.add_argument(
        "--out-dir",
        default=None,
        help="Write <scenario>.events.csv and <scenario>.summary.json here. Without it only the summary is printed.",
    )
    parser.add_argument(
        "--volume",
        type=float,
        default=None,
        help="Override global_volume_adjust for this run only.",
    )
    parser.add_argument("--print-tuning", action="store_true", help="Print the effective tuning as JSON and exit.")
    parser.add_argument(
        "--save-override",
        action="append",
        type=_parse_override,
        default=[],
        metavar="KEY=VALUE",
        help="Persist a tuning override (repeatable), then continue with the updated tuning.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.save_override:
        update_tuning_overrides(dict(args.save_override))
    tuning = load_tuning()
    if args.volume is not None:
        tuning = replace(tuning, global_volume_adjust=float(args.volume))

    if args.print_tuning:
        print(json.dumps(asdict(tuning), indent=2, sort_keys=True))
        return 0

    frames = build_scenario(args.scenario, tick_rate=args.tick_rate)
    error_log = ErrorLog(max_items=30, persist_path=state_dir() / "errors.log")
    tracker = LocomotionTracker(tuning=tuning, error_log=error_log)
    results = run_scenario(tracker, frames)

    if args.out_dir:
        export = export_events(
            scenario=args.scenario,
            frames=frames,
            results=results,
            tuning=tuning,
            out_dir=Path(args.out_dir),
        )
        print(f"Wrote {export.event_count} events over {export.tick_count} ticks")
        print(f"  csv:     {export.csv_path}")
        print(f"  summary: {export.summary_path}")
    else:
        print(json.dumps(summarize(results), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
