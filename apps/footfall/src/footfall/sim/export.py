from __future__ import annotations

import csv
import json
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from footfall.locomotion.state import LocomotionEventKind, LocomotionFrame
from footfall.locomotion.tuning import FootstepTuning
from footfall.sim.scenarios import KinematicFrame
from footfall.state import state_dir

CSV_FIELDS = ["tick", "t", "kind", "volume", "x", "y", "z"]


@dataclass(frozen=True)
class EventExport:
    scenario: str
    csv_path: Path
    summary_path: Path
    tick_count: int
    event_count: int


def export_dir() -> Path:
    return state_dir() / "exports"


def _rows(frames: list[KinematicFrame], results: list[tuple[int, LocomotionFrame]]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for tick, result in results:
        t = float(frames[tick].now) if 0 <= tick < len(frames) else 0.0
        for ev in result.events:
            rows.append(
                {
                    "tick": int(tick),
                    "t": round(t, 6),
                    "kind": ev.kind.value,
                    "volume": round(float(ev.volume), 6),
                    "x": round(float(ev.location.x), 4),
                    "y": round(float(ev.location.y), 4),
                    "z": round(float(ev.location.z), 4),
                }
            )
    return rows


def summarize(results: list[tuple[int, LocomotionFrame]]) -> dict[str, Any]:
    counts = {kind.value: 0 for kind in LocomotionEventKind}
    max_volume = {kind.value: 0.0 for kind in LocomotionEventKind}
    peak_loop = 0.0
    for _tick, result in results:
        peak_loop = max(peak_loop, float(result.falling_loop_volume))
        for ev in result.events:
            counts[ev.kind.value] += 1
            max_volume[ev.kind.value] = max(max_volume[ev.kind.value], float(ev.volume))
    final_loop = float(results[-1][1].falling_loop_volume) if results else 0.0
    return {
        "tick_count": len(results),
        "event_counts": counts,
        "max_volume": max_volume,
        "falling_loop_peak": peak_loop,
        "falling_loop_final": final_loop,
    }


def export_events(
    *,
    scenario: str,
    frames: list[KinematicFrame],
    results: list[tuple[int, LocomotionFrame]],
    tuning: FootstepTuning,
    out_dir: Path | None = None,
) -> EventExport:
    dest = Path(out_dir).expanduser().resolve() if out_dir is not None else export_dir()
    dest.mkdir(parents=True, exist_ok=True)
    csv_path = dest / f"{scenario}.events.csv"
    summary_path = dest / f"{scenario}.summary.json"

    rows = _rows(frames, results)
    with csv_path.open("w", encoding="utf-8", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

    summary = summarize(results)
    summary["scenario"] = str(scenario)
    summary["tuning"] = asdict(tuning)
    summary["exported_at_unix"] = float(time.time())
    summary_path.write_text(json.dumps(summary, ensure_ascii=True, sort_keys=True, indent=2) + "\n", encoding="utf-8")

    return EventExport(
        scenario=str(scenario),
        csv_path=csv_path,
        summary_path=summary_path,
        tick_count=len(results),
        event_count=len(rows),
    )


__all__ = ["CSV_FIELDS", "EventExport", "export_dir", "export_events", "summarize"]
