from __future__ import annotations

import json
import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path

from footfall.locomotion.tuning import FootstepTuning, apply_tuning_overrides, tuning_field_names

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FootfallState:
    tuning_overrides: dict[str, float] = field(default_factory=dict)


def state_dir() -> Path:
    """
    Directory for small persistent user state (tuning overrides, generated audio cache).

    Override for tests/dev via `IRUN_FOOTFALL_STATE_DIR`.
    """

    override = os.environ.get("IRUN_FOOTFALL_STATE_DIR")
    if override:
        return Path(override)
    return Path.home() / ".irun" / "footfall"


def state_path() -> Path:
    return state_dir() / "state.json"


def load_state() -> FootfallState:
    p = state_path()
    if not p.exists():
        return FootfallState()
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable footfall state file %s", p)
        return FootfallState()

    if not isinstance(payload, dict):
        return FootfallState()
    known = set(tuning_field_names())
    raw_tuning = payload.get("tuning_overrides")
    tuning_overrides: dict[str, float] = {}
    if isinstance(raw_tuning, dict):
        for key, value in raw_tuning.items():
            if not isinstance(key, str) or key not in known:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            tuning_overrides[key] = float(value)
    return FootfallState(tuning_overrides=tuning_overrides)


def save_state(state: FootfallState) -> None:
    d = state_dir()
    d.mkdir(parents=True, exist_ok=True)
    p = state_path()
    tmp = p.with_name(f"{p.name}.{os.getpid()}.{secrets.token_hex(6)}.tmp")
    tmp.write_text(
        json.dumps({"tuning_overrides": state.tuning_overrides}, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    tmp.replace(p)


def update_tuning_overrides(overrides: dict[str, float]) -> FootfallState:
    s = load_state()
    merged = dict(s.tuning_overrides)
    merged.update({str(k): float(v) for k, v in overrides.items()})
    out = FootfallState(tuning_overrides=merged)
    save_state(out)
    return out


def load_tuning() -> FootstepTuning:
    return apply_tuning_overrides(FootstepTuning(), load_state().tuning_overrides)


__all__ = [
    "FootfallState",
    "load_state",
    "load_tuning",
    "save_state",
    "state_dir",
    "state_path",
    "update_tuning_overrides",
]
