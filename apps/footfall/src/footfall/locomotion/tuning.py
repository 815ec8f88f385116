from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Mapping

logger = logging.getLogger(__name__)


@dataclass
class FootstepTuning:
    # Stepping.
    # Baseline volume of each footstep; speed adds `step_volume_multiplier` per unit.
    step_base_volume: float = 0.18
    step_volume_multiplier: float = 0.15
    # Stride distance is interpolated across this speed band.
    step_low_velocity: float = 2.0
    step_high_velocity: float = 3.0
    step_low_distance: float = 1.0
    step_high_distance: float = 1.2
    step_distance_increment: float = 1.2

    # Landing.
    # Minimum time between landing sounds (bounce debounce).
    landing_min_time_between: float = 0.2
    # Downward speed needed for a landing sound; below it a landing plays as a step.
    landing_velocity_cutoff: float = 0.2
    # Downward speed needed for the long-fall landing sound.
    landing_fall_velocity_cutoff: float = 7.8
    landing_base_volume: float = 0.01
    landing_volume_multiplier: float = 0.10

    # Scales every emitted volume. Zero (or below) mutes landings and steps entirely.
    global_volume_adjust: float = 1.0


def tuning_field_names() -> list[str]:
    return [f.name for f in fields(FootstepTuning)]


def apply_tuning_overrides(tuning: FootstepTuning, overrides: Mapping[str, object] | None) -> FootstepTuning:
    """Return a copy of `tuning` with known numeric overrides applied."""

    if not overrides:
        return replace(tuning)
    known = set(tuning_field_names())
    patch: dict[str, float] = {}
    for key, value in overrides.items():
        if key not in known:
            logger.debug("Ignoring unknown footstep tuning override %r", key)
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.debug("Ignoring non-numeric footstep tuning override %r=%r", key, value)
            continue
        patch[key] = float(value)
    return replace(tuning, **patch)


__all__ = ["FootstepTuning", "apply_tuning_overrides", "tuning_field_names"]
