"""Locomotion audio triggers: tuning, per-entity state, and the frame tracker."""

from footfall.locomotion.state import LocomotionEvent, LocomotionEventKind, LocomotionFrame, LocomotionState
from footfall.locomotion.tracker import (
    GroundProbe,
    LocomotionTracker,
    ease_toward,
    falling_loop_target,
    landing_volume,
    step_volume,
    target_step_distance,
)
from footfall.locomotion.tuning import FootstepTuning, apply_tuning_overrides, tuning_field_names

__all__ = [
    "FootstepTuning",
    "GroundProbe",
    "LocomotionEvent",
    "LocomotionEventKind",
    "LocomotionFrame",
    "LocomotionState",
    "LocomotionTracker",
    "apply_tuning_overrides",
    "ease_toward",
    "falling_loop_target",
    "landing_volume",
    "step_volume",
    "target_step_distance",
    "tuning_field_names",
]
