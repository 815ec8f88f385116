from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from panda3d.core import LVector3f


class LocomotionEventKind(str, Enum):
    STEP = "step"
    LANDING = "landing"
    LONG_FALL_LANDING = "long_fall_landing"
    FALLING_LOOP_VOLUME = "falling_loop_volume"


@dataclass(frozen=True)
class LocomotionEvent:
    kind: LocomotionEventKind
    volume: float
    location: LVector3f


@dataclass(frozen=True)
class LocomotionFrame:
    events: tuple[LocomotionEvent, ...] = ()
    falling_loop_volume: float = 0.0

    def of_kind(self, kind: LocomotionEventKind) -> list[LocomotionEvent]:
        return [e for e in self.events if e.kind == kind]


@dataclass
class LocomotionState:
    """
    Mutable per-entity locomotion bookkeeping.

    - `last_foot_time == -1` marks "stopped": the next stride is accepted without distance accumulation.
    - `air_timer` is nonzero only while continuously airborne.
    - `pre_landing_velocity` is overwritten every airborne frame and read once on landing.
    """

    last_foot_location: LVector3f = field(default_factory=lambda: LVector3f(0, 0, 0))
    last_foot_time: float = 0.0
    air_timer: float = 0.0
    pre_landing_velocity: LVector3f = field(default_factory=lambda: LVector3f(0, 0, 0))
    was_airborne_last_frame: bool = False
    falling_loop_volume: float = 0.0

    def reset(self) -> None:
        self.last_foot_location = LVector3f(0, 0, 0)
        self.last_foot_time = 0.0
        self.air_timer = 0.0
        self.pre_landing_velocity = LVector3f(0, 0, 0)
        self.was_airborne_last_frame = False
        self.falling_loop_volume = 0.0

    @property
    def stopped(self) -> bool:
        return self.last_foot_time < 0.0
