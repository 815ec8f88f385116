from __future__ import annotations

import logging
from typing import Callable

from panda3d.core import LVector3f

from footfall.common.error_log import ErrorLog
from footfall.locomotion.state import LocomotionEvent, LocomotionEventKind, LocomotionFrame, LocomotionState
from footfall.locomotion.tuning import FootstepTuning

logger = logging.getLogger(__name__)

GroundProbe = Callable[[], bool]

# Below this speed the stride accumulator does not run at all.
STRIDE_MIN_SPEED = 0.25
# Strides slower than this move the reference point but stay silent.
STEP_AUDIBLE_SPEED = 1.5
STOP_SPEED = 1.0

FALLING_LOOP_ONSET_SPEED = 8.0
FALLING_LOOP_SPEED_SCALE = 100.0
FALLING_LOOP_ATTACK = 0.1
FALLING_LOOP_RELEASE = 0.05


def target_step_distance(tuning: FootstepTuning, speed: float) -> float:
    s = float(speed)
    lo_v = float(tuning.step_low_velocity)
    hi_v = float(tuning.step_high_velocity)
    if s <= lo_v:
        return float(tuning.step_low_distance)
    if s >= hi_v:
        return float(tuning.step_high_distance)
    frac = (s - lo_v) / (hi_v - lo_v)
    return float(tuning.step_low_distance) + float(tuning.step_distance_increment) * frac


def landing_volume(tuning: FootstepTuning, vertical_velocity: float) -> float:
    """
    Unscaled landing volume. `vertical_velocity` is negative when descending, so faster
    falls push the result above `landing_base_volume`. Not clamped.
    """

    return float(tuning.landing_base_volume) - float(tuning.landing_volume_multiplier) * (
        float(tuning.landing_velocity_cutoff) + float(vertical_velocity)
    )


def step_volume(tuning: FootstepTuning, speed: float) -> float:
    return float(tuning.step_base_volume) + float(tuning.step_volume_multiplier) * float(speed)


def falling_loop_target(speed: float) -> float:
    s = float(speed)
    if s > FALLING_LOOP_ONSET_SPEED:
        return min(1.0, s / FALLING_LOOP_SPEED_SCALE)
    return 0.0


def ease_toward(current: float, target: float, factor: float) -> float:
    return float(current) + (float(target) - float(current)) * float(factor)


class LocomotionTracker:
    """
    Frame-sequential footstep/landing trigger state machine.

    `tick` must be called once per simulation frame. Each call returns the events that
    fire on that frame plus the smoothed falling-loop volume; nothing is queued.
    Vertical motion is read from the Z axis.
    """

    def __init__(
        self,
        *,
        tuning: FootstepTuning | None = None,
        state: LocomotionState | None = None,
        error_log: ErrorLog | None = None,
    ) -> None:
        self.tuning = tuning if tuning is not None else FootstepTuning()
        self.state = state if state is not None else LocomotionState()
        self.error_log = error_log
        self._frame_position: LVector3f | None = None

    def reset(self) -> None:
        self.state.reset()
        self._frame_position = None

    def on_leave_ground(self, now: float, foot_position: LVector3f) -> None:
        self.state.last_foot_location = LVector3f(foot_position)
        self.state.last_foot_time = float(now)

    def on_land_on_ground(
        self,
        now: float,
        landing_velocity: LVector3f | None = None,
        location: LVector3f | None = None,
    ) -> LocomotionEvent | None:
        st = self.state
        vel = LVector3f(landing_velocity) if landing_velocity is not None else LVector3f(st.pre_landing_velocity)
        if location is not None:
            loc = LVector3f(location)
        elif self._frame_position is not None:
            loc = LVector3f(self._frame_position)
        else:
            loc = LVector3f(st.last_foot_location)

        tuning = self.tuning
        if (float(now) - float(st.last_foot_time)) <= float(tuning.landing_min_time_between):
            return None
        gain = float(tuning.global_volume_adjust)
        if gain <= 0.0:
            return None

        vz = float(vel.z)
        # Cutoffs are compared at the velocity's float32 precision so a landing exactly at a
        # cutoff stays in the softer class.
        edges = LVector3f(0.0, -float(tuning.landing_velocity_cutoff), -float(tuning.landing_fall_velocity_cutoff))
        logger.debug("Landing with vertical velocity %.3f (cutoff %.3f)", vz, edges.y)
        volume = landing_volume(tuning, vz) * gain
        if vz < float(edges.y):
            if vz < float(edges.z):
                kind = LocomotionEventKind.LONG_FALL_LANDING
            else:
                kind = LocomotionEventKind.LANDING
        else:
            kind = LocomotionEventKind.STEP
        return LocomotionEvent(kind=kind, volume=float(volume), location=loc)

    def tick(
        self,
        *,
        now: float,
        dt: float,
        position: LVector3f,
        velocity: LVector3f,
        is_grounded: bool,
        ground_probe: GroundProbe,
    ) -> LocomotionFrame:
        st = self.state
        tuning = self.tuning
        pos = LVector3f(position)
        vel = LVector3f(velocity)
        grounded = bool(is_grounded)
        self._frame_position = pos
        events: list[LocomotionEvent] = []
        prev_loop_volume = float(st.falling_loop_volume)

        if not grounded:
            st.air_timer += float(dt)
            if not st.was_airborne_last_frame:
                self.on_leave_ground(now, pos)
            st.pre_landing_velocity = LVector3f(vel)
            st.was_airborne_last_frame = True

            fall_speed = float(st.pre_landing_velocity.length())
            if fall_speed > FALLING_LOOP_ONSET_SPEED:
                st.falling_loop_volume = ease_toward(
                    st.falling_loop_volume, falling_loop_target(fall_speed), FALLING_LOOP_ATTACK
                )
            else:
                st.falling_loop_volume = ease_toward(st.falling_loop_volume, 0.0, FALLING_LOOP_RELEASE)
        else:
            if st.air_timer > 0.0:
                st.air_timer = 0.0
                st.falling_loop_volume = 0.0
                landing = self.on_land_on_ground(now, st.pre_landing_velocity, pos)
                if landing is not None:
                    events.append(landing)
            st.was_airborne_last_frame = False

        speed = float(vel.length())
        step_dist = target_step_distance(tuning, speed)
        dist_since_last = float((pos - st.last_foot_location).length())

        if speed > STRIDE_MIN_SPEED and (st.last_foot_time < 0.0 or dist_since_last**2 > step_dist**2):
            on_ground = self._probe(ground_probe)
            if grounded and on_ground:
                st.last_foot_location = LVector3f(pos)
                st.last_foot_time = float(now)

            # Airborne strides never play; only the grounded flag gates the sound.
            if speed > STEP_AUDIBLE_SPEED and grounded:
                gain = float(tuning.global_volume_adjust)
                if gain > 0.0:
                    events.append(
                        LocomotionEvent(
                            kind=LocomotionEventKind.STEP,
                            volume=step_volume(tuning, speed) * gain,
                            location=LVector3f(pos),
                        )
                    )

        if speed < STOP_SPEED:
            st.last_foot_time = -1.0

        loop_volume = float(st.falling_loop_volume)
        if loop_volume != prev_loop_volume:
            events.append(
                LocomotionEvent(
                    kind=LocomotionEventKind.FALLING_LOOP_VOLUME,
                    volume=loop_volume,
                    location=LVector3f(pos),
                )
            )
        return LocomotionFrame(events=tuple(events), falling_loop_volume=loop_volume)

    def _probe(self, ground_probe: GroundProbe) -> bool:
        try:
            return bool(ground_probe())
        except Exception as exc:
            # A failing probe suppresses the reference update instead of breaking the frame.
            if self.error_log is not None:
                self.error_log.log_exception(context="footfall.ground_probe", exc=exc)
            else:
                logger.warning("Ground probe failed: %s: %s", type(exc).__name__, exc)
            return False


__all__ = [
    "GroundProbe",
    "LocomotionTracker",
    "ease_toward",
    "falling_loop_target",
    "landing_volume",
    "step_volume",
    "target_step_distance",
]
