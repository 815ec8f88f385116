from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from panda3d.core import LVector3f

from footfall.locomotion.state import LocomotionFrame
from footfall.locomotion.tracker import LocomotionTracker

GRAVITY = 16.0


@dataclass(frozen=True)
class KinematicFrame:
    now: float
    dt: float
    position: LVector3f
    velocity: LVector3f
    grounded: bool
    probe_hit: bool


class _Body:
    """Point mass moving along +Y with simple gravity; just enough to script locomotion."""

    def __init__(self, *, pos: LVector3f, gravity: float = GRAVITY) -> None:
        self.pos = LVector3f(pos)
        self.vel = LVector3f(0, 0, 0)
        self.grounded = True
        self.gravity = float(gravity)

    def jump(self, takeoff_speed: float) -> None:
        self.vel = LVector3f(self.vel.x, self.vel.y, float(takeoff_speed))
        self.grounded = False

    def advance(self, dt: float, *, ground_speed: float, floor_z: float) -> None:
        vz = 0.0 if self.grounded else float(self.vel.z) - self.gravity * float(dt)
        self.vel = LVector3f(0.0, float(ground_speed), vz)
        self.pos = self.pos + self.vel * float(dt)
        if float(self.pos.z) <= float(floor_z) and vz <= 0.0:
            self.pos = LVector3f(self.pos.x, self.pos.y, float(floor_z))
            self.vel = LVector3f(self.vel.x, self.vel.y, 0.0)
            self.grounded = True
        elif float(self.pos.z) > float(floor_z) + 1e-4:
            self.grounded = False


class _Recorder:
    def __init__(self, *, tick_rate: int) -> None:
        self.dt = 1.0 / float(max(1, int(tick_rate)))
        self.frames: list[KinematicFrame] = []

    def run(
        self,
        body: _Body,
        *,
        seconds: float,
        ground_speed: float,
        floor_z: Callable[[_Body], float] | float = 0.0,
    ) -> None:
        ticks = max(0, int(round(float(seconds) / self.dt)))
        for _ in range(ticks):
            fz = floor_z(body) if callable(floor_z) else float(floor_z)
            body.advance(self.dt, ground_speed=ground_speed, floor_z=fz)
            self.frames.append(
                KinematicFrame(
                    now=len(self.frames) * self.dt,
                    dt=self.dt,
                    position=LVector3f(body.pos),
                    velocity=LVector3f(body.vel),
                    grounded=bool(body.grounded),
                    probe_hit=bool(body.grounded),
                )
            )


def walk(*, tick_rate: int = 60) -> list[KinematicFrame]:
    rec = _Recorder(tick_rate=tick_rate)
    rec.run(_Body(pos=LVector3f(0, 0, 0)), seconds=4.0, ground_speed=2.5)
    return rec.frames


def run(*, tick_rate: int = 60) -> list[KinematicFrame]:
    rec = _Recorder(tick_rate=tick_rate)
    rec.run(_Body(pos=LVector3f(0, 0, 0)), seconds=4.0, ground_speed=5.0)
    return rec.frames


def jump(*, tick_rate: int = 60) -> list[KinematicFrame]:
    rec = _Recorder(tick_rate=tick_rate)
    body = _Body(pos=LVector3f(0, 0, 0))
    rec.run(body, seconds=1.0, ground_speed=4.0)
    body.jump(6.0)
    # Airborne until the body settles back on the floor.
    while not body.grounded:
        rec.run(body, seconds=rec.dt, ground_speed=4.0)
    rec.run(body, seconds=1.0, ground_speed=4.0)
    return rec.frames


def long_fall(*, tick_rate: int = 60) -> list[KinematicFrame]:
    ledge_y = 2.0
    ledge_z = 20.0
    rec = _Recorder(tick_rate=tick_rate)
    body = _Body(pos=LVector3f(0, 0, ledge_z))

    def _floor(b: _Body) -> float:
        return ledge_z if float(b.pos.y) < ledge_y else 0.0

    rec.run(body, seconds=1.0, ground_speed=3.0, floor_z=_floor)
    while not body.grounded:
        rec.run(body, seconds=rec.dt, ground_speed=0.5, floor_z=_floor)
    rec.run(body, seconds=1.0, ground_speed=0.0, floor_z=_floor)
    return rec.frames


def stop_start(*, tick_rate: int = 60) -> list[KinematicFrame]:
    rec = _Recorder(tick_rate=tick_rate)
    body = _Body(pos=LVector3f(0, 0, 0))
    rec.run(body, seconds=1.5, ground_speed=3.0)
    rec.run(body, seconds=0.5, ground_speed=0.0)
    rec.run(body, seconds=1.5, ground_speed=3.0)
    return rec.frames


SCENARIOS: dict[str, Callable[..., list[KinematicFrame]]] = {
    "walk": walk,
    "run": run,
    "jump": jump,
    "long_fall": long_fall,
    "stop_start": stop_start,
}


def build_scenario(name: str, *, tick_rate: int = 60) -> list[KinematicFrame]:
    fn = SCENARIOS.get(str(name))
    if fn is None:
        raise ValueError(f"Unknown scenario: {name!r} (expected one of {', '.join(sorted(SCENARIOS))})")
    return fn(tick_rate=int(tick_rate))


def run_scenario(tracker: LocomotionTracker, frames: Iterable[KinematicFrame]) -> list[tuple[int, LocomotionFrame]]:
    out: list[tuple[int, LocomotionFrame]] = []
    for tick, f in enumerate(frames):
        hit = bool(f.probe_hit)
        result = tracker.tick(
            now=f.now,
            dt=f.dt,
            position=f.position,
            velocity=f.velocity,
            is_grounded=f.grounded,
            ground_probe=lambda hit=hit: hit,
        )
        out.append((tick, result))
    return out


__all__ = ["KinematicFrame", "SCENARIOS", "build_scenario", "run_scenario"]
