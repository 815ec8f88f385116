from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest
from panda3d.core import LVector3f

from footfall.audio.clip_pool import ClipPool
from footfall.audio.sink import FootstepAudioSink
from footfall.common.error_log import ErrorLog
from footfall.common.errors import MissingCollaboratorError
from footfall.game.footstep_observer import FootstepAudioObserver, make_ray_ground_probe
from footfall.locomotion.state import LocomotionEventKind
from footfall.locomotion.tracker import LocomotionTracker


class _RecordingSink:
    def __init__(self) -> None:
        self.played: list[tuple[LocomotionEventKind, float]] = []
        self.stopped = 0

    def play(self, event) -> None:
        self.played.append((event.kind, float(event.volume)))

    def stop(self) -> None:
        self.stopped += 1


def _player(*, pos, vel, grounded: bool = True) -> SimpleNamespace:
    return SimpleNamespace(pos=LVector3f(*pos), vel=LVector3f(*vel), grounded=grounded)


def test_observer_requires_sink_and_probe() -> None:
    with pytest.raises(MissingCollaboratorError):
        FootstepAudioObserver(tracker=LocomotionTracker(), sink=None, ground_probe=lambda: True)
    with pytest.raises(MissingCollaboratorError):
        FootstepAudioObserver(tracker=LocomotionTracker(), sink=_RecordingSink(), ground_probe=None)


def test_observer_without_player_does_nothing() -> None:
    sink = _RecordingSink()
    obs = FootstepAudioObserver(tracker=LocomotionTracker(), sink=sink, ground_probe=lambda: True)

    frame = obs.update(now=1.0, dt=0.016, player=None)

    assert frame.events == ()
    assert sink.played == []
    assert obs.tracker.state.last_foot_time == 0.0


def test_observer_forwards_tracker_events_to_sink() -> None:
    sink = _RecordingSink()
    tracker = LocomotionTracker()
    tracker.state.last_foot_time = -1.0
    obs = FootstepAudioObserver(tracker=tracker, sink=sink, ground_probe=lambda: True)

    obs.update(now=1.0, dt=0.016, player=_player(pos=(0, 0.1, 0), vel=(0, 3.0, 0)))

    assert sink.played == [(LocomotionEventKind.STEP, pytest.approx(0.18 + 0.15 * 3.0))]
    assert obs.last_frame.events[0].kind == LocomotionEventKind.STEP


def test_observer_logs_missing_clips_without_breaking_the_frame() -> None:
    log = ErrorLog(max_items=10)
    sink = FootstepAudioSink(loader=SimpleNamespace(loadSfx=lambda _p: None), pools={"step": ClipPool("step")})
    tracker = LocomotionTracker()
    tracker.state.last_foot_time = -1.0
    obs = FootstepAudioObserver(tracker=tracker, sink=sink, ground_probe=lambda: False, error_log=log)

    for k in range(3):
        obs.update(now=1.0 + 0.1 * k, dt=0.1, player=_player(pos=(0, 0.1, 0), vel=(0, 3.0, 0)))

    items = log.items()
    assert len(items) == 1
    assert items[0].context == "footfall.audio.step"
    assert items[0].count == 3
    assert tracker.error_log is log


def test_observer_logs_interleaved_probe_and_clip_failures_once_each(caplog) -> None:
    log = ErrorLog(max_items=10)
    sink = FootstepAudioSink(loader=SimpleNamespace(loadSfx=lambda _p: None), pools={"step": ClipPool("step")})
    tracker = LocomotionTracker()
    tracker.state.last_foot_time = -1.0

    def _broken_probe() -> bool:
        raise RuntimeError("collision world not ready")

    obs = FootstepAudioObserver(tracker=tracker, sink=sink, ground_probe=_broken_probe, error_log=log)

    with caplog.at_level(logging.ERROR, logger="footfall.common.error_log"):
        for k in range(10):
            obs.update(now=1.0 + 0.1 * k, dt=0.1, player=_player(pos=(0, 0.1, 0), vel=(0, 3.0, 0)))

    items = log.items()
    assert len(items) == 2
    assert {it.context: it.count for it in items} == {"footfall.ground_probe": 10, "footfall.audio.step": 10}
    assert len(caplog.records) == 2


def test_observer_reset_clears_tracker_and_silences_sink() -> None:
    sink = _RecordingSink()
    obs = FootstepAudioObserver(tracker=LocomotionTracker(), sink=sink, ground_probe=lambda: True)
    obs.update(now=1.0, dt=0.1, player=_player(pos=(0, 0, 5), vel=(0, 0, -20.0), grounded=False))
    assert obs.tracker.state.air_timer > 0.0

    obs.reset()

    assert obs.tracker.state.air_timer == 0.0
    assert sink.stopped == 1
    assert obs.last_frame.events == ()


def test_ray_ground_probe_casts_short_ray_ending_at_feet() -> None:
    rays: list[tuple[LVector3f, LVector3f]] = []

    def _ray_closest(from_pos, to_pos):
        rays.append((LVector3f(from_pos), LVector3f(to_pos)))
        return SimpleNamespace(hasHit=lambda: float(to_pos.z) <= 0.0)

    collision = SimpleNamespace(ray_closest=_ray_closest)
    feet = {"pos": LVector3f(1.0, 2.0, 0.0)}
    probe = make_ray_ground_probe(collision, lambda: feet["pos"])

    assert probe() is True
    start, end = rays[0]
    assert end == LVector3f(1.0, 2.0, 0.0)
    assert start.z == pytest.approx(0.1)

    feet["pos"] = LVector3f(1.0, 2.0, 3.0)
    assert probe() is False


def test_ray_ground_probe_requires_collision_world() -> None:
    with pytest.raises(MissingCollaboratorError):
        make_ray_ground_probe(None, lambda: LVector3f(0, 0, 0))
