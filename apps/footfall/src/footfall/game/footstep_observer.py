from __future__ import annotations

from typing import Callable

from panda3d.core import LVector3f

from footfall.audio.clip_pool import NoAssetAvailableError
from footfall.audio.sink import FootstepAudioSink
from footfall.common.error_log import ErrorLog
from footfall.common.errors import MissingCollaboratorError
from footfall.locomotion.state import LocomotionFrame
from footfall.locomotion.tracker import GroundProbe, LocomotionTracker

GROUND_PROBE_DISTANCE = 0.1


def make_ray_ground_probe(
    collision,
    foot_position: Callable[[], LVector3f],
    *,
    distance: float = GROUND_PROBE_DISTANCE,
) -> GroundProbe:
    """
    Short downward ray test ending at the feet.

    `collision` must expose `ray_closest(from_pos, to_pos)` returning a Bullet closest-hit
    result. The grounded flag from a character controller can lag on ledges and slopes,
    so footstep reference updates also require this contact.
    """

    if collision is None:
        raise MissingCollaboratorError("collision world")
    d = max(1e-4, float(distance))

    def _probe() -> bool:
        foot = LVector3f(foot_position())
        hit = collision.ray_closest(foot + LVector3f(0.0, 0.0, d), foot)
        return bool(hit.hasHit())

    return _probe


class FootstepAudioObserver:
    """Read-only observer: samples the player each frame and plays the resulting locomotion sounds."""

    def __init__(
        self,
        *,
        tracker: LocomotionTracker,
        sink: FootstepAudioSink | None,
        ground_probe: GroundProbe | None,
        error_log: ErrorLog | None = None,
    ) -> None:
        if sink is None:
            raise MissingCollaboratorError("audio sink")
        if ground_probe is None:
            raise MissingCollaboratorError("ground probe")
        self.tracker = tracker
        self.sink = sink
        self.ground_probe = ground_probe
        self.error_log = error_log if error_log is not None else ErrorLog(max_items=30)
        if self.tracker.error_log is None:
            self.tracker.error_log = self.error_log
        self.last_frame = LocomotionFrame()

    def reset(self) -> None:
        self.tracker.reset()
        self.sink.stop()
        self.last_frame = LocomotionFrame()

    def update(self, *, now: float, dt: float, player) -> LocomotionFrame:
        # No local player (editor preview, headless tools): nothing to track.
        if player is None:
            return self.last_frame
        frame = self.tracker.tick(
            now=float(now),
            dt=max(0.0, float(dt)),
            position=LVector3f(player.pos),
            velocity=LVector3f(player.vel),
            is_grounded=bool(player.grounded),
            ground_probe=self.ground_probe,
        )
        for event in frame.events:
            try:
                self.sink.play(event)
            except NoAssetAvailableError as exc:
                self.error_log.log_exception(context=f"footfall.audio.{exc.pool}", exc=exc)
        self.last_frame = frame
        return frame


__all__ = ["FootstepAudioObserver", "GROUND_PROBE_DISTANCE", "make_ray_ground_probe"]
