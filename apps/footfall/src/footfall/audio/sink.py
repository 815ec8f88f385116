from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Mapping

from footfall.audio.clip_pool import ClipPool
from footfall.audio.synth import ensure_default_clips
from footfall.common.error_log import ErrorLog
from footfall.common.errors import MissingCollaboratorError
from footfall.locomotion.state import LocomotionEvent, LocomotionEventKind

logger = logging.getLogger(__name__)

ONE_SHOT_POOLS: dict[LocomotionEventKind, str] = {
    LocomotionEventKind.STEP: "step",
    LocomotionEventKind.LANDING: "landing",
    LocomotionEventKind.LONG_FALL_LANDING: "long_fall_landing",
}


def _clamp01(v: float) -> float:
    return max(0.0, min(1.0, float(v)))


def load_pool(
    loader,
    *,
    name: str,
    paths: list[Path],
    rng: random.Random | None = None,
    error_log: ErrorLog | None = None,
) -> ClipPool:
    """Load each clip path into a pool; clips the loader rejects are reported and skipped."""

    pool = ClipPool(name, rng=rng)
    context = f"footfall.audio.load.{name}"
    for path in paths:
        try:
            snd = loader.loadSfx(path.as_posix())
        except Exception as exc:
            if error_log is not None:
                error_log.log_exception(context=context, exc=exc)
            else:
                logger.warning("Could not load clip %s for pool '%s': %s", path, name, exc)
            continue
        if snd is None:
            if error_log is not None:
                error_log.log_message(context=context, message=f"Loader returned no sound for {path.name}")
            else:
                logger.warning("Loader returned no sound for %s (pool '%s')", path, name)
            continue
        snd.setLoop(False)
        pool.add(snd)
    return pool


class FootstepAudioSink:
    """
    Plays locomotion events through Panda3D sounds.

    Event volumes arrive unclamped from the tracker; they are multiplied by the master
    volume and clamped to [0, 1] here before touching the sound.
    """

    def __init__(
        self,
        *,
        loader,
        master_volume: float = 0.85,
        pools: Mapping[str, ClipPool] | None = None,
        falling_loop: Any = None,
    ) -> None:
        if loader is None:
            raise MissingCollaboratorError("audio loader")
        self.loader = loader
        self.master_volume = _clamp01(master_volume)
        self.pools: dict[str, ClipPool] = dict(pools or {})
        for name in ONE_SHOT_POOLS.values():
            self.pools.setdefault(name, ClipPool(name))
        self._falling_loop = falling_loop
        self._falling_loop_playing = False
        self._falling_loop_volume = 0.0
        if self._falling_loop is not None:
            self._falling_loop.setLoop(True)

    @classmethod
    def with_default_clips(
        cls,
        *,
        loader,
        master_volume: float = 0.85,
        rng: random.Random | None = None,
        error_log: ErrorLog | None = None,
    ) -> FootstepAudioSink:
        if loader is None:
            raise MissingCollaboratorError("audio loader")
        paths = ensure_default_clips()
        pools = {
            name: load_pool(loader, name=name, paths=paths.get(name, []), rng=rng, error_log=error_log)
            for name in ONE_SHOT_POOLS.values()
        }
        loop_pool = load_pool(
            loader, name="falling_loop", paths=paths.get("falling_loop", []), rng=rng, error_log=error_log
        )
        falling_loop = loop_pool.clips()[0] if len(loop_pool) else None
        return cls(loader=loader, master_volume=master_volume, pools=pools, falling_loop=falling_loop)

    @property
    def falling_loop_volume(self) -> float:
        return self._falling_loop_volume

    def play(self, event: LocomotionEvent) -> None:
        if event.kind == LocomotionEventKind.FALLING_LOOP_VOLUME:
            self.set_falling_loop_volume(event.volume)
            return
        pool_name = ONE_SHOT_POOLS.get(event.kind)
        if pool_name is None:
            return
        snd = self.pools[pool_name].choose()
        vol = _clamp01(float(self.master_volume) * float(event.volume))
        snd.stop()
        snd.setVolume(float(vol))
        snd.play()

    def set_falling_loop_volume(self, volume: float) -> None:
        self._falling_loop_volume = _clamp01(volume)
        self._apply_falling_loop_volume()

    def stop(self) -> None:
        self._falling_loop_volume = 0.0
        self._apply_falling_loop_volume()

    def _apply_falling_loop_volume(self) -> None:
        snd = self._falling_loop
        if snd is None:
            return
        vol = _clamp01(self.master_volume * self._falling_loop_volume)
        snd.setVolume(float(vol))
        if vol > 0.0 and not self._falling_loop_playing:
            snd.play()
            self._falling_loop_playing = True
        elif vol <= 0.0 and self._falling_loop_playing:
            snd.stop()
            self._falling_loop_playing = False


__all__ = ["FootstepAudioSink", "ONE_SHOT_POOLS", "load_pool"]
