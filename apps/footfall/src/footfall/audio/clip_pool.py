from __future__ import annotations

import random
from typing import Any, Sequence


class NoAssetAvailableError(LookupError):
    """Raised when a sound has to be picked from a pool that holds no clips."""

    def __init__(self, pool: str) -> None:
        super().__init__(f"No clips available in pool '{pool}'")
        self.pool = str(pool)


class ClipPool:
    """Named set of interchangeable clips; each play picks one at random."""

    def __init__(self, name: str, clips: Sequence[Any] = (), *, rng: random.Random | None = None) -> None:
        self.name = str(name)
        self._clips: list[Any] = [c for c in clips if c is not None]
        self._rng = rng if rng is not None else random.Random()

    def __len__(self) -> int:
        return len(self._clips)

    def clips(self) -> list[Any]:
        return list(self._clips)

    def add(self, clip: Any) -> None:
        if clip is not None:
            self._clips.append(clip)

    def choose(self) -> Any:
        if not self._clips:
            raise NoAssetAvailableError(self.name)
        return self._clips[self._rng.randrange(len(self._clips))]


__all__ = ["ClipPool", "NoAssetAvailableError"]
