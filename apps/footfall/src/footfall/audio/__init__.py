"""Audio side of locomotion events: clip pools, procedural defaults, and the Panda3D sink."""

from footfall.audio.clip_pool import ClipPool, NoAssetAvailableError
from footfall.audio.sink import FootstepAudioSink

__all__ = ["ClipPool", "FootstepAudioSink", "NoAssetAvailableError"]
