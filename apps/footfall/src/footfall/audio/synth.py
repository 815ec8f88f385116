from __future__ import annotations

import math
import random
import sys
import wave
from array import array
from pathlib import Path

from footfall.state import state_dir

SAMPLE_RATE = 22050
CACHE_VERSION = "footfall_v2"


def write_wav(path: Path, *, samples: list[float], sample_rate: int = SAMPLE_RATE) -> None:
    """Write 16-bit mono PCM; samples are clipped to [-1, 1]."""

    pcm = array("h", (int(max(-1.0, min(1.0, float(s))) * 32767.0) for s in samples))
    if sys.byteorder == "big":
        pcm.byteswap()
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(int(sample_rate))
        wf.writeframes(pcm.tobytes())


def _sample_count(duration_s: float, sample_rate: int) -> int:
    return max(2, int(float(duration_s) * float(sample_rate)))


def _smoothed_noise(total: int, *, seed: int, smoothing: float) -> list[float]:
    # One-pole low-pass over white noise; higher smoothing reads as duller material.
    rng = random.Random(int(seed))
    k = max(0.0, min(0.99, float(smoothing)))
    out: list[float] = []
    lp = 0.0
    for _ in range(total):
        lp = lp * k + rng.uniform(-1.0, 1.0) * (1.0 - k)
        out.append(lp)
    return out


def _burst(
    *,
    duration_s: float,
    amp: float,
    f0: float,
    f1: float,
    decay: float,
    noise_mix: float,
    smoothing: float,
    seed: int,
    sample_rate: int,
) -> list[float]:
    """
    Shared one-shot shape: an exponentially decaying mix of smoothed noise and a pitch sweep.

    Footsteps are short, bright and noisy; landings sweep lower and decay slower.
    """

    total = _sample_count(duration_s, sample_rate)
    noise = _smoothed_noise(total, seed=seed, smoothing=smoothing)
    # Smoothing shrinks the noise amplitude; scale it back toward unit range.
    noise_gain = 1.0 / max(0.1, 1.0 - float(smoothing)) ** 0.5
    mix = max(0.0, min(1.0, float(noise_mix)))
    out: list[float] = []
    ph = 0.0
    for i in range(total):
        t = float(i) / float(total - 1)
        env = math.exp(-float(decay) * t) * min(1.0, t * 200.0)
        ph += (math.tau * (float(f0) + (float(f1) - float(f0)) * t)) / float(sample_rate)
        out.append(float(amp) * env * (math.sin(ph) * (1.0 - mix) + noise[i] * noise_gain * mix))
    return out


def footstep_samples(
    *,
    duration_s: float,
    amp: float,
    sample_rate: int = SAMPLE_RATE,
    seed: int = 7,
    click_hz: float = 180.0,
) -> list[float]:
    return _burst(
        duration_s=duration_s,
        amp=amp,
        f0=click_hz,
        f1=click_hz * 0.6,
        decay=9.0,
        noise_mix=0.65,
        smoothing=0.76,
        seed=seed,
        sample_rate=sample_rate,
    )


def impact_samples(
    *,
    f0: float,
    f1: float,
    duration_s: float,
    amp: float,
    noise_mix: float,
    sample_rate: int = SAMPLE_RATE,
    seed: int = 1,
) -> list[float]:
    """Falling-pitch thump; heavier landings use lower sweeps and more noise."""

    return _burst(
        duration_s=duration_s,
        amp=amp,
        f0=f0,
        f1=f1,
        decay=5.0,
        noise_mix=noise_mix,
        smoothing=0.85,
        seed=seed,
        sample_rate=sample_rate,
    )


def wind_loop_samples(*, duration_s: float, amp: float, sample_rate: int = SAMPLE_RATE, seed: int = 29) -> list[float]:
    # Doubly smoothed noise with a slow swell; the ends taper to zero so the loop is seamless.
    total = _sample_count(duration_s, sample_rate)
    coarse = _smoothed_noise(total, seed=seed, smoothing=0.92)
    out: list[float] = []
    lp = 0.0
    for i in range(total):
        t = float(i) / float(total)
        lp = lp * 0.80 + coarse[i] * 0.20
        swell = 0.70 + 0.30 * math.sin(math.tau * 2.0 * t)
        edge = math.sin(math.pi * t) ** 0.25
        out.append(float(amp) * 3.0 * lp * swell * edge)
    return out


def clip_cache_dir() -> Path:
    return state_dir() / "audio_cache" / CACHE_VERSION


def ensure_default_clips() -> dict[str, list[Path]]:
    """
    Write the procedural default clip set (once) and return paths grouped by pool name.

    Pools: `step`, `landing`, `long_fall_landing`, `falling_loop`.
    """

    root = clip_cache_dir()
    root.mkdir(parents=True, exist_ok=True)
    pools: dict[str, list[Path]] = {"step": [], "landing": [], "long_fall_landing": [], "falling_loop": []}

    for idx, (seed, click_hz) in enumerate(((7, 180.0), (13, 164.0), (21, 196.0), (34, 172.0))):
        p = root / f"step_{idx}.wav"
        if not p.exists():
            write_wav(p, samples=footstep_samples(duration_s=0.10, amp=0.50, seed=seed, click_hz=click_hz))
        pools["step"].append(p)

    for idx, (f0, seed) in enumerate(((240.0, 3), (210.0, 5))):
        p = root / f"landing_{idx}.wav"
        if not p.exists():
            write_wav(p, samples=impact_samples(f0=f0, f1=80.0, duration_s=0.20, amp=0.70, noise_mix=0.40, seed=seed))
        pools["landing"].append(p)

    for idx, (f0, seed) in enumerate(((140.0, 11), (120.0, 17))):
        p = root / f"long_fall_landing_{idx}.wav"
        if not p.exists():
            write_wav(p, samples=impact_samples(f0=f0, f1=40.0, duration_s=0.38, amp=0.90, noise_mix=0.58, seed=seed))
        pools["long_fall_landing"].append(p)

    loop = root / "falling_loop.wav"
    if not loop.exists():
        write_wav(loop, samples=wind_loop_samples(duration_s=2.0, amp=0.60))
    pools["falling_loop"].append(loop)
    return pools


__all__ = [
    "CACHE_VERSION",
    "clip_cache_dir",
    "ensure_default_clips",
    "footstep_samples",
    "impact_samples",
    "wind_loop_samples",
    "write_wav",
]
