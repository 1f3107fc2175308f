"""Difficulty/combo to synthesis-parameter mapping. Pure functions only."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .types import SynthesisParameters, TimbrePreset
from .utils import clamp

BASE_DELAY_TIME = 0.1  # seconds
BASE_DELAY_FEEDBACK = 0.3
BASE_BURST_DURATION = 0.05  # seconds

LOUD_COMBO = 6
LOUD_COMBO_GAIN = 1.1


def compute_parameters(preset: TimbrePreset, progress: float) -> SynthesisParameters:
    """
    Shorten, brighten and tighten the sound as difficulty rises.

    At full progress the attack is halved, the decay cut by 60%, pitch raised
    by 10%, the echo shortened and thinned, and the catch burst made crisper.
    """
    p = clamp(float(progress), 0.0, 1.0)
    return SynthesisParameters(
        attack=preset.attack * (1 - 0.5 * p),
        decay=preset.decay * (1 - 0.6 * p),
        pitch_multiplier=1 + 0.1 * p,
        delay_time=BASE_DELAY_TIME * (1 - 0.5 * p),
        delay_feedback=BASE_DELAY_FEEDBACK * (1 - 0.3 * p),
        burst_duration=BASE_BURST_DURATION * (1 - 0.4 * p),
    )


def volume_for_combo(base_volume: float, combo: int) -> float:
    if combo >= LOUD_COMBO:
        return base_volume * LOUD_COMBO_GAIN
    return base_volume


def choose_pitch(chord: Sequence[float], weights: Sequence[int], rng: np.random.Generator) -> float:
    """Weighted random pick of one chord tone (each tone repeated ``weight`` times)."""
    pool = np.repeat(np.asarray(chord, dtype=np.float64), np.asarray(weights, dtype=np.int64))
    return float(pool[int(rng.integers(0, pool.size))])
