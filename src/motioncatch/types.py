from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


ColorBGR = Tuple[int, int, int]


class FlashKind(str, Enum):
    NONE = "none"
    DIM = "dim"
    BRIGHT = "bright"


class Waveform(str, Enum):
    SINE = "sine"
    TRIANGLE = "triangle"
    SAWTOOTH = "sawtooth"
    SQUARE = "square"


@dataclass
class Note:
    """A falling target. Position is the note center in playfield pixels."""

    x: float
    y: float
    radius: float
    fall_speed: float
    color: ColorBGR
    shape: str
    born_at: float
    hit_radius_multiplier: float = 1.3

    @property
    def hit_radius(self) -> float:
        return self.radius * self.hit_radius_multiplier


@dataclass
class ComboState:
    combo: int = 0
    max_combo: int = 0
    score: int = 0

    def catch(self) -> int:
        """Register a catch and return the post-increment combo."""
        self.combo += 1
        self.score += self.combo
        if self.combo > self.max_combo:
            self.max_combo = self.combo
        return self.combo

    def miss(self) -> None:
        self.combo = 0


@dataclass(frozen=True)
class ComboTier:
    combo_threshold: int
    particle_count: int
    size_multiplier: float
    flash: FlashKind = FlashKind.NONE


@dataclass(frozen=True)
class TimbrePreset:
    """Named bundle of oscillator, envelope and effect settings."""

    name: str
    label: str
    osc1_type: Waveform
    osc2_type: Waveform
    osc2_ratio: float
    osc2_volume: float
    attack: float  # seconds
    decay: float  # seconds
    filter_freq: Optional[float] = None  # Hz, low-pass cutoff
    filter_sweep: bool = False
    use_reverb: bool = False


@dataclass(frozen=True)
class SynthesisParameters:
    attack: float
    decay: float
    pitch_multiplier: float
    delay_time: float
    delay_feedback: float
    burst_duration: float


@dataclass(frozen=True)
class CatchEvent:
    note: Note
    combo: int
    score: int


@dataclass(frozen=True)
class ComboChanged:
    combo: int
