"""
Static game configuration.

Everything here is loaded once at startup and never mutated; use
``GameConfig.with_overrides`` to derive a variant (e.g. from command-line flags).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Tuple

from .types import ColorBGR, ComboTier, FlashKind, TimbrePreset, Waveform
from .utils import hex_to_bgr


@dataclass(frozen=True)
class CanvasConfig:
    width: int = 800
    height: int = 600


@dataclass(frozen=True)
class DifficultyConfig:
    initial_speed: float = 2.0  # px per tick
    max_speed: float = 8.0
    speed_increment: float = 0.1

    initial_spawn_interval: float = 1500.0  # ms
    min_spawn_interval: float = 400.0
    spawn_decrement: float = 50.0

    step_interval: float = 10000.0  # ms between difficulty steps

    def __post_init__(self) -> None:
        if self.max_speed <= self.initial_speed:
            raise ValueError("max_speed must be greater than initial_speed")
        if self.min_spawn_interval > self.initial_spawn_interval:
            raise ValueError("min_spawn_interval must not exceed initial_spawn_interval")
        if self.speed_increment < 0 or self.spawn_decrement < 0:
            raise ValueError("difficulty steps must be non-negative")
        if self.step_interval <= 0:
            raise ValueError("step_interval must be positive")


@dataclass(frozen=True)
class NoteConfig:
    radius: float = 25.0
    hit_radius_multiplier: float = 1.3
    shapes: Tuple[str, ...] = ("circle", "diamond")


@dataclass(frozen=True)
class ParticleConfig:
    base_size: float = 4.0
    speed: float = 6.0
    friction: float = 0.95
    life_decay: float = 0.02


@dataclass(frozen=True)
class FloatingTextConfig:
    duration_ms: float = 300.0
    speed: float = 2.0
    font_size: int = 24
    frame_ms: float = 16.0  # approximate tick length used to derive the life decay


@dataclass(frozen=True)
class AudioConfig:
    # C major 7: C4, E4, G4, B4
    chord: Tuple[float, ...] = (261.63, 329.63, 392.00, 493.88)
    # root and fifth weighted higher
    weights: Tuple[int, ...] = (3, 2, 3, 2)
    base_volume: float = 0.3
    sample_rate: int = 48000
    default_preset: str = "marimba"

    def __post_init__(self) -> None:
        if not self.chord:
            raise ValueError("chord must contain at least one frequency")
        if len(self.chord) != len(self.weights):
            raise ValueError("chord and weights must have the same length")
        if sum(self.weights) <= 0 or any(w < 0 for w in self.weights):
            raise ValueError("weights must be non-negative with a positive total")


@dataclass(frozen=True)
class MotionConfig:
    detection_width: int = 160
    detection_height: int = 120
    threshold: float = 30.0  # mean abs pixel difference (0..255)
    sample_size: int = 20  # minimum window side, detection pixels


PALETTE: Tuple[ColorBGR, ...] = tuple(
    hex_to_bgr(c)
    for c in (
        "#22d3ee",  # cyan
        "#a855f7",  # purple
        "#f472b6",  # pink
        "#34d399",  # emerald
        "#fbbf24",  # amber
    )
)

COMBO_TIERS: Tuple[ComboTier, ...] = (
    ComboTier(combo_threshold=1, particle_count=12, size_multiplier=1.0, flash=FlashKind.NONE),
    ComboTier(combo_threshold=3, particle_count=20, size_multiplier=1.2, flash=FlashKind.NONE),
    ComboTier(combo_threshold=6, particle_count=30, size_multiplier=1.5, flash=FlashKind.DIM),
    ComboTier(combo_threshold=10, particle_count=40, size_multiplier=2.0, flash=FlashKind.BRIGHT),
)

PRESETS: Mapping[str, TimbrePreset] = MappingProxyType(
    {
        "marimba": TimbrePreset(
            name="marimba",
            label="Marimba",
            osc1_type=Waveform.SINE,
            osc2_type=Waveform.TRIANGLE,
            osc2_ratio=2.0,  # octave up
            osc2_volume=0.3,
            attack=0.01,
            decay=0.15,
        ),
        "piano": TimbrePreset(
            name="piano",
            label="Piano",
            osc1_type=Waveform.TRIANGLE,
            osc2_type=Waveform.SINE,
            osc2_ratio=3.0,
            osc2_volume=0.4,
            attack=0.005,
            decay=0.4,
            filter_freq=4000.0,
            use_reverb=True,
        ),
        "chime": TimbrePreset(
            name="chime",
            label="Chime",
            osc1_type=Waveform.SINE,
            osc2_type=Waveform.SINE,
            osc2_ratio=2.5,  # inharmonic, metallic
            osc2_volume=0.5,
            attack=0.001,
            decay=0.8,
            filter_freq=8000.0,
            use_reverb=True,
        ),
        "synth": TimbrePreset(
            name="synth",
            label="Synth",
            osc1_type=Waveform.SAWTOOTH,
            osc2_type=Waveform.SQUARE,
            osc2_ratio=1.0,
            osc2_volume=0.3,
            attack=0.02,
            decay=0.2,
            filter_freq=2000.0,
            filter_sweep=True,
        ),
        "retro": TimbrePreset(
            name="retro",
            label="8-bit",
            osc1_type=Waveform.SQUARE,
            osc2_type=Waveform.SQUARE,
            osc2_ratio=2.0,
            osc2_volume=0.2,
            attack=0.001,
            decay=0.08,
        ),
    }
)


@dataclass(frozen=True)
class GameConfig:
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    difficulty: DifficultyConfig = field(default_factory=DifficultyConfig)
    note: NoteConfig = field(default_factory=NoteConfig)
    particle: ParticleConfig = field(default_factory=ParticleConfig)
    floating_text: FloatingTextConfig = field(default_factory=FloatingTextConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    motion: MotionConfig = field(default_factory=MotionConfig)
    colors: Tuple[ColorBGR, ...] = PALETTE
    combo_tiers: Tuple[ComboTier, ...] = COMBO_TIERS
    presets: Mapping[str, TimbrePreset] = field(default_factory=lambda: PRESETS)

    def __post_init__(self) -> None:
        if not self.colors:
            raise ValueError("colors must not be empty")
        if not self.note.shapes:
            raise ValueError("note.shapes must not be empty")
        if not self.combo_tiers:
            raise ValueError("combo_tiers must not be empty")
        thresholds = [t.combo_threshold for t in self.combo_tiers]
        if thresholds != sorted(thresholds):
            raise ValueError("combo_tiers must be ordered by combo_threshold")
        if self.audio.default_preset not in self.presets:
            raise ValueError(f"Unknown default preset '{self.audio.default_preset}'. Available: {list(self.presets)}")

    def with_overrides(self, **sections) -> "GameConfig":
        """Return a copy with whole sections replaced, e.g. ``audio=AudioConfig(base_volume=0.2)``."""
        return replace(self, **sections)


DEFAULT_CONFIG = GameConfig()
