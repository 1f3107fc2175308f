import dataclasses

import pytest

from motioncatch.config import (
    COMBO_TIERS,
    DEFAULT_CONFIG,
    PRESETS,
    AudioConfig,
    GameConfig,
    MotionConfig,
)
from motioncatch.types import ComboTier, FlashKind, Waveform
from motioncatch.utils import hex_to_bgr


def test_default_config_values():
    cfg = DEFAULT_CONFIG
    assert (cfg.canvas.width, cfg.canvas.height) == (800, 600)
    assert cfg.difficulty.step_interval == 10000
    assert cfg.note.hit_radius_multiplier == 1.3
    assert (cfg.motion.detection_width, cfg.motion.detection_height) == (160, 120)
    assert [t.combo_threshold for t in cfg.combo_tiers] == [1, 3, 6, 10]
    assert cfg.combo_tiers[-1].flash == FlashKind.BRIGHT
    assert len(cfg.colors) == 5


def test_config_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.canvas.width = 1024
    with pytest.raises(TypeError):
        PRESETS["marimba"] = PRESETS["retro"]


def test_with_overrides_returns_a_new_config():
    cfg = DEFAULT_CONFIG.with_overrides(motion=MotionConfig(threshold=12))
    assert cfg.motion.threshold == 12
    assert DEFAULT_CONFIG.motion.threshold == 30
    assert cfg.audio is DEFAULT_CONFIG.audio


def test_presets():
    assert list(PRESETS) == ["marimba", "piano", "chime", "synth", "retro"]
    assert PRESETS["synth"].filter_sweep
    assert PRESETS["synth"].osc1_type == Waveform.SAWTOOTH
    assert PRESETS["marimba"].filter_freq is None
    assert all(p.name == key for key, p in PRESETS.items())


@pytest.mark.parametrize(
    "kwargs",
    [
        {"chord": ()},
        {"chord": (100.0, 200.0), "weights": (1,)},
        {"chord": (100.0,), "weights": (0,)},
        {"chord": (100.0, 200.0), "weights": (2, -1)},
    ],
)
def test_invalid_audio_config(kwargs):
    with pytest.raises(ValueError):
        AudioConfig(**kwargs)


def test_unknown_default_preset_is_rejected():
    with pytest.raises(ValueError):
        GameConfig(audio=AudioConfig(default_preset="kazoo"))


def test_unordered_tiers_are_rejected():
    with pytest.raises(ValueError):
        GameConfig(combo_tiers=tuple(reversed(COMBO_TIERS)))
    with pytest.raises(ValueError):
        GameConfig(combo_tiers=())
    GameConfig(combo_tiers=(ComboTier(0, 5, 1.0),))


def test_hex_to_bgr():
    assert hex_to_bgr("#22d3ee") == (0xEE, 0xD3, 0x22)
    with pytest.raises(ValueError):
        hex_to_bgr("#fff")
