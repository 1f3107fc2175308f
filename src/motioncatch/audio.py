from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np
from scipy.signal import butter, sosfilt

from .config import AudioConfig, PRESETS
from .mapping import choose_pitch, compute_parameters, volume_for_combo
from .types import SynthesisParameters, TimbrePreset, Waveform
from .utils import clamp

logger = logging.getLogger(__name__)


ENVELOPE_FLOOR = 0.001
RELEASE_TAIL_S = 0.1  # oscillators run this long past the end of the decay
DELAY_LOOP_CUTOFF_HZ = 2000.0
DELAY_MAX_REPEATS = 32

BURST_AMPLITUDE = 0.3
BURST_GAIN = 0.1
BURST_HIGHPASS_HZ = 3000.0

SWEEP_BLOCK = 256  # samples per cutoff update when sweeping the filter

Cutoff = Union[float, np.ndarray]


# --- Primitives ---


def oscillator(waveform: Waveform, freq: float, t: np.ndarray) -> np.ndarray:
    phase = (freq * t) % 1.0
    if waveform == Waveform.SINE:
        return np.sin(2.0 * np.pi * phase)
    if waveform == Waveform.SQUARE:
        return np.where(phase < 0.5, 1.0, -1.0)
    if waveform == Waveform.SAWTOOTH:
        return 2.0 * phase - 1.0
    if waveform == Waveform.TRIANGLE:
        return 1.0 - 4.0 * np.abs(phase - 0.5)
    raise ValueError(f"Unknown waveform '{waveform}'")


def envelope(t: np.ndarray, peak: float, attack: float, decay: float, floor: float = ENVELOPE_FLOOR) -> np.ndarray:
    """
    Linear ramp 0 -> peak over ``attack``, then exponential ramp peak -> floor
    over ``decay``, then hold at ``floor``.
    """
    env = np.full(t.shape, floor, dtype=np.float64)
    if peak <= 0:
        return np.zeros(t.shape, dtype=np.float64)

    if attack > 0:
        rising = t < attack
        env[rising] = peak * (t[rising] / attack)
    else:
        rising = np.zeros(t.shape, dtype=bool)

    falling = (~rising) & (t < attack + decay)
    if decay > 0 and peak > floor:
        frac = (t[falling] - attack) / decay
        env[falling] = peak * (floor / peak) ** frac
    else:
        env[falling] = peak
    return env


def _sos(cutoff_hz: float, sample_rate: int, btype: str) -> np.ndarray:
    norm = clamp(cutoff_hz / (sample_rate / 2.0), 1e-4, 0.99)
    return butter(2, norm, btype=btype, output="sos")


def lowpass(x: np.ndarray, cutoff_hz: Cutoff, sample_rate: int) -> np.ndarray:
    """
    Second-order low-pass. ``cutoff_hz`` may be a per-sample array, in which
    case the filter is re-designed every ``SWEEP_BLOCK`` samples with its
    state carried across blocks.
    """
    if np.isscalar(cutoff_hz):
        return sosfilt(_sos(float(cutoff_hz), sample_rate, "low"), x)

    cutoffs = np.asarray(cutoff_hz, dtype=np.float64)
    out = np.empty_like(x, dtype=np.float64)
    zi = np.zeros((1, 2))
    for start in range(0, x.size, SWEEP_BLOCK):
        end = min(x.size, start + SWEEP_BLOCK)
        sos = _sos(float(cutoffs[start]), sample_rate, "low")
        out[start:end], zi = sosfilt(sos, x[start:end], zi=zi)
    return out


def highpass(x: np.ndarray, cutoff_hz: float, sample_rate: int) -> np.ndarray:
    return sosfilt(_sos(cutoff_hz, sample_rate, "high"), x)


def feedback_delay(
    x: np.ndarray,
    sample_rate: int,
    delay_time: float,
    feedback: float,
    loop_cutoff_hz: float = DELAY_LOOP_CUTOFF_HZ,
) -> np.ndarray:
    """
    Wet output of a delay line whose feedback path runs through a low-pass.

    The k-th repeat is the input delayed by ``k * delay_time``, low-passed
    ``k - 1`` times and scaled by ``feedback ** (k - 1)``. Repeats stop once
    they fall below the envelope floor. The result is longer than ``x``.
    """
    d = max(1, int(round(delay_time * sample_rate)))
    repeats = 1
    gain = 1.0
    while feedback > 0 and gain * feedback >= ENVELOPE_FLOOR and repeats < DELAY_MAX_REPEATS:
        gain *= feedback
        repeats += 1

    sos = _sos(loop_cutoff_hz, sample_rate, "low")
    out = np.zeros(x.size + repeats * d, dtype=np.float64)
    tap = x.astype(np.float64)
    for k in range(1, repeats + 1):
        out[k * d : k * d + tap.size] += tap
        tap = sosfilt(sos, tap) * feedback
    return out


# --- Renders ---


def strike_duration(params: SynthesisParameters) -> float:
    return params.attack + params.decay + RELEASE_TAIL_S


def render_strike(
    preset: TimbrePreset,
    params: SynthesisParameters,
    frequency: float,
    volume: float,
    combo: int,
    sample_rate: int,
) -> np.ndarray:
    """Render one note strike as a mono float32 buffer."""
    n = max(1, int(sample_rate * strike_duration(params)))
    t = np.arange(n, dtype=np.float64) / float(sample_rate)

    tone1 = oscillator(preset.osc1_type, frequency, t) * envelope(t, volume, params.attack, params.decay)
    tone2 = oscillator(preset.osc2_type, frequency * preset.osc2_ratio, t) * envelope(
        t, volume * preset.osc2_volume, params.attack, params.decay
    )
    y = tone1 + tone2

    if preset.filter_freq:
        cutoff: Cutoff = float(preset.filter_freq)
        if preset.filter_sweep:
            # 2x -> 0.5x cutoff over the decay window, then hold
            frac = np.clip(t / max(params.decay, 1e-6), 0.0, 1.0)
            cutoff = preset.filter_freq * 2.0 * (0.25**frac)
        y = lowpass(y, cutoff, sample_rate)

    if preset.use_reverb or combo >= 3:
        wet = feedback_delay(y, sample_rate, params.delay_time, params.delay_feedback)
        dry = np.zeros_like(wet)
        dry[: y.size] = y
        y = dry + wet

    return y.astype(np.float32)


def render_burst(duration: float, sample_rate: int, rng: np.random.Generator) -> np.ndarray:
    """Short high-passed noise burst with an exponential decay."""
    duration = max(0.0, float(duration))
    n = max(1, int(sample_rate * duration))
    noise = (rng.random(n) * 2.0 - 1.0) * BURST_AMPLITUDE
    filtered = highpass(noise, BURST_HIGHPASS_HZ, sample_rate)
    t = np.arange(n, dtype=np.float64) / float(sample_rate)
    env = BURST_GAIN * (ENVELOPE_FLOOR / BURST_GAIN) ** (t / max(duration, 1e-6))
    return (filtered * env).astype(np.float32)


# --- Output device ---


@dataclass
class _Voice:
    samples: np.ndarray
    pos: int = 0

    @property
    def done(self) -> bool:
        return self.pos >= self.samples.size


class AudioOutput:
    """
    Fire-and-forget mixer on top of a ``sounddevice`` output stream.

    Finished buffers are handed to the audio callback through a queue and
    mixed until they run out. Nothing is queued while the stream is not
    running.
    """

    def __init__(self, sample_rate: int = 48000, channels: int = 2, volume: float = 1.0) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.volume = max(0.0, min(1.0, volume))
        self._stream = None
        self._pending: "queue.SimpleQueue[np.ndarray]" = queue.SimpleQueue()
        self._voices: List[_Voice] = []
        self._lock = threading.Lock()
        self._sample_index = 0

    @property
    def ready(self) -> bool:
        return self._stream is not None

    def start(self) -> bool:
        """Open the default output device. Returns False (and stays silent) when that fails."""
        if self._stream is not None:
            return True
        try:
            import sounddevice as sd  # type: ignore

            stream = sd.OutputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="float32",
                callback=self._callback,
                blocksize=0,
            )
            stream.start()
        except Exception as e:
            logger.warning("Audio output unavailable, continuing without sound: %s", e)
            return False
        self._stream = stream
        logger.info("Audio output started (%d Hz, %d ch)", self.sample_rate, self.channels)
        return True

    def stop(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        finally:
            self._stream = None

    def play(self, samples: np.ndarray) -> bool:
        if self._stream is None:
            return False
        self._pending.put(np.asarray(samples, dtype=np.float32).reshape(-1))
        return True

    def current_sample(self) -> int:
        with self._lock:
            return int(self._sample_index)

    def _callback(self, outdata, frames, time_info, status) -> None:
        while True:
            try:
                self._voices.append(_Voice(self._pending.get_nowait()))
            except queue.Empty:
                break

        mono = np.zeros(frames, dtype=np.float32)
        keep: List[_Voice] = []
        for v in self._voices:
            chunk = v.samples[v.pos : v.pos + frames]
            mono[: chunk.size] += chunk
            v.pos += chunk.size
            if not v.done:
                keep.append(v)
        self._voices = keep

        mono *= self.volume
        np.clip(mono, -1.0, 1.0, out=mono)
        outdata[:] = mono.reshape(-1, 1)
        with self._lock:
            self._sample_index += frames

    def __enter__(self) -> "AudioOutput":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


# --- Synthesizer ---


class AudioSynthesizer:
    """
    Catch sounds: a two-oscillator strike plus a noise burst.

    ``output`` is anything with ``sample_rate``, ``ready`` and ``play(samples)``
    (normally an ``AudioOutput``). Every sound is fully rendered before it is
    handed over, so changing the preset or difficulty only affects later calls.
    """

    def __init__(
        self,
        output,
        config: Optional[AudioConfig] = None,
        presets=PRESETS,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._output = output
        self._config = config or AudioConfig()
        self._presets = presets
        self._rng = rng if rng is not None else np.random.default_rng()
        self._preset_name = self._config.default_preset
        self._progress = 0.0

    @property
    def preset_name(self) -> str:
        return self._preset_name

    @property
    def preset(self) -> TimbrePreset:
        return self._presets[self._preset_name]

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def available(self) -> bool:
        return bool(getattr(self._output, "ready", False))

    def set_preset(self, name: str) -> bool:
        if name not in self._presets:
            logger.warning("Ignoring unknown preset '%s'. Available: %s", name, list(self._presets))
            return False
        if name != self._preset_name:
            logger.info("Preset: %s", name)
        self._preset_name = name
        return True

    def set_difficulty_progress(self, progress: float) -> None:
        self._progress = clamp(float(progress), 0.0, 1.0)

    def parameters(self) -> SynthesisParameters:
        return compute_parameters(self.preset, self._progress)

    def strike(
        self,
        params: SynthesisParameters,
        combo: int,
        preset: Optional[TimbrePreset] = None,
    ) -> Optional[np.ndarray]:
        """Render and play one note. Returns the buffer, or None when audio is unavailable."""
        if not self.available:
            return None
        preset = preset or self.preset
        base = choose_pitch(self._config.chord, self._config.weights, self._rng)
        volume = volume_for_combo(self._config.base_volume, combo)
        samples = render_strike(
            preset,
            params,
            frequency=base * params.pitch_multiplier,
            volume=volume,
            combo=combo,
            sample_rate=self._output.sample_rate,
        )
        self._output.play(samples)
        return samples

    def burst(self, duration: float) -> Optional[np.ndarray]:
        if not self.available:
            return None
        samples = render_burst(duration, self._output.sample_rate, self._rng)
        self._output.play(samples)
        return samples

    def play_catch(self, combo: int) -> None:
        params = self.parameters()
        self.strike(params, combo)
        self.burst(params.burst_duration)

    def preview(self) -> Optional[np.ndarray]:
        """Play the current preset as it sounds at the start of a game."""
        return self.strike(compute_parameters(self.preset, 0.0), combo=1)
