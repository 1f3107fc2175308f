from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple, Union

import numpy as np

from .audio import AudioSynthesizer
from .config import GameConfig
from .difficulty import DifficultyController
from .feedback import FeedbackFactory, Flash, FloatingText, Particle
from .field import NoteField
from .motion import MotionSensor
from .types import CatchEvent, ComboChanged, FlashKind, Note

logger = logging.getLogger(__name__)


# --- Input events (applied between ticks) ---


@dataclass(frozen=True)
class StartGame:
    camera_ok: bool = True


@dataclass(frozen=True)
class TogglePause:
    pass


@dataclass(frozen=True)
class SelectPreset:
    name: str


@dataclass(frozen=True)
class Quit:
    pass


InputEvent = Union[StartGame, TogglePause, SelectPreset, Quit]


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of everything the renderer needs for one frame."""

    notes: Tuple[Note, ...]
    particles: Tuple[Particle, ...]
    texts: Tuple[FloatingText, ...]
    flash_alpha: float
    flash_kind: FlashKind
    score: int
    combo: int
    max_combo: int
    speed: float
    progress: float
    running: bool
    paused: bool
    preset: str


@dataclass(frozen=True)
class TickResult:
    catches: List[CatchEvent]
    combo_changed: Optional[ComboChanged]
    difficulty_stepped: bool
    snapshot: Snapshot


@dataclass
class GameState:
    playfield: NoteField
    difficulty: DifficultyController
    particles: List[Particle] = field(default_factory=list)
    texts: List[FloatingText] = field(default_factory=list)
    flash: Flash = field(default_factory=Flash)
    running: bool = False
    paused: bool = False
    paused_at: Optional[float] = None
    quit: bool = False


class Game:
    """
    Single-threaded game orchestrator.

    The host loop calls ``handle_input`` for user actions and ``tick`` once
    per frame with a monotonic timestamp in milliseconds. Nothing advances
    while paused, and resuming shifts the difficulty and spawn timers by the
    paused duration.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        sensor: Optional[MotionSensor] = None,
        synthesizer: Optional[AudioSynthesizer] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.sensor = sensor or MotionSensor(self.config.motion, self.config.canvas)
        self.synthesizer = synthesizer
        self.feedback = FeedbackFactory(self.config.combo_tiers, self.config.particle, rng=self.rng)
        self.state = self._new_state(0.0)

    def _new_state(self, now: float) -> GameState:
        return GameState(
            playfield=NoteField(self.config, rng=self.rng),
            difficulty=DifficultyController(self.config.difficulty, start_at=now),
        )

    # --- Lifecycle ---

    def start(self, now: float, camera_ok: bool = True) -> None:
        self.state = self._new_state(now)
        self.state.running = True
        if camera_ok:
            if not self.sensor.enabled:
                self.sensor.reset()
        else:
            logger.error("Camera unavailable; the game runs but notes cannot be caught")
            self.sensor.disable()
        if self.synthesizer is not None:
            self.synthesizer.set_difficulty_progress(0.0)
        logger.info("Game started")

    def pause(self, now: float) -> None:
        st = self.state
        if not st.running or st.paused:
            return
        st.paused = True
        st.paused_at = now
        logger.info("Paused")

    def resume(self, now: float) -> None:
        st = self.state
        if not st.paused:
            return
        paused_for = now - (st.paused_at if st.paused_at is not None else now)
        st.difficulty.shift_clock(paused_for)
        st.playfield.shift_clock(paused_for)
        st.paused = False
        st.paused_at = None
        logger.info("Resumed after %.0f ms", paused_for)

    def toggle_pause(self, now: float) -> None:
        if self.state.paused:
            self.resume(now)
        else:
            self.pause(now)

    @property
    def running(self) -> bool:
        return self.state.running and not self.state.quit

    @property
    def paused(self) -> bool:
        return self.state.paused

    def handle_input(self, event: InputEvent, now: float) -> None:
        if isinstance(event, StartGame):
            self.start(now, camera_ok=event.camera_ok)
        elif isinstance(event, TogglePause):
            if self.state.running:
                self.toggle_pause(now)
        elif isinstance(event, SelectPreset):
            if self.synthesizer is not None and self.synthesizer.set_preset(event.name):
                self.synthesizer.preview()
        elif isinstance(event, Quit):
            self.state.quit = True
            self.state.running = False
        else:
            raise TypeError(f"Unsupported input event: {event!r}")

    # --- Tick ---

    def tick(self, now: float, frame: Optional[np.ndarray] = None) -> Optional[TickResult]:
        """Run one frame. Returns None when the game is not running or is paused."""
        st = self.state
        if not st.running or st.paused:
            return None

        self.sensor.refresh(frame)

        stepped = st.difficulty.advance(now)
        if self.synthesizer is not None:
            self.synthesizer.set_difficulty_progress(st.difficulty.progress)

        st.playfield.spawn_if_due(now, st.difficulty.speed, st.difficulty.spawn_interval)
        combo_changed = st.playfield.advance()
        self._update_effects()

        catches = st.playfield.resolve_collisions(self.sensor)
        for event in catches:
            self._on_catch(event)

        return TickResult(
            catches=catches,
            combo_changed=combo_changed,
            difficulty_stepped=stepped,
            snapshot=self.snapshot(),
        )

    def _update_effects(self) -> None:
        st = self.state
        for p in st.particles:
            p.update()
        st.particles = [p for p in st.particles if not p.dead]
        for t in st.texts:
            t.update()
        st.texts = [t for t in st.texts if not t.dead]
        st.flash.update()

    def _on_catch(self, event: CatchEvent) -> None:
        st = self.state
        note = event.note
        logger.debug("caught note at (%.0f, %.0f), combo=%d score=%d", note.x, note.y, event.combo, event.score)

        if self.synthesizer is not None:
            self.synthesizer.play_catch(event.combo)

        burst = self.feedback.spawn_burst(note.x, note.y, note.color, event.combo)
        st.particles.extend(burst.particles)
        st.flash.trigger(burst.flash)
        st.texts.append(FloatingText.for_catch(note.x, note.y, event.combo, note.color, self.config.floating_text))

    def snapshot(self) -> Snapshot:
        st = self.state
        combo = st.playfield.combo_state
        return Snapshot(
            notes=tuple(replace(n) for n in st.playfield.notes),
            particles=tuple(replace(p) for p in st.particles),
            texts=tuple(replace(t) for t in st.texts),
            flash_alpha=st.flash.alpha,
            flash_kind=st.flash.kind,
            score=combo.score,
            combo=combo.combo,
            max_combo=combo.max_combo,
            speed=st.difficulty.speed,
            progress=st.difficulty.progress,
            running=st.running,
            paused=st.paused,
            preset=self.synthesizer.preset_name if self.synthesizer is not None else self.config.audio.default_preset,
        )
