from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

from .config import GameConfig
from .types import CatchEvent, ComboChanged, ComboState, Note

logger = logging.getLogger(__name__)


class NoteField:
    """
    Live notes plus combo/score bookkeeping.

    Per tick the caller runs ``spawn_if_due``, ``advance`` and then
    ``resolve_collisions``, so collisions are always checked against the
    positions after this tick's movement.
    """

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[np.random.Generator] = None) -> None:
        self._config = config or GameConfig()
        self._rng = rng if rng is not None else np.random.default_rng()
        self._notes: List[Note] = []
        self._last_spawn_at: Optional[float] = None
        self.combo_state = ComboState()

    @property
    def notes(self) -> Tuple[Note, ...]:
        return tuple(self._notes)

    @property
    def last_spawn_at(self) -> Optional[float]:
        return self._last_spawn_at

    def clear(self) -> None:
        self._notes = []
        self._last_spawn_at = None
        self.combo_state = ComboState()

    def add(self, note: Note) -> None:
        self._notes.append(note)

    def spawn_if_due(self, now: float, speed: float, spawn_interval: float) -> Optional[Note]:
        if self._last_spawn_at is not None and now - self._last_spawn_at < spawn_interval:
            return None

        cfg = self._config
        radius = cfg.note.radius
        margin = radius * 2
        x = margin + float(self._rng.random()) * (cfg.canvas.width - margin * 2)
        color = cfg.colors[int(self._rng.integers(0, len(cfg.colors)))]
        shape = cfg.note.shapes[int(self._rng.integers(0, len(cfg.note.shapes)))]
        note = Note(
            x=x,
            y=-radius,
            radius=radius,
            fall_speed=speed,
            color=color,
            shape=shape,
            born_at=now,
            hit_radius_multiplier=cfg.note.hit_radius_multiplier,
        )
        self._notes.append(note)
        self._last_spawn_at = now
        return note

    def advance(self) -> Optional[ComboChanged]:
        """Move notes down; drop the ones that left the playfield. Any miss resets the combo."""
        bottom = self._config.canvas.height
        kept: List[Note] = []
        missed = 0
        for note in self._notes:
            note.y += note.fall_speed
            if note.y > bottom + note.radius:
                missed += 1
            else:
                kept.append(note)
        self._notes = kept

        if missed == 0:
            return None
        logger.debug("missed %d note(s), combo %d -> 0", missed, self.combo_state.combo)
        self.combo_state.miss()
        return ComboChanged(combo=0)

    def resolve_collisions(self, sensor) -> List[CatchEvent]:
        """
        Catch every note with motion under it.

        Hits are applied in spawn order, each bumping the combo before the next.
        ``sensor`` needs ``query(x, y, radius) -> bool``.
        """
        events: List[CatchEvent] = []
        kept: List[Note] = []
        for note in self._notes:
            if sensor.query(note.x, note.y, note.hit_radius):
                combo = self.combo_state.catch()
                events.append(CatchEvent(note=note, combo=combo, score=self.combo_state.score))
            else:
                kept.append(note)
        self._notes = kept
        return events

    def shift_clock(self, delta_ms: float) -> None:
        if self._last_spawn_at is not None:
            self._last_spawn_at += delta_ms
