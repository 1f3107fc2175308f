from __future__ import annotations

import logging
from typing import Optional

from .config import DifficultyConfig
from .utils import clamp

logger = logging.getLogger(__name__)


class DifficultyController:
    """
    Time-driven difficulty ramp.

    Every ``step_interval`` ms of active play the fall speed goes up and the
    spawn interval goes down, both saturating at their configured bounds.
    ``advance`` applies at most one step per call, however much time passed
    since the previous step.
    """

    def __init__(self, config: Optional[DifficultyConfig] = None, start_at: float = 0.0) -> None:
        self._config = config or DifficultyConfig()
        self.restart(start_at)

    def restart(self, now: float) -> None:
        self._speed = self._config.initial_speed
        self._spawn_interval = self._config.initial_spawn_interval
        self._last_step_at = float(now)

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def spawn_interval(self) -> float:
        return self._spawn_interval

    @property
    def last_step_at(self) -> float:
        return self._last_step_at

    @property
    def progress(self) -> float:
        cfg = self._config
        p = (self._speed - cfg.initial_speed) / (cfg.max_speed - cfg.initial_speed)
        return clamp(p, 0.0, 1.0)

    def advance(self, now: float) -> bool:
        """Apply one difficulty step if a full interval has elapsed. Returns True if it did."""
        if now - self._last_step_at < self._config.step_interval:
            return False

        cfg = self._config
        self._speed = min(self._speed + cfg.speed_increment, cfg.max_speed)
        self._spawn_interval = max(self._spawn_interval - cfg.spawn_decrement, cfg.min_spawn_interval)
        self._last_step_at = float(now)
        logger.debug(
            "difficulty step: speed=%.2f spawn_interval=%.0fms progress=%.2f",
            self._speed,
            self._spawn_interval,
            self.progress,
        )
        return True

    def shift_clock(self, delta_ms: float) -> None:
        """Move the step timer forward so a paused stretch does not count as play time."""
        self._last_step_at += delta_ms
