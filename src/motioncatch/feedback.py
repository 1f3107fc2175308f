from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .config import COMBO_TIERS, FloatingTextConfig, ParticleConfig
from .types import ColorBGR, ComboTier, FlashKind
from .utils import polar

FLASH_ALPHA = {FlashKind.DIM: 0.2, FlashKind.BRIGHT: 0.4}
FLASH_DECAY = 0.05  # alpha per tick

COMBO_TEXT_MIN = 3


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    size: float
    color: ColorBGR
    friction: float
    life_decay: float
    life: float = 1.0

    def update(self) -> None:
        self.x += self.vx
        self.y += self.vy
        self.vx *= self.friction
        self.vy *= self.friction
        self.life = max(0.0, self.life - self.life_decay)

    @property
    def opacity(self) -> float:
        return self.life

    @property
    def visible_size(self) -> float:
        return self.size * self.life

    @property
    def dead(self) -> bool:
        return self.life <= 0


@dataclass
class FloatingText:
    """Score popup that drifts upward and fades out."""

    x: float
    y: float
    text: str
    color: ColorBGR
    speed: float
    life_decay: float
    font_size: int
    life: float = 1.0

    @classmethod
    def for_catch(cls, x: float, y: float, combo: int, color: ColorBGR, config: FloatingTextConfig) -> "FloatingText":
        text = f"+{combo} Combo!" if combo >= COMBO_TEXT_MIN else f"+{combo}"
        frames = max(1.0, config.duration_ms / config.frame_ms)
        return cls(
            x=x,
            y=y,
            text=text,
            color=color,
            speed=config.speed,
            life_decay=1.0 / frames,
            font_size=config.font_size,
        )

    def update(self) -> None:
        self.y -= self.speed
        self.life = max(0.0, self.life - self.life_decay)

    @property
    def dead(self) -> bool:
        return self.life <= 0


class Flash:
    """Transient full-screen overlay; alpha decays every tick."""

    def __init__(self) -> None:
        self.alpha = 0.0
        self.kind = FlashKind.NONE

    def trigger(self, kind: FlashKind) -> None:
        if kind == FlashKind.NONE:
            return
        self.kind = kind
        self.alpha = FLASH_ALPHA[kind]

    def update(self) -> None:
        if self.alpha > 0:
            self.alpha = max(0.0, self.alpha - FLASH_DECAY)


@dataclass(frozen=True)
class Burst:
    particles: List[Particle]
    flash: FlashKind
    tier: ComboTier


class FeedbackFactory:
    def __init__(
        self,
        tiers: Sequence[ComboTier] = COMBO_TIERS,
        particle: Optional[ParticleConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if not tiers:
            raise ValueError("At least one combo tier is required")
        self._tiers = tuple(tiers)
        self._particle = particle or ParticleConfig()
        self._rng = rng if rng is not None else np.random.default_rng()

    @property
    def tiers(self) -> Sequence[ComboTier]:
        return self._tiers

    def tier_for(self, combo: int) -> ComboTier:
        """Highest tier whose threshold is <= combo (the first tier below every threshold)."""
        tier = self._tiers[0]
        for t in self._tiers:
            if combo >= t.combo_threshold:
                tier = t
        return tier

    def spawn_burst(self, x: float, y: float, color: ColorBGR, combo: int) -> Burst:
        tier = self.tier_for(combo)
        cfg = self._particle
        particles: List[Particle] = []
        for _ in range(tier.particle_count):
            angle = float(self._rng.random() * 2.0 * np.pi)
            speed = cfg.speed * (0.5 + float(self._rng.random()) * 0.5)
            vx, vy = polar(angle, speed)
            particles.append(
                Particle(
                    x=x,
                    y=y,
                    vx=vx,
                    vy=vy,
                    size=cfg.base_size * tier.size_multiplier * (0.5 + float(self._rng.random()) * 0.5),
                    color=color,
                    friction=cfg.friction,
                    life_decay=cfg.life_decay,
                )
            )
        return Burst(particles=particles, flash=tier.flash, tier=tier)
