from __future__ import annotations

from typing import Callable, List, Optional

import numpy as np
import pytest

from motioncatch.config import GameConfig


class FakeOutput:
    """Stands in for AudioOutput: records every buffer instead of playing it."""

    def __init__(self, sample_rate: int = 8000, ready: bool = True) -> None:
        self.sample_rate = sample_rate
        self.ready = ready
        self.played: List[np.ndarray] = []

    def play(self, samples: np.ndarray) -> bool:
        self.played.append(samples)
        return True


class ScriptedSensor:
    """Motion sensor whose answer comes from a predicate over (x, y, radius)."""

    def __init__(self, predicate: Optional[Callable[[float, float, float], bool]] = None) -> None:
        self.predicate = predicate or (lambda x, y, r: False)
        self.queries: List[tuple] = []
        self.frames: List[Optional[np.ndarray]] = []
        self.enabled = True

    def refresh(self, raw_frame: Optional[np.ndarray]) -> None:
        self.frames.append(raw_frame)

    def disable(self) -> None:
        self.enabled = False

    def reset(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def query(self, x: float, y: float, radius: float) -> bool:
        self.queries.append((x, y, radius))
        return self.enabled and bool(self.predicate(x, y, radius))


@pytest.fixture
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def fake_output() -> FakeOutput:
    return FakeOutput()
