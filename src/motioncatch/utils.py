from __future__ import annotations

import math
from typing import Tuple


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def hex_to_bgr(color: str) -> Tuple[int, int, int]:
    """Convert ``#rrggbb`` to an OpenCV BGR tuple."""
    s = color.lstrip("#")
    if len(s) != 6:
        raise ValueError(f"Expected a #rrggbb color, got {color!r}")
    r, g, b = int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)
    return (b, g, r)


def polar(angle: float, magnitude: float) -> Tuple[float, float]:
    return (math.cos(angle) * magnitude, math.sin(angle) * magnitude)
