from __future__ import annotations

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from .config import CanvasConfig, MotionConfig

logger = logging.getLogger(__name__)


class MotionSensor:
    """
    Frame-difference motion sensor.

    Keeps the two most recent captures, downsampled to a fixed detection
    resolution and mirrored horizontally so they line up with the mirrored
    (selfie) display. ``query`` answers whether the average change between the
    two captures inside a window around a playfield point exceeds a threshold.

    Input frames are expected as H x W x C arrays with at least three channels
    (OpenCV BGR is fine; channel order does not matter for differencing).
    """

    def __init__(self, motion: Optional[MotionConfig] = None, canvas: Optional[CanvasConfig] = None) -> None:
        self._motion = motion or MotionConfig()
        self._canvas = canvas or CanvasConfig()
        self._scale_x = self._motion.detection_width / float(self._canvas.width)
        self._scale_y = self._motion.detection_height / float(self._canvas.height)
        self._previous: Optional[np.ndarray] = None
        self._current: Optional[np.ndarray] = None
        self._enabled = True

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def ready(self) -> bool:
        return self._enabled and self._previous is not None and self._current is not None

    @property
    def previous(self) -> Optional[np.ndarray]:
        return self._previous

    @property
    def current(self) -> Optional[np.ndarray]:
        return self._current

    def disable(self) -> None:
        """Stop sensing (e.g. the camera could not be opened). Queries report no motion."""
        if self._enabled:
            logger.warning("Motion sensing disabled; notes cannot be caught until the sensor is reset")
        self._enabled = False
        self._previous = None
        self._current = None

    def reset(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._previous = None
        self._current = None

    def refresh(self, raw_frame: Optional[np.ndarray]) -> None:
        if not self._enabled:
            return
        if raw_frame is None:
            # No new capture: the last frame is shown again, so nothing moved.
            if self._current is not None:
                self._previous = self._current
            return
        frame = self.prepare(raw_frame)
        self._previous = self._current
        self._current = frame

    def prepare(self, raw_frame: np.ndarray) -> np.ndarray:
        """Downsample and mirror a raw capture into detection space."""
        if raw_frame.ndim != 3 or raw_frame.shape[2] < 3:
            raise ValueError(f"Expected an H x W x C frame with C >= 3, got shape {raw_frame.shape}")
        size = (self._motion.detection_width, self._motion.detection_height)
        rgb = np.ascontiguousarray(raw_frame[:, :, :3])
        if (rgb.shape[1], rgb.shape[0]) != size:
            small = cv2.resize(rgb, size, interpolation=cv2.INTER_AREA)
        else:
            small = rgb
        mirrored = cv2.flip(small, 1)
        mirrored.setflags(write=False)
        return mirrored

    def to_detection_space(self, x: float, y: float) -> Tuple[int, int]:
        return int(np.floor(x * self._scale_x)), int(np.floor(y * self._scale_y))

    def window(self, x: float, y: float, radius: float) -> Tuple[int, int, int, int]:
        """Sampling window ``(x0, y0, x1, y1)`` in detection pixels, end-exclusive."""
        dx, dy = self.to_detection_space(x, y)
        r = int(np.floor(radius * self._scale_x))
        half = max(r, self._motion.sample_size // 2)
        w, h = self._motion.detection_width, self._motion.detection_height
        x0 = max(0, dx - half)
        x1 = min(w, dx + half)
        y0 = max(0, dy - half)
        y1 = min(h, dy + half)
        return x0, y0, x1, y1

    def motion_at(self, x: float, y: float, radius: float) -> float:
        """Mean absolute per-channel difference inside the window (0.0 when not ready)."""
        if not self.ready:
            return 0.0
        x0, y0, x1, y1 = self.window(x, y, radius)
        if x1 <= x0 or y1 <= y0:
            return 0.0
        prev = self._previous[y0:y1, x0:x1].astype(np.int16)
        curr = self._current[y0:y1, x0:x1].astype(np.int16)
        return float(np.abs(curr - prev).mean())

    def query(self, x: float, y: float, radius: float) -> bool:
        return self.motion_at(x, y, radius) > self._motion.threshold
