from __future__ import annotations

import logging
import platform
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class Camera:
    """Pull-based webcam wrapper: ``read()`` returns the latest frame or None."""

    def __init__(self, index: int = 0, width: int = 800, height: int = 600) -> None:
        self.index = index
        self.width = width
        self.height = height
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def ready(self) -> bool:
        return self._cap is not None

    def open(self) -> bool:
        """Open the device. Returns False (once, with a logged hint) if it is unavailable."""
        if self._cap is not None:
            return True
        if platform.system() == "Darwin":
            cap = cv2.VideoCapture(self.index, cv2.CAP_AVFOUNDATION)
        else:
            cap = cv2.VideoCapture(self.index)
        if not cap.isOpened():
            cap.release()
            logger.error(
                "Could not open camera index %d. "
                "On macOS: System Settings -> Privacy & Security -> Camera -> allow your terminal.",
                self.index,
            )
            return False

        # best effort
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._cap = cap
        return True

    def read(self) -> Optional[np.ndarray]:
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok:
            return None
        return frame

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def __enter__(self) -> "Camera":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
