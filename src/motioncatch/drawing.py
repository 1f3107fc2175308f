from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from .feedback import FloatingText, Particle
from .types import Note


def draw_text(frame, text: str, org: Tuple[int, int], color=(255, 255, 255), scale=0.6, thickness=2):
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)
    return frame


def draw_note(frame, note: Note):
    center = (int(note.x), int(note.y))
    r = int(note.radius)
    if note.shape == "diamond":
        pts = np.array(
            [(center[0], center[1] - r), (center[0] + r, center[1]), (center[0], center[1] + r), (center[0] - r, center[1])],
            dtype=np.int32,
        )
        cv2.fillPoly(frame, [pts], note.color, cv2.LINE_AA)
    else:
        cv2.circle(frame, center, r, note.color, -1, cv2.LINE_AA)
    cv2.circle(frame, center, int(note.hit_radius), note.color, 1, cv2.LINE_AA)
    return frame


def draw_particle(frame, p: Particle):
    r = int(max(1.0, p.visible_size))
    color = tuple(int(c * p.opacity) for c in p.color)
    cv2.circle(frame, (int(p.x), int(p.y)), r, color, -1, cv2.LINE_AA)
    return frame


def draw_floating_text(frame, t: FloatingText):
    color = tuple(int(c * t.life) for c in t.color)
    scale = t.font_size / 40.0
    (w, h), _ = cv2.getTextSize(t.text, cv2.FONT_HERSHEY_SIMPLEX, scale, 2)
    return draw_text(frame, t.text, (int(t.x - w / 2), int(t.y + h / 2)), color=color, scale=scale)


def draw_flash(frame, alpha: float):
    if alpha <= 0:
        return frame
    white = np.full_like(frame, 255)
    cv2.addWeighted(white, float(alpha), frame, 1.0 - float(alpha), 0, dst=frame)
    return frame


def draw_scene(frame, snapshot):
    """Draw one ``Snapshot`` on top of a (mirrored, resized) camera frame."""
    for note in snapshot.notes:
        draw_note(frame, note)
    for p in snapshot.particles:
        draw_particle(frame, p)
    for t in snapshot.texts:
        draw_floating_text(frame, t)
    draw_flash(frame, snapshot.flash_alpha)

    draw_text(frame, f"score {snapshot.score:04d}", (12, 28), scale=0.8)
    draw_text(frame, f"x{snapshot.combo}", (12, 60), color=(120, 255, 40), scale=0.8)
    draw_text(frame, f"{snapshot.preset} | space: pause | 1-5: sound | q: quit", (12, frame.shape[0] - 14), scale=0.5, thickness=1)
    if snapshot.paused:
        h, w = frame.shape[:2]
        draw_text(frame, "PAUSED", (w // 2 - 70, h // 2), scale=1.4, thickness=3)
    return frame
