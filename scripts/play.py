#!/usr/bin/env python3
"""
Motion-controlled note catching game.

Notes fall from the top of the webcam view; wave at them to catch them.
Consecutive catches build a combo that raises the score per catch.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time

import cv2
import numpy as np

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from motioncatch.audio import AudioOutput, AudioSynthesizer  # noqa: E402
from motioncatch.capture import Camera  # noqa: E402
from motioncatch.config import DEFAULT_CONFIG, PRESETS, AudioConfig  # noqa: E402
from motioncatch.drawing import draw_scene  # noqa: E402
from motioncatch.game import Game, Quit, SelectPreset, StartGame, TogglePause  # noqa: E402

PRESET_KEYS = {ord(str(i + 1)): name for i, name in enumerate(PRESETS)}
BACKGROUND_BRIGHTNESS = 0.75


def main() -> int:
    ap = argparse.ArgumentParser(description="Catch falling notes with motion in front of your webcam.")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument(
        "--preset",
        type=str,
        default=DEFAULT_CONFIG.audio.default_preset,
        choices=list(PRESETS.keys()),
        help="Sound preset (default: marimba)",
    )
    ap.add_argument("--volume", type=float, default=0.3, help="Base note volume (0.0 to 1.0, default: 0.3)")
    ap.add_argument("--seed", type=int, default=None, help="Random seed for reproducible note patterns")
    ap.add_argument("--no-audio", action="store_true", help="Run without opening an audio device")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = DEFAULT_CONFIG.with_overrides(
        audio=AudioConfig(base_volume=max(0.0, min(1.0, args.volume)), default_preset=args.preset)
    )
    width, height = config.canvas.width, config.canvas.height
    rng = np.random.default_rng(args.seed)

    output = AudioOutput(sample_rate=config.audio.sample_rate)
    synth = AudioSynthesizer(output, config.audio, config.presets, rng=rng)
    game = Game(config, synthesizer=synth, rng=rng)

    print("Wave at the falling notes to catch them")
    print("space/p: pause | 1-5: sound preset | q or ESC: quit")

    with Camera(args.camera, width, height) as camera:
        if not args.no_audio:
            output.start()
        game.handle_input(StartGame(camera_ok=camera.ready), time.perf_counter() * 1000.0)

        try:
            while game.running:
                frame = camera.read()
                now = time.perf_counter() * 1000.0

                result = game.tick(now, frame)
                snapshot = result.snapshot if result is not None else game.snapshot()

                if frame is not None:
                    display = cv2.flip(cv2.resize(frame, (width, height)), 1)
                    display = cv2.convertScaleAbs(display, alpha=BACKGROUND_BRIGHTNESS)
                else:
                    display = np.zeros((height, width, 3), dtype=np.uint8)
                draw_scene(display, snapshot)

                cv2.imshow("motioncatch", display)
                key = cv2.waitKey(1) & 0xFF
                now = time.perf_counter() * 1000.0
                if key in (ord("q"), 27):
                    game.handle_input(Quit(), now)
                elif key in (ord(" "), ord("p")):
                    game.handle_input(TogglePause(), now)
                elif key in PRESET_KEYS:
                    game.handle_input(SelectPreset(PRESET_KEYS[key]), now)
        finally:
            output.stop()
            cv2.destroyAllWindows()

    final = game.snapshot()
    print(f"score: {final.score} | max combo: {final.max_combo}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
