#!/usr/bin/env python3
"""
Play every sound preset once, at the start-of-game difficulty and at full difficulty.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time

import numpy as np

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from motioncatch.audio import AudioOutput, AudioSynthesizer  # noqa: E402
from motioncatch.config import DEFAULT_CONFIG, PRESETS  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Preview the catch sound presets.")
    ap.add_argument("--preset", choices=list(PRESETS.keys()), default=None, help="Only play this preset")
    ap.add_argument("--combo", type=int, default=1, help="Combo value to render with (>= 3 adds echo)")
    ap.add_argument("--gap", type=float, default=0.8, help="Seconds between sounds")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    names = [args.preset] if args.preset else list(PRESETS.keys())
    with AudioOutput(sample_rate=DEFAULT_CONFIG.audio.sample_rate) as output:
        if not output.ready:
            print("No audio output available")
            return 1
        synth = AudioSynthesizer(output, DEFAULT_CONFIG.audio, rng=np.random.default_rng(0))
        for name in names:
            synth.set_preset(name)
            for progress in (0.0, 1.0):
                synth.set_difficulty_progress(progress)
                print(f"{PRESETS[name].label:<8} progress={progress:.1f}")
                synth.play_catch(args.combo)
                time.sleep(args.gap)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
