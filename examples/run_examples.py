"""
Build a small demo animation: a dot bouncing across a 64x32 canvas.

Usage:
    python examples/run_examples.py [output.png]
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from PIL import Image, ImageDraw

from apngmaker import AnimationSpec, build_animation
from apngmaker.builder import ProgressReporter

EXAMPLES_DIR = Path(__file__).parent


def bouncing_dot(n_frames: int = 24, size: tuple[int, int] = (64, 32)) -> list[Image.Image]:
    w, h = size
    frames = []
    for i in range(n_frames):
        t = i / (n_frames - 1)
        x = int(4 + (w - 12) * (1 - abs(2 * t - 1)))
        img = Image.new("RGBA", size, (0, 0, 0, 0))
        ImageDraw.Draw(img).ellipse((x, h // 2 - 4, x + 8, h // 2 + 4), fill=(220, 40, 40, 255))
        frames.append(img)
    return frames


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else EXAMPLES_DIR / "bouncing_dot.png"
    frames = bouncing_dot()
    progress = ProgressReporter(len(frames))
    try:
        stream = build_animation(
            frames,
            AnimationSpec(width=64, height=32, frame_rate_denominator=24),
            on_frame_done=progress.update,
        )
    finally:
        progress.close()
    stream.save(out)
    print(f"  Done: {out} ({len(stream)} bytes)")


if __name__ == "__main__":
    main()
