"""
CLI command for assembling PNG files into an APNG.

Usage:
    apngmaker build frame_*.png -o anim.png --fps 30
    apngmaker build a.png b.png c.png -o anim.png --plays 1 --strict
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from PIL import Image

from ..builder import ProgressReporter, build_animation
from ..exceptions import ApngMakerError
from ..types import AnimationSpec, BuildConfig


def cmd_build(args: argparse.Namespace) -> int:
    """Main handler for ``apngmaker build``."""
    frames = [Path(f) for f in args.frames]
    missing = [f for f in frames if not f.is_file()]
    if missing:
        print(f"Error: file not found: {missing[0]}", file=sys.stderr)
        return 1

    config = BuildConfig(
        max_workers=args.workers,
        compress_level=args.compress_level,
        validate_header=args.strict,
        check_dimensions=args.strict,
    )

    progress = None if args.no_progress else ProgressReporter(len(frames))
    try:
        # The first frame defines the canvas.
        with Image.open(frames[0]) as first:
            width, height = first.size
        spec = AnimationSpec(
            width=width,
            height=height,
            frame_rate_denominator=args.fps,
            play_count=args.plays,
        )
        stream = build_animation(
            frames,
            spec,
            config=config,
            on_frame_done=progress.update if progress else None,
        )
    except (ApngMakerError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        if progress is not None:
            progress.close()

    out = stream.save(args.output)
    print(f"Wrote {stream.num_frames} frame(s), {len(stream)} bytes -> {out}")
    return 0


def build_build_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``build`` subcommand."""
    p = subparsers.add_parser(
        "build",
        help="Assemble PNG frames into an animated PNG",
        description="Assemble PNG frames (in the order given) into an APNG.",
    )
    p.add_argument("frames", nargs="+", help="Input frame images, in display order")
    p.add_argument("-o", "--output", required=True, type=Path,
                   help="Output .png path")
    p.add_argument("--fps", type=int, default=30,
                   help="Frames per second (delay = 1/fps s, default: 30)")
    p.add_argument("--plays", type=int, default=0,
                   help="Number of loops, 0 = infinite (default: 0)")
    p.add_argument("--workers", type=int, default=0,
                   help="Parallel encoder threads (0 = auto)")
    p.add_argument("--compress-level", type=int, default=6, choices=range(10),
                   metavar="0-9", help="zlib compression level (default: 6)")
    p.add_argument("--strict", action="store_true",
                   help="Validate each frame's PNG header and size against frame 0")
    p.add_argument("--no-progress", action="store_true",
                   help="Disable the progress bar")
    p.set_defaults(func=cmd_build)
