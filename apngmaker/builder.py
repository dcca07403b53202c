"""
Parallel frame extraction and APNG build orchestration.

Architecture
------------
Each frame is encoded and stripped to its IDAT payloads by an independent
task; the assembler runs once all tasks have joined.

  - **ThreadPoolExecutor**: the expensive part of a task is zlib
    compression inside Pillow, which releases the GIL.  Threads also let
    callers pass in-memory images and arbitrary encoder objects without
    pickling.

  - **Ordered join**: tasks complete in any order.  Results are stored by
    frame index and handed to the assembler in display order.

  - **Asyncio variant**: ``build_animation_async`` runs the same per-frame
    work through ``asyncio.to_thread`` for callers already inside an event
    loop.

Progress reporting
------------------
``on_frame_done`` is called with no arguments once per extracted frame.
The CLI passes ``ProgressReporter.update``.

Error handling
--------------
The first failing frame cancels every task not yet started and its
exception propagates unchanged.  No partial animation is ever assembled.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Callable, Iterable

from apngmaker.assembly import assemble
from apngmaker.encoder import FrameEncoder, FrameSource, PillowPngEncoder
from apngmaker.exceptions import PreconditionViolation
from apngmaker.extract import extract_payload, frame_dimensions
from apngmaker.types import (
    AnimationSpec,
    AssembledStream,
    BuildConfig,
    FramePayload,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Single-frame extraction (runs in a worker thread)
# ---------------------------------------------------------------------------

def _encode_frame(
    index: int,
    frame: FrameSource,
    encoder: FrameEncoder,
) -> bytes:
    t0 = time.monotonic()
    raw = encoder.encode(frame)
    logger.debug(
        "Frame %d encoded by %s in %.3fs (%d bytes)",
        index, encoder.name, time.monotonic() - t0, len(raw),
    )
    return raw


def _check_dimensions(index: int, raw: bytes, spec: AnimationSpec) -> None:
    size = frame_dimensions(raw)
    if size != (spec.width, spec.height):
        raise PreconditionViolation(
            f"frame {index} is {size[0]}x{size[1]}, "
            f"animation canvas is {spec.width}x{spec.height}"
        )


def _extract_frame(
    index: int,
    raw: bytes,
    spec: AnimationSpec,
    config: BuildConfig,
) -> FramePayload:
    if config.check_dimensions:
        _check_dimensions(index, raw, spec)
    return extract_payload(raw, validate=config.validate_header)


def _process_frame(
    index: int,
    frame: FrameSource,
    spec: AnimationSpec,
    encoder: FrameEncoder,
    config: BuildConfig,
) -> FramePayload:
    raw = _encode_frame(index, frame, encoder)
    return _extract_frame(index, raw, spec, config)


# ---------------------------------------------------------------------------
# Progress reporting
# ---------------------------------------------------------------------------

class ProgressReporter:
    """
    Thin abstraction over progress reporting.

    Uses tqdm if available; otherwise prints to stderr.
    """

    def __init__(self, total: int, description: str = "Encoding") -> None:
        self.total = total
        self.completed = 0
        self.description = description
        self._bar: Any = None
        try:
            from tqdm import tqdm
            self._bar = tqdm(
                total=total, desc=description, unit="frame",
                file=sys.stderr, dynamic_ncols=True,
            )
        except ImportError:
            pass

    def update(self, n: int = 1) -> None:
        self.completed += n
        if self._bar is not None:
            self._bar.update(n)
        else:
            pct = (self.completed / self.total) * 100 if self.total else 100
            print(
                f"\r{self.description}: {self.completed}/{self.total} ({pct:.0f}%)",
                end="", flush=True, file=sys.stderr,
            )

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
        elif self.completed > 0:
            print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

def _determine_worker_count(config: BuildConfig) -> int:
    """Determine how many parallel workers to use."""
    if config.max_workers > 0:
        return config.max_workers
    cpu = os.cpu_count() or 2
    return max(1, cpu - 1)


def _prepare(
    frames: Iterable[FrameSource],
    spec: AnimationSpec | None,
    encoder: FrameEncoder | None,
    config: BuildConfig | None,
) -> tuple[list[FrameSource], AnimationSpec | None, FrameEncoder, BuildConfig]:
    config = config or BuildConfig()
    encoder = encoder or PillowPngEncoder(compress_level=config.compress_level)
    sources = list(frames)
    if spec is None and not sources:
        raise PreconditionViolation(
            "cannot derive the canvas size from an empty frame list; pass a spec"
        )
    return sources, spec, encoder, config


def _resolve_spec(
    sources: list[FrameSource],
    spec: AnimationSpec | None,
    encoder: FrameEncoder,
) -> tuple[AnimationSpec, bytes | None]:
    """Return the spec, encoding frame 0 to derive it when none was given.

    The encoded first frame is returned so it is not encoded twice.
    """
    if spec is not None:
        return spec, None
    first = _encode_frame(0, sources[0], encoder)
    spec = AnimationSpec.from_frame(first)
    logger.info("Canvas %dx%d taken from frame 0", spec.width, spec.height)
    return spec, first


def build_animation(
    frames: Iterable[FrameSource],
    spec: AnimationSpec | None = None,
    *,
    encoder: FrameEncoder | None = None,
    config: BuildConfig | None = None,
    on_frame_done: Callable[[], None] | None = None,
) -> AssembledStream:
    """
    Encode every frame in parallel and assemble the APNG.

    Parameters
    ----------
    frames : iterable
        Frame sources in display order (PIL images, PNG bytes or paths).
    spec : AnimationSpec, optional
        Canvas and timing.  When omitted the canvas is taken from frame 0
        at 30 frames per second, looping forever.
    encoder : FrameEncoder, optional
        Defaults to ``PillowPngEncoder``.
    config : BuildConfig, optional
        Worker count and validation switches.
    on_frame_done : callable, optional
        Called once, without arguments, per extracted frame.

    Returns
    -------
    AssembledStream

    Raises
    ------
    MalformedImageError
        If any encoded frame contains chunks other than IDAT before IEND.
    EncoderError
        If the encoder fails on any frame.
    PreconditionViolation
        On out-of-range values or, with ``check_dimensions``, a frame whose
        size differs from the canvas.
    """
    sources, spec, encoder, config = _prepare(frames, spec, encoder, config)
    spec, first_raw = _resolve_spec(sources, spec, encoder)
    workers = _determine_worker_count(config)
    payloads: dict[int, FramePayload] = {}
    t0 = time.monotonic()

    logger.info("Extracting %d frame(s) with %d worker(s)", len(sources), workers)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        future_to_index: dict[Future[FramePayload], int] = {}
        for index, frame in enumerate(sources):
            if index == 0 and first_raw is not None:
                fut = pool.submit(_extract_frame, index, first_raw, spec, config)
            else:
                fut = pool.submit(_process_frame, index, frame, spec, encoder, config)
            future_to_index[fut] = index

        for fut in as_completed(future_to_index):
            index = future_to_index[fut]
            try:
                payloads[index] = fut.result()
            except Exception:
                logger.error("Frame %d failed; abandoning build", index)
                for pending in future_to_index:
                    pending.cancel()
                raise
            if on_frame_done is not None:
                on_frame_done()

    logger.info(
        "Extracted %d frame(s) in %.2fs", len(payloads), time.monotonic() - t0,
    )
    return assemble(spec, [payloads[i] for i in range(len(sources))])


async def build_animation_async(
    frames: Iterable[FrameSource],
    spec: AnimationSpec | None = None,
    *,
    encoder: FrameEncoder | None = None,
    config: BuildConfig | None = None,
    on_frame_done: Callable[[], None] | None = None,
) -> AssembledStream:
    """Asyncio counterpart of :func:`build_animation`.

    One task per frame; ``config.max_workers`` is not used, the default
    executor of the running loop does the work.
    """
    sources, spec, encoder, config = _prepare(frames, spec, encoder, config)
    if spec is None:
        spec, first_raw = await asyncio.to_thread(_resolve_spec, sources, spec, encoder)
    else:
        first_raw = None

    async def run(index: int, frame: FrameSource) -> tuple[int, FramePayload]:
        if index == 0 and first_raw is not None:
            payload = await asyncio.to_thread(_extract_frame, index, first_raw, spec, config)
        else:
            payload = await asyncio.to_thread(
                _process_frame, index, frame, spec, encoder, config,
            )
        return index, payload

    tasks = [asyncio.ensure_future(run(i, f)) for i, f in enumerate(sources)]
    payloads: dict[int, FramePayload] = {}
    try:
        for next_done in asyncio.as_completed(tasks):
            index, payload = await next_done
            payloads[index] = payload
            if on_frame_done is not None:
                on_frame_done()
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return assemble(spec, [payloads[i] for i in range(len(sources))])

