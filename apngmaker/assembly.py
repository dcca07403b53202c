"""
Animation assembly engine.

Re-packages the IDAT payloads of independently encoded PNG frames into
one APNG stream::

    signature | IHDR | acTL | (fcTL IDAT+) | (fcTL fdAT+)* | IEND

Frame 0 keeps the plain IDAT chunk type so that non-APNG decoders still
show it as the default image.  Every fcTL and fdAT chunk takes the next
value of one shared sequence counter starting at 0; IDAT chunks carry no
sequence number.
"""

from __future__ import annotations

import itertools
import logging
import struct
from typing import Iterator, Sequence

from apngmaker.chunks import (
    ACTL,
    FCTL,
    FDAT,
    IDAT,
    IEND,
    IHDR,
    PNG_SIGNATURE,
    build_chunk,
)
from apngmaker.exceptions import PreconditionViolation
from apngmaker.types import AnimationSpec, AssembledStream, FramePayload

logger = logging.getLogger(__name__)


# 8-bit depth, colour type 6 (RGBA), deflate, adaptive filtering, no interlace
BIT_DEPTH = 8
COLOR_TYPE_RGBA = 6
COMPRESSION_METHOD = 0
FILTER_METHOD = 0
INTERLACE_NONE = 0

DISPOSE_OP_NONE = 0
BLEND_OP_SOURCE = 0

IEND_CHUNK = build_chunk(IEND)   # 00 00 00 00 49 45 4E 44 AE 42 60 82

_IHDR = struct.Struct(">IIBBBBB")
_ACTL = struct.Struct(">II")
_FCTL = struct.Struct(">IIIIIHHBB")
_SEQ = struct.Struct(">I")


def _pack(fmt: struct.Struct, *values: int) -> bytes:
    try:
        return fmt.pack(*values)
    except struct.error as exc:
        raise PreconditionViolation(
            f"value out of range for a {fmt.format} field: {exc}"
        ) from exc


def build_header(spec: AnimationSpec) -> bytes:
    """IHDR chunk for an 8-bit RGBA, non-interlaced canvas."""
    return build_chunk(IHDR, _pack(
        _IHDR, spec.width, spec.height,
        BIT_DEPTH, COLOR_TYPE_RGBA, COMPRESSION_METHOD,
        FILTER_METHOD, INTERLACE_NONE,
    ))


def build_animation_control(num_frames: int, play_count: int) -> bytes:
    """acTL chunk: total frame count and loop count (0 = forever)."""
    return build_chunk(ACTL, _pack(_ACTL, num_frames, play_count))


def build_frame_control(sequence_number: int, spec: AnimationSpec) -> bytes:
    """fcTL chunk covering the full canvas, shown for 1/frame_rate_denominator s."""
    return build_chunk(FCTL, _pack(
        _FCTL,
        sequence_number,
        spec.width,
        spec.height,
        0,                              # x_offset
        0,                              # y_offset
        1,                              # delay_num
        spec.frame_rate_denominator,    # delay_den
        DISPOSE_OP_NONE,
        BLEND_OP_SOURCE,
    ))


def _frame_segment(
    index: int,
    blocks: FramePayload,
    spec: AnimationSpec,
    sequence: Iterator[int],
) -> bytes:
    parts = [build_frame_control(next(sequence), spec)]
    if index == 0:
        parts.extend(build_chunk(IDAT, block) for block in blocks)
    else:
        for block in blocks:
            parts.append(build_chunk(FDAT, _SEQ.pack(next(sequence)) + block))
    return b"".join(parts)


def assemble(
    spec: AnimationSpec,
    payloads: Sequence[FramePayload],
) -> AssembledStream:
    """Concatenate *payloads* (one entry per frame, in display order)
    into a complete APNG stream.
    """
    sequence = itertools.count()
    segments = [
        _frame_segment(i, blocks, spec, sequence)
        for i, blocks in enumerate(payloads)
    ]
    data = b"".join((
        PNG_SIGNATURE,
        build_header(spec),
        build_animation_control(len(payloads), spec.play_count),
        *segments,
        IEND_CHUNK,
    ))
    logger.info(
        "Assembled %d frame(s) into %d bytes (%dx%d, 1/%d s, plays=%d)",
        len(payloads), len(data), spec.width, spec.height,
        spec.frame_rate_denominator, spec.play_count,
    )
    return AssembledStream(data=data, num_frames=len(payloads))
