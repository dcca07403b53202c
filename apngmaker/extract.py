"""
Pull the compressed IDAT payloads out of a standalone PNG stream.

The encoder feeding this module is expected to emit exactly::

    signature | IHDR | IDAT* | IEND

Any other chunk between IHDR and IEND is rejected rather than silently
dropped, since its meaning could depend on the pixel data.
"""

from __future__ import annotations

import logging
import struct

from apngmaker.chunks import (
    CHUNK_OVERHEAD,
    IDAT,
    IEND,
    IHDR,
    PNG_SIGNATURE,
    read_chunk,
)
from apngmaker.exceptions import MalformedImageError
from apngmaker.types import FramePayload

logger = logging.getLogger(__name__)

IHDR_PAYLOAD_SIZE = 13
# signature (8) + IHDR chunk (4 + 4 + 13 + 4)
FIRST_CHUNK_OFFSET = len(PNG_SIGNATURE) + CHUNK_OVERHEAD + IHDR_PAYLOAD_SIZE


def validate_header(raw_frame: bytes) -> None:
    """Check the signature and that IHDR has the standard 13-byte payload."""
    if bytes(raw_frame[:8]) != PNG_SIGNATURE:
        raise MalformedImageError("missing PNG signature", offset=0)
    _, chunk = read_chunk(raw_frame, len(PNG_SIGNATURE))
    if chunk.tag != IHDR:
        raise MalformedImageError(
            f"expected IHDR after signature, found {chunk.tag!r}",
            tag=chunk.tag, offset=len(PNG_SIGNATURE),
        )
    if len(chunk.payload) != IHDR_PAYLOAD_SIZE:
        raise MalformedImageError(
            f"IHDR payload is {len(chunk.payload)} bytes, expected {IHDR_PAYLOAD_SIZE}",
            tag=IHDR, offset=len(PNG_SIGNATURE),
        )


def frame_dimensions(raw_frame: bytes) -> tuple[int, int]:
    """Return (width, height) from a PNG stream's IHDR chunk."""
    validate_header(raw_frame)
    _, chunk = read_chunk(raw_frame, len(PNG_SIGNATURE))
    width, height = struct.unpack_from(">II", chunk.payload)
    return width, height


def extract_payload(
    raw_frame: bytes,
    validate: bool = False,
) -> FramePayload:
    """Return the IDAT payloads of *raw_frame* in stream order.

    The signature and IHDR are skipped without inspection unless
    *validate* is set.

    Raises
    ------
    MalformedImageError
        On any chunk other than IDAT before IEND, or if the stream ends
        before IEND.
    """
    if validate:
        validate_header(raw_frame)

    blocks: list[bytes] = []
    offset = FIRST_CHUNK_OFFSET
    size = len(raw_frame)
    while True:
        if offset + 8 > size:
            raise MalformedImageError(
                f"stream ended at offset {offset} before IEND", offset=offset,
            )
        (length,) = struct.unpack_from(">I", raw_frame, offset)
        tag = bytes(raw_frame[offset + 4:offset + 8])
        if tag == IDAT:
            start = offset + 8
            if start + length > size:
                raise MalformedImageError(
                    f"IDAT at offset {offset} declares {length} bytes, "
                    f"only {size - start} remain",
                    tag=tag, offset=offset,
                )
            blocks.append(bytes(raw_frame[start:start + length]))
            offset += length + CHUNK_OVERHEAD
        elif tag == IEND:
            break
        else:
            raise MalformedImageError(
                f"unexpected chunk type {tag!r} at offset {offset}",
                tag=tag, offset=offset,
            )

    logger.debug("Extracted %d IDAT block(s), %d bytes", len(blocks),
                 sum(len(b) for b in blocks))
    return tuple(blocks)
