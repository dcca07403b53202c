"""
PNG chunk construction and decomposition.

Serialized layout of every chunk::

    length (4, BE) | type tag (4, ASCII) | payload | crc32(tag + payload) (4, BE)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from apngmaker.crc import crc32
from apngmaker.exceptions import MalformedImageError, PreconditionViolation
from apngmaker.types import U32_MAX

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

IHDR = b"IHDR"
IDAT = b"IDAT"
IEND = b"IEND"
ACTL = b"acTL"
FCTL = b"fcTL"
FDAT = b"fdAT"

# length + tag before the payload, crc after it
CHUNK_OVERHEAD = 12

_U32 = struct.Struct(">I")


def _as_tag(tag: bytes | str) -> bytes:
    if isinstance(tag, str):
        tag = tag.encode("ascii", errors="replace")
    if len(tag) != 4 or not tag.isalpha():
        raise PreconditionViolation(
            f"chunk type must be 4 ASCII letters, got {tag!r}"
        )
    return bytes(tag)


def build_chunk(tag: bytes | str, payload: bytes = b"") -> bytes:
    """Serialize a chunk of type *tag* carrying *payload*."""
    tag = _as_tag(tag)
    if len(payload) > U32_MAX:
        raise PreconditionViolation(
            f"chunk payload of {len(payload)} bytes exceeds the 4-byte length field"
        )
    crc = crc32(payload, crc32(tag))
    return b"".join((_U32.pack(len(payload)), tag, payload, _U32.pack(crc)))


@dataclass(frozen=True)
class Chunk:
    tag: bytes
    payload: bytes

    @property
    def crc(self) -> int:
        return crc32(self.payload, crc32(self.tag))

    def __bytes__(self) -> bytes:
        return build_chunk(self.tag, self.payload)

    def __len__(self) -> int:
        return len(self.payload)

    def __repr__(self) -> str:
        return f"Chunk<{self.tag.decode('ascii', 'replace')}>[{len(self)}]"


def read_chunk(
    buffer: bytes,
    offset: int = 0,
    verify_crc: bool = False,
) -> tuple[int, Chunk]:
    """Decode the chunk whose length field starts at *offset*.

    Returns the offset just past the chunk's CRC and the decoded chunk.
    """
    end_of_header = offset + 8
    if end_of_header > len(buffer):
        raise MalformedImageError(
            f"truncated chunk header at offset {offset}", offset=offset,
        )
    (length,) = _U32.unpack_from(buffer, offset)
    tag = bytes(buffer[offset + 4:end_of_header])
    end = end_of_header + length + 4
    if end > len(buffer):
        raise MalformedImageError(
            f"chunk {tag!r} at offset {offset} overruns the buffer "
            f"({length} bytes declared, {len(buffer) - end_of_header - 4} available)",
            tag=tag, offset=offset,
        )
    chunk = Chunk(tag, bytes(buffer[end_of_header:end_of_header + length]))
    if verify_crc:
        (stored,) = _U32.unpack_from(buffer, end - 4)
        if stored != chunk.crc:
            raise MalformedImageError(
                f"CRC mismatch in chunk {tag!r} at offset {offset}: "
                f"stored {stored:#010x}, computed {chunk.crc:#010x}",
                tag=tag, offset=offset,
            )
    return end, chunk
