"""
Table-driven CRC-32 (ISO-HDLC), as used by PNG chunk trailers.

The lookup table is built once at import time and never mutated, so it
can be shared freely between worker threads.
"""

from __future__ import annotations

POLYNOMIAL = 0xEDB88320


def _make_table(poly: int = POLYNOMIAL) -> tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = poly ^ (c >> 1) if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


CRC_TABLE = _make_table()


def crc32(data: bytes | bytearray | memoryview, crc: int = 0) -> int:
    """Return the CRC-32 of *data*.

    *crc* continues a running checksum, so ``crc32(b, crc32(a))`` equals
    ``crc32(a + b)``.
    """
    table = CRC_TABLE
    c = crc ^ 0xFFFFFFFF
    for byte in memoryview(data).cast("B"):
        c = table[(c ^ byte) & 0xFF] ^ (c >> 8)
    return c ^ 0xFFFFFFFF
