"""
Tests for IDAT payload extraction from single-frame PNG streams.
"""

from __future__ import annotations

import struct
import zlib

import pytest

from apngmaker.chunks import PNG_SIGNATURE, build_chunk
from apngmaker.exceptions import MalformedImageError
from apngmaker.extract import (
    FIRST_CHUNK_OFFSET,
    extract_payload,
    frame_dimensions,
    validate_header,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ihdr(width: int = 4, height: int = 4) -> bytes:
    return build_chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0))


def _png(*chunks: bytes, width: int = 4, height: int = 4) -> bytes:
    """Hand-built PNG stream: signature, IHDR, *chunks*, IEND."""
    return PNG_SIGNATURE + _ihdr(width, height) + b"".join(chunks) + build_chunk(b"IEND")


def _insert_before_iend(raw: bytes, chunk: bytes) -> bytes:
    return raw[:-12] + chunk + raw[-12:]


# ---------------------------------------------------------------------------
# extract_payload
# ---------------------------------------------------------------------------

class TestExtractPayload:
    def test_first_chunk_offset(self):
        assert FIRST_CHUNK_OFFSET == 33

    def test_single_idat(self):
        data = zlib.compress(b"\x00" + b"\xff" * 16)
        blocks = extract_payload(_png(build_chunk(b"IDAT", data)))
        assert blocks == (data,)

    def test_multiple_idat_order_preserved(self):
        parts = [b"first", b"second-block", b"3"]
        raw = _png(*(build_chunk(b"IDAT", p) for p in parts))
        assert extract_payload(raw) == tuple(parts)

    def test_empty_idat_block(self):
        raw = _png(build_chunk(b"IDAT", b""), build_chunk(b"IDAT", b"x"))
        assert extract_payload(raw) == (b"", b"x")

    def test_no_idat(self):
        assert extract_payload(_png()) == ()

    def test_pillow_encoded_frame(self, solid_png):
        raw = solid_png((0, 128, 255, 255))
        blocks = extract_payload(raw)
        assert len(blocks) >= 1
        # Decompressing yields one filter byte plus 4 RGBA pixels per row.
        assert len(zlib.decompress(b"".join(blocks))) == 4 * (1 + 4 * 4)

    def test_block_is_byte_identical(self):
        data = bytes(range(200))
        raw = _png(build_chunk(b"IDAT", data))
        (block,) = extract_payload(raw)
        start = raw.index(b"IDAT") + 4
        assert block == raw[start:start + 200]

    def test_accepts_bytearray(self):
        raw = bytearray(_png(build_chunk(b"IDAT", b"abc")))
        assert extract_payload(raw) == (b"abc",)

    def test_header_not_inspected_by_default(self):
        raw = b"\x00" * 33 + build_chunk(b"IDAT", b"abc") + build_chunk(b"IEND")
        assert extract_payload(raw) == (b"abc",)


class TestExtractPayloadErrors:
    def test_unexpected_chunk(self, solid_png):
        raw = _insert_before_iend(solid_png(), build_chunk(b"XXXX", b""))
        with pytest.raises(MalformedImageError) as info:
            extract_payload(raw)
        assert info.value.tag == b"XXXX"
        assert info.value.offset == len(raw) - 24

    def test_ancillary_chunk_rejected(self):
        raw = _png(build_chunk(b"gAMA", b"\x00\x00\xb1\x8f"), build_chunk(b"IDAT", b"a"))
        with pytest.raises(MalformedImageError) as info:
            extract_payload(raw)
        assert info.value.tag == b"gAMA"
        assert info.value.offset == FIRST_CHUNK_OFFSET

    def test_missing_iend(self):
        raw = _png(build_chunk(b"IDAT", b"abc"))[:-12]
        with pytest.raises(MalformedImageError, match="before IEND"):
            extract_payload(raw)

    def test_truncated_idat(self):
        raw = _png(build_chunk(b"IDAT", b"0123456789"))
        cut = raw[:FIRST_CHUNK_OFFSET + 12]
        with pytest.raises(MalformedImageError) as info:
            extract_payload(cut)
        assert info.value.tag == b"IDAT"

    def test_validate_rejects_bad_signature(self):
        raw = b"GIF89a\x00\x00" + _png(build_chunk(b"IDAT", b"a"))[8:]
        # Lenient mode does not look at the signature.
        assert extract_payload(raw) == (b"a",)
        with pytest.raises(MalformedImageError, match="signature"):
            extract_payload(raw, validate=True)

    def test_validate_rejects_odd_ihdr(self):
        raw = (
            PNG_SIGNATURE
            + build_chunk(b"IHDR", b"\x00" * 14)
            + build_chunk(b"IDAT", b"a")
            + build_chunk(b"IEND")
        )
        with pytest.raises(MalformedImageError, match="IHDR payload"):
            extract_payload(raw, validate=True)


# ---------------------------------------------------------------------------
# Header helpers
# ---------------------------------------------------------------------------

class TestHeaderHelpers:
    def test_frame_dimensions(self, solid_png):
        assert frame_dimensions(solid_png(size=(7, 3))) == (7, 3)

    def test_validate_header_ok(self, solid_png):
        validate_header(solid_png())

    def test_validate_header_missing_ihdr(self):
        raw = PNG_SIGNATURE + build_chunk(b"IDAT", b"\x00" * 13)
        with pytest.raises(MalformedImageError) as info:
            validate_header(raw)
        assert info.value.tag == b"IDAT"
