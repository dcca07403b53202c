"""
Tests for the Pillow single-frame encoder.
"""

from __future__ import annotations

import pytest
from PIL import Image

from apngmaker.chunks import PNG_SIGNATURE, read_chunk
from apngmaker.encoder import FrameEncoder, PillowPngEncoder
from apngmaker.exceptions import EncoderError


def _tags(raw: bytes) -> list[bytes]:
    tags = []
    offset = len(PNG_SIGNATURE)
    while offset < len(raw):
        offset, chunk = read_chunk(raw, offset, verify_crc=True)
        tags.append(chunk.tag)
    return tags


class TestPillowPngEncoder:
    def test_only_core_chunks(self):
        img = Image.new("RGBA", (8, 8), "blue")
        img.info["gamma"] = 0.45455
        raw = PillowPngEncoder().encode(img)
        assert raw.startswith(PNG_SIGNATURE)
        tags = _tags(raw)
        assert tags[0] == b"IHDR"
        assert tags[-1] == b"IEND"
        assert set(tags[1:-1]) == {b"IDAT"}

    @pytest.mark.parametrize("mode", ["RGB", "L", "P", "LA"])
    def test_converts_to_rgba(self, mode):
        raw = PillowPngEncoder().encode(Image.new(mode, (3, 3)))
        _, ihdr = read_chunk(raw, len(PNG_SIGNATURE))
        # bit depth 8, colour type 6
        assert ihdr.payload[8:10] == b"\x08\x06"

    def test_source_not_mutated(self):
        img = Image.new("RGBA", (2, 2))
        img.info["dpi"] = (72, 72)
        PillowPngEncoder().encode(img)
        assert img.info["dpi"] == (72, 72)

    def test_bytes_pass_through(self):
        assert PillowPngEncoder().encode(bytearray(b"abc")) == b"abc"

    def test_path_with_metadata(self, tmp_path):
        path = tmp_path / "in.png"
        Image.new("RGB", (5, 5), "red").save(path, dpi=(300, 300))
        raw = PillowPngEncoder().encode(path)
        assert b"pHYs" not in raw

    def test_missing_path(self, tmp_path):
        with pytest.raises(EncoderError):
            PillowPngEncoder().encode(tmp_path / "missing.png")

    def test_compress_level_range(self):
        with pytest.raises(ValueError):
            PillowPngEncoder(compress_level=10)

    def test_is_frame_encoder(self):
        assert isinstance(PillowPngEncoder(), FrameEncoder)
        assert PillowPngEncoder.name == "pillow"
