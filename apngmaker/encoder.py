"""
Single-frame PNG encoders.

The assembler never touches pixels: each frame is handed to an encoder
that returns one standalone PNG stream (signature, IHDR, IDAT*, IEND),
whose IDAT payloads are then re-packaged as animation frames.

Frame sources accepted by the default encoder:

    PIL.Image.Image   -- converted to RGBA and saved as PNG
    bytes/bytearray   -- assumed to already be such a PNG stream
    str / Path        -- opened with Pillow, then encoded as an image
"""

from __future__ import annotations

import abc
import io
import logging
from pathlib import Path
from typing import Any, Union

from PIL import Image

from apngmaker.exceptions import EncoderError

logger = logging.getLogger(__name__)

FrameSource = Union[Image.Image, bytes, bytearray, str, Path]


class FrameEncoder(abc.ABC):
    """Abstract interface for turning one frame into a PNG byte stream."""

    name: str = "abstract"

    @abc.abstractmethod
    def encode(self, frame: Any) -> bytes:
        """Return a complete single-image PNG encoding of *frame*."""


class PillowPngEncoder(FrameEncoder):
    """Encode frames with Pillow's PNG writer.

    Metadata inherited from a source file (gamma, ICC profile, DPI, text)
    is dropped so the output contains only IHDR, IDAT and IEND.
    """

    name = "pillow"

    def __init__(self, compress_level: int = 6) -> None:
        if not 0 <= compress_level <= 9:
            raise ValueError(f"compress_level must be 0..9, got {compress_level}")
        self.compress_level = compress_level

    def encode(self, frame: FrameSource) -> bytes:
        if isinstance(frame, (bytes, bytearray)):
            return bytes(frame)
        try:
            if isinstance(frame, (str, Path)):
                with Image.open(frame) as img:
                    return self._encode_image(img)
            return self._encode_image(frame)
        except (OSError, ValueError) as exc:
            raise EncoderError(f"PNG encoding failed: {exc}") from exc

    def _encode_image(self, img: Image.Image) -> bytes:
        rgba = self._ensure_rgba(img)
        buf = io.BytesIO()
        rgba.save(buf, format="PNG", compress_level=self.compress_level)
        data = buf.getvalue()
        logger.debug("Encoded %dx%d frame to %d bytes", rgba.width, rgba.height, len(data))
        return data

    @staticmethod
    def _ensure_rgba(img: Image.Image) -> Image.Image:
        """Return a metadata-free RGBA copy of *img*."""
        rgba = img.convert("RGBA") if img.mode != "RGBA" else img.copy()
        rgba.info = {}
        return rgba
