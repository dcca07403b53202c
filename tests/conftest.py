"""
Shared fixtures for the apngmaker test suite.
"""

from __future__ import annotations

import pytest
from PIL import Image

from apngmaker.encoder import PillowPngEncoder


@pytest.fixture
def solid_frame():
    """Factory for solid-colour RGBA frames."""
    def make(color=(255, 0, 0, 255), size=(4, 4)) -> Image.Image:
        return Image.new("RGBA", size, color)
    return make


@pytest.fixture
def solid_png(solid_frame):
    """Factory for solid-colour frames already encoded as PNG bytes."""
    encoder = PillowPngEncoder()

    def make(color=(255, 0, 0, 255), size=(4, 4)) -> bytes:
        return encoder.encode(solid_frame(color, size))
    return make


@pytest.fixture
def sample_frame_sequence():
    """A sequence of 10 frames with a dot moving across the canvas."""
    frames = []
    for i in range(10):
        img = Image.new("RGBA", (40, 20), "white")
        cx = 2 + i * 4
        for x in range(cx - 2, cx + 2):
            for y in range(8, 12):
                if 0 <= x < 40:
                    img.putpixel((x, y), (0, 0, 0, 255))
        frames.append(img)
    return frames
