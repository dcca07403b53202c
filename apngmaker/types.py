"""
Core data structures shared by the extractor, assembler and builder.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from apngmaker.exceptions import PreconditionViolation

U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF

# Compressed IDAT blocks of one frame, in source order.
FramePayload = tuple[bytes, ...]


@dataclass(frozen=True)
class AnimationSpec:
    """Canvas and timing for one animation.

    Every frame is shown for ``1 / frame_rate_denominator`` seconds.
    ``play_count`` of 0 loops forever.
    """
    width: int
    height: int
    frame_rate_denominator: int = 30
    play_count: int = 0

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if not 0 < value <= U32_MAX:
                raise PreconditionViolation(
                    f"{name} must be in 1..{U32_MAX}, got {value}"
                )
        if not 0 <= self.frame_rate_denominator <= U16_MAX:
            raise PreconditionViolation(
                f"frame_rate_denominator must be in 0..{U16_MAX}, "
                f"got {self.frame_rate_denominator}"
            )

    @classmethod
    def from_frame(
        cls,
        raw_frame: bytes,
        frame_rate_denominator: int = 30,
        play_count: int = 0,
    ) -> AnimationSpec:
        """Take the canvas size from an encoded frame's IHDR chunk."""
        from apngmaker.extract import frame_dimensions

        width, height = frame_dimensions(raw_frame)
        return cls(
            width=width,
            height=height,
            frame_rate_denominator=frame_rate_denominator,
            play_count=play_count,
        )


@dataclass(frozen=True)
class AssembledStream:
    """A finished APNG byte stream."""
    data: bytes
    num_frames: int
    media_type: str = "image/png"

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return len(self.data)

    def save(self, path: Path | str) -> Path:
        """Write the stream to *path* and return it as a Path."""
        out = Path(path)
        out.write_bytes(self.data)
        return out


@dataclass
class BuildConfig:
    """Settings for one build_animation() call."""
    max_workers: int = 0            # 0 = auto-detect from CPU count
    compress_level: int = 6         # zlib level used by the Pillow encoder
    validate_header: bool = False   # check signature + IHDR before extraction
    check_dimensions: bool = False  # reject frames whose IHDR differs from the canvas
