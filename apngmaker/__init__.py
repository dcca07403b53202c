"""
apngmaker -- assemble single-frame PNG encodings into an Animated PNG.

Frames are encoded independently (in parallel), their IDAT payloads
extracted, and re-packaged as APNG frame chunks with sequence numbers.
"""

__version__ = "0.1.0"

from apngmaker.assembly import assemble
from apngmaker.builder import build_animation, build_animation_async
from apngmaker.chunks import build_chunk
from apngmaker.crc import crc32
from apngmaker.exceptions import (
    ApngMakerError,
    EncoderError,
    MalformedImageError,
    PreconditionViolation,
)
from apngmaker.extract import extract_payload
from apngmaker.types import (
    AnimationSpec,
    AssembledStream,
    BuildConfig,
    FramePayload,
)

__all__ = [
    "AnimationSpec",
    "ApngMakerError",
    "AssembledStream",
    "BuildConfig",
    "EncoderError",
    "FramePayload",
    "MalformedImageError",
    "PreconditionViolation",
    "assemble",
    "build_animation",
    "build_animation_async",
    "build_chunk",
    "crc32",
    "extract_payload",
]
