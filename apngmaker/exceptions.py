"""
Custom exception hierarchy for apngmaker.

All apngmaker exceptions inherit from ApngMakerError so callers can catch
the entire family with a single except clause.
"""

from __future__ import annotations


class ApngMakerError(Exception):
    """Base exception for all apngmaker errors."""


class MalformedImageError(ApngMakerError):
    """Raised when a single-frame PNG stream cannot be re-packaged.

    ``tag`` is the offending chunk type (if one was read) and ``offset``
    the byte position of that chunk's length field.
    """

    def __init__(
        self,
        message: str,
        tag: bytes | None = None,
        offset: int | None = None,
    ) -> None:
        super().__init__(message)
        self.tag = tag
        self.offset = offset


class PreconditionViolation(ApngMakerError, ValueError):
    """Raised when a caller passes values the container cannot represent."""


class EncoderError(ApngMakerError):
    """Raised when the single-frame PNG encoder fails."""
