"""Error types raised while extracting and rendering a thumbnail."""

from __future__ import annotations

from enum import Enum
from typing import Sequence


class ErrorKind(Enum):
    FORMAT = "format"
    NOT_FOUND = "not_found"
    SIZE = "size"
    IO = "io"
    CODEC = "codec"


class ThumbnailerError(RuntimeError):
    """Base class for every failure that aborts a thumbnail run.

    Only the subclasses are raised; each one sets ``kind``.
    """

    kind: ErrorKind

    def __init__(self, *args):
        if type(self) is ThumbnailerError:
            raise TypeError("raise a ThumbnailerError subclass, not the base class")
        super().__init__(*args)


class ContainerFormatError(ThumbnailerError):
    """The container header or a chunk header is not what we expect."""

    kind = ErrorKind.FORMAT

    def __init__(self, message: str, *, expected: bytes | None = None, found: bytes | None = None):
        super().__init__(message)
        self.expected = expected
        self.found = found


class ThumbnailNotFoundError(ThumbnailerError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, tag: bytes, seen: Sequence[bytes]):
        seen_str = ", ".join(repr(t) for t in seen) or "none"
        super().__init__(f"document does not contain a thumbnail (no {tag!r} chunk; saw {seen_str})")
        self.tag = tag
        self.seen = tuple(seen)


class ImageSizeError(ThumbnailerError):
    """A declared or computed image dimension is zero or above a limit."""

    kind = ErrorKind.SIZE

    def __init__(self, message: str, *, dimension: str, value: int, limit: int | None = None):
        super().__init__(message)
        self.dimension = dimension
        self.value = value
        self.limit = limit


class StreamError(ThumbnailerError, OSError):
    """I/O failure, including a stream view whose bookkeeping would break."""

    kind = ErrorKind.IO


class CodecError(ThumbnailerError):
    """The embedded image could not be decoded, or the PNG not encoded."""

    kind = ErrorKind.CODEC


__all__ = [
    "ErrorKind",
    "ThumbnailerError",
    "ContainerFormatError",
    "ThumbnailNotFoundError",
    "ImageSizeError",
    "StreamError",
    "CodecError",
]
