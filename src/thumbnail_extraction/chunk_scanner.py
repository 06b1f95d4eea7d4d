"""Locate the embedded thumbnail chunk inside a fuzzpaint RIFF container.

Layout::

    "RIFF" <u32 LE size of everything after these 8 bytes> "fzp "
    <tag:4> <u32 LE size> <payload:size>
    <tag:4> <u32 LE size> <payload:size>
    ...

Only the first few top-level chunks are looked at. Documents put the
thumbnail first, or second behind a ``LIST INFO`` chunk, and a thumbnailer
that runs dozens of times in a row should not walk the whole file.
"""

from __future__ import annotations

import io
import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, List

from fzp_thumbnailer.errors import ContainerFormatError, ThumbnailNotFoundError
from .clamped_view import ClampedView

logger = logging.getLogger(__name__)

RIFF_MAGIC = b"RIFF"
FZP_FORM_TYPE = b"fzp "
THUMBNAIL_TAG = b"thmb"
MAX_CHUNKS_SCANNED = 2

_CONTAINER_HEADER = struct.Struct("<4sI4s")
_CHUNK_HEADER = struct.Struct("<4sI")


@dataclass(frozen=True)
class ContainerHeader:
    magic: bytes
    total_size: int
    form_type: bytes

    SIZE = _CONTAINER_HEADER.size


@dataclass(frozen=True)
class ChunkHeader:
    tag: bytes
    size: int

    SIZE = _CHUNK_HEADER.size


def _read_exact(stream: BinaryIO, count: int, what: str) -> bytes:
    data = bytearray()
    while len(data) < count:
        block = stream.read(count - len(data))
        if not block:
            raise ContainerFormatError(
                f"truncated {what}: expected {count} bytes, got {len(data)}"
            )
        data += block
    return bytes(data)


def read_container_header(stream: BinaryIO) -> ContainerHeader:
    """Read and check the 12-byte RIFF header. Reads nothing further."""

    data = _read_exact(stream, ContainerHeader.SIZE, "container header")
    magic, total_size, form_type = _CONTAINER_HEADER.unpack(data)
    if magic != RIFF_MAGIC:
        raise ContainerFormatError(
            f"unrecognized file type: magic {magic!r}", expected=RIFF_MAGIC, found=magic
        )
    if form_type != FZP_FORM_TYPE:
        raise ContainerFormatError(
            f"unrecognized file type: form type {form_type!r}",
            expected=FZP_FORM_TYPE,
            found=form_type,
        )
    return ContainerHeader(magic, total_size, form_type)


def read_chunk_header(stream: BinaryIO) -> ChunkHeader:
    data = _read_exact(stream, ChunkHeader.SIZE, "chunk header")
    tag, size = _CHUNK_HEADER.unpack(data)
    return ChunkHeader(tag, size)


def scan_for_chunk(
    stream: BinaryIO,
    tag: bytes = THUMBNAIL_TAG,
    max_chunks: int = MAX_CHUNKS_SCANNED,
) -> ClampedView:
    """Find ``tag`` among the first ``max_chunks`` chunks of a container.

    Args:
        stream: seekable binary stream positioned at the start of the file.
            Ownership passes to the returned view on success; on failure the
            caller still owns it.
        tag: chunk tag to look for.
        max_chunks: how many top-level chunks to inspect before giving up.

    Returns:
        A ``ClampedView`` over the chunk payload. Its length is the declared
        chunk size, capped by what the container header says is left in the
        file.
    """

    header = read_container_header(stream)
    # Declared size counts everything after the magic and the size field.
    remaining_file_size = header.total_size
    seen: List[bytes] = []

    for index in range(max_chunks):
        chunk = read_chunk_header(stream)
        seen.append(chunk.tag)
        if chunk.tag == tag:
            length = min(chunk.size, remaining_file_size)
            logger.debug(
                "[scan] found %r as chunk #%d (declared %d bytes, window %d)",
                tag, index + 1, chunk.size, length,
            )
            return ClampedView(stream, length)

        if index + 1 < max_chunks:
            logger.debug("[scan] skipping chunk %r (%d bytes)", chunk.tag, chunk.size)
            stream.seek(chunk.size, io.SEEK_CUR)
            remaining_file_size = max(0, remaining_file_size - chunk.size - ChunkHeader.SIZE)

    raise ThumbnailNotFoundError(tag, seen)


__all__ = [
    "ContainerHeader",
    "ChunkHeader",
    "RIFF_MAGIC",
    "FZP_FORM_TYPE",
    "THUMBNAIL_TAG",
    "MAX_CHUNKS_SCANNED",
    "read_container_header",
    "read_chunk_header",
    "scan_for_chunk",
]
