"""Turn an ``.fzp`` document into a freedesktop PNG thumbnail.

One linear pass: scan container -> decode -> validate -> scale -> encode.
Any failure aborts the whole run; there are no retries.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Mapping, TypeVar

from thumbnail_extraction import scan_for_chunk
from thumbnail_extraction.clamped_view import ClampedView
from thumbnail_rendering import decode_image, scale_image, thumbnail_text, write_png
from thumbnail_rendering.qoi_header import QoiColorspace

from .config import ThumbnailerConfig
from .errors import ImageSizeError, StreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RenderResult:
    source_width: int
    source_height: int
    width: int
    height: int
    srgb: bool


@dataclass(frozen=True)
class ThumbnailResult:
    output_path: Path
    uri: str
    mtime: int
    render: RenderResult


def validate_size(size: int, config: ThumbnailerConfig) -> int:
    """Reject a zero or unreasonably large requested thumbnail size."""

    if size <= 0:
        raise ImageSizeError("requested size must not be zero", dimension="size", value=size)
    if size > config.max_requested_size:
        raise ImageSizeError(
            f"requested size {size} larger than reasonable (max {config.max_requested_size})",
            dimension="size",
            value=size,
            limit=config.max_requested_size,
        )
    return size


def render_thumbnail(
    view: ClampedView,
    size: int,
    out_fp: BinaryIO,
    text: Mapping[str, str],
    config: ThumbnailerConfig,
) -> RenderResult:
    """Decode the QOI bytes in ``view`` and write a scaled PNG to ``out_fp``.

    ``text`` holds the caller's metadata; the ``Thumb::Image::*`` entries
    are added here from the decoded (unscaled) image.
    """

    decoded = decode_image(view, config.max_input_dimension)
    scaled = scale_image(decoded, size)
    result = RenderResult(
        source_width=decoded.width,
        source_height=decoded.height,
        width=scaled.width,
        height=scaled.height,
        srgb=decoded.colorspace == QoiColorspace.SRGB,
    )
    # Drop the unscaled pixels before encoding.
    del decoded

    chunks = dict(text)
    # XDG filetype specific: the source image, not the thumbnail
    chunks["Thumb::Image::Width"] = str(result.source_width)
    chunks["Thumb::Image::Height"] = str(result.source_height)
    write_png(out_fp, scaled, chunks, srgb=result.srgb)
    return result


def _write_atomically(out_path: Path, write: Callable[[BinaryIO], T]) -> T:
    """Write through a temp file in the target directory, then rename.

    On any failure the temp file is removed and ``out_path`` is untouched.
    """

    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{out_path.name}.", suffix=".tmp", dir=out_path.parent
        )
    except OSError as exc:
        raise StreamError(f"failed to open out_path for writing: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as out_fp:
            result = write(out_fp)
        os.replace(tmp_path, out_path)
        return result
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        if isinstance(exc, StreamError):
            raise
        raise StreamError(f"failed to write {out_path}: {exc}") from exc
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def generate_thumbnail(
    in_path: Path | str,
    size: int,
    out_path: Path | str,
    uri: str | None = None,
    config: ThumbnailerConfig | None = None,
) -> ThumbnailResult:
    """Extract the thumbnail from ``in_path`` and write a PNG to ``out_path``.

    Args:
        in_path: the ``.fzp`` document.
        size: edge of the square the thumbnail must fit in, in pixels.
        out_path: where to write the PNG. Only replaced on success.
        uri: value for ``Thumb::URI``; defaults to the file URI of ``in_path``.
        config: limits and fixed strings; defaults to ``ThumbnailerConfig()``.

    Returns:
        A summary of what was written.
    """

    config = config or ThumbnailerConfig()
    in_path = Path(in_path)
    out_path = Path(out_path)
    validate_size(size, config)
    if uri is None:
        uri = in_path.resolve().as_uri()

    try:
        fp = open(in_path, "rb")
    except OSError as exc:
        raise StreamError(f"failed to access in_path: {exc}") from exc

    # Ownership of ``fp`` moves to the view once the scan succeeds.
    try:
        mtime = int(os.fstat(fp.fileno()).st_mtime)
        logger.debug("[scan] %s (mtime %d)", in_path, mtime)
        view = scan_for_chunk(fp)
    except OSError as exc:
        fp.close()
        if isinstance(exc, StreamError):
            raise
        raise StreamError(f"failed to parse input file: {exc}") from exc
    except BaseException:
        fp.close()
        raise

    text = thumbnail_text(
        software=config.software,
        uri=uri,
        mtime=mtime,
        mime_type=config.mime_type,
    )
    with view:
        render = _write_atomically(
            out_path, lambda out_fp: render_thumbnail(view, size, out_fp, text, config)
        )

    logger.debug("[write] done -> %s", out_path)
    return ThumbnailResult(output_path=out_path, uri=uri, mtime=mtime, render=render)


__all__ = [
    "RenderResult",
    "ThumbnailResult",
    "validate_size",
    "render_thumbnail",
    "generate_thumbnail",
]
