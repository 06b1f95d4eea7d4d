"""Decode the embedded QOI thumbnail into an RGBA8 buffer."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO

from PIL import Image, QoiImagePlugin  # noqa: F401  (registers the QOI reader)

from fzp_thumbnailer.errors import CodecError, ImageSizeError, StreamError
from .qoi_header import QoiColorspace, QoiHeader, read_qoi_header

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedImage:
    width: int
    height: int
    colorspace: QoiColorspace
    pixels: bytes  # RGBA8, row-major, no padding

    def __post_init__(self) -> None:
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise CodecError(
                f"decoded buffer is {len(self.pixels)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )


def decode_header(stream: BinaryIO, max_dimension: int) -> QoiHeader:
    """Read the QOI header from the start of ``stream`` and check its size.

    No pixel memory is allocated here, so an oversized or empty image is
    rejected before it can cost anything.
    """

    stream.seek(0)
    header = read_qoi_header(stream)
    for name, value in (("width", header.width), ("height", header.height)):
        if value > max_dimension:
            raise ImageSizeError(
                f"thumbnail {name} {value} exceeds limit of {max_dimension}",
                dimension=name,
                value=value,
                limit=max_dimension,
            )
        if value == 0:
            raise ImageSizeError(f"thumbnail has zero {name}", dimension=name, value=value)
    return header


def decode_image(stream: BinaryIO, max_dimension: int) -> DecodedImage:
    """Decode a QOI stream to RGBA8, adding opaque alpha to RGB sources."""

    header = decode_header(stream, max_dimension)
    logger.debug(
        "[decode] %dx%d, %d channels, %s",
        header.width, header.height, header.channels, header.colorspace.name,
    )

    stream.seek(0)
    # Pillow's QOI decoder is pure Python and pulls a byte at a time: a
    # 1024x1024 source takes over a second. Buffering keeps the per-byte
    # cost off the raw view, but a compiled decoder is the real fix.
    buffered = io.BufferedReader(stream)
    try:
        with Image.open(buffered, formats=["QOI"]) as image:
            if image.size != (header.width, header.height):
                raise CodecError(
                    f"QOI decoder saw {image.size[0]}x{image.size[1]}, "
                    f"header says {header.width}x{header.height}"
                )
            pixels = image.convert("RGBA").tobytes()
    except StreamError:
        raise
    except CodecError:
        raise
    except (
        OSError,
        ValueError,
        SyntaxError,
        IndexError,
        EOFError,
        Image.DecompressionBombError,
    ) as exc:
        raise CodecError(f"failed to parse thumbnail data: {exc}") from exc
    finally:
        if not buffered.closed:
            buffered.detach()

    return DecodedImage(header.width, header.height, header.colorspace, pixels)


__all__ = ["DecodedImage", "decode_header", "decode_image"]
