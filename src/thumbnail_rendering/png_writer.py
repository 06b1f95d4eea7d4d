"""Write the scaled thumbnail as a PNG carrying freedesktop metadata.

See https://specifications.freedesktop.org/thumbnail-spec/latest/ for the
``Thumb::*`` keys.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Dict, Mapping

from PIL import Image
from PIL.PngImagePlugin import PngInfo

from fzp_thumbnailer.errors import CodecError
from .scaler import ScaledImage

logger = logging.getLogger(__name__)

SRGB_PERCEPTUAL = 0
PNG_COMPRESS_LEVEL = 9


def thumbnail_text(
    *,
    software: str,
    uri: str,
    mtime: int,
    mime_type: str,
) -> Dict[str, str]:
    """Build the document-level text chunks, in the order they are written.

    The filetype-specific ``Thumb::Image::*`` keys are added once the image
    has been decoded.
    """

    return {
        "Software": software,
        # XDG required
        "Thumb::URI": uri,
        "Thumb::MTime": str(int(mtime)),
        # XDG additional
        "Thumb::Mimetype": mime_type,
    }


def write_png(
    fp: BinaryIO,
    image: ScaledImage,
    text: Mapping[str, str],
    *,
    srgb: bool,
) -> None:
    """Encode ``image`` as 8-bit RGBA PNG at maximum compression.

    Thumbnails are small, so the slowest compression level costs little.
    When ``srgb`` is set an ``sRGB`` chunk with perceptual intent is added.
    """

    info = PngInfo()
    try:
        for key, value in text.items():
            # Falls back to iTXt for values outside Latin-1.
            info.add_text(key, value)
    except (ValueError, UnicodeError) as exc:
        raise CodecError(f"failed to write metadata: {exc}") from exc
    if srgb:
        info.add(b"sRGB", bytes([SRGB_PERCEPTUAL]))

    pil_image = Image.frombuffer("RGBA", (image.width, image.height), image.pixels, "raw", "RGBA", 0, 1)
    logger.debug("[write] %dx%d png, %d text chunks, srgb=%s", image.width, image.height, len(text), srgb)
    try:
        pil_image.save(fp, format="PNG", pnginfo=info, compress_level=PNG_COMPRESS_LEVEL)
    except (OSError, ValueError) as exc:
        raise CodecError(f"failed to write png: {exc}") from exc


__all__ = ["SRGB_PERCEPTUAL", "PNG_COMPRESS_LEVEL", "thumbnail_text", "write_png"]
