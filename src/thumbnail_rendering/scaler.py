"""Fit a decoded thumbnail into the requested square."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from PIL import Image

from fzp_thumbnailer.errors import ImageSizeError
from .decoder import DecodedImage

logger = logging.getLogger(__name__)

RESAMPLE_FILTER = Image.Resampling.BILINEAR


@dataclass(frozen=True)
class ScaledImage:
    width: int
    height: int
    pixels: bytes  # RGBA8, row-major


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def fit_dimensions(width: int, height: int, size: int) -> Tuple[int, int]:
    """Scale ``width`` x ``height`` so the longer side is ``size``.

    Both sides are rounded up. Integer arithmetic keeps the longer side at
    exactly ``size``.
    """

    max_dim = max(width, height)
    if max_dim <= 0:
        raise ImageSizeError("source image has zero size", dimension="width", value=width)
    scaled_width = _ceil_div(width * size, max_dim)
    scaled_height = _ceil_div(height * size, max_dim)
    if scaled_width <= 0:
        raise ImageSizeError("scaled thumbnail has zero width", dimension="width", value=scaled_width)
    if scaled_height <= 0:
        raise ImageSizeError(
            "scaled thumbnail has zero height", dimension="height", value=scaled_height
        )
    return scaled_width, scaled_height


def scale_image(image: DecodedImage, size: int) -> ScaledImage:
    """Resize an RGBA8 image to fit ``size``, preserving aspect ratio.

    Filtering runs directly on the stored (gamma encoded) samples.
    """

    width, height = fit_dimensions(image.width, image.height, size)
    logger.debug("[scale] %dx%d -> %dx%d", image.width, image.height, width, height)

    # TODO: resize in linear light for sRGB sources once the output has been
    # compared against the current results.
    source = Image.frombuffer("RGBA", (image.width, image.height), image.pixels, "raw", "RGBA", 0, 1)
    scaled = source.resize((width, height), RESAMPLE_FILTER)
    return ScaledImage(width, height, scaled.tobytes())


__all__ = ["ScaledImage", "RESAMPLE_FILTER", "fit_dimensions", "scale_image"]
