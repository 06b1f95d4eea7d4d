"""Package for decoding, scaling, and encoding the thumbnail image."""

from .decoder import DecodedImage, decode_header, decode_image
from .png_writer import thumbnail_text, write_png
from .scaler import ScaledImage, fit_dimensions, scale_image

__all__ = [
    "DecodedImage",
    "ScaledImage",
    "decode_header",
    "decode_image",
    "fit_dimensions",
    "scale_image",
    "thumbnail_text",
    "write_png",
]
