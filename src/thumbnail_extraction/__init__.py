"""Package for pulling the embedded thumbnail out of an ``.fzp`` container."""

from .chunk_scanner import MAX_CHUNKS_SCANNED, THUMBNAIL_TAG, scan_for_chunk
from .clamped_view import ClampedView

__all__ = ["ClampedView", "scan_for_chunk", "THUMBNAIL_TAG", "MAX_CHUNKS_SCANNED"]
