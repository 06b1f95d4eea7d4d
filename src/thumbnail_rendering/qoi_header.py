"""Parse the 14-byte header of a QOI image without touching pixel data."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO

from fzp_thumbnailer.errors import CodecError

QOI_MAGIC = b"qoif"
_QOI_HEADER = struct.Struct(">4sIIBB")


class QoiColorspace(IntEnum):
    SRGB = 0  # sRGB color channels, linear alpha
    LINEAR = 1


@dataclass(frozen=True)
class QoiHeader:
    width: int
    height: int
    channels: int
    colorspace: QoiColorspace

    SIZE = _QOI_HEADER.size

    @property
    def rgba_len(self) -> int:
        """Bytes needed to hold the image as RGBA8."""
        return self.width * self.height * 4


def read_qoi_header(stream: BinaryIO) -> QoiHeader:
    data = stream.read(QoiHeader.SIZE)
    if len(data) != QoiHeader.SIZE:
        raise CodecError(f"truncated QOI header: expected {QoiHeader.SIZE} bytes, got {len(data)}")
    magic, width, height, channels, colorspace = _QOI_HEADER.unpack(data)
    if magic != QOI_MAGIC:
        raise CodecError(f"not a QOI image: magic {magic!r}")
    if channels not in (3, 4):
        raise CodecError(f"unsupported QOI channel count {channels}")
    try:
        space = QoiColorspace(colorspace)
    except ValueError:
        raise CodecError(f"unknown QOI colorspace {colorspace}") from None
    return QoiHeader(width, height, channels, space)


__all__ = ["QOI_MAGIC", "QoiColorspace", "QoiHeader", "read_qoi_header"]
