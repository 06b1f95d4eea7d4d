"""Shared builders for synthetic fuzzpaint documents and QOI payloads."""

from __future__ import annotations

import struct
import zlib
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

import pytest

QOI_OP_RGB = 0xFE
QOI_OP_RGBA = 0xFF
QOI_END = b"\x00" * 7 + b"\x01"


def make_qoi(
    width: int,
    height: int,
    pixels: Sequence[Tuple[int, int, int, int]] | None = None,
    *,
    channels: int = 4,
    colorspace: int = 0,
    fill: Tuple[int, int, int, int] = (200, 40, 10, 255),
) -> bytes:
    """Encode pixels as QOI using only the literal RGB/RGBA ops."""

    if pixels is None:
        pixels = [fill] * (width * height)
    out = bytearray(b"qoif" + struct.pack(">IIBB", width, height, channels, colorspace))
    for r, g, b, a in pixels:
        if channels == 3:
            out += bytes((QOI_OP_RGB, r, g, b))
        else:
            out += bytes((QOI_OP_RGBA, r, g, b, a))
    out += QOI_END
    return bytes(out)


def make_chunk(tag: bytes, payload: bytes, declared_size: int | None = None) -> bytes:
    size = len(payload) if declared_size is None else declared_size
    return tag + struct.pack("<I", size) + payload


def make_container(
    chunks: Iterable[bytes],
    *,
    magic: bytes = b"RIFF",
    form_type: bytes = b"fzp ",
    total_size: int | None = None,
) -> bytes:
    body = form_type + b"".join(chunks)
    size = len(body) if total_size is None else total_size
    return magic + struct.pack("<I", size) + body


def png_chunks(data: bytes) -> List[Tuple[bytes, bytes]]:
    assert data[:8] == b"\x89PNG\r\n\x1a\n"
    chunks = []
    pos = 8
    while pos < len(data):
        (length,) = struct.unpack(">I", data[pos:pos + 4])
        ctype = data[pos + 4:pos + 8]
        chunks.append((ctype, data[pos + 8:pos + 8 + length]))
        pos += 12 + length
    return chunks


def png_text(data: bytes) -> Dict[str, str]:
    text = {}
    for ctype, body in png_chunks(data):
        if ctype == b"tEXt":
            key, value = body.split(b"\x00", 1)
            text[key.decode("latin-1")] = value.decode("latin-1")
        elif ctype == b"iTXt":
            key, rest = body.split(b"\x00", 1)
            compressed, _method = rest[0], rest[1]
            _lang, _tkey, value = rest[2:].split(b"\x00", 2)
            if compressed:
                value = zlib.decompress(value)
            text[key.decode("latin-1")] = value.decode("utf-8")
    return text


@pytest.fixture
def fzp_file(tmp_path: Path):
    """Write a document holding a QOI thumbnail and return its path."""

    def _write(qoi: bytes | None = None, *, leading: bytes | None = None, name: str = "doc.fzp") -> Path:
        payload = qoi if qoi is not None else make_qoi(1, 1)
        chunks = [make_chunk(b"thmb", payload)]
        if leading is not None:
            chunks.insert(0, leading)
        path = tmp_path / name
        path.write_bytes(make_container(chunks))
        return path

    return _write
