"""Tests for locating the thumbnail chunk in a container."""

import io

import pytest

from fzp_thumbnailer.errors import ContainerFormatError, ErrorKind, ThumbnailNotFoundError
from thumbnail_extraction.chunk_scanner import (
    MAX_CHUNKS_SCANNED,
    read_chunk_header,
    read_container_header,
    scan_for_chunk,
)

from conftest import make_chunk, make_container

PAYLOAD = b"0123456789" * 10


@pytest.mark.unit
def test_header_fields():
    stream = io.BytesIO(make_container([make_chunk(b"thmb", b"abc")]))
    header = read_container_header(stream)

    assert header.magic == b"RIFF"
    assert header.form_type == b"fzp "
    assert header.total_size == 4 + 8 + 3
    chunk = read_chunk_header(stream)
    assert (chunk.tag, chunk.size) == (b"thmb", 3)


@pytest.mark.unit
def test_first_chunk_match():
    stream = io.BytesIO(make_container([make_chunk(b"thmb", PAYLOAD), make_chunk(b"data", b"zz")]))
    view = scan_for_chunk(stream)

    assert view.length == len(PAYLOAD)
    assert view.read() == PAYLOAD


@pytest.mark.unit
def test_window_capped_by_declared_total_size():
    # File claims to hold only 30 bytes after the size field.
    data = make_container([make_chunk(b"thmb", PAYLOAD)], total_size=30)
    view = scan_for_chunk(io.BytesIO(data))

    assert view.length == 30
    assert view.read(1000) == PAYLOAD[:30]
    assert view.read(1000) == b""


@pytest.mark.unit
def test_window_capped_by_declared_chunk_size():
    # Chunk claims 5 bytes, but more physically follows.
    data = make_container([make_chunk(b"thmb", PAYLOAD, declared_size=5)])
    view = scan_for_chunk(io.BytesIO(data))

    assert view.length == 5
    assert view.read() == PAYLOAD[:5]


@pytest.mark.unit
def test_second_chunk_match_skips_first_payload():
    info = make_chunk(b"LIST", b"x" * 37)
    stream = io.BytesIO(make_container([info, make_chunk(b"thmb", PAYLOAD)]))
    view = scan_for_chunk(stream)

    # 12 byte header + first chunk (8 + 37) + second chunk header
    assert stream.tell() == 12 + 8 + 37 + 8
    assert view.read() == PAYLOAD


@pytest.mark.unit
def test_second_chunk_window_uses_remaining_file_size():
    info = make_chunk(b"LIST", b"x" * 10)
    # total = 4 (form) + 18 (first chunk) + 8 (second header) + 12 of payload
    data = make_container([info, make_chunk(b"thmb", PAYLOAD)], total_size=4 + 18 + 8 + 12)
    view = scan_for_chunk(io.BytesIO(data))

    # remaining after first chunk = total - (10 + 8)
    assert view.length == 4 + 8 + 12
    assert view.read() == PAYLOAD[:24]


@pytest.mark.unit
def test_oversized_first_chunk_saturates_remaining_size():
    info = make_chunk(b"LIST", b"x" * 10, declared_size=10)
    data = make_container([info, make_chunk(b"thmb", PAYLOAD)], total_size=5)
    view = scan_for_chunk(io.BytesIO(data))

    assert view.length == 0
    assert view.read() == b""


@pytest.mark.unit
@pytest.mark.parametrize(
    "magic, form_type",
    [(b"RIFX", b"fzp "), (b"RIFF", b"WAVE"), (b"\x00\x00\x00\x00", b"fzp ")],
)
def test_bad_header_is_format_error_and_reads_no_further(magic, form_type):
    stream = io.BytesIO(make_container([make_chunk(b"thmb", PAYLOAD)], magic=magic, form_type=form_type))
    with pytest.raises(ContainerFormatError) as info:
        scan_for_chunk(stream)

    assert info.value.kind is ErrorKind.FORMAT
    assert info.value.found in (magic, form_type)
    assert stream.tell() == 12


@pytest.mark.unit
def test_truncated_header_is_format_error():
    with pytest.raises(ContainerFormatError):
        scan_for_chunk(io.BytesIO(b"RIFF\x10\x00"))


@pytest.mark.unit
def test_truncated_chunk_header_is_format_error():
    with pytest.raises(ContainerFormatError):
        scan_for_chunk(io.BytesIO(make_container([b"thm"])))


@pytest.mark.unit
def test_not_in_first_two_chunks():
    chunks = [make_chunk(b"LIST", b"a"), make_chunk(b"data", b"b"), make_chunk(b"thmb", PAYLOAD)]
    with pytest.raises(ThumbnailNotFoundError) as info:
        scan_for_chunk(io.BytesIO(make_container(chunks)))

    assert MAX_CHUNKS_SCANNED == 2
    assert info.value.kind is ErrorKind.NOT_FOUND
    assert info.value.tag == b"thmb"
    assert info.value.seen == (b"LIST", b"data")


@pytest.mark.unit
def test_scan_limit_is_adjustable():
    chunks = [make_chunk(b"LIST", b"a"), make_chunk(b"data", b"b"), make_chunk(b"thmb", PAYLOAD)]
    view = scan_for_chunk(io.BytesIO(make_container(chunks)), max_chunks=3)
    assert view.read() == PAYLOAD


@pytest.mark.unit
def test_buffered_file(tmp_path):
    path = tmp_path / "doc.fzp"
    path.write_bytes(make_container([make_chunk(b"LIST", b"q" * 9), make_chunk(b"thmb", PAYLOAD)]))

    with scan_for_chunk(open(path, "rb")) as view:
        assert view.peek(1)[:10] == PAYLOAD[:10]
        assert view.read() == PAYLOAD
