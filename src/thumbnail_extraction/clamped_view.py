"""A seekable window over part of another binary stream."""

from __future__ import annotations

import io
from typing import BinaryIO

from fzp_thumbnailer.errors import StreamError


class ClampedView(io.RawIOBase):
    """Expose ``length`` bytes of ``inner``, starting at its current position.

    Like reading a bounded slice, except seeking works too. Offsets are
    relative to the window: the wrapped stream's position at construction is
    offset 0 and ``length`` is the end. Seeks past the end clamp to the end.
    The wrapped stream is only ever moved with relative seeks, because its
    own notion of start and end has nothing to do with ours.

    The view owns ``inner``; closing the view closes it.
    """

    def __init__(self, inner: BinaryIO, length: int):
        super().__init__()
        self._inner: BinaryIO | None = None
        if length < 0:
            raise ValueError(f"window length must not be negative, got {length}")
        self._inner = inner
        self._length = length
        self._cursor = 0

    def __repr__(self) -> str:
        return f"<ClampedView cursor={self._cursor} length={self._length}>"

    @property
    def length(self) -> int:
        return self._length

    @property
    def cursor(self) -> int:
        return self._cursor

    def remaining(self) -> int:
        remaining = self._length - self._cursor
        assert remaining >= 0, "cursor past the end"
        return remaining

    def _stream(self) -> BinaryIO:
        if self.closed or self._inner is None:
            raise ValueError("I/O operation on closed ClampedView")
        return self._inner

    def _advance(self, amount: int) -> None:
        new_cursor = self._cursor + amount
        if new_cursor > self._length:
            raise StreamError("inner stream overflowed ClampedView cursor")
        self._cursor = new_cursor

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        inner = self._stream()
        return inner.seekable() if hasattr(inner, "seekable") else True

    def readinto(self, buffer) -> int:
        inner = self._stream()
        view = memoryview(buffer).cast("B")
        wanted = min(len(view), self.remaining())
        # Nothing left in the window; don't bother the inner stream.
        if wanted == 0:
            return 0

        target = view[:wanted]
        if hasattr(inner, "readinto"):
            num_read = inner.readinto(target)
        else:
            data = inner.read(wanted)
            num_read = len(data)
            if num_read <= wanted:
                target[:num_read] = data
        if num_read is None:
            return None
        # A well behaved stream never reports more than it was given room for.
        if num_read > wanted:
            raise StreamError(
                f"inner stream reported {num_read} bytes read for a {wanted} byte request"
            )
        self._advance(num_read)
        return num_read

    def peek(self, size: int = 1) -> bytes:
        """Return buffered bytes from the wrapped stream, cut off at the window end.

        Does not advance. The wrapped stream must offer ``peek`` (as
        ``io.BufferedReader`` does).
        """

        inner = self._stream()
        peek = getattr(inner, "peek", None)
        if peek is None:
            raise io.UnsupportedOperation("wrapped stream is not buffered")
        remaining = self.remaining()
        if remaining == 0:
            return b""
        return peek(size)[:remaining]

    def consume(self, amount: int) -> int:
        """Skip up to ``amount`` bytes, typically ones just seen via ``peek``.

        Only as much as the window still allows is consumed. Returns the
        number of bytes actually skipped.
        """

        if amount < 0:
            raise ValueError(f"cannot consume a negative amount ({amount})")
        inner = self._stream()
        trimmed = min(amount, self.remaining())
        if trimmed:
            inner.seek(trimmed, io.SEEK_CUR)
            self._advance(trimmed)
        return trimmed

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        inner = self._stream()
        if whence == io.SEEK_SET:
            new_cursor = min(max(offset, 0), self._length)
        elif whence == io.SEEK_CUR:
            # Clamp forward motion to the window before adding.
            if offset > 0:
                offset = min(offset, self.remaining())
            new_cursor = self._cursor + offset
            if new_cursor < 0:
                raise StreamError("seek offset past-the-start")
        elif whence == io.SEEK_END:
            # Positive offsets can't go anywhere past the end.
            back = -min(offset, 0)
            if back > self._length:
                raise StreamError("seek offset past-the-start")
            new_cursor = self._length - back
        else:
            raise ValueError(f"invalid whence ({whence!r}, should be 0, 1 or 2)")

        assert 0 <= new_cursor <= self._length

        delta = new_cursor - self._cursor
        if delta:
            inner.seek(delta, io.SEEK_CUR)
        self._cursor = new_cursor
        return self._cursor

    def tell(self) -> int:
        self._stream()
        return self._cursor

    def into_inner(self) -> BinaryIO:
        """Detach and return the wrapped stream without closing it."""

        inner = self._stream()
        self._inner = None
        super().close()
        return inner

    def close(self) -> None:
        if self.closed:
            return
        inner, self._inner = self._inner, None
        try:
            if inner is not None:
                inner.close()
        finally:
            super().close()


__all__ = ["ClampedView"]
