"""Stream helpers shared by storage backends.

Backends hand out forward-only readers. :class:`DiscardReadAtAdaptor` turns
such a reader into an offset-addressed one by discarding bytes up to the
requested offset, which costs O(offset) per read. Backends that can seek may
supply another :class:`ReadAtAdaptor` instead.
"""

from __future__ import annotations

import time
from typing import BinaryIO, Callable, Protocol

from cloudstore.infra.storage.client import THIRTY_TWO_KB


class ForwardReader(Protocol):
    """A readable, closable byte stream without seeking."""

    def read(self, size: int = -1) -> bytes:
        ...

    def close(self) -> None:
        ...


class ReadAtAdaptor(Protocol):
    """Offset-addressed reads over one object, owned for a single call."""

    def read_at(self, buffer: bytearray | memoryview, offset: int) -> int:
        ...

    def close(self) -> None:
        ...


class Deadline:
    """Remaining time budget of one operation.

    A ``None`` timeout never expires.
    """

    def __init__(
        self,
        timeout: float | None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._expires_at = None if timeout is None else clock() + timeout

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    def check(self) -> None:
        if self._expires_at is not None and self._clock() >= self._expires_at:
            raise TimeoutError("deadline exceeded")


def copy_stream(
    source: ForwardReader | BinaryIO,
    sink: BinaryIO,
    *,
    buffer_size: int = THIRTY_TWO_KB,
    deadline: Deadline | None = None,
) -> int:
    """Copy ``source`` into ``sink`` until end of stream and return the byte count.

    Raises:
        TimeoutError: If ``deadline`` expires between chunks.
    """
    total = 0
    while True:
        if deadline is not None:
            deadline.check()
        chunk = source.read(buffer_size)
        if not chunk:
            return total
        sink.write(chunk)
        total += len(chunk)


class CountingReader:
    """Read-through wrapper recording how many bytes were consumed.

    Positions reported by :meth:`tell` are relative to where the wrapped
    stream stood when wrapping began.
    """

    def __init__(self, source: BinaryIO, deadline: Deadline | None = None) -> None:
        self._source = source
        self._deadline = deadline
        self.bytes_read = 0

    def read(self, size: int = -1) -> bytes:
        if self._deadline is not None:
            self._deadline.check()
        chunk = self._source.read(size)
        if chunk:
            self.bytes_read += len(chunk)
        return chunk

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def tell(self) -> int:
        return self.bytes_read


class DiscardReadAtAdaptor:
    """Offset-addressed reads over a forward-only stream.

    The adaptor owns ``reader`` and closes it on :meth:`close` or when used as
    a context manager. Reads may be repeated with non-decreasing offsets; only
    the gap since the previous read is discarded. ``deadline`` is checked
    before every chunk, discarded or kept.
    """

    def __init__(
        self,
        reader: ForwardReader,
        *,
        buffer_size: int = THIRTY_TWO_KB,
        deadline: Deadline | None = None,
    ) -> None:
        self.reader = reader
        self._buffer_size = buffer_size
        self._deadline = deadline
        self._position = 0

    def read_at(self, buffer: bytearray | memoryview, offset: int) -> int:
        if offset < 0:
            raise ValueError(f"negative offset {offset}")
        if offset < self._position:
            raise ValueError(
                f"offset {offset} is behind stream position {self._position}"
            )
        if not self._discard(offset - self._position):
            return 0
        view = memoryview(buffer).cast("B")
        filled = 0
        while filled < len(view):
            self._check_deadline()
            chunk = self.reader.read(len(view) - filled)
            if not chunk:
                break
            view[filled : filled + len(chunk)] = chunk
            filled += len(chunk)
        self._position += filled
        return filled

    def _discard(self, count: int) -> bool:
        """Skip ``count`` bytes; False when the stream ends first."""
        while count > 0:
            self._check_deadline()
            chunk = self.reader.read(min(count, self._buffer_size))
            if not chunk:
                return False
            count -= len(chunk)
            self._position += len(chunk)
        return True

    def _check_deadline(self) -> None:
        if self._deadline is not None:
            self._deadline.check()

    def close(self) -> None:
        self.reader.close()

    def __enter__(self) -> "DiscardReadAtAdaptor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
