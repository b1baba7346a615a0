"""Tests for stream helpers and the discard-then-read adaptor."""

from __future__ import annotations

import io

import pytest

from cloudstore.infra.storage.streams import (
    CountingReader,
    Deadline,
    DiscardReadAtAdaptor,
    copy_stream,
)

CONTENT = b"0123456789abcdefghij"


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TrickleReader(io.BytesIO):
    """Returns at most one byte per read, like a slow network stream."""

    def read(self, size: int = -1) -> bytes:
        return super().read(1 if size != 0 else 0)


class TestDiscardReadAtAdaptor:
    @pytest.mark.parametrize(
        ("offset", "capacity", "expected"),
        [
            (0, 5, b"01234"),
            (7, 4, b"789a"),
            (16, 10, b"ghij"),
            (19, 1, b"j"),
            (0, 20, CONTENT),
        ],
    )
    def test_reads_range(self, offset, capacity, expected):
        buffer = bytearray(capacity)
        with DiscardReadAtAdaptor(io.BytesIO(CONTENT), buffer_size=3) as adaptor:
            count = adaptor.read_at(buffer, offset)

        assert count == len(expected)
        assert bytes(buffer[:count]) == expected

    @pytest.mark.parametrize("offset", [20, 21, 500])
    def test_offset_at_or_past_end_reads_nothing(self, offset):
        buffer = bytearray(b"\xff" * 4)
        adaptor = DiscardReadAtAdaptor(io.BytesIO(CONTENT))

        assert adaptor.read_at(buffer, offset) == 0
        assert buffer == bytearray(b"\xff" * 4)

    def test_fills_buffer_from_short_reads(self):
        buffer = bytearray(6)
        adaptor = DiscardReadAtAdaptor(TrickleReader(CONTENT), buffer_size=2)

        assert adaptor.read_at(buffer, 3) == 6
        assert bytes(buffer) == b"345678"

    def test_accepts_memoryview(self):
        backing = bytearray(8)
        adaptor = DiscardReadAtAdaptor(io.BytesIO(CONTENT))

        count = adaptor.read_at(memoryview(backing)[2:6], 10)

        assert count == 4
        assert bytes(backing) == b"\x00\x00abcd\x00\x00"

    def test_successive_reads_only_discard_the_gap(self):
        reader = io.BytesIO(CONTENT)
        adaptor = DiscardReadAtAdaptor(reader)
        first, second = bytearray(3), bytearray(3)

        adaptor.read_at(first, 2)
        adaptor.read_at(second, 8)

        assert bytes(first) == b"234"
        assert bytes(second) == b"89a"
        assert reader.tell() == 11

    def test_rejects_backwards_offset(self):
        adaptor = DiscardReadAtAdaptor(io.BytesIO(CONTENT))
        adaptor.read_at(bytearray(4), 5)

        with pytest.raises(ValueError, match="behind stream position"):
            adaptor.read_at(bytearray(4), 2)

    def test_rejects_negative_offset(self):
        adaptor = DiscardReadAtAdaptor(io.BytesIO(CONTENT))

        with pytest.raises(ValueError, match="negative offset"):
            adaptor.read_at(bytearray(4), -1)

    def test_expired_deadline_stops_discard(self):
        clock = FakeClock()
        reader = io.BytesIO(CONTENT)
        adaptor = DiscardReadAtAdaptor(
            reader, buffer_size=3, deadline=Deadline(0.0, clock=clock)
        )

        with pytest.raises(TimeoutError, match="deadline exceeded"):
            adaptor.read_at(bytearray(4), 10)
        assert reader.tell() == 0

    def test_deadline_checked_between_chunks(self):
        clock = FakeClock()
        deadline = Deadline(5.0, clock=clock)

        class ExpiringReader(TrickleReader):
            def read(self, size: int = -1) -> bytes:
                chunk = super().read(size)
                clock.now += 3.0
                return chunk

        adaptor = DiscardReadAtAdaptor(
            ExpiringReader(CONTENT), buffer_size=2, deadline=deadline
        )

        with pytest.raises(TimeoutError):
            adaptor.read_at(bytearray(4), 0)

    def test_context_exit_closes_reader(self):
        reader = io.BytesIO(CONTENT)
        with DiscardReadAtAdaptor(reader):
            pass

        assert reader.closed


class TestCopyStream:
    def test_copies_everything(self):
        sink = io.BytesIO()

        assert copy_stream(io.BytesIO(CONTENT), sink, buffer_size=3) == len(CONTENT)
        assert sink.getvalue() == CONTENT

    def test_empty_source(self):
        assert copy_stream(io.BytesIO(b""), io.BytesIO()) == 0

    def test_expired_deadline_stops_copy(self):
        clock = FakeClock()
        deadline = Deadline(5.0, clock=clock)
        clock.now += 5.0

        with pytest.raises(TimeoutError, match="deadline exceeded"):
            copy_stream(io.BytesIO(CONTENT), io.BytesIO(), deadline=deadline)


class TestDeadline:
    def test_unbounded(self):
        deadline = Deadline(None)

        assert deadline.remaining() is None
        deadline.check()

    def test_remaining_counts_down(self):
        clock = FakeClock()
        deadline = Deadline(10.0, clock=clock)
        clock.now += 4.0

        assert deadline.remaining() == pytest.approx(6.0)
        deadline.check()

    def test_remaining_never_negative(self):
        clock = FakeClock()
        deadline = Deadline(1.0, clock=clock)
        clock.now += 3.0

        assert deadline.remaining() == 0.0
        with pytest.raises(TimeoutError):
            deadline.check()


class TestCountingReader:
    def test_counts_bytes_and_reports_position(self):
        reader = CountingReader(io.BytesIO(CONTENT))

        assert reader.read(7) == b"0123456"
        assert reader.read() == b"789abcdefghij"
        assert reader.read() == b""
        assert reader.bytes_read == len(CONTENT)
        assert reader.tell() == len(CONTENT)
        assert reader.readable()
        assert not reader.seekable()

    def test_expired_deadline(self):
        clock = FakeClock()
        reader = CountingReader(io.BytesIO(CONTENT), Deadline(0.0, clock=clock))

        with pytest.raises(TimeoutError):
            reader.read(4)
        assert reader.bytes_read == 0
