"""Shared test fixtures."""

from __future__ import annotations

import io

import pytest


class FailingCloseable:
    """A resource whose ``close()`` always fails."""

    def __init__(self, message: str = "close failed") -> None:
        self.error = OSError(message)
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        raise self.error


class TrackingCloseable:
    """A resource that records whether it was closed."""

    def __init__(self) -> None:
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1


class TrickleStream(io.RawIOBase):
    """Binary stream that returns at most ``step`` bytes per read."""

    def __init__(self, data: bytes, step: int = 3) -> None:
        self._data = data
        self._pos = 0
        self._step = step

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:
        n = min(len(buffer), self._step, len(self._data) - self._pos)
        buffer[:n] = self._data[self._pos : self._pos + n]
        self._pos += n
        return n


class ShortWriter(io.RawIOBase):
    """Binary sink that accepts at most ``step`` bytes per write."""

    def __init__(self, step: int = 3) -> None:
        self.data = bytearray()
        self.write_calls = 0
        self._step = step

    def writable(self) -> bool:
        return True

    def write(self, data: bytes | bytearray | memoryview) -> int:
        self.write_calls += 1
        taken = bytes(data[: self._step])
        self.data += taken
        return len(taken)


class BrokenStream(io.RawIOBase):
    """Binary stream that yields ``data`` and then fails."""

    def __init__(self, data: bytes = b"") -> None:
        self._data = data
        self._served = False

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:
        if not self._served and self._data:
            self._served = True
            n = min(len(buffer), len(self._data))
            buffer[:n] = self._data[:n]
            return n
        raise OSError("stream failed")

    def write(self, data: bytes | bytearray | memoryview) -> int:
        raise OSError("stream failed")


@pytest.fixture
def failing_closeable() -> FailingCloseable:
    return FailingCloseable()


@pytest.fixture
def tracking_closeable() -> TrackingCloseable:
    return TrackingCloseable()


@pytest.fixture
def trickle_stream() -> type[TrickleStream]:
    return TrickleStream


@pytest.fixture
def broken_stream() -> type[BrokenStream]:
    return BrokenStream


@pytest.fixture
def short_writer() -> type[ShortWriter]:
    return ShortWriter
