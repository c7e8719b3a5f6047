"""Stream helpers, resource closers and the default cache selectors."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, BinaryIO

from stream_cache._config import MemoryUsageSetting

if TYPE_CHECKING:
    from stream_cache._factory import StreamCacheFactory
    from stream_cache._types import Closeable

log = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024


# region: stream primitives
def read_all(stream: BinaryIO) -> bytes:
    """Read the stream to its end and return everything as bytes.

    :raises OSError: If the stream fails. No partial data is returned.
    """
    chunks = []
    while True:
        chunk = stream.read(COPY_CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def copy(source: BinaryIO, target: BinaryIO) -> int:
    """Copy all remaining bytes of ``source`` to ``target``.

    Neither stream is closed. Partial writes, as raw streams may perform,
    are retried until the whole chunk has been written.

    :returns: The number of bytes copied.
    :raises OSError: If either stream fails.
    """
    total = 0
    while True:
        chunk = source.read(COPY_CHUNK_SIZE)
        if not chunk:
            break
        view = memoryview(chunk)
        while view:
            written = target.write(view)
            # file-likes that return nothing take the whole chunk
            if written is None:
                written = len(view)
            view = view[written:]
            total += written
    return total


def read_up_to(stream: BinaryIO, limit: int) -> bytes:
    """Read at most ``limit`` bytes, fewer only if the stream ends first.

    :raises OSError: If the stream fails.
    """
    data = bytearray()
    chunk = bytearray(min(COPY_CHUNK_SIZE, limit))
    while len(data) < limit:
        view = memoryview(chunk)[: limit - len(data)]
        read = populate_buffer(stream, view)
        data += view[:read]
        if read < len(view):
            break
    return bytes(data)


def populate_buffer(stream: BinaryIO, buffer: bytearray | memoryview) -> int:
    """Fill ``buffer`` from offset 0 with data read from ``stream``.

    Short reads are retried until the buffer is full or the stream is
    exhausted; data beyond ``len(buffer)`` stays on the stream.

    :returns: The number of bytes written to the buffer.
    :raises OSError: If the stream fails.
    """
    view = memoryview(buffer).cast("B")
    filled = 0
    while filled < len(view):
        chunk = stream.read(len(view) - filled)
        if not chunk:
            break
        view[filled : filled + len(chunk)] = chunk
        filled += len(chunk)
    return filled


# endregion


# region: closers
def close_quietly(closeable: Closeable | None) -> None:
    """Close ``closeable`` if given, logging and suppressing any ``OSError``."""
    if closeable is None:
        return
    try:
        closeable.close()
    except OSError:
        log.debug("An exception occurred while trying to close - ignoring", exc_info=True)


def close_and_log_exception(
    closeable: Closeable | None,
    logger: logging.Logger,
    resource_name: str,
    initial_exception: OSError | None = None,
) -> OSError | None:
    """Close ``closeable`` and report a failure without masking an earlier one.

    :param logger: Logger the warning is emitted on, so it shows up under the caller.
    :param resource_name: Name of the resource in the log message.
    :param initial_exception: An error the caller already holds. If set, it is
        returned even when closing fails.
    :returns: ``initial_exception`` if set, otherwise the close failure, or
        ``None`` if there was neither.
    """
    if closeable is None:
        return initial_exception
    try:
        closeable.close()
    except OSError as exc:
        logger.warning("Error closing %s", resource_name, exc_info=exc)
        if initial_exception is None:
            return exc
    return initial_exception


# endregion


# region: cache selection
def create_memory_only_stream_cache() -> StreamCacheFactory:
    """Return a factory for caches that use unrestricted main memory only."""
    return MemoryUsageSetting.setup_main_memory_only().stream_cache


def create_temp_file_only_stream_cache() -> StreamCacheFactory:
    """Return a factory for caches that use unrestricted temp-file storage only."""
    return MemoryUsageSetting.setup_temp_file_only().stream_cache


# endregion
