"""StreamCache abstract base class — the contract every cache backend fulfils."""

from __future__ import annotations

import abc
import threading
from typing import TYPE_CHECKING, BinaryIO

from stream_cache._errors import CacheClosed, InvalidKey
from stream_cache._ioutils import read_all

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

    from stream_cache._config import MemoryUsageSetting
    from stream_cache._models import EntryInfo
    from stream_cache._types import WritableContent


class StreamCache(abc.ABC):
    """Abstract base class for all stream caches.

    A stream cache stores byte content under string keys. Every instance owns
    its storage exclusively and must be closed when no longer needed.

    :param setting: The memory usage setting the cache was created from.
    """

    def __init__(self, setting: MemoryUsageSetting) -> None:
        self._setting = setting
        self._lock = threading.RLock()
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"{type(self).__name__}(setting={str(self._setting)!r}, {state})"

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Unique identifier for this backend type (e.g. ``'memory'``)."""

    @property
    def setting(self) -> MemoryUsageSetting:
        return self._setting

    @property
    def closed(self) -> bool:
        return self._closed

    @abc.abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether an entry is stored under ``key``. Never raises ``NotFound``."""

    @abc.abstractmethod
    def read(self, key: str) -> BinaryIO:
        """Open an entry for reading and return a binary stream.

        The caller must close the returned stream.

        :raises NotFound: If no entry is stored under ``key``.
        """

    def read_bytes(self, key: str) -> bytes:
        """Read the full content of an entry.

        :raises NotFound: If no entry is stored under ``key``.
        """
        stream = self.read(key)
        try:
            return read_all(stream)
        finally:
            stream.close()

    @abc.abstractmethod
    def write(self, key: str, content: WritableContent, *, overwrite: bool = False) -> None:
        """Store content under ``key``.

        Streams are read from their current position to the end; they are not closed.

        :param overwrite: If ``False``, raise if the key is taken.
        :raises AlreadyExists: If the key is taken and ``overwrite`` is ``False``.
        :raises StorageLimitExceeded: If the content does not fit the budget.
        """

    @abc.abstractmethod
    def delete(self, key: str, *, missing_ok: bool = False) -> None:
        """Remove an entry.

        :raises NotFound: If the key is missing and ``missing_ok`` is ``False``.
        """

    @abc.abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate over the stored keys (snapshot taken at call time)."""

    @abc.abstractmethod
    def get_info(self, key: str) -> EntryInfo:
        """Get metadata for an entry.

        :raises NotFound: If no entry is stored under ``key``.
        """

    @property
    def size(self) -> int:
        """Total number of bytes currently stored."""
        return sum(self.get_info(key).size for key in self.keys())

    @abc.abstractmethod
    def _release(self) -> None:
        """Free the storage held by this cache. Called once by ``close()``."""

    def close(self) -> None:
        """Release all storage. Closing an already closed cache is a no-op.

        :raises OSError: If releasing the storage fails.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._release()

    def __enter__(self) -> StreamCache:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and bool(key) and self.exists(key)

    def __len__(self) -> int:
        return sum(1 for _ in self.keys())

    # region: helpers for subclasses
    def _check_open(self) -> None:
        if self._closed:
            raise CacheClosed(f"Cache is closed: {self!r}", backend=self.name)

    def _check_key(self, key: str) -> None:
        self._check_open()
        if not isinstance(key, str) or not key:
            raise InvalidKey(f"Key must be a non-empty string, got {key!r}", backend=self.name)

    # endregion
