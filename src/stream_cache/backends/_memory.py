"""Main-memory backend keeping entries as ``bytes`` in a private dict."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, BinaryIO

from stream_cache._cache import StreamCache
from stream_cache._config import MemoryUsageSetting, StorageKind
from stream_cache._errors import AlreadyExists, NotFound, StorageLimitExceeded
from stream_cache._ioutils import read_all, read_up_to
from stream_cache._models import EntryInfo

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stream_cache._types import WritableContent


class MemoryStreamCache(StreamCache):
    """Stream cache that keeps every entry in main memory.

    :param setting: The memory usage setting; ``max_main_memory_bytes`` is
        enforced when restricted. Defaults to unrestricted memory.
    """

    def __init__(self, setting: MemoryUsageSetting | None = None) -> None:
        super().__init__(setting or MemoryUsageSetting.setup_main_memory_only())
        self._entries: dict[str, bytes] = {}
        self._used = 0

    @property
    def name(self) -> str:
        return "memory"

    @property
    def size(self) -> int:
        return self._used

    def _read_content(self, key: str, content: WritableContent) -> bytes:
        """Materialize ``content``, reading a stream no further than the budget allows."""
        if isinstance(content, (bytes, bytearray, memoryview)):
            return bytes(content)
        if not self.setting.is_main_memory_restricted:
            return read_all(content)
        budget = self.setting.max_main_memory_bytes - self._used + len(self._entries.get(key, b""))
        return read_up_to(content, max(budget, 0) + 1)

    def exists(self, key: str) -> bool:
        self._check_key(key)
        return key in self._entries

    def read(self, key: str) -> BinaryIO:
        return io.BytesIO(self.read_bytes(key))

    def read_bytes(self, key: str) -> bytes:
        self._check_key(key)
        try:
            return self._entries[key]
        except KeyError:
            raise NotFound(f"No entry for key: {key}", key=key, backend=self.name) from None

    def write(self, key: str, content: WritableContent, *, overwrite: bool = False) -> None:
        self._check_key(key)
        if not overwrite and key in self._entries:
            raise AlreadyExists(f"Entry already exists: {key}", key=key, backend=self.name)
        data = self._read_content(key, content)
        with self._lock:
            self._check_open()
            if not overwrite and key in self._entries:
                raise AlreadyExists(f"Entry already exists: {key}", key=key, backend=self.name)
            used = self._used - len(self._entries.get(key, b"")) + len(data)
            limit = self.setting.max_main_memory_bytes
            if self.setting.is_main_memory_restricted and used > limit:
                raise StorageLimitExceeded(
                    f"Storing {len(data)} bytes exceeds the main memory budget",
                    key=key,
                    backend=self.name,
                    limit=limit,
                )
            self._entries[key] = data
            self._used = used

    def delete(self, key: str, *, missing_ok: bool = False) -> None:
        self._check_key(key)
        with self._lock:
            data = self._entries.pop(key, None)
            if data is None:
                if not missing_ok:
                    raise NotFound(f"No entry for key: {key}", key=key, backend=self.name)
                return
            self._used -= len(data)

    def keys(self) -> Iterator[str]:
        self._check_open()
        with self._lock:
            snapshot = list(self._entries)
        return iter(snapshot)

    def get_info(self, key: str) -> EntryInfo:
        return EntryInfo(key=key, size=len(self.read_bytes(key)), location=StorageKind.MEMORY)

    def _release(self) -> None:
        self._entries.clear()
        self._used = 0
