"""Mixed backend: main memory first, spill-over to temp files."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, BinaryIO

from stream_cache._cache import StreamCache
from stream_cache._config import MemoryUsageSetting
from stream_cache._errors import AlreadyExists, NotFound, StorageLimitExceeded
from stream_cache._ioutils import close_and_log_exception, read_up_to
from stream_cache.backends._memory import MemoryStreamCache
from stream_cache.backends._temp_file import TempFileStreamCache

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stream_cache._models import EntryInfo
    from stream_cache._types import WritableContent

log = logging.getLogger(__name__)


class MixedStreamCache(StreamCache):
    """Stream cache that keeps entries in memory until the memory budget is used up.

    An entry that does not fit into the remaining memory budget is written to
    a temp file instead. The temp-file tier is only created once the first
    entry spills. ``max_storage_bytes``, when restricted, bounds both tiers
    together.

    :param setting: A mixed memory usage setting.
    """

    def __init__(self, setting: MemoryUsageSetting) -> None:
        super().__init__(setting)
        self._memory = MemoryStreamCache(MemoryUsageSetting.setup_main_memory_only(setting.max_main_memory_bytes))
        self._disk: TempFileStreamCache | None = None

    @property
    def name(self) -> str:
        return "mixed"

    @property
    def size(self) -> int:
        return self._memory.size + (self._disk.size if self._disk is not None else 0)

    def _disk_tier(self) -> TempFileStreamCache:
        if self._disk is None:
            disk_setting = MemoryUsageSetting.setup_temp_file_only()
            if self.setting.temp_dir is not None:
                disk_setting = disk_setting.with_temp_dir(self.setting.temp_dir)
            self._disk = TempFileStreamCache(disk_setting)
            log.debug(
                "Main memory budget of %d bytes used up, spilling to temp files",
                self.setting.max_main_memory_bytes,
            )
        return self._disk

    def _tier_of(self, key: str) -> StreamCache | None:
        if self._memory.exists(key):
            return self._memory
        if self._disk is not None and self._disk.exists(key):
            return self._disk
        return None

    def _tier(self, key: str) -> StreamCache:
        self._check_key(key)
        tier = self._tier_of(key)
        if tier is None:
            raise NotFound(f"No entry for key: {key}", key=key, backend=self.name)
        return tier

    def exists(self, key: str) -> bool:
        self._check_key(key)
        return self._tier_of(key) is not None

    def read(self, key: str) -> BinaryIO:
        with self._lock:
            return self._tier(key).read(key)

    def read_bytes(self, key: str) -> bytes:
        with self._lock:
            return self._tier(key).read_bytes(key)

    def _probe(self, content: WritableContent, budget: int) -> tuple[bytes, BinaryIO | None]:
        """Read at most ``budget + 1`` bytes of ``content``.

        :returns: The bytes read and, if there was more than ``budget``, the
            partly consumed stream holding the rest.
        """
        if isinstance(content, (bytes, bytearray, memoryview)):
            return bytes(content), None
        head = read_up_to(content, budget + 1)
        return head, (content if len(head) > budget else None)

    def write(self, key: str, content: WritableContent, *, overwrite: bool = False) -> None:
        self._check_key(key)
        with self._lock:
            previous = self._tier_of(key)
            if previous is not None and not overwrite:
                raise AlreadyExists(f"Entry already exists: {key}", key=key, backend=self.name)
            previous_size = previous.get_info(key).size if previous is not None else 0
            in_memory = previous_size if previous is self._memory else 0
            budget = self.setting.max_main_memory_bytes - self._memory.size + in_memory
            head, rest = self._probe(content, budget)
            if rest is None and len(head) <= budget:
                self._check_storage(key, self.size - previous_size + len(head))
                self._memory.write(key, head, overwrite=True)
                target: StreamCache = self._memory
            else:
                limit = -1
                if self.setting.is_storage_restricted:
                    limit = self.setting.max_storage_bytes - (self._memory.size - in_memory)
                target = self._disk_tier()
                target._store(key, head, rest, overwrite=True, limit=limit)
            if previous is not None and previous is not target:
                previous.delete(key)

    def _check_storage(self, key: str, total: int) -> None:
        limit = self.setting.max_storage_bytes
        if self.setting.is_storage_restricted and total > limit:
            raise StorageLimitExceeded(
                f"Storing {key!r} exceeds the total storage budget",
                key=key,
                backend=self.name,
                limit=limit,
            )

    def delete(self, key: str, *, missing_ok: bool = False) -> None:
        self._check_key(key)
        with self._lock:
            tier = self._tier_of(key)
            if tier is None:
                if not missing_ok:
                    raise NotFound(f"No entry for key: {key}", key=key, backend=self.name)
                return
            tier.delete(key)

    def keys(self) -> Iterator[str]:
        self._check_open()
        with self._lock:
            snapshot = list(self._memory.keys())
            if self._disk is not None:
                snapshot.extend(self._disk.keys())
        return iter(snapshot)

    def get_info(self, key: str) -> EntryInfo:
        with self._lock:
            return self._tier(key).get_info(key)

    def _release(self) -> None:
        error = close_and_log_exception(self._memory, log, "main memory tier")
        error = close_and_log_exception(self._disk, log, "temp file tier", error)
        if error is not None:
            raise error
