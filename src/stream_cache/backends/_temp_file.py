"""Temp-file backend: one file per entry in a private temp directory."""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tempfile
import weakref
from typing import TYPE_CHECKING, BinaryIO

from stream_cache._cache import StreamCache
from stream_cache._config import MemoryUsageSetting, StorageKind
from stream_cache._errors import AlreadyExists, NotFound, StorageLimitExceeded
from stream_cache._ioutils import close_quietly, copy
from stream_cache._models import EntryInfo

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stream_cache._types import WritableContent

log = logging.getLogger(__name__)

TEMP_DIR_PREFIX = "stream-cache-"


class TempFileStreamCache(StreamCache):
    """Stream cache that stores every entry in its own temp file.

    The temp directory is created on construction and removed by ``close()``.
    Streams handed out by ``read()`` are closed along with the cache.

    :param setting: The memory usage setting; ``temp_dir`` and a restricted
        ``max_storage_bytes`` are honored. Defaults to unrestricted temp files.
    """

    def __init__(self, setting: MemoryUsageSetting | None = None) -> None:
        super().__init__(setting or MemoryUsageSetting.setup_temp_file_only())
        self._dir = tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX, dir=self.setting.temp_dir)
        self._files: dict[str, tuple[str, int]] = {}
        self._readers: weakref.WeakSet[BinaryIO] = weakref.WeakSet()
        self._used = 0
        log.debug("Created temp directory %s", self._dir)

    @property
    def name(self) -> str:
        return "temp-file"

    @property
    def directory(self) -> str:
        """The private temp directory backing this cache."""
        return self._dir

    @property
    def size(self) -> int:
        return self._used

    def _lookup(self, key: str) -> tuple[str, int]:
        self._check_key(key)
        try:
            return self._files[key]
        except KeyError:
            raise NotFound(f"No entry for key: {key}", key=key, backend=self.name) from None

    def exists(self, key: str) -> bool:
        self._check_key(key)
        return key in self._files

    def read(self, key: str) -> BinaryIO:
        with self._lock:
            path, _ = self._lookup(key)
            reader = open(path, "rb")  # noqa: SIM115
            self._readers.add(reader)
        return reader

    def write(self, key: str, content: WritableContent, *, overwrite: bool = False) -> None:
        if isinstance(content, (bytes, bytearray, memoryview)):
            self._store(key, bytes(content), None, overwrite=overwrite)
        else:
            self._store(key, b"", content, overwrite=overwrite)

    def _store(
        self, key: str, head: bytes, tail: BinaryIO | None, *, overwrite: bool, limit: int | None = None
    ) -> None:
        """Write ``head`` followed by the rest of ``tail`` into a new entry file.

        :param limit: Byte budget for this tier, overriding ``max_storage_bytes``.
            ``-1`` means unrestricted.
        """
        if limit is None:
            limit = self.setting.max_storage_bytes
        self._check_key(key)
        if not overwrite and key in self._files:
            raise AlreadyExists(f"Entry already exists: {key}", key=key, backend=self.name)
        fd, path = tempfile.mkstemp(suffix=".bin", dir=self._dir)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(head)
                size = len(head) + (copy(tail, fh) if tail is not None else 0)
            with self._lock:
                self._check_open()
                if not overwrite and key in self._files:
                    raise AlreadyExists(f"Entry already exists: {key}", key=key, backend=self.name)
                previous = self._files.get(key)
                used = self._used - (previous[1] if previous else 0) + size
                if limit >= 0 and used > limit:
                    raise StorageLimitExceeded(
                        f"Storing {size} bytes exceeds the temp file budget",
                        key=key,
                        backend=self.name,
                        limit=limit,
                    )
                self._files[key] = (path, size)
                self._used = used
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(path)
            raise
        if previous is not None:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(previous[0])

    def delete(self, key: str, *, missing_ok: bool = False) -> None:
        self._check_key(key)
        with self._lock:
            entry = self._files.pop(key, None)
            if entry is None:
                if not missing_ok:
                    raise NotFound(f"No entry for key: {key}", key=key, backend=self.name)
                return
            self._used -= entry[1]
        with contextlib.suppress(FileNotFoundError):
            os.unlink(entry[0])

    def keys(self) -> Iterator[str]:
        self._check_open()
        with self._lock:
            snapshot = list(self._files)
        return iter(snapshot)

    def get_info(self, key: str) -> EntryInfo:
        _, size = self._lookup(key)
        return EntryInfo(key=key, size=size, location=StorageKind.TEMP_FILE)

    def _release(self) -> None:
        for reader in list(self._readers):
            close_quietly(reader)
        self._readers.clear()
        self._files.clear()
        self._used = 0
        shutil.rmtree(self._dir)
        log.debug("Removed temp directory %s", self._dir)
