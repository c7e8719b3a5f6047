"""Factory — turns a memory usage setting into independent cache instances."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from stream_cache._config import MemoryUsageSetting, StorageKind

if TYPE_CHECKING:
    from stream_cache._cache import StreamCache

log = logging.getLogger(__name__)

# Global cache backend registry: maps storage kinds to cache classes.
_CACHE_BACKENDS: dict[StorageKind, type[StreamCache]] = {}


def register_cache_backend(kind: StorageKind | str, cls: type[StreamCache]) -> None:
    """Register the cache class used for a storage kind.

    Replaces any class previously registered for ``kind``.

    :param kind: The storage kind (or its value, e.g. ``"memory"``).
    :param cls: The cache class; it is called with the setting as only argument.
    """
    _CACHE_BACKENDS[StorageKind(kind)] = cls


def _register_builtin_backends() -> None:
    """Register the built-in backends for kinds nobody has claimed yet."""
    from stream_cache.backends._memory import MemoryStreamCache
    from stream_cache.backends._mixed import MixedStreamCache
    from stream_cache.backends._temp_file import TempFileStreamCache

    for kind, cls in (
        (StorageKind.MEMORY, MemoryStreamCache),
        (StorageKind.TEMP_FILE, TempFileStreamCache),
        (StorageKind.MIXED, MixedStreamCache),
    ):
        if kind not in _CACHE_BACKENDS:
            register_cache_backend(kind, cls)


def _backend_for(kind: StorageKind) -> type[StreamCache]:
    _register_builtin_backends()
    return _CACHE_BACKENDS[kind]


def _create_cache(cls: type[StreamCache], setting: MemoryUsageSetting) -> StreamCache:
    cache = cls(setting)
    log.debug("Created %s for setting: %s", type(cache).__name__, setting)
    return cache


def instantiate(setting: MemoryUsageSetting) -> StreamCache:
    """Create a new, independent cache configured by ``setting``.

    The backend class is looked up in the registry on every call.

    :raises ValueError: If the setting is invalid.
    """
    setting.validate()
    return _create_cache(_backend_for(setting.kind), setting)


@dataclasses.dataclass(frozen=True)
class StreamCacheFactory:
    """A reusable, immutable recipe for creating stream caches.

    The setting is validated and the backend class resolved once, here.
    Backends registered afterwards do not affect this factory. Every call
    returns a new cache that shares no storage with caches created before.

    :param setting: The memory usage setting new caches are configured with.
    :raises ValueError: If the setting is invalid.
    """

    setting: MemoryUsageSetting
    backend: type[StreamCache] = dataclasses.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.setting.validate()
        object.__setattr__(self, "backend", _backend_for(self.setting.kind))

    @property
    def kind(self) -> StorageKind:
        return self.setting.kind

    def create(self) -> StreamCache:
        """Create a new cache."""
        return _create_cache(self.backend, self.setting)

    def __call__(self) -> StreamCache:
        return self.create()
