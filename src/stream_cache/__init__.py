"""Stream helpers, resource closers and swappable memory/temp-file stream caches."""

from stream_cache._cache import StreamCache
from stream_cache._config import MemoryUsageSetting, StorageKind
from stream_cache._errors import (
    AlreadyExists,
    CacheClosed,
    InvalidKey,
    NotFound,
    StorageLimitExceeded,
    StreamCacheError,
)
from stream_cache._factory import StreamCacheFactory, instantiate, register_cache_backend
from stream_cache._ioutils import (
    close_and_log_exception,
    close_quietly,
    copy,
    create_memory_only_stream_cache,
    create_temp_file_only_stream_cache,
    populate_buffer,
    read_all,
    read_up_to,
)
from stream_cache._models import EntryInfo
from stream_cache.backends import MemoryStreamCache, MixedStreamCache, TempFileStreamCache

__version__ = "0.1.0"

__all__ = [
    # I/O helpers
    "read_all",
    "copy",
    "populate_buffer",
    "read_up_to",
    "close_quietly",
    "close_and_log_exception",
    # Cache selection
    "create_memory_only_stream_cache",
    "create_temp_file_only_stream_cache",
    "instantiate",
    "register_cache_backend",
    "StreamCacheFactory",
    # Config
    "MemoryUsageSetting",
    "StorageKind",
    # Caches
    "StreamCache",
    "MemoryStreamCache",
    "TempFileStreamCache",
    "MixedStreamCache",
    "EntryInfo",
    # Errors
    "StreamCacheError",
    "NotFound",
    "AlreadyExists",
    "InvalidKey",
    "CacheClosed",
    "StorageLimitExceeded",
    # Version
    "__version__",
]
