"""Built-in stream cache backends."""

from stream_cache.backends._memory import MemoryStreamCache
from stream_cache.backends._mixed import MixedStreamCache
from stream_cache.backends._temp_file import TempFileStreamCache

__all__ = ["MemoryStreamCache", "MixedStreamCache", "TempFileStreamCache"]
