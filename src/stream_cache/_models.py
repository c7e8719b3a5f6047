"""Immutable metadata models."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stream_cache._config import StorageKind


@dataclasses.dataclass(frozen=True)
class EntryInfo:
    """Immutable snapshot of a cache entry.

    :param key: The key the entry is stored under.
    :param size: Entry size in bytes.
    :param location: Where the bytes live (``MEMORY`` or ``TEMP_FILE``).
    """

    key: str
    size: int
    location: StorageKind
