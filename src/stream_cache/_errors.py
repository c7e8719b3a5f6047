"""Normalized error hierarchy for stream_cache."""

from __future__ import annotations

from typing import Optional


class StreamCacheError(Exception):
    """Base class for all stream_cache errors.

    Plain I/O failures are not wrapped: they surface as ``OSError``.

    :param message: Human-readable error description.
    :param key: The cache key involved in the error, if any.
    :param backend: The backend name involved, if any.
    """

    def __init__(self, message: str = "", *, key: Optional[str] = None, backend: Optional[str] = None) -> None:
        self.key = key
        self.backend = backend
        super().__init__(message)

    def _details(self) -> list[str]:
        """Return the ``name=value`` parts shown after the message."""
        parts = []
        if self.key is not None:
            parts.append(f"key={self.key!r}")
        if self.backend is not None:
            parts.append(f"backend={self.backend!r}")
        return parts

    def __str__(self) -> str:
        return " | ".join([super().__str__(), *self._details()])

    def __repr__(self) -> str:
        args = [repr(super().__str__()), *self._details()]
        return f"{type(self).__name__}({', '.join(args)})"


class NotFound(StreamCacheError):
    """Raised when no entry is stored under a key."""


class AlreadyExists(StreamCacheError):
    """Raised when a key is already taken and overwrite is not allowed."""


class InvalidKey(StreamCacheError):
    """Raised for empty or non-string keys."""


class CacheClosed(StreamCacheError):
    """Raised when a cache is used after ``close()``."""


class StorageLimitExceeded(StreamCacheError):
    """Raised when a write would exceed the configured byte budget.

    :param limit: The budget in bytes that would have been exceeded.
    """

    def __init__(
        self,
        message: str = "",
        *,
        key: Optional[str] = None,
        backend: Optional[str] = None,
        limit: int = -1,
    ) -> None:
        self.limit = limit
        super().__init__(message, key=key, backend=backend)

    def _details(self) -> list[str]:
        parts = super()._details()
        if self.limit >= 0:
            parts.append(f"limit={self.limit}")
        return parts
