"""Configuration model — immutable settings describing where cached bytes may live."""

from __future__ import annotations

import dataclasses
import enum
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stream_cache._factory import StreamCacheFactory
    from stream_cache._types import PathLike

UNRESTRICTED = -1


class StorageKind(enum.Enum):
    """Storage strategy of a stream cache."""

    MEMORY = "memory"
    TEMP_FILE = "temp-file"
    MIXED = "mixed"


@dataclasses.dataclass(frozen=True)
class MemoryUsageSetting:
    """Describes how much main memory and temp-file storage a cache may use.

    Prefer the ``setup_*`` constructors over calling this directly.

    :param max_main_memory_bytes: Memory budget. ``-1`` means unrestricted,
        ``0`` means main memory is not used at all.
    :param max_storage_bytes: Total budget (memory plus temp files). ``-1``
        means unrestricted.
    :param use_temp_file: Whether entries may be stored in temp files.
    :param temp_dir: Directory for temp files, or ``None`` for the system default.
    """

    max_main_memory_bytes: int = UNRESTRICTED
    max_storage_bytes: int = UNRESTRICTED
    use_temp_file: bool = False
    temp_dir: str | None = None

    @classmethod
    def setup_main_memory_only(cls, max_main_memory_bytes: int = UNRESTRICTED) -> MemoryUsageSetting:
        """Keep everything in main memory, optionally bounded."""
        return cls(max_main_memory_bytes=max_main_memory_bytes, max_storage_bytes=max_main_memory_bytes)

    @classmethod
    def setup_temp_file_only(cls, max_storage_bytes: int = UNRESTRICTED) -> MemoryUsageSetting:
        """Keep everything in temp files, optionally bounded."""
        return cls(max_main_memory_bytes=0, max_storage_bytes=max_storage_bytes, use_temp_file=True)

    @classmethod
    def setup_mixed(
        cls, max_main_memory_bytes: int, max_storage_bytes: int = UNRESTRICTED
    ) -> MemoryUsageSetting:
        """Use main memory up to ``max_main_memory_bytes``, then spill to temp files.

        :raises ValueError: If the memory budget is unrestricted or the
            storage budget is smaller than the memory budget.
        """
        if max_main_memory_bytes == UNRESTRICTED:
            raise ValueError("A mixed setting needs a restricted main memory budget")
        setting = cls(
            max_main_memory_bytes=max_main_memory_bytes,
            max_storage_bytes=max_storage_bytes,
            use_temp_file=True,
        )
        setting.validate()
        return setting

    def with_temp_dir(self, temp_dir: PathLike) -> MemoryUsageSetting:
        """Return a copy that places temp files under ``temp_dir``."""
        return dataclasses.replace(self, temp_dir=os.fspath(temp_dir))

    @property
    def use_main_memory(self) -> bool:
        return self.max_main_memory_bytes != 0

    @property
    def is_main_memory_restricted(self) -> bool:
        return self.max_main_memory_bytes >= 0

    @property
    def is_storage_restricted(self) -> bool:
        return self.max_storage_bytes >= 0

    @property
    def kind(self) -> StorageKind:
        if not self.use_temp_file:
            return StorageKind.MEMORY
        if not self.use_main_memory:
            return StorageKind.TEMP_FILE
        return StorageKind.MIXED

    @property
    def stream_cache(self) -> StreamCacheFactory:
        """A reusable factory producing caches configured by this setting.

        :raises ValueError: If the setting is invalid.
        """
        from stream_cache._factory import StreamCacheFactory

        return StreamCacheFactory(self)

    def validate(self) -> None:
        """Check that the budgets and temp directory are consistent.

        :raises ValueError: If a budget is out of range, no storage is usable,
            or ``temp_dir`` is not an existing directory.
        """
        for field in ("max_main_memory_bytes", "max_storage_bytes"):
            value = getattr(self, field)
            if value < UNRESTRICTED:
                raise ValueError(f"{field} must be -1 (unrestricted) or >= 0, got {value}")
        if not self.use_main_memory and not self.use_temp_file:
            raise ValueError("Neither main memory nor temp files are enabled")
        if (
            self.is_storage_restricted
            and self.is_main_memory_restricted
            and self.max_storage_bytes < self.max_main_memory_bytes
        ):
            raise ValueError(
                f"max_storage_bytes ({self.max_storage_bytes}) must not be smaller than "
                f"max_main_memory_bytes ({self.max_main_memory_bytes})"
            )
        if self.use_temp_file and self.temp_dir is not None and not os.path.isdir(self.temp_dir):
            raise ValueError(f"Temp directory does not exist: {self.temp_dir!r}")

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> MemoryUsageSetting:
        """Construct from a plain dict (e.g. parsed TOML/JSON).

        :param data: Dict with an optional ``kind`` (``"memory"``, ``"temp-file"``
            or ``"mixed"``, default ``"memory"``) and the optional keys
            ``max_main_memory_bytes``, ``max_storage_bytes`` and ``temp_dir``. A
            budget the kind does not use (``max_storage_bytes`` for ``"memory"``,
            ``max_main_memory_bytes`` for ``"temp-file"``) is rejected.
        :raises TypeError: If a value has the wrong type.
        :raises ValueError: If the kind or an option is unknown or does not apply,
            or the setting is invalid.
        """
        unknown = set(data) - {"kind", "max_main_memory_bytes", "max_storage_bytes", "temp_dir"}
        if unknown:
            raise ValueError(f"Unknown memory usage options: {sorted(unknown)}")

        try:
            kind = StorageKind(data.get("kind", StorageKind.MEMORY.value))
        except ValueError:
            raise ValueError(
                f"Unknown storage kind {data.get('kind')!r}. Expected one of {[k.value for k in StorageKind]}"
            ) from None
        inapplicable = {
            StorageKind.MEMORY: "max_storage_bytes",
            StorageKind.TEMP_FILE: "max_main_memory_bytes",
        }.get(kind)
        if inapplicable in data:
            raise ValueError(f"Option '{inapplicable}' does not apply to storage kind {kind.value!r}")

        budgets: dict[str, int] = {}
        for field in ("max_main_memory_bytes", "max_storage_bytes"):
            value = data.get(field, UNRESTRICTED)
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"'{field}' must be an integer"
                raise TypeError(msg)
            budgets[field] = value

        temp_dir = data.get("temp_dir")
        if temp_dir is not None and not isinstance(temp_dir, str):
            msg = "'temp_dir' must be a string"
            raise TypeError(msg)

        if kind is StorageKind.MEMORY:
            setting = cls.setup_main_memory_only(budgets["max_main_memory_bytes"])
        elif kind is StorageKind.TEMP_FILE:
            setting = cls.setup_temp_file_only(budgets["max_storage_bytes"])
        else:
            setting = cls.setup_mixed(budgets["max_main_memory_bytes"], budgets["max_storage_bytes"])
        if temp_dir is not None:
            setting = setting.with_temp_dir(temp_dir)
        setting.validate()
        return setting

    def __str__(self) -> str:
        if self.kind is StorageKind.MEMORY:
            limit = f"max {self.max_main_memory_bytes} bytes" if self.is_main_memory_restricted else "unrestricted"
            return f"memory only ({limit})"
        storage = f"max {self.max_storage_bytes} bytes" if self.is_storage_restricted else "unrestricted"
        if self.kind is StorageKind.TEMP_FILE:
            return f"temp file only ({storage})"
        return f"mixed (max {self.max_main_memory_bytes} bytes in memory, storage {storage})"
