"""Backend test fixtures -- parameterized for conformance testing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from stream_cache._config import MemoryUsageSetting
from stream_cache._factory import instantiate

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from stream_cache._cache import StreamCache

# Mixed caches get a small memory budget so the suite exercises both tiers.
MIXED_MEMORY_BUDGET = 16


def _settings(tmp_path: Path) -> dict[str, MemoryUsageSetting]:
    return {
        "memory": MemoryUsageSetting.setup_main_memory_only(),
        "temp-file": MemoryUsageSetting.setup_temp_file_only().with_temp_dir(tmp_path),
        "mixed": MemoryUsageSetting.setup_mixed(MIXED_MEMORY_BUDGET).with_temp_dir(tmp_path),
    }


@pytest.fixture(params=["memory", "temp-file", "mixed"])
def cache(request: pytest.FixtureRequest, tmp_path: Path) -> Iterator[StreamCache]:
    """Yield a fresh cache of every built-in kind."""
    c = instantiate(_settings(tmp_path)[request.param])
    yield c
    c.close()
