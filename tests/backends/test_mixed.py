"""MixedStreamCache-specific tests: spill-over and combined budgets."""

from __future__ import annotations

import io
import logging
import os
from unittest.mock import patch

import pytest

from stream_cache._config import MemoryUsageSetting, StorageKind
from stream_cache._errors import StorageLimitExceeded
from stream_cache._ioutils import COPY_CHUNK_SIZE
from stream_cache.backends._mixed import MixedStreamCache


def _mixed(tmp_path, memory: int, storage: int = -1) -> MixedStreamCache:
    return MixedStreamCache(MemoryUsageSetting.setup_mixed(memory, storage).with_temp_dir(tmp_path))


class TestSpillOver:
    def test_small_entries_stay_in_memory(self, tmp_path) -> None:
        with _mixed(tmp_path, 10) as cache:
            cache.write("a", b"12345")
            cache.write("b", io.BytesIO(b"12345"))
            assert cache.get_info("a").location is StorageKind.MEMORY
            assert cache.get_info("b").location is StorageKind.MEMORY
            assert os.listdir(tmp_path) == []

    def test_entry_over_budget_spills(self, tmp_path) -> None:
        with _mixed(tmp_path, 10) as cache:
            cache.write("a", b"12345678901")
            assert cache.get_info("a").location is StorageKind.TEMP_FILE
            assert cache.read_bytes("a") == b"12345678901"

    def test_budget_is_shared_between_entries(self, tmp_path) -> None:
        with _mixed(tmp_path, 10) as cache:
            cache.write("a", b"1234567")
            cache.write("b", b"1234")
            assert cache.get_info("a").location is StorageKind.MEMORY
            assert cache.get_info("b").location is StorageKind.TEMP_FILE
            assert cache.size == 11

    def test_large_stream_spills_intact(self, tmp_path) -> None:
        data = os.urandom(COPY_CHUNK_SIZE * 2 + 5)
        with _mixed(tmp_path, COPY_CHUNK_SIZE) as cache:
            source = io.BytesIO(data)
            cache.write("a", source)
            assert cache.get_info("a").location is StorageKind.TEMP_FILE
            assert cache.read_bytes("a") == data
            assert not source.closed

    def test_stream_exactly_at_budget_stays_in_memory(self, tmp_path, trickle_stream: type) -> None:
        with _mixed(tmp_path, 10) as cache:
            cache.write("a", trickle_stream(b"0123456789", step=3))
            assert cache.get_info("a").location is StorageKind.MEMORY
            assert cache.read_bytes("a") == b"0123456789"

    def test_temp_tier_created_lazily(self, tmp_path) -> None:
        cache = _mixed(tmp_path, 4)
        cache.write("a", b"1234")
        assert cache._disk is None
        cache.write("b", b"5")
        assert cache._disk is not None
        directory = cache._disk.directory
        cache.close()
        assert not os.path.exists(directory)

    def test_spill_is_logged(self, tmp_path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="stream_cache.backends._mixed"):
            with _mixed(tmp_path, 1) as cache:
                cache.write("a", b"12")
        assert any("spilling" in r.getMessage() for r in caplog.records)


class TestMovingBetweenTiers:
    def test_overwrite_moves_to_disk(self, tmp_path) -> None:
        with _mixed(tmp_path, 4) as cache:
            cache.write("a", b"12")
            cache.write("a", b"123456", overwrite=True)
            assert cache.get_info("a").location is StorageKind.TEMP_FILE
            assert cache._memory.size == 0
            assert list(cache.keys()) == ["a"]

    def test_overwrite_moves_back_to_memory(self, tmp_path) -> None:
        with _mixed(tmp_path, 4) as cache:
            cache.write("a", b"123456")
            cache.write("a", b"12", overwrite=True)
            assert cache.get_info("a").location is StorageKind.MEMORY
            assert cache._disk is not None
            assert cache._disk.size == 0

    def test_overwrite_in_memory_reuses_own_budget(self, tmp_path) -> None:
        with _mixed(tmp_path, 4) as cache:
            cache.write("a", b"1234")
            cache.write("a", b"abcd", overwrite=True)
            assert cache.get_info("a").location is StorageKind.MEMORY

    def test_delete_frees_memory_budget(self, tmp_path) -> None:
        with _mixed(tmp_path, 4) as cache:
            cache.write("a", b"1234")
            cache.delete("a")
            cache.write("b", b"5678")
            assert cache.get_info("b").location is StorageKind.MEMORY


class TestStorageBudget:
    def test_memory_write_over_total_budget(self, tmp_path) -> None:
        with _mixed(tmp_path, 4, 6) as cache:
            cache.write("a", b"12345")
            with pytest.raises(StorageLimitExceeded) as excinfo:
                cache.write("b", b"12")
            assert excinfo.value.limit == 6
            assert not cache.exists("b")

    def test_spilled_write_over_total_budget(self, tmp_path) -> None:
        with _mixed(tmp_path, 4, 8) as cache:
            cache.write("a", b"1234")
            with pytest.raises(StorageLimitExceeded):
                cache.write("b", io.BytesIO(b"12345"))
            assert not cache.exists("b")
            assert cache.size == 4

    def test_failed_spill_overwrite_keeps_old_entry(self, tmp_path) -> None:
        with _mixed(tmp_path, 2, 6) as cache:
            cache.write("a", b"12345")
            with pytest.raises(StorageLimitExceeded):
                cache.write("a", b"1234567", overwrite=True)
            assert cache.read_bytes("a") == b"12345"

    def test_within_total_budget(self, tmp_path) -> None:
        with _mixed(tmp_path, 4, 12) as cache:
            cache.write("a", b"1234")
            cache.write("b", b"12345678")
            assert cache.size == 12


class TestClose:
    def test_temp_tier_failure_is_logged_and_raised(self, tmp_path, caplog: pytest.LogCaptureFixture) -> None:
        cache = _mixed(tmp_path, 1)
        cache.write("a", b"12")
        disk = cache._disk
        assert disk is not None
        with patch.object(disk, "close", side_effect=OSError("disk busy")):
            with caplog.at_level(logging.WARNING, logger="stream_cache.backends._mixed"):
                with pytest.raises(OSError, match="disk busy"):
                    cache.close()
        assert cache.closed
        assert any(r.getMessage() == "Error closing temp file tier" for r in caplog.records)
        disk.close()

    def test_first_failure_wins(self, tmp_path) -> None:
        cache = _mixed(tmp_path, 1)
        cache.write("a", b"12")
        disk = cache._disk
        assert disk is not None
        with patch.object(cache._memory, "close", side_effect=OSError("memory")), patch.object(
            disk, "close", side_effect=OSError("disk")
        ) as disk_close:
            with pytest.raises(OSError, match="memory"):
                cache.close()
        disk_close.assert_called_once()
        disk.close()
