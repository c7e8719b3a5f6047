"""Error handling — cache errors, budgets, and the two close policies.

Demonstrates the error hierarchy and close_quietly / close_and_log_exception.
"""

from __future__ import annotations

import logging

from stream_cache import (
    AlreadyExists,
    CacheClosed,
    MemoryUsageSetting,
    NotFound,
    StorageLimitExceeded,
    StreamCacheError,
    close_and_log_exception,
    close_quietly,
)

log = logging.getLogger("error_handling")


class FlakyResource:
    def close(self) -> None:
        raise OSError("device went away")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    cache = MemoryUsageSetting.setup_main_memory_only(16).stream_cache()

    # --- NotFound ---
    try:
        cache.read_bytes("missing")
    except NotFound as exc:
        print(f"NotFound: {exc}")

    # --- AlreadyExists ---
    cache.write("page", b"data")
    try:
        cache.write("page", b"other")
    except AlreadyExists as exc:
        print(f"AlreadyExists: {exc}")

    # --- StorageLimitExceeded ---
    try:
        cache.write("big", b"x" * 64)
    except StorageLimitExceeded as exc:
        print(f"StorageLimitExceeded: {exc} (limit={exc.limit})")

    # --- CacheClosed, caught via the base class ---
    cache.close()
    try:
        cache.exists("page")
    except StreamCacheError as exc:
        print(f"{type(exc).__name__}: {exc}")
        assert isinstance(exc, CacheClosed)

    # --- Close policies ---
    close_quietly(FlakyResource())
    print("close_quietly returned normally.")

    error = close_and_log_exception(FlakyResource(), log, "flaky resource")
    print(f"close_and_log_exception returned: {error!r}")

    earlier = OSError("parse failed")
    error = close_and_log_exception(FlakyResource(), log, "flaky resource", earlier)
    print(f"Earlier error kept: {error is earlier}")

    print("\nDone!")
