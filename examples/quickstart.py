"""Quickstart — pick a cache kind once, create one cache per session.

Demonstrates the configure-once / instantiate-many pattern.
"""

from __future__ import annotations

from stream_cache import create_memory_only_stream_cache, create_temp_file_only_stream_cache

if __name__ == "__main__":
    # --- Select a backend once ---
    factory = create_memory_only_stream_cache()
    print(f"Selected: {factory.setting}")

    # --- Every call yields an independent cache ---
    with factory() as first, factory() as second:
        first.write("page-1", b"first document")
        second.write("page-1", b"second document")
        print(f"first:  {first.read_bytes('page-1')!r}")
        print(f"second: {second.read_bytes('page-1')!r}")

    # --- Same pattern, backed by temp files ---
    disk_factory = create_temp_file_only_stream_cache()
    with disk_factory() as cache:
        cache.write("page-1", b"on disk")
        info = cache.get_info("page-1")
        print(f"\n{info.key}: {info.size} bytes in {info.location.value}")

    print("\nDone!")
