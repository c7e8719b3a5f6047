"""Streaming I/O — stream helpers and a mixed cache that spills to disk.

Demonstrates read_all, copy, populate_buffer and spill-over.
"""

from __future__ import annotations

import io

from stream_cache import MemoryUsageSetting, copy, populate_buffer, read_all

if __name__ == "__main__":
    # --- Stream helpers ---
    source = io.BytesIO(b"0123456789")
    buffer = bytearray(6)
    filled = populate_buffer(source, buffer)
    print(f"Filled {filled} bytes: {bytes(buffer)!r}, rest: {read_all(source)!r}")

    target = io.BytesIO()
    copied = copy(io.BytesIO(b"X" * 10_000), target)
    print(f"Copied {copied} bytes.")

    # --- Mixed cache: 1 KiB in memory, the rest in temp files ---
    factory = MemoryUsageSetting.setup_mixed(1024).stream_cache
    with factory() as cache:
        cache.write("small", b"s" * 512)
        cache.write("large", io.BytesIO(b"L" * 100_000))
        for key in sorted(cache.keys()):
            info = cache.get_info(key)
            print(f"  {key}: {info.size} bytes in {info.location.value}")

        reader = cache.read("large")
        chunks = 0
        try:
            while reader.read(4096):
                chunks += 1
        finally:
            reader.close()
        print(f"Read 'large' back in {chunks} chunk(s).")

    print("\nDone!")
