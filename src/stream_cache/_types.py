"""Type aliases used throughout stream_cache."""

from __future__ import annotations

import os  # noqa: TC003
from typing import BinaryIO, Protocol, Union

PathLike = Union[str, "os.PathLike[str]"]  # noqa: UP007
WritableContent = BinaryIO | bytes | bytearray


class Closeable(Protocol):
    """Anything with a ``close()`` that may raise ``OSError``."""

    def close(self) -> None: ...
