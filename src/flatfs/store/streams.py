"""Writable handle returned by store clients for new objects."""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from types import TracebackType

logger = logging.getLogger(__name__)


class ObjectOutputStream:
    """Single-writer, single-use output handle for one object.

    Bytes are buffered until close; closing hands the buffered content to
    the store client's commit callback exactly once. Further closes are
    no-ops, writes after close raise ValueError. An abandoned handle never
    produces an object.
    """

    def __init__(self, key: str, on_close: Callable[[bytes], None]) -> None:
        self._key = key
        self._buffer = io.BytesIO()
        self._on_close = on_close
        self._closed = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def closed(self) -> bool:
        return self._closed

    def writable(self) -> bool:
        return not self._closed

    def write(self, data: bytes | bytearray | memoryview) -> int:
        if self._closed:
            raise ValueError(f"write to closed object stream: {self._key}")
        return self._buffer.write(data)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        data = self._buffer.getvalue()
        self._buffer.close()
        self._on_close(data)
        logger.debug("Finalized object %s (%d bytes)", self._key, len(data))

    def __enter__(self) -> ObjectOutputStream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
