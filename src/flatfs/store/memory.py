"""In-memory backing store.

Keeps objects in a process-local dictionary guarded by a lock. Used by the
test suite and for local experiments with the commit protocol.
"""

from __future__ import annotations

import io
import logging
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import BinaryIO

from flatfs.errors import NotFoundError
from flatfs.store.base import StoreClient, key_matches
from flatfs.store.models import ObjectStatus
from flatfs.store.streams import ObjectOutputStream

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StoredEntry:
    body: bytes
    content_type: str | None
    metadata: dict[str, str]
    last_modified: datetime


class InMemoryStoreClient(StoreClient):
    """Dictionary-backed StoreClient."""

    @property
    def scheme(self) -> str:
        return "mem"

    @property
    def backend_name(self) -> str:
        return "memory"

    def __init__(self, data_root: str, **kwargs: str) -> None:
        super().__init__(data_root, **kwargs)
        self._objects: dict[str, _StoredEntry] = {}
        self._lock = threading.Lock()

    def keys(self) -> list[str]:
        """Return all stored keys in order."""
        with self._lock:
            return sorted(self._objects)

    def _status(self, host_scheme: str, key: str, entry: _StoredEntry) -> ObjectStatus:
        return ObjectStatus(
            path=self.key_to_path(host_scheme, key),
            key=key,
            size_bytes=len(entry.body),
            content_type=entry.content_type,
            last_modified=entry.last_modified,
            metadata=dict(entry.metadata),
            directory_content_type=self._directory_content_type,
        )

    def _lookup(self, host_scheme: str, path: str) -> tuple[str, _StoredEntry]:
        key = self.path_to_key(host_scheme, path)
        with self._lock:
            entry = self._objects.get(key)
        if entry is None:
            raise NotFoundError(path=path, key=key)
        return key, entry

    def exists(self, host_scheme: str, path: str) -> bool:
        key = self.path_to_key(host_scheme, path)
        with self._lock:
            return key in self._objects

    def get_object(self, host_scheme: str, path: str) -> BinaryIO:
        _, entry = self._lookup(host_scheme, path)
        return io.BytesIO(entry.body)

    def create_object(
        self,
        key: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> ObjectOutputStream:
        attributes = dict(metadata or {})

        def _commit(data: bytes) -> None:
            entry = _StoredEntry(
                body=data,
                content_type=content_type,
                metadata=attributes,
                last_modified=datetime.now(UTC),
            )
            with self._lock:
                self._objects[key] = entry

        return ObjectOutputStream(key, _commit)

    def list(
        self,
        host_scheme: str,
        path: str,
        recursive: bool,
        prefix_based: bool,
    ) -> list[ObjectStatus]:
        prefix = self.path_to_key(host_scheme, path)
        with self._lock:
            snapshot = sorted(self._objects.items())
        return [
            self._status(host_scheme, key, entry)
            for key, entry in snapshot
            if key_matches(key, prefix, recursive, prefix_based)
        ]

    def delete(self, host_scheme: str, path: str) -> bool:
        key = self.path_to_key(host_scheme, path)
        with self._lock:
            removed = self._objects.pop(key, None)
        logger.debug("Deleted %s: %s", key, removed is not None)
        return removed is not None

    def rename(self, host_scheme: str, src: str, dst: str) -> bool:
        src_key = self.path_to_key(host_scheme, src)
        dst_key = self.path_to_key(host_scheme, dst)
        with self._lock:
            moving = [
                key for key in self._objects if key_matches(key, src_key, True, False)
            ]
            for key in moving:
                self._objects[dst_key + key[len(src_key) :]] = self._objects.pop(key)
        logger.debug("Renamed %d objects from %s to %s", len(moving), src_key, dst_key)
        return bool(moving)

    def get_object_metadata(self, host_scheme: str, path: str) -> ObjectStatus:
        key, entry = self._lookup(host_scheme, path)
        return self._status(host_scheme, key, entry)
