"""flatfs local filesystem backing store.

Emulates a flat object store on a local directory for development and
single-host deployments:
- One content file and one metadata file per key, named by key hash
- Atomic writes via temp file + replace
- Listing by scanning metadata files (keys stay flat, no real directories)

Environment Variables:
    FLATFS_OBJECT_STORE_BASE_DIR: Base directory for storage
        (default: tempfile.gettempdir() / flatfs_objects)
"""

from __future__ import annotations

import hashlib
import io
import json
import logging
import os
import tempfile
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from flatfs.config import FLATFS_OBJECT_STORE_BASE_DIR_ENV
from flatfs.errors import BackingStoreError, NotFoundError
from flatfs.store.base import StoreClient, key_matches
from flatfs.store.models import ObjectStatus
from flatfs.store.streams import ObjectOutputStream

logger = logging.getLogger(__name__)

_METADATA_SUFFIX = ".meta.json"
_CONTENT_SUFFIX = ".data"


def _key_hash(key: str) -> str:
    """Compute the file name stem for a key."""
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


class FilesystemStoreClient(StoreClient):
    """Filesystem-based StoreClient implementation.

    Objects are stored in a directory structure:
        {base_dir}/{data_root}/
            {sha256(key)}.data       # content
            {sha256(key)}.meta.json  # key, content type, size, attributes

    Metadata is written after content, so a key becomes visible only once
    its bytes are in place.
    """

    def __init__(
        self,
        data_root: str,
        base_dir: str | Path | None = None,
        **kwargs: str,
    ) -> None:
        """Initialize filesystem storage.

        Args:
            data_root: Container the keys live in.
            base_dir: Base directory for storage. If None, uses
                FLATFS_OBJECT_STORE_BASE_DIR env var or OS temp directory.
        """
        super().__init__(data_root, **kwargs)
        if base_dir is None:
            base_dir = os.environ.get(FLATFS_OBJECT_STORE_BASE_DIR_ENV)

        if base_dir is None:
            base_dir = Path(tempfile.gettempdir()) / "flatfs_objects"
        else:
            base_dir = Path(base_dir)

        self._base_dir = base_dir.resolve()
        self._root_dir = self._base_dir / data_root
        logger.debug("FilesystemStoreClient initialized with root_dir=%s", self._root_dir)

    @property
    def scheme(self) -> str:
        return "localfs"

    @property
    def backend_name(self) -> str:
        return "filesystem"

    @property
    def base_dir(self) -> Path:
        """Return the base directory path."""
        return self._base_dir

    def _content_file(self, key: str) -> Path:
        return self._root_dir / f"{_key_hash(key)}{_CONTENT_SUFFIX}"

    def _metadata_file(self, key: str) -> Path:
        return self._root_dir / f"{_key_hash(key)}{_METADATA_SUFFIX}"

    def _write_atomic(self, target: Path, data: bytes) -> None:
        """Write a file atomically through a temp file in the same directory."""
        tmp_file = target.with_name(f"{target.name}.{uuid.uuid4().hex}.tmp")
        try:
            tmp_file.write_bytes(data)
            tmp_file.replace(target)
        except OSError as e:
            if tmp_file.exists():
                tmp_file.unlink(missing_ok=True)
            raise BackingStoreError(
                message=f"Failed to write {target.name}: {e}",
                cause=e,
            ) from e

    def _read_metadata_file(self, meta_file: Path) -> dict[str, object] | None:
        try:
            data: dict[str, object] = json.loads(meta_file.read_text(encoding="utf-8"))
            return data
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read metadata %s: %s", meta_file, e)
            return None

    def _status(self, host_scheme: str, data: dict[str, object]) -> ObjectStatus:
        key = str(data["key"])
        return ObjectStatus.from_dict(
            data,
            path=self.key_to_path(host_scheme, key),
            directory_content_type=self._directory_content_type,
        )

    def exists(self, host_scheme: str, path: str) -> bool:
        return self._metadata_file(self.path_to_key(host_scheme, path)).exists()

    def get_object(self, host_scheme: str, path: str) -> BinaryIO:
        key = self.path_to_key(host_scheme, path)
        if not self._metadata_file(key).exists():
            raise NotFoundError(path=path, key=key)
        try:
            return io.BytesIO(self._content_file(key).read_bytes())
        except FileNotFoundError as e:
            raise NotFoundError(message="Object content not found", path=path, key=key) from e
        except OSError as e:
            raise BackingStoreError(
                message=f"Failed to read content: {e}",
                path=path,
                key=key,
                cause=e,
            ) from e

    def create_object(
        self,
        key: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> ObjectOutputStream:
        attributes = dict(metadata or {})

        def _commit(data: bytes) -> None:
            try:
                self._root_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise BackingStoreError(
                    message=f"Failed to create data root directory: {e}",
                    key=key,
                    cause=e,
                ) from e

            record = {
                "key": key,
                "size_bytes": len(data),
                "content_type": content_type,
                "last_modified": datetime.now(UTC).isoformat(),
                "metadata": attributes,
            }
            self._write_atomic(self._content_file(key), data)
            self._write_atomic(
                self._metadata_file(key),
                json.dumps(record, indent=2, sort_keys=True).encode("utf-8"),
            )
            logger.debug("Stored object: key=%s size=%d", key, len(data))

        return ObjectOutputStream(key, _commit)

    def _scan(self) -> list[dict[str, object]]:
        """Read every metadata record under the data root."""
        if not self._root_dir.exists():
            return []
        records: list[dict[str, object]] = []
        try:
            for meta_file in self._root_dir.iterdir():
                if meta_file.name.endswith(_METADATA_SUFFIX):
                    record = self._read_metadata_file(meta_file)
                    if record is not None:
                        records.append(record)
        except OSError as e:
            raise BackingStoreError(message=f"Failed to list objects: {e}", cause=e) from e
        records.sort(key=lambda r: str(r["key"]))
        return records

    def list(
        self,
        host_scheme: str,
        path: str,
        recursive: bool,
        prefix_based: bool,
    ) -> list[ObjectStatus]:
        prefix = self.path_to_key(host_scheme, path)
        return [
            self._status(host_scheme, record)
            for record in self._scan()
            if key_matches(str(record["key"]), prefix, recursive, prefix_based)
        ]

    def _delete_key(self, key: str) -> bool:
        meta_file = self._metadata_file(key)
        if not meta_file.exists():
            return False
        try:
            meta_file.unlink(missing_ok=True)
            self._content_file(key).unlink(missing_ok=True)
        except OSError as e:
            raise BackingStoreError(
                message=f"Failed to delete object files: {e}",
                key=key,
                cause=e,
            ) from e
        logger.debug("Deleted object: key=%s", key)
        return True

    def delete(self, host_scheme: str, path: str) -> bool:
        return self._delete_key(self.path_to_key(host_scheme, path))

    def rename(self, host_scheme: str, src: str, dst: str) -> bool:
        src_key = self.path_to_key(host_scheme, src)
        dst_key = self.path_to_key(host_scheme, dst)
        moved = 0
        for record in self._scan():
            key = str(record["key"])
            if not key_matches(key, src_key, True, False):
                continue
            new_key = dst_key + key[len(src_key) :]
            try:
                body = self._content_file(key).read_bytes()
            except OSError as e:
                raise BackingStoreError(
                    message=f"Failed to read content for rename: {e}",
                    key=key,
                    cause=e,
                ) from e
            with self.create_object(
                new_key,
                str(record.get("content_type") or ""),
                {str(k): str(v) for k, v in dict(record.get("metadata") or {}).items()},
            ) as out:
                out.write(body)
            self._delete_key(key)
            moved += 1
        logger.debug("Renamed %d objects from %s to %s", moved, src_key, dst_key)
        return moved > 0

    def get_object_metadata(self, host_scheme: str, path: str) -> ObjectStatus:
        key = self.path_to_key(host_scheme, path)
        record = self._read_metadata_file(self._metadata_file(key))
        if record is None:
            raise NotFoundError(path=path, key=key)
        return self._status(host_scheme, record)
