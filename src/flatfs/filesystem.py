"""Hierarchical filesystem facade over a flat object store.

Presents the filesystem operations a distributed compute framework expects
(create, open, rename, delete, mkdirs, listing) for paths of the form
``scheme://<container>.<service>/<object name>``. Mutations go through the
CommitReconciler, queries through the DirectoryEmulator.

Usage:
    fs = ObjectStoreFileSystem()
    fs.initialize("mem://results.local/")
    with fs.create("mem://results.local/out/_SUCCESS") as out:
        out.write(b"")
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from flatfs.commit import CommitReconciler
from flatfs.config import FlatFsConfig, load_config_from_env
from flatfs.directory import DirectoryEmulator, PathFilter
from flatfs.errors import FlatFsConfigError, FlatFsError, UnsupportedOperationError
from flatfs.paths import KeyTranslator
from flatfs.store.base import StoreClient
from flatfs.store.models import ObjectStatus
from flatfs.store.registry import get_store_client
from flatfs.store.streams import ObjectOutputStream
from flatfs.tracing import traced_fs_operation
from flatfs.uri import FilesystemLocation, parse_filesystem_uri

logger = logging.getLogger(__name__)


class ObjectStoreFileSystem:
    """Filesystem session bound to one container of one store client."""

    def __init__(
        self,
        store: StoreClient | None = None,
        config: FlatFsConfig | None = None,
    ) -> None:
        """Create an uninitialized session.

        Args:
            store: Store client to use. If None, one is selected from the
                registry by URI scheme on initialize.
            config: Session settings. If None, loaded from FLATFS_* env vars.
        """
        self._store = store
        self._config = config
        self._location: FilesystemLocation | None = None
        self._translator: KeyTranslator | None = None
        self._reconciler: CommitReconciler | None = None
        self._emulator: DirectoryEmulator | None = None

    def initialize(self, uri: str) -> None:
        """Bind the session to a filesystem URI.

        Raises:
            FlatFsConfigError: If the URI is invalid, no store client serves
                its scheme, or job success marking is disabled.
        """
        logger.debug("Initialize for %s", uri)
        if self._config is None:
            self._config = load_config_from_env()
        if not self._config.mark_successful_jobs:
            raise FlatFsConfigError(
                "mark_successful_jobs must be enabled: the job success sentinel "
                "is the only commit signal of this filesystem"
            )

        location = parse_filesystem_uri(uri)
        if self._store is None:
            self._store = get_store_client(uri, self._config)
        if self._store.data_root != location.data_root:
            raise FlatFsConfigError(
                f"Store client serves '{self._store.data_root}', "
                f"URI names '{location.data_root}'"
            )

        self._location = location
        self._translator = KeyTranslator(
            location.host_scheme, location.data_root, self._config.markers
        )
        self._reconciler = CommitReconciler(self._store, self._translator, self._config)
        self._emulator = DirectoryEmulator(self._store, self._translator)

    def _require_initialized(self) -> None:
        if self._location is None:
            raise FlatFsError("Filesystem is not initialized; call initialize(uri) first")

    @property
    def uri(self) -> str:
        self._require_initialized()
        assert self._location is not None
        return self._location.uri

    @property
    def scheme(self) -> str:
        self._require_initialized()
        assert self._store is not None
        return self._store.scheme

    @property
    def backend_name(self) -> str:
        return self._store.backend_name if self._store is not None else "unknown"

    @property
    def host_scheme(self) -> str:
        self._require_initialized()
        assert self._location is not None
        return self._location.host_scheme

    @property
    def translator(self) -> KeyTranslator:
        self._require_initialized()
        assert self._translator is not None
        return self._translator

    @property
    def working_directory(self) -> str:
        """The container root; relative working directories are not kept."""
        return self.host_scheme

    def set_working_directory(self, path: str) -> None:
        logger.debug("set working directory: %s", path)

    @property
    def _commit(self) -> CommitReconciler:
        self._require_initialized()
        assert self._reconciler is not None
        return self._reconciler

    @property
    def _directory(self) -> DirectoryEmulator:
        self._require_initialized()
        assert self._emulator is not None
        return self._emulator

    @traced_fs_operation("exists")
    def exists(self, path: str) -> bool:
        logger.debug("exists %s", path)
        return self._directory.exists(path)

    def is_directory(self, path: str) -> bool:
        logger.debug("is directory: %s", path)
        return self._directory.is_directory(path)

    def is_file(self, path: str) -> bool:
        logger.debug("is file: %s", path)
        return self._directory.is_file(path)

    @traced_fs_operation("get_status")
    def get_status(self, path: str) -> ObjectStatus:
        logger.debug("get file status: %s", path)
        return self._directory.get_status(path)

    @traced_fs_operation("list_status")
    def list_status(
        self,
        path: str,
        path_filter: PathFilter | None = None,
        recursive: bool = False,
        prefix_based: bool = False,
    ) -> list[ObjectStatus]:
        return self._directory.list_status(path, path_filter, recursive, prefix_based)

    @traced_fs_operation("list_files")
    def list_files(self, path: str, recursive: bool = False) -> list[ObjectStatus]:
        logger.debug("list files: %s", path)
        return list(self._directory.list_files(path, recursive))

    @traced_fs_operation("open")
    def open(self, path: str) -> BinaryIO:
        logger.debug("open: %s", path)
        self._require_initialized()
        assert self._store is not None
        return self._store.get_object(self.host_scheme, path)

    @traced_fs_operation("create")
    def create(self, path: str, overwrite: bool = True) -> ObjectOutputStream:
        return self._commit.create(path, overwrite)

    def append(self, path: str) -> ObjectOutputStream:
        raise UnsupportedOperationError("Append is not supported", path=path)

    @traced_fs_operation("rename")
    def rename(self, src: str, dst: str) -> bool:
        return self._commit.rename(src, dst)

    @traced_fs_operation("delete")
    def delete(self, path: str, recursive: bool = True) -> bool:
        return self._commit.delete(path, recursive)

    @traced_fs_operation("mkdirs")
    def mkdirs(self, path: str) -> bool:
        return self._commit.mkdirs(path)
