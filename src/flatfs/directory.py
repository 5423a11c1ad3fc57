"""Directory emulation over a flat key space.

There are no directories in the object store. A "directory" is observable
only through a zero-byte marker object and through keys sharing its path
followed by a separator. Scratch content under the temporary marker is never
listed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from flatfs.errors import NotFoundError
from flatfs.paths import KeyTranslator, is_self_or_descendant
from flatfs.store.base import StoreClient
from flatfs.store.models import ObjectStatus

logger = logging.getLogger(__name__)

PathFilter = Callable[[str], bool]


class DirectoryEmulator:
    """Answers existence, status and listing queries for client paths."""

    def __init__(self, store: StoreClient, translator: KeyTranslator) -> None:
        self._store = store
        self._translator = translator

    @property
    def _host_scheme(self) -> str:
        return self._translator.host_scheme

    def get_status(self, path: str) -> ObjectStatus:
        """Return the status of the object stored at path.

        Raises:
            NotFoundError: If nothing is stored at path.
        """
        return self._store.get_object_metadata(self._host_scheme, path)

    def exists(self, path: str) -> bool:
        return self._store.exists(self._host_scheme, path)

    def is_marker(self, status: ObjectStatus) -> bool:
        """True if status is a directory marker of this session's vocabulary."""
        return status.content_type == self._translator.markers.directory_content_type

    def is_directory(self, path: str) -> bool:
        """Always False: every entry is a file, directories are derived."""
        return False

    def is_file(self, path: str) -> bool:
        return True

    def list_status(
        self,
        path: str,
        path_filter: PathFilter | None = None,
        recursive: bool = False,
        prefix_based: bool = False,
    ) -> list[ObjectStatus]:
        """List the entries visible at path.

        A marker object, or a missing object with prefix_based set, is
        expanded by listing the store; a plain object is returned as is
        without a listing round trip.
        """
        logger.debug("list status: %s, prefix based %s", path, prefix_based)
        if self._translator.contains_temporary(path):
            return []
        path = self._translator.normalize(path)

        status: ObjectStatus | None = None
        try:
            status = self.get_status(path)
        except NotFoundError:
            logger.debug("%s not found. Try to list", path)

        if (status is not None and self.is_marker(status)) or (
            status is None and prefix_based
        ):
            entries = self._store.list(self._host_scheme, path, recursive, prefix_based)
            result = [e for e in entries if is_self_or_descendant(e.path, path)]
        elif status is not None:
            logger.debug("%s is not directory. Adding without list", path)
            result = [status]
        else:
            result = []

        if path_filter is not None:
            result = [e for e in result if path_filter(e.path)]
        return result

    def list_files(self, path: str, recursive: bool = False) -> Iterator[ObjectStatus]:
        """Yield the data objects at or below path, skipping directory markers."""
        for status in self.list_status(path, recursive=recursive, prefix_based=True):
            if not self.is_marker(status):
                yield status
