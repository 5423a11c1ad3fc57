"""flatfs backing store interface definition.

Provides the StoreClient abstract base class that every object store backend
implements. The filesystem emulation only talks to this interface, so
backends are interchangeable and chosen when a session is initialized.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO

from flatfs.errors import MalformedPathError
from flatfs.store.models import DIRECTORY_CONTENT_TYPE, ObjectStatus
from flatfs.store.streams import ObjectOutputStream


class StoreClient(ABC):
    """Abstract base class for flat, prefix-addressable object stores.

    Keys are flat strings that begin with the data root
    (``"<data_root>/<object name>"``). Methods that take a ``host_scheme``
    receive client paths (``"<host_scheme><object name>"``) and map them
    onto keys with path_to_key.

    Implementations:
    - InMemoryStoreClient: process-local dictionary (tests, dev)
    - FilesystemStoreClient: local directory (dev, single host)
    """

    def __init__(
        self,
        data_root: str,
        *,
        directory_content_type: str = DIRECTORY_CONTENT_TYPE,
    ) -> None:
        if not data_root or "/" in data_root:
            raise MalformedPathError(message=f"Invalid data root: {data_root!r}")
        self._data_root = data_root
        self._directory_content_type = directory_content_type

    @property
    def data_root(self) -> str:
        """Return the container every key of this client lives in."""
        return self._data_root

    @property
    @abstractmethod
    def scheme(self) -> str:
        """Return the URI scheme served by this client (e.g., "mem")."""
        ...

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier for observability."""
        ...

    def path_to_key(self, host_scheme: str, path: str) -> str:
        """Map a client path onto the key holding it."""
        if not path.startswith(host_scheme):
            raise MalformedPathError(message=f"Path is outside of {host_scheme}", path=path)
        return f"{self._data_root}/{path[len(host_scheme):]}"

    def key_to_path(self, host_scheme: str, key: str) -> str:
        """Map a key back onto its client path."""
        root = self._data_root + "/"
        if not key.startswith(root):
            raise MalformedPathError(message="Key is outside of the data root", key=key)
        return host_scheme + key[len(root) :]

    @abstractmethod
    def exists(self, host_scheme: str, path: str) -> bool:
        """Return True if an object is stored at the path."""
        ...

    @abstractmethod
    def get_object(self, host_scheme: str, path: str) -> BinaryIO:
        """Open an object as a readable binary stream.

        Raises:
            NotFoundError: If no object is stored at the path.
            BackingStoreError: If the backend cannot complete the read.
        """
        ...

    @abstractmethod
    def create_object(
        self,
        key: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> ObjectOutputStream:
        """Start writing an object; closing the handle finalizes it.

        Args:
            key: Full key including the data root.
            content_type: MIME type stored with the object.
            metadata: Optional user attributes stored with the object.

        Raises:
            BackingStoreError: If the backend cannot complete the write.
        """
        ...

    @abstractmethod
    def list(
        self,
        host_scheme: str,
        path: str,
        recursive: bool,
        prefix_based: bool,
    ) -> list[ObjectStatus]:
        """List objects under a path.

        Args:
            host_scheme: Scheme and authority of the client paths.
            path: Client path whose key is the listing prefix.
            recursive: Include objects at any depth, otherwise only the
                object itself and its direct children.
            prefix_based: Match by plain string prefix instead of requiring
                a separator after the path.

        Returns:
            A snapshot of matching entries ordered by key.
        """
        ...

    @abstractmethod
    def delete(self, host_scheme: str, path: str) -> bool:
        """Delete the object at the path.

        Returns:
            True if an object was deleted, False if none existed.

        Raises:
            BackingStoreError: If the backend cannot complete the deletion.
        """
        ...

    @abstractmethod
    def rename(self, host_scheme: str, src: str, dst: str) -> bool:
        """Move the object at src, and every object below it, to dst.

        Returns:
            True if anything was moved, False if src did not exist.
        """
        ...

    @abstractmethod
    def get_object_metadata(self, host_scheme: str, path: str) -> ObjectStatus:
        """Get the status of one object without reading content.

        Raises:
            NotFoundError: If no object is stored at the path.
        """
        ...


def key_matches(candidate: str, prefix: str, recursive: bool, prefix_based: bool) -> bool:
    """Shared listing predicate for key-ordered backends."""
    if candidate == prefix:
        return True
    if prefix_based:
        if not candidate.startswith(prefix):
            return False
        rest = candidate[len(prefix) :].lstrip("/")
    else:
        parent = prefix if prefix.endswith("/") else prefix + "/"
        if not candidate.startswith(parent):
            return False
        rest = candidate[len(parent) :]
    return recursive or "/" not in rest
