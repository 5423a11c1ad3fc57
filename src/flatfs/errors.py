"""flatfs error types.

Typed exceptions for filesystem emulation over a flat object store.

Taxonomy:
- MalformedPathError: the path yields no usable logical object name
- NotFoundError: the logical key is absent from the backing store
- BackingStoreError: the store client failed (transport, IO, auth)
- UnsupportedOperationError: the operation has no object-store equivalent
- FlatFsConfigError: invalid configuration, URI or backend selection
"""

from __future__ import annotations


class FlatFsError(Exception):
    """Base exception for flatfs operations.

    Attributes:
        message: Human-readable error message.
        path: Client-visible path associated with the operation (if applicable).
        key: Object key associated with the operation (if applicable).
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.key = key

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"path={self.path}")
        if self.key:
            parts.append(f"key={self.key}")
        return " ".join(parts)


class MalformedPathError(FlatFsError):
    """Raised when a path carries no usable logical object name.

    Typical cause is a temporary-directory marker directly below the data
    root, e.g. ``swift2d://root.sl/_temporary/0/...``. Fatal for the calling
    operation and never retried.
    """

    def __init__(
        self,
        message: str = "Object name is missing",
        *,
        path: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message, path=path, key=key)


class NotFoundError(FlatFsError):
    """Raised when a logical key does not exist in the backing store."""

    def __init__(
        self,
        message: str = "Object not found",
        *,
        path: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message, path=path, key=key)


class BackingStoreError(FlatFsError):
    """Raised when the backing store cannot complete an operation.

    Indicates the store itself failed (disk full, permission denied, network
    error) rather than a logical error like a missing object.
    """

    def __init__(
        self,
        message: str = "Backing store error",
        *,
        path: str | None = None,
        key: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, path=path, key=key)
        self.cause = cause


class UnsupportedOperationError(FlatFsError):
    """Raised for filesystem operations that objects cannot express (append)."""


class FlatFsConfigError(Exception):
    """Raised when configuration, filesystem URI or backend selection is invalid.

    This is a session-initialization error, not a request-time error.
    """

    pass
