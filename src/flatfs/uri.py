"""Filesystem URI resolution.

A filesystem URI names a container on a store service::

    swift2d://<container>.<service>/<object name>

The container becomes the data root of the session's keys; the scheme and
authority form the host scheme every client path starts with.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from flatfs.errors import FlatFsConfigError


@dataclass(frozen=True)
class FilesystemLocation:
    """Resolved parts of a filesystem URI.

    Attributes:
        scheme: URI scheme, selects the store client.
        authority: ``<container>.<service>`` part of the URI.
        data_root: Container holding the session's keys.
        host_scheme: ``scheme://authority/``, the prefix of every client path.
    """

    scheme: str
    authority: str
    data_root: str
    host_scheme: str

    @property
    def uri(self) -> str:
        """Filesystem URI without path, as reported to the client framework."""
        return f"{self.scheme}://{self.authority}"


def parse_filesystem_uri(uri: str) -> FilesystemLocation:
    """Resolve scheme, data root and host scheme of a filesystem URI.

    Raises:
        FlatFsConfigError: If the URI lacks a scheme or authority.
    """
    parts = urlsplit(uri)
    if not parts.scheme:
        raise FlatFsConfigError(f"Filesystem URI has no scheme: {uri!r}")
    if not parts.netloc:
        raise FlatFsConfigError(f"Filesystem URI has no container: {uri!r}")

    authority = parts.netloc
    data_root = authority.split(".", 1)[0]
    if not data_root:
        raise FlatFsConfigError(f"Filesystem URI has an empty container name: {uri!r}")

    return FilesystemLocation(
        scheme=parts.scheme,
        authority=authority,
        data_root=data_root,
        host_scheme=f"{parts.scheme}://{authority}/",
    )
