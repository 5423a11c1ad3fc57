"""Client path to object key translation.

A client path such as::

    swift2d://root.sl/out/_temporary/0/_temporary/attempt_20160313_0000_m_000019_0/part-r-00019.csv

is translated into the object key that holds the committed output::

    root/out/part-r-00019.csv-20160313_0000_m_000019_0

The task attempt id is folded into the leaf name so concurrent, retried and
speculative attempts of the same logical output never share a key, and the
framework's later rename from the attempt directory is not needed.
"""

from __future__ import annotations

import logging

from flatfs.config import Markers
from flatfs.errors import MalformedPathError

logger = logging.getLogger(__name__)

SEPARATOR = "/"


def path_name(path: str) -> str:
    """Return the final segment of a path or key."""
    return path.rstrip(SEPARATOR).rsplit(SEPARATOR, 1)[-1]


def path_parent(path: str) -> str:
    """Return a path or key without its final segment."""
    stripped = path.rstrip(SEPARATOR)
    if SEPARATOR not in stripped:
        return ""
    return stripped.rsplit(SEPARATOR, 1)[0]


def is_self_or_descendant(candidate: str, path: str) -> bool:
    """Check whether candidate is path itself or lies below it.

    A bare string-prefix match is rejected: ``a/b2`` is not below ``a/b``.
    """
    if candidate == path:
        return True
    parent = path if path.endswith(SEPARATOR) else path + SEPARATOR
    return candidate.startswith(parent)


class KeyTranslator:
    """Derives object keys from the client paths of one filesystem session.

    Args:
        host_scheme: Scheme and authority every client path starts with,
            e.g. ``"swift2d://root.sl/"``.
        data_root: Container the keys live in, e.g. ``"root"``.
        markers: Reserved marker vocabulary.
    """

    def __init__(self, host_scheme: str, data_root: str, markers: Markers) -> None:
        self._host_scheme = host_scheme
        self._data_root = data_root
        self._markers = markers

    @property
    def host_scheme(self) -> str:
        return self._host_scheme

    @property
    def data_root(self) -> str:
        return self._data_root

    @property
    def markers(self) -> Markers:
        return self._markers

    def _strip_host_scheme(self, path: str) -> str:
        if not path.startswith(self._host_scheme):
            raise MalformedPathError(
                message=f"Path is outside of {self._host_scheme}",
                path=path,
            )
        return path[len(self._host_scheme) :]

    def normalize(self, path: str) -> str:
        """Drop trailing separators after the host scheme: ``out/`` names ``out``."""
        return self._host_scheme + self._strip_host_scheme(path).rstrip(SEPARATOR)

    def is_attempt_name(self, name: str) -> bool:
        return name.startswith(self._markers.attempt_prefix)

    def contains_temporary(self, text: str) -> bool:
        return self._markers.temporary in text

    def extract_task_attempt_id(self, path: str) -> str | None:
        """Extract the task attempt id from a path.

        The id is the first attempt-prefixed segment with the prefix removed,
        e.g. ``attempt_201603131849_0000_m_000019_0`` yields
        ``201603131849_0000_m_000019_0``.

        Returns:
            The attempt id, or None if the path has no attempt segment.
        """
        prefix = self._markers.attempt_prefix
        for segment in path.split(SEPARATOR):
            if segment.startswith(prefix) and len(segment) > len(prefix):
                return segment[len(prefix) :]
        return None

    def object_name(
        self,
        path: str,
        boundary: str | None = None,
        fold_attempt_id: bool = True,
    ) -> str:
        """Translate a client path into an object name below the data root.

        Args:
            path: Full client path.
            boundary: Segment marking the job scratch area, defaults to the
                temporary marker.
            fold_attempt_id: Append the leaf name, qualified with the task
                attempt id, to the logical root.

        Raises:
            MalformedPathError: If the boundary leaves no logical name.
        """
        if boundary is None:
            boundary = self._markers.temporary
        remainder = self._strip_host_scheme(path)
        idx = remainder.find(boundary)
        if idx < 0:
            return remainder

        # Only offset 0 and a single leading separator count as "no name".
        if idx == 0 or (idx == 1 and remainder.startswith(SEPARATOR)):
            raise MalformedPathError(path=path)

        object_name = remainder[: idx - 1]
        if fold_attempt_id:
            leaf = path_name(path)
            attempt_id = self.extract_task_attempt_id(path)
            if attempt_id is not None and not self.is_attempt_name(leaf):
                leaf = f"{leaf}-{attempt_id}"
            object_name = f"{object_name}{SEPARATOR}{leaf}"
        return object_name

    def translate(
        self,
        path: str,
        boundary: str | None = None,
        fold_attempt_id: bool = True,
    ) -> str:
        """Translate a client path into a key prefixed with the data root."""
        key = f"{self._data_root}{SEPARATOR}{self.object_name(path, boundary, fold_attempt_id)}"
        logger.debug("Translated %s to key %s (fold=%s)", path, key, fold_attempt_id)
        return key

    def path_to_key(self, path: str) -> str:
        """Map a client path one-to-one onto its key, without marker handling."""
        return f"{self._data_root}{SEPARATOR}{self._strip_host_scheme(path)}"

    def key_to_path(self, key: str) -> str:
        """Map a key of this data root back onto its client path.

        The bare data root maps onto the host scheme itself.
        """
        if key == self._data_root:
            return self._host_scheme
        root = self._data_root + SEPARATOR
        if not key.startswith(root):
            raise MalformedPathError(
                message=f"Key is outside of data root {self._data_root}",
                key=key,
            )
        return self._host_scheme + key[len(root) :]
