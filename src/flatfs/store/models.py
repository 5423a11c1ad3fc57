"""flatfs store data models.

Provides the typed status entry returned by store clients for metadata
lookups and listings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

DIRECTORY_CONTENT_TYPE = "application/directory"


@dataclass(frozen=True)
class ObjectStatus:
    """Status of one object in the backing store.

    Attributes:
        path: Client-visible path of the object.
        key: Object key within the store, including the data root.
        size_bytes: Size of the object content in bytes.
        content_type: MIME type of the object.
        last_modified: Timestamp of the last write.
        metadata: User attributes stored with the object (e.g. Data-Origin).
        directory_content_type: Content type that identifies directory markers.
    """

    path: str
    key: str
    size_bytes: int
    content_type: str | None
    last_modified: datetime
    metadata: dict[str, str] = field(default_factory=dict)
    directory_content_type: str = DIRECTORY_CONTENT_TYPE

    @property
    def name(self) -> str:
        """Final segment of the object's path."""
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    @property
    def is_directory_marker(self) -> bool:
        """True for the zero-byte objects standing in for directories."""
        return self.content_type == self.directory_content_type

    def to_dict(self) -> dict[str, Any]:
        """Convert status to dictionary for JSON serialization."""
        return {
            "key": self.key,
            "size_bytes": self.size_bytes,
            "content_type": self.content_type,
            "last_modified": self.last_modified.isoformat(),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        path: str,
        directory_content_type: str = DIRECTORY_CONTENT_TYPE,
    ) -> ObjectStatus:
        """Create status from a dictionary produced by to_dict."""
        last_modified_raw = data.get("last_modified")
        if isinstance(last_modified_raw, str):
            last_modified = datetime.fromisoformat(last_modified_raw)
        else:
            last_modified = datetime.now(UTC)

        content_type_raw = data.get("content_type")
        return cls(
            path=path,
            key=str(data["key"]),
            size_bytes=int(data.get("size_bytes") or 0),
            content_type=str(content_type_raw) if content_type_raw else None,
            last_modified=last_modified,
            metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
            directory_content_type=directory_content_type,
        )
