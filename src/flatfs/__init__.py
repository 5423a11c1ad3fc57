"""flatfs - hierarchical filesystem semantics over flat object stores.

Lets a compute framework that commits task output by renaming attempt
directories write directly to an object store: keys are derived from client
paths with the task attempt id folded in, so no rename is ever performed.
"""

from flatfs.config import FlatFsConfig, Markers, load_config_from_env
from flatfs.errors import (
    BackingStoreError,
    FlatFsConfigError,
    FlatFsError,
    MalformedPathError,
    NotFoundError,
    UnsupportedOperationError,
)
from flatfs.filesystem import ObjectStoreFileSystem
from flatfs.paths import KeyTranslator

__all__ = [
    "ObjectStoreFileSystem",
    "KeyTranslator",
    "FlatFsConfig",
    "Markers",
    "load_config_from_env",
    "FlatFsError",
    "MalformedPathError",
    "NotFoundError",
    "BackingStoreError",
    "UnsupportedOperationError",
    "FlatFsConfigError",
]
