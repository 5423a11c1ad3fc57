"""flatfs backing store boundary.

Provides the StoreClient interface the filesystem emulation is written
against, plus reference backends.

Backends:
- InMemoryStoreClient: process-local dictionary ("mem" scheme)
- FilesystemStoreClient: local directory ("localfs" scheme)
"""

from flatfs.store.base import StoreClient
from flatfs.store.filesystem import FilesystemStoreClient
from flatfs.store.memory import InMemoryStoreClient
from flatfs.store.models import ObjectStatus
from flatfs.store.registry import get_store_client, register_store_client
from flatfs.store.streams import ObjectOutputStream

__all__ = [
    "StoreClient",
    "InMemoryStoreClient",
    "FilesystemStoreClient",
    "ObjectStatus",
    "ObjectOutputStream",
    "get_store_client",
    "register_store_client",
]
