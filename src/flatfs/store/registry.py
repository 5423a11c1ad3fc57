"""Store client selection by URI scheme.

Built-in schemes:
    mem: InMemoryStoreClient (one shared instance per data root)
    localfs: FilesystemStoreClient rooted at config.object_store_base_dir
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from flatfs.config import FlatFsConfig
from flatfs.errors import FlatFsConfigError
from flatfs.store.base import StoreClient
from flatfs.store.filesystem import FilesystemStoreClient
from flatfs.store.memory import InMemoryStoreClient
from flatfs.uri import parse_filesystem_uri

logger = logging.getLogger(__name__)

StoreClientFactory = Callable[[str, FlatFsConfig], StoreClient]

_FACTORIES: dict[str, StoreClientFactory] = {}
_MEMORY_CLIENTS: dict[str, InMemoryStoreClient] = {}
_lock = threading.Lock()


def _memory_factory(data_root: str, config: FlatFsConfig) -> StoreClient:
    # Sessions on the same container share state, like a real store would.
    with _lock:
        client = _MEMORY_CLIENTS.get(data_root)
        if client is None:
            client = InMemoryStoreClient(
                data_root,
                directory_content_type=config.markers.directory_content_type,
            )
            _MEMORY_CLIENTS[data_root] = client
        return client


def _filesystem_factory(data_root: str, config: FlatFsConfig) -> StoreClient:
    return FilesystemStoreClient(
        data_root,
        base_dir=config.object_store_base_dir,
        directory_content_type=config.markers.directory_content_type,
    )


def register_store_client(scheme: str, factory: StoreClientFactory) -> None:
    """Register a store client factory for a URI scheme.

    Args:
        scheme: URI scheme, e.g. "s3a".
        factory: Callable building a client from (data_root, config).
    """
    with _lock:
        _FACTORIES[scheme] = factory
    logger.debug("Registered store client for scheme %s", scheme)


def registered_schemes() -> list[str]:
    with _lock:
        return sorted(_FACTORIES)


def get_store_client(uri: str, config: FlatFsConfig) -> StoreClient:
    """Build the store client serving a filesystem URI.

    Raises:
        FlatFsConfigError: If no client is registered for the URI scheme.
    """
    location = parse_filesystem_uri(uri)
    with _lock:
        factory = _FACTORIES.get(location.scheme)
    if factory is None:
        raise FlatFsConfigError(
            f"No store client registered for scheme '{location.scheme}'. "
            f"Registered: {registered_schemes()}"
        )
    return factory(location.data_root, config)


def reset_memory_clients() -> None:
    """Drop all shared in-memory clients (for testing)."""
    with _lock:
        _MEMORY_CLIENTS.clear()


register_store_client("mem", _memory_factory)
register_store_client("localfs", _filesystem_factory)
