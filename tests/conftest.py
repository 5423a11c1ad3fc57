"""Pytest configuration and fixtures for flatfs tests.

This module provides common fixtures and configuration for all tests.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from flatfs.config import FlatFsConfig
from flatfs.filesystem import ObjectStoreFileSystem
from flatfs.store.memory import InMemoryStoreClient
from flatfs.store.registry import reset_memory_clients

HOST = "swift2d://root.sl/"
DATA_ROOT = "root"


_FLATFS_ENV_VARS = (
    "FLATFS_TEMPORARY_MARKER",
    "FLATFS_ATTEMPT_PREFIX",
    "FLATFS_SUCCESS_MARKER",
    "FLATFS_DIRECTORY_CONTENT_TYPE",
    "FLATFS_MARK_SUCCESSFUL_JOBS",
    "FLATFS_DATA_ORIGIN",
    "FLATFS_DELETE_CONCURRENCY",
    "FLATFS_OBJECT_STORE_BASE_DIR",
    "FLATFS_OTEL_ENABLED",
    "FLATFS_OTEL_TEST_CAPTURE",
    "FLATFS_OTEL_SERVICE_NAME",
    "FLATFS_OTEL_EXPORTER",
    "FLATFS_OTEL_RESOURCE_ATTRS",
    "FLATFS_REQUIRE_OTEL",
)


@pytest.fixture(autouse=True)
def clean_flatfs_env(monkeypatch: pytest.MonkeyPatch) -> Any:
    """Start every test without FLATFS_* overrides and with fresh memory stores."""
    for name in _FLATFS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_memory_clients()
    yield
    reset_memory_clients()


@pytest.fixture
def store() -> InMemoryStoreClient:
    """Return an empty in-memory store for the "root" container."""
    return InMemoryStoreClient(DATA_ROOT)


@pytest.fixture
def fs(store: InMemoryStoreClient) -> ObjectStoreFileSystem:
    """Return a filesystem session on swift2d://root.sl/ backed by the memory store."""
    filesystem = ObjectStoreFileSystem(store=store, config=FlatFsConfig())
    filesystem.initialize(HOST)
    return filesystem


@pytest.fixture
def put_object(store: InMemoryStoreClient) -> Callable[..., None]:
    """Return a helper writing objects straight into the store."""

    def _put(
        key: str,
        data: bytes = b"",
        content_type: str = "application/octet-stream",
        metadata: dict[str, str] | None = None,
    ) -> None:
        with store.create_object(key, content_type, metadata) as out:
            out.write(data)

    return _put
