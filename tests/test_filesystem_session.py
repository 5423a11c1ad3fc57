"""Tests for the ObjectStoreFileSystem session.

Covers:
- initialize: URI binding, backend selection, configuration checks
- A complete job run through the framework's commit protocol
- Unsupported operations
- OpenTelemetry spans (in-memory exporter, no collector required)
"""

from __future__ import annotations

import hashlib
from typing import Any

import pytest

from flatfs.config import FlatFsConfig
from flatfs.errors import (
    FlatFsConfigError,
    FlatFsError,
    MalformedPathError,
    UnsupportedOperationError,
)
from flatfs.filesystem import ObjectStoreFileSystem
from flatfs.observability.tracing import (
    clear_test_spans,
    configure_tracing,
    get_test_spans,
    reset_tracing,
)
from flatfs.store.memory import InMemoryStoreClient

HOST = "swift2d://root.sl/"


class TestInitialize:
    def test_binds_host_scheme(self, fs: ObjectStoreFileSystem) -> None:
        assert fs.uri == "swift2d://root.sl"
        assert fs.host_scheme == HOST
        assert fs.working_directory == HOST
        assert fs.scheme == "mem"
        assert fs.backend_name == "memory"

    def test_selects_store_by_scheme(self) -> None:
        fs = ObjectStoreFileSystem(config=FlatFsConfig())
        fs.initialize("mem://results.local/")

        with fs.create("mem://results.local/out/_SUCCESS") as out:
            out.write(b"")

        other = ObjectStoreFileSystem(config=FlatFsConfig())
        other.initialize("mem://results.local/")
        assert other.exists("mem://results.local/out/_SUCCESS") is True

    def test_loads_config_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLATFS_DATA_ORIGIN", "from-env")
        fs = ObjectStoreFileSystem(store=InMemoryStoreClient("root"))
        fs.initialize(HOST)

        fs.mkdirs(f"{HOST}out/_temporary/0")

        assert fs.get_status(f"{HOST}out").metadata == {"Data-Origin": "from-env"}

    def test_rejects_disabled_success_marking(self) -> None:
        fs = ObjectStoreFileSystem(
            store=InMemoryStoreClient("root"),
            config=FlatFsConfig(mark_successful_jobs=False),
        )

        with pytest.raises(FlatFsConfigError):
            fs.initialize(HOST)

    def test_rejects_store_for_other_container(self) -> None:
        fs = ObjectStoreFileSystem(store=InMemoryStoreClient("other"), config=FlatFsConfig())

        with pytest.raises(FlatFsConfigError):
            fs.initialize(HOST)

    def test_rejects_unknown_scheme(self) -> None:
        fs = ObjectStoreFileSystem(config=FlatFsConfig())

        with pytest.raises(FlatFsConfigError):
            fs.initialize("s3x://bucket.svc/")

    def test_operations_require_initialize(self) -> None:
        fs = ObjectStoreFileSystem(store=InMemoryStoreClient("root"))

        with pytest.raises(FlatFsError):
            fs.exists(f"{HOST}a")
        with pytest.raises(FlatFsError):
            fs.create(f"{HOST}a")


class TestJobRun:
    """A two-task job with one failed attempt and one speculative duplicate."""

    def test_output_after_commit(
        self, fs: ObjectStoreFileSystem, store: InMemoryStoreClient
    ) -> None:
        job_dir = f"{HOST}out/_temporary/0"
        fs.mkdirs(job_dir)

        def run_task(attempt_id: str, task_id: str, data: bytes, commit: bool) -> None:
            attempt_dir = f"{job_dir}/_temporary/attempt_{attempt_id}"
            fs.mkdirs(attempt_dir)
            with fs.create(f"{attempt_dir}/part-{task_id}") as out:
                out.write(data)
            if commit:
                task_dir = f"{job_dir}/task_{attempt_id.rsplit('_', 1)[0]}"
                assert fs.rename(attempt_dir, task_dir) is True
            else:
                assert fs.delete(attempt_dir, recursive=True) is True

        run_task("201512062056_0000_m_000000_0", "00000", b"task zero, failed", commit=False)
        run_task("201512062056_0000_m_000000_1", "00000", b"task zero", commit=True)
        run_task("201512062056_0000_m_000001_0", "00001", b"task one", commit=True)

        for task_dir in ("task_201512062056_0000_m_000000", "task_201512062056_0000_m_000001"):
            for entry in (f"{job_dir}/{task_dir}/part-00000", f"{job_dir}/{task_dir}/part-00001"):
                assert fs.rename(entry, f"{HOST}out/{entry.rsplit('/', 1)[-1]}") is True
        assert fs.delete(f"{HOST}out/_temporary", recursive=True) is True
        with fs.create(f"{HOST}out/_SUCCESS") as out:
            out.write(b"")

        assert store.keys() == [
            "root/out",
            "root/out/_SUCCESS",
            "root/out/part-00000-201512062056_0000_m_000000_1",
            "root/out/part-00001-201512062056_0000_m_000001_0",
        ]
        assert [e.name for e in fs.list_files(f"{HOST}out")] == [
            "_SUCCESS",
            "part-00000-201512062056_0000_m_000000_1",
            "part-00001-201512062056_0000_m_000001_0",
        ]

    def test_rerun_after_cleanup(self, fs: ObjectStoreFileSystem, store: InMemoryStoreClient) -> None:
        """Deleting the output root before a rerun removes the previous run."""
        fs.mkdirs(f"{HOST}out/_temporary/0")
        with fs.create(f"{HOST}out/_temporary/0/_temporary/attempt_201512062056_0000_m_000000_0/part-0") as out:
            out.write(b"old")
        with fs.create(f"{HOST}out/_SUCCESS") as out:
            out.write(b"")

        assert fs.delete(f"{HOST}out") is True

        assert store.keys() == []


class TestUnsupported:
    def test_append(self, fs: ObjectStoreFileSystem) -> None:
        with pytest.raises(UnsupportedOperationError) as exc_info:
            fs.append(f"{HOST}out/part-1")

        assert exc_info.value.path == f"{HOST}out/part-1"

    def test_set_working_directory_ignored(self, fs: ObjectStoreFileSystem) -> None:
        fs.set_working_directory(f"{HOST}somewhere/else")

        assert fs.working_directory == HOST


@pytest.fixture
def span_capture(monkeypatch: pytest.MonkeyPatch) -> Any:
    """Enable tracing with the in-memory exporter for one test."""
    monkeypatch.setenv("FLATFS_OTEL_ENABLED", "1")
    monkeypatch.setenv("FLATFS_OTEL_TEST_CAPTURE", "1")
    reset_tracing()
    assert configure_tracing() is True
    clear_test_spans()
    yield
    clear_test_spans()
    reset_tracing()


class TestTracing:
    """Filesystem spans carry hashes, never raw paths."""

    def test_disabled_by_default(self, fs: ObjectStoreFileSystem) -> None:
        assert configure_tracing() is False

    def test_span_per_operation(self, span_capture: Any, fs: ObjectStoreFileSystem) -> None:
        path = f"{HOST}customer-acme/out/_SUCCESS"
        with fs.create(path) as out:
            out.write(b"")
        fs.exists(path)

        spans = get_test_spans()

        assert [s.name for s in spans] == ["flatfs.fs.create", "flatfs.fs.exists"]
        attrs = dict(spans[1].attributes or {})
        assert attrs["flatfs.path_sha256"] == hashlib.sha256(path.encode("utf-8")).hexdigest()
        assert attrs["storage.backend"] == "memory"
        assert attrs["flatfs.result"] is True

    def test_no_raw_paths_in_attributes(
        self, span_capture: Any, fs: ObjectStoreFileSystem
    ) -> None:
        fs.mkdirs(f"{HOST}customer-acme/_temporary/0")
        fs.list_status(f"{HOST}customer-acme")
        fs.delete(f"{HOST}customer-acme")

        spans = get_test_spans()

        assert [s.name for s in spans] == [
            "flatfs.fs.mkdirs",
            "flatfs.fs.list_status",
            "flatfs.fs.delete",
        ]
        assert dict(spans[1].attributes or {})["flatfs.entry_count"] == 1
        for span in spans:
            for value in dict(span.attributes or {}).values():
                assert "customer-acme" not in str(value)

    def test_error_recorded(self, span_capture: Any, fs: ObjectStoreFileSystem) -> None:
        with pytest.raises(MalformedPathError):
            fs.create(f"{HOST}_temporary/0/part-1")

        spans = get_test_spans()

        assert len(spans) == 1
        attrs = dict(spans[0].attributes or {})
        assert attrs["error"] is True
        assert attrs["error.type"] == "MalformedPathError"
