"""flatfs configuration.

Provides pydantic models for the reserved marker vocabulary and session
settings, plus an environment loader.

Environment Variables:
    FLATFS_TEMPORARY_MARKER: Job scratch segment name (default: "_temporary")
    FLATFS_ATTEMPT_PREFIX: Task attempt segment prefix (default: "attempt_")
    FLATFS_SUCCESS_MARKER: Job completion sentinel name (default: "_SUCCESS")
    FLATFS_DIRECTORY_CONTENT_TYPE: Content type of directory markers
        (default: "application/directory")
    FLATFS_MARK_SUCCESSFUL_JOBS: Must stay enabled (default: "1")
    FLATFS_DATA_ORIGIN: Data-Origin attribute on directory markers (default: "flatfs")
    FLATFS_DELETE_CONCURRENCY: Worker threads per recursive delete (default: 1)
    FLATFS_OBJECT_STORE_BASE_DIR: Base directory of the "localfs" backend
"""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from flatfs.errors import FlatFsConfigError

logger = logging.getLogger(__name__)

FLATFS_TEMPORARY_MARKER_ENV = "FLATFS_TEMPORARY_MARKER"
FLATFS_ATTEMPT_PREFIX_ENV = "FLATFS_ATTEMPT_PREFIX"
FLATFS_SUCCESS_MARKER_ENV = "FLATFS_SUCCESS_MARKER"
FLATFS_DIRECTORY_CONTENT_TYPE_ENV = "FLATFS_DIRECTORY_CONTENT_TYPE"
FLATFS_MARK_SUCCESSFUL_JOBS_ENV = "FLATFS_MARK_SUCCESSFUL_JOBS"
FLATFS_DATA_ORIGIN_ENV = "FLATFS_DATA_ORIGIN"
FLATFS_DELETE_CONCURRENCY_ENV = "FLATFS_DELETE_CONCURRENCY"
FLATFS_OBJECT_STORE_BASE_DIR_ENV = "FLATFS_OBJECT_STORE_BASE_DIR"

DATA_ORIGIN_ATTRIBUTE = "Data-Origin"


class Markers(BaseModel):
    """Reserved path vocabulary of the client framework's commit protocol.

    Attributes:
        temporary: Segment name of a job's scratch subtree.
        attempt_prefix: Prefix of task-attempt scoped segment names.
        success: File name of the job completion sentinel.
        directory_content_type: Content type identifying directory marker objects.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    temporary: str = "_temporary"
    attempt_prefix: str = "attempt_"
    success: str = "_SUCCESS"
    directory_content_type: str = "application/directory"

    @field_validator("temporary", "attempt_prefix", "success", "directory_content_type")
    @classmethod
    def no_empty_markers(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Marker cannot be empty or whitespace-only")
        return v

    @field_validator("temporary", "attempt_prefix", "success")
    @classmethod
    def no_separator_in_segment(cls, v: str) -> str:
        if "/" in v:
            raise ValueError("Path markers must be a single segment")
        return v


class FlatFsConfig(BaseModel):
    """Settings of one filesystem session."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    markers: Markers = Field(default_factory=Markers)
    mark_successful_jobs: bool = True
    data_origin: str = Field(default="flatfs", min_length=1)
    default_content_type: str = Field(default="application/octet-stream", min_length=1)
    delete_concurrency: int = Field(default=1, ge=1, le=64)
    object_store_base_dir: str | None = None


def _get_env_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    val = os.environ.get(key, "").strip().lower()
    if val in ("1", "true", "yes"):
        return True
    if val in ("0", "false", "no"):
        return False
    return default


def _get_env_str(key: str) -> str | None:
    """Get a non-empty string from environment variable."""
    val = os.environ.get(key, "").strip()
    return val or None


def load_config_from_env() -> FlatFsConfig:
    """Build a FlatFsConfig from FLATFS_* environment variables.

    Unset variables keep the model defaults.

    Raises:
        FlatFsConfigError: If any value fails validation.
    """
    marker_values = {
        field: value
        for field, value in (
            ("temporary", _get_env_str(FLATFS_TEMPORARY_MARKER_ENV)),
            ("attempt_prefix", _get_env_str(FLATFS_ATTEMPT_PREFIX_ENV)),
            ("success", _get_env_str(FLATFS_SUCCESS_MARKER_ENV)),
            ("directory_content_type", _get_env_str(FLATFS_DIRECTORY_CONTENT_TYPE_ENV)),
        )
        if value is not None
    }

    values: dict[str, object] = {
        "mark_successful_jobs": _get_env_bool(FLATFS_MARK_SUCCESSFUL_JOBS_ENV, True),
    }
    data_origin = _get_env_str(FLATFS_DATA_ORIGIN_ENV)
    if data_origin is not None:
        values["data_origin"] = data_origin
    concurrency = _get_env_str(FLATFS_DELETE_CONCURRENCY_ENV)
    if concurrency is not None:
        values["delete_concurrency"] = concurrency
    base_dir = _get_env_str(FLATFS_OBJECT_STORE_BASE_DIR_ENV)
    if base_dir is not None:
        values["object_store_base_dir"] = base_dir

    try:
        config = FlatFsConfig(markers=Markers(**marker_values), **values)
    except ValidationError as e:
        raise FlatFsConfigError(f"Invalid flatfs configuration: {e}") from e

    logger.debug("Loaded flatfs configuration from environment: %s", config)
    return config
