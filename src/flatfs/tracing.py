"""Tracing decorator for filesystem operations.

Security:
    - Never export raw client paths in span attributes
    - Only path hashes, the backend name and result shapes
"""

from __future__ import annotations

import functools
import hashlib
import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flatfs.observability.tracing import get_tracer, is_tracing_enabled

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def traced_fs_operation(operation: str) -> Callable[[F], F]:
    """Decorator to trace filesystem operations with OpenTelemetry.

    Emits ``flatfs.fs.<operation>`` spans with safe attributes.

    Args:
        operation: Operation name (e.g., "create", "rename", "list_status").

    Returns:
        Decorated function that emits OTel spans when tracing is enabled.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self: Any, path: str, *args: Any, **kwargs: Any) -> Any:
            if not is_tracing_enabled():
                return func(self, path, *args, **kwargs)

            with get_tracer().start_as_current_span(f"flatfs.fs.{operation}") as span:
                # Paths may embed credentials or customer names; export a hash only.
                span.set_attribute(
                    "flatfs.path_sha256", hashlib.sha256(path.encode("utf-8")).hexdigest()
                )
                span.set_attribute("storage.backend", getattr(self, "backend_name", "unknown"))

                try:
                    result = func(self, path, *args, **kwargs)
                except Exception as e:
                    span.set_attribute("error", True)
                    span.set_attribute("error.type", type(e).__name__)
                    raise

                _add_result_attributes(span, result)
                return result

        return cast(F, wrapper)

    return decorator


def _add_result_attributes(span: Any, result: Any) -> None:
    """Add result-based attributes to span safely."""
    try:
        if isinstance(result, bool):
            span.set_attribute("flatfs.result", result)
        elif isinstance(result, list):
            span.set_attribute("flatfs.entry_count", len(result))
        elif hasattr(result, "size_bytes"):
            span.set_attribute("flatfs.object_size_bytes", result.size_bytes)
    except Exception as e:
        logger.debug("Failed to add result attributes to span: %s", e)
