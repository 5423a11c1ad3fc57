"""flatfs observability module.

Provides the OpenTelemetry tracing baseline for filesystem operations.
"""

from flatfs.observability.tracing import configure_tracing, is_tracing_enabled

__all__ = ["configure_tracing", "is_tracing_enabled"]
