"""
OpenTelemetry telemetry module for prbot.

Provides tracing, event counters, and logging setup.
"""

from prbot.telemetry.config import (
    configure_logging,
    configure_telemetry,
    get_meter,
    get_tracer,
    shutdown_telemetry,
)
from prbot.telemetry.decorators import trace_async
from prbot.telemetry.events import (
    CONFLICT_RESOLUTION_COMMENT_ADDED,
    MANUAL_CONFLICT_RESOLUTION_COMMENT_ADDED,
    MERGE_CONFLICT_IN_PROTECTED_SECTION,
    PULL_REQUEST_ABANDONED_DURING_RESOLUTION,
    conflict_resolved_event,
    record_event,
    resolution_failed_event,
)

__all__ = [
    # Configuration
    "configure_logging",
    "configure_telemetry",
    "get_meter",
    "get_tracer",
    "shutdown_telemetry",
    # Decorators
    "trace_async",
    # Events
    "CONFLICT_RESOLUTION_COMMENT_ADDED",
    "MANUAL_CONFLICT_RESOLUTION_COMMENT_ADDED",
    "MERGE_CONFLICT_IN_PROTECTED_SECTION",
    "PULL_REQUEST_ABANDONED_DURING_RESOLUTION",
    "conflict_resolved_event",
    "record_event",
    "resolution_failed_event",
]
