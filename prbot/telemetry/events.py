"""
Named telemetry events.

An event is recorded on the current span and counted on the
``prbot.events`` counter, labelled by event name.
"""

import logging
from pathlib import PurePosixPath
from typing import Any, Optional

from opentelemetry import metrics, trace

from prbot.telemetry.config import get_meter

logger = logging.getLogger(__name__)

MERGE_CONFLICT_IN_PROTECTED_SECTION = "MergeConflictInProtectedSection"
CONFLICT_RESOLUTION_COMMENT_ADDED = "ConflictResolutionCommentAdded"
MANUAL_CONFLICT_RESOLUTION_COMMENT_ADDED = "ManualConflictResolutionCommentAdded"
PULL_REQUEST_ABANDONED_DURING_RESOLUTION = "PullRequestAbandonedDuringResolution"

_event_counter: Optional[metrics.Counter] = None


def _counter() -> metrics.Counter:
    global _event_counter
    if _event_counter is None:
        _event_counter = get_meter("prbot.events").create_counter(
            "prbot.events",
            unit="1",
            description="Conflict resolution events by name",
        )
    return _event_counter


def _file_stem(path: str) -> str:
    stem = PurePosixPath(path).stem
    return "".join(part[:1].upper() + part[1:] for part in stem.replace("-", "_").split("_") if part)


def conflict_resolved_event(path: str) -> str:
    """Event name for a resolved file, e.g. ``RevisionConflictResolved``."""
    return f"{_file_stem(path)}ConflictResolved"


def resolution_failed_event(path: str) -> str:
    """Event name for a failed file, e.g. ``ComponentsResolutionFailed``."""
    return f"{_file_stem(path)}ResolutionFailed"


def record_event(name: str, **attributes: Any) -> None:
    """
    Record a named event.

    Attribute values that are not str/int/float/bool are stringified.
    """
    attrs = {
        key: value if isinstance(value, (str, int, float, bool)) else str(value)
        for key, value in attributes.items()
        if value is not None
    }

    span = trace.get_current_span()
    span.add_event(name, attributes=attrs)
    _counter().add(1, {"event": name})

    logger.debug(f"Telemetry event {name}", extra={"event": name, "event_attributes": attrs})
