"""Pull request comment reporting."""

from prbot.reporting.comments import (
    ALL_RESOLVED_MESSAGE,
    NONE_RESOLVED_MESSAGE,
    PARTIAL_MESSAGE,
    PROGRESS_MESSAGE,
    CommentOperationFailure,
    ProgressReporter,
)

__all__ = [
    "ALL_RESOLVED_MESSAGE",
    "NONE_RESOLVED_MESSAGE",
    "PARTIAL_MESSAGE",
    "PROGRESS_MESSAGE",
    "CommentOperationFailure",
    "ProgressReporter",
]
