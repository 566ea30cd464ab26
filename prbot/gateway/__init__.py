"""Source-control host gateway."""

from prbot.gateway.base import (
    BlobNotFound,
    HostGateway,
    HostGatewayError,
    HostUnavailable,
    PullRequestNotEditable,
)
from prbot.gateway.azure_devops import AzureDevOpsGateway
from prbot.gateway.models import (
    Comment,
    CommentThread,
    Conflict,
    ConflictResolutionStatus,
    ConflictType,
    MergeStatus,
    PullRequestHandle,
    PullRequestStatus,
    SubmissionOutcome,
    SubmissionResult,
    ThreadStatus,
)

__all__ = [
    # Contract
    "HostGateway",
    "AzureDevOpsGateway",
    # Errors
    "HostGatewayError",
    "HostUnavailable",
    "BlobNotFound",
    "PullRequestNotEditable",
    # Models
    "Comment",
    "CommentThread",
    "Conflict",
    "ConflictResolutionStatus",
    "ConflictType",
    "MergeStatus",
    "PullRequestHandle",
    "PullRequestStatus",
    "SubmissionOutcome",
    "SubmissionResult",
    "ThreadStatus",
]
