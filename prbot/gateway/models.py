"""
Data models for the source-control host.

Mirrors the subset of the Azure DevOps Git REST resources that conflict
resolution needs: pull requests, merge conflicts, and comment threads.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class PullRequestStatus(str, Enum):
    """Lifecycle status of a pull request."""

    NOT_SET = "notSet"
    ACTIVE = "active"
    ABANDONED = "abandoned"
    COMPLETED = "completed"

    @classmethod
    def _missing_(cls, value: object) -> "PullRequestStatus":
        return cls.NOT_SET


class MergeStatus(str, Enum):
    """Status of the host's asynchronous merge computation."""

    NOT_SET = "notSet"
    QUEUED = "queued"
    CONFLICTS = "conflicts"
    SUCCEEDED = "succeeded"
    REJECTED_BY_POLICY = "rejectedByPolicy"
    FAILURE = "failure"

    @classmethod
    def _missing_(cls, value: object) -> "MergeStatus":
        return cls.NOT_SET


class ConflictType(str, Enum):
    """Kind of file-level conflict."""

    NONE = "none"
    ADD_ADD = "addAdd"
    ADD_RENAME = "addRename"
    DELETE_EDIT = "deleteEdit"
    DELETE_RENAME = "deleteRename"
    DIRECTORY_FILE = "directoryFile"
    DIRECTORY_CHILD = "directoryChild"
    EDIT_DELETE = "editDelete"
    EDIT_EDIT = "editEdit"
    FILE_DIRECTORY = "fileDirectory"
    RENAME_1TO2 = "rename1to2"
    RENAME_2TO1 = "rename2to1"
    RENAME_ADD = "renameAdd"
    RENAME_DELETE = "renameDelete"
    RENAME_RENAME = "renameRename"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "ConflictType":
        return cls.UNKNOWN


class ConflictResolutionStatus(str, Enum):
    """Resolution status of a conflict."""

    UNRESOLVED = "unresolved"
    PARTIALLY_RESOLVED = "partiallyResolved"
    RESOLVED = "resolved"

    @classmethod
    def _missing_(cls, value: object) -> "ConflictResolutionStatus":
        return cls.UNRESOLVED


class ThreadStatus(str, Enum):
    """Status of a pull request comment thread."""

    UNKNOWN = "unknown"
    ACTIVE = "active"
    FIXED = "fixed"
    WONT_FIX = "wontFix"
    CLOSED = "closed"
    BY_DESIGN = "byDesign"
    PENDING = "pending"

    @classmethod
    def _missing_(cls, value: object) -> "ThreadStatus":
        return cls.UNKNOWN


@dataclass
class PullRequestHandle:
    """Identity and current state of a pull request."""

    repository_id: str
    pull_request_id: int
    status: PullRequestStatus = PullRequestStatus.ACTIVE
    merge_status: MergeStatus = MergeStatus.NOT_SET
    title: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == PullRequestStatus.ACTIVE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PullRequestHandle":
        """Create from a host API payload."""
        return cls(
            repository_id=str(data.get("repository", {}).get("id", "")),
            pull_request_id=int(data.get("pullRequestId", 0)),
            status=PullRequestStatus(data.get("status", "notSet")),
            merge_status=MergeStatus(data.get("mergeStatus", "notSet")),
            title=data.get("title", ""),
        )


@dataclass
class Conflict:
    """A single conflicting path on a pull request."""

    conflict_id: int
    path: str
    conflict_type: ConflictType = ConflictType.EDIT_EDIT
    resolution_status: ConflictResolutionStatus = ConflictResolutionStatus.UNRESOLVED
    source_object_id: Optional[str] = None
    target_object_id: Optional[str] = None
    base_object_id: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.resolution_status == ConflictResolutionStatus.RESOLVED

    @property
    def is_edit_edit(self) -> bool:
        return self.conflict_type == ConflictType.EDIT_EDIT

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "conflictId": self.conflict_id,
            "conflictPath": self.path,
            "conflictType": self.conflict_type.value,
            "resolutionStatus": self.resolution_status.value,
            "sourceBlob": {"objectId": self.source_object_id},
            "targetBlob": {"objectId": self.target_object_id},
            "baseBlob": {"objectId": self.base_object_id},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Conflict":
        """Create from a host API payload."""
        return cls(
            conflict_id=int(data.get("conflictId", 0)),
            path=data.get("conflictPath", ""),
            conflict_type=ConflictType(data.get("conflictType", "unknown")),
            resolution_status=ConflictResolutionStatus(
                data.get("resolutionStatus", "unresolved")
            ),
            source_object_id=(data.get("sourceBlob") or {}).get("objectId"),
            target_object_id=(data.get("targetBlob") or {}).get("objectId"),
            base_object_id=(data.get("baseBlob") or {}).get("objectId"),
        )


@dataclass
class Comment:
    """A single comment inside a thread."""

    comment_id: int
    content: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        return cls(
            comment_id=int(data.get("id", 0)),
            content=data.get("content") or "",
        )


@dataclass
class CommentThread:
    """A pull request comment thread."""

    thread_id: int
    status: ThreadStatus = ThreadStatus.ACTIVE
    comments: list[Comment] = field(default_factory=list)

    @property
    def first_comment(self) -> Optional[Comment]:
        return self.comments[0] if self.comments else None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommentThread":
        """Create from a host API payload."""
        return cls(
            thread_id=int(data.get("id", 0)),
            status=ThreadStatus(data.get("status") or "unknown"),
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
        )


class SubmissionOutcome(str, Enum):
    """Outcome of submitting one conflict resolution."""

    APPLIED = "applied"
    NOT_ACCEPTED = "not_accepted"  # host answered but left the conflict unresolved
    REJECTED_NOT_EDITABLE = "rejected_not_editable"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class SubmissionResult:
    """Tagged result of a resolution submission."""

    outcome: SubmissionOutcome
    conflict: Conflict
    error: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.outcome == SubmissionOutcome.APPLIED
