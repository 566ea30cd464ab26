"""
Data models for conflict auto-resolution.

Defines resolver results, per-conflict outcomes, and the round
bookkeeping the convergence loop uses to decide when to stop and what
to report.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from prbot.gateway.models import Conflict, SubmissionResult
from prbot.merge.categories import ConflictCategory


class LoopState(str, Enum):
    """States of the convergence loop."""

    IDLE = "idle"
    WAITING_FOR_MERGE = "waiting_for_merge"
    DISCOVERING = "discovering"
    RESOLVING = "resolving"
    SUBMITTING = "submitting"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (LoopState.CONVERGED, LoopState.EXHAUSTED, LoopState.ABORTED)


@dataclass
class ResolutionResult:
    """
    Result from a resolver.

    Either merged content (accepted) or a decline. Never partial.
    """

    content: Optional[bytes] = None
    reason: str = ""
    resolver: str = ""

    @property
    def resolved(self) -> bool:
        return self.content is not None

    @classmethod
    def merged(cls, content: bytes, resolver: str = "") -> "ResolutionResult":
        return cls(content=content, resolver=resolver)

    @classmethod
    def declined(cls, reason: str, resolver: str = "") -> "ResolutionResult":
        return cls(content=None, reason=reason, resolver=resolver)


@dataclass
class ConflictOutcome:
    """What happened to one conflict during a round."""

    conflict: Conflict
    category: ConflictCategory
    result: Optional[ResolutionResult] = None
    submission: Optional[SubmissionResult] = None
    error: Optional[str] = None

    @property
    def accepted(self) -> bool:
        """Resolver produced content."""
        return self.result is not None and self.result.resolved

    @property
    def applied(self) -> bool:
        """Host accepted the submitted content."""
        return self.submission is not None and self.submission.applied

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "conflict_id": self.conflict.conflict_id,
            "path": self.conflict.path,
            "category": self.category.value,
            "accepted": self.accepted,
            "applied": self.applied,
            "reason": self.result.reason if self.result else None,
            "submission": self.submission.outcome.value if self.submission else None,
            "error": self.error,
        }


@dataclass
class RoundSummary:
    """Bookkeeping for one resolve/submit round."""

    round_number: int
    unresolved_count: int
    outcomes: list[ConflictOutcome] = field(default_factory=list)

    @property
    def batch_size(self) -> int:
        return len(self.outcomes)

    @property
    def resolved_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.applied)

    @property
    def declined_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.accepted)


@dataclass
class ResolutionProgress:
    """
    Running totals across rounds.

    max_unresolved is the largest unresolved count seen in any round and
    becomes the reported denominator. max_resolved is the largest count
    the host accepted in a single round. outstanding is what the last
    round left unresolved.
    """

    max_unresolved: int = 0
    max_resolved: int = 0
    attempts: int = 0
    outstanding: int = 0
    rounds: list[RoundSummary] = field(default_factory=list)

    def record(self, summary: RoundSummary) -> None:
        """Fold a finished round into the running totals."""
        self.rounds.append(summary)
        self.max_unresolved = max(self.max_unresolved, summary.unresolved_count)
        self.max_resolved = max(self.max_resolved, summary.resolved_count)
        self.outstanding = max(summary.unresolved_count - summary.resolved_count, 0)

    def mark_clean(self) -> None:
        """The host reported a clean merge; nothing is left outstanding."""
        self.outstanding = 0

    @property
    def resolved_count(self) -> int:
        """Number of conflicts reported as auto-resolved."""
        if self.max_unresolved == 0:
            return 0
        return max(self.max_resolved, self.max_unresolved - self.outstanding)

    @property
    def remaining(self) -> int:
        return self.max_unresolved - self.resolved_count


@dataclass
class EngineResult:
    """Terminal state and totals of one engine run."""

    state: LoopState
    progress: ResolutionProgress = field(default_factory=ResolutionProgress)
