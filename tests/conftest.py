"""Pytest configuration and fixtures for prbot tests."""

import asyncio
from typing import Optional

import pytest

from prbot.gateway.base import BlobNotFound, HostGateway
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
from prbot.merge.categories import ConflictCategory
from prbot.merge.engine import ConflictResolutionEngine
from prbot.merge.models import ResolutionResult
from prbot.merge.registry import ResolverRegistry
from prbot.merge.resolvers.base import BaseResolver
from prbot.merge.resolvers.counter import CounterResolver

REPOSITORY_ID = "0f2c5a3e-repo"
PULL_REQUEST_ID = 42

BUILD_CONFIG_PATH = "/src/.corext/Configs/default.config"
MANIFEST_PATH = "/src/.corext/Configs/components.json"
COUNTER_PATH = "/src/revision.txt"
VERSION_PATH = "/src/.corext/Configs/vsversion.json"


class FakeHostGateway(HostGateway):
    """
    In-memory host.

    Merge status is derived from the conflict list: conflicts while any
    conflict is unresolved, succeeded otherwise. Scripted statuses in
    merge_statuses are returned first. applied_limit caps how many
    submissions the host accepts between two conflict listings; the rest
    come back NOT_ACCEPTED.

    submission_errors raises per conflict id from submit_resolution. The
    blob and submission gates hold a call until the test releases them.
    """

    def __init__(
        self,
        repository_id: str = REPOSITORY_ID,
        pull_request_id: int = PULL_REQUEST_ID,
        status: PullRequestStatus = PullRequestStatus.ACTIVE,
    ):
        self.pull_request = PullRequestHandle(
            repository_id=repository_id,
            pull_request_id=pull_request_id,
            status=status,
        )
        self.conflicts: list[Conflict] = []
        self.blobs: dict[str, bytes] = {}
        self.threads: list[CommentThread] = []
        self.merge_statuses: list[MergeStatus] = []
        self.submissions: list[tuple[str, bytes]] = []
        self.submission_outcomes: dict[int, SubmissionOutcome] = {}
        self.deleted_comments: list[tuple[int, int]] = []
        self.applied_limit: Optional[int] = None
        self.failures: dict[str, Exception] = {}
        self.blob_gate: Optional[asyncio.Event] = None
        self.blob_requested = asyncio.Event()
        self.submission_gate: Optional[asyncio.Event] = None
        self.submission_requested = asyncio.Event()
        self.submission_errors: dict[int, Exception] = {}
        self.queued_returned = asyncio.Event()
        self.merge_status_calls = 0
        self.list_conflicts_calls = 0
        self.closed = False
        self._applied_since_listing = 0
        self._next_id = 1

    def _new_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def _maybe_fail(self, operation: str) -> None:
        error = self.failures.get(operation)
        if error is not None:
            raise error

    def add_conflict(
        self,
        path: str,
        source: bytes = b"",
        target: bytes = b"",
        base: bytes = b"",
        conflict_type: ConflictType = ConflictType.EDIT_EDIT,
    ) -> Conflict:
        conflict_id = self._new_id()
        conflict = Conflict(
            conflict_id=conflict_id,
            path=path,
            conflict_type=conflict_type,
            source_object_id=f"source-{conflict_id}",
            target_object_id=f"target-{conflict_id}",
            base_object_id=f"base-{conflict_id}",
        )
        self.blobs[conflict.source_object_id] = source
        self.blobs[conflict.target_object_id] = target
        self.blobs[conflict.base_object_id] = base
        self.conflicts.append(conflict)
        return conflict

    def add_thread(self, content: str, status: ThreadStatus = ThreadStatus.ACTIVE) -> CommentThread:
        thread = CommentThread(
            thread_id=self._new_id(),
            status=status,
            comments=[Comment(comment_id=self._new_id(), content=content)],
        )
        self.threads.append(thread)
        return thread

    @property
    def unresolved(self) -> list[Conflict]:
        return [conflict for conflict in self.conflicts if not conflict.is_resolved]

    @property
    def visible_comments(self) -> list[str]:
        return [comment.content for thread in self.threads for comment in thread.comments]

    async def get_pull_request(self, repository_id: str, pull_request_id: int) -> PullRequestHandle:
        self._maybe_fail("get_pull_request")
        self.merge_status_calls += 1
        if self.merge_statuses:
            merge_status = self.merge_statuses.pop(0)
        elif self.unresolved:
            merge_status = MergeStatus.CONFLICTS
        else:
            merge_status = MergeStatus.SUCCEEDED
        self.pull_request.merge_status = merge_status
        if merge_status == MergeStatus.QUEUED:
            self.queued_returned.set()
        return self.pull_request

    async def list_conflicts(self, repository_id: str, pull_request_id: int) -> list[Conflict]:
        self._maybe_fail("list_conflicts")
        self.list_conflicts_calls += 1
        self._applied_since_listing = 0
        return list(self.conflicts)

    async def get_blob(self, repository_id: str, object_id: str) -> bytes:
        self._maybe_fail("get_blob")
        self.blob_requested.set()
        if self.blob_gate is not None:
            await self.blob_gate.wait()
        if object_id not in self.blobs:
            raise BlobNotFound(object_id)
        return self.blobs[object_id]

    async def submit_resolution(
        self,
        repository_id: str,
        pull_request_id: int,
        conflict: Conflict,
        content: bytes,
    ) -> SubmissionResult:
        self.submissions.append((conflict.path, content))
        self.submission_requested.set()
        if self.submission_gate is not None:
            await self.submission_gate.wait()
        error = self.submission_errors.get(conflict.conflict_id)
        if error is not None:
            raise error

        outcome = self.submission_outcomes.get(conflict.conflict_id, SubmissionOutcome.APPLIED)
        if outcome == SubmissionOutcome.APPLIED and self.applied_limit is not None:
            if self._applied_since_listing >= self.applied_limit:
                outcome = SubmissionOutcome.NOT_ACCEPTED

        if outcome != SubmissionOutcome.APPLIED:
            return SubmissionResult(outcome=outcome, conflict=conflict, error=outcome.value)

        self._applied_since_listing += 1
        conflict.resolution_status = ConflictResolutionStatus.RESOLVED
        return SubmissionResult(outcome=outcome, conflict=conflict)

    async def list_threads(self, repository_id: str, pull_request_id: int) -> list[CommentThread]:
        self._maybe_fail("list_threads")
        return list(self.threads)

    async def create_thread(
        self,
        repository_id: str,
        pull_request_id: int,
        content: str,
        status: ThreadStatus = ThreadStatus.ACTIVE,
    ) -> CommentThread:
        self._maybe_fail("create_thread")
        return self.add_thread(content, status)

    async def update_thread(
        self,
        repository_id: str,
        pull_request_id: int,
        thread_id: int,
        status: ThreadStatus,
    ) -> CommentThread:
        self._maybe_fail("update_thread")
        for thread in self.threads:
            if thread.thread_id == thread_id:
                thread.status = status
                return thread
        raise KeyError(thread_id)

    async def delete_comment(
        self,
        repository_id: str,
        pull_request_id: int,
        thread_id: int,
        comment_id: int,
    ) -> None:
        self._maybe_fail("delete_comment")
        self.deleted_comments.append((thread_id, comment_id))
        for thread in self.threads:
            if thread.thread_id == thread_id:
                thread.comments = [c for c in thread.comments if c.comment_id != comment_id]

    async def close(self) -> None:
        self.closed = True


class StaticResolver(BaseResolver):
    """Resolver that returns fixed content, or declines when content is None."""

    def __init__(self, category: ConflictCategory, content: Optional[bytes] = b"merged\n"):
        self.category = category
        self.resolver_name = f"static_{category.value}"
        self.content = content
        self.calls: list[str] = []

    async def resolve(self, source, target, base, conflict) -> ResolutionResult:
        self.calls.append(conflict.path)
        if self.content is None:
            return ResolutionResult.declined("static decline", resolver=self.resolver_name)
        return ResolutionResult.merged(self.content, resolver=self.resolver_name)


@pytest.fixture
def gateway() -> FakeHostGateway:
    """Create an in-memory host gateway."""
    return FakeHostGateway()


@pytest.fixture
def registry() -> ResolverRegistry:
    """Registry with the counter resolver and static resolvers for the tool categories."""
    return ResolverRegistry([
        StaticResolver(ConflictCategory.BUILD_CONFIG),
        StaticResolver(ConflictCategory.DEPENDENCY_MANIFEST),
        CounterResolver(),
        StaticResolver(ConflictCategory.VERSION_DESCRIPTOR),
    ])


@pytest.fixture
def engine(gateway: FakeHostGateway, registry: ResolverRegistry) -> ConflictResolutionEngine:
    """Create an engine that does not sleep between polls."""
    return ConflictResolutionEngine(
        gateway,
        registry=registry,
        poll_interval=0,
        max_rounds=15,
    )
