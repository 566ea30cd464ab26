"""
Conflict resolution engine.

Runs the convergence loop for one pull request: wait for the host's
merge, discover conflicts, resolve the supported ones, submit the
results, and repeat until the merge is clean, no progress is made, or
the round limit is reached. Progress and the final outcome are
reported as pull request comments.
"""

import asyncio
import logging
from typing import Optional

from prbot.config.settings import get_settings
from prbot.gateway.base import (
    BlobNotFound,
    HostGateway,
    HostGatewayError,
    PullRequestNotEditable,
)
from prbot.gateway.models import (
    Conflict,
    MergeStatus,
    SubmissionOutcome,
    SubmissionResult,
)
from prbot.merge.exceptions import ConflictResolutionFailure, ProtectedSectionConflict
from prbot.merge.models import (
    ConflictOutcome,
    EngineResult,
    LoopState,
    ResolutionProgress,
    ResolutionResult,
    RoundSummary,
)
from prbot.merge.ordering import BatchEntry, BatchOrderer
from prbot.merge.registry import ResolverRegistry, build_default_registry
from prbot.reporting.comments import ProgressReporter
from prbot.telemetry.decorators import trace_async
from prbot.telemetry.events import (
    MERGE_CONFLICT_IN_PROTECTED_SECTION,
    PULL_REQUEST_ABANDONED_DURING_RESOLUTION,
    conflict_resolved_event,
    record_event,
    resolution_failed_event,
)

logger = logging.getLogger(__name__)


class ConflictResolutionEngine:
    """
    Auto-resolves merge conflicts on a pull request.

    One engine run handles one pull request. The engine keeps no state
    between runs apart from the configured collaborators.
    """

    def __init__(
        self,
        gateway: HostGateway,
        registry: Optional[ResolverRegistry] = None,
        reporter: Optional[ProgressReporter] = None,
        orderer: Optional[BatchOrderer] = None,
        poll_interval: Optional[float] = None,
        max_rounds: Optional[int] = None,
    ):
        """
        Initialize engine.

        Args:
            gateway: Host API
            registry: Resolvers by category (defaults to the configured tools)
            reporter: Comment writer (defaults to one on gateway)
            orderer: Batch ordering
            poll_interval: Seconds between merge status polls
            max_rounds: Upper bound on resolve/submit rounds
        """
        settings = get_settings()

        self.gateway = gateway
        self.registry = registry or build_default_registry()
        self.reporter = reporter or ProgressReporter(gateway)
        self.orderer = orderer or BatchOrderer()
        self.poll_interval = settings.merge_poll_interval if poll_interval is None else poll_interval
        self.max_rounds = settings.max_resolution_rounds if max_rounds is None else max_rounds
        self.state = LoopState.IDLE

    @trace_async("engine.resolve")
    async def resolve(self, repository_id: str, pull_request_id: int) -> bool:
        """
        Resolve what can be resolved on a pull request.

        Returns:
            True when the run finished (converged, exhausted, aborted or
            nothing to do), False when an unrecovered error ended it
        """
        try:
            result = await self.run(repository_id, pull_request_id)
        except Exception as e:
            logger.exception(
                f"Conflict resolution failed for PR {pull_request_id}: {e}",
                extra={"repository_id": repository_id, "pull_request_id": pull_request_id},
            )
            return False

        if result is not None:
            logger.info(
                f"PR {pull_request_id} finished {result.state.value}: "
                f"{result.progress.resolved_count} of {result.progress.max_unresolved} "
                f"conflicts resolved in {result.progress.attempts} round(s)"
            )
        return True

    async def run(self, repository_id: str, pull_request_id: int) -> Optional[EngineResult]:
        """
        Run the engine and return its terminal state.

        Host errors propagate. Returns None when the pull request needs
        no work.
        """
        self.state = LoopState.IDLE

        pull_request = await self.gateway.get_pull_request(repository_id, pull_request_id)
        if not pull_request.is_active:
            logger.info(f"PR {pull_request_id} is {pull_request.status.value}; nothing to resolve")
            return None

        self._transition(LoopState.WAITING_FOR_MERGE, pull_request_id)
        status = await self._wait_for_merge(repository_id, pull_request_id)
        if status != MergeStatus.CONFLICTS:
            logger.info(f"PR {pull_request_id} merge status is {status.value}; nothing to resolve")
            return None

        progress_thread = await self.reporter.post_progress(repository_id, pull_request_id)
        try:
            result = await self._run_loop(repository_id, pull_request_id, status)
        finally:
            await self.reporter.clear_progress(repository_id, pull_request_id, progress_thread)

        if result.state != LoopState.ABORTED:
            await self.reporter.post_summary(repository_id, pull_request_id, result.progress)

        return result

    async def plan(self, repository_id: str, pull_request_id: int) -> list[BatchEntry]:
        """
        Return the batch the next round would resolve, without touching it.

        Only conflicts with a registered resolver are included.
        """
        conflicts = await self.gateway.list_conflicts(repository_id, pull_request_id)
        return self._build_batch(conflicts)

    def _transition(self, state: LoopState, pull_request_id: int) -> None:
        logger.debug(f"PR {pull_request_id}: {self.state.value} -> {state.value}")
        self.state = state

    async def _wait_for_merge(self, repository_id: str, pull_request_id: int) -> MergeStatus:
        """Poll until the host has finished computing the merge."""
        status = await self.gateway.get_merge_status(repository_id, pull_request_id)
        while status == MergeStatus.QUEUED:
            await asyncio.sleep(self.poll_interval)
            status = await self.gateway.get_merge_status(repository_id, pull_request_id)
        return status

    def _build_batch(self, conflicts: list[Conflict]) -> list[BatchEntry]:
        return [
            entry
            for entry in self.orderer.order(conflicts)
            if self.registry.resolver_for(entry.conflict) is not None
        ]

    async def _run_loop(
        self,
        repository_id: str,
        pull_request_id: int,
        status: MergeStatus,
    ) -> EngineResult:
        progress = ResolutionProgress()

        while True:
            if status != MergeStatus.CONFLICTS:
                if status == MergeStatus.SUCCEEDED:
                    progress.mark_clean()
                return self._finish(LoopState.CONVERGED, progress, pull_request_id)

            self._transition(LoopState.DISCOVERING, pull_request_id)
            conflicts = await self.gateway.list_conflicts(repository_id, pull_request_id)
            unresolved = [conflict for conflict in conflicts if not conflict.is_resolved]
            if not unresolved:
                progress.mark_clean()
                return self._finish(LoopState.CONVERGED, progress, pull_request_id)

            progress.attempts += 1
            summary = RoundSummary(round_number=progress.attempts, unresolved_count=len(unresolved))
            batch = self._build_batch(unresolved)

            logger.info(
                f"PR {pull_request_id} round {summary.round_number}: "
                f"{len(unresolved)} unresolved, {len(batch)} auto-resolvable"
            )

            self._transition(LoopState.RESOLVING, pull_request_id)
            summary.outcomes = await self._resolve_batch(repository_id, batch)

            self._transition(LoopState.SUBMITTING, pull_request_id)
            aborted = await self._submit_batch(repository_id, pull_request_id, summary.outcomes)
            progress.record(summary)

            if aborted:
                record_event(
                    PULL_REQUEST_ABANDONED_DURING_RESOLUTION,
                    repository_id=repository_id,
                    pull_request_id=pull_request_id,
                )
                return self._finish(LoopState.ABORTED, progress, pull_request_id)

            if summary.resolved_count == 0:
                return self._finish(LoopState.EXHAUSTED, progress, pull_request_id)

            if progress.attempts >= self.max_rounds:
                logger.warning(f"PR {pull_request_id}: giving up after {progress.attempts} rounds")
                return self._finish(LoopState.EXHAUSTED, progress, pull_request_id)

            self._transition(LoopState.WAITING_FOR_MERGE, pull_request_id)
            status = await self._wait_for_merge(repository_id, pull_request_id)

    def _finish(self, state: LoopState, progress: ResolutionProgress, pull_request_id: int) -> EngineResult:
        self._transition(state, pull_request_id)
        return EngineResult(state=state, progress=progress)

    async def _resolve_batch(self, repository_id: str, batch: list[BatchEntry]) -> list[ConflictOutcome]:
        """Resolve every entry concurrently. Results keep batch order."""
        outcomes = await asyncio.gather(
            *(self._resolve_one(repository_id, entry) for entry in batch)
        )
        return list(outcomes)

    async def _resolve_one(self, repository_id: str, entry: BatchEntry) -> ConflictOutcome:
        conflict = entry.conflict
        outcome = ConflictOutcome(conflict=conflict, category=entry.category)
        resolver = self.registry.resolver_for(conflict)

        try:
            source, target, base = await asyncio.gather(
                self._fetch_blob(repository_id, conflict.source_object_id),
                self._fetch_blob(repository_id, conflict.target_object_id),
                self._fetch_blob(repository_id, conflict.base_object_id, required=False),
            )
            outcome.result = await resolver.resolve(source, target, base, conflict)
        except ProtectedSectionConflict as e:
            logger.warning(str(e))
            record_event(
                MERGE_CONFLICT_IN_PROTECTED_SECTION,
                path=conflict.path,
                conflict_id=conflict.conflict_id,
            )
            outcome.result = ResolutionResult.declined(str(e), resolver=resolver.resolver_name)
            outcome.error = str(e)
        except (ConflictResolutionFailure, HostGatewayError) as e:
            logger.warning(f"Could not resolve {conflict.path}: {e}")
            record_event(resolution_failed_event(conflict.path), path=conflict.path, error=str(e))
            outcome.result = ResolutionResult.declined(str(e), resolver=resolver.resolver_name)
            outcome.error = str(e)
        except Exception as e:
            logger.exception(f"Unexpected error resolving {conflict.path}: {e}")
            record_event(resolution_failed_event(conflict.path), path=conflict.path, error=str(e))
            outcome.result = ResolutionResult.declined(str(e), resolver=resolver.resolver_name)
            outcome.error = str(e)

        return outcome

    async def _fetch_blob(self, repository_id: str, object_id: Optional[str], required: bool = True) -> bytes:
        if not object_id:
            if required:
                raise BlobNotFound("")
            return b""
        return await self.gateway.get_blob(repository_id, object_id)

    async def _submit_batch(
        self,
        repository_id: str,
        pull_request_id: int,
        outcomes: list[ConflictOutcome],
    ) -> bool:
        """
        Submit accepted resolutions one at a time in batch order.

        Returns:
            True if the host refused edits and the run must abort
        """
        for outcome in outcomes:
            if not outcome.accepted:
                continue

            conflict = outcome.conflict
            try:
                submission = await self.gateway.submit_resolution(
                    repository_id, pull_request_id, conflict, outcome.result.content
                )
            except PullRequestNotEditable as e:
                submission = SubmissionResult(
                    outcome=SubmissionOutcome.REJECTED_NOT_EDITABLE,
                    conflict=conflict,
                    error=str(e),
                )
            except HostGatewayError as e:
                submission = SubmissionResult(
                    outcome=SubmissionOutcome.TRANSPORT_ERROR,
                    conflict=conflict,
                    error=str(e),
                )
            outcome.submission = submission

            if submission.outcome == SubmissionOutcome.REJECTED_NOT_EDITABLE:
                logger.warning(
                    f"PR {pull_request_id} can no longer be edited; stopping "
                    f"({submission.error})"
                )
                return True

            if submission.applied:
                logger.info(f"Resolved {conflict.path} with {outcome.result.resolver}")
                record_event(
                    conflict_resolved_event(conflict.path),
                    path=conflict.path,
                    pull_request_id=pull_request_id,
                )
            else:
                outcome.error = submission.error or submission.outcome.value
                logger.warning(
                    f"Submitting {conflict.path} failed: {outcome.error}",
                    extra={"submission_outcome": submission.outcome.value},
                )
                record_event(
                    resolution_failed_event(conflict.path),
                    path=conflict.path,
                    pull_request_id=pull_request_id,
                    error=outcome.error,
                )

        return False
