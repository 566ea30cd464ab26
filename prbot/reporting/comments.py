"""
Pull request comments for conflict resolution.

Posts the transient progress comment, removes it again, and posts the
final summary. Comment failures never affect the resolution outcome;
they are logged and dropped here.
"""

import logging
from typing import Optional

from prbot.gateway.base import HostGateway, HostGatewayError
from prbot.gateway.models import CommentThread, ThreadStatus
from prbot.merge.models import ResolutionProgress
from prbot.telemetry.events import (
    CONFLICT_RESOLUTION_COMMENT_ADDED,
    MANUAL_CONFLICT_RESOLUTION_COMMENT_ADDED,
    record_event,
)

logger = logging.getLogger(__name__)

PROGRESS_MESSAGE = (
    "I am currently attempting to resolve the active conflicts. "
    "Please wait a few seconds, and I'll let you know when I'm done. Thanks!"
)
PARTIAL_MESSAGE = (
    "I have auto-resolved {resolved} out of {unresolved} conflicts. "
    "You'll need to manually resolve the remaining {remaining} conflicts."
)
ALL_RESOLVED_MESSAGE = "I have auto-resolved all of the conflicts. ({resolved} out of {unresolved})"
NONE_RESOLVED_MESSAGE = (
    "I am not able to auto-resolve any of the active conflicts. "
    "Please manually resolve all remaining conflicts."
)


class CommentOperationFailure(Exception):
    """A comment could not be created, updated or deleted."""


class ProgressReporter:
    """Writes conflict resolution comments to a pull request."""

    def __init__(self, gateway: HostGateway):
        self.gateway = gateway

    async def add_comment(
        self,
        repository_id: str,
        pull_request_id: int,
        message: str,
        status: ThreadStatus = ThreadStatus.ACTIVE,
        allow_duplicates: bool = False,
    ) -> CommentThread:
        """
        Post a comment thread.

        Without allow_duplicates, a thread whose first comment already
        equals message is reused. Its status is updated when it differs.

        Raises:
            CommentOperationFailure: host call failed
        """
        try:
            if not allow_duplicates:
                existing = await self.gateway.find_thread_by_content(
                    repository_id, pull_request_id, message
                )
                if existing is not None:
                    if existing.status != status:
                        existing = await self.gateway.update_thread(
                            repository_id, pull_request_id, existing.thread_id, status
                        )
                    logger.debug(f"Reusing comment thread {existing.thread_id} on PR {pull_request_id}")
                    return existing

            return await self.gateway.create_thread(
                repository_id, pull_request_id, message, status=status
            )
        except HostGatewayError as e:
            raise CommentOperationFailure(f"Failed to add comment to PR {pull_request_id}: {e}") from e

    async def post_progress(
        self,
        repository_id: str,
        pull_request_id: int,
    ) -> Optional[CommentThread]:
        """Post the transient progress comment. Returns None if that failed."""
        try:
            return await self.add_comment(repository_id, pull_request_id, PROGRESS_MESSAGE)
        except CommentOperationFailure as e:
            logger.warning(str(e))
            return None

    async def clear_progress(
        self,
        repository_id: str,
        pull_request_id: int,
        thread: Optional[CommentThread],
    ) -> None:
        """Delete the progress comment posted by post_progress."""
        if thread is None or thread.first_comment is None:
            return
        try:
            await self.gateway.delete_comment(
                repository_id,
                pull_request_id,
                thread.thread_id,
                thread.first_comment.comment_id,
            )
        except HostGatewayError as e:
            logger.warning(
                f"Failed to delete progress comment on PR {pull_request_id}: {e}",
                extra={"thread_id": thread.thread_id},
            )

    async def post_summary(
        self,
        repository_id: str,
        pull_request_id: int,
        progress: ResolutionProgress,
    ) -> Optional[CommentThread]:
        """
        Post the final summary for a finished run.

        Nothing is posted when no unresolved conflict was ever seen.
        """
        if progress.max_unresolved == 0:
            return None

        resolved = progress.resolved_count
        unresolved = progress.max_unresolved

        if resolved > 0:
            remaining = progress.remaining
            if remaining > 0:
                message = PARTIAL_MESSAGE.format(
                    resolved=resolved, unresolved=unresolved, remaining=remaining
                )
                status = ThreadStatus.ACTIVE
            else:
                message = ALL_RESOLVED_MESSAGE.format(resolved=resolved, unresolved=unresolved)
                status = ThreadStatus.FIXED
            event = CONFLICT_RESOLUTION_COMMENT_ADDED
            allow_duplicates = True
        else:
            message = NONE_RESOLVED_MESSAGE
            status = ThreadStatus.ACTIVE
            event = MANUAL_CONFLICT_RESOLUTION_COMMENT_ADDED
            allow_duplicates = False

        try:
            thread = await self.add_comment(
                repository_id,
                pull_request_id,
                message,
                status=status,
                allow_duplicates=allow_duplicates,
            )
        except CommentOperationFailure as e:
            logger.warning(str(e))
            return None

        record_event(
            event,
            pull_request_id=pull_request_id,
            repository_id=repository_id,
            resolved=resolved,
            unresolved=unresolved,
        )
        logger.info(f"PR {pull_request_id}: {message}")
        return thread
