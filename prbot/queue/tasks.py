"""
Celery task definitions for prbot.

A pull request update that leaves the merge in conflict is dispatched to
resolve_pull_request_conflicts, which runs the engine once and asks
Celery to retry the whole invocation if it did not finish cleanly.
"""

import asyncio
import logging
from typing import Any, Optional

from celery import Task

from prbot.config.settings import get_settings
from prbot.gateway.azure_devops import AzureDevOpsGateway
from prbot.gateway.urls import extract_account_name
from prbot.merge.engine import ConflictResolutionEngine
from prbot.queue.celery_app import app
from prbot.telemetry.config import get_tracer

logger = logging.getLogger(__name__)


class PRBotTask(Task):
    """Base task class with error handling and logging."""

    abstract = True

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        """Handle task failure."""
        logger.error(
            f"Task {task_id} failed: {exc}",
            extra={
                "task_id": task_id,
                "task_args": args,
                "exception": str(exc),
            },
        )

    def on_success(self, retval, task_id, args, kwargs):
        """Handle task success."""
        logger.info(
            f"Task {task_id} completed successfully",
            extra={"task_id": task_id},
        )

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        """Handle task retry."""
        logger.warning(
            f"Task {task_id} retrying: {exc}",
            extra={"task_id": task_id, "exception": str(exc)},
        )


def telemetry_properties(
    message_id: str,
    account_url: str,
    repository_id: str,
    pull_request_id: int,
) -> dict[str, Any]:
    """Base properties attached to every span and log line of an invocation."""
    return {
        "prbot.message_id": message_id,
        "prbot.account": extract_account_name(account_url) or account_url,
        "prbot.actor": get_settings().otel_service_name,
        "prbot.repository_id": repository_id,
        "prbot.pull_request_id": pull_request_id,
    }


async def _run_engine(
    account_url: str,
    project: Optional[str],
    repository_id: str,
    pull_request_id: int,
) -> bool:
    gateway = AzureDevOpsGateway.from_settings(
        get_settings(),
        account_url=account_url,
        project=project,
    )
    try:
        engine = ConflictResolutionEngine(gateway)
        return await engine.resolve(repository_id, pull_request_id)
    finally:
        await gateway.close()


@app.task(base=PRBotTask, bind=True, name="prbot.queue.tasks.resolve_pull_request_conflicts")
def resolve_pull_request_conflicts(
    self,
    message_id: str,
    account_url: str,
    project: Optional[str],
    repository_id: str,
    pull_request_id: int,
) -> dict[str, Any]:
    """
    Auto-resolve merge conflicts on one pull request.

    Args:
        message_id: Id of the triggering service bus message
        account_url: Organization URL
        project: Project name or id
        repository_id: Repository id
        pull_request_id: Pull request id

    Returns:
        Invocation result dictionary
    """
    settings = get_settings()
    properties = telemetry_properties(message_id, account_url, repository_id, pull_request_id)

    logger.info(
        f"Resolving conflicts on PR {pull_request_id} in {repository_id}",
        extra=properties,
    )

    tracer = get_tracer(__name__)
    with tracer.start_as_current_span("task.resolve_pull_request_conflicts", attributes=properties):
        outcome = asyncio.run(_run_engine(account_url, project, repository_id, int(pull_request_id)))

    if not outcome:
        raise self.retry(
            exc=RuntimeError(f"Conflict resolution for PR {pull_request_id} did not complete"),
            countdown=settings.task_retry_countdown,
            max_retries=settings.task_max_retries,
        )

    return {
        "message_id": message_id,
        "repository_id": repository_id,
        "pull_request_id": pull_request_id,
        "success": outcome,
    }
