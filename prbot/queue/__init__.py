"""
Queue module for prbot.

Provides Celery configuration and task definitions.
"""

from prbot.queue.celery_app import app as celery_app
from prbot.queue.tasks import resolve_pull_request_conflicts

__all__ = [
    "celery_app",
    "resolve_pull_request_conflicts",
]
