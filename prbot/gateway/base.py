"""Abstract base class for source-control host gateways."""

from abc import ABC, abstractmethod
from typing import Optional

from prbot.gateway.models import (
    CommentThread,
    Conflict,
    MergeStatus,
    PullRequestHandle,
    SubmissionResult,
    ThreadStatus,
)


class HostGatewayError(Exception):
    """Base class for host gateway failures."""


class HostUnavailable(HostGatewayError):
    """Transport or API failure talking to the host."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BlobNotFound(HostGatewayError):
    """Requested blob does not exist on the host."""

    def __init__(self, object_id: str):
        super().__init__(f"Blob not found: {object_id}")
        self.object_id = object_id


class PullRequestNotEditable(HostGatewayError):
    """The pull request left the active state and can no longer be edited."""


class HostGateway(ABC):
    """
    Abstract base class for the remote version-control API.

    Implementations must raise HostUnavailable for transport errors.
    submit_resolution never raises for host-side rejections; it returns
    a tagged SubmissionResult instead.
    """

    @abstractmethod
    async def get_pull_request(
        self,
        repository_id: str,
        pull_request_id: int,
    ) -> PullRequestHandle:
        """Fetch the current state of a pull request."""
        pass

    async def get_merge_status(
        self,
        repository_id: str,
        pull_request_id: int,
    ) -> MergeStatus:
        """Fetch only the merge status of a pull request."""
        pull_request = await self.get_pull_request(repository_id, pull_request_id)
        return pull_request.merge_status

    @abstractmethod
    async def list_conflicts(
        self,
        repository_id: str,
        pull_request_id: int,
    ) -> list[Conflict]:
        """Return the current conflict snapshot. Order is not guaranteed."""
        pass

    @abstractmethod
    async def get_blob(self, repository_id: str, object_id: str) -> bytes:
        """Fetch file content by object id. Raises BlobNotFound."""
        pass

    @abstractmethod
    async def submit_resolution(
        self,
        repository_id: str,
        pull_request_id: int,
        conflict: Conflict,
        content: bytes,
    ) -> SubmissionResult:
        """Replace the conflicted file with content and mark it resolved."""
        pass

    @abstractmethod
    async def list_threads(
        self,
        repository_id: str,
        pull_request_id: int,
    ) -> list[CommentThread]:
        """List comment threads on a pull request."""
        pass

    async def find_thread_by_content(
        self,
        repository_id: str,
        pull_request_id: int,
        content: str,
    ) -> Optional[CommentThread]:
        """
        Find a thread whose first comment matches content exactly.

        Only the first comment of each thread is compared.
        """
        threads = await self.list_threads(repository_id, pull_request_id)
        for thread in threads:
            first = thread.first_comment
            if first is not None and first.content == content:
                return thread
        return None

    @abstractmethod
    async def create_thread(
        self,
        repository_id: str,
        pull_request_id: int,
        content: str,
        status: ThreadStatus = ThreadStatus.ACTIVE,
    ) -> CommentThread:
        """Create a thread with a single text comment."""
        pass

    @abstractmethod
    async def update_thread(
        self,
        repository_id: str,
        pull_request_id: int,
        thread_id: int,
        status: ThreadStatus,
    ) -> CommentThread:
        """Update the status of a thread."""
        pass

    @abstractmethod
    async def delete_comment(
        self,
        repository_id: str,
        pull_request_id: int,
        thread_id: int,
        comment_id: int,
    ) -> None:
        """Delete a single comment from a thread."""
        pass

    async def close(self) -> None:
        """Clean up gateway resources."""
        pass
