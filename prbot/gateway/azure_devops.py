"""Azure DevOps implementation of the host gateway."""

import base64
import logging
from typing import Any, Optional

import httpx

from prbot.config.settings import Settings
from prbot.gateway.base import (
    BlobNotFound,
    HostGateway,
    HostUnavailable,
    PullRequestNotEditable,
)
from prbot.gateway.models import (
    CommentThread,
    Conflict,
    PullRequestHandle,
    SubmissionOutcome,
    SubmissionResult,
    ThreadStatus,
)
from prbot.gateway.urls import build_api_base

logger = logging.getLogger(__name__)

# "TF401181: The pull request cannot be edited due to its state."
NOT_EDITABLE_ERROR_CODE = "TF401181"


class AzureDevOpsGateway(HostGateway):
    """
    Gateway for the Azure DevOps Git REST API.

    Authenticates with a personal access token over basic auth.
    """

    def __init__(
        self,
        account_url: str,
        token: str,
        project: Optional[str] = None,
        api_version: str = "7.1",
        timeout: float = 30.0,
    ):
        """
        Initialize the gateway.

        Args:
            account_url: Organization URL (e.g., https://dev.azure.com/contoso)
            token: Personal access token
            project: Optional project name or id
            api_version: REST API version sent with every request
            timeout: Request timeout in seconds
        """
        self.account_url = account_url.rstrip("/")
        self.endpoint = build_api_base(account_url, project)
        self.api_version = api_version
        self.timeout = timeout
        self._token = token
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        account_url: Optional[str] = None,
        project: Optional[str] = None,
    ) -> "AzureDevOpsGateway":
        """Create a gateway from application settings."""
        return cls(
            account_url=account_url or settings.account_url,
            token=settings.token,
            project=project or settings.project,
            api_version=settings.api_version,
            timeout=settings.http_timeout,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                auth=("", self._token),
                params={"api-version": self.api_version},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _repository_url(self, repository_id: str) -> str:
        return f"{self.endpoint}/_apis/git/repositories/{repository_id}"

    def _pull_request_url(self, repository_id: str, pull_request_id: int) -> str:
        return f"{self._repository_url(repository_id)}/pullRequests/{pull_request_id}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request and map failures onto gateway errors.

        Raises:
            PullRequestNotEditable: host reported the pull request is locked
            HostUnavailable: any other transport or HTTP error
        """
        client = await self._get_client()
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            if message.startswith(NOT_EDITABLE_ERROR_CODE):
                raise PullRequestNotEditable(message) from e
            raise HostUnavailable(
                f"{method} {url} returned {e.response.status_code}: {message}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise HostUnavailable(f"{method} {url} failed: {e}") from e
        return response

    async def get_pull_request(
        self,
        repository_id: str,
        pull_request_id: int,
    ) -> PullRequestHandle:
        response = await self._request(
            "GET", self._pull_request_url(repository_id, pull_request_id)
        )
        handle = PullRequestHandle.from_dict(response.json())
        handle.repository_id = handle.repository_id or repository_id
        return handle

    async def list_conflicts(
        self,
        repository_id: str,
        pull_request_id: int,
    ) -> list[Conflict]:
        response = await self._request(
            "GET",
            f"{self._pull_request_url(repository_id, pull_request_id)}/conflicts",
        )
        return [Conflict.from_dict(item) for item in response.json().get("value", [])]

    async def get_blob(self, repository_id: str, object_id: str) -> bytes:
        try:
            response = await self._request(
                "GET",
                f"{self._repository_url(repository_id)}/blobs/{object_id}",
                params={"$format": "octetstream"},
            )
        except HostUnavailable as e:
            if e.status_code == 404:
                raise BlobNotFound(object_id) from e
            raise
        return response.content

    async def submit_resolution(
        self,
        repository_id: str,
        pull_request_id: int,
        conflict: Conflict,
        content: bytes,
    ) -> SubmissionResult:
        payload = {
            "conflictId": conflict.conflict_id,
            "conflictPath": conflict.path,
            "conflictType": conflict.conflict_type.value,
            "resolutionStatus": "resolved",
            "resolution": {
                "mergeType": "userMerged",
                "userMergedContent": base64.b64encode(content).decode("ascii"),
            },
        }
        url = (
            f"{self._pull_request_url(repository_id, pull_request_id)}"
            f"/conflicts/{conflict.conflict_id}"
        )

        try:
            response = await self._request("PATCH", url, json=payload)
        except PullRequestNotEditable as e:
            return SubmissionResult(
                outcome=SubmissionOutcome.REJECTED_NOT_EDITABLE,
                conflict=conflict,
                error=str(e),
            )
        except HostUnavailable as e:
            return SubmissionResult(
                outcome=SubmissionOutcome.TRANSPORT_ERROR,
                conflict=conflict,
                error=str(e),
            )

        updated = Conflict.from_dict(response.json())
        return SubmissionResult(
            outcome=SubmissionOutcome.APPLIED if updated.is_resolved else SubmissionOutcome.NOT_ACCEPTED,
            conflict=updated,
        )

    async def list_threads(
        self,
        repository_id: str,
        pull_request_id: int,
    ) -> list[CommentThread]:
        response = await self._request(
            "GET",
            f"{self._pull_request_url(repository_id, pull_request_id)}/threads",
        )
        return [CommentThread.from_dict(item) for item in response.json().get("value", [])]

    async def create_thread(
        self,
        repository_id: str,
        pull_request_id: int,
        content: str,
        status: ThreadStatus = ThreadStatus.ACTIVE,
    ) -> CommentThread:
        payload = {
            "comments": [
                {
                    "parentCommentId": 0,
                    "content": content,
                    "commentType": "text",
                }
            ],
            "status": status.value,
        }
        response = await self._request(
            "POST",
            f"{self._pull_request_url(repository_id, pull_request_id)}/threads",
            json=payload,
        )
        return CommentThread.from_dict(response.json())

    async def update_thread(
        self,
        repository_id: str,
        pull_request_id: int,
        thread_id: int,
        status: ThreadStatus,
    ) -> CommentThread:
        response = await self._request(
            "PATCH",
            f"{self._pull_request_url(repository_id, pull_request_id)}/threads/{thread_id}",
            json={"status": status.value},
        )
        return CommentThread.from_dict(response.json())

    async def delete_comment(
        self,
        repository_id: str,
        pull_request_id: int,
        thread_id: int,
        comment_id: int,
    ) -> None:
        await self._request(
            "DELETE",
            f"{self._pull_request_url(repository_id, pull_request_id)}"
            f"/threads/{thread_id}/comments/{comment_id}",
        )


def _error_message(response: httpx.Response) -> str:
    """Extract the host's error message from a failed response."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return str(data.get("message", ""))
    return response.text
