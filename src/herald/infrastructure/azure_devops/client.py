"""Azure DevOps Git REST API client."""

from __future__ import annotations

import base64
import logging
import urllib.parse

from dataclasses import dataclass
from typing import Any, TypeVar, cast

from pydantic import BaseModel

from herald.infrastructure.azure_devops.models import (
    CommentThread,
    ConnectionData,
    GitCommitRef,
    PullRequest,
)
from herald.infrastructure.constants import AzureDevOpsAPI
from herald.infrastructure.http import transport
from herald.shared.exceptions import DecorationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_PLATFORM = str(AzureDevOpsAPI.PROVIDER_NAME)


def _quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe="")


@dataclass
class AzureDevOpsClient:
    """Thin wrapper around one Azure DevOps repository's pull request API.

    ``url`` is the organisation or collection URL; ``project`` and
    ``repository`` are names as shown in the web UI.
    """

    token: str
    url: str
    project: str
    repository: str

    def get_authenticated_user_id(self) -> str:
        response = transport.send(
            _PLATFORM,
            "GET",
            f"{self._root}/_apis/connectionData",
            headers=self._headers(),
        )
        data = transport.parse(
            _PLATFORM, ConnectionData, transport.json_body(_PLATFORM, response)
        )
        return data.authenticated_user.id

    def get_pull_request(self, pull_request_id: int) -> PullRequest:
        """Fetch pull request metadata.

        Raises:
            DecorationError: If the API call fails.
        """
        response = self._send("GET", f"/pullRequests/{pull_request_id}")
        return transport.parse(
            _PLATFORM, PullRequest, transport.json_body(_PLATFORM, response)
        )

    def get_commits(self, pull_request_id: int) -> list[GitCommitRef]:
        response = self._send("GET", f"/pullRequests/{pull_request_id}/commits")
        return self._values(response, GitCommitRef)

    def list_threads(self, pull_request_id: int) -> list[CommentThread]:
        response = self._send("GET", f"/pullRequests/{pull_request_id}/threads")
        return self._values(response, CommentThread)

    def create_thread(
        self, pull_request_id: int, thread: dict[str, object]
    ) -> CommentThread:
        response = self._send(
            "POST", f"/pullRequests/{pull_request_id}/threads", json=thread
        )
        return transport.parse(
            _PLATFORM, CommentThread, transport.json_body(_PLATFORM, response)
        )

    def resolve_thread(self, pull_request_id: int, thread_id: int) -> None:
        self._send(
            "PATCH",
            f"/pullRequests/{pull_request_id}/threads/{thread_id}",
            json={"status": "closed"},
        )

    def add_comment(self, pull_request_id: int, thread_id: int, content: str) -> None:
        self._send(
            "POST",
            f"/pullRequests/{pull_request_id}/threads/{thread_id}/comments",
            json={"content": content},
        )

    def delete_comment(
        self, pull_request_id: int, thread_id: int, comment_id: int
    ) -> None:
        self._send(
            "DELETE",
            f"/pullRequests/{pull_request_id}/threads/{thread_id}"
            f"/comments/{comment_id}",
        )

    def submit_status(self, pull_request_id: int, status: dict[str, object]) -> None:
        """Post a pull request status; this endpoint is still a preview API."""
        self._send(
            "POST",
            f"/pullRequests/{pull_request_id}/statuses",
            json=status,
            api_version=AzureDevOpsAPI.API_VERSION_PREVIEW,
        )

    # =================================================================
    # HTTP helpers
    # =================================================================

    @property
    def _root(self) -> str:
        return self.url.rstrip("/")

    @property
    def repository_api(self) -> str:
        return (
            f"{self._root}/{_quote(self.project)}/_apis/git/repositories/"
            f"{_quote(self.repository)}"
        )

    def _send(
        self,
        method: str,
        path: str,
        json: object | None = None,
        api_version: str = AzureDevOpsAPI.API_VERSION,
    ) -> Any:
        return transport.send(
            _PLATFORM,
            method,
            f"{self.repository_api}{path}",
            headers=self._headers(),
            params={"api-version": api_version},
            json=json,
        )

    def _values(self, response: Any, model: type[ModelT]) -> list[ModelT]:
        payload = transport.json_body(_PLATFORM, response)
        if not isinstance(payload, dict) or "value" not in payload:
            msg = f"{_PLATFORM} response has no 'value' list for {model.__name__}"
            raise DecorationError(msg)
        return transport.parse_list(
            _PLATFORM, model, cast(dict[str, object], payload)["value"]
        )

    def _headers(self) -> dict[str, str]:
        credentials = base64.b64encode(f":{self.token}".encode()).decode("ascii")
        return {
            "Authorization": f"Basic {credentials}",
            "accept": "application/json",
        }
