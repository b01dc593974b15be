"""GitLab REST API client."""

from __future__ import annotations

import logging
import urllib.parse

from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel

from herald.infrastructure.constants import GitLabAPI
from herald.infrastructure.gitlab.models import (
    Commit,
    DiffRefs,
    GitLabDiscussion,
    GitLabUser,
    MergeRequest,
)
from herald.infrastructure.http import transport
from herald.infrastructure.http.link_header import find_next_link
from herald.shared.types import CommitSHA, FilePath

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_PLATFORM = str(GitLabAPI.PROVIDER_NAME)


@dataclass(frozen=True)
class PipelineStatus:
    """A commit status as GitLab displays it next to a pipeline."""

    state: str
    target_url: str
    name: str = GitLabAPI.STATUS_NAME
    description: str = GitLabAPI.STATUS_DESCRIPTION
    coverage: str | None = None
    pipeline_id: int | None = None


# =============================================================================
# CLIENT
# =============================================================================


@dataclass
class GitLabClient:
    """Thin wrapper around the GitLab v4 REST API."""

    token: str
    base_url: str = GitLabAPI.BASE_URL

    def get_merge_request(self, project: str, iid: int) -> MergeRequest:
        """Fetch merge request metadata by project id or path.

        Raises:
            DecorationError: If the API call fails.
        """
        encoded = urllib.parse.quote(project, safe="")
        response = self._get(f"/projects/{encoded}/merge_requests/{iid}")
        return transport.parse(
            _PLATFORM, MergeRequest, transport.json_body(_PLATFORM, response)
        )

    def get_current_user(self) -> GitLabUser:
        response = self._get("/user")
        return transport.parse(
            _PLATFORM, GitLabUser, transport.json_body(_PLATFORM, response)
        )

    def get_merge_request_commits(self, project_id: int, iid: int) -> list[Commit]:
        return self._get_list(
            f"/projects/{project_id}/merge_requests/{iid}/commits", Commit
        )

    def get_merge_request_discussions(
        self, project_id: int, iid: int
    ) -> list[GitLabDiscussion]:
        """Fetch every discussion on the merge request, following ``Link`` pages.

        Raises:
            DecorationError: If the API call fails.
        """
        return self._get_list(
            f"/projects/{project_id}/merge_requests/{iid}/discussions",
            GitLabDiscussion,
        )

    def add_merge_request_discussion(
        self, project_id: int, iid: int, body: str
    ) -> GitLabDiscussion:
        """Start a general discussion on the merge request."""
        return self._post_discussion(project_id, iid, {"body": body})

    def add_commit_discussion(
        self,
        project_id: int,
        iid: int,
        body: str,
        diff_refs: DiffRefs,
        path: FilePath,
        line: int,
    ) -> GitLabDiscussion:
        """Start a discussion pinned to a line of the merge request's diff."""
        form: dict[str, Any] = {
            "body": body,
            "position[base_sha]": diff_refs.base_sha,
            "position[start_sha]": diff_refs.start_sha,
            "position[head_sha]": diff_refs.head_sha,
            "position[old_path]": str(path),
            "position[new_path]": str(path),
            "position[new_line]": str(line),
            "position[position_type]": "text",
        }
        return self._post_discussion(project_id, iid, form)

    def add_discussion_note(
        self, project_id: int, iid: int, discussion_id: str, body: str
    ) -> None:
        url = self._url(
            f"/projects/{project_id}/merge_requests/{iid}"
            f"/discussions/{discussion_id}/notes"
        )
        transport.send(
            _PLATFORM,
            "POST",
            url,
            headers=self._headers(),
            data={"body": body},
            expected=201,
        )

    def resolve_discussion(self, project_id: int, iid: int, discussion_id: str) -> None:
        url = self._url(
            f"/projects/{project_id}/merge_requests/{iid}/discussions/{discussion_id}"
        )
        transport.send(
            _PLATFORM,
            "PUT",
            url,
            headers=self._headers(),
            params={"resolved": "true"},
            expected=200,
        )

    def delete_discussion_note(
        self, project_id: int, iid: int, discussion_id: str, note_id: int
    ) -> None:
        url = self._url(
            f"/projects/{project_id}/merge_requests/{iid}"
            f"/discussions/{discussion_id}/notes/{note_id}"
        )
        transport.send(_PLATFORM, "DELETE", url, headers=self._headers(), expected=204)

    def set_pipeline_status(
        self, project_id: int, sha: CommitSHA, status: PipelineStatus
    ) -> None:
        """Post the commit status shown on the merge request's pipeline.

        GitLab refuses to move a status into the state it already has; that
        answer is logged and otherwise ignored.

        Raises:
            DecorationError: If GitLab rejects the status for another reason.
        """
        form: dict[str, Any] = {
            "name": status.name,
            "target_url": status.target_url,
            "description": status.description,
        }
        if status.pipeline_id is not None:
            form["pipeline_id"] = str(status.pipeline_id)
        if status.coverage is not None:
            form["coverage"] = status.coverage

        response = transport.request(
            _PLATFORM,
            "POST",
            self._url(f"/projects/{project_id}/statuses/{sha}"),
            headers=self._headers(),
            params={"state": status.state},
            data=form,
        )
        if GitLabAPI.CANNOT_TRANSITION in response.text:
            logger.debug("Transition status is already %s", status.state)
            return
        transport.check(_PLATFORM, response, 201)

    # =================================================================
    # HTTP helpers
    # =================================================================

    def _post_discussion(
        self, project_id: int, iid: int, form: dict[str, Any]
    ) -> GitLabDiscussion:
        response = transport.send(
            _PLATFORM,
            "POST",
            self._url(f"/projects/{project_id}/merge_requests/{iid}/discussions"),
            headers=self._headers(),
            data=form,
            expected=201,
        )
        return transport.parse(
            _PLATFORM, GitLabDiscussion, transport.json_body(_PLATFORM, response)
        )

    def _get(self, path: str) -> Any:
        return transport.send(
            _PLATFORM, "GET", self._url(path), headers=self._headers()
        )

    def _get_list(self, path: str, model: type[ModelT]) -> list[ModelT]:
        url: str | None = self._url(path)
        items: list[ModelT] = []
        while url is not None:
            response = transport.send(_PLATFORM, "GET", url, headers=self._headers())
            items.extend(
                transport.parse_list(
                    _PLATFORM, model, transport.json_body(_PLATFORM, response)
                )
            )
            url = find_next_link(response.headers.get("link"))
        return items

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{path}"

    def _headers(self) -> dict[str, str]:
        return {GitLabAPI.TOKEN_HEADER: self.token, "accept": "application/json"}
