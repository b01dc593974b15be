"""GitHub GraphQL API client."""

from __future__ import annotations

import logging

from dataclasses import dataclass
from typing import Any, cast

from herald.infrastructure.constants import GITHUB_COMMENTS_PAGE_SIZE, GitHubAPI
from herald.infrastructure.github.models import (
    CheckRun,
    GraphQLResponse,
    IssueComment,
    PullRequest,
    Repository,
)
from herald.infrastructure.http import transport
from herald.shared.exceptions import DecorationError

logger = logging.getLogger(__name__)

_PLATFORM = str(GitHubAPI.PROVIDER_NAME)

# =============================================================================
# DOCUMENTS
# =============================================================================

_REPOSITORY_QUERY = """
query($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) { id url }
}
"""

_VIEWER_QUERY = "query { viewer { login } }"

_PULL_REQUEST_QUERY = """
query($owner: String!, $name: String!, $number: Int!, $first: Int!, $after: String) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {
      id
      comments(first: $first, after: $after) {
        nodes { id isMinimized author { __typename login } }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""

_CREATE_CHECK_RUN = """
mutation($input: CreateCheckRunInput!) {
  createCheckRun(input: $input) { checkRun { id } }
}
"""

_UPDATE_CHECK_RUN = """
mutation($input: UpdateCheckRunInput!) {
  updateCheckRun(input: $input) { checkRun { id } }
}
"""

_MINIMIZE_COMMENT = """
mutation($input: MinimizeCommentInput!) {
  minimizeComment(input: $input) { minimizedComment { isMinimized } }
}
"""

_ADD_COMMENT = """
mutation($input: AddCommentInput!) {
  addComment(input: $input) { subject { id } }
}
"""


def graphql_url(api_url: str) -> str:
    """Derive the GraphQL endpoint from a REST API URL.

    >>> graphql_url("https://github.example.com/api/v3/")
    'https://github.example.com/api/graphql'
    """
    url = api_url.rstrip("/")
    url = url.removesuffix("/v3")
    return f"{url}{GitHubAPI.GRAPHQL_PATH}"


def _field(data: dict[str, Any], *path: str) -> Any:
    value: Any = data
    for key in path:
        if not isinstance(value, dict) or value.get(key) is None:
            msg = f"{_PLATFORM} response is missing '{'.'.join(path)}'"
            raise DecorationError(msg)
        value = cast(dict[str, Any], value)[key]
    return value


# =============================================================================
# CLIENT
# =============================================================================


@dataclass
class GitHubClient:
    """Thin wrapper around the GitHub GraphQL API."""

    token: str
    url: str = f"{GitHubAPI.BASE_URL}{GitHubAPI.GRAPHQL_PATH}"

    def get_repository(self, owner: str, name: str) -> Repository:
        """Fetch the repository's node id and web URL.

        Raises:
            DecorationError: If the API call fails.
        """
        data = self.execute(_REPOSITORY_QUERY, {"owner": owner, "name": name})
        return transport.parse(_PLATFORM, Repository, _field(data, "repository"))

    def get_viewer_login(self) -> str:
        """Login of the token's owner, without any ``[bot]`` suffix."""
        data = self.execute(_VIEWER_QUERY)
        return str(_field(data, "viewer", "login")).replace("[bot]", "")

    def get_pull_request(
        self,
        owner: str,
        name: str,
        number: int,
        after: str | None = None,
    ) -> PullRequest:
        """Fetch the pull request node and one page of its comments."""
        variables: dict[str, object] = {
            "owner": owner,
            "name": name,
            "number": number,
            "first": GITHUB_COMMENTS_PAGE_SIZE,
            "after": after,
        }
        data = self.execute(_PULL_REQUEST_QUERY, variables)
        return transport.parse(
            _PLATFORM, PullRequest, _field(data, "repository", "pullRequest")
        )

    def list_pull_request_comments(
        self, owner: str, name: str, number: int
    ) -> tuple[str, list[IssueComment]]:
        """Return the pull request node id and every comment, following cursors."""
        pull_request = self.get_pull_request(owner, name, number)
        comments = list(pull_request.comments.nodes)
        page = pull_request.comments.page_info
        while page.has_next_page:
            next_page = self.get_pull_request(owner, name, number, page.end_cursor)
            comments.extend(next_page.comments.nodes)
            page = next_page.comments.page_info
        return pull_request.id, comments

    def create_check_run(self, check_run: dict[str, object]) -> CheckRun:
        data = self.execute(_CREATE_CHECK_RUN, {"input": check_run})
        return transport.parse(
            _PLATFORM, CheckRun, _field(data, "createCheckRun", "checkRun")
        )

    def update_check_run(self, check_run: dict[str, object]) -> None:
        self.execute(_UPDATE_CHECK_RUN, {"input": check_run})

    def minimize_comment(self, comment_id: str) -> None:
        self.execute(
            _MINIMIZE_COMMENT,
            {"input": {"subjectId": comment_id, "classifier": "OUTDATED"}},
        )

    def add_comment(self, subject_id: str, body: str) -> None:
        self.execute(_ADD_COMMENT, {"input": {"subjectId": subject_id, "body": body}})

    def execute(
        self, document: str, variables: dict[str, object] | None = None
    ) -> dict[str, Any]:
        """Run one GraphQL document and return its ``data`` object.

        Raises:
            DecorationError: If the call fails or GraphQL reports errors.
        """
        payload: dict[str, object] = {"query": document}
        if variables is not None:
            payload["variables"] = variables
        logger.debug("Using request: %s", document.strip())

        response = transport.send(
            _PLATFORM, "POST", self.url, headers=self._headers(), json=payload
        )
        result = transport.parse(
            _PLATFORM, GraphQLResponse, transport.json_body(_PLATFORM, response)
        )
        if result.errors:
            details = "\n".join(f"- {error.message}" for error in result.errors)
            msg = (
                f"An error was returned in the response from the {_PLATFORM} API:"
                f"\n{details}"
            )
            raise DecorationError(msg)
        return cast(dict[str, Any], result.data or {})

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "accept": GitHubAPI.ACCEPT_JSON,
        }
