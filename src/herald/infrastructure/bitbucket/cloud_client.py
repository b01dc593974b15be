"""Bitbucket Cloud REST API client."""

from __future__ import annotations

import base64
import logging

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from herald.infrastructure.bitbucket.insights import (
    LINK_TEXT,
    InsightAnnotation,
    ReportEntry,
)
from herald.infrastructure.bitbucket.models import (
    CloudComment,
    CloudCommentPage,
    CloudUser,
)
from herald.infrastructure.constants import (
    CODE_INSIGHTS_REPORTER,
    CODE_INSIGHTS_TITLE,
    BitbucketCloudAPI,
)
from herald.infrastructure.http import transport
from herald.shared.types import CommitSHA, FilePath

logger = logging.getLogger(__name__)

_PLATFORM = str(BitbucketCloudAPI.PROVIDER_NAME)
_PAYLOAD_TOO_LARGE = 413


def authorization_header(token: str) -> str:
    """``user:app-password`` pairs use Basic auth, anything else is a bearer token."""
    if ":" in token:
        encoded = base64.b64encode(token.encode("utf-8")).decode("ascii")
        return f"Basic {encoded}"
    return f"Bearer {token}"


@dataclass(frozen=True)
class CloudReport:
    details: str
    link: str
    logo_url: str
    passed: bool
    created_on: datetime
    entries: list[ReportEntry]


def _entry_json(entry: ReportEntry) -> dict[str, object]:
    value: object = entry.value
    if entry.kind == "LINK":
        value = {"text": LINK_TEXT, "href": entry.value}
    return {"title": entry.title, "type": entry.kind, "value": value}


def _annotation_json(annotation: InsightAnnotation) -> dict[str, object]:
    return {
        "external_id": annotation.external_id,
        "line": annotation.line,
        "link": annotation.link,
        "summary": annotation.message,
        "path": annotation.path,
        "severity": annotation.severity,
        "annotation_type": annotation.type,
    }


# =============================================================================
# CLIENT
# =============================================================================


@dataclass
class BitbucketCloudClient:
    """Thin wrapper around the Bitbucket Cloud 2.0 API for one repository."""

    token: str
    workspace: str
    repository: str
    base_url: str = BitbucketCloudAPI.BASE_URL

    @property
    def repository_url(self) -> str:
        return (
            f"{self.base_url.rstrip('/')}/repositories/"
            f"{self.workspace}/{self.repository}"
        )

    def get_current_user(self) -> CloudUser:
        response = transport.send(
            _PLATFORM,
            "GET",
            f"{self.base_url.rstrip('/')}/user",
            headers=self._headers(),
        )
        return transport.parse(
            _PLATFORM, CloudUser, transport.json_body(_PLATFORM, response)
        )

    def list_pull_request_comments(self, pull_request_id: str) -> list[CloudComment]:
        """Fetch every comment, following the ``next`` link of each page.

        Raises:
            DecorationError: If the API call fails.
        """
        url: str | None = self._comments_url(pull_request_id)
        comments: list[CloudComment] = []
        while url:
            response = transport.send(_PLATFORM, "GET", url, headers=self._headers())
            page = transport.parse(
                _PLATFORM, CloudCommentPage, transport.json_body(_PLATFORM, response)
            )
            comments.extend(page.values)
            url = page.next
        return comments

    def delete_comment(self, pull_request_id: str, comment_id: int) -> None:
        transport.send(
            _PLATFORM,
            "DELETE",
            f"{self._comments_url(pull_request_id)}/{comment_id}",
            headers=self._headers(),
            expected=204,
        )
        logger.debug("Comment %d deleted", comment_id)

    def post_comment(
        self,
        pull_request_id: str,
        body: str,
        path: FilePath | None = None,
        line: int | None = None,
    ) -> None:
        """Post a comment, inline on *path* and *line* when both are given."""
        payload: dict[str, object] = {"content": {"raw": body}}
        if path is not None and line is not None:
            payload["inline"] = {"to": line, "path": str(path)}
        transport.send(
            _PLATFORM,
            "POST",
            self._comments_url(pull_request_id),
            headers=self._headers(),
            json=payload,
            expected=201,
        )

    def delete_report(self, commit: CommitSHA, report_key: str) -> None:
        """Remove a previous report; a missing report is not an error."""
        response = transport.request(
            _PLATFORM,
            "DELETE",
            self._report_url(commit, report_key),
            headers=self._headers(),
        )
        logger.debug(
            "Deleting existing report %s returned %d", report_key, response.status_code
        )

    def put_report(
        self, commit: CommitSHA, report_key: str, report: CloudReport
    ) -> None:
        payload: dict[str, object] = {
            "title": CODE_INSIGHTS_TITLE,
            "details": report.details,
            "report_type": "COVERAGE",
            "reporter": CODE_INSIGHTS_REPORTER,
            "link": report.link,
            "logo_url": report.logo_url,
            "result": "PASSED" if report.passed else "FAILED",
            "created_on": report.created_on.astimezone(UTC).strftime(
                "%Y-%m-%dT%H:%M:%S%z"
            ),
            "remote_link_enabled": True,
            "data": [_entry_json(entry) for entry in report.entries],
        }
        url = self._report_url(commit, report_key)
        logger.info("Create report on bitbucket cloud: %s", url)
        transport.send(
            _PLATFORM,
            "PUT",
            url,
            headers=self._headers(),
            json=payload,
            expected=(200, 201),
        )

    def upload_annotations(
        self,
        commit: CommitSHA,
        report_key: str,
        annotations: Sequence[InsightAnnotation],
    ) -> bool:
        """Add annotations to a report.

        Returns:
            False when Bitbucket refuses the batch because the report already
            holds its maximum number of annotations.

        Raises:
            UnexpectedResponseError: For any other rejection.
        """
        if not annotations:
            return True
        response = transport.request(
            _PLATFORM,
            "POST",
            f"{self._report_url(commit, report_key)}/annotations",
            headers=self._headers(),
            json=[_annotation_json(a) for a in annotations],
        )
        if response.status_code == _PAYLOAD_TOO_LARGE:
            return False
        transport.check(_PLATFORM, response, (200, 201))
        return True

    # =================================================================
    # HTTP helpers
    # =================================================================

    def _comments_url(self, pull_request_id: str) -> str:
        return f"{self.repository_url}/pullrequests/{pull_request_id}/comments"

    def _report_url(self, commit: CommitSHA, report_key: str) -> str:
        return f"{self.repository_url}/commit/{commit}/reports/{report_key}"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": authorization_header(self.token),
            "accept": "application/json",
        }
