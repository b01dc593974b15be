"""Bitbucket Server (Data Center) REST API client."""

from __future__ import annotations

import logging

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from herald.infrastructure.bitbucket.insights import (
    LINK_TEXT,
    InsightAnnotation,
    ReportEntry,
)
from herald.infrastructure.bitbucket.models import (
    ServerActivity,
    ServerActivityPage,
    ServerComment,
    ServerProperties,
)
from herald.infrastructure.constants import (
    BITBUCKET_SERVER_ACTIVITIES_PAGE_SIZE,
    CODE_INSIGHTS_REPORTER,
    CODE_INSIGHTS_TITLE,
    BitbucketServerAPI,
)
from herald.infrastructure.http import transport

logger = logging.getLogger(__name__)

_PLATFORM = str(BitbucketServerAPI.PROVIDER_NAME)
_PAYLOAD_TOO_LARGE = 413


@dataclass(frozen=True)
class ServerReport:
    details: str
    link: str
    logo_url: str
    passed: bool
    created_date: datetime
    entries: list[ReportEntry]


def _entry_json(entry: ReportEntry) -> dict[str, object]:
    value: object = entry.value
    if entry.kind == "LINK":
        value = {"linktext": LINK_TEXT, "href": entry.value}
    return {"title": entry.title, "type": entry.kind, "value": value}


def _annotation_json(annotation: InsightAnnotation) -> dict[str, object]:
    return {
        "externalId": annotation.external_id,
        "line": annotation.line,
        "link": annotation.link,
        "message": annotation.message,
        "path": annotation.path,
        "severity": annotation.severity,
        "type": annotation.type,
    }


# =============================================================================
# CLIENT
# =============================================================================


@dataclass
class BitbucketServerClient:
    """Thin wrapper around one Bitbucket Server repository's REST endpoints."""

    token: str
    url: str
    project: str
    repository: str

    @property
    def _root(self) -> str:
        return self.url.rstrip("/")

    def pull_request_url(self, pull_request_id: str) -> str:
        """Browser URL of a pull request."""
        return (
            f"{self._root}/projects/{self.project}/repos/{self.repository}"
            f"/pull-requests/{pull_request_id}"
        )

    def get_server_properties(self) -> ServerProperties:
        response = transport.send(
            _PLATFORM,
            "GET",
            f"{self._root}{BitbucketServerAPI.REST_PATH}/application-properties",
            headers=self._headers(),
        )
        return transport.parse(
            _PLATFORM, ServerProperties, transport.json_body(_PLATFORM, response)
        )

    def get_current_username(self) -> str:
        """Name of the token's owner, from the application-links servlet."""
        response = transport.send(
            _PLATFORM,
            "GET",
            f"{self._root}/plugins/servlet/applinks/whoami",
            headers=self._headers(),
        )
        return response.text.strip()

    def list_activities(self, pull_request_id: str) -> list[ServerActivity]:
        """Fetch the pull request's activity feed, all pages.

        Raises:
            DecorationError: If the API call fails.
        """
        activities: list[ServerActivity] = []
        start: int | None = 0
        while start is not None:
            response = transport.send(
                _PLATFORM,
                "GET",
                f"{self._pull_request_api(pull_request_id)}/activities",
                headers=self._headers(),
                params={"limit": BITBUCKET_SERVER_ACTIVITIES_PAGE_SIZE, "start": start},
            )
            page = transport.parse(
                _PLATFORM, ServerActivityPage, transport.json_body(_PLATFORM, response)
            )
            activities.extend(page.values)
            start = None if page.is_last_page else page.next_page_start
        return activities

    def post_comment(self, pull_request_id: str, text: str) -> None:
        transport.send(
            _PLATFORM,
            "POST",
            f"{self._pull_request_api(pull_request_id)}/comments",
            headers=self._headers(),
            json={"text": text},
            expected=201,
        )

    def delete_comment(self, pull_request_id: str, comment: ServerComment) -> None:
        """Delete a comment at the version it was read at."""
        transport.send(
            _PLATFORM,
            "DELETE",
            f"{self._pull_request_api(pull_request_id)}/comments/{comment.id}",
            headers=self._headers(),
            params={"version": comment.version},
            expected=204,
        )
        logger.debug("Deleted comment %d with version %d", comment.id, comment.version)

    def put_report(self, commit: str, report_key: str, report: ServerReport) -> None:
        payload: dict[str, object] = {
            "title": CODE_INSIGHTS_TITLE,
            "details": report.details,
            "reporter": CODE_INSIGHTS_REPORTER,
            "createdDate": int(report.created_date.timestamp() * 1000),
            "link": report.link,
            "logoUrl": report.logo_url,
            "result": "PASS" if report.passed else "FAIL",
            "data": [_entry_json(entry) for entry in report.entries],
        }
        transport.send(
            _PLATFORM,
            "PUT",
            self._report_url(commit, report_key),
            headers=self._headers(),
            json=payload,
        )

    def delete_annotations(self, commit: str, report_key: str) -> None:
        transport.send(
            _PLATFORM,
            "DELETE",
            f"{self._report_url(commit, report_key)}/annotations",
            headers=self._headers(),
            expected=(200, 204),
        )

    def upload_annotations(
        self,
        commit: str,
        report_key: str,
        annotations: Sequence[InsightAnnotation],
    ) -> bool:
        """Add annotations to a report.

        Returns:
            False when the report already holds its maximum number of
            annotations.

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
            json={"annotations": [_annotation_json(a) for a in annotations]},
        )
        if response.status_code == _PAYLOAD_TOO_LARGE:
            return False
        transport.check(_PLATFORM, response, (200, 204))
        return True

    # =================================================================
    # HTTP helpers
    # =================================================================

    def _pull_request_api(self, pull_request_id: str) -> str:
        return (
            f"{self._root}{BitbucketServerAPI.REST_PATH}/projects/{self.project}"
            f"/repos/{self.repository}/pull-requests/{pull_request_id}"
        )

    def _report_url(self, commit: str, report_key: str) -> str:
        return (
            f"{self._root}{BitbucketServerAPI.INSIGHTS_PATH}/projects/{self.project}"
            f"/repos/{self.repository}/commits/{commit}/reports/{report_key}"
        )

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}", "accept": "application/json"}
