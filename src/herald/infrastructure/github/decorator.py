"""GitHub pull request decoration through check runs and a summary comment."""

from __future__ import annotations

import logging

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from herald.domain.decoration.value_objects import (
    AlmSettings,
    DecorationResult,
    ProjectBinding,
)
from herald.domain.markup.formatter import FormatterFactory
from herald.domain.report.services import ReportGenerator
from herald.domain.report.value_objects import AnalysisDetails, AnalysisIssue
from herald.infrastructure.constants import GITHUB_ANNOTATIONS_PER_REQUEST, GitHubAPI
from herald.infrastructure.github.client import GitHubClient, graphql_url
from herald.infrastructure.settings import require_setting
from herald.shared.exceptions import ConfigurationError, DecorationError
from herald.shared.types import AlmType, ConfigurationScope, Severity

logger = logging.getLogger(__name__)

_ANNOTATION_LEVELS: dict[Severity, str] = {
    Severity.INFO: "NOTICE",
    Severity.MINOR: "WARNING",
    Severity.MAJOR: "WARNING",
    Severity.CRITICAL: "FAILURE",
    Severity.BLOCKER: "FAILURE",
}


def format_timestamp(moment: datetime) -> str:
    """Render an instant in UTC the way the Checks API expects.

    >>> format_timestamp(datetime(2024, 5, 1, 12, 30, 5, tzinfo=UTC))
    '2024-05-01T12:30:05Z'
    """
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _annotation(issue: AnalysisIssue) -> dict[str, object]:
    line = issue.line or 0
    return {
        "path": str(issue.scm_path),
        "location": {"startLine": line, "endLine": line},
        "annotationLevel": _ANNOTATION_LEVELS[issue.severity],
        "message": issue.message,
    }


def _split_repository(repository: str) -> tuple[str, str]:
    owner, _, name = repository.partition("/")
    if not owner or not name:
        msg = "Repository name must be in the format owner/repo"
        raise ConfigurationError(msg, ConfigurationScope.PROJECT)
    return owner, name


def _pull_request_number(pull_request_key: str) -> int:
    try:
        return int(pull_request_key)
    except ValueError as e:
        msg = f"Could not parse Pull Request number '{pull_request_key}'"
        raise DecorationError(msg) from e


# =============================================================================
# DECORATOR
# =============================================================================


@dataclass
class GitHubDecorator:
    """Publishes a check run with annotations and a summary comment.

    Annotations are sent in batches of 50: the first batch with the
    ``createCheckRun`` mutation, each further batch with ``updateCheckRun``.
    Previous summary comments by the same bot are minimised as outdated
    before the new one is added.
    """

    report_generator: ReportGenerator
    formatter_factory: FormatterFactory
    clock: Callable[[], datetime] = _utc_now
    alm: AlmType = field(default=AlmType.GITHUB, init=False)

    def decorate(
        self,
        analysis: AnalysisDetails,
        alm_settings: AlmSettings,
        binding: ProjectBinding,
    ) -> DecorationResult:
        """Create the check run and, when enabled, refresh the summary comment.

        Raises:
            ConfigurationError: If the token or repository is not configured.
            DecorationError: If GitHub rejects a call.
        """
        token = require_setting(alm_settings.token, "No token has been set for Github")
        repository = require_setting(
            binding.repository,
            "No repository name has been set for Github connections",
            ConfigurationScope.PROJECT,
        )
        owner, name = _split_repository(repository)

        client = GitHubClient(
            token=token, url=graphql_url(alm_settings.url or GitHubAPI.BASE_URL)
        )
        remote = client.get_repository(owner, name)
        summary = self.report_generator.create_analysis_summary(analysis).format(
            self.formatter_factory
        )

        self._publish_check_run(client, remote.id, analysis, summary)

        if binding.summary_comment_enabled:
            self._post_summary_comment(client, owner, name, analysis, summary)

        return DecorationResult(
            pull_request_url=f"{remote.url}/pull/{analysis.pull_request_key}"
        )

    def _publish_check_run(
        self,
        client: GitHubClient,
        repository_id: str,
        analysis: AnalysisDetails,
        summary: str,
    ) -> None:
        annotations = [
            _annotation(issue)
            for issue in analysis.open_issues()
            if issue.scm_path is not None and issue.resolution is None
        ]
        batches = [
            annotations[i : i + GITHUB_ANNOTATIONS_PER_REQUEST]
            for i in range(0, len(annotations), GITHUB_ANNOTATIONS_PER_REQUEST)
        ] or [[]]

        title = f"Quality Gate {'success' if analysis.passed else 'failed'}"
        check_run: dict[str, object] = {
            "repositoryId": repository_id,
            "name": f"{analysis.project_name} Sonarqube Results",
            "status": "COMPLETED",
            "conclusion": "SUCCESS" if analysis.passed else "FAILURE",
            "detailsUrl": self.report_generator.dashboard_url(analysis),
            "startedAt": format_timestamp(analysis.analysis_date),
            "completedAt": format_timestamp(self.clock()),
            "externalId": analysis.analysis_id or analysis.commit_sha,
        }

        created = client.create_check_run(
            {
                **check_run,
                "headSha": analysis.commit_sha,
                "output": {
                    "title": title,
                    "summary": summary,
                    "annotations": batches[0],
                },
            }
        )
        for batch in batches[1:]:
            client.update_check_run(
                {
                    **check_run,
                    "checkRunId": created.id,
                    "output": {
                        "title": title,
                        "summary": summary,
                        "annotations": batch,
                    },
                }
            )
        logger.info(
            "Created check run %s with %d annotations in %d requests",
            created.id,
            len(annotations),
            len(batches),
        )

    def _post_summary_comment(
        self,
        client: GitHubClient,
        owner: str,
        name: str,
        analysis: AnalysisDetails,
        summary: str,
    ) -> None:
        login = client.get_viewer_login()
        number = _pull_request_number(analysis.pull_request_key)
        pull_request_id, comments = client.list_pull_request_comments(
            owner, name, number
        )

        outdated = [
            c
            for c in comments
            if c.author is not None
            and c.author.type.lower() == "bot"
            and c.author.login.lower() == login.lower()
            and not c.is_minimized
        ]
        for comment in outdated:
            try:
                client.minimize_comment(comment.id)
            except DecorationError as e:
                logger.error("Error during minimize comment %s: %s", comment.id, e)

        client.add_comment(pull_request_id, summary)
        logger.info(
            "Posted summary comment on #%d, minimised %d outdated",
            number,
            len(outdated),
        )
