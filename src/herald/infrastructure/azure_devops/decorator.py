"""Azure DevOps pull request decoration."""

from __future__ import annotations

import logging

from dataclasses import dataclass, field

from herald.domain.decoration.services import DiscussionReconciler
from herald.domain.decoration.value_objects import (
    AlmSettings,
    DecorationResult,
    Discussion,
    Note,
    ProjectBinding,
)
from herald.domain.markup.formatter import FormatterFactory
from herald.domain.report.services import ReportGenerator
from herald.domain.report.value_objects import (
    AnalysisDetails,
    AnalysisIssue,
    AnalysisSummary,
)
from herald.infrastructure.azure_devops.client import AzureDevOpsClient
from herald.infrastructure.azure_devops.models import CommentThread, PullRequest
from herald.infrastructure.constants import AzureDevOpsAPI
from herald.infrastructure.settings import require_setting
from herald.shared.constants import VIEW_IN_SONARQUBE_LABEL
from herald.shared.exceptions import DecorationError
from herald.shared.types import AlmType, ConfigurationScope

logger = logging.getLogger(__name__)

LEGACY_SEE_IN_SONARQUBE_LABEL = "See in SonarQube"


def _to_discussion(thread: CommentThread) -> Discussion:
    notes = [
        Note(
            id=str(comment.id),
            author=comment.author.id if comment.author else "",
            body=comment.content,
            is_user_note=comment.comment_type == "text",
        )
        for comment in thread.comments
        if not comment.is_deleted
    ]
    closed = thread.is_deleted or thread.status == "closed"
    return Discussion(id=str(thread.id), notes=notes, closed=closed)


def _pull_request_id(pull_request_key: str) -> int:
    try:
        return int(pull_request_key)
    except ValueError as e:
        msg = f"Could not parse Pull Request Key '{pull_request_key}'"
        raise DecorationError(msg) from e


def _thread_file_path(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


# =============================================================================
# PULL REQUEST SESSION
# =============================================================================


@dataclass
class _PullRequestSession:
    """Thread operations bound to one pull request."""

    client: AzureDevOpsClient
    pull_request: PullRequest
    target_url: str

    @property
    def _id(self) -> int:
        return self.pull_request.pull_request_id

    def current_user(self) -> str:
        return self.client.get_authenticated_user_id()

    def discussions(self) -> list[Discussion]:
        return [_to_discussion(t) for t in self.client.list_threads(self._id)]

    def commit_ids(self) -> list[str]:
        return [c.commit_id for c in self.client.get_commits(self._id)]

    def add_note(self, discussion: Discussion, body: str) -> None:
        self.client.add_comment(self._id, int(discussion.id), body)

    def resolve(self, discussion: Discussion) -> None:
        self.client.resolve_thread(self._id, int(discussion.id))

    def delete(self, discussion: Discussion) -> None:
        note = discussion.first_note
        if note is None:
            return
        self.client.delete_comment(self._id, int(discussion.id), int(note.id))

    def submit_issue_comment(self, issue: AnalysisIssue, body: str) -> None:
        line = issue.line or 0
        position = {"line": line, "offset": 1}
        thread: dict[str, object] = {
            "comments": [{"content": body}],
            "status": "active",
            "threadContext": {
                "filePath": _thread_file_path(str(issue.scm_path)),
                "rightFileStart": position,
                "rightFileEnd": position,
            },
        }
        self.client.create_thread(self._id, thread)

    def submit_summary(self, body: str, analysis: AnalysisDetails) -> None:
        created = self.client.create_thread(
            self._id, {"comments": [{"content": body}], "status": "active"}
        )
        if analysis.passed:
            self.client.resolve_thread(self._id, created.id)

    def submit_status(
        self, analysis: AnalysisDetails, summary: AnalysisSummary
    ) -> None:
        status: dict[str, object] = {
            "state": "succeeded" if analysis.passed else "failed",
            "description": (
                f"SonarQube Quality Gate - {analysis.project_name} "
                f"({analysis.project_key})"
            ),
            "context": {
                "genre": AzureDevOpsAPI.STATUS_GENRE,
                "name": analysis.project_key,
            },
            "targetUrl": self.target_url,
        }
        self.client.submit_status(self._id, status)

    def pull_request_url(self) -> str | None:
        remote_url = self.pull_request.repository.remote_url
        if remote_url is None:
            return None
        return f"{remote_url}/pullrequest/{self._id}"


# =============================================================================
# DECORATOR
# =============================================================================


@dataclass
class AzureDevOpsDecorator:
    """Decorates Azure DevOps pull requests through comment threads and a status."""

    report_generator: ReportGenerator
    formatter_factory: FormatterFactory
    alm: AlmType = field(default=AlmType.AZURE_DEVOPS, init=False)

    def decorate(
        self,
        analysis: AnalysisDetails,
        alm_settings: AlmSettings,
        binding: ProjectBinding,
    ) -> DecorationResult:
        """Reconcile the pull request's threads and post the gate status.

        Raises:
            ConfigurationError: If the URL, token, project or repository is
                not configured.
            DecorationError: If Azure DevOps rejects a call.
        """
        url = require_setting(alm_settings.url, "URL must be set in configuration")
        token = require_setting(
            alm_settings.token, "Personal access token must be set in configuration"
        )
        project = require_setting(
            binding.namespace,
            "Repository slug must be provided",
            ConfigurationScope.PROJECT,
        )
        repository = require_setting(
            binding.repository,
            "Repository name must be provided",
            ConfigurationScope.PROJECT,
        )
        pull_request_id = _pull_request_id(analysis.pull_request_key)

        client = AzureDevOpsClient(
            token=token, url=url, project=project, repository=repository
        )
        pull_request = client.get_pull_request(pull_request_id)
        logger.info(
            "Decorating pull request %d of %s/%s", pull_request_id, project, repository
        )

        session = _PullRequestSession(
            client=client,
            pull_request=pull_request,
            target_url=self.report_generator.dashboard_url(analysis),
        )
        reconciler = DiscussionReconciler(
            self.report_generator,
            self.formatter_factory,
            labels=(VIEW_IN_SONARQUBE_LABEL, LEGACY_SEE_IN_SONARQUBE_LABEL),
        )
        return reconciler.reconcile(
            session,
            analysis,
            monorepo=binding.monorepo,
            summary_comment=binding.summary_comment_enabled,
            file_comment=binding.file_comment_enabled,
        )
