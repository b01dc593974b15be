"""GitLab merge request decoration."""

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
    format_decimal,
)
from herald.infrastructure.constants import ScannerProperty
from herald.infrastructure.gitlab.client import GitLabClient, PipelineStatus
from herald.infrastructure.gitlab.models import GitLabDiscussion, MergeRequest
from herald.infrastructure.settings import require_setting
from herald.shared.exceptions import DecorationError
from herald.shared.types import AlmType, ConfigurationScope

logger = logging.getLogger(__name__)


def _to_discussion(discussion: GitLabDiscussion) -> Discussion:
    notes = [
        Note(
            id=str(note.id),
            author=note.author.username,
            body=note.body,
            is_user_note=not note.system,
        )
        for note in discussion.notes
    ]
    closed = any(note.resolvable and note.resolved for note in discussion.notes)
    return Discussion(id=discussion.id, notes=notes, closed=closed)


def _merge_request_iid(pull_request_key: str) -> int:
    try:
        return int(pull_request_key)
    except ValueError as e:
        msg = f"Could not parse Merge Request ID '{pull_request_key}'"
        raise DecorationError(msg) from e


# =============================================================================
# MERGE REQUEST SESSION
# =============================================================================


@dataclass
class _MergeRequestSession:
    """Discussion operations bound to one merge request."""

    client: GitLabClient
    merge_request: MergeRequest
    target_url: str
    project_url: str | None = None
    pipeline_id: int | None = None

    @property
    def _project_id(self) -> int:
        return self.merge_request.source_project_id

    @property
    def _iid(self) -> int:
        return self.merge_request.iid

    def current_user(self) -> str:
        return self.client.get_current_user().username

    def discussions(self) -> list[Discussion]:
        return [
            _to_discussion(d)
            for d in self.client.get_merge_request_discussions(
                self._project_id, self._iid
            )
        ]

    def commit_ids(self) -> list[str]:
        return [
            c.id
            for c in self.client.get_merge_request_commits(self._project_id, self._iid)
        ]

    def add_note(self, discussion: Discussion, body: str) -> None:
        self.client.add_discussion_note(
            self._project_id, self._iid, discussion.id, body
        )

    def resolve(self, discussion: Discussion) -> None:
        self.client.resolve_discussion(self._project_id, self._iid, discussion.id)

    def delete(self, discussion: Discussion) -> None:
        note = discussion.first_note
        if note is None:
            return
        self.client.delete_discussion_note(
            self._project_id, self._iid, discussion.id, int(note.id)
        )

    def submit_issue_comment(self, issue: AnalysisIssue, body: str) -> None:
        diff_refs = self.merge_request.diff_refs
        if diff_refs is None or issue.scm_path is None or issue.line is None:
            logger.warning(
                "Merge request %d has no diff refs, posting issue %s unpinned",
                self._iid,
                issue.key,
            )
            self.client.add_merge_request_discussion(self._project_id, self._iid, body)
            return
        self.client.add_commit_discussion(
            self._project_id,
            self._iid,
            body,
            diff_refs,
            issue.scm_path,
            issue.line,
        )

    def submit_summary(self, body: str, analysis: AnalysisDetails) -> None:
        discussion = self.client.add_merge_request_discussion(
            self._project_id, self._iid, body
        )
        if analysis.passed:
            self.client.resolve_discussion(self._project_id, self._iid, discussion.id)

    def submit_status(
        self, analysis: AnalysisDetails, summary: AnalysisSummary
    ) -> None:
        coverage = (
            format_decimal(summary.new_coverage)
            if summary.new_coverage is not None
            else None
        )
        status = PipelineStatus(
            state="success" if analysis.passed else "failed",
            target_url=self.target_url,
            coverage=coverage,
            pipeline_id=self.pipeline_id,
        )
        self.client.set_pipeline_status(self._project_id, analysis.commit_sha, status)

    def pull_request_url(self) -> str | None:
        if self.project_url:
            return f"{self.project_url.rstrip('/')}/merge_requests/{self._iid}"
        return self.merge_request.web_url


# =============================================================================
# DECORATOR
# =============================================================================


@dataclass
class GitLabDecorator:
    """Decorates GitLab merge requests through discussions and a commit status."""

    report_generator: ReportGenerator
    formatter_factory: FormatterFactory
    alm: AlmType = field(default=AlmType.GITLAB, init=False)

    def decorate(
        self,
        analysis: AnalysisDetails,
        alm_settings: AlmSettings,
        binding: ProjectBinding,
    ) -> DecorationResult:
        """Reconcile the merge request's discussions and post the gate status.

        Raises:
            ConfigurationError: If the URL, token or project is not configured.
            DecorationError: If GitLab rejects a call.
        """
        url = require_setting(alm_settings.url, "ALM URL must be specified")
        token = require_setting(
            alm_settings.token, "Personal access token must be set in configuration"
        )
        project = require_setting(
            binding.repository,
            "ALM Repo must be set in configuration",
            ConfigurationScope.PROJECT,
        )
        iid = _merge_request_iid(analysis.pull_request_key)

        client = GitLabClient(token=token, base_url=url)
        merge_request = client.get_merge_request(project, iid)
        logger.info("Decorating merge request !%d of project %s", iid, project)

        session = _MergeRequestSession(
            client=client,
            merge_request=merge_request,
            target_url=self.report_generator.dashboard_url(analysis),
            project_url=analysis.scanner_property(ScannerProperty.GITLAB_PROJECT_URL),
            pipeline_id=_pipeline_id(analysis),
        )
        reconciler = DiscussionReconciler(self.report_generator, self.formatter_factory)
        return reconciler.reconcile(
            session,
            analysis,
            monorepo=binding.monorepo,
            summary_comment=binding.summary_comment_enabled,
            file_comment=binding.file_comment_enabled,
        )


def _pipeline_id(analysis: AnalysisDetails) -> int | None:
    raw = analysis.scanner_property(ScannerProperty.GITLAB_PIPELINE_ID)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric pipeline id '%s'", raw)
        return None
