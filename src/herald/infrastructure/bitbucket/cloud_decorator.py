"""Bitbucket Cloud pull request decoration."""

from __future__ import annotations

import logging

from dataclasses import dataclass, field

from herald.domain.decoration.services import (
    is_summary_of,
    parse_issue_identifier,
)
from herald.domain.decoration.value_objects import (
    AlmSettings,
    DecorationResult,
    ProjectBinding,
    ProjectIssueIdentifier,
)
from herald.domain.markup.formatter import FormatterFactory
from herald.domain.report.services import ReportGenerator
from herald.domain.report.value_objects import AnalysisDetails
from herald.infrastructure.bitbucket import insights
from herald.infrastructure.bitbucket.cloud_client import (
    BitbucketCloudClient,
    CloudReport,
)
from herald.infrastructure.bitbucket.models import CloudComment
from herald.infrastructure.constants import (
    BITBUCKET_CLOUD_ANNOTATIONS_PER_REQUEST,
    CODE_INSIGHTS_REPORT_KEY,
    BitbucketCloudAPI,
)
from herald.infrastructure.settings import require_setting
from herald.shared.types import AlmType, ConfigurationScope

logger = logging.getLogger(__name__)


def _marker(comment: CloudComment) -> ProjectIssueIdentifier | None:
    return parse_issue_identifier(comment.content.raw if comment.content else None)


@dataclass
class BitbucketCloudDecorator:
    """Publishes a Code Insights report and pull request comments.

    The report is replaced on every run. The previous summary for the same
    project is deleted before a new one is posted, and issues that already
    carry one of the tool's comments are not commented again. With comment
    deletion enabled every earlier comment by the tool is removed first.
    """

    report_generator: ReportGenerator
    formatter_factory: FormatterFactory
    alm: AlmType = field(default=AlmType.BITBUCKET_CLOUD, init=False)

    def decorate(
        self,
        analysis: AnalysisDetails,
        alm_settings: AlmSettings,
        binding: ProjectBinding,
    ) -> DecorationResult:
        """Upload the report and annotations, then refresh the comments.

        Raises:
            ConfigurationError: If the token, workspace or slug is missing.
            DecorationError: If Bitbucket rejects a call.
        """
        token = require_setting(
            alm_settings.token, "Personal access token must be set in configuration"
        )
        workspace = require_setting(
            binding.namespace,
            "Workspace must be set in configuration",
            ConfigurationScope.PROJECT,
        )
        slug = require_setting(
            binding.repository,
            "Repository slug must be provided",
            ConfigurationScope.PROJECT,
        )
        client = BitbucketCloudClient(
            token=token,
            workspace=workspace,
            repository=slug,
            base_url=alm_settings.url or BitbucketCloudAPI.BASE_URL,
        )

        self._publish_report(client, analysis)
        if (
            binding.delete_comments_enabled
            or binding.summary_comment_enabled
            or binding.file_comment_enabled
        ):
            self._refresh_comments(client, analysis, binding)

        return DecorationResult(
            pull_request_url=(
                f"{BitbucketCloudAPI.WEB_URL}/{workspace}/{slug}"
                f"/pull-requests/{analysis.pull_request_key}"
            )
        )

    def _publish_report(
        self, client: BitbucketCloudClient, analysis: AnalysisDetails
    ) -> None:
        report = CloudReport(
            details=insights.report_details(analysis, self.report_generator),
            link=self.report_generator.dashboard_url(analysis),
            logo_url=insights.logo_url(self.report_generator),
            passed=analysis.passed,
            created_on=analysis.analysis_date,
            entries=insights.report_entries(analysis, self.report_generator),
        )
        client.delete_report(analysis.commit_sha, CODE_INSIGHTS_REPORT_KEY)
        client.put_report(analysis.commit_sha, CODE_INSIGHTS_REPORT_KEY, report)

        annotations = insights.annotations(analysis, self.report_generator)
        for batch in insights.chunked(
            annotations, BITBUCKET_CLOUD_ANNOTATIONS_PER_REQUEST
        ):
            accepted = client.upload_annotations(
                analysis.commit_sha, CODE_INSIGHTS_REPORT_KEY, batch
            )
            if not accepted:
                logger.warning(
                    "The annotations will be truncated since the maximum number "
                    "of annotations for this report has been reached."
                )
                break
        logger.info("Uploaded report with %d annotations", len(annotations))

    def _refresh_comments(
        self,
        client: BitbucketCloudClient,
        analysis: AnalysisDetails,
        binding: ProjectBinding,
    ) -> None:
        pull_request_id = analysis.pull_request_key
        user = client.get_current_user()
        own = [
            c
            for c in client.list_pull_request_comments(pull_request_id)
            if not c.deleted and c.user is not None and c.user.uuid == user.uuid
        ]
        markers = {c.id: _marker(c) for c in own}

        if binding.delete_comments_enabled:
            stale = own
        else:
            stale = [
                c for c in own if is_summary_of(markers[c.id], analysis.project_key)
            ]
        for comment in stale:
            client.delete_comment(pull_request_id, comment.id)
        logger.info("Deleted %d previous comments", len(stale))

        stale_ids = {c.id for c in stale}
        commented_keys = {
            marker.issue_key
            for comment_id, marker in markers.items()
            if comment_id not in stale_ids
            and marker is not None
            and marker.project_key == analysis.project_key
        }

        if binding.summary_comment_enabled:
            summary = self.report_generator.create_analysis_summary(analysis)
            client.post_comment(
                pull_request_id, summary.format(self.formatter_factory)
            )
        if binding.file_comment_enabled:
            self._post_file_comments(client, analysis, commented_keys)

    def _post_file_comments(
        self,
        client: BitbucketCloudClient,
        analysis: AnalysisDetails,
        commented_keys: set[str],
    ) -> None:
        for issue in analysis.scm_reportable_issues():
            if issue.key in commented_keys:
                continue
            issue_summary = self.report_generator.create_analysis_issue_summary(
                issue, analysis
            )
            client.post_comment(
                analysis.pull_request_key,
                issue_summary.format(self.formatter_factory),
                path=issue.scm_path,
                line=issue.line,
            )
