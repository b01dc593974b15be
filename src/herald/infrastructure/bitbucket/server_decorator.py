"""Bitbucket Server pull request decoration."""

from __future__ import annotations

import logging

from dataclasses import dataclass, field

from herald.domain.decoration.services import is_summary_of, parse_issue_identifier
from herald.domain.decoration.value_objects import (
    AlmSettings,
    DecorationResult,
    ProjectBinding,
)
from herald.domain.markup.formatter import FormatterFactory
from herald.domain.report.services import ReportGenerator
from herald.domain.report.value_objects import AnalysisDetails
from herald.infrastructure.bitbucket import insights
from herald.infrastructure.bitbucket.models import ServerComment
from herald.infrastructure.bitbucket.server_client import (
    BitbucketServerClient,
    ServerReport,
)
from herald.infrastructure.constants import (
    BITBUCKET_SERVER_ANNOTATIONS_PER_REQUEST,
    CODE_INSIGHTS_REPORT_KEY,
)
from herald.infrastructure.settings import require_setting
from herald.shared.types import AlmType, ConfigurationScope

logger = logging.getLogger(__name__)


def _is_stale_summary(comment: ServerComment, username: str, project_key: str) -> bool:
    author = comment.author
    if author is None or comment.comments:
        return False
    if username not in (author.name, author.slug):
        return False
    return is_summary_of(parse_issue_identifier(comment.text), project_key)


@dataclass
class BitbucketServerDecorator:
    """Publishes a Code Insights report and a summary comment.

    Instances older than 5.15 have no Code Insights API; for those only the
    summary comment is maintained.
    """

    report_generator: ReportGenerator
    formatter_factory: FormatterFactory
    alm: AlmType = field(default=AlmType.BITBUCKET_SERVER, init=False)

    def decorate(
        self,
        analysis: AnalysisDetails,
        alm_settings: AlmSettings,
        binding: ProjectBinding,
    ) -> DecorationResult:
        """Replace the report and its annotations, then refresh the summary.

        Raises:
            ConfigurationError: If the URL, token, project or slug is missing.
            DecorationError: If Bitbucket rejects a call.
        """
        url = require_setting(alm_settings.url, "URL must be set in configuration")
        token = require_setting(
            alm_settings.token, "Personal access token must be set in configuration"
        )
        project = require_setting(
            binding.namespace,
            "ALM Repo must be set in configuration",
            ConfigurationScope.PROJECT,
        )
        slug = require_setting(
            binding.repository,
            "ALM slug must be set in configuration",
            ConfigurationScope.PROJECT,
        )
        client = BitbucketServerClient(
            token=token, url=url, project=project, repository=slug
        )

        properties = client.get_server_properties()
        logger.debug("Bitbucket Server installation is version %s", properties.version)
        if properties.supports_code_insights():
            self._publish_report(client, analysis)
        else:
            logger.warning(
                "Your Bitbucket instance does not support the Code Insights API."
            )

        if binding.summary_comment_enabled:
            self._replace_summary(client, analysis)

        return DecorationResult(
            pull_request_url=client.pull_request_url(analysis.pull_request_key)
        )

    def _publish_report(
        self, client: BitbucketServerClient, analysis: AnalysisDetails
    ) -> None:
        report = ServerReport(
            details=insights.report_details(analysis, self.report_generator),
            link=self.report_generator.dashboard_url(analysis),
            logo_url=insights.logo_url(self.report_generator),
            passed=analysis.passed,
            created_date=analysis.analysis_date,
            entries=insights.report_entries(analysis, self.report_generator),
        )
        client.put_report(analysis.commit_sha, CODE_INSIGHTS_REPORT_KEY, report)
        client.delete_annotations(analysis.commit_sha, CODE_INSIGHTS_REPORT_KEY)

        annotations = insights.annotations(analysis, self.report_generator)
        for batch in insights.chunked(
            annotations, BITBUCKET_SERVER_ANNOTATIONS_PER_REQUEST
        ):
            if not client.upload_annotations(
                analysis.commit_sha, CODE_INSIGHTS_REPORT_KEY, batch
            ):
                logger.warning(
                    "The annotations will be truncated since the maximum number "
                    "of annotations for this report has been reached."
                )
                break
        logger.info("Uploaded report with %d annotations", len(annotations))

    def _replace_summary(
        self, client: BitbucketServerClient, analysis: AnalysisDetails
    ) -> None:
        pull_request_id = analysis.pull_request_key
        username = client.get_current_username()
        stale = [
            activity.comment
            for activity in client.list_activities(pull_request_id)
            if activity.comment is not None
            and _is_stale_summary(activity.comment, username, analysis.project_key)
        ]
        for comment in stale:
            client.delete_comment(pull_request_id, comment)
        logger.info("Deleted %d previous summary comments", len(stale))

        summary = self.report_generator.create_analysis_summary(analysis)
        client.post_comment(pull_request_id, summary.format(self.formatter_factory))
