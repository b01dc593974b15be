"""Reconciliation shared by discussion-based decorators.

Discussion-based platforms (GitLab, Azure DevOps) keep one thread per
reported issue plus a summary thread. Each run works out which of the tool's
own threads are stale, closes or removes them, and only opens threads for
issues that do not have one yet, so re-running an analysis converges on the
same remote state instead of accumulating comments.
"""

from __future__ import annotations

import logging
import re
import urllib.parse

from dataclasses import dataclass, field

from herald.domain.decoration.repositories import DiscussionPlatform
from herald.domain.decoration.value_objects import (
    DecorationResult,
    Discussion,
    Note,
    ProjectIssueIdentifier,
)
from herald.domain.markup.formatter import FormatterFactory
from herald.domain.report.services import ReportGenerator
from herald.domain.report.value_objects import AnalysisDetails, AnalysisIssue
from herald.shared.constants import (
    RESOLVED_ISSUE_NEEDING_CLOSED_MESSAGE,
    RESOLVED_SUMMARY_NEEDING_CLOSED_MESSAGE,
    SUMMARY_COMMENT_KEY,
    VIEW_IN_SONARQUBE_LABEL,
)

logger = logging.getLogger(__name__)

_CLOSING_MESSAGES = frozenset(
    {RESOLVED_ISSUE_NEEDING_CLOSED_MESSAGE, RESOLVED_SUMMARY_NEEDING_CLOSED_MESSAGE}
)


# =============================================================================
# MARKER PARSING
# =============================================================================


def _first_param(params: list[tuple[str, str]], name: str) -> str | None:
    return next((value for key, value in params if key == name), None)


def _identifier_from_url(url: str) -> ProjectIssueIdentifier | None:
    parts = urllib.parse.urlsplit(url)
    params = urllib.parse.parse_qsl(parts.query)
    project_key = _first_param(params, "id")
    if project_key is None:
        return None

    if parts.path.endswith("/dashboard"):
        issue_key = SUMMARY_COMMENT_KEY
    elif parts.path.endswith("security_hotspots"):
        issue_key = _first_param(params, "hotspots")
    else:
        issue_key = _first_param(params, "issues")

    if issue_key is None:
        return None
    return ProjectIssueIdentifier(project_key=project_key, issue_key=issue_key)


def parse_issue_identifier(
    body: str | None,
    labels: tuple[str, ...] = (VIEW_IN_SONARQUBE_LABEL,),
) -> ProjectIssueIdentifier | None:
    """Find the deep link the tool embeds in its comments.

    Args:
        body: Raw comment text.
        labels: Link labels to recognise, newest first.

    Returns:
        The identifier from the first matching ``[label](url)`` line, or None.
    """
    if body is None:
        return None
    for label in labels:
        pattern = re.compile(rf"^\[{re.escape(label)}]\((.*?)\)$")
        for line in body.splitlines():
            if label not in line:
                continue
            match = pattern.match(line)
            if match is None:
                continue
            identifier = _identifier_from_url(match.group(1))
            if identifier is not None:
                return identifier
    return None


def is_summary_of(identifier: ProjectIssueIdentifier | None, project_key: str) -> bool:
    """Whether *identifier* marks the summary comment of *project_key*."""
    return (
        identifier is not None
        and identifier.issue_key == SUMMARY_COMMENT_KEY
        and identifier.project_key == project_key
    )


# =============================================================================
# RECONCILER
# =============================================================================


@dataclass
class _OwnDiscussion:
    discussion: Discussion
    note: Note
    identifier: ProjectIssueIdentifier | None


@dataclass
class DiscussionReconciler:
    """Drives one decoration run against a ``DiscussionPlatform``."""

    report_generator: ReportGenerator
    formatter_factory: FormatterFactory
    labels: tuple[str, ...] = field(default=(VIEW_IN_SONARQUBE_LABEL,))

    def reconcile(
        self,
        platform: DiscussionPlatform,
        analysis: AnalysisDetails,
        monorepo: bool = False,
        summary_comment: bool = True,
        file_comment: bool = True,
    ) -> DecorationResult:
        """Bring the pull request's discussions in line with *analysis*.

        Stale discussions are closed whatever the toggles say; the toggles
        only decide whether new issue and summary discussions are opened.

        Raises:
            DecorationError: If the platform rejects a call.
        """
        user = platform.current_user()
        open_issues = analysis.scm_reportable_issues()

        own = [
            d
            for d in self._own_discussions(platform, user)
            if not monorepo or _belongs_to(d, analysis.project_key)
        ]
        commented_keys = self._close_stale(platform, user, own, analysis)

        commit_ids = set(platform.commit_ids())
        uncommented = [
            i
            for i in open_issues
            if file_comment
            and i.key not in commented_keys
            and _is_from_commits(i, commit_ids)
        ]
        for issue in uncommented:
            issue_summary = self.report_generator.create_analysis_issue_summary(
                issue, analysis
            )
            platform.submit_issue_comment(
                issue, issue_summary.format(self.formatter_factory)
            )
        logger.info(
            "Opened %d new issue discussions, %d already present",
            len(uncommented),
            len(commented_keys),
        )

        summary = self.report_generator.create_analysis_summary(analysis)
        if summary_comment:
            platform.submit_summary(summary.format(self.formatter_factory), analysis)
        platform.submit_status(analysis, summary)

        return DecorationResult(pull_request_url=platform.pull_request_url())

    def _own_discussions(
        self, platform: DiscussionPlatform, user: str
    ) -> list[_OwnDiscussion]:
        found: list[_OwnDiscussion] = []
        for discussion in platform.discussions():
            note = discussion.first_note
            if note is None or note.author != user:
                continue
            identifier = parse_issue_identifier(note.body, self.labels)
            is_summary = (
                identifier is not None and identifier.issue_key == SUMMARY_COMMENT_KEY
            )
            if _is_resolved(discussion, user) and not is_summary:
                continue
            found.append(_OwnDiscussion(discussion, note, identifier))
        return found

    def _close_stale(
        self,
        platform: DiscussionPlatform,
        user: str,
        own: list[_OwnDiscussion],
        analysis: AnalysisDetails,
    ) -> set[str]:
        open_keys = {i.key for i in analysis.open_issues()}
        remaining: set[str] = set()

        for entry in own:
            if entry.identifier is None:
                continue
            issue_key = entry.identifier.issue_key
            discussion = entry.discussion
            if issue_key == SUMMARY_COMMENT_KEY:
                if _has_other_user_notes(discussion, user):
                    platform.add_note(
                        discussion, RESOLVED_SUMMARY_NEEDING_CLOSED_MESSAGE
                    )
                else:
                    platform.delete(discussion)
            elif issue_key not in open_keys:
                if _has_other_user_notes(discussion, user):
                    platform.add_note(discussion, RESOLVED_ISSUE_NEEDING_CLOSED_MESSAGE)
                else:
                    platform.resolve(discussion)
            else:
                remaining.add(issue_key)
        return remaining


def _belongs_to(entry: _OwnDiscussion, project_key: str) -> bool:
    return entry.identifier is not None and entry.identifier.project_key == project_key


def _is_resolved(discussion: Discussion, user: str) -> bool:
    return discussion.closed or any(
        note.author == user and note.body in _CLOSING_MESSAGES
        for note in discussion.notes
    )


def _has_other_user_notes(discussion: Discussion, user: str) -> bool:
    return any(n.is_user_note and n.author != user for n in discussion.notes)


def _is_from_commits(issue: AnalysisIssue, commit_ids: set[str]) -> bool:
    return issue.revision is not None and issue.revision in commit_ids
