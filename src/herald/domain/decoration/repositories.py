"""Protocols for the Decoration bounded context."""

from __future__ import annotations

from typing import Protocol

from herald.domain.decoration.value_objects import (
    AlmSettings,
    DecorationResult,
    Discussion,
    ProjectBinding,
)
from herald.domain.report.value_objects import (
    AnalysisDetails,
    AnalysisIssue,
    AnalysisSummary,
)
from herald.shared.types import AlmType

# =============================================================================
# DECORATOR
# =============================================================================


class PullRequestDecorator(Protocol):
    """Publishes an analysis onto a pull request of one platform."""

    alm: AlmType

    def decorate(
        self,
        analysis: AnalysisDetails,
        alm_settings: AlmSettings,
        binding: ProjectBinding,
    ) -> DecorationResult:
        """Reconcile comments, annotations and status for the analysis.

        Raises:
            ConfigurationError: If required connection settings are missing.
            DecorationError: If the platform rejects a call.
        """
        ...


# =============================================================================
# DISCUSSION PLATFORM
# =============================================================================


class DiscussionPlatform(Protocol):
    """Discussion operations on one pull request, as the reconciler needs them."""

    def current_user(self) -> str:
        """Identity the tool posts as."""
        ...

    def discussions(self) -> list[Discussion]:
        """Every discussion on the pull request, all pages."""
        ...

    def commit_ids(self) -> list[str]:
        """Commits belonging to the pull request."""
        ...

    def add_note(self, discussion: Discussion, body: str) -> None: ...

    def resolve(self, discussion: Discussion) -> None: ...

    def delete(self, discussion: Discussion) -> None: ...

    def submit_issue_comment(self, issue: AnalysisIssue, body: str) -> None:
        """Open a discussion pinned to the issue's file and line."""
        ...

    def submit_summary(self, body: str, analysis: AnalysisDetails) -> None: ...

    def submit_status(
        self, analysis: AnalysisDetails, summary: AnalysisSummary
    ) -> None: ...

    def pull_request_url(self) -> str | None: ...
