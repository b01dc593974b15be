"""Tests for the Code Insights report content."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace

import pytest

from herald.domain.report.services import ReportGenerator
from herald.domain.report.value_objects import AnalysisDetails, AnalysisIssue
from herald.infrastructure.bitbucket import insights
from herald.infrastructure.bitbucket.insights import ReportEntry
from herald.shared.types import IssueStatus, IssueType, Severity

DASHBOARD = "https://sonar.example.com/dashboard?id=my-project&pullRequest=42"

# =============================================================================
# Report
# =============================================================================


def test_report_entries(
    analysis: AnalysisDetails, report_generator: ReportGenerator
) -> None:
    assert insights.report_entries(analysis, report_generator) == [
        ReportEntry("Reliability", "TEXT", "1 Bug"),
        ReportEntry("Code coverage", "PERCENTAGE", 62.5),
        ReportEntry("Security", "TEXT", "0 Vulnerabilities (and 0 Hotspots)"),
        ReportEntry("Duplication", "PERCENTAGE", 1.2),
        ReportEntry("Maintainability", "TEXT", "1 Code Smell"),
        ReportEntry("Analysis details", "LINK", DASHBOARD),
    ]


def test_report_entries_without_conditions(
    analysis: AnalysisDetails, report_generator: ReportGenerator
) -> None:
    entries = insights.report_entries(
        replace(analysis, conditions=[]), report_generator
    )

    percentages = [e.value for e in entries if e.kind == "PERCENTAGE"]
    assert percentages == [0.0, 0.0]


def test_report_details_lists_failed_conditions(
    analysis: AnalysisDetails, report_generator: ReportGenerator
) -> None:
    assert insights.report_details(analysis, report_generator) == (
        "Quality Gate failed\n- 62.50% Coverage on New Code (is less than 80.00%)"
    )


def test_report_details_when_passed(
    passed_analysis: AnalysisDetails, report_generator: ReportGenerator
) -> None:
    details = insights.report_details(
        replace(passed_analysis, conditions=[]), report_generator
    )

    assert details == "Quality Gate passed\n"


def test_logo_url(report_generator: ReportGenerator) -> None:
    assert insights.logo_url(report_generator) == (
        "https://sonar.example.com/static/communityBranchPlugin/common/icon.png"
    )


# =============================================================================
# Annotations
# =============================================================================


@pytest.mark.parametrize(
    ("severity", "expected"),
    [
        (Severity.BLOCKER, "HIGH"),
        (Severity.CRITICAL, "HIGH"),
        (Severity.MAJOR, "MEDIUM"),
        (Severity.MINOR, "LOW"),
        (Severity.INFO, "LOW"),
    ],
)
def test_annotation_severity(severity: Severity, expected: str) -> None:
    assert insights.annotation_severity(severity) == expected


@pytest.mark.parametrize(
    ("issue_type", "expected"),
    [
        (IssueType.VULNERABILITY, "VULNERABILITY"),
        (IssueType.SECURITY_HOTSPOT, "VULNERABILITY"),
        (IssueType.BUG, "BUG"),
        (IssueType.CODE_SMELL, "CODE_SMELL"),
    ],
)
def test_annotation_type(
    make_issue: Callable[..., AnalysisIssue], issue_type: IssueType, expected: str
) -> None:
    assert insights.annotation_type(make_issue(type=issue_type)) == expected


def test_annotations_most_severe_first(
    analysis: AnalysisDetails, report_generator: ReportGenerator
) -> None:
    result = insights.annotations(analysis, report_generator)

    assert [a.external_id for a in result] == ["issue-2", "issue-1"]
    first = result[0]
    assert first.path == "src/db.py"
    assert first.line == 40
    assert first.severity == "HIGH"
    assert first.type == "BUG"
    assert first.message == "Fix this null dereference"
    assert first.link == (
        "https://sonar.example.com/project/issues?id=my-project"
        "&pullRequest=42&issues=issue-2&open=issue-2"
    )


def test_annotations_skip_closed_and_fileless_issues(
    analysis: AnalysisDetails,
    report_generator: ReportGenerator,
    make_issue: Callable[..., AnalysisIssue],
) -> None:
    issues = [
        make_issue(key="closed", status=IssueStatus.CLOSED, resolution="FIXED"),
        make_issue(key="project-level", scm_path=None),
        make_issue(key="no-line", line=None),
    ]

    result = insights.annotations(replace(analysis, issues=issues), report_generator)

    assert [(a.external_id, a.line) for a in result] == [("no-line", 0)]


def test_chunked() -> None:
    assert list(insights.chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]
    assert list(insights.chunked([], 2)) == []
