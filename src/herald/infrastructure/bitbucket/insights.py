"""Code Insights report content shared by Bitbucket Cloud and Server.

Both products accept the same report and annotation concepts but spell the
JSON differently, so this module produces plain values and each client
shapes them for its own API.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import TypeVar

from herald.domain.report.services import (
    NEW_COVERAGE_KEY,
    NEW_DUPLICATED_LINES_DENSITY_KEY,
    ReportGenerator,
)
from herald.domain.report.value_objects import AnalysisDetails, AnalysisIssue
from herald.shared.types import ConditionStatus, IssueType, Severity

T = TypeVar("T")

LINK_TEXT = "Go to SonarQube"


@dataclass(frozen=True)
class ReportEntry:
    """One row of the report's data panel.

    ``kind`` is ``TEXT``, ``PERCENTAGE`` or ``LINK``; a LINK's value is the
    target URL.
    """

    title: str
    kind: str
    value: str | float


@dataclass(frozen=True)
class InsightAnnotation:
    external_id: str
    line: int
    link: str
    message: str
    path: str
    severity: str
    type: str


# =============================================================================
# REPORT
# =============================================================================


def _plural(count: int, single: str, multiple: str) -> str:
    return f"{count} {single if count == 1 else multiple}"


def _condition_percentage(analysis: AnalysisDetails, metric_key: str) -> float:
    condition = analysis.find_condition(metric_key)
    if (
        condition is None
        or condition.status == ConditionStatus.NO_VALUE
        or condition.value is None
    ):
        return 0.0
    return float(Decimal(condition.value))


def report_entries(
    analysis: AnalysisDetails, report_generator: ReportGenerator
) -> list[ReportEntry]:
    """Build the data panel: reliability, coverage, security, duplication..."""
    counts = report_generator.create_analysis_summary(analysis).counts
    security = (
        f"{_plural(counts.vulnerabilities, 'Vulnerability', 'Vulnerabilities')}"
        f" (and {_plural(counts.security_hotspots, 'Hotspot', 'Hotspots')})"
    )
    return [
        ReportEntry("Reliability", "TEXT", _plural(counts.bugs, "Bug", "Bugs")),
        ReportEntry(
            "Code coverage",
            "PERCENTAGE",
            _condition_percentage(analysis, NEW_COVERAGE_KEY),
        ),
        ReportEntry("Security", "TEXT", security),
        ReportEntry(
            "Duplication",
            "PERCENTAGE",
            _condition_percentage(analysis, NEW_DUPLICATED_LINES_DENSITY_KEY),
        ),
        ReportEntry(
            "Maintainability",
            "TEXT",
            _plural(counts.code_smells, "Code Smell", "Code Smells"),
        ),
        ReportEntry(
            "Analysis details", "LINK", report_generator.dashboard_url(analysis)
        ),
    ]


def report_details(
    analysis: AnalysisDetails, report_generator: ReportGenerator
) -> str:
    header = "Quality Gate passed" if analysis.passed else "Quality Gate failed"
    body = "\n".join(
        f"- {report_generator.format_condition(c)}"
        for c in analysis.failed_conditions()
    )
    return f"{header}\n{body}"


def logo_url(report_generator: ReportGenerator) -> str:
    return f"{report_generator.base_image_url}/common/icon.png"


# =============================================================================
# ANNOTATIONS
# =============================================================================


def annotation_severity(severity: Severity) -> str:
    if severity >= Severity.CRITICAL:
        return "HIGH"
    if severity == Severity.MAJOR:
        return "MEDIUM"
    return "LOW"


def annotation_type(issue: AnalysisIssue) -> str:
    if issue.type in (IssueType.VULNERABILITY, IssueType.SECURITY_HOTSPOT):
        return "VULNERABILITY"
    return issue.type.value


def annotations(
    analysis: AnalysisDetails, report_generator: ReportGenerator
) -> list[InsightAnnotation]:
    """Annotations for open issues that have a file, most severe first."""
    issues = sorted(
        (i for i in analysis.open_issues() if i.scm_path is not None),
        key=lambda i: i.severity,
        reverse=True,
    )
    return [
        InsightAnnotation(
            external_id=issue.key,
            line=issue.line or 0,
            link=report_generator.issue_url(issue, analysis),
            message=issue.message,
            path=str(issue.scm_path),
            severity=annotation_severity(issue.severity),
            type=annotation_type(issue),
        )
        for issue in issues
    ]


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]
