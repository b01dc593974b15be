"""Tests for report generation."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any

import pytest

from herald.domain.markup.formatter import MarkdownFormatterFactory
from herald.domain.report.services import ReportGenerator, RuleNameCache
from herald.domain.report.value_objects import AnalysisDetails, QualityGateCondition
from herald.shared.types import (
    ConditionOperator,
    ConditionStatus,
    IssueStatus,
    IssueType,
    MetricValueType,
)

IMAGES = "https://sonar.example.com/static/communityBranchPlugin"


def _condition(
    metric_key: str,
    operator: ConditionOperator,
    value: str,
    threshold: str,
    **kwargs: Any,
) -> QualityGateCondition:
    return QualityGateCondition(
        metric_key=metric_key,
        operator=operator,
        value=value,
        error_threshold=threshold,
        status=ConditionStatus.ERROR,
        **kwargs,
    )


# =============================================================================
# Rule names
# =============================================================================


def test_rule_name_cache_looks_up_each_key_once() -> None:
    calls: list[str] = []

    def lookup(key: str) -> str | None:
        calls.append(key)
        return {"r1": "Rule One"}.get(key)

    cache = RuleNameCache(lookup=lookup)

    assert cache.name_of("r1") == "Rule One"
    assert cache.name_of("r1") == "Rule One"
    assert cache.name_of("r2") is None
    assert cache.name_of("r2") is None
    assert calls == ["r1", "r2"]
    assert len(cache) == 2


# =============================================================================
# URLs
# =============================================================================


def test_image_base_defaults_to_server_plugin_path(
    report_generator: ReportGenerator,
) -> None:
    assert report_generator.base_image_url == IMAGES


def test_image_base_override_drops_trailing_slash() -> None:
    generator = ReportGenerator(
        server_url="https://sonar.example.com/",
        rule_names=RuleNameCache(lookup=lambda _: None),
        image_url_base="https://cdn.example.com/images/",
    )

    assert generator.base_image_url == "https://cdn.example.com/images"
    assert generator.root_url == "https://sonar.example.com"


def test_dashboard_url_quotes_project_key(
    report_generator: ReportGenerator, analysis: AnalysisDetails
) -> None:
    details = replace(analysis, project_key="org:my project")

    assert report_generator.dashboard_url(details) == (
        "https://sonar.example.com/dashboard?id=org%3Amy+project&pullRequest=42"
    )


def test_issue_url(
    report_generator: ReportGenerator, analysis: AnalysisDetails, make_issue
) -> None:
    assert report_generator.issue_url(make_issue(), analysis) == (
        "https://sonar.example.com/project/issues?id=my-project"
        "&pullRequest=42&issues=issue-1&open=issue-1"
    )


def test_hotspot_url(
    report_generator: ReportGenerator, analysis: AnalysisDetails, make_issue
) -> None:
    hotspot = make_issue(key="h1", type=IssueType.SECURITY_HOTSPOT)

    assert report_generator.issue_url(hotspot, analysis) == (
        "https://sonar.example.com/security_hotspots?id=my-project"
        "&pullRequest=42&hotspots=h1"
    )


# =============================================================================
# Conditions
# =============================================================================


@pytest.mark.parametrize(
    ("condition", "expected"),
    [
        (
            _condition("new_coverage", ConditionOperator.LESS_THAN, "62.5", "80"),
            "62.50% Coverage on New Code (is less than 80.00%)",
        ),
        (
            _condition(
                "new_reliability_rating", ConditionOperator.GREATER_THAN, "3", "1"
            ),
            "C Reliability Rating on New Code (is worse than A)",
        ),
        (
            _condition("new_bugs", ConditionOperator.GREATER_THAN, "4", "0"),
            "4 New Bugs (is greater than 0)",
        ),
        (
            _condition(
                "custom_metric",
                ConditionOperator.GREATER_THAN,
                "12",
                "10",
                metric_name="Custom Metric",
            ),
            "12 Custom Metric (is greater than 10)",
        ),
        (
            _condition(
                "custom_percent",
                ConditionOperator.LESS_THAN,
                "1",
                "5",
                value_type=MetricValueType.PERCENT,
            ),
            "1.00% custom_percent (is less than 5.00%)",
        ),
    ],
)
def test_format_condition(
    report_generator: ReportGenerator, condition: QualityGateCondition, expected: str
) -> None:
    assert report_generator.format_condition(condition) == expected


# =============================================================================
# Summary
# =============================================================================


def test_summary_counts_open_issues(
    report_generator: ReportGenerator, analysis: AnalysisDetails, make_issue
) -> None:
    details = replace(
        analysis,
        issues=[
            *analysis.issues,
            make_issue(key="v", type=IssueType.VULNERABILITY),
            make_issue(key="h", type=IssueType.SECURITY_HOTSPOT),
            make_issue(key="f", status=IssueStatus.CLOSED, resolution="FIXED"),
            make_issue(key="a", status=IssueStatus.ACCEPTED),
        ],
    )

    counts = report_generator.create_analysis_summary(details).counts

    assert counts.bugs == 1
    assert counts.vulnerabilities == 1
    assert counts.code_smells == 1
    assert counts.security_hotspots == 1
    assert counts.total == 4
    assert counts.new == 3
    assert counts.fixed == 1
    assert counts.accepted == 1


@pytest.mark.parametrize(
    ("coverage", "image"),
    [(None, "NoCoverageInfo"), ("100", "100"), ("62.5", "60"), ("10", "0")],
)
def test_coverage_image(
    report_generator: ReportGenerator,
    analysis: AnalysisDetails,
    coverage: str | None,
    image: str,
) -> None:
    conditions: list[QualityGateCondition] = []
    if coverage is not None:
        conditions = [
            _condition("new_coverage", ConditionOperator.LESS_THAN, coverage, "0")
        ]
    details = replace(analysis, conditions=conditions)

    summary = report_generator.create_analysis_summary(details)

    assert summary.coverage_image_url == (
        f"{IMAGES}/checks/CoverageChart/{image}.svg?sanitize=true"
    )


@pytest.mark.parametrize(
    ("duplications", "image"),
    [(None, "NoDuplicationInfo"), ("2", "3"), ("4.5", "5"), ("25", "20plus")],
)
def test_duplication_image(
    report_generator: ReportGenerator,
    analysis: AnalysisDetails,
    duplications: str | None,
    image: str,
) -> None:
    conditions: list[QualityGateCondition] = []
    if duplications is not None:
        conditions = [
            _condition(
                "new_duplicated_lines_density",
                ConditionOperator.GREATER_THAN,
                duplications,
                "3",
            )
        ]
    details = replace(analysis, conditions=conditions)

    summary = report_generator.create_analysis_summary(details)

    assert summary.duplications_image_url == (
        f"{IMAGES}/checks/Duplications/{image}.svg?sanitize=true"
    )


def test_summary_markdown(
    report_generator: ReportGenerator,
    analysis: AnalysisDetails,
    formatter_factory: MarkdownFormatterFactory,
) -> None:
    summary = report_generator.create_analysis_summary(analysis)

    assert summary.format(formatter_factory) == (
        f"![Failed]({IMAGES}/checks/QualityGateBadge/failed.svg?sanitize=true)\n\n"
        "- 62.50% Coverage on New Code (is less than 80.00%)\n\n"
        "# Analysis Details\n"
        "## 2 Issues\n"
        f"- ![Bug]({IMAGES}/common/bug.svg?sanitize=true) 1 Bug\n"
        f"- ![Vulnerability]({IMAGES}/common/vulnerability.svg?sanitize=true)"
        " 0 Vulnerabilities\n"
        f"- ![Security Hotspot]({IMAGES}/common/security_hotspot.svg?sanitize=true)"
        " 0 Security Hotspots\n"
        f"- ![Code Smell]({IMAGES}/common/code_smell.svg?sanitize=true)"
        " 1 Code Smell\n\n"
        "## Issue Changes\n"
        "- 2 New Issues\n"
        "- 0 Fixed Issues\n"
        "- 0 Accepted Issues\n\n"
        "## Coverage and Duplications\n"
        f"- ![Coverage]({IMAGES}/checks/CoverageChart/60.svg?sanitize=true)"
        " 62.50% Coverage (71.40% Estimated after merge)\n"
        f"- ![Duplications]({IMAGES}/checks/Duplications/3.svg?sanitize=true)"
        " 1.20% Duplicated Code (2.50% Estimated after merge)\n\n"
        "**Project ID:** my-project\n\n"
        "[View in SonarQube]"
        "(https://sonar.example.com/dashboard?id=my-project&pullRequest=42)\n\n"
    )


def test_passed_summary_has_no_condition_list(
    report_generator: ReportGenerator,
    passed_analysis: AnalysisDetails,
    formatter_factory: MarkdownFormatterFactory,
) -> None:
    details = replace(passed_analysis, conditions=[], coverage=None, duplications=None)

    markdown = report_generator.create_analysis_summary(details).format(
        formatter_factory
    )

    assert markdown.startswith(
        f"![Passed]({IMAGES}/checks/QualityGateBadge/passed.svg?sanitize=true)\n\n"
        "# Analysis Details\n"
    )
    assert "No coverage information (0.00% Estimated after merge)" in markdown
    assert "No duplication information (0.00% Estimated after merge)" in markdown


# =============================================================================
# Issue summary
# =============================================================================


def test_issue_summary_markdown(
    report_generator: ReportGenerator,
    analysis: AnalysisDetails,
    formatter_factory: MarkdownFormatterFactory,
) -> None:
    issue = analysis.issues[0]

    summary = report_generator.create_analysis_issue_summary(issue, analysis)

    assert summary.format(formatter_factory) == (
        "**Type:** CODE_SMELL "
        f"![CODE_SMELL]({IMAGES}/checks/IssueType/code_smell.svg?sanitize=true)\n\n"
        "**Severity:** MAJOR "
        f"![MAJOR]({IMAGES}/checks/Severity/major.svg?sanitize=true)\n\n"
        "**Message:** Define a constant instead of duplicating this literal\n\n"
        "**Rule:** String literals should not be duplicated\n\n"
        "**Duration (min):** 5\n\n"
        "**Project ID:** my-project **Issue ID:** issue-1\n\n"
        "[View in SonarQube](https://sonar.example.com/project/issues?id=my-project"
        "&pullRequest=42&issues=issue-1&open=issue-1)\n\n"
    )


def test_issue_summary_escapes_message(
    report_generator: ReportGenerator,
    analysis: AnalysisDetails,
    formatter_factory: MarkdownFormatterFactory,
    make_issue,
) -> None:
    issue = make_issue(
        message="Replace <T> & friends", rule_key="unknown", effort_minutes=None
    )

    markdown = report_generator.create_analysis_issue_summary(issue, analysis).format(
        formatter_factory
    )

    assert "**Message:** Replace &lt;T&gt; &amp; friends\n\n" in markdown
    assert "**Rule:**" not in markdown
    assert "**Duration (min):**" not in markdown


def test_issue_summary_shows_resolution(
    report_generator: ReportGenerator,
    analysis: AnalysisDetails,
    formatter_factory: MarkdownFormatterFactory,
    make_issue,
) -> None:
    issue = make_issue(status=IssueStatus.RESOLVED, resolution="WONTFIX")

    markdown = report_generator.create_analysis_issue_summary(issue, analysis).format(
        formatter_factory
    )

    assert "**Resolution:** WONTFIX\n\n" in markdown


def test_coverage_estimate_uses_overall_measure(
    report_generator: ReportGenerator, analysis: AnalysisDetails
) -> None:
    summary = report_generator.create_analysis_summary(
        replace(analysis, coverage=Decimal("90"))
    )

    assert summary.coverage == Decimal("90")
    assert summary.new_coverage == Decimal("62.5")
