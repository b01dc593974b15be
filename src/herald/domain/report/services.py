"""Domain services for the Report bounded context."""

from __future__ import annotations

import urllib.parse

from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from herald.domain.report.value_objects import (
    AnalysisDetails,
    AnalysisIssue,
    AnalysisIssueSummary,
    AnalysisSummary,
    IssueCounts,
    QualityGateCondition,
    format_decimal,
)
from herald.shared.constants import DEFAULT_IMAGE_PATH
from herald.shared.types import (
    ConditionOperator,
    ConditionStatus,
    IssueType,
    MetricValueType,
    Rating,
)

# =============================================================================
# METRICS
# =============================================================================

NEW_COVERAGE_KEY = "new_coverage"
NEW_DUPLICATED_LINES_DENSITY_KEY = "new_duplicated_lines_density"

_METRICS: dict[str, tuple[str, MetricValueType]] = {
    "new_coverage": ("Coverage on New Code", MetricValueType.PERCENT),
    "coverage": ("Coverage", MetricValueType.PERCENT),
    "new_line_coverage": ("Line Coverage on New Code", MetricValueType.PERCENT),
    "new_branch_coverage": ("Condition Coverage on New Code", MetricValueType.PERCENT),
    "new_duplicated_lines_density": (
        "Duplicated Lines (%) on New Code",
        MetricValueType.PERCENT,
    ),
    "duplicated_lines_density": ("Duplicated Lines (%)", MetricValueType.PERCENT),
    "new_security_hotspots_reviewed": (
        "Security Hotspots Reviewed on New Code",
        MetricValueType.PERCENT,
    ),
    "new_reliability_rating": (
        "Reliability Rating on New Code",
        MetricValueType.RATING,
    ),
    "new_security_rating": ("Security Rating on New Code", MetricValueType.RATING),
    "new_maintainability_rating": (
        "Maintainability Rating on New Code",
        MetricValueType.RATING,
    ),
    "reliability_rating": ("Reliability Rating", MetricValueType.RATING),
    "security_rating": ("Security Rating", MetricValueType.RATING),
    "sqale_rating": ("Maintainability Rating", MetricValueType.RATING),
    "new_violations": ("New Issues", MetricValueType.INT),
    "new_bugs": ("New Bugs", MetricValueType.INT),
    "new_vulnerabilities": ("New Vulnerabilities", MetricValueType.INT),
    "new_code_smells": ("New Code Smells", MetricValueType.INT),
    "new_blocker_violations": ("New Blocker Issues", MetricValueType.INT),
    "new_critical_violations": ("New Critical Issues", MetricValueType.INT),
}

_COVERAGE_LEVELS = (100, 90, 60, 50, 40, 25)
_DUPLICATION_LEVELS = (3, 5, 10, 20)


# =============================================================================
# RULE NAMES
# =============================================================================


@dataclass
class RuleNameCache:
    """Memoises rule-key to display-name lookups for one generator.

    ``lookup`` is asked at most once per rule key; misses are remembered
    too.
    """

    lookup: Callable[[str], str | None]
    _names: dict[str, str | None] = field(default_factory=dict, init=False, repr=False)

    def name_of(self, rule_key: str) -> str | None:
        if rule_key not in self._names:
            self._names[rule_key] = self.lookup(rule_key)
        return self._names[rule_key]

    def __len__(self) -> int:
        return len(self._names)


# =============================================================================
# GENERATOR
# =============================================================================


@dataclass
class ReportGenerator:
    """Builds summary and per-issue reports from an analysis.

    Args:
        server_url: Public root URL of the analysis server.
        rule_names: Rule display-name cache owned by this generator.
        image_url_base: Where report images are served from. Defaults to
            the server's static plugin path.
    """

    server_url: str
    rule_names: RuleNameCache
    image_url_base: str | None = None

    @property
    def base_image_url(self) -> str:
        base = self.image_url_base or f"{self.server_url}{DEFAULT_IMAGE_PATH}"
        return base.rstrip("/")

    @property
    def root_url(self) -> str:
        return self.server_url.rstrip("/")

    def create_analysis_summary(self, analysis: AnalysisDetails) -> AnalysisSummary:
        new_coverage = _condition_value(analysis.find_condition(NEW_COVERAGE_KEY))
        new_duplications = _condition_value(
            analysis.find_condition(NEW_DUPLICATED_LINES_DENSITY_KEY)
        )
        images = self.base_image_url
        status = "passed" if analysis.passed else "failed"

        return AnalysisSummary(
            project_key=analysis.project_key,
            status_description="Passed" if analysis.passed else "Failed",
            status_image_url=(
                f"{images}/checks/QualityGateBadge/{status}.svg?sanitize=true"
            ),
            failed_conditions=[
                self.format_condition(c) for c in analysis.failed_conditions()
            ],
            dashboard_url=self.dashboard_url(analysis),
            new_coverage=new_coverage,
            coverage=analysis.coverage,
            coverage_image_url=_coverage_image(new_coverage, images),
            new_duplications=new_duplications,
            duplications=analysis.duplications,
            duplications_image_url=_duplication_image(new_duplications, images),
            counts=_count_issues(analysis.issues),
            summary_image_url=f"{images}/common/icon.png",
            bug_image_url=f"{images}/common/bug.svg?sanitize=true",
            vulnerability_image_url=f"{images}/common/vulnerability.svg?sanitize=true",
            security_hotspot_image_url=(
                f"{images}/common/security_hotspot.svg?sanitize=true"
            ),
            code_smell_image_url=f"{images}/common/code_smell.svg?sanitize=true",
        )

    def create_analysis_issue_summary(
        self, issue: AnalysisIssue, analysis: AnalysisDetails
    ) -> AnalysisIssueSummary:
        images = self.base_image_url
        severity = issue.severity.name
        return AnalysisIssueSummary(
            project_key=analysis.project_key,
            issue_key=issue.key,
            issue_url=self.issue_url(issue, analysis),
            message=issue.message,
            type=issue.type.value,
            type_image_url=(
                f"{images}/checks/IssueType/{issue.type.value.lower()}"
                ".svg?sanitize=true"
            ),
            severity=severity,
            severity_image_url=(
                f"{images}/checks/Severity/{severity.lower()}.svg?sanitize=true"
            ),
            rule_name=self.rule_names.name_of(issue.rule_key),
            effort_minutes=issue.effort_minutes,
            resolution=issue.resolution,
        )

    def dashboard_url(self, analysis: AnalysisDetails) -> str:
        project = urllib.parse.quote_plus(analysis.project_key)
        return (
            f"{self.root_url}/dashboard?id={project}"
            f"&pullRequest={analysis.pull_request_key}"
        )

    def issue_url(self, issue: AnalysisIssue, analysis: AnalysisDetails) -> str:
        """Deep link to an issue, or to the hotspot view for security reviews."""
        project = urllib.parse.quote_plus(analysis.project_key)
        pull_request = analysis.pull_request_key
        if issue.is_security_review:
            return (
                f"{self.root_url}/security_hotspots?id={project}"
                f"&pullRequest={pull_request}&hotspots={issue.key}"
            )
        return (
            f"{self.root_url}/project/issues?id={project}"
            f"&pullRequest={pull_request}&issues={issue.key}&open={issue.key}"
        )

    def format_condition(self, condition: QualityGateCondition) -> str:
        """Describe a failed quality-gate condition in one line."""
        default_name, default_type = _METRICS.get(
            condition.metric_key, (condition.metric_key, MetricValueType.INT)
        )
        name = condition.metric_name or default_name
        value_type = condition.value_type or default_type
        greater = condition.operator == ConditionOperator.GREATER_THAN

        if value_type == MetricValueType.RATING:
            comparison = "is worse than" if greater else "is better than"
            return (
                f"{_rating(condition.value)} {name} "
                f"({comparison} {_rating(condition.error_threshold)})"
            )

        comparison = "is greater than" if greater else "is less than"
        if value_type == MetricValueType.PERCENT:
            return (
                f"{format_decimal(_decimal(condition.value))}% {name} "
                f"({comparison} {format_decimal(_decimal(condition.error_threshold))}%)"
            )
        return f"{condition.value} {name} ({comparison} {condition.error_threshold})"


# =============================================================================
# HELPERS
# =============================================================================


def _decimal(raw: str | None) -> Decimal | None:
    if raw is None:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        return None


def _rating(raw: str | None) -> str:
    try:
        return Rating(int(float(raw or ""))).name
    except ValueError:
        return str(raw)


def _condition_value(condition: QualityGateCondition | None) -> Decimal | None:
    if condition is None or condition.status == ConditionStatus.NO_VALUE:
        return None
    return _decimal(condition.value)


def _coverage_image(coverage: Decimal | None, base_image_url: str) -> str:
    if coverage is None:
        return f"{base_image_url}/checks/CoverageChart/NoCoverageInfo.svg?sanitize=true"
    level = next((lvl for lvl in _COVERAGE_LEVELS if coverage >= lvl), 0)
    return f"{base_image_url}/checks/CoverageChart/{level}.svg?sanitize=true"


def _duplication_image(duplications: Decimal | None, base_image_url: str) -> str:
    if duplications is None:
        return (
            f"{base_image_url}/checks/Duplications/NoDuplicationInfo.svg?sanitize=true"
        )
    level = next(
        (str(lvl) for lvl in _DUPLICATION_LEVELS if duplications <= lvl), "20plus"
    )
    return f"{base_image_url}/checks/Duplications/{level}.svg?sanitize=true"


def _count_issues(issues: list[AnalysisIssue]) -> IssueCounts:
    open_issues = [i for i in issues if i.is_open]

    def of_type(issue_type: IssueType) -> int:
        return sum(1 for i in open_issues if i.type == issue_type)

    return IssueCounts(
        bugs=of_type(IssueType.BUG),
        vulnerabilities=of_type(IssueType.VULNERABILITY),
        code_smells=of_type(IssueType.CODE_SMELL),
        security_hotspots=of_type(IssueType.SECURITY_HOTSPOT),
        new=sum(1 for i in open_issues if i.type != IssueType.SECURITY_HOTSPOT),
        fixed=sum(1 for i in issues if i.is_fixed),
        accepted=sum(1 for i in issues if i.is_accepted),
    )
