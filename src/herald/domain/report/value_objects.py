"""Value objects for the Report bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from herald.domain.markup.formatter import FormatterFactory
from herald.domain.markup.nodes import (
    Document,
    Heading,
    Image,
    Link,
    List,
    ListItem,
    ListStyle,
    Node,
    Paragraph,
    Text,
)
from herald.shared.constants import VIEW_IN_SONARQUBE_LABEL
from herald.shared.types import (
    CommitSHA,
    ConditionOperator,
    ConditionStatus,
    FilePath,
    IssueStatus,
    IssueType,
    MetricValueType,
    QualityGateStatus,
    Severity,
    SoftwareQuality,
)

_OPEN_STATUSES = frozenset(
    {
        IssueStatus.OPEN,
        IssueStatus.CONFIRMED,
        IssueStatus.REOPENED,
        IssueStatus.TO_REVIEW,
    }
)
_FIXED_RESOLUTION = "FIXED"
_ACCEPTED_RESOLUTIONS = frozenset({"WONTFIX", "FALSE-POSITIVE"})


def format_decimal(value: Decimal | None) -> str:
    """Format a number the way reports show percentages (two decimals)."""
    return f"{(value if value is not None else Decimal(0)):.2f}"


def _plural(count: int, single: str, multiple: str) -> str:
    return f"{count} {single if count == 1 else multiple}"


# =============================================================================
# ANALYSIS INPUT
# =============================================================================


@dataclass(frozen=True)
class QualityGateCondition:
    """One threshold condition evaluated by the quality gate."""

    metric_key: str
    operator: ConditionOperator
    value: str | None
    error_threshold: str
    status: ConditionStatus
    metric_name: str | None = None
    value_type: MetricValueType | None = None


@dataclass(frozen=True)
class AnalysisIssue:
    """An issue raised by the analysis, with the data decorators need."""

    key: str
    rule_key: str
    message: str
    type: IssueType
    severity: Severity
    status: IssueStatus = IssueStatus.OPEN
    resolution: str | None = None
    line: int | None = None
    scm_path: FilePath | None = None
    effort_minutes: int | None = None
    software_quality: SoftwareQuality | None = None
    revision: CommitSHA | None = None

    @property
    def is_open(self) -> bool:
        return self.status in _OPEN_STATUSES

    @property
    def is_fixed(self) -> bool:
        return (
            self.status in (IssueStatus.CLOSED, IssueStatus.RESOLVED)
            and self.resolution == _FIXED_RESOLUTION
        )

    @property
    def is_accepted(self) -> bool:
        return self.status == IssueStatus.ACCEPTED or (
            self.resolution in _ACCEPTED_RESOLUTIONS
        )

    @property
    def is_security_review(self) -> bool:
        """Whether the issue is shown in the security-hotspot view."""
        return (
            self.software_quality == SoftwareQuality.SECURITY
            or self.type == IssueType.SECURITY_HOTSPOT
        )


@dataclass(frozen=True)
class AnalysisDetails:
    """Everything known about one completed analysis of a pull request."""

    project_key: str
    project_name: str
    pull_request_key: str
    commit_sha: CommitSHA
    quality_gate_status: QualityGateStatus
    analysis_date: datetime
    conditions: list[QualityGateCondition] = field(
        default_factory=list[QualityGateCondition]
    )
    issues: list[AnalysisIssue] = field(default_factory=list[AnalysisIssue])
    coverage: Decimal | None = None
    duplications: Decimal | None = None
    rule_names: dict[str, str] = field(default_factory=dict[str, str])
    scanner_properties: dict[str, str] = field(default_factory=dict[str, str])
    analysis_id: str | None = None

    @property
    def passed(self) -> bool:
        return self.quality_gate_status == QualityGateStatus.OK

    def find_condition(self, metric_key: str) -> QualityGateCondition | None:
        return next(
            (c for c in self.conditions if c.metric_key == metric_key),
            None,
        )

    def failed_conditions(self) -> list[QualityGateCondition]:
        return [c for c in self.conditions if c.status == ConditionStatus.ERROR]

    def open_issues(self) -> list[AnalysisIssue]:
        return [i for i in self.issues if i.is_open]

    def scm_reportable_issues(self) -> list[AnalysisIssue]:
        """Open issues that can be pinned to a file and line."""
        return [
            i
            for i in self.open_issues()
            if i.line is not None and i.scm_path is not None
        ]

    def scanner_property(self, name: str) -> str | None:
        value = self.scanner_properties.get(name, "").strip()
        return value or None


# =============================================================================
# REPORTS
# =============================================================================


@dataclass(frozen=True)
class IssueCounts:
    bugs: int = 0
    vulnerabilities: int = 0
    code_smells: int = 0
    security_hotspots: int = 0
    new: int = 0
    fixed: int = 0
    accepted: int = 0

    @property
    def total(self) -> int:
        return (
            self.bugs + self.vulnerabilities + self.code_smells + self.security_hotspots
        )


@dataclass(frozen=True)
class AnalysisSummary:
    """Overall result of an analysis, as shown in a summary comment."""

    project_key: str
    status_description: str
    status_image_url: str
    failed_conditions: list[str]
    dashboard_url: str
    new_coverage: Decimal | None
    coverage: Decimal | None
    coverage_image_url: str
    new_duplications: Decimal | None
    duplications: Decimal | None
    duplications_image_url: str
    counts: IssueCounts
    summary_image_url: str
    bug_image_url: str
    vulnerability_image_url: str
    security_hotspot_image_url: str
    code_smell_image_url: str

    def format(self, formatter_factory: FormatterFactory) -> str:
        counts = self.counts
        failed: Node = Text("")
        if self.failed_conditions:
            failed = List(
                ListStyle.BULLET,
                *(ListItem(Text(c)) for c in self.failed_conditions),
            )

        new_coverage = (
            f"{format_decimal(self.new_coverage)}% Coverage"
            if self.new_coverage is not None
            else "No coverage information"
        )
        new_duplications = (
            f"{format_decimal(self.new_duplications)}% Duplicated Code"
            if self.new_duplications is not None
            else "No duplication information"
        )

        document = Document(
            Paragraph(Image(self.status_description, self.status_image_url)),
            failed,
            Heading(1, Text("Analysis Details")),
            Heading(2, Text(_plural(counts.total, "Issue", "Issues"))),
            List(
                ListStyle.BULLET,
                _counted_item(
                    "Bug", self.bug_image_url, _plural(counts.bugs, "Bug", "Bugs")
                ),
                _counted_item(
                    "Vulnerability",
                    self.vulnerability_image_url,
                    _plural(counts.vulnerabilities, "Vulnerability", "Vulnerabilities"),
                ),
                _counted_item(
                    "Security Hotspot",
                    self.security_hotspot_image_url,
                    _plural(
                        counts.security_hotspots,
                        "Security Hotspot",
                        "Security Hotspots",
                    ),
                ),
                _counted_item(
                    "Code Smell",
                    self.code_smell_image_url,
                    _plural(counts.code_smells, "Code Smell", "Code Smells"),
                ),
            ),
            Heading(2, Text("Issue Changes")),
            List(
                ListStyle.BULLET,
                ListItem(Text(_plural(counts.new, "New Issue", "New Issues"))),
                ListItem(Text(_plural(counts.fixed, "Fixed Issue", "Fixed Issues"))),
                ListItem(
                    Text(_plural(counts.accepted, "Accepted Issue", "Accepted Issues"))
                ),
            ),
            Heading(2, Text("Coverage and Duplications")),
            List(
                ListStyle.BULLET,
                _counted_item(
                    "Coverage",
                    self.coverage_image_url,
                    f"{new_coverage} "
                    f"({format_decimal(self.coverage)}% Estimated after merge)",
                ),
                _counted_item(
                    "Duplications",
                    self.duplications_image_url,
                    f"{new_duplications} "
                    f"({format_decimal(self.duplications)}% Estimated after merge)",
                ),
            ),
            Paragraph(Text(f"**Project ID:** {self.project_key}")),
            Paragraph(Link(self.dashboard_url, Text(VIEW_IN_SONARQUBE_LABEL))),
        )
        return formatter_factory.document_formatter().format(document)


@dataclass(frozen=True)
class AnalysisIssueSummary:
    """A single issue, as shown in a file/line comment or annotation."""

    project_key: str
    issue_key: str
    issue_url: str
    message: str
    type: str
    type_image_url: str
    severity: str
    severity_image_url: str
    rule_name: str | None = None
    effort_minutes: int | None = None
    resolution: str | None = None

    def format(self, formatter_factory: FormatterFactory) -> str:
        rule: Node = Text("")
        if self.rule_name:
            rule = Paragraph(Text(f"**Rule:** {self.rule_name}"))
        effort: Node = Text("")
        if self.effort_minutes is not None:
            effort = Paragraph(Text(f"**Duration (min):** {self.effort_minutes}"))
        resolution: Node = Text("")
        if self.resolution and self.resolution.strip():
            resolution = Paragraph(Text(f"**Resolution:** {self.resolution}"))

        document = Document(
            Paragraph(
                Text(f"**Type:** {self.type} "),
                Image(self.type, self.type_image_url),
            ),
            Paragraph(
                Text(f"**Severity:** {self.severity} "),
                Image(self.severity, self.severity_image_url),
            ),
            Paragraph(Text(f"**Message:** {self.message}")),
            rule,
            effort,
            resolution,
            Paragraph(
                Text(
                    f"**Project ID:** {self.project_key} "
                    f"**Issue ID:** {self.issue_key}"
                )
            ),
            Paragraph(Link(self.issue_url, Text(VIEW_IN_SONARQUBE_LABEL))),
        )
        return formatter_factory.document_formatter().format(document)


def _counted_item(alt_text: str, image_url: str, label: str) -> ListItem:
    return ListItem(Image(alt_text, image_url), Text(" "), Text(label))
