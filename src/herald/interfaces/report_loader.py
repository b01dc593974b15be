"""Loader for the JSON analysis report handed over by the scanner pipeline.

The document looks like::

    {
      "analysis_id": "AY...",
      "analysis_date": "2024-05-01T10:00:00+00:00",
      "commit_sha": "abc123",
      "project": {"uuid": "...", "key": "my-project", "name": "My Project"},
      "branch": {"name": "feature/x", "type": "PULL_REQUEST",
                 "target": "main", "pull_request_key": "42"},
      "quality_gate": {"status": "OK", "conditions": [...]},
      "measures": {"coverage": "81.3", "duplicated_lines_density": "1.2"},
      "issues": [...],
      "rules": {"python:S1192": "String literals should not be duplicated"},
      "scanner_properties": {"herald.gitlab.pipelineId": "1234"}
    }
"""

from __future__ import annotations

import logging

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from herald.domain.branch.value_objects import ProjectRoot, ScannerBranchMetadata
from herald.domain.report.value_objects import (
    AnalysisDetails,
    AnalysisIssue,
    QualityGateCondition,
)
from herald.shared.exceptions import ConfigurationError
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

logger = logging.getLogger(__name__)

_COVERAGE_MEASURE = "coverage"
_DUPLICATIONS_MEASURE = "duplicated_lines_density"


# =============================================================================
# WIRE MODELS
# =============================================================================


class ProjectModel(BaseModel):
    uuid: str
    key: str
    name: str
    qualifier: str = "TRK"


class BranchModel(BaseModel):
    name: str | None = None
    type: str | None = None
    reference: str | None = None
    target: str | None = None
    pull_request_key: str | None = None


class ConditionModel(BaseModel):
    metric_key: str
    operator: ConditionOperator
    value: str | None = None
    error_threshold: str
    status: ConditionStatus
    metric_name: str | None = None
    value_type: MetricValueType | None = None


class QualityGateModel(BaseModel):
    status: QualityGateStatus
    conditions: list[ConditionModel] = Field(default_factory=list[ConditionModel])


class IssueModel(BaseModel):
    key: str
    rule_key: str
    message: str
    type: IssueType
    severity: str
    status: IssueStatus = IssueStatus.OPEN
    resolution: str | None = None
    line: int | None = None
    path: str | None = None
    effort_minutes: int | None = None
    software_quality: SoftwareQuality | None = None
    revision: str | None = None


class ReportModel(BaseModel):
    analysis_id: str | None = None
    analysis_date: datetime
    commit_sha: str
    project: ProjectModel
    branch: BranchModel = Field(default_factory=BranchModel)
    quality_gate: QualityGateModel
    measures: dict[str, Decimal] = Field(default_factory=dict[str, Decimal])
    issues: list[IssueModel] = Field(default_factory=list[IssueModel])
    rules: dict[str, str] = Field(default_factory=dict[str, str])
    scanner_properties: dict[str, str] = Field(default_factory=dict[str, str])


# =============================================================================
# DOMAIN VIEW
# =============================================================================


@dataclass(frozen=True)
class AnalysisReport:
    """A loaded report, exposing the pieces each use case consumes."""

    model: ReportModel

    @property
    def project(self) -> ProjectRoot:
        p = self.model.project
        return ProjectRoot(uuid=p.uuid, key=p.key, name=p.name, qualifier=p.qualifier)

    @property
    def metadata(self) -> ScannerBranchMetadata:
        b = self.model.branch
        return ScannerBranchMetadata(
            branch_name=b.name,
            branch_type=b.type,
            reference_branch_name=b.reference,
            target_branch_name=b.target,
            pull_request_key=b.pull_request_key,
        )

    @property
    def rule_names(self) -> dict[str, str]:
        return dict(self.model.rules)

    def analysis(self, pull_request_key: str) -> AnalysisDetails:
        m = self.model
        return AnalysisDetails(
            project_key=m.project.key,
            project_name=m.project.name,
            pull_request_key=pull_request_key,
            commit_sha=CommitSHA(m.commit_sha),
            quality_gate_status=m.quality_gate.status,
            analysis_date=m.analysis_date,
            conditions=[_condition(c) for c in m.quality_gate.conditions],
            issues=[_issue(i) for i in m.issues],
            coverage=m.measures.get(_COVERAGE_MEASURE),
            duplications=m.measures.get(_DUPLICATIONS_MEASURE),
            rule_names=dict(m.rules),
            scanner_properties=dict(m.scanner_properties),
            analysis_id=m.analysis_id,
        )


def load_report(path: Path) -> AnalysisReport:
    """Read and validate the analysis report at *path*.

    Raises:
        ConfigurationError: If the file is missing or is not a valid report.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read analysis report {path}: {e}"
        raise ConfigurationError(msg) from e
    try:
        model = ReportModel.model_validate_json(raw)
    except ValidationError as e:
        msg = f"Invalid analysis report {path}: {e}"
        raise ConfigurationError(msg) from e
    logger.info(
        "Loaded analysis report for %s with %d issues",
        model.project.key,
        len(model.issues),
    )
    return AnalysisReport(model=model)


def _condition(c: ConditionModel) -> QualityGateCondition:
    return QualityGateCondition(
        metric_key=c.metric_key,
        operator=c.operator,
        value=c.value,
        error_threshold=c.error_threshold,
        status=c.status,
        metric_name=c.metric_name,
        value_type=c.value_type,
    )


def _issue(i: IssueModel) -> AnalysisIssue:
    return AnalysisIssue(
        key=i.key,
        rule_key=i.rule_key,
        message=i.message,
        type=i.type,
        severity=_severity(i.severity),
        status=i.status,
        resolution=i.resolution,
        line=i.line,
        scm_path=FilePath(i.path) if i.path else None,
        effort_minutes=i.effort_minutes,
        software_quality=i.software_quality,
        revision=CommitSHA(i.revision) if i.revision else None,
    )


def _severity(raw: str) -> Severity:
    try:
        return Severity[raw.strip().upper()]
    except KeyError:
        msg = f"Unknown issue severity {raw!r}"
        raise ConfigurationError(msg) from None
