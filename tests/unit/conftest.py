"""Fixtures shared across unit test layers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import pytest

from herald.domain.branch.entities import BranchRecord, ComponentRow
from herald.domain.branch.value_objects import ProjectRoot
from herald.domain.markup.formatter import MarkdownFormatterFactory
from herald.domain.report.services import ReportGenerator, RuleNameCache
from herald.domain.report.value_objects import (
    AnalysisDetails,
    AnalysisIssue,
    QualityGateCondition,
)
from herald.shared.types import (
    BranchType,
    CommitSHA,
    ConditionOperator,
    ConditionStatus,
    FilePath,
    IssueType,
    QualityGateStatus,
    Severity,
)

# =============================================================================
# Branch store
# =============================================================================


@dataclass
class InMemoryBranchStore:
    """BranchStore backed by plain lists, recording every write."""

    branches: list[BranchRecord] = field(default_factory=list[BranchRecord])
    components: list[ComponentRow] = field(default_factory=list[ComponentRow])
    writes: int = 0

    def find_branch_by_key(self, project_uuid: str, key: str) -> BranchRecord | None:
        return next(
            (
                b
                for b in self.branches
                if b.project_uuid == project_uuid
                and b.key == key
                and b.branch_type != BranchType.PULL_REQUEST
            ),
            None,
        )

    def find_main_branch(self, project_uuid: str) -> BranchRecord | None:
        return next(
            (b for b in self.branches if b.project_uuid == project_uuid and b.is_main),
            None,
        )

    def find_branch_by_pull_request_key(
        self, project_uuid: str, pull_request_key: str
    ) -> BranchRecord | None:
        return next(
            (
                b
                for b in self.branches
                if b.project_uuid == project_uuid
                and b.key == pull_request_key
                and b.branch_type == BranchType.PULL_REQUEST
            ),
            None,
        )

    def find_component(self, uuid: str) -> ComponentRow | None:
        return next((c for c in self.components if c.uuid == uuid), None)

    def insert_component(self, row: ComponentRow) -> None:
        self.writes += 1
        self.components.append(row)

    def upsert_branch(self, record: BranchRecord) -> None:
        self.writes += 1
        self.branches = [
            b
            for b in self.branches
            if not (
                b.project_uuid == record.project_uuid
                and b.key == record.key
                and b.branch_type == record.branch_type
            )
        ]
        self.branches.append(record)


@pytest.fixture
def project() -> ProjectRoot:
    return ProjectRoot(uuid="project-uuid", key="my-project", name="My Project")


@pytest.fixture
def store() -> InMemoryBranchStore:
    return InMemoryBranchStore()


@pytest.fixture
def provisioned_store(project: ProjectRoot) -> InMemoryBranchStore:
    """A store holding the project's main branch and a ``develop`` branch."""
    return InMemoryBranchStore(
        branches=[
            BranchRecord(
                uuid=project.uuid,
                project_uuid=project.uuid,
                key="main",
                branch_type=BranchType.MAIN,
                is_main=True,
                exclude_from_purge=True,
            ),
            BranchRecord(
                uuid="develop-uuid",
                project_uuid=project.uuid,
                key="develop",
                branch_type=BranchType.BRANCH,
                merge_branch_uuid=project.uuid,
            ),
        ],
        components=[
            ComponentRow(uuid=project.uuid, key=project.key, name=project.name),
            ComponentRow(uuid="develop-uuid", key=project.key, name=project.name),
        ],
    )


# =============================================================================
# Analysis
# =============================================================================


def _issue(**overrides: Any) -> AnalysisIssue:
    defaults: dict[str, Any] = {
        "key": "issue-1",
        "rule_key": "python:S1192",
        "message": "Define a constant instead of duplicating this literal",
        "type": IssueType.CODE_SMELL,
        "severity": Severity.MAJOR,
        "line": 12,
        "scm_path": FilePath("src/app.py"),
        "effort_minutes": 5,
        "revision": CommitSHA("abc123"),
    }
    defaults.update(overrides)
    return AnalysisIssue(**defaults)


@pytest.fixture
def make_issue() -> Callable[..., AnalysisIssue]:
    return _issue


@pytest.fixture
def analysis() -> AnalysisDetails:
    return AnalysisDetails(
        project_key="my-project",
        project_name="My Project",
        pull_request_key="42",
        commit_sha=CommitSHA("abc123"),
        quality_gate_status=QualityGateStatus.ERROR,
        analysis_date=datetime(2024, 5, 1, 10, 0, tzinfo=UTC),
        conditions=[
            QualityGateCondition(
                metric_key="new_coverage",
                operator=ConditionOperator.LESS_THAN,
                value="62.5",
                error_threshold="80",
                status=ConditionStatus.ERROR,
            ),
            QualityGateCondition(
                metric_key="new_duplicated_lines_density",
                operator=ConditionOperator.GREATER_THAN,
                value="1.2",
                error_threshold="3",
                status=ConditionStatus.OK,
            ),
        ],
        issues=[
            _issue(),
            _issue(
                key="issue-2",
                rule_key="python:S2259",
                message="Fix this null dereference",
                type=IssueType.BUG,
                severity=Severity.CRITICAL,
                line=40,
                scm_path=FilePath("src/db.py"),
            ),
        ],
        coverage=Decimal("71.4"),
        duplications=Decimal("2.5"),
        rule_names={"python:S1192": "String literals should not be duplicated"},
    )


@pytest.fixture
def passed_analysis(analysis: AnalysisDetails) -> AnalysisDetails:
    return replace(analysis, quality_gate_status=QualityGateStatus.OK)


@pytest.fixture
def report_generator(analysis: AnalysisDetails) -> ReportGenerator:
    return ReportGenerator(
        server_url="https://sonar.example.com",
        rule_names=RuleNameCache(lookup=analysis.rule_names.get),
    )


@pytest.fixture
def formatter_factory() -> MarkdownFormatterFactory:
    return MarkdownFormatterFactory()
