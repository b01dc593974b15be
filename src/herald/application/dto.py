"""Application-layer command and result DTOs."""

from __future__ import annotations

from dataclasses import dataclass

from herald.domain.branch.entities import Branch, BranchRecord, ComponentRow
from herald.domain.branch.value_objects import ProjectRoot, ScannerBranchMetadata
from herald.domain.decoration.value_objects import AlmSettings, ProjectBinding
from herald.domain.report.value_objects import AnalysisDetails

# =============================================================================
# RESOLVE BRANCH
# =============================================================================


@dataclass(frozen=True)
class ResolveBranchCommand:
    """Command to identify and persist the branch an analysis run belongs to."""

    metadata: ScannerBranchMetadata
    project: ProjectRoot
    pull_request_url: str | None = None


@dataclass(frozen=True)
class ResolveBranchResult:
    """Resolved identity and the record written for it."""

    branch: Branch
    record: BranchRecord


# =============================================================================
# DECORATE PULL REQUEST
# =============================================================================


@dataclass(frozen=True)
class DecoratePullRequestCommand:
    """Command to publish an analysis onto its pull request."""

    analysis: AnalysisDetails
    alm_settings: AlmSettings
    binding: ProjectBinding


# =============================================================================
# PROVISION PROJECT
# =============================================================================


@dataclass(frozen=True)
class ProvisionProjectCommand:
    """Command to register a project and its main branch."""

    project: ProjectRoot
    main_branch_name: str


@dataclass(frozen=True)
class ProvisionProjectResult:
    record: BranchRecord
    component: ComponentRow
    created: bool
