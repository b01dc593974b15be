"""Tests for ResolveBranch use case."""

from __future__ import annotations

from typing import Any

import pytest

from herald.application.dto import ResolveBranchCommand
from herald.application.resolve_branch import ResolveBranch
from herald.domain.branch.services import BranchPersister, BranchResolver
from herald.domain.branch.value_objects import ProjectRoot, ScannerBranchMetadata
from herald.shared.exceptions import BranchResolutionError
from herald.shared.types import BranchType


@pytest.fixture
def use_case(provisioned_store: Any) -> ResolveBranch:
    return ResolveBranch(
        resolver=BranchResolver(store=provisioned_store, new_uuid=lambda: "new-uuid"),
        persister=BranchPersister(store=provisioned_store),
    )


def _pull_request() -> ScannerBranchMetadata:
    return ScannerBranchMetadata(
        branch_name="feature/login",
        branch_type="PULL_REQUEST",
        target_branch_name="develop",
        pull_request_key="42",
    )


def test_resolves_and_persists_pull_request(
    use_case: ResolveBranch,
    provisioned_store: Any,
    project: ProjectRoot,
) -> None:
    result = use_case.execute(
        ResolveBranchCommand(
            metadata=_pull_request(),
            project=project,
            pull_request_url="https://example.com/pr/42",
        )
    )

    assert result.branch.type == BranchType.PULL_REQUEST
    assert result.branch.key == "42"
    assert result.record.key == "42"
    assert result.record.pull_request_data is not None
    assert result.record.pull_request_data.url == "https://example.com/pr/42"
    assert result.record.pull_request_data.target == "develop"
    assert provisioned_store.find_branch_by_pull_request_key(project.uuid, "42") == (
        result.record
    )


def test_rerun_keeps_known_pull_request_url(
    use_case: ResolveBranch, project: ProjectRoot
) -> None:
    use_case.execute(
        ResolveBranchCommand(
            metadata=_pull_request(),
            project=project,
            pull_request_url="https://example.com/pr/42",
        )
    )

    result = use_case.execute(
        ResolveBranchCommand(metadata=_pull_request(), project=project)
    )

    assert result.record.pull_request_data is not None
    assert result.record.pull_request_data.url == "https://example.com/pr/42"


def test_resolves_main_branch(use_case: ResolveBranch, project: ProjectRoot) -> None:
    result = use_case.execute(
        ResolveBranchCommand(metadata=ScannerBranchMetadata(), project=project)
    )

    assert result.branch.is_main
    assert result.record.uuid == project.uuid


def test_resolution_failure_writes_nothing(
    use_case: ResolveBranch,
    provisioned_store: Any,
    project: ProjectRoot,
) -> None:
    metadata = ScannerBranchMetadata(branch_name="feature/x", branch_type="LONG")
    writes = provisioned_store.writes

    with pytest.raises(BranchResolutionError):
        use_case.execute(ResolveBranchCommand(metadata=metadata, project=project))

    assert provisioned_store.writes == writes
