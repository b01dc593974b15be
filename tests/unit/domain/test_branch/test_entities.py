"""Tests for branch entities."""

from __future__ import annotations

import pytest

from herald.domain.branch.entities import Branch, BranchRecord, PullRequestData
from herald.shared.exceptions import BranchResolutionError
from herald.shared.types import BranchType

# =============================================================================
# Branch
# =============================================================================


def test_pull_request_cannot_be_main() -> None:
    with pytest.raises(BranchResolutionError, match="cannot be the main branch"):
        Branch(
            uuid="u",
            name="feature",
            type=BranchType.PULL_REQUEST,
            is_main=True,
            key="1",
        )


def test_pull_request_requires_key() -> None:
    with pytest.raises(BranchResolutionError, match="requires a pull request key"):
        Branch(
            uuid="u",
            name="feature",
            type=BranchType.PULL_REQUEST,
            is_main=False,
            key="",
        )


def test_pull_request_key_of_pull_request() -> None:
    branch = Branch(
        uuid="u", name="feature", type=BranchType.PULL_REQUEST, is_main=False, key="42"
    )

    assert branch.pull_request_key == "42"
    assert branch.is_pull_request


def test_pull_request_key_of_branch_is_an_error() -> None:
    branch = Branch(
        uuid="u", name="develop", type=BranchType.BRANCH, is_main=False, key="develop"
    )

    with pytest.raises(BranchResolutionError, match="PULL_REQUEST"):
        _ = branch.pull_request_key


# =============================================================================
# PullRequestData
# =============================================================================


def test_merged_with_none_keeps_new_values() -> None:
    data = PullRequestData(branch="feature", url="https://x/pr/1")

    assert data.merged_with(None) is data


def test_merged_with_previous_keeps_unknown_values() -> None:
    previous = PullRequestData(
        branch="feature",
        title="Feature",
        target="main",
        url="https://x/pr/1",
        attributes={"origin": "fork"},
    )
    update = PullRequestData(branch="feature", title="Feature", target="develop")

    merged = update.merged_with(previous)

    assert merged.target == "develop"
    assert merged.url == "https://x/pr/1"
    assert merged.attributes == {"origin": "fork"}


def test_record_target_branch_name() -> None:
    record = BranchRecord(
        uuid="u",
        project_uuid="p",
        key="1",
        branch_type=BranchType.PULL_REQUEST,
        pull_request_data=PullRequestData(target="main"),
    )

    assert record.target_branch_name == "main"
    assert BranchRecord(
        uuid="u", project_uuid="p", key="main", branch_type=BranchType.MAIN
    ).target_branch_name is None
