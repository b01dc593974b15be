"""Entities for the Branch bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from herald.shared.exceptions import BranchResolutionError
from herald.shared.types import BranchType

# =============================================================================
# RESOLVED IDENTITY
# =============================================================================


@dataclass(frozen=True)
class Branch:
    """Resolved identity of one analysis target.

    ``key`` is what the persisted record is keyed by: the branch name for
    main and named branches, the pull-request key for pull requests.
    """

    uuid: str
    name: str
    type: BranchType
    is_main: bool
    key: str
    reference_branch_uuid: str | None = None
    target_branch_name: str | None = None

    def __post_init__(self) -> None:
        if self.type == BranchType.PULL_REQUEST and self.is_main:
            msg = "A pull request cannot be the main branch"
            raise BranchResolutionError(msg)
        if self.type == BranchType.PULL_REQUEST and not self.key:
            msg = "A pull request requires a pull request key"
            raise BranchResolutionError(msg)

    @property
    def pull_request_key(self) -> str:
        """External pull-request identifier.

        Raises:
            BranchResolutionError: If this branch is not a pull request.
        """
        if self.type != BranchType.PULL_REQUEST:
            msg = "Only a branch of type PULL_REQUEST can have a pull request ID"
            raise BranchResolutionError(msg)
        return self.key

    @property
    def is_pull_request(self) -> bool:
        return self.type == BranchType.PULL_REQUEST


# =============================================================================
# PERSISTED RECORDS
# =============================================================================


@dataclass(frozen=True)
class PullRequestData:
    """Display data stored alongside a pull-request branch record."""

    branch: str | None = None
    title: str | None = None
    target: str | None = None
    url: str | None = None
    attributes: dict[str, str] = field(default_factory=dict[str, str])

    def merged_with(self, previous: PullRequestData | None) -> PullRequestData:
        """Overlay this data onto *previous*.

        Values set here win; anything only *previous* knows about survives.
        """
        if previous is None:
            return self
        return replace(
            previous,
            branch=self.branch if self.branch is not None else previous.branch,
            title=self.title if self.title is not None else previous.title,
            target=self.target if self.target is not None else previous.target,
            url=self.url if self.url is not None else previous.url,
            attributes={**previous.attributes, **self.attributes},
        )


@dataclass(frozen=True)
class BranchRecord:
    """Durable branch record, keyed by ``(project_uuid, key)``."""

    uuid: str
    project_uuid: str
    key: str
    branch_type: BranchType
    is_main: bool = False
    merge_branch_uuid: str | None = None
    exclude_from_purge: bool = False
    pull_request_data: PullRequestData | None = None

    @property
    def target_branch_name(self) -> str | None:
        if self.pull_request_data is None:
            return None
        return self.pull_request_data.target


@dataclass(frozen=True)
class ComponentRow:
    """Root component backing a branch record."""

    uuid: str
    key: str
    name: str
    scope: str = "PRJ"
    qualifier: str = "TRK"
    main_branch_project_uuid: str | None = None
