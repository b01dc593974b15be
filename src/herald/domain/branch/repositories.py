"""Repository protocols for the Branch bounded context."""

from __future__ import annotations

from typing import Protocol

from herald.domain.branch.entities import BranchRecord, ComponentRow

# =============================================================================
# PROTOCOLS
# =============================================================================


class BranchStore(Protocol):
    """Persisted branch and component records of every project."""

    def find_branch_by_key(self, project_uuid: str, key: str) -> BranchRecord | None:
        """Look up a branch record by its key (branch name or PR key)."""
        ...

    def find_main_branch(self, project_uuid: str) -> BranchRecord | None:
        """Look up the project's main branch record."""
        ...

    def find_branch_by_pull_request_key(
        self, project_uuid: str, pull_request_key: str
    ) -> BranchRecord | None:
        """Look up a pull-request record by its external key."""
        ...

    def find_component(self, uuid: str) -> ComponentRow | None:
        """Look up a root component row."""
        ...

    def insert_component(self, row: ComponentRow) -> None:
        """Insert a new root component row."""
        ...

    def upsert_branch(self, record: BranchRecord) -> None:
        """Insert a record, or replace the one with the same project and key."""
        ...
