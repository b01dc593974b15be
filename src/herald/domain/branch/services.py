"""Domain services for the Branch bounded context."""

from __future__ import annotations

import logging
import re
import uuid

from collections.abc import Callable
from dataclasses import dataclass, field

from herald.domain.branch.entities import (
    Branch,
    BranchRecord,
    ComponentRow,
    PullRequestData,
)
from herald.domain.branch.repositories import BranchStore
from herald.domain.branch.value_objects import ProjectRoot, ScannerBranchMetadata
from herald.shared.exceptions import BranchResolutionError
from herald.shared.types import BranchType

logger = logging.getLogger(__name__)

_APPLICATION_QUALIFIER = "APP"


def _strip_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _new_uuid() -> str:
    return str(uuid.uuid4())


# =============================================================================
# RESOLVER
# =============================================================================


@dataclass
class BranchResolver:
    """Classifies an analysis run as the main branch, a branch or a pull request.

    Only read-only lookups are made against the store. Every failure is a
    ``BranchResolutionError``; nothing is defaulted silently.
    """

    store: BranchStore
    new_uuid: Callable[[], str] = _new_uuid

    def resolve(self, metadata: ScannerBranchMetadata, project: ProjectRoot) -> Branch:
        """Compute the canonical branch identity for this run.

        Args:
            metadata: Branch metadata declared by the scanner.
            project: The project being analysed.

        Returns:
            The resolved ``Branch``.

        Raises:
            BranchResolutionError: If the main branch or the reference branch
                cannot be found, or the branch type is not supported.
        """
        branch_name = _strip_to_none(metadata.branch_name)
        target_branch_name = _strip_to_none(metadata.target_branch_name)

        if branch_name is None:
            return self._main_branch(project, target_branch_name)

        reference_branch_name = _strip_to_none(metadata.reference_branch_name)
        branch_type = (_strip_to_none(metadata.branch_type) or "").upper()

        if branch_type == BranchType.PULL_REQUEST:
            return self._pull_request(
                project,
                branch_name,
                reference_branch_name or target_branch_name,
                target_branch_name or reference_branch_name,
                _strip_to_none(metadata.pull_request_key),
            )
        if branch_type == BranchType.BRANCH:
            return self._branch(project, branch_name, reference_branch_name)

        msg = f"Invalid branch type '{metadata.branch_type}'"
        raise BranchResolutionError(msg)

    def _main_branch(
        self, project: ProjectRoot, target_branch_name: str | None
    ) -> Branch:
        record = self.store.find_main_branch(project.uuid)
        if record is None:
            msg = "Could not find main branch"
            raise BranchResolutionError(msg)
        return Branch(
            uuid=record.uuid,
            name=record.key,
            type=record.branch_type,
            is_main=record.is_main,
            key=record.key,
            target_branch_name=target_branch_name or record.key,
        )

    def _pull_request(
        self,
        project: ProjectRoot,
        branch_name: str,
        reference_branch_name: str | None,
        target_branch_name: str | None,
        pull_request_key: str | None,
    ) -> Branch:
        reference = self._find_reference(project, reference_branch_name)
        if pull_request_key is None:
            msg = f"No pull request key supplied for branch '{branch_name}'"
            raise BranchResolutionError(msg)

        existing = self.store.find_branch_by_pull_request_key(
            project.uuid, pull_request_key
        )
        return Branch(
            uuid=existing.uuid if existing is not None else self.new_uuid(),
            name=branch_name,
            type=BranchType.PULL_REQUEST,
            is_main=False,
            key=pull_request_key,
            reference_branch_uuid=reference.uuid,
            target_branch_name=target_branch_name,
        )

    def _branch(
        self,
        project: ProjectRoot,
        branch_name: str,
        reference_branch_name: str | None,
    ) -> Branch:
        if reference_branch_name is None:
            reference_uuid = project.uuid
        else:
            reference_uuid = self._find_reference(project, reference_branch_name).uuid

        existing = self.store.find_branch_by_key(project.uuid, branch_name)
        return Branch(
            uuid=existing.uuid if existing is not None else self.new_uuid(),
            name=branch_name,
            type=BranchType.BRANCH,
            is_main=existing.is_main if existing is not None else False,
            key=branch_name,
            reference_branch_uuid=reference_uuid,
        )

    def _find_reference(
        self, project: ProjectRoot, reference_branch_name: str | None
    ) -> BranchRecord:
        record = None
        if reference_branch_name is not None:
            record = self.store.find_branch_by_key(project.uuid, reference_branch_name)
        if record is None:
            msg = f"Could not find target branch '{reference_branch_name}' in project"
            raise BranchResolutionError(msg)
        return record


# =============================================================================
# PERSISTER
# =============================================================================


@dataclass
class BranchPersister:
    """Writes a resolved ``Branch`` into the store.

    One read-modify-write per call; an analysis task owns its branch
    exclusively, so no concurrency retry is attempted.
    """

    store: BranchStore
    branches_to_keep: list[str] = field(default_factory=list[str])

    def persist(
        self,
        branch: Branch,
        project: ProjectRoot,
        pull_request_url: str | None = None,
    ) -> BranchRecord:
        """Upsert the branch record, creating its component on first sight.

        Args:
            branch: The resolved branch identity.
            project: The project being analysed.
            pull_request_url: Front-end URL of the pull request, if known.

        Returns:
            The record that was written.

        Raises:
            BranchResolutionError: If the main branch's component no longer
                exists.
        """
        component = self.store.find_component(branch.uuid)
        if component is None:
            if branch.is_main:
                msg = "Component has been deleted by end-user during analysis"
                raise BranchResolutionError(msg)
            component = ComponentRow(
                uuid=branch.uuid,
                key=project.key,
                name=project.name,
                main_branch_project_uuid=branch.reference_branch_uuid,
            )
            self.store.insert_component(component)
            logger.info("Created component %s for %s", component.uuid, branch.name)

        record = self._to_record(branch, project, component, pull_request_url)
        self.store.upsert_branch(record)
        logger.info(
            "Persisted %s '%s' for project %s",
            branch.type.value.lower(),
            record.key,
            project.key,
        )
        return record

    def is_excluded_from_purge(self, branch: Branch) -> bool:
        """Whether an inactive branch must survive housekeeping."""
        if branch.is_main:
            return True
        if branch.is_pull_request:
            return False
        return any(
            re.fullmatch(pattern, branch.name) for pattern in self.branches_to_keep
        )

    def _to_record(
        self,
        branch: Branch,
        project: ProjectRoot,
        component: ComponentRow,
        pull_request_url: str | None,
    ) -> BranchRecord:
        merge_branch_uuid = None
        if not branch.is_main and component.qualifier != _APPLICATION_QUALIFIER:
            merge_branch_uuid = branch.reference_branch_uuid

        pull_request_data = None
        if branch.is_pull_request:
            key = branch.pull_request_key
            previous = self.store.find_branch_by_pull_request_key(project.uuid, key)
            pull_request_data = PullRequestData(
                branch=branch.name,
                title=branch.name,
                target=branch.target_branch_name,
                url=pull_request_url,
            ).merged_with(previous.pull_request_data if previous else None)
        else:
            key = branch.name

        return BranchRecord(
            uuid=component.uuid,
            project_uuid=project.uuid,
            key=key,
            branch_type=branch.type,
            is_main=branch.is_main,
            merge_branch_uuid=merge_branch_uuid,
            exclude_from_purge=self.is_excluded_from_purge(branch),
            pull_request_data=pull_request_data,
        )
