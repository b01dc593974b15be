"""Provision Project use case."""

from __future__ import annotations

import logging

from dataclasses import dataclass

from herald.application.dto import ProvisionProjectCommand, ProvisionProjectResult
from herald.domain.branch.entities import BranchRecord, ComponentRow
from herald.domain.branch.repositories import BranchStore
from herald.shared.types import BranchType

logger = logging.getLogger(__name__)


@dataclass
class ProvisionProject:
    """Seeds a project's component and main branch so analyses can resolve.

    Re-running for an already provisioned project changes nothing.
    """

    store: BranchStore

    def execute(self, cmd: ProvisionProjectCommand) -> ProvisionProjectResult:
        project = cmd.project
        existing = self.store.find_main_branch(project.uuid)
        component = self.store.find_component(project.uuid)
        if existing is not None and component is not None:
            logger.info("Project %s is already provisioned", project.key)
            return ProvisionProjectResult(
                record=existing, component=component, created=False
            )

        if component is None:
            component = ComponentRow(
                uuid=project.uuid,
                key=project.key,
                name=project.name,
                qualifier=project.qualifier,
                main_branch_project_uuid=project.uuid,
            )
            self.store.insert_component(component)

        record = existing or BranchRecord(
            uuid=project.uuid,
            project_uuid=project.uuid,
            key=cmd.main_branch_name,
            branch_type=BranchType.MAIN,
            is_main=True,
            exclude_from_purge=True,
        )
        self.store.upsert_branch(record)
        logger.info(
            "Provisioned project %s with main branch '%s'", project.key, record.key
        )
        return ProvisionProjectResult(record=record, component=component, created=True)
