"""Resolve Branch use case."""

from __future__ import annotations

import logging

from dataclasses import dataclass

from herald.application.dto import ResolveBranchCommand, ResolveBranchResult
from herald.domain.branch.services import BranchPersister, BranchResolver

logger = logging.getLogger(__name__)


@dataclass
class ResolveBranch:
    """Identifies the branch of an analysis run and records it.

    Resolution failures propagate as ``BranchResolutionError``; they are
    never downgraded, since an analysis must not land on the wrong branch.
    """

    resolver: BranchResolver
    persister: BranchPersister

    def execute(self, cmd: ResolveBranchCommand) -> ResolveBranchResult:
        branch = self.resolver.resolve(cmd.metadata, cmd.project)
        logger.info(
            "Resolved %s '%s' (key %s) for project %s",
            branch.type.value,
            branch.name,
            branch.key,
            cmd.project.key,
        )
        record = self.persister.persist(
            branch, cmd.project, pull_request_url=cmd.pull_request_url
        )
        return ResolveBranchResult(branch=branch, record=record)
