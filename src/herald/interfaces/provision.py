"""Project provisioning entry point."""

from __future__ import annotations

import logging
import sys

from herald.application.dto import ProvisionProjectCommand, ProvisionProjectResult
from herald.application.provision_project import ProvisionProject
from herald.infrastructure.storage.branch_store import JsonBranchStore
from herald.interfaces.config import RunConfig
from herald.interfaces.env_utils import ENV_MAIN_BRANCH, require_env
from herald.interfaces.report_loader import load_report
from herald.shared.exceptions import HeraldError

logger = logging.getLogger(__name__)


def run() -> None:
    """Register the report's project and its main branch in the store."""
    try:
        config = RunConfig.from_env()
        execute(config, require_env(ENV_MAIN_BRANCH))
    except HeraldError as e:
        logger.error("Herald failed: %s", e)
        sys.exit(1)
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(1)


def execute(config: RunConfig, main_branch_name: str) -> ProvisionProjectResult:
    report = load_report(config.report_path)
    use_case = ProvisionProject(store=JsonBranchStore(storage_dir=config.storage_dir))
    return use_case.execute(
        ProvisionProjectCommand(
            project=report.project, main_branch_name=main_branch_name.strip()
        )
    )
