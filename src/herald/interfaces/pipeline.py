"""Analysis pipeline entry point and composition root."""

from __future__ import annotations

import logging
import sys

from herald.application.decorate_pull_request import DecoratePullRequest
from herald.application.dto import DecoratePullRequestCommand, ResolveBranchCommand
from herald.application.resolve_branch import ResolveBranch
from herald.domain.branch.services import BranchPersister, BranchResolver
from herald.domain.decoration.repositories import PullRequestDecorator
from herald.domain.decoration.value_objects import DecorationResult
from herald.domain.markup.formatter import MarkdownFormatterFactory
from herald.domain.report.services import ReportGenerator, RuleNameCache
from herald.infrastructure.azure_devops.decorator import AzureDevOpsDecorator
from herald.infrastructure.bitbucket.cloud_decorator import BitbucketCloudDecorator
from herald.infrastructure.bitbucket.server_decorator import BitbucketServerDecorator
from herald.infrastructure.github.decorator import GitHubDecorator
from herald.infrastructure.gitlab.decorator import GitLabDecorator
from herald.infrastructure.storage.branch_store import JsonBranchStore
from herald.interfaces.config import RunConfig
from herald.interfaces.report_loader import AnalysisReport, load_report
from herald.shared.exceptions import HeraldError

logger = logging.getLogger(__name__)


def run() -> None:
    """Execute the resolve, decorate or analyse pipeline."""
    try:
        config = RunConfig.from_env()
        execute(config)
    except HeraldError as e:
        logger.error("Herald failed: %s", e)
        sys.exit(1)
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(1)


def execute(config: RunConfig) -> DecorationResult | None:
    """Wire infrastructure, build the use cases, and run the configured mode."""
    report = load_report(config.report_path)
    store = JsonBranchStore(storage_dir=config.storage_dir)

    # 1. Resolve and record the branch
    resolve = ResolveBranch(
        resolver=BranchResolver(store=store),
        persister=BranchPersister(
            store=store, branches_to_keep=config.settings.branches_to_keep
        ),
    )
    pull_request_key = report.metadata.pull_request_key
    if config.mode in ("resolve", "analyse"):
        resolved = resolve.execute(
            ResolveBranchCommand(metadata=report.metadata, project=report.project)
        )
        if not resolved.branch.is_pull_request:
            logger.info("Not a pull request analysis, nothing to decorate")
            return None
        pull_request_key = resolved.branch.pull_request_key
        if config.mode == "resolve":
            return None

    if not pull_request_key:
        logger.info("No pull request key in the report, nothing to decorate")
        return None

    # 2. Decorate
    alm_settings = config.alm_settings()
    if alm_settings is None:
        logger.info("No ALM configured for this project, skipping decoration")
        return None

    decorate = DecoratePullRequest.from_decorators(_decorators(config, report))
    result = decorate.execute(
        DecoratePullRequestCommand(
            analysis=report.analysis(pull_request_key),
            alm_settings=alm_settings,
            binding=config.project_binding(),
        )
    )

    # 3. Remember where the pull request lives
    if result is not None and result.pull_request_url and config.mode == "analyse":
        resolve.execute(
            ResolveBranchCommand(
                metadata=report.metadata,
                project=report.project,
                pull_request_url=result.pull_request_url,
            )
        )
    return result


def _decorators(
    config: RunConfig, report: AnalysisReport
) -> list[PullRequestDecorator]:
    rule_names = report.rule_names
    generator = ReportGenerator(
        server_url=config.settings.server_url,
        rule_names=RuleNameCache(lookup=rule_names.get),
        image_url_base=config.settings.image_url_base,
    )
    formatter_factory = MarkdownFormatterFactory()
    return [
        GitHubDecorator(generator, formatter_factory),
        GitLabDecorator(generator, formatter_factory),
        BitbucketCloudDecorator(generator, formatter_factory),
        BitbucketServerDecorator(generator, formatter_factory),
        AzureDevOpsDecorator(generator, formatter_factory),
    ]
