"""Decorate Pull Request use case."""

from __future__ import annotations

import logging

from collections.abc import Iterable
from dataclasses import dataclass, field

from herald.application.dto import DecoratePullRequestCommand
from herald.domain.decoration.repositories import PullRequestDecorator
from herald.domain.decoration.value_objects import DecorationResult
from herald.shared.exceptions import ConfigurationError
from herald.shared.types import AlmType

logger = logging.getLogger(__name__)


@dataclass
class DecoratePullRequest:
    """Dispatches an analysis to the decorator registered for its platform.

    A misconfigured binding skips decoration rather than failing the run:
    the analysis itself has already been recorded by then.
    """

    decorators: dict[AlmType, PullRequestDecorator] = field(
        default_factory=dict[AlmType, PullRequestDecorator]
    )

    @classmethod
    def from_decorators(
        cls, decorators: Iterable[PullRequestDecorator]
    ) -> DecoratePullRequest:
        return cls(decorators={d.alm: d for d in decorators})

    def execute(self, cmd: DecoratePullRequestCommand) -> DecorationResult | None:
        """Decorate the pull request, or return None when it is skipped.

        Raises:
            DecorationError: If the platform rejects a call.
        """
        alm = cmd.alm_settings.alm
        decorator = self.decorators.get(alm)
        if decorator is None:
            logger.warning("No decorator registered for %s, skipping", alm.value)
            return None

        try:
            result = decorator.decorate(cmd.analysis, cmd.alm_settings, cmd.binding)
        except ConfigurationError as e:
            logger.error(
                "Skipping decoration of pull request %s, "
                "%s configuration is invalid: %s",
                cmd.analysis.pull_request_key,
                e.scope.value.lower(),
                e,
            )
            return None

        logger.info(
            "Decorated pull request %s on %s", cmd.analysis.pull_request_key, alm.value
        )
        return result
