"""Configuration assembly from ``pyproject.toml`` and environment variables."""

from __future__ import annotations

import os

from dataclasses import dataclass
from pathlib import Path

from herald.domain.decoration.value_objects import AlmSettings, ProjectBinding
from herald.interfaces.env_utils import (
    DEFAULT_MODE,
    DEFAULT_REPORT_PATH,
    ENV_ALM_TOKEN,
    ENV_MODE,
    ENV_REPORT_PATH,
)
from herald.interfaces.toml_config import HeraldConfig, load_herald_config

VALID_MODES = frozenset({"resolve", "decorate", "analyse", "provision"})


@dataclass(frozen=True)
class RunConfig:
    """Typed configuration for one Herald invocation.

    Secrets never come from ``pyproject.toml``; the platform token is read
    from the environment only.
    """

    mode: str
    report_path: Path
    settings: HeraldConfig
    alm_token: str = ""

    @classmethod
    def from_env(cls, project_root: Path | None = None) -> RunConfig:
        """Build config from ``[tool.herald]`` and environment variables.

        Optional (with defaults):
            HERALD_MODE, HERALD_REPORT_PATH, HERALD_ALM_TOKEN
        """
        return cls(
            mode=os.environ.get(ENV_MODE, DEFAULT_MODE).strip().lower(),
            report_path=Path(os.environ.get(ENV_REPORT_PATH, DEFAULT_REPORT_PATH)),
            settings=load_herald_config(project_root),
            alm_token=os.environ.get(ENV_ALM_TOKEN, "").strip(),
        )

    @property
    def storage_dir(self) -> Path:
        return Path(self.settings.storage_dir)

    def alm_settings(self) -> AlmSettings | None:
        """Instance-level connection settings, or None if no ALM is bound."""
        if self.settings.alm is None:
            return None
        return AlmSettings(
            alm=self.settings.alm,
            token=self.alm_token,
            url=self.settings.provider.url,
        )

    def project_binding(self) -> ProjectBinding:
        s = self.settings
        return ProjectBinding(
            repository=s.provider.repository or "",
            namespace=s.provider.namespace,
            monorepo=s.monorepo,
            summary_comment_enabled=s.summary_comment_enabled,
            file_comment_enabled=s.file_comment_enabled,
            delete_comments_enabled=s.delete_comments_enabled,
        )
