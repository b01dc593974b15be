"""Shared environment variable helpers and default constants for interfaces."""

from __future__ import annotations

import os

from herald.shared.exceptions import ConfigurationError

# Mode defaults.
DEFAULT_MODE = "analyse"
DEFAULT_REPORT_PATH = "herald-report.json"

# Environment variable names.
ENV_MODE = "HERALD_MODE"
ENV_ALM_TOKEN = "HERALD_ALM_TOKEN"
ENV_REPORT_PATH = "HERALD_REPORT_PATH"
ENV_MAIN_BRANCH = "HERALD_MAIN_BRANCH"


def require_env(name: str) -> str:
    """Read a required environment variable or raise.

    Raises:
        ConfigurationError: If the variable is missing or empty.
    """
    value = os.environ.get(name)
    if not value:
        msg = f"Missing required environment variable: {name}"
        raise ConfigurationError(msg)
    return value
