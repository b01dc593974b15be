"""Validation of the connection settings a decorator needs."""

from __future__ import annotations

from herald.shared.exceptions import ConfigurationError
from herald.shared.types import ConfigurationScope


def require_setting(
    value: str | None,
    message: str,
    scope: ConfigurationScope = ConfigurationScope.GLOBAL,
) -> str:
    """Return *value* stripped, or fail when it is missing or blank.

    Raises:
        ConfigurationError: If the setting is not set.
    """
    stripped = (value or "").strip()
    if not stripped:
        raise ConfigurationError(message, scope)
    return stripped
