"""Typed exception hierarchy for Herald."""

from __future__ import annotations

from herald.shared.types import ConfigurationScope

# =============================================================================
# BASE
# =============================================================================


class HeraldError(Exception):
    """Base exception for all Herald errors."""


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigurationError(HeraldError):
    """Invalid or missing configuration.

    ``scope`` tells the operator where the setting lives: instance-wide
    (``GLOBAL``) or on the project binding (``PROJECT``).
    """

    def __init__(
        self,
        message: str,
        scope: ConfigurationScope = ConfigurationScope.GLOBAL,
    ) -> None:
        self.scope = scope
        super().__init__(message)


# =============================================================================
# BRANCH RESOLUTION
# =============================================================================


class BranchResolutionError(HeraldError):
    """The branch or pull request of an analysis run could not be identified."""


# =============================================================================
# MARKUP
# =============================================================================


class MarkupError(HeraldError):
    """A document tree was built or rendered with an unsupported node."""


# =============================================================================
# DECORATION
# =============================================================================


class DecorationError(HeraldError):
    """Failed to decorate a pull request on the remote platform."""


class UnexpectedResponseError(DecorationError):
    """A remote platform answered with a status code the call did not expect."""

    def __init__(
        self,
        platform: str,
        expected: int | tuple[int, ...],
        actual: int,
        body: str,
    ) -> None:
        self.platform = platform
        self.expected = expected if isinstance(expected, tuple) else (expected,)
        self.actual = actual
        self.body = body
        wanted = ", ".join(str(code) for code in self.expected)
        super().__init__(
            f"An unexpected response code was returned from the {platform} API"
            f" - Expected: {wanted}, Got: {actual}"
        )
