"""Value objects for the Decoration bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field

from herald.shared.types import AlmType

# =============================================================================
# SETTINGS
# =============================================================================


@dataclass(frozen=True)
class AlmSettings:
    """Instance-wide connection settings for one code-hosting platform."""

    alm: AlmType
    token: str
    url: str | None = None


@dataclass(frozen=True)
class ProjectBinding:
    """How one project maps onto a repository of the platform.

    ``repository`` is the repository identifier the platform uses
    (``owner/name`` on GitHub, the project id or path on GitLab, the
    repository slug or name elsewhere). ``namespace`` holds the enclosing
    workspace or project where the platform needs one.
    """

    repository: str
    namespace: str | None = None
    monorepo: bool = False
    summary_comment_enabled: bool = True
    file_comment_enabled: bool = True
    delete_comments_enabled: bool = False


# =============================================================================
# DISCUSSIONS
# =============================================================================


@dataclass(frozen=True)
class Note:
    """One comment inside a discussion thread."""

    id: str
    author: str
    body: str | None
    is_user_note: bool = True


@dataclass(frozen=True)
class Discussion:
    """A discussion thread, normalised across platforms."""

    id: str
    notes: list[Note] = field(default_factory=list[Note])
    closed: bool = False

    @property
    def first_note(self) -> Note | None:
        return self.notes[0] if self.notes else None


@dataclass(frozen=True)
class ProjectIssueIdentifier:
    """Project and issue key recovered from a posted comment's deep link."""

    project_key: str
    issue_key: str


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class DecorationResult:
    pull_request_url: str | None = None
