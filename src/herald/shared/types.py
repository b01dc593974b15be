"""Domain-specific types that prevent primitive obsession."""

from __future__ import annotations

from enum import IntEnum, StrEnum

# =============================================================================
# NEWTYPES
# =============================================================================


class FilePath(str):
    """A path to a source file within a repository."""


class CommitSHA(str):
    """A git commit SHA."""


# =============================================================================
# ENUMS
# =============================================================================


class BranchType(StrEnum):
    """Kind of analysis target."""

    MAIN = "MAIN"
    BRANCH = "BRANCH"
    PULL_REQUEST = "PULL_REQUEST"


class ConfigurationScope(StrEnum):
    """Where a missing or invalid setting has to be fixed."""

    GLOBAL = "GLOBAL"
    PROJECT = "PROJECT"


class QualityGateStatus(StrEnum):
    OK = "OK"
    ERROR = "ERROR"


class ConditionStatus(StrEnum):
    OK = "OK"
    ERROR = "ERROR"
    NO_VALUE = "NO_VALUE"


class ConditionOperator(StrEnum):
    GREATER_THAN = "GREATER_THAN"
    LESS_THAN = "LESS_THAN"


class MetricValueType(StrEnum):
    INT = "INT"
    FLOAT = "FLOAT"
    PERCENT = "PERCENT"
    RATING = "RATING"
    WORK_DUR = "WORK_DUR"


class IssueType(StrEnum):
    BUG = "BUG"
    VULNERABILITY = "VULNERABILITY"
    CODE_SMELL = "CODE_SMELL"
    SECURITY_HOTSPOT = "SECURITY_HOTSPOT"


class SoftwareQuality(StrEnum):
    """Quality an issue impacts."""

    MAINTAINABILITY = "MAINTAINABILITY"
    RELIABILITY = "RELIABILITY"
    SECURITY = "SECURITY"


class IssueStatus(StrEnum):
    OPEN = "OPEN"
    CONFIRMED = "CONFIRMED"
    REOPENED = "REOPENED"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    ACCEPTED = "ACCEPTED"
    TO_REVIEW = "TO_REVIEW"
    REVIEWED = "REVIEWED"


class Severity(IntEnum):
    """Issue severity, ordered by importance."""

    INFO = 0
    MINOR = 1
    MAJOR = 2
    CRITICAL = 3
    BLOCKER = 4


class Rating(IntEnum):
    """Letter rating, where 1 is best."""

    A = 1
    B = 2
    C = 3
    D = 4
    E = 5


class AlmType(StrEnum):
    """Supported code-hosting platforms."""

    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET_CLOUD = "bitbucket_cloud"
    BITBUCKET_SERVER = "bitbucket_server"
    AZURE_DEVOPS = "azure_devops"
