"""Centralized defaults for Herald. Overridable via configuration."""

from __future__ import annotations

# =============================================================================
# REPORT
# =============================================================================

VIEW_IN_SONARQUBE_LABEL = "View in SonarQube"
DEFAULT_IMAGE_PATH = "/static/communityBranchPlugin"

# =============================================================================
# DECORATION
# =============================================================================

SUMMARY_COMMENT_KEY = "decorator-summary-comment"

RESOLVED_ISSUE_NEEDING_CLOSED_MESSAGE = (
    "This issue no longer exists in SonarQube, but due to other comments being "
    "present in this discussion, the discussion is not being closed "
    "automatically. Please manually resolve this discussion once the other "
    "comments have been reviewed."
)
RESOLVED_SUMMARY_NEEDING_CLOSED_MESSAGE = (
    "This summary note is outdated, but due to other comments being present "
    "in this discussion, the discussion is not being removed. Please manually "
    "resolve this discussion once the other comments have been reviewed."
)

# =============================================================================
# BRANCH RETENTION
# =============================================================================

DEFAULT_BRANCHES_TO_KEEP = ("master", "develop", "trunk", "main")

# =============================================================================
# STORAGE
# =============================================================================

DEFAULT_STORAGE_DIR = ".herald-branches"

# =============================================================================
# RETRY / TIMEOUTS
# =============================================================================

DEFAULT_TIMEOUT_SECONDS = 120
