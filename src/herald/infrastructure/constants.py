"""Infrastructure constants for the supported code-hosting platforms."""

from __future__ import annotations

from enum import StrEnum

# =============================================================================
# PROVIDER CONSTANTS
# =============================================================================


class GitHubAPI(StrEnum):
    """GitHub GraphQL API constants."""

    BASE_URL = "https://api.github.com"
    GRAPHQL_PATH = "/graphql"
    ACCEPT_JSON = "application/vnd.github.antiope-preview+json"
    PROVIDER_NAME = "GitHub"


class GitLabAPI(StrEnum):
    BASE_URL = "https://gitlab.com/api/v4"
    TOKEN_HEADER = "PRIVATE-TOKEN"
    CANNOT_TRANSITION = "Cannot transition status"
    STATUS_NAME = "SonarQube"
    STATUS_DESCRIPTION = "SonarQube Status"
    PROVIDER_NAME = "Gitlab"


class BitbucketCloudAPI(StrEnum):
    BASE_URL = "https://api.bitbucket.org/2.0"
    WEB_URL = "https://bitbucket.org"
    PROVIDER_NAME = "Bitbucket Cloud"


class BitbucketServerAPI(StrEnum):
    REST_PATH = "/rest/api/1.0"
    INSIGHTS_PATH = "/rest/insights/1.0"
    PROVIDER_NAME = "Bitbucket Server"


class AzureDevOpsAPI(StrEnum):
    API_VERSION = "4.1"
    API_VERSION_PREVIEW = "4.1-preview"
    STATUS_GENRE = "sonarqube/qualitygate"
    PROVIDER_NAME = "Azure DevOps"


# =============================================================================
# CODE INSIGHTS
# =============================================================================

CODE_INSIGHTS_REPORT_KEY = "herald-sonarqube"
CODE_INSIGHTS_REPORTER = "SonarQube"
CODE_INSIGHTS_TITLE = "SonarQube"

# =============================================================================
# BATCH LIMITS
# =============================================================================

GITHUB_ANNOTATIONS_PER_REQUEST = 50
GITHUB_COMMENTS_PAGE_SIZE = 100
BITBUCKET_CLOUD_ANNOTATIONS_PER_REQUEST = 100
BITBUCKET_SERVER_ANNOTATIONS_PER_REQUEST = 1000
BITBUCKET_SERVER_ACTIVITIES_PAGE_SIZE = 250

# =============================================================================
# SCANNER PROPERTIES
# =============================================================================


class ScannerProperty(StrEnum):
    """Analysis properties a CI job can pass to tune decoration."""

    GITLAB_PROJECT_URL = "herald.gitlab.projectUrl"
    GITLAB_PIPELINE_ID = "herald.gitlab.pipelineId"
