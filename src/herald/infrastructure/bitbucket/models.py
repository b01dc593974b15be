"""Bitbucket Cloud and Server wire models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# CLOUD
# =============================================================================


class CloudUser(BaseModel):
    uuid: str
    display_name: str | None = None


class CloudContent(BaseModel):
    raw: str | None = None


class CloudComment(BaseModel):
    id: int
    user: CloudUser | None = None
    content: CloudContent | None = None
    deleted: bool = False


class CloudCommentPage(BaseModel):
    values: list[CloudComment] = Field(default_factory=list[CloudComment])
    next: str | None = None


class CloudPullRequestLinks(BaseModel):
    html: dict[str, str] = Field(default_factory=dict[str, str])


class CloudPullRequest(BaseModel):
    id: int
    links: CloudPullRequestLinks = Field(default_factory=CloudPullRequestLinks)


# =============================================================================
# SERVER
# =============================================================================


class ServerUser(BaseModel):
    name: str | None = None
    slug: str | None = None


class ServerComment(BaseModel):
    id: int
    version: int
    text: str | None = None
    author: ServerUser | None = None
    comments: list[ServerComment] = Field(default_factory=list)


class ServerActivity(BaseModel):
    id: int
    action: str | None = None
    user: ServerUser | None = None
    comment: ServerComment | None = None


class ServerActivityPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    values: list[ServerActivity] = Field(default_factory=list[ServerActivity])
    is_last_page: bool = Field(default=True, alias="isLastPage")
    next_page_start: int | None = Field(default=None, alias="nextPageStart")


class ServerProperties(BaseModel):
    version: str

    def supports_code_insights(self) -> bool:
        """Code Insights shipped with Bitbucket Server 5.15."""
        parts: list[int] = []
        for piece in self.version.split(".")[:2]:
            digits = "".join(ch for ch in piece if ch.isdigit())
            parts.append(int(digits or 0))
        major, minor = (parts + [0, 0])[:2]
        return (major, minor) >= (5, 15)
