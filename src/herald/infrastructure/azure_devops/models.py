"""Azure DevOps REST wire models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class IdentityRef(_CamelModel):
    id: str
    display_name: str | None = Field(default=None, alias="displayName")


class ConnectionData(_CamelModel):
    authenticated_user: IdentityRef = Field(alias="authenticatedUser")


class TeamProjectReference(_CamelModel):
    name: str


class GitRepository(_CamelModel):
    id: str
    name: str
    remote_url: str | None = Field(default=None, alias="remoteUrl")
    project: TeamProjectReference


class PullRequest(_CamelModel):
    pull_request_id: int = Field(alias="pullRequestId")
    repository: GitRepository


class GitCommitRef(_CamelModel):
    commit_id: str = Field(alias="commitId")


class Comment(_CamelModel):
    id: int
    content: str | None = None
    comment_type: str | None = Field(default=None, alias="commentType")
    author: IdentityRef | None = None
    is_deleted: bool = Field(default=False, alias="isDeleted")


class CommentThread(_CamelModel):
    id: int
    status: str | None = None
    is_deleted: bool = Field(default=False, alias="isDeleted")
    comments: list[Comment] = Field(default_factory=list[Comment])
