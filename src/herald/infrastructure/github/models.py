"""GitHub GraphQL wire models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GraphQLError(BaseModel):
    message: str
    type: str | None = None
    path: list[str | int] | None = None


class GraphQLResponse(BaseModel):
    data: dict[str, object] | None = None
    errors: list[GraphQLError] = Field(default_factory=list[GraphQLError])


class Repository(BaseModel):
    id: str
    url: str


class Actor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    login: str
    type: str = Field(default="", alias="__typename")


class IssueComment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    author: Actor | None = None
    is_minimized: bool = Field(default=False, alias="isMinimized")


class PageInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_next_page: bool = Field(default=False, alias="hasNextPage")
    end_cursor: str | None = Field(default=None, alias="endCursor")


class CommentConnection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nodes: list[IssueComment] = Field(default_factory=list[IssueComment])
    page_info: PageInfo = Field(default_factory=PageInfo, alias="pageInfo")


class PullRequest(BaseModel):
    id: str
    comments: CommentConnection = Field(default_factory=CommentConnection)


class CheckRun(BaseModel):
    id: str
