"""GitLab REST wire models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GitLabUser(BaseModel):
    id: int | None = None
    username: str


class DiffRefs(BaseModel):
    base_sha: str
    start_sha: str
    head_sha: str


class MergeRequest(BaseModel):
    iid: int
    source_project_id: int
    web_url: str | None = None
    diff_refs: DiffRefs | None = None


class Commit(BaseModel):
    id: str


class GitLabNote(BaseModel):
    id: int
    body: str | None = None
    author: GitLabUser
    system: bool = False
    resolvable: bool = False
    resolved: bool = False


class GitLabDiscussion(BaseModel):
    id: str
    notes: list[GitLabNote] = Field(default_factory=list)
