"""Fixtures for decoration domain tests."""

from __future__ import annotations

import itertools

from dataclasses import dataclass, field, replace

import pytest

from herald.domain.decoration.value_objects import Discussion, Note
from herald.domain.report.value_objects import (
    AnalysisDetails,
    AnalysisIssue,
    AnalysisSummary,
)

BOT = "herald-bot"


@dataclass
class FakeDiscussionPlatform:
    """In-memory pull request that applies every call to its discussions."""

    user: str = BOT
    threads: list[Discussion] = field(default_factory=list[Discussion])
    commits: list[str] = field(default_factory=lambda: ["abc123"])
    statuses: list[tuple[bool, AnalysisSummary]] = field(
        default_factory=list[tuple[bool, AnalysisSummary]]
    )
    issue_comments: list[tuple[str, str]] = field(
        default_factory=list[tuple[str, str]]
    )
    _ids: itertools.count[int] = field(default_factory=lambda: itertools.count(1))

    def add(self, *bodies: str, author: str = BOT, closed: bool = False) -> Discussion:
        """Seed a discussion whose notes alternate between *author* and others."""
        notes = [
            Note(id=str(next(self._ids)), author=author, body=bodies[0]),
            *(
                Note(id=str(next(self._ids)), author="reviewer", body=b)
                for b in bodies[1:]
            ),
        ]
        discussion = Discussion(id=str(next(self._ids)), notes=notes, closed=closed)
        self.threads.append(discussion)
        return discussion

    def live(self) -> list[Discussion]:
        return [d for d in self.threads if not d.closed]

    # DiscussionPlatform

    def current_user(self) -> str:
        return self.user

    def discussions(self) -> list[Discussion]:
        return list(self.threads)

    def commit_ids(self) -> list[str]:
        return list(self.commits)

    def add_note(self, discussion: Discussion, body: str) -> None:
        note = Note(id=str(next(self._ids)), author=self.user, body=body)
        self._replace(discussion, replace(discussion, notes=[*discussion.notes, note]))

    def resolve(self, discussion: Discussion) -> None:
        self._replace(discussion, replace(discussion, closed=True))

    def delete(self, discussion: Discussion) -> None:
        self.threads = [d for d in self.threads if d.id != discussion.id]

    def submit_issue_comment(self, issue: AnalysisIssue, body: str) -> None:
        self.issue_comments.append((issue.key, body))
        self.add(body, author=self.user)

    def submit_summary(self, body: str, analysis: AnalysisDetails) -> None:
        self.add(body, author=self.user, closed=analysis.passed)

    def submit_status(
        self, analysis: AnalysisDetails, summary: AnalysisSummary
    ) -> None:
        self.statuses.append((analysis.passed, summary))

    def pull_request_url(self) -> str | None:
        return "https://git.example.com/pr/42"

    def _replace(self, old: Discussion, new: Discussion) -> None:
        self.threads = [new if d.id == old.id else d for d in self.threads]


@pytest.fixture
def platform() -> FakeDiscussionPlatform:
    return FakeDiscussionPlatform()
