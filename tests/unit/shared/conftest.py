"""Fixtures for shared kernel tests."""

from __future__ import annotations

import pytest

from herald.shared.types import CommitSHA, FilePath


@pytest.fixture
def file_path() -> FilePath:
    return FilePath("src/auth/login.py")


@pytest.fixture
def commit_sha() -> CommitSHA:
    return CommitSHA("a1b2c3d4e5f6")
