"""Fixtures for interface tests: a scanner report on disk."""

from __future__ import annotations

import json

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest


def _document() -> dict[str, Any]:
    return {
        "analysis_id": "AY-1",
        "analysis_date": "2024-05-01T10:00:00+00:00",
        "commit_sha": "abc123",
        "project": {"uuid": "project-uuid", "key": "my-project", "name": "My Project"},
        "branch": {
            "name": "feature/login",
            "type": "PULL_REQUEST",
            "target": "main",
            "pull_request_key": "42",
        },
        "quality_gate": {
            "status": "ERROR",
            "conditions": [
                {
                    "metric_key": "new_coverage",
                    "operator": "LESS_THAN",
                    "value": "62.5",
                    "error_threshold": "80",
                    "status": "ERROR",
                }
            ],
        },
        "measures": {"coverage": "71.4", "duplicated_lines_density": "2.5"},
        "issues": [
            {
                "key": "issue-1",
                "rule_key": "python:S1192",
                "message": "Define a constant instead of duplicating this literal",
                "type": "CODE_SMELL",
                "severity": "major",
                "line": 12,
                "path": "src/app.py",
                "effort_minutes": 5,
                "revision": "abc123",
            },
            {
                "key": "issue-2",
                "rule_key": "python:S4790",
                "message": "Make sure this weak hash algorithm is not used",
                "type": "SECURITY_HOTSPOT",
                "severity": "CRITICAL",
                "status": "TO_REVIEW",
            },
        ],
        "rules": {"python:S1192": "String literals should not be duplicated"},
        "scanner_properties": {"herald.gitlab.pipelineId": "1234"},
    }


@pytest.fixture
def report_document() -> dict[str, Any]:
    """A pull request report; tests mutate their own copy."""
    return _document()


@pytest.fixture
def write_report(tmp_path: Path) -> Callable[[dict[str, Any]], Path]:
    def write(document: dict[str, Any]) -> Path:
        path = tmp_path / "herald-report.json"
        path.write_text(json.dumps(document))
        return path

    return write
