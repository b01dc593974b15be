"""File-based persistence for branch and component records."""

from __future__ import annotations

import fcntl
import json
import logging

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from herald.domain.branch.entities import BranchRecord, ComponentRow, PullRequestData
from herald.shared.types import BranchType

logger = logging.getLogger(__name__)

_STORE_FILENAME = "branches.json"

_Change = Callable[[dict[str, list[dict[str, object]]]], None]


@dataclass
class JsonBranchStore:
    """Implements BranchStore with one JSON document guarded by file locks.

    Branch records are unique per project, type and key; components are
    unique per uuid. Every call re-reads the document, so concurrent runs
    on the same directory observe each other's writes.
    """

    storage_dir: Path

    @property
    def path(self) -> Path:
        return self.storage_dir / _STORE_FILENAME

    # =================================================================
    # Branches
    # =================================================================

    def find_branch_by_key(self, project_uuid: str, key: str) -> BranchRecord | None:
        return next(
            (
                r
                for r in self._branches()
                if r.project_uuid == project_uuid
                and r.key == key
                and r.branch_type != BranchType.PULL_REQUEST
            ),
            None,
        )

    def find_main_branch(self, project_uuid: str) -> BranchRecord | None:
        return next(
            (
                r
                for r in self._branches()
                if r.project_uuid == project_uuid and r.is_main
            ),
            None,
        )

    def find_branch_by_pull_request_key(
        self, project_uuid: str, pull_request_key: str
    ) -> BranchRecord | None:
        return next(
            (
                r
                for r in self._branches()
                if r.project_uuid == project_uuid
                and r.key == pull_request_key
                and r.branch_type == BranchType.PULL_REQUEST
            ),
            None,
        )

    def upsert_branch(self, record: BranchRecord) -> None:
        """Insert *record*, replacing any record with the same identity."""

        def update(data: dict[str, list[dict[str, object]]]) -> None:
            data["branches"] = [
                b
                for b in data["branches"]
                if not (
                    b.get("project_uuid") == record.project_uuid
                    and b.get("key") == record.key
                    and b.get("branch_type") == record.branch_type.value
                )
            ]
            data["branches"].append(_serialize_branch(record))

        self._update(update)

    # =================================================================
    # Components
    # =================================================================

    def find_component(self, uuid: str) -> ComponentRow | None:
        return next((c for c in self._components() if c.uuid == uuid), None)

    def insert_component(self, row: ComponentRow) -> None:
        def update(data: dict[str, list[dict[str, object]]]) -> None:
            if any(c.get("uuid") == row.uuid for c in data["components"]):
                logger.warning("Component %s already exists, keeping it", row.uuid)
                return
            data["components"].append(_serialize_component(row))

        self._update(update)

    # =================================================================
    # File access
    # =================================================================

    def _branches(self) -> list[BranchRecord]:
        return [_deserialize_branch(b) for b in self._read()["branches"]]

    def _components(self) -> list[ComponentRow]:
        return [_deserialize_component(c) for c in self._read()["components"]]

    def _read(self) -> dict[str, list[dict[str, object]]]:
        if not self.path.exists():
            return _empty()
        with self.path.open("r") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            try:
                return _load(f.read(), self.path)
            finally:
                fcntl.flock(f, fcntl.LOCK_UN)

    def _update(self, change: _Change) -> None:
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        with self.path.open("a+") as f:
            fcntl.flock(f, fcntl.LOCK_EX)
            try:
                f.seek(0)
                data = _load(f.read(), self.path)
                change(data)
                f.seek(0)
                f.truncate()
                json.dump(data, f, indent=2)
            finally:
                fcntl.flock(f, fcntl.LOCK_UN)


# =============================================================================
# SERIALIZATION
# =============================================================================


def _empty() -> dict[str, list[dict[str, object]]]:
    return {"branches": [], "components": []}


def _load(text: str, path: Path) -> dict[str, list[dict[str, object]]]:
    if not text.strip():
        return _empty()
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Corrupt branch store %s: %s", path, e)
        return _empty()
    if not isinstance(raw, dict):
        logger.warning("Corrupt branch store %s: not an object", path)
        return _empty()
    data = cast(dict[str, object], raw)
    result = _empty()
    for section in ("branches", "components"):
        entries = data.get(section, [])
        if isinstance(entries, list):
            result[section] = [
                cast(dict[str, object], e)
                for e in cast(list[object], entries)
                if isinstance(e, dict)
            ]
    return result


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _serialize_branch(record: BranchRecord) -> dict[str, object]:
    data: dict[str, object] = {
        "uuid": record.uuid,
        "project_uuid": record.project_uuid,
        "key": record.key,
        "branch_type": record.branch_type.value,
        "is_main": record.is_main,
        "merge_branch_uuid": record.merge_branch_uuid,
        "exclude_from_purge": record.exclude_from_purge,
    }
    pr = record.pull_request_data
    if pr is not None:
        data["pull_request_data"] = {
            "branch": pr.branch,
            "title": pr.title,
            "target": pr.target,
            "url": pr.url,
            "attributes": dict(pr.attributes),
        }
    return data


def _deserialize_branch(data: dict[str, object]) -> BranchRecord:
    pull_request_data: PullRequestData | None = None
    raw_pr = data.get("pull_request_data")
    if isinstance(raw_pr, dict):
        pr = cast(dict[str, object], raw_pr)
        raw_attributes = pr.get("attributes", {})
        attributes: dict[str, str] = {}
        if isinstance(raw_attributes, dict):
            attributes = {
                str(k): str(v)
                for k, v in cast(dict[object, object], raw_attributes).items()
            }
        pull_request_data = PullRequestData(
            branch=_optional_str(pr.get("branch")),
            title=_optional_str(pr.get("title")),
            target=_optional_str(pr.get("target")),
            url=_optional_str(pr.get("url")),
            attributes=attributes,
        )
    return BranchRecord(
        uuid=str(data["uuid"]),
        project_uuid=str(data["project_uuid"]),
        key=str(data["key"]),
        branch_type=BranchType(str(data["branch_type"])),
        is_main=bool(data.get("is_main", False)),
        merge_branch_uuid=_optional_str(data.get("merge_branch_uuid")),
        exclude_from_purge=bool(data.get("exclude_from_purge", False)),
        pull_request_data=pull_request_data,
    )


def _serialize_component(row: ComponentRow) -> dict[str, object]:
    return {
        "uuid": row.uuid,
        "key": row.key,
        "name": row.name,
        "scope": row.scope,
        "qualifier": row.qualifier,
        "main_branch_project_uuid": row.main_branch_project_uuid,
    }


def _deserialize_component(data: dict[str, object]) -> ComponentRow:
    return ComponentRow(
        uuid=str(data["uuid"]),
        key=str(data["key"]),
        name=str(data["name"]),
        scope=str(data.get("scope", "PRJ")),
        qualifier=str(data.get("qualifier", "TRK")),
        main_branch_project_uuid=_optional_str(data.get("main_branch_project_uuid")),
    )
