"""TOML-based configuration loader.

Reads ``[tool.herald]`` from ``pyproject.toml`` and produces a typed
``HeraldConfig`` dataclass. Provider connection settings live in one
sub-table per platform (``[tool.herald.github]``, ``[tool.herald.gitlab]``
and so on); only the sub-table of the selected ``alm`` is applied.
"""

from __future__ import annotations

import logging
import tomllib

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

from herald.shared.constants import DEFAULT_BRANCHES_TO_KEEP, DEFAULT_STORAGE_DIR
from herald.shared.exceptions import ConfigurationError
from herald.shared.types import AlmType

logger = logging.getLogger(__name__)

# ── defaults ────────────────────────────────────────────────────────────
_COMMON_DEFAULTS: dict[str, Any] = {
    "server_url": "http://localhost:9000",
    "image_url_base": None,
    "storage_dir": DEFAULT_STORAGE_DIR,
    "branches_to_keep": list(DEFAULT_BRANCHES_TO_KEEP),
    "alm": None,
    "summary_comment_enabled": True,
    "file_comment_enabled": True,
    "delete_comments_enabled": False,
    "monorepo": False,
}

_PROVIDER_DEFAULTS: dict[str, Any] = {
    "url": None,
    "repository": None,
    "namespace": None,
}

_PROVIDER_TABLES = {alm.value for alm in AlmType}

_ALL_KNOWN_KEYS = set(_COMMON_DEFAULTS) | _PROVIDER_TABLES

_PROVIDER_KNOWN_KEYS = set(_PROVIDER_DEFAULTS)


@dataclass(frozen=True)
class ProviderConfig:
    """Connection settings for one code-hosting platform."""

    url: str | None = None
    repository: str | None = None
    namespace: str | None = None


@dataclass(frozen=True)
class HeraldConfig:
    """Typed configuration produced by the TOML loader."""

    server_url: str = "http://localhost:9000"
    image_url_base: str | None = None
    storage_dir: str = DEFAULT_STORAGE_DIR
    branches_to_keep: list[str] = field(
        default_factory=lambda: list(DEFAULT_BRANCHES_TO_KEEP)
    )
    alm: AlmType | None = None
    summary_comment_enabled: bool = True
    file_comment_enabled: bool = True
    delete_comments_enabled: bool = False
    monorepo: bool = False
    provider: ProviderConfig = field(default_factory=ProviderConfig)


def load_herald_config(project_root: Path | None = None) -> HeraldConfig:
    """Load Herald configuration from ``pyproject.toml``.

    Merge order (later wins):
        common defaults → ``[tool.herald]`` → ``[tool.herald.<alm>]``.

    Args:
        project_root: Directory containing ``pyproject.toml``.
            Defaults to ``Path.cwd()``.

    Returns:
        A frozen ``HeraldConfig`` dataclass.

    Raises:
        ConfigurationError: On TOML parse errors or invalid values.
    """
    if project_root is None:
        project_root = Path.cwd()

    merged: dict[str, Any] = dict(_COMMON_DEFAULTS)
    provider: dict[str, Any] = dict(_PROVIDER_DEFAULTS)

    tool_section = _read_tool_section(project_root / "pyproject.toml")
    if tool_section is not None:
        _warn_unknown_keys(tool_section)
        for key, value in tool_section.items():
            if key in _PROVIDER_TABLES:
                continue
            merged[key] = value

    alm = _validate_alm(merged.get("alm"))
    if tool_section is not None and alm is not None:
        raw_provider: Any = tool_section.get(alm.value)
        if isinstance(raw_provider, dict):
            provider.update(cast(dict[str, Any], raw_provider))

    _validate_types(merged)

    return HeraldConfig(
        server_url=str(merged["server_url"]),
        image_url_base=_optional_str(merged["image_url_base"]),
        storage_dir=str(merged["storage_dir"]),
        branches_to_keep=[str(p) for p in merged["branches_to_keep"]],
        alm=alm,
        summary_comment_enabled=bool(merged["summary_comment_enabled"]),
        file_comment_enabled=bool(merged["file_comment_enabled"]),
        delete_comments_enabled=bool(merged["delete_comments_enabled"]),
        monorepo=bool(merged["monorepo"]),
        provider=ProviderConfig(
            url=_optional_str(provider["url"]),
            repository=_optional_str(provider["repository"]),
            namespace=_optional_str(provider["namespace"]),
        ),
    )


# ── internal helpers ────────────────────────────────────────────────────


def _read_tool_section(toml_path: Path) -> dict[str, Any] | None:
    """Read ``[tool.herald]`` from *toml_path*, or ``None`` if absent."""
    if not toml_path.is_file():
        return None
    try:
        with toml_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {toml_path}: {exc}"
        raise ConfigurationError(msg) from exc
    tool: dict[str, Any] | None = data.get("tool")
    if not isinstance(tool, dict):
        return None
    herald: dict[str, Any] | None = tool.get("herald")
    if not isinstance(herald, dict):
        return None
    return herald


def _warn_unknown_keys(section: dict[str, Any]) -> None:
    """Log a warning for any keys not in the known set."""
    for top_key in section:
        if top_key not in _ALL_KNOWN_KEYS:
            logger.warning("Unknown key in [tool.herald]: %r", top_key)
    for table in _PROVIDER_TABLES:
        sub: Any = section.get(table)
        if isinstance(sub, dict):
            for sub_key in cast(dict[str, Any], sub):
                if sub_key not in _PROVIDER_KNOWN_KEYS:
                    logger.warning(
                        "Unknown key in [tool.herald.%s]: %r", table, sub_key
                    )


def _validate_alm(raw: Any) -> AlmType | None:
    """Convert a string to ``AlmType`` or raise."""
    if raw is None or raw == "":
        return None
    try:
        return AlmType(str(raw).lower())
    except ValueError:
        valid = ", ".join(a.value for a in AlmType)
        msg = f"Invalid alm {raw!r} (valid: {valid})"
        raise ConfigurationError(msg) from None


def _validate_types(merged: dict[str, Any]) -> None:
    patterns = merged.get("branches_to_keep")
    if not isinstance(patterns, list):
        msg = f"branches_to_keep must be a list of patterns, got {patterns!r}"
        raise ConfigurationError(msg)
    for key in (
        "summary_comment_enabled",
        "file_comment_enabled",
        "delete_comments_enabled",
        "monorepo",
    ):
        if not isinstance(merged.get(key), bool):
            msg = f"{key} must be true or false, got {merged.get(key)!r}"
            raise ConfigurationError(msg)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
