"""Helpers to load project-level configuration files."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping as ABCMapping
from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore


_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "noteplug"

__all__ = [
    "configure_logging_from_project",
    "load_project_config",
    "load_project_manifest_config",
]


def _as_dict(payload: ABCMapping[str, Any]) -> dict[str, Any]:
    """Recursively coerce TOML mappings into regular dictionaries."""

    result: dict[str, Any] = {}
    for key, value in payload.items():
        key_str = str(key)
        if isinstance(value, ABCMapping):
            result[key_str] = _as_dict(value)
        elif isinstance(value, list):
            result[key_str] = [
                _as_dict(item) if isinstance(item, ABCMapping) else item for item in value
            ]
        else:
            result[key_str] = value
    return result


def _resolve_pyproject_path(candidate: Path) -> Path | None:
    """Return the concrete ``pyproject.toml`` path for ``candidate`` if possible."""

    candidate = candidate.expanduser()
    if candidate.name == _PROJECT_FILENAME:
        return candidate
    if candidate.suffix:
        return None
    return candidate / _PROJECT_FILENAME


def _load_toml_mapping(path: Path) -> dict[str, Any] | None:
    if not path.exists():
        return None
    with path.open("rb") as handle:
        data = tomllib.load(handle)
    if isinstance(data, ABCMapping):
        return _as_dict(data)
    return None


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.noteplug]`` section from ``pyproject.toml``.

    ``path`` may point at the file itself or at the directory holding it.
    ``None`` is returned when the file or the section is missing.
    """

    pyproject_path = _resolve_pyproject_path(path)
    if pyproject_path is None:
        return None

    pyproject_path = pyproject_path.expanduser().resolve(strict=False)
    pyproject_payload = _load_toml_mapping(pyproject_path)
    if not pyproject_payload:
        return None

    tool_section = pyproject_payload.get("tool")
    if not isinstance(tool_section, ABCMapping):
        return None

    section = tool_section.get(_TOOL_SECTION)
    if not isinstance(section, ABCMapping):
        return None

    return _as_dict(section), pyproject_path


def load_project_manifest_config(
    path: Path,
) -> tuple[dict[str, Any], Path] | None:
    """Expose the ``[tool.noteplug.plugins]`` block from ``pyproject.toml``."""

    loaded = load_project_config(path)
    if loaded is None:
        return None

    config, source_path = loaded

    plugins_table = config.get("plugins")
    if not isinstance(plugins_table, ABCMapping):
        return None

    return {"plugins": copy.deepcopy(dict(plugins_table))}, source_path


def configure_logging_from_project(path: Path) -> bool:
    """Apply ``[tool.noteplug.logging]`` through :func:`setup_logging`.

    Returns ``False`` when the project does not configure logging.
    """

    from .logging import setup_logging

    loaded = load_project_config(path)
    if loaded is None:
        return False

    config, _ = loaded
    logging_table = config.get("logging")
    if not isinstance(logging_table, ABCMapping):
        return False

    level = logging_table.get("level", "INFO")
    fmt = logging_table.get("format", "text")
    if not isinstance(level, (str, int)) or not isinstance(fmt, str):
        raise ValueError("'[tool.noteplug.logging]' expects string 'level' and 'format'")

    setup_logging(level=level, fmt=fmt)
    logging.getLogger(__name__).debug("Configured logging from %s", path)
    return True
