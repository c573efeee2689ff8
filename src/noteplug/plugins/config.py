"""Declarative plugin list read from manifest files."""

from __future__ import annotations

import copy
import json
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict

try:  # pragma: no cover - Python < 3.11 fallback
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

import yaml

from noteplug.configuration import load_project_manifest_config
from noteplug.exceptions import ManifestError


logger = logging.getLogger(__name__)

__all__ = ["ManifestEntry", "PluginManifest", "raw_parameter_value"]

_PLUGINS_JS_PATTERN = re.compile(
    r"^\s*(?:var|let|const)\s+\$plugins\s*=\s*(?P<body>.*?);?\s*$", re.DOTALL
)
_EMPTY: Mapping[str, str] = MappingProxyType({})


def raw_parameter_value(value: Any) -> str:
    """Return the raw string form the host would supply for ``value``."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, Mapping):
        return json.dumps(dict(value))
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return ", ".join(raw_parameter_value(item) for item in value)
    raise ManifestError(f"Unsupported parameter value type: {type(value).__name__}")


@dataclass(frozen=True)
class ManifestEntry:
    """One plugin declared in the manifest."""

    name: str
    enabled: bool = True
    description: str = ""
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def as_mapping(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "description": self.description,
            "parameters": dict(self.parameters),
        }


class PluginManifest:
    """Load, validate and expose the host's plugin list.

    Supported sources are TOML files (``[plugins.<name>]`` tables), YAML files
    with the same shape, JSON arrays of ``{name, status, description,
    parameters}`` objects and the host's generated ``plugins.js`` file.
    Entries keep their declaration order.  Parameter lookups match plugin
    names case-insensitively.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        _injected_data: Any = None,
    ) -> None:
        self._path = Path(path)
        self._entries: Dict[str, ManifestEntry] = {}
        self._by_lower_name: Dict[str, ManifestEntry] = {}
        self._injected_data = _injected_data
        self._uses_injected_data = _injected_data is not None
        self._data_loader: Callable[[], Any] = self._read_file

        if self._uses_injected_data:
            self._data_loader = self._load_injected_data
            if self._path == Path("<memory>"):
                self._source_description = "in-memory mapping"
            else:
                self._source_description = f"in-memory mapping ({self._path})"
        else:
            self._source_description = f"'{self._path}'"

        self.reload_config(initial=True)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        *,
        source: str | Path | None = None,
    ) -> "PluginManifest":
        """Construct a manifest from already parsed ``data``.

        ``data`` is either a mapping holding a ``plugins`` table or a list of
        entry objects.  Later :meth:`reload_config` calls re-read ``data``, so
        mutations made by the caller are picked up.
        """

        source_path = Path(source) if source is not None else Path("<memory>")
        return cls(source_path, _injected_data=data)

    @classmethod
    def from_project(cls, pyproject_path: Path | None = None) -> "PluginManifest":
        """Construct a manifest from ``[tool.noteplug.plugins]``."""

        if pyproject_path is None:
            pyproject_path = Path.cwd()

        loaded = load_project_manifest_config(pyproject_path)
        if loaded is None:
            raise ManifestError(
                "Unable to locate '[tool.noteplug.plugins]' in project configuration"
            )

        mapping, source_path = loaded
        return cls.from_mapping(mapping, source=source_path)

    @property
    def path(self) -> Path:
        return self._path

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._by_lower_name

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> tuple[ManifestEntry, ...]:
        return tuple(self._entries.values())

    def entry(self, name: str) -> ManifestEntry:
        try:
            return self._by_lower_name[name.lower()]
        except KeyError:
            raise KeyError(f"Plugin '{name}' is not declared in the manifest") from None

    def enabled_plugins(self) -> tuple[str, ...]:
        """Return the enabled plugin names in declaration order."""

        return tuple(entry.name for entry in self._entries.values() if entry.enabled)

    def parameters(self, name: str) -> Mapping[str, str]:
        """Return the raw parameter bag of ``name`` (empty when undeclared)."""

        entry = self._by_lower_name.get(name.lower())
        if entry is None:
            return _EMPTY
        return entry.parameters

    def as_mapping(self) -> dict[str, Any]:
        return {"plugins": {name: entry.as_mapping() for name, entry in self._entries.items()}}

    def reload_config(self, *, initial: bool = False) -> None:
        """Reload the manifest applying validation atomically.

        On failure after the initial load the previous entries are kept.
        """

        try:
            new_raw = self._data_loader()
            new_entries = self._validate(new_raw)
        except ManifestError:
            logger.exception("Failed to parse plugin manifest from %s", self._source_description)
            if initial:
                raise
            return

        self._entries = new_entries
        self._by_lower_name = {name.lower(): entry for name, entry in new_entries.items()}
        logger.info(
            "Loaded %d plugin declaration(s) from %s",
            len(new_entries),
            self._source_description,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _read_file(self) -> Any:
        if not self._path.exists():
            raise ManifestError(f"Manifest file '{self._path}' does not exist")

        suffix = self._path.suffix.lower()
        try:
            if suffix == ".toml":
                with self._path.open("rb") as stream:
                    return tomllib.load(stream)
            text = self._path.read_text(encoding="utf-8")
        except (OSError, tomllib.TOMLDecodeError) as exc:  # type: ignore[attr-defined]
            raise ManifestError(f"Unable to load plugin manifest '{self._path}'") from exc

        if suffix in {".yaml", ".yml"}:
            try:
                return yaml.safe_load(text)
            except yaml.YAMLError as exc:
                raise ManifestError(f"Invalid YAML in '{self._path}'") from exc
        if suffix == ".js":
            return _parse_plugins_js(text, self._path)
        if suffix == ".json":
            return _parse_json(text, self._path)

        raise ManifestError(f"Unsupported manifest format: '{self._path.name}'")

    def _load_injected_data(self) -> Any:
        if not isinstance(self._injected_data, (Mapping, list, tuple)):
            raise ManifestError("Injected manifest must be a mapping or a list of entries")
        return copy.deepcopy(self._injected_data)

    def _validate(self, data: Any) -> Dict[str, ManifestEntry]:
        if isinstance(data, (list, tuple)):
            raw_entries = [self._entry_from_object(item, index) for index, item in enumerate(data)]
        elif isinstance(data, Mapping):
            plugins_section = data.get("plugins")
            if not isinstance(plugins_section, Mapping):
                raise ManifestError("Manifest is missing a '[plugins]' table")
            raw_entries = [
                self._entry_from_table(name, value) for name, value in plugins_section.items()
            ]
        else:
            raise ManifestError("Manifest must be a table or a list of plugin entries")

        entries: Dict[str, ManifestEntry] = {}
        seen: set[str] = set()
        for entry in raw_entries:
            lowered = entry.name.lower()
            if lowered in seen:
                raise ManifestError(f"Plugin '{entry.name}' is declared more than once")
            seen.add(lowered)
            entries[entry.name] = entry
        return entries

    def _entry_from_table(self, name: Any, value: Any) -> ManifestEntry:
        if not isinstance(name, str) or not name:
            raise ManifestError("Plugin names must be non-empty strings")
        if not isinstance(value, Mapping):
            raise ManifestError(f"Plugin '{name}' must be represented as a table in '[plugins]'")

        enabled = value.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ManifestError(f"'[plugins.{name}].enabled' must be a boolean value")

        return ManifestEntry(
            name=name,
            enabled=enabled,
            description=self._description(name, value.get("description", "")),
            parameters=self._parameters(name, value.get("parameters")),
        )

    def _entry_from_object(self, item: Any, index: int) -> ManifestEntry:
        if not isinstance(item, Mapping):
            raise ManifestError(f"Manifest entry #{index} must be an object")

        name = item.get("name")
        if not isinstance(name, str) or not name:
            raise ManifestError(f"Manifest entry #{index} has no 'name'")

        status = item.get("status", item.get("enabled", True))
        if not isinstance(status, bool):
            raise ManifestError(f"Plugin '{name}' status must be a boolean value")

        return ManifestEntry(
            name=name,
            enabled=status,
            description=self._description(name, item.get("description", "")),
            parameters=self._parameters(name, item.get("parameters")),
        )

    def _description(self, name: str, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ManifestError(f"Plugin '{name}' description must be a string")
        return value

    def _parameters(self, name: str, value: Any) -> Dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ManifestError(f"Plugin '{name}' parameters must be a table")
        return {str(key): raw_parameter_value(raw) for key, raw in value.items()}


def _parse_json(text: str, path: Path) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Invalid JSON in '{path}'") from exc


def _parse_plugins_js(text: str, path: Path) -> Any:
    """Extract the JSON array assigned to ``$plugins`` in a generated file."""

    lines = [line for line in text.splitlines() if not line.lstrip().startswith("//")]
    match = _PLUGINS_JS_PATTERN.match("\n".join(lines))
    if match is None:
        raise ManifestError(f"'{path}' does not assign a '$plugins' array")
    return _parse_json(match.group("body"), path)
