"""Plugin infrastructure: base class, registries, manifests and loading."""

from pathlib import Path

from noteplug.plugins.base import Plugin
from noteplug.plugins.capabilities import (
    UNSET,
    HasCommands,
    HasParameters,
    command,
    type_accessor_names,
)
from noteplug.plugins.config import ManifestEntry, PluginManifest, raw_parameter_value
from noteplug.plugins.manager import PluginManager, RegisteredPlugin
from noteplug.plugins.registry import PluginAliasTable, PluginRegistry
from noteplug.plugins.utils import Utils


def plugin_manifest_from_project(pyproject_path: Path | None = None) -> PluginManifest:
    """Return a :class:`PluginManifest` built from ``pyproject.toml`` metadata."""

    return PluginManifest.from_project(pyproject_path)


__all__ = [
    "HasCommands",
    "HasParameters",
    "ManifestEntry",
    "Plugin",
    "PluginAliasTable",
    "PluginManager",
    "PluginManifest",
    "PluginRegistry",
    "RegisteredPlugin",
    "UNSET",
    "Utils",
    "command",
    "plugin_manifest_from_project",
    "raw_parameter_value",
    "type_accessor_names",
]
