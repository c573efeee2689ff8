"""Name-keyed tables of live plugin instances."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Dict

from ..exceptions import DuplicatePluginError, PluginNameError

if TYPE_CHECKING:  # pragma: no cover - type-checker hint without runtime import
    from .base import Plugin

logger = logging.getLogger(__name__)

__all__ = ["PluginAliasTable", "PluginRegistry"]


class PluginRegistry:
    """Plugins keyed by their unique name.

    Entries are only added, by plugin construction; there is no removal.
    """

    def __init__(self) -> None:
        self._plugins: Dict[str, "Plugin"] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __iter__(self) -> Iterator[str]:
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def register(self, plugin: "Plugin") -> "Plugin":
        name = plugin.name
        if not isinstance(name, str) or not name:
            raise PluginNameError("plugin names must be non-empty strings")
        if name in self._plugins:
            raise DuplicatePluginError(name)

        self._plugins[name] = plugin
        logger.debug("Registered plugin '%s'", name)
        return plugin

    def get(self, name: str) -> "Plugin | None":
        return self._plugins.get(name)

    def __getitem__(self, name: str) -> "Plugin":
        try:
            return self._plugins[name]
        except KeyError as exc:
            raise LookupError(f"Plugin '{name}' is not registered") from exc

    def names(self) -> tuple[str, ...]:
        return tuple(self._plugins)

    def items(self) -> Iterator[tuple[str, "Plugin"]]:
        return iter(self._plugins.items())


class PluginAliasTable:
    """Alternate dispatch keys pointing at registered plugins."""

    def __init__(self) -> None:
        self._aliases: Dict[str, "Plugin"] = {}

    def __contains__(self, alias: object) -> bool:
        return alias in self._aliases

    def __iter__(self) -> Iterator[str]:
        return iter(self._aliases)

    def __len__(self) -> int:
        return len(self._aliases)

    def bind(self, alias: str, plugin: "Plugin") -> None:
        if not isinstance(alias, str) or not alias:
            raise ValueError("aliases must be non-empty strings")

        previous = self._aliases.get(alias)
        if previous is not None and previous is not plugin:
            logger.warning(
                "Alias '%s' rebound from plugin '%s' to '%s'",
                alias,
                previous.name,
                plugin.name,
            )
        self._aliases[alias] = plugin
        logger.debug("Bound alias '%s' to plugin '%s'", alias, plugin.name)

    def get(self, alias: str) -> "Plugin | None":
        return self._aliases.get(alias)
