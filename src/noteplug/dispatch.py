"""Routing of script-issued plugin commands."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from .host import HostHooks
from .plugins.registry import PluginAliasTable, PluginRegistry

if TYPE_CHECKING:  # pragma: no cover - type-checker hint without runtime import
    from .plugins.base import Plugin

logger = logging.getLogger(__name__)

__all__ = ["CommandDispatcher"]


class CommandDispatcher:
    """Resolve a command name to a plugin and run it.

    Lookup order is the plugin registry (exact name), then the alias table,
    then the host's unhandled-command hook.  Errors raised by handlers are
    not caught: the host decides how to surface them.
    """

    def __init__(
        self,
        plugins: PluginRegistry,
        aliases: PluginAliasTable,
        hooks: HostHooks,
    ) -> None:
        self._plugins = plugins
        self._aliases = aliases
        self._hooks = hooks

    def resolve(self, command: str) -> "Plugin | None":
        plugin = self._plugins.get(command)
        if plugin is None:
            plugin = self._aliases.get(command)
        return plugin

    def dispatch(self, command: str, context: Any, args: Sequence[str] = ()) -> Any:
        plugin = self.resolve(command)
        if plugin is None:
            return self._hooks.handle_unhandled(command, context, args)

        logger.debug("Dispatching '%s' %r to plugin '%s'", command, list(args), plugin.name)
        return plugin.event_command(command, context, args)
