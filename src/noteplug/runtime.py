"""Process-level state shared by the plugins of one host session."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .dispatch import CommandDispatcher
from .host import HostHooks, MappingParameterSource, ParameterSource, VariableStore
from .metadata import install_metadata_accessors
from .plugins.registry import PluginAliasTable, PluginRegistry
from .type_registry import TypeRegistry, builtin_types

logger = logging.getLogger(__name__)

__all__ = ["Runtime"]


class Runtime:
    """Registry, alias table, shared types and host collaborators.

    One runtime is built at start-up and handed to every plugin constructor.
    Tests build a fresh one per case.

    Parameters
    ----------
    parameters:
        Source of the raw plugin parameters.  Either an object implementing
        :class:`~noteplug.host.ParameterSource` (for instance a
        :class:`~noteplug.plugins.config.PluginManifest`) or a plain
        ``{plugin: {key: value}}`` mapping.
    types:
        Shared type registry used for metadata lookups and as the source of
        ``extend_type`` calls without an explicit parser.  Defaults to the
        built-in types.
    hooks:
        Host extension points.
    variables:
        Optional game variable store used by commands such as ``Calc``.
    """

    def __init__(
        self,
        parameters: ParameterSource | Mapping[str, Mapping[str, Any]] | None = None,
        *,
        types: TypeRegistry | None = None,
        hooks: HostHooks | None = None,
        variables: VariableStore | None = None,
    ) -> None:
        if parameters is None or isinstance(parameters, Mapping):
            parameters = MappingParameterSource(parameters)
        self.parameter_source: ParameterSource = parameters
        self.types = types if types is not None else builtin_types()
        self.hooks = hooks if hooks is not None else HostHooks()
        self.variables = variables
        self.plugins = PluginRegistry()
        self.aliases = PluginAliasTable()
        self.dispatcher = CommandDispatcher(self.plugins, self.aliases, self.hooks)

    def __repr__(self) -> str:
        return f"<Runtime plugins={list(self.plugins)!r} aliases={list(self.aliases)!r}>"

    def dispatch(self, command: str, context: Any, args: Sequence[str] = ()) -> Any:
        """Route a plugin command issued by the host."""

        return self.dispatcher.dispatch(command, context, args)

    def plugin(self, name: str) -> Any:
        return self.plugins[name]

    def install_metadata_accessors(self, *classes: type) -> None:
        """Give host classes a ``get_meta`` that parses with :attr:`types`."""

        install_metadata_accessors(*classes, types=self.types)
