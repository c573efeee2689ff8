"""Capability mixins composed into :class:`~noteplug.plugins.base.Plugin`."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, TypeVar

from ..exceptions import (
    DuplicateTypeError,
    InternalConsistencyError,
    MissingParameterError,
    ParseError,
    UnknownCommandError,
)
from ..type_registry import Parser, TypeRegistry, TypeSpec, builtin_types

if TYPE_CHECKING:  # pragma: no cover - type-checker hint without runtime import
    from ..runtime import Runtime

logger = logging.getLogger(__name__)

__all__ = ["HasCommands", "HasParameters", "UNSET", "command", "type_accessor_names"]

F = TypeVar("F", bound=Callable[..., Any])

_COMMAND_MARKER = "__plugin_command__"


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()
"""Sentinel meaning "no default supplied" (``None`` is a valid default)."""


def _snake_case(name: str) -> str:
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.replace(" ", "_").lower()


def type_accessor_names(type_name: str) -> tuple[str, str]:
    """Return the ``(parser, parameter getter)`` attribute names of a type."""

    suffix = _snake_case(type_name)
    return f"parse_{suffix}", f"param_{suffix}"


class HasParameters:
    """Typed, cached access to the plugin's merged parameter bag."""

    name: str
    runtime: "Runtime"
    types: TypeRegistry
    add_ons: list[str]

    def _init_parameters(self) -> None:
        self._parameters: Dict[str, Any] | None = None
        self._parsed_params: Dict[str, Any] = {}
        self.add_ons = []

    # ------------------------------------------------------------------
    # Raw parameters
    # ------------------------------------------------------------------
    def parameters(self) -> Mapping[str, Any]:
        """Return the raw parameter bag merged with every add-on's bag."""

        if self._parameters is None:
            source = self.runtime.parameter_source
            merged = dict(source.parameters(self.name))
            for add_on in self.add_ons:
                merged.update(source.parameters(add_on))
            self._parameters = merged
        return MappingProxyType(self._parameters)

    def parameter(self, name: str, type: TypeSpec | None = None, default: Any = UNSET) -> Any:
        """Return parameter ``name`` parsed as ``type``.

        The first resolved value is cached for the plugin lifetime and
        returned by every later call whatever ``type`` they ask for.  When
        parsing fails and ``default`` is given, a warning is logged and the
        default is cached instead.
        """

        if name in self._parsed_params:
            return self._parsed_params[name]

        bag = self.parameters()
        if name not in bag:
            if default is UNSET:
                raise MissingParameterError(self.name, name)
            return self._remember(name, default)

        raw = bag[name]
        if type is None:
            return self._remember(name, raw)

        try:
            value = self.types.parse(raw, type)
        except ParseError as exc:
            if default is UNSET:
                raise
            logger.warning(
                "%s plugin: default value used for parameter '%s' (%s)",
                self.name,
                name,
                exc,
            )
            return self._remember(name, default)
        return self._remember(name, value)

    def _remember(self, name: str, value: Any) -> Any:
        self._parsed_params[name] = value
        return value

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------
    def init_types(self) -> None:
        """Seed the plugin's type view with the built-in types."""

        self.types = TypeRegistry()
        builtins = builtin_types()
        for type_name in builtins:
            self.extend_type(type_name, builtins.get(type_name))

    def extend_type(self, name: str | Parser, parser: Parser | None = None) -> Parser:
        """Register a type on this plugin.

        Besides the registry entry, two accessors are exposed: ``parse_<name>``
        (the raw parser) and ``param_<name>(parameter, default=UNSET)``.  Type
        names are converted to snake case, so ``IntArray`` gives
        ``param_int_array``.

        ``name`` may be a named parser function on its own.  A bare type name
        is looked up in the runtime's shared type registry.
        """

        if parser is None:
            if callable(name):
                parser = name
                name = getattr(parser, "__name__", "")
                if not name or name == "<lambda>":
                    raise ValueError("parsers passed without a type name must be named functions")
        if not isinstance(name, str):
            raise TypeError(f"type must be a name or a parser, not {name!r}")
        if parser is None:
            parser = self.runtime.types.get(name)

        parse_attr, param_attr = type_accessor_names(name)
        if hasattr(self, parse_attr) or hasattr(self, param_attr):
            raise DuplicateTypeError(name)

        self.types.register(name, parser)
        type_name = name

        def param_getter(parameter: str, default: Any = UNSET) -> Any:
            return self.parameter(parameter, type_name, default)

        param_getter.__name__ = param_attr
        setattr(self, parse_attr, parser)
        setattr(self, param_attr, param_getter)
        return parser

    def extend_types(self, *types: str | Parser) -> None:
        for type_spec in types:
            self.extend_type(type_spec)

    # ------------------------------------------------------------------
    # Add-ons
    # ------------------------------------------------------------------
    def register_add_on(self, name: str, alias: bool = False) -> None:
        """Merge the parameters of plugin ``name`` into this plugin.

        With ``alias`` the add-on name also becomes a dispatch key routed to
        this plugin.
        """

        self.add_ons.append(name)
        if self._parameters is not None:
            self._parameters.update(self.runtime.parameter_source.parameters(name))
        if alias:
            self.runtime.aliases.bind(name, self)
        logger.debug("Plugin '%s' registered add-on '%s'", self.name, name)


def command(func: F | None = None, *, name: str | None = None) -> Any:
    """Mark a plugin method as a script command.

    Usable bare (``@command``) or with an explicit command name
    (``@command(name="Open Door")``).
    """

    def decorator(method: F) -> F:
        setattr(method, _COMMAND_MARKER, name or method.__name__)
        return method

    if func is not None:
        return decorator(func)
    return decorator


class HasCommands:
    """Whitelisted script commands bound to plugin methods."""

    name: str
    valid_commands: frozenset[str]

    def make_commands_list(self) -> Iterable[str]:
        """Return extra method names exposed as commands.

        Methods decorated with :func:`command` are always exposed; override
        this hook to list undecorated ones.
        """

        return ()

    def _bind_commands(self) -> None:
        handlers: Dict[str, Callable[..., Any]] = {}
        for klass in reversed(type(self).__mro__):
            for attribute, value in vars(klass).items():
                command_name = getattr(value, _COMMAND_MARKER, None)
                if command_name is not None:
                    handlers[command_name] = getattr(self, attribute)

        listed = tuple(self.make_commands_list())
        for command_name in listed:
            if command_name in handlers:
                continue
            candidate = getattr(self, command_name, None)
            if not callable(candidate):
                raise InternalConsistencyError(self.name, command_name)
            handlers[command_name] = candidate

        self.valid_commands = frozenset(listed) | frozenset(handlers)
        self._command_handlers: Mapping[str, Callable[..., Any]] = MappingProxyType(handlers)

    def handle_command(
        self,
        command_name: str,
        context: Any,
        args: Sequence[str] = (),
        *,
        dispatch_name: str | None = None,
    ) -> Any:
        """Run ``command_name`` as ``handler(dispatch_name, context, *args)``."""

        if command_name not in self.valid_commands:
            raise UnknownCommandError(self.name, command_name)

        handler = self._command_handlers.get(command_name)
        if handler is None:
            raise InternalConsistencyError(self.name, command_name)

        logger.debug("Plugin '%s' running command '%s'", self.name, command_name)
        return handler(dispatch_name or self.name, context, *args)

    def event_command(self, dispatch_name: str, context: Any, args: Sequence[str]) -> Any:
        """Entry point used by the dispatcher.

        ``args[0]`` names the command, the remaining tokens are its
        arguments.
        """

        if not args:
            raise UnknownCommandError(self.name, None)
        return self.handle_command(
            args[0], context, tuple(args[1:]), dispatch_name=dispatch_name
        )
