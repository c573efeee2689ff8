"""Base class for plugin implementations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from ..exceptions import DuplicatePluginError, PluginNameError
from .capabilities import HasCommands, HasParameters

if TYPE_CHECKING:  # pragma: no cover - type-checker hint without runtime import
    from ..runtime import Runtime

logger = logging.getLogger(__name__)

__all__ = ["Plugin"]


class Plugin(HasParameters, HasCommands):
    """A named singleton unit of optional functionality.

    Subclasses are instantiated once per :class:`~noteplug.runtime.Runtime`,
    during start-up and before any command is dispatched.  The plugin name
    comes from the ``plugin_name`` class attribute, falling back to the class
    name, and must be unique within the runtime::

        class Doors(Plugin):
            @command
            def open(self, dispatch_name, context, door_id):
                ...

        doors = Doors(runtime)
        runtime.dispatch("Doors", event, ["open", "3"])

    Construction binds the command table (see
    :meth:`~noteplug.plugins.capabilities.HasCommands.make_commands_list`),
    seeds the type view with the built-in types and finally registers the
    instance.
    """

    plugin_name: ClassVar[str | None] = None

    def __init__(self, runtime: "Runtime") -> None:
        self.runtime = runtime
        self.name = self.declared_name()
        if self.name in runtime.plugins:
            raise DuplicatePluginError(self.name)

        self._bind_commands()
        self._init_parameters()
        self.init_types()

        runtime.plugins.register(self)
        logger.info("Plugin '%s' initialised", self.name)

    @classmethod
    def declared_name(cls) -> str:
        name = cls.plugin_name if cls.plugin_name is not None else cls.__name__
        if not isinstance(name, str) or not name.strip():
            raise PluginNameError(f"{cls.__qualname__} does not declare a plugin name")
        return name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} plugin {self.name!r}>"

    def describe(self) -> dict[str, Any]:
        """Summary used by health reports."""

        return {
            "name": self.name,
            "commands": tuple(sorted(self.valid_commands)),
            "add_ons": tuple(self.add_ons),
            "types": self.types.names,
        }
