"""Exception hierarchy shared by the plugin runtime."""

from __future__ import annotations

__all__ = [
    "CommandError",
    "DuplicatePluginError",
    "DuplicateTypeError",
    "InternalConsistencyError",
    "ManifestError",
    "MissingParameterError",
    "NotePlugError",
    "ParseError",
    "PluginNameError",
    "RegistrationError",
    "UnknownCommandError",
    "UnknownTypeError",
]


class NotePlugError(Exception):
    """Base class for every error raised by :mod:`noteplug`."""


class RegistrationError(NotePlugError, ValueError):
    """Raised when plugins or types are registered with invalid identities."""


class DuplicatePluginError(RegistrationError):
    """Raised when a plugin name is already present in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Plugin '{name}' is already registered")


class PluginNameError(RegistrationError):
    """Raised when a plugin class does not declare a usable name."""


class DuplicateTypeError(RegistrationError):
    """Raised when a type name is registered twice on the same view."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Type '{name}' already exists")


class ParseError(NotePlugError, ValueError):
    """Raised when a raw value cannot be converted to the requested type."""


class UnknownTypeError(ParseError):
    """Raised when no parser is registered under the requested type name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No parser registered for type '{name}'")


class MissingParameterError(NotePlugError, LookupError):
    """Raised when a required plugin parameter is absent and has no default."""

    def __init__(self, plugin: str, name: str) -> None:
        self.plugin = plugin
        self.name = name
        super().__init__(f"Plugin '{plugin}' requires parameter '{name}'")


class CommandError(NotePlugError):
    """Raised when a plugin command cannot be executed."""


class UnknownCommandError(CommandError, LookupError):
    """Raised when a plugin does not expose the requested command."""

    def __init__(self, plugin: str, command: str | None) -> None:
        self.plugin = plugin
        self.command = command
        if command is None:
            message = f"Plugin '{plugin}' received a command without a name"
        else:
            message = f"Plugin '{plugin}' has no command '{command}'"
        super().__init__(message)


class InternalConsistencyError(CommandError):
    """Raised when a listed command has no callable implementation."""

    def __init__(self, plugin: str, command: str) -> None:
        self.plugin = plugin
        self.command = command
        super().__init__(
            f"Plugin '{plugin}' lists command '{command}' but does not implement it"
        )


class ManifestError(NotePlugError, RuntimeError):
    """Raised when the declarative plugin manifest is invalid."""
