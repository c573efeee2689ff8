"""Annotation-driven plugin layer for story-driven game hosts.

Plugins are named singletons with typed parameters and whitelisted script
commands.  Host data objects expose tags written in their notes through
typed metadata lookups.
"""

from ._version import __version__
from .dispatch import CommandDispatcher
from .exceptions import (
    CommandError,
    DuplicatePluginError,
    DuplicateTypeError,
    InternalConsistencyError,
    ManifestError,
    MissingParameterError,
    NotePlugError,
    ParseError,
    PluginNameError,
    RegistrationError,
    UnknownCommandError,
    UnknownTypeError,
)
from .host import HostHooks, MappingParameterSource, ParameterSource, VariableStore
from .metadata import (
    HasMetadata,
    extract,
    gather_intro_comments,
    install_metadata_accessors,
    page_metadata,
    parse_note,
)
from .plugins import Plugin, PluginManager, PluginManifest, UNSET, Utils, command
from .runtime import Runtime
from .traits import clone_data_object, compose_trait, extend, receive_properties, use_trait
from .type_registry import TypeRegistry, builtin_types

__all__ = [
    "__version__",
    "CommandDispatcher",
    "CommandError",
    "DuplicatePluginError",
    "DuplicateTypeError",
    "HasMetadata",
    "HostHooks",
    "InternalConsistencyError",
    "ManifestError",
    "MappingParameterSource",
    "MissingParameterError",
    "NotePlugError",
    "ParameterSource",
    "ParseError",
    "Plugin",
    "PluginManager",
    "PluginManifest",
    "PluginNameError",
    "RegistrationError",
    "Runtime",
    "TypeRegistry",
    "UNSET",
    "UnknownCommandError",
    "UnknownTypeError",
    "Utils",
    "VariableStore",
    "builtin_types",
    "clone_data_object",
    "command",
    "compose_trait",
    "extend",
    "extract",
    "gather_intro_comments",
    "install_metadata_accessors",
    "page_metadata",
    "parse_note",
    "receive_properties",
    "use_trait",
]
