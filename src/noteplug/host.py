"""Collaborator interfaces exposed by the host application.

The host owns the story scripts, the data objects and the plugin list.  It
reaches the plugin runtime through the protocols below and through the
extension points of :class:`HostHooks`, which plugins register into instead
of rewriting host behaviour.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

__all__ = [
    "HostHooks",
    "MappingParameterSource",
    "PageHook",
    "ParameterSource",
    "ScriptCommand",
    "UnhandledCommand",
    "VariableStore",
]

UnhandledCommand = Callable[[str, Any, Sequence[str]], Any]
PageHook = Callable[[Any], None]

_EMPTY: Mapping[str, str] = MappingProxyType({})


@runtime_checkable
class ParameterSource(Protocol):
    """Provider of the raw parameter bag of each plugin."""

    def parameters(self, name: str) -> Mapping[str, str]:
        """Return the raw parameters declared for ``name`` (empty if none)."""


@runtime_checkable
class VariableStore(Protocol):
    """Numbered game variables readable and writable by commands."""

    def value(self, index: int) -> Any: ...

    def set_value(self, index: int, value: Any) -> None: ...


class ScriptCommand(Protocol):
    """One entry of a script listing."""

    code: int
    parameters: Sequence[Any]


class MappingParameterSource:
    """Parameter source backed by a plain ``{plugin: {key: value}}`` mapping.

    Plugin names are matched case-insensitively like the host does.
    """

    def __init__(self, data: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._data: Dict[str, Mapping[str, str]] = {}
        for name, bag in (data or {}).items():
            self._data[name.lower()] = MappingProxyType(
                {str(key): value for key, value in bag.items()}
            )

    def parameters(self, name: str) -> Mapping[str, str]:
        return self._data.get(name.lower(), _EMPTY)


@dataclass
class HostHooks:
    """Extension points the host calls into.

    Attributes
    ----------
    unhandled_command:
        Callback receiving ``(command, context, args)`` for commands no
        plugin claims.  ``None`` means such commands are ignored.
    page_setup:
        Callbacks run after the host configures a new script page on one of
        its objects.
    page_clear:
        Callbacks run after the host clears the page of an object that has no
        active page left.
    common_event_refresh:
        Callbacks run before the host refreshes a common event, which has
        neither a note nor pages.
    """

    unhandled_command: UnhandledCommand | None = None
    page_setup: List[PageHook] = field(default_factory=list)
    page_clear: List[PageHook] = field(default_factory=list)
    common_event_refresh: List[PageHook] = field(default_factory=list)

    def register_page_setup(self, hook: PageHook) -> PageHook:
        self.page_setup.append(hook)
        return hook

    def notify_page_setup(self, host_object: Any) -> None:
        for hook in list(self.page_setup):
            hook(host_object)

    def register_page_clear(self, hook: PageHook) -> PageHook:
        self.page_clear.append(hook)
        return hook

    def notify_page_clear(self, host_object: Any) -> None:
        for hook in list(self.page_clear):
            hook(host_object)

    def register_common_event_refresh(self, hook: PageHook) -> PageHook:
        self.common_event_refresh.append(hook)
        return hook

    def notify_common_event_refresh(self, host_object: Any) -> None:
        for hook in list(self.common_event_refresh):
            hook(host_object)

    def handle_unhandled(self, command: str, context: Any, args: Sequence[str]) -> Any:
        if self.unhandled_command is None:
            logger.debug("Ignoring unhandled plugin command '%s'", command)
            return None
        return self.unhandled_command(command, context, args)
