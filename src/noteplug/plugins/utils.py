"""Built-in ``Utils`` plugin: the ``Calc`` command and page metadata."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from ..exceptions import CommandError
from ..expressions import evaluate, parse_assignment
from ..metadata import gather_intro_comments, page_metadata, parse_note, read_field
from .base import Plugin
from .capabilities import command

if TYPE_CHECKING:  # pragma: no cover - type-checker hint without runtime import
    from ..runtime import Runtime

logger = logging.getLogger(__name__)

__all__ = ["CALC_ALIAS", "Utils"]

CALC_ALIAS = "Calc"


class Utils(Plugin):
    """Helpers every game gets once the plugin layer is installed.

    ``Calc $v(2) = 2+2+$v(4)`` stores the result of an arithmetic expression
    into a game variable.  The command is reachable both as ``Utils Calc
    ...`` and through the ``Calc`` alias.

    With the ``Read Meta from Page`` parameter on (the default), objects
    refresh their ``meta`` whenever the host sets up a script page, adding
    the tags written in the page's leading comments to the note tags.
    Common events, which have no note, build their ``meta`` once from the
    leading comments of their command list and then call their
    ``setup_meta()`` method when they define one.
    """

    def __init__(self, runtime: "Runtime") -> None:
        super().__init__(runtime)
        runtime.aliases.bind(CALC_ALIAS, self)

        self.read_meta_from_page = self.param_bool("Read Meta from Page", True)
        if self.read_meta_from_page:
            runtime.hooks.register_page_setup(self.refresh_page_meta)
            runtime.hooks.register_page_clear(self.reset_page_meta)
            runtime.hooks.register_common_event_refresh(self.init_common_event_meta)

    def event_command(self, dispatch_name: str, context: Any, args: Sequence[str]) -> Any:
        if dispatch_name == CALC_ALIAS:
            return self.calc("".join(args))
        return super().event_command(dispatch_name, context, args)

    @command(name=CALC_ALIAS)
    def calc_command(self, dispatch_name: str, context: Any, *tokens: str) -> Any:
        return self.calc("".join(tokens))

    def calc(self, text: str) -> Any:
        """Evaluate ``$v(index) = expression`` and store the result."""

        variables = self.runtime.variables
        if variables is None:
            raise CommandError("Calc needs a runtime with a variable store")

        assignment = parse_assignment(text)
        value = evaluate(assignment.expression, variables.value)
        variables.set_value(assignment.index, value)
        logger.debug("Calc set variable %d to %r", assignment.index, value)
        return value

    # ------------------------------------------------------------------
    # Page metadata
    # ------------------------------------------------------------------
    def refresh_page_meta(self, host_object: Any) -> None:
        host_object.meta = page_metadata(_note_of(host_object), _page_commands(host_object))

    def reset_page_meta(self, host_object: Any) -> None:
        host_object.meta = parse_note(_note_of(host_object))

    def init_common_event_meta(self, host_object: Any) -> None:
        if getattr(host_object, "meta", None) is not None:
            return

        commands = getattr(host_object, "list", None)
        if callable(commands):
            commands = commands()
        host_object.meta = parse_note(gather_intro_comments(commands))

        setup_meta = getattr(host_object, "setup_meta", None)
        if callable(setup_meta):
            setup_meta()


def _note_of(host_object: Any) -> str | None:
    get_db_data = getattr(host_object, "get_db_data", None)
    if not callable(get_db_data):
        return None
    data = get_db_data()
    if data is None:
        return None
    return read_field(data, "note")


def _page_commands(host_object: Any) -> Any:
    page = getattr(host_object, "page", None)
    if callable(page):
        page = page()
    if page is None:
        return None
    return read_field(page, "list")
