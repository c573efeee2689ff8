"""Tests for the built-in :class:`noteplug.plugins.utils.Utils` plugin."""

from __future__ import annotations

import pytest

from noteplug.exceptions import CommandError
from noteplug.expressions import ExpressionError
from noteplug.plugins import Utils
from noteplug.runtime import Runtime
from tests.conftest import VariableTable
from tests.helpers import FakeEvent, comment


def test_calc_alias_assigns_variable(runtime: Runtime, variables: VariableTable) -> None:
    Utils(runtime)
    variables.set_value(4, 10)

    result = runtime.dispatch("Calc", None, ["$v(2)", "=", "2+2+$v(4)"])

    assert result == 14
    assert variables.value(2) == 14


def test_calc_through_plugin_command(runtime: Runtime, variables: VariableTable) -> None:
    Utils(runtime)

    runtime.dispatch("Utils", None, ["Calc", "$v(1)", "=", "3*3"])

    assert variables.value(1) == 9


def test_calc_alias_is_bound_to_utils(runtime: Runtime) -> None:
    utils = Utils(runtime)

    assert runtime.aliases.get("Calc") is utils
    assert "Calc" in utils.valid_commands


def test_calc_rejects_useless_expressions(runtime: Runtime) -> None:
    Utils(runtime)

    with pytest.raises(ExpressionError, match="Bad or useless expression"):
        runtime.dispatch("Calc", None, ["2+2"])


def test_calc_requires_variable_store() -> None:
    runtime = Runtime()
    Utils(runtime)

    with pytest.raises(CommandError):
        runtime.dispatch("Calc", None, ["$v(1)=1"])


def test_page_setup_merges_intro_comments(runtime: Runtime) -> None:
    Utils(runtime)
    event = FakeEvent(
        "<Light: 1><Door>",
        [comment("<Light: 4>"), comment("<Locked>", continuation=True), {"code": 101}],
    )

    runtime.hooks.notify_page_setup(event)

    assert event.meta == {"Light": "4", "Door": True, "Locked": True}


def test_page_setup_without_page_uses_note(runtime: Runtime) -> None:
    Utils(runtime)
    event = FakeEvent("<Door>")

    runtime.hooks.notify_page_setup(event)

    assert event.meta == {"Door": True}


def test_page_clear_resets_to_note(runtime: Runtime) -> None:
    Utils(runtime)
    event = FakeEvent("<Door>", [comment("<Locked>")])
    runtime.hooks.notify_page_setup(event)

    runtime.hooks.notify_page_clear(event)

    assert event.meta == {"Door": True}


def test_read_meta_from_page_can_be_disabled() -> None:
    runtime = Runtime({"Utils": {"Read Meta from Page": "false"}})
    utils = Utils(runtime)

    assert utils.read_meta_from_page is False
    assert runtime.hooks.page_setup == []
    assert runtime.hooks.page_clear == []
    assert runtime.hooks.common_event_refresh == []


def test_bad_read_meta_flag_falls_back_to_enabled() -> None:
    runtime = Runtime({"Utils": {"Read Meta from Page": "sometimes"}})

    assert Utils(runtime).read_meta_from_page is True
    assert len(runtime.hooks.page_setup) == 1


class FakeCommonEvent:
    """Common event: no note, no pages, only a command list."""

    def __init__(self, commands: list) -> None:
        self._commands = commands
        self.meta = None
        self.setup_calls = 0

    def list(self) -> list:
        return self._commands

    def setup_meta(self) -> None:
        self.setup_calls += 1


def test_common_event_meta_comes_from_intro_comments(runtime: Runtime) -> None:
    Utils(runtime)
    common_event = FakeCommonEvent(
        [comment("<Weather: rain>"), comment("<Auto>", continuation=True), {"code": 101}]
    )

    runtime.hooks.notify_common_event_refresh(common_event)

    assert common_event.meta == {"Weather": "rain", "Auto": True}
    assert common_event.setup_calls == 1


def test_common_event_meta_is_built_once(runtime: Runtime) -> None:
    Utils(runtime)
    common_event = FakeCommonEvent([comment("<Weather: rain>")])
    runtime.hooks.notify_common_event_refresh(common_event)

    common_event._commands = [comment("<Weather: snow>")]
    runtime.hooks.notify_common_event_refresh(common_event)

    assert common_event.meta == {"Weather": "rain"}
    assert common_event.setup_calls == 1


def test_common_event_without_comments_gets_empty_meta(runtime: Runtime) -> None:
    Utils(runtime)
    common_event = FakeCommonEvent([])

    runtime.hooks.notify_common_event_refresh(common_event)

    assert common_event.meta == {}
