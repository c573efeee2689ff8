"""Tests for :mod:`noteplug.plugins.manager`."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from noteplug.exceptions import DuplicatePluginError
from noteplug.plugins import Plugin, PluginManager, PluginManifest
from noteplug.runtime import Runtime
from tests.helpers import build_manifest_mapping, write_plugin_module

_CHIMES_BODY = """
@command
def ring(self, dispatch_name, context, times="1"):
    return int(times) * self.param_int("Volume", 1)
"""


def _manifest(**plugins: dict) -> PluginManifest:
    return PluginManifest.from_mapping(build_manifest_mapping(plugins))


def test_discover_plugins_registers_valid_plugins(tmp_path: Path, runtime: Runtime) -> None:
    write_plugin_module(tmp_path, module_name="chimes", class_name="Chimes", body=_CHIMES_BODY)
    write_plugin_module(
        tmp_path, module_name="lamps", class_name="LampPlugin", plugin_name="Lamps"
    )

    manager = PluginManager(runtime)
    discovered = manager.discover_plugins(tmp_path)

    assert set(discovered) == {"Chimes", "Lamps"}
    registration = discovered["Lamps"]
    assert issubclass(registration.cls, Plugin)
    assert registration.name == "Lamps"
    assert set(manager.plugin_registry) == {"Chimes", "Lamps"}
    assert len(runtime.plugins) == 0


def test_discover_missing_directory_logs_warning(
    tmp_path: Path, runtime: Runtime, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="noteplug"):
        discovered = PluginManager(runtime).discover_plugins(tmp_path / "absent")

    assert discovered == {}
    assert "does not exist" in caplog.text


def test_discovery_skips_imported_plugin_classes(tmp_path: Path, runtime: Runtime) -> None:
    module = tmp_path / "reexport.py"
    module.write_text("from noteplug.plugins import Utils\n", encoding="utf-8")

    assert PluginManager(runtime).discover_plugins(tmp_path) == {}


def test_broken_module_is_logged_and_skipped(
    tmp_path: Path, runtime: Runtime, caplog: pytest.LogCaptureFixture
) -> None:
    (tmp_path / "broken.py").write_text("raise RuntimeError('boom')\n", encoding="utf-8")
    write_plugin_module(tmp_path, module_name="chimes", class_name="Chimes", body=_CHIMES_BODY)

    with caplog.at_level(logging.ERROR, logger="noteplug"):
        discovered = PluginManager(runtime).discover_plugins(tmp_path)

    assert set(discovered) == {"Chimes"}
    assert "Failed to import plugin module" in caplog.text


def test_load_plugin_instantiates_once(tmp_path: Path) -> None:
    write_plugin_module(tmp_path, module_name="chimes", class_name="Chimes", body=_CHIMES_BODY)
    runtime = Runtime({"Chimes": {"Volume": "3"}})
    manager = PluginManager(runtime)
    manager.discover_plugins(tmp_path)

    instance = manager.load_plugin("Chimes")

    assert manager.load_plugin("Chimes") is instance
    assert manager.plugins == {"Chimes": instance}
    assert runtime.dispatch("Chimes", None, ["ring", "2"]) == 6


def test_load_unknown_plugin_raises(runtime: Runtime) -> None:
    with pytest.raises(LookupError):
        PluginManager(runtime).load_plugin("Ghost")


def test_setup_follows_manifest_order(tmp_path: Path, runtime: Runtime) -> None:
    plugin_dir = tmp_path / "plugins"
    write_plugin_module(plugin_dir, module_name="Chimes", class_name="Chimes", body=_CHIMES_BODY)
    write_plugin_module(plugin_dir, module_name="Lamps", class_name="Lamps")
    write_plugin_module(plugin_dir, module_name="Debug", class_name="Debug")
    manifest = _manifest(
        Lamps={"enabled": True},
        Debug={"enabled": False},
        Chimes={"enabled": True},
        Missing={"enabled": True},
    )

    loaded = PluginManager(runtime).setup(manifest, plugin_dir)

    assert [plugin.name for plugin in loaded] == ["Lamps", "Chimes"]
    assert runtime.plugins.names() == ("Lamps", "Chimes")
    assert "Debug" not in runtime.plugins


def test_setup_loads_package_plugins(tmp_path: Path, runtime: Runtime) -> None:
    plugin_dir = tmp_path / "plugins"
    write_plugin_module(
        plugin_dir / "Weather", module_name="__init__", class_name="Weather"
    )

    loaded = PluginManager(runtime).setup(_manifest(Weather={}), plugin_dir)

    assert [plugin.name for plugin in loaded] == ["Weather"]


def test_setup_propagates_registration_errors(tmp_path: Path, runtime: Runtime) -> None:
    plugin_dir = tmp_path / "plugins"
    write_plugin_module(plugin_dir, module_name="First", class_name="First", plugin_name="Same")
    write_plugin_module(plugin_dir, module_name="Second", class_name="Second", plugin_name="Same")

    with pytest.raises(DuplicatePluginError):
        PluginManager(runtime).setup(_manifest(First={}, Second={}), plugin_dir)


def test_plugin_health_reports_loaded_state(tmp_path: Path, runtime: Runtime) -> None:
    write_plugin_module(tmp_path, module_name="chimes", class_name="Chimes", body=_CHIMES_BODY)
    write_plugin_module(tmp_path, module_name="lamps", class_name="Lamps")
    manager = PluginManager(runtime)
    manager.discover_plugins(tmp_path)
    chimes = manager.load_plugin("Chimes")
    runtime.aliases.bind("Bell", chimes)

    health = manager.get_plugin_health()

    assert health["Lamps"]["loaded"] is False
    assert health["Chimes"]["loaded"] is True
    assert health["Chimes"]["commands"] == ("ring",)
    assert health["Chimes"]["aliases"] == ("Bell",)
