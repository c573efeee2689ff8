"""Tests for :mod:`noteplug.plugins.template`."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

try:  # pragma: no cover - Python < 3.11 fallback
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

from noteplug.plugins import PluginManifest
from noteplug.plugins.template import main, render_manifest, render_manifest_mapping
from tests.helpers import write_manifest_text


def test_render_manifest_quotes_keys_that_need_it(toml_manifest_path: Path) -> None:
    text = render_manifest(PluginManifest(toml_manifest_path))

    assert "[plugins.Utils.parameters]" in text
    assert '"Read Meta from Page" = "true"' in text
    assert tomllib.loads(text)["plugins"]["Lights"]["parameters"]["Colours"] == "red, amber"


def test_rendered_text_loads_back_as_same_manifest(
    tmp_path: Path, toml_manifest_path: Path
) -> None:
    manifest = PluginManifest(toml_manifest_path)
    rendered = tmp_path / "rendered.toml"
    rendered.write_text(render_manifest(manifest), encoding="utf-8")

    assert PluginManifest(rendered).entries() == manifest.entries()


def test_render_mapping_escapes_strings() -> None:
    text = render_manifest_mapping(
        {"plugins": {"Say": {"enabled": True, "description": 'quote " and\nnewline'}}}
    )

    assert tomllib.loads(text)["plugins"]["Say"]["description"] == 'quote " and\nnewline'


def test_render_mapping_requires_plugins_table() -> None:
    with pytest.raises(ValueError):
        render_manifest_mapping({})
    with pytest.raises(ValueError):
        render_manifest_mapping({"plugins": {"Bad": 3}})


def test_render_mapping_rejects_unknown_values() -> None:
    with pytest.raises(TypeError):
        render_manifest_mapping({"plugins": {"Odd": {"value": object()}}})


def test_cli_converts_plugins_js_to_toml(tmp_path: Path) -> None:
    source = write_manifest_text(
        tmp_path,
        """
        var $plugins =
        [
        {"name":"EvilCatUtils","status":true,"description":"","parameters":{"Read Meta from Page":"true"}},
        {"name":"Off","status":false,"description":"","parameters":{}}
        ];
        """,
        name="plugins.js",
    )
    output = tmp_path / "out" / "plugins.toml"

    assert main([str(source), "--output", str(output), "--enabled-only"]) == 0

    manifest = PluginManifest(output)
    assert manifest.enabled_plugins() == ("EvilCatUtils",)
    assert "Off" not in manifest


def test_cli_writes_to_stdout(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "plugins.json"
    source.write_text(json.dumps([{"name": "Solo", "status": True}]), encoding="utf-8")

    assert main([str(source)]) == 0

    captured = capsys.readouterr()
    assert tomllib.loads(captured.out) == {
        "plugins": {"Solo": {"enabled": True, "description": "", "parameters": {}}}
    }


def test_cli_reports_invalid_manifest(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "missing.toml")])

    assert excinfo.value.code == 2
    assert "does not exist" in capsys.readouterr().err
