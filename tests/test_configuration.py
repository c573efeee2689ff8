"""Tests for :mod:`noteplug.configuration`."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from noteplug.configuration import (
    configure_logging_from_project,
    load_project_config,
    load_project_manifest_config,
)
from tests.conftest import write_pyproject


def test_load_project_config_from_directory(tmp_path: Path) -> None:
    write_pyproject(
        tmp_path,
        """
        [tool.noteplug]
        strict = true

        [tool.noteplug.plugins.Lights]
        enabled = false
        """,
    )

    loaded = load_project_config(tmp_path)

    assert loaded is not None
    config, source = loaded
    assert config["strict"] is True
    assert source == (tmp_path / "pyproject.toml").resolve()


@pytest.mark.parametrize(
    "contents",
    ["[project]\nname = 'demo'\n", "[tool.other]\nvalue = 1\n"],
)
def test_load_project_config_without_section(tmp_path: Path, contents: str) -> None:
    write_pyproject(tmp_path, contents)

    assert load_project_config(tmp_path) is None


def test_load_project_config_missing_file(tmp_path: Path) -> None:
    assert load_project_config(tmp_path) is None
    assert load_project_config(tmp_path / "settings.cfg") is None


def test_manifest_config_is_copied(tmp_path: Path) -> None:
    pyproject = write_pyproject(
        tmp_path,
        """
        [tool.noteplug.plugins.Lights]
        enabled = false
        """,
    )

    loaded = load_project_manifest_config(pyproject)

    assert loaded is not None
    mapping, _ = loaded
    assert mapping == {"plugins": {"Lights": {"enabled": False}}}


def test_manifest_config_without_plugins(tmp_path: Path) -> None:
    write_pyproject(tmp_path, "[tool.noteplug]\nstrict = true\n")

    assert load_project_manifest_config(tmp_path) is None


def test_configure_logging_from_project(tmp_path: Path) -> None:
    write_pyproject(
        tmp_path,
        """
        [tool.noteplug.logging]
        level = "WARNING"
        format = "json"
        """,
    )

    assert configure_logging_from_project(tmp_path) is True
    assert logging.getLogger("noteplug").level == logging.WARNING


def test_configure_logging_without_table(tmp_path: Path) -> None:
    write_pyproject(tmp_path, "[tool.noteplug]\nstrict = true\n")

    assert configure_logging_from_project(tmp_path) is False


def test_configure_logging_rejects_bad_types(tmp_path: Path) -> None:
    write_pyproject(tmp_path, "[tool.noteplug.logging]\nformat = 3\n")

    with pytest.raises(ValueError):
        configure_logging_from_project(tmp_path)
