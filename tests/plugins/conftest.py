from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers import write_manifest_text


@pytest.fixture()
def toml_manifest_path(tmp_path: Path) -> Path:
    return write_manifest_text(
        tmp_path,
        """
        [plugins.Utils]
        enabled = true
        description = "Utility commands"

        [plugins.Utils.parameters]
        "Read Meta from Page" = true

        [plugins.Lights]
        enabled = true

        [plugins.Lights.parameters]
        Radius = 4
        Colours = ["red", "amber"]

        [plugins.Debug]
        enabled = false
        """,
    )
