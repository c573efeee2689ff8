from __future__ import annotations

import logging
import sys
from pathlib import Path
from textwrap import dedent
from typing import Any, Dict

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from noteplug.runtime import Runtime  # noqa: E402


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


class VariableTable:
    """In-memory game variable store."""

    def __init__(self, initial: Dict[int, Any] | None = None) -> None:
        self.values: Dict[int, Any] = dict(initial or {})

    def value(self, index: int) -> Any:
        return self.values.get(index, 0)

    def set_value(self, index: int, value: Any) -> None:
        self.values[index] = value


@pytest.fixture()
def variables() -> VariableTable:
    return VariableTable()


@pytest.fixture()
def runtime(variables: VariableTable) -> Runtime:
    """Fresh runtime with no declared parameters."""

    return Runtime(variables=variables)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    package_logger = logging.getLogger("noteplug")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in list(package_logger.handlers):
        if handler not in handlers:
            package_logger.removeHandler(handler)
    package_logger.setLevel(level)
