"""Convenience re-exports for test helpers."""

from __future__ import annotations

from tests.helpers.plugins import (
    FakeEvent,
    build_manifest_mapping,
    comment,
    write_manifest_text,
    write_plugin_module,
)

__all__ = [
    "FakeEvent",
    "build_manifest_mapping",
    "comment",
    "write_manifest_text",
    "write_plugin_module",
]
