"""Render plugin manifests as TOML and convert between manifest formats."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from noteplug.exceptions import ManifestError
from noteplug.plugins.config import PluginManifest


def render_manifest(manifest: PluginManifest) -> str:
    """Serialise ``manifest`` into the ``plugins.toml`` format."""

    return render_manifest_mapping(manifest.as_mapping())


def render_manifest_mapping(mapping: Mapping[str, Any]) -> str:
    """Serialise a ``{"plugins": {...}}`` mapping into TOML text."""

    plugins_table = mapping.get("plugins")
    if not isinstance(plugins_table, Mapping):
        raise ValueError("'plugins' table is required to render the manifest")

    lines: list[str] = []
    for name, settings in plugins_table.items():
        if not isinstance(settings, Mapping):
            raise ValueError(f"plugin '{name}' must be a table")
        if lines and lines[-1] != "":
            lines.append("")
        _emit_toml_table(lines, f"plugins.{_format_key(name)}", settings)

    return "\n".join(lines) + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point converting a manifest into ``plugins.toml``."""

    parser = argparse.ArgumentParser(
        description=(
            "Convert a plugin manifest (TOML, YAML, JSON or plugins.js) into "
            "the canonical plugins.toml format"
        )
    )
    parser.add_argument("source", type=Path, help="Manifest file to convert")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional destination file. Writes to stdout when omitted.",
    )
    parser.add_argument(
        "--enabled-only",
        action="store_true",
        help="Drop the entries whose status is disabled",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        manifest = PluginManifest(args.source)
    except ManifestError as exc:
        parser.exit(2, f"error: {exc}\n")

    mapping = manifest.as_mapping()
    if args.enabled_only:
        enabled = set(manifest.enabled_plugins())
        mapping["plugins"] = {
            name: settings for name, settings in mapping["plugins"].items() if name in enabled
        }

    text = render_manifest_mapping(mapping)

    if args.output is None:
        sys.stdout.write(text)
    else:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")

    return 0


def _emit_toml_table(lines: list[str], table_name: str, values: Mapping[str, Any]) -> None:
    lines.append(f"[{table_name}]")
    nested: list[tuple[str, Mapping[str, Any]]] = []
    for key, value in values.items():
        if isinstance(value, Mapping):
            nested.append((key, value))
            continue
        lines.append(f"{_format_key(key)} = {_format_toml_value(value)}")

    for key, value in nested:
        lines.append("")
        _emit_toml_table(lines, f"{table_name}.{_format_key(key)}", value)


def _format_key(key: str) -> str:
    if key and all(char.isalnum() or char in "-_" for char in key) and key.isascii():
        return key
    return _quote(key)


def _quote(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _format_toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, Path):
        return _quote(value.as_posix())
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return "[" + ", ".join(_format_toml_value(item) for item in value) + "]"

    raise TypeError(f"Unsupported TOML value type: {type(value)!r}")


if __name__ == "__main__":  # pragma: no cover - convenience CLI
    raise SystemExit(main())


__all__ = [
    "main",
    "render_manifest",
    "render_manifest_mapping",
]
