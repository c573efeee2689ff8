"""Structured annotations read from free-text notes.

Host data objects carry a ``note`` field holding tags such as
``<Light: 3>`` or ``<Hidden>``.  :func:`parse_note` turns the note into a
flat mapping and :func:`extract` performs typed lookups on it.  Script pages
may contribute extra tags through a leading run of comment commands, see
:func:`page_metadata`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar, Dict, Union

from .traits import extend
from .type_registry import TypeRegistry, TypeSpec, builtin_types

logger = logging.getLogger(__name__)

__all__ = [
    "COMMENT_CODES",
    "HasMetadata",
    "Metadata",
    "extract",
    "gather_intro_comments",
    "install_metadata_accessors",
    "page_metadata",
    "parse_note",
    "read_field",
]

MetaValue = Union[str, bool]
Metadata = Mapping[str, MetaValue]

#: Script command codes for a comment line and its continuation lines.
COMMENT_CODES = frozenset({108, 408})

_TAG_PATTERN = re.compile(r"<([^<>:]+)(:?)([^>]*)>")


def parse_note(note: str | None) -> Dict[str, MetaValue]:
    """Return the tags found in ``note``.

    ``<Key: value>`` maps ``Key`` to ``"value"`` and ``<Key>`` maps ``Key``
    to ``True``.  When a key repeats, the last tag wins.
    """

    meta: Dict[str, MetaValue] = {}
    if not note:
        return meta

    for match in _TAG_PATTERN.finditer(note):
        key, colon, value = match.groups()
        if colon:
            meta[key] = value.lstrip()
        else:
            meta[key] = True
    return meta


def read_field(record: Any, field: str) -> Any:
    """Return ``field`` of a mapping record or attribute of a host object."""

    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


def gather_intro_comments(commands: Iterable[Any] | None) -> str | None:
    """Join the leading comment lines of a script listing.

    Commands may be mappings or objects exposing ``code`` and
    ``parameters``.  Collection stops at the first non-comment command.
    """

    if not commands:
        return None

    lines: list[str] = []
    for command in commands:
        if read_field(command, "code") not in COMMENT_CODES:
            break
        parameters = read_field(command, "parameters") or ("",)
        lines.append(str(parameters[0]))
    return "\n".join(lines)


def page_metadata(note: str | None, commands: Iterable[Any] | None = None) -> Dict[str, MetaValue]:
    """Parse ``note`` followed by the intro comments of ``commands``.

    Tags from the comments override tags of the same name in the note.
    """

    source = note or ""
    intro = gather_intro_comments(commands)
    if intro:
        source = "\n".join([source, intro])
    return parse_note(source)


def extract(
    metadata: Metadata | None,
    name: str | None = None,
    type: TypeSpec | None = None,
    default: Any = None,
    *,
    types: TypeRegistry | None = None,
) -> Any:
    """Read ``name`` from ``metadata`` and optionally parse it.

    Parameters
    ----------
    metadata:
        Flat tag mapping, or ``None`` when the object has no metadata.  In
        that case ``None`` is returned whatever the other arguments are.
    name:
        Tag to read.  When omitted the whole mapping is returned.
    type:
        Type name or parser applied to the raw value.  Names are resolved in
        ``types``, normally the runtime's shared registry.  Without
        ``types`` only the built-in type names resolve.  Parse failures are
        raised even when ``default`` is given.
    default:
        Returned when ``name`` is absent from ``metadata``.
    """

    if metadata is None:
        return None
    if name is None:
        return metadata
    if name not in metadata:
        return default

    value = metadata[name]
    if type is not None:
        registry = types if types is not None else builtin_types()
        value = registry.parse(value, type)
    return value


class HasMetadata:
    """Mixin giving host objects a typed ``get_meta`` accessor.

    Metadata is taken from ``self.meta`` when set, otherwise from the record
    returned by ``get_db_data()`` (its ``meta`` or, failing that, its parsed
    ``note``).  Type names resolve in ``metadata_types``, the registry bound
    by :func:`install_metadata_accessors` (usually ``Runtime.types``).
    """

    metadata_types: ClassVar[TypeRegistry | None] = None

    def get_meta(
        self,
        name: str | None = None,
        type: TypeSpec | None = None,
        default: Any = None,
    ) -> Any:
        meta = _resolve_meta(self)
        if meta is None:
            return default
        return extract(meta, name, type, default, types=self.metadata_types)


def _resolve_meta(holder: Any) -> Metadata | None:
    meta = getattr(holder, "meta", None)
    if meta is not None:
        return meta

    get_db_data = getattr(holder, "get_db_data", None)
    if not callable(get_db_data):
        return None

    data = get_db_data()
    if data is None:
        return None

    meta = read_field(data, "meta")
    if meta is not None:
        return meta

    note = read_field(data, "note")
    if note is None:
        return None
    return parse_note(note)


def install_metadata_accessors(*classes: type, types: TypeRegistry | None = None) -> None:
    """Mix :class:`HasMetadata` into host classes that cannot inherit it.

    ``types`` becomes the registry their ``get_meta`` lookups parse with.
    """

    for cls in classes:
        extend(cls, HasMetadata)
        cls.metadata_types = types  # type: ignore[attr-defined]
        logger.debug("Installed metadata accessors on %s", cls.__qualname__)
