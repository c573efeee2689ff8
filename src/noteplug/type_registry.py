"""Named value parsers shared by plugin parameters and metadata lookups.

Every parser accepts either the raw text supplied by the host or a value
that is already of the target type.  Typed input is returned unchanged so
parsers can be applied repeatedly.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterator, Mapping
from typing import Any, Callable, Dict, Union

from .exceptions import DuplicateTypeError, ParseError, UnknownTypeError

__all__ = [
    "BUILTIN_TYPE_NAMES",
    "FALSE_TOKENS",
    "Parser",
    "TRUE_TOKENS",
    "TypeRegistry",
    "TypeSpec",
    "builtin_types",
    "parse_array",
    "parse_bool",
    "parse_float",
    "parse_id",
    "parse_int",
    "parse_int_array",
    "parse_string",
]

Parser = Callable[[Any], Any]
TypeSpec = Union[str, Parser]

TRUE_TOKENS = frozenset({"true", "y", "yes", "on", "1", "enable", "enabled"})
FALSE_TOKENS = frozenset({"false", "n", "no", "off", "0", "disable", "disabled"})

_ARRAY_SEPARATOR = re.compile(r"\s*,\s*")
_RADIX_PREFIXES = {"0x": 16, "0o": 8, "0b": 2}


def _coerce_number(raw: Any) -> float:
    """Loose numeric coercion following the host's textual number grammar."""

    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, (int, float)):
        return float(raw)
    if not isinstance(raw, str):
        raise ParseError(f"Cannot convert {type(raw).__name__} to a number")

    text = raw.strip()
    if not text:
        return 0.0

    radix = _RADIX_PREFIXES.get(text[:2].lower())
    if radix is not None:
        try:
            return float(int(text[2:], radix))
        except ValueError as exc:
            raise ParseError(f"Not a number: {raw!r}") from exc

    lowered = text.lower()
    if "_" in text or lowered in {"inf", "+inf", "-inf", "nan", "+nan", "-nan"}:
        raise ParseError(f"Not a number: {raw!r}")
    unsigned = text[1:] if text[0] in "+-" else text
    if unsigned.lower() == "infinity" and unsigned != "Infinity":
        raise ParseError(f"Not a number: {raw!r}")

    try:
        return float(text)
    except ValueError as exc:
        raise ParseError(f"Not a number: {raw!r}") from exc


def parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if not isinstance(raw, str):
        raise ParseError(f"Unknown boolean value: {raw!r}")

    token = raw.strip().lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    raise ParseError(f"Unknown boolean value: {raw!r}")


def parse_int(raw: Any) -> int:
    """Floor of the numeric value of ``raw`` (``-1.2`` gives ``-2``)."""

    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw

    number = _coerce_number(raw)
    if math.isnan(number) or math.isinf(number):
        raise ParseError(f"Not an integer: {raw!r}")
    return math.floor(number)


def parse_id(raw: Any) -> int:
    value = parse_int(raw)
    if value < 1:
        raise ParseError(f"Bad id: {raw!r}")
    return value


def parse_float(raw: Any) -> float:
    if isinstance(raw, float) and not math.isnan(raw):
        return raw

    number = _coerce_number(raw)
    if math.isnan(number):
        raise ParseError(f"Not a number: {raw!r}")
    return number


def parse_string(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    return str(raw)


def parse_array(raw: Any) -> list[Any]:
    """Split comma separated text into a list of strings."""

    if isinstance(raw, list):
        return raw
    if isinstance(raw, tuple):
        return list(raw)
    if isinstance(raw, str):
        return _ARRAY_SEPARATOR.split(raw.strip())
    raise ParseError(f"Bad array: {raw!r}")


def parse_int_array(raw: Any) -> list[int]:
    return [parse_int(item) for item in parse_array(raw)]


_BUILTIN_PARSERS: Dict[str, Parser] = {
    "Bool": parse_bool,
    "Int": parse_int,
    "Id": parse_id,
    "Float": parse_float,
    "String": parse_string,
    "Array": parse_array,
    "IntArray": parse_int_array,
}

BUILTIN_TYPE_NAMES: tuple[str, ...] = tuple(_BUILTIN_PARSERS)


class TypeRegistry:
    """Mapping of type names to parsers.

    The registry is append-only: registering an existing name raises
    :class:`~noteplug.exceptions.DuplicateTypeError`.
    """

    def __init__(self, parsers: Mapping[str, Parser] | None = None) -> None:
        self._parsers: Dict[str, Parser] = {}
        if parsers:
            for name, parser in parsers.items():
                self.register(name, parser)

    def __contains__(self, name: object) -> bool:
        return name in self._parsers

    def __iter__(self) -> Iterator[str]:
        return iter(self._parsers)

    def __len__(self) -> int:
        return len(self._parsers)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._parsers)!r})"

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._parsers)

    def register(self, name: str, parser: Parser) -> Parser:
        """Register ``parser`` under ``name`` and return it."""

        if not isinstance(name, str) or not name:
            raise ValueError("type names must be non-empty strings")
        if not callable(parser):
            raise TypeError(f"parser for type '{name}' must be callable")
        if name in self._parsers:
            raise DuplicateTypeError(name)

        self._parsers[name] = parser
        return parser

    def get(self, name: str) -> Parser:
        try:
            return self._parsers[name]
        except KeyError:
            raise UnknownTypeError(name) from None

    def resolve(self, type_spec: TypeSpec) -> Parser:
        """Return the parser designated by a type name or a parser callable."""

        if isinstance(type_spec, str):
            return self.get(type_spec)
        if callable(type_spec):
            return type_spec
        raise TypeError(f"type must be a name or a parser, not {type_spec!r}")

    def parse(self, raw: Any, type_spec: TypeSpec) -> Any:
        parser = self.resolve(type_spec)
        try:
            return parser(raw)
        except ParseError:
            raise
        except (TypeError, ValueError) as exc:
            raise ParseError(f"Cannot parse {raw!r} with {_describe(type_spec)}: {exc}") from exc

    def copy(self) -> "TypeRegistry":
        return type(self)(self._parsers)


def _describe(type_spec: TypeSpec) -> str:
    if isinstance(type_spec, str):
        return f"type '{type_spec}'"
    return f"parser {getattr(type_spec, '__name__', repr(type_spec))}"


def builtin_types() -> TypeRegistry:
    """Return a new registry seeded with the built-in types."""

    return TypeRegistry(_BUILTIN_PARSERS)
