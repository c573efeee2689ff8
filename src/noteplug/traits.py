"""Attribute-level trait composition.

Traits are plain mappings, classes or instances whose attributes are copied
onto a target.  Descriptors (``property``, ``staticmethod``...) are copied
as-is so accessors keep working on the receiving class.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, TypeVar

__all__ = [
    "clone_data_object",
    "compose_trait",
    "extend",
    "receive_properties",
    "use_trait",
    "with_traits",
]

T = TypeVar("T")
ClassT = TypeVar("ClassT", bound=type)

_CLASS_BOOKKEEPING = frozenset(
    {
        "__dict__",
        "__weakref__",
        "__module__",
        "__qualname__",
        "__doc__",
        "__firstlineno__",
        "__static_attributes__",
        "__annotations__",
        "__annotate__",
        "__annotate_func__",
        "__annotations_cache__",
    }
)


def _own_properties(source: Any) -> Mapping[str, Any]:
    if isinstance(source, Mapping):
        return source
    if isinstance(source, type):
        return {
            key: value
            for key, value in vars(source).items()
            if key not in _CLASS_BOOKKEEPING
        }
    try:
        return vars(source)
    except TypeError as exc:
        raise TypeError(
            f"Cannot read properties from {type(source).__name__!s} instance"
        ) from exc


def receive_properties(target: T, source: Any) -> T:
    """Copy the own attributes of ``source`` onto ``target``.

    ``target`` may be a mutable mapping, a class or an instance.  Sub-objects
    are shared, not cloned.
    """

    properties = dict(_own_properties(source))
    if isinstance(target, dict):
        target.update(properties)
        return target

    for key, value in properties.items():
        setattr(target, key, value)
    return target


def compose_trait(*sources: Any) -> dict[str, Any]:
    """Return a new trait holding the attributes of ``sources`` in order."""

    trait: dict[str, Any] = {}
    for source in sources:
        receive_properties(trait, source)
    return trait


def use_trait(cls: ClassT, trait: Any) -> ClassT:
    """Mix ``trait`` into ``cls``."""

    if not isinstance(cls, type):
        raise TypeError("use_trait expects a class as target")
    return receive_properties(cls, trait)


def extend(cls: ClassT, *traits: Any) -> ClassT:
    """Mix every trait of ``traits`` into ``cls`` and return it."""

    for trait in traits:
        use_trait(cls, trait)
    return cls


def with_traits(*traits: Any) -> Callable[[ClassT], ClassT]:
    """Class decorator form of :func:`extend`."""

    def decorator(cls: ClassT) -> ClassT:
        return extend(cls, *traits)

    return decorator


def clone_data_object(source: dict[str, Any]) -> dict[str, Any]:
    """Shallow copy of a plain data mapping."""

    if type(source) is not dict:
        raise TypeError("clone_data_object only accepts plain dict instances")
    return receive_properties({}, source)
