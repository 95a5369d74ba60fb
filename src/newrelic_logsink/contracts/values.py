# src/newrelic_logsink/contracts/values.py
"""Attribute values attached to log records.

A Value is a tagged union of four shapes, mirroring what structured logging
front-ends capture:

- ScalarValue: a single primitive (or any other object, rendered as text)
- SequenceValue: ordered elements
- MappingValue: ordered (key, value) pairs; keys are NOT guaranteed unique
- StructureValue: optional type tag plus ordered named fields

Values are frozen. Nothing downstream mutates a record's attributes.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Set
from dataclasses import dataclass
from typing import Any, TypeAlias


@dataclass(frozen=True, slots=True)
class ScalarValue:
    """A single primitive value. ``None`` is allowed and means null."""

    value: Any


@dataclass(frozen=True, slots=True)
class SequenceValue:
    """An ordered list of values."""

    elements: tuple[Value, ...] = ()


@dataclass(frozen=True, slots=True)
class MappingValue:
    """Ordered key/value pairs. Duplicate keys are permitted."""

    entries: tuple[tuple[Value, Value], ...] = ()


@dataclass(frozen=True, slots=True)
class StructureValue:
    """A captured object: optional type tag plus ordered named fields."""

    fields: tuple[tuple[str, Value], ...] = ()
    type_tag: str | None = None


Value: TypeAlias = ScalarValue | SequenceValue | MappingValue | StructureValue

_VALUE_TYPES = (ScalarValue, SequenceValue, MappingValue, StructureValue)


def is_value(obj: object) -> bool:
    """Return True if obj is one of the Value shapes."""
    return isinstance(obj, _VALUE_TYPES)


def to_value(obj: Any) -> Value:
    """Capture an arbitrary Python object as a Value.

    - Value instances are returned unchanged
    - str, bytes and other non-container objects become ScalarValue
    - Mappings become MappingValue (insertion order kept)
    - lists, tuples and sets become SequenceValue
    - dataclass instances become StructureValue tagged with the class name
    """
    if is_value(obj):
        return obj  # type: ignore[return-value]
    if obj is None or isinstance(obj, (str, bytes, bytearray, bool, int, float)):
        return ScalarValue(obj)
    if isinstance(obj, Mapping):
        return MappingValue(tuple((to_value(k), to_value(v)) for k, v in obj.items()))
    if isinstance(obj, (list, tuple)):
        return SequenceValue(tuple(to_value(e) for e in obj))
    if isinstance(obj, Set):
        return SequenceValue(tuple(to_value(e) for e in obj))
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return StructureValue(
            fields=tuple((f.name, to_value(getattr(obj, f.name))) for f in dataclasses.fields(obj)),
            type_tag=type(obj).__name__,
        )
    return ScalarValue(obj)


def render_value(value: Value | None) -> str:
    """Render a value as display text.

    Top-level strings render bare; strings nested inside containers are
    double-quoted so that "[a, b]" and '["a", "b"]' stay distinguishable.
    """
    if isinstance(value, ScalarValue) and isinstance(value.value, str):
        return value.value
    return _render(value)


def _render(value: Value | None) -> str:
    if value is None:
        return "null"
    if isinstance(value, ScalarValue):
        return _render_scalar(value.value)
    if isinstance(value, SequenceValue):
        return "[" + ", ".join(_render(e) for e in value.elements) + "]"
    if isinstance(value, MappingValue):
        return "{" + ", ".join(f"{_render(k)}: {_render(v)}" for k, v in value.entries) + "}"
    if isinstance(value, StructureValue):
        body = "{ " + ", ".join(f"{name}: {_render(v)}" for name, v in value.fields) + " }"
        return f"{value.type_tag} {body}" if value.type_tag else body
    return _render_scalar(value)


def _render_scalar(raw: Any) -> str:
    if raw is None:
        return "null"
    if isinstance(raw, str):
        return '"' + raw.replace('"', '\\"') + '"'
    return str(raw)
