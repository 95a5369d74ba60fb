# src/newrelic_logsink/core/simplifier.py
"""Reduce nested attribute values to primitives the Log API accepts.

Rules:
- bool, int, float, Decimal and byte sequences pass through unchanged
- NaN and the infinities have no JSON form and become their text
- any other scalar (including null) becomes its text
- sequences become lists
- structures become dicts, with the type tag under ``$typeTag``
- mappings become dicts keyed by the JSON object-key text; if two keys end
  up with the same text the whole mapping is returned as a list of
  ``{"Key": k, "Value": v}`` records instead, so nothing is lost to the
  collision

Nesting depth is unbounded: the walk uses an explicit work stack rather
than recursion.
"""

from __future__ import annotations

import base64
import json
import math
from collections.abc import Callable
from decimal import Decimal
from typing import Any

import structlog

from newrelic_logsink.contracts.values import (
    MappingValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
    Value,
    render_value,
)

logger = structlog.get_logger(__name__)

TYPE_TAG_KEY = "$typeTag"

# Scalar types that survive simplification as-is
_PASSTHROUGH_TYPES = (bool, int, float, Decimal, bytes, bytearray)

KeyCollisionCallback = Callable[[str], None]


def simplify_scalar(raw: Any) -> Any:
    """Simplify one scalar: primitives pass through, everything else becomes text."""
    if isinstance(raw, float) and not math.isfinite(raw):
        return str(raw)
    if isinstance(raw, Decimal) and not raw.is_finite():
        return str(raw)
    if isinstance(raw, _PASSTHROUGH_TYPES):
        return raw
    if raw is None:
        return "null"
    return str(raw)


def simplify(value: Value | None, *, on_collision: KeyCollisionCallback | None = None) -> Any:
    """Simplify a Value into nested lists, dicts and primitives.

    Args:
        value: The value to simplify. ``None`` simplifies like a null scalar.
        on_collision: Called with the colliding simplified key whenever a
            mapping falls back to the key/value list form. The collision is
            always logged regardless.

    Returns:
        A primitive, list or dict.
    """
    if not _is_composite(value):
        return _simplify_leaf(value)

    stack: list[_Frame] = [_Frame(value)]  # type: ignore[arg-type]
    while True:
        frame = stack[-1]
        if len(frame.results) < len(frame.children):
            child = frame.children[len(frame.results)]
            if _is_composite(child):
                stack.append(_Frame(child))
            else:
                frame.results.append(_simplify_leaf(child))
            continue

        stack.pop()
        result = _assemble(frame, on_collision)
        if not stack:
            return result
        stack[-1].results.append(result)


class _Frame:
    """One composite value whose children are being simplified."""

    __slots__ = ("children", "node", "results")

    def __init__(self, node: SequenceValue | MappingValue | StructureValue) -> None:
        self.node = node
        self.children: tuple[Any, ...] = _children_of(node)
        self.results: list[Any] = []


def _is_composite(value: object) -> bool:
    return isinstance(value, (SequenceValue, MappingValue, StructureValue))


def _simplify_leaf(value: Any) -> Any:
    if isinstance(value, ScalarValue):
        return simplify_scalar(value.value)
    return simplify_scalar(value)


def _children_of(node: SequenceValue | MappingValue | StructureValue) -> tuple[Any, ...]:
    if isinstance(node, SequenceValue):
        return node.elements
    if isinstance(node, MappingValue):
        return tuple(v for _, v in node.entries)
    return tuple(v for _, v in node.fields)


def _simplify_key(key: Any) -> Any:
    """Mapping keys must stay hashable and JSON-encodable.

    Non-scalar keys are rendered as text; byte keys become base64 text and
    Decimal keys their string form.
    """
    if _is_composite(key):
        return render_value(key)
    simple = simplify_scalar(key.value if isinstance(key, ScalarValue) else key)
    if isinstance(simple, (bytes, bytearray)):
        return base64.b64encode(bytes(simple)).decode("ascii")
    if isinstance(simple, Decimal):
        return str(simple)
    return simple


def _object_key(simple: Any) -> str:
    # json.dumps writes non-str keys as their JSON literal: True -> "true", 1 -> "1"
    return simple if isinstance(simple, str) else json.dumps(simple)


def simplify_key(key: Value | Any) -> str:
    """Simplify a mapping key to the text it has as a JSON object key."""
    return _object_key(_simplify_key(key))


def _assemble(frame: _Frame, on_collision: KeyCollisionCallback | None) -> Any:
    node = frame.node
    if isinstance(node, SequenceValue):
        return frame.results

    if isinstance(node, StructureValue):
        props = {name: result for (name, _), result in zip(node.fields, frame.results, strict=True)}
        if node.type_tag is not None:
            props[TYPE_TAG_KEY] = node.type_tag
        return props

    keys = [_simplify_key(k) for k, _ in node.entries]
    result: dict[str, Any] = {}
    for key, simplified in zip(keys, frame.results, strict=True):
        object_key = _object_key(key)
        if object_key in result:
            logger.warning(
                "Mapping key is not unique after simplification, emitting key/value pairs",
                key=object_key,
                entry_count=len(keys),
            )
            if on_collision is not None:
                on_collision(object_key)
            return [{"Key": k, "Value": v} for k, v in zip(keys, frame.results, strict=True)]
        result[object_key] = simplified
    return result
