# tests/unit/core/test_simplifier.py
"""Tests for the attribute value simplifier.

Tests cover:
- Scalar type preservation and text conversion
- Sequences, structures ($typeTag) and mappings
- Key collision fallback to {Key, Value} pairs
- Deep nesting without recursion limits
"""

import json
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from hypothesis import given
from hypothesis import strategies as st

from newrelic_logsink.contracts.values import (
    MappingValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
)
from newrelic_logsink.core.simplifier import TYPE_TAG_KEY, simplify, simplify_key, simplify_scalar


def _scalar_map(*pairs: tuple[object, object]) -> MappingValue:
    return MappingValue(tuple((ScalarValue(k), ScalarValue(v)) for k, v in pairs))


# =============================================================================
# Scalars
# =============================================================================


class TestScalars:
    def test_null_becomes_text(self) -> None:
        assert simplify(ScalarValue(None)) == "null"
        assert simplify(None) == "null"

    def test_decimal_and_bytes_pass_through(self) -> None:
        assert simplify(ScalarValue(Decimal("1.50"))) == Decimal("1.50")
        assert simplify(ScalarValue(b"\x00\x01")) == b"\x00\x01"

    def test_other_types_become_text(self) -> None:
        when = datetime(2026, 1, 30, 12, 0, tzinfo=UTC)
        assert simplify(ScalarValue(when)) == str(when)

    def test_simplify_scalar_on_raw_values(self) -> None:
        assert simplify_scalar(True) is True
        assert simplify_scalar(None) == "null"
        assert simplify_scalar(3.5) == 3.5

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (float("nan"), "nan"),
            (float("inf"), "inf"),
            (float("-inf"), "-inf"),
            (Decimal("NaN"), "NaN"),
            (Decimal("-Infinity"), "-Infinity"),
        ],
    )
    def test_non_finite_numbers_become_text(self, raw: object, expected: str) -> None:
        assert simplify(ScalarValue(raw)) == expected

    @given(raw=st.one_of(st.booleans(), st.integers(), st.floats(allow_nan=False, allow_infinity=False)))
    def test_primitive_kind_is_preserved(self, raw: object) -> None:
        result = simplify(ScalarValue(raw))
        assert type(result) is type(raw)
        assert result == raw

    @given(raw=st.one_of(st.text(), st.datetimes(), st.uuids(), st.dates()))
    def test_other_scalars_become_strings(self, raw: object) -> None:
        assert isinstance(simplify(ScalarValue(raw)), str)


# =============================================================================
# Composites
# =============================================================================


class TestComposites:
    def test_sequence_becomes_list(self) -> None:
        value = SequenceValue((ScalarValue(1), ScalarValue("a"), ScalarValue(None)))
        assert simplify(value) == [1, "a", "null"]

    def test_empty_sequence(self) -> None:
        assert simplify(SequenceValue()) == []

    def test_structure_becomes_dict_with_type_tag(self) -> None:
        value = StructureValue(
            fields=(("Sku", ScalarValue("A-1")), ("Qty", ScalarValue(2))),
            type_tag="CartLine",
        )
        assert simplify(value) == {"Sku": "A-1", "Qty": 2, TYPE_TAG_KEY: "CartLine"}

    def test_untagged_structure_has_no_type_tag(self) -> None:
        value = StructureValue(fields=(("Qty", ScalarValue(2)),))
        assert simplify(value) == {"Qty": 2}

    def test_mapping_becomes_dict_in_order(self) -> None:
        result = simplify(_scalar_map(("b", 1), ("a", 2)))
        assert result == {"b": 1, "a": 2}
        assert list(result) == ["b", "a"]

    def test_nested_composites(self) -> None:
        value = MappingValue(
            (
                (
                    ScalarValue("lines"),
                    SequenceValue((StructureValue((("Qty", ScalarValue(1)),), "Line"),)),
                ),
            )
        )
        assert simplify(value) == {"lines": [{"Qty": 1, TYPE_TAG_KEY: "Line"}]}

    def test_composite_keys_are_rendered_as_text(self) -> None:
        key = SequenceValue((ScalarValue(1), ScalarValue(2)))
        value = MappingValue(((key, ScalarValue("pair")),))
        assert simplify(value) == {"[1, 2]": "pair"}

    def test_byte_and_decimal_keys_become_text(self) -> None:
        value = _scalar_map((b"ab", 1), (Decimal("2.5"), 2))
        assert simplify(value) == {"YWI=": 1, "2.5": 2}


# =============================================================================
# Key collisions
# =============================================================================


class TestKeyCollision:
    def test_colliding_keys_yield_key_value_pairs_for_all_entries(self) -> None:
        # None and "null" both simplify to "null"
        value = _scalar_map(("first", 1), (None, 2), ("null", 3))

        result = simplify(value)

        assert isinstance(result, list)
        assert len(result) == len(value.entries)
        assert result == [
            {"Key": "first", "Value": 1},
            {"Key": "null", "Value": 2},
            {"Key": "null", "Value": 3},
        ]

    def test_collision_is_logged_and_reported(self) -> None:
        collisions: list[object] = []
        uid = uuid.UUID(int=7)
        value = _scalar_map((uid, "a"), (str(uid), "b"))

        with patch("newrelic_logsink.core.simplifier.logger") as mock_logger:
            result = simplify(value, on_collision=collisions.append)

        assert len(result) == 2
        assert collisions == [str(uid)]
        mock_logger.warning.assert_called_once()
        assert "not unique" in mock_logger.warning.call_args[0][0]

    def test_bool_and_int_keys_do_not_collide(self) -> None:
        # JSON object keys "true" and "1" are distinct
        with patch("newrelic_logsink.core.simplifier.logger") as mock_logger:
            result = simplify(_scalar_map((True, "a"), (1, "b")))

        assert result == {"true": "a", "1": "b"}
        mock_logger.warning.assert_not_called()

    def test_int_and_str_keys_with_same_text_collide(self) -> None:
        result = simplify(_scalar_map((1, "a"), ("1", "b")))

        assert result == [{"Key": 1, "Value": "a"}, {"Key": "1", "Value": "b"}]

    def test_mapping_keys_are_json_object_keys(self) -> None:
        result = simplify(_scalar_map((1, "a"), (2.5, "b"), (False, "c"), (None, "d")))

        assert result == {"1": "a", "2.5": "b", "false": "c", "null": "d"}
        assert json.loads(json.dumps(result)) == result

    def test_no_collision_no_log(self) -> None:
        with patch("newrelic_logsink.core.simplifier.logger") as mock_logger:
            simplify(_scalar_map(("a", 1), ("b", 2)))
        mock_logger.warning.assert_not_called()

    def test_collision_inside_nested_mapping_only_affects_that_mapping(self) -> None:
        inner = _scalar_map((None, 1), ("null", 2))
        outer = MappingValue(((ScalarValue("inner"), inner), (ScalarValue("ok"), ScalarValue(True))))

        result = simplify(outer)

        assert result == {
            "inner": [{"Key": "null", "Value": 1}, {"Key": "null", "Value": 2}],
            "ok": True,
        }

    @given(keys=st.lists(st.text(max_size=3), min_size=1, max_size=8))
    def test_output_length_matches_entries_on_collision(self, keys: list[str]) -> None:
        value = _scalar_map(*[(k, i) for i, k in enumerate(keys)])
        result = simplify(value)
        if len(set(keys)) == len(keys):
            assert isinstance(result, dict)
            assert len(result) == len(keys)
        else:
            assert isinstance(result, list)
            assert len(result) == len(keys)


# =============================================================================
# Deep nesting
# =============================================================================


class TestDeepNesting:
    def test_deeply_nested_sequence_does_not_overflow(self) -> None:
        depth = 10_000
        value: SequenceValue = SequenceValue((ScalarValue("leaf"),))
        for _ in range(depth):
            value = SequenceValue((value,))

        result = simplify(value)

        # Walk iteratively; comparing nested lists recursively would overflow
        levels = 0
        node = result
        while isinstance(node, list) and node != ["leaf"]:
            (node,) = node
            levels += 1
        assert levels == depth
        assert node == ["leaf"]

    def test_deeply_nested_mapping_does_not_overflow(self) -> None:
        depth = 5_000
        value: MappingValue = _scalar_map(("k", 0))
        for _ in range(depth):
            value = MappingValue(((ScalarValue("k"), value),))

        result = simplify(value)

        levels = 0
        node = result
        while isinstance(node["k"], dict):
            node = node["k"]
            levels += 1
        assert levels == depth
        assert node == {"k": 0}


class TestSimplifyKey:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            (ScalarValue("trace.id"), "trace.id"),
            (ScalarValue(7), "7"),
            (ScalarValue(True), "true"),
            (ScalarValue(b"id"), "aWQ="),
            (ScalarValue(Decimal("1.5")), "1.5"),
            (SequenceValue((ScalarValue(1),)), "[1]"),
        ],
    )
    def test_key_text(self, key: object, expected: str) -> None:
        assert simplify_key(key) == expected
