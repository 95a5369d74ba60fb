# tests/unit/contracts/test_values.py
"""Tests for Value capture and rendering."""

from dataclasses import dataclass

from hypothesis import given
from hypothesis import strategies as st

from newrelic_logsink.contracts.values import (
    MappingValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
    is_value,
    render_value,
    to_value,
)


@dataclass
class Address:
    street: str
    number: int


class TestToValue:
    def test_scalars(self) -> None:
        assert to_value("x") == ScalarValue("x")
        assert to_value(3) == ScalarValue(3)
        assert to_value(None) == ScalarValue(None)
        assert to_value(b"\x00") == ScalarValue(b"\x00")

    def test_existing_value_returned_unchanged(self) -> None:
        value = SequenceValue((ScalarValue(1),))
        assert to_value(value) is value

    def test_mapping_keeps_order(self) -> None:
        assert to_value({"b": 1, "a": 2}) == MappingValue(
            ((ScalarValue("b"), ScalarValue(1)), (ScalarValue("a"), ScalarValue(2)))
        )

    def test_sequences(self) -> None:
        assert to_value([1, (2,)]) == SequenceValue((ScalarValue(1), SequenceValue((ScalarValue(2),))))

    def test_dataclass_becomes_tagged_structure(self) -> None:
        assert to_value(Address("Main", 5)) == StructureValue(
            fields=(("street", ScalarValue("Main")), ("number", ScalarValue(5))),
            type_tag="Address",
        )

    def test_unknown_object_is_scalar(self) -> None:
        marker = object()
        assert to_value(marker) == ScalarValue(marker)

    @given(st.recursive(st.none() | st.integers() | st.text(), lambda inner: st.lists(inner) | st.dictionaries(st.text(), inner)))
    def test_always_produces_a_value(self, obj: object) -> None:
        assert is_value(to_value(obj))


class TestRenderValue:
    def test_top_level_string_is_bare(self) -> None:
        assert render_value(ScalarValue("hello")) == "hello"

    def test_null(self) -> None:
        assert render_value(None) == "null"
        assert render_value(ScalarValue(None)) == "null"

    def test_nested_strings_are_quoted(self) -> None:
        assert render_value(to_value(["a", 1])) == '["a", 1]'

    def test_mapping(self) -> None:
        assert render_value(to_value({"k": "v"})) == '{"k": "v"}'

    def test_structure_with_tag(self) -> None:
        assert render_value(to_value(Address("Main", 5))) == 'Address { street: "Main", number: 5 }'

    def test_structure_without_tag(self) -> None:
        assert render_value(StructureValue(fields=(("x", ScalarValue(1)),))) == "{ x: 1 }"
