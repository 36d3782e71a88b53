"""Tests for docfield.values generic value model."""
from __future__ import annotations

from types import MappingProxyType

import pytest

from docfield.errors import UnsupportedValueError
from docfield.values import (
    LONG_MAX,
    LONG_MIN,
    ValueKind,
    check_text,
    freeze_value,
    kind_of,
    value_key,
    values_equal,
)


class TestKindOf:
    @pytest.mark.parametrize(
        ("value", "kind"),
        [
            (None, ValueKind.NULL),
            (True, ValueKind.BOOLEAN),
            (0, ValueKind.LONG),
            (1.5, ValueKind.DOUBLE),
            ("x", ValueKind.STRING),
            (b"\x00", ValueKind.BINARY),
            (bytearray(b"ab"), ValueKind.BINARY),
            ([1], ValueKind.LIST),
            ((1, 2), ValueKind.LIST),
            ({"k": 1}, ValueKind.MAP),
        ],
    )
    def test_classifies_union_members(self, value: object, kind: ValueKind) -> None:
        assert kind_of(value) is kind

    def test_bool_is_not_long(self) -> None:
        assert kind_of(False) is ValueKind.BOOLEAN

    def test_long_bounds(self) -> None:
        assert kind_of(LONG_MAX) is ValueKind.LONG
        assert kind_of(LONG_MIN) is ValueKind.LONG
        with pytest.raises(UnsupportedValueError, match="64-bit"):
            kind_of(LONG_MAX + 1)

    def test_rejects_foreign_types(self) -> None:
        with pytest.raises(UnsupportedValueError, match="set"):
            kind_of({1, 2})
        with pytest.raises(UnsupportedValueError):
            kind_of(object())


class TestFreezeValue:
    def test_frozen_copy_is_unaliased(self) -> None:
        original = {"a": [1, {"b": 2}]}
        frozen = freeze_value(original)
        original["a"][1]["b"] = 99  # type: ignore[index]
        assert frozen == {"a": (1, {"b": 2})}

    def test_containers_are_read_only(self) -> None:
        frozen = freeze_value({"a": [1]})
        assert isinstance(frozen, MappingProxyType)
        assert frozen["a"] == (1,)  # type: ignore[index]
        with pytest.raises(TypeError):
            frozen["b"] = 2  # type: ignore[index]

    def test_normalizes_list_and_bytearray(self) -> None:
        assert freeze_value([1, bytearray(b"x")]) == (1, b"x")
        assert isinstance(freeze_value(bytearray(b"x")), bytes)

    def test_rejects_non_str_map_keys(self) -> None:
        with pytest.raises(UnsupportedValueError, match="map keys"):
            freeze_value({1: "x"})

    def test_max_depth(self) -> None:
        assert freeze_value([[1]], max_depth=2) == ((1,),)
        with pytest.raises(UnsupportedValueError, match="max depth"):
            freeze_value([[[1]]], max_depth=2)


class TestCheckText:
    def test_accepts_valid_text(self) -> None:
        assert check_text("café \U0001f600") == "café \U0001f600"

    @pytest.mark.parametrize("text", ["\ud800", "a\udfffb", "\ude00\ud83d"])
    def test_rejects_lone_surrogates(self, text: str) -> None:
        with pytest.raises(UnsupportedValueError, match="lone surrogate"):
            check_text(text)

    def test_kind_of_checks_strings(self) -> None:
        with pytest.raises(UnsupportedValueError, match="lone surrogate"):
            kind_of("\ud800")


class TestValueEquality:
    def test_kinds_never_cross(self) -> None:
        assert not values_equal(1, True)
        assert not values_equal(1, 1.0)
        assert not values_equal(0, None)
        assert not values_equal("1", 1)

    def test_nan_equals_nan(self) -> None:
        assert values_equal(float("nan"), float("nan"))

    def test_signed_zero_differs(self) -> None:
        assert not values_equal(0.0, -0.0)

    def test_lists_are_ordered(self) -> None:
        assert values_equal([1, 2], [1, 2])
        assert not values_equal([1, 2], [2, 1])

    def test_maps_ignore_insertion_order(self) -> None:
        assert values_equal({"a": 1, "b": 2}, {"b": 2, "a": 1})
        assert not values_equal({"a": 1}, {"a": True})

    def test_keys_are_hashable(self) -> None:
        assert hash(value_key({"a": [1, b"x"]})) == hash(value_key({"a": [1, b"x"]}))
