"""Tests for the DocumentField entity."""
from __future__ import annotations

import dataclasses

import pytest

from docfield.errors import ConstructionError, UnsupportedValueError
from docfield.field import DocumentField
from docfield.metadata import MetadataClassifier


class TestConstruction:
    def test_values_become_tuple(self) -> None:
        field = DocumentField("title", ["a", "b"])
        assert field.name == "title"
        assert field.values == ("a", "b")

    def test_accepts_generator(self) -> None:
        field = DocumentField("n", (i for i in range(3)))
        assert field.values == (0, 1, 2)

    @pytest.mark.parametrize("name", [None, "", 5])
    def test_rejects_bad_name(self, name: object) -> None:
        with pytest.raises(ConstructionError):
            DocumentField(name, [])  # type: ignore[arg-type]

    @pytest.mark.parametrize("values", [None, "abc", b"abc", {"a": 1}, 7])
    def test_rejects_bad_values(self, values: object) -> None:
        with pytest.raises(ConstructionError):
            DocumentField("f", values)  # type: ignore[arg-type]

    def test_rejects_unsupported_value(self) -> None:
        with pytest.raises(UnsupportedValueError):
            DocumentField("f", [object()])

    def test_construction_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            DocumentField("", [])

    def test_is_immutable(self) -> None:
        field = DocumentField("f", [1])
        with pytest.raises(dataclasses.FrozenInstanceError):
            field.name = "g"  # type: ignore[misc]

    def test_does_not_alias_caller_values(self) -> None:
        values: list[object] = [[1, 2]]
        field = DocumentField("f", values)
        values.append(3)
        values[0].append(9)  # type: ignore[attr-defined]
        assert field.values == ((1, 2),)

    def test_nested_values_are_frozen(self) -> None:
        field = DocumentField("f", [[1], {"a": 1}])
        before = hash(field)
        with pytest.raises(AttributeError):
            field.values[0].append(2)  # type: ignore[union-attr]
        with pytest.raises(TypeError):
            field.values[1]["b"] = 2  # type: ignore[index]
        assert hash(field) == before
        assert field == DocumentField("f", [[1], {"a": 1}])

    def test_rejects_lone_surrogate_value(self) -> None:
        with pytest.raises(UnsupportedValueError, match="lone surrogate"):
            DocumentField("f", ["\ud800"])
        with pytest.raises(UnsupportedValueError, match="map key"):
            DocumentField("f", [{"\udc00": 1}])

    def test_rejects_lone_surrogate_name(self) -> None:
        with pytest.raises(ConstructionError, match="lone surrogate"):
            DocumentField("\ud800", [1])


class TestQuerySurface:
    def test_first_value(self) -> None:
        assert DocumentField("f", [3, 1, 2]).value == 3

    def test_empty_field(self) -> None:
        field = DocumentField("f", [])
        assert field.value is None
        assert list(field) == []
        assert len(field) == 0

    def test_iteration_preserves_order(self) -> None:
        assert list(DocumentField("f", [3, 1, 2])) == [3, 1, 2]

    def test_metadata_is_derived_from_name(self) -> None:
        assert DocumentField("_id", ["1"], False).is_metadata_field() is True
        assert DocumentField("title", ["x"], True).is_metadata_field() is False

    def test_declared_flag_is_kept(self) -> None:
        assert DocumentField("title", ["x"], True).declared_metadata is True

    def test_custom_classifier(self) -> None:
        classifier = MetadataClassifier(builtin=frozenset({"title"}))
        assert DocumentField("title", []).is_metadata_field(classifier) is True

    def test_repr(self) -> None:
        assert repr(DocumentField("f", [1, "a"])) == "DocumentField(name='f', values=[1, 'a'])"


class TestEquality:
    def test_metadata_flag_excluded(self) -> None:
        left = DocumentField("f", [1], True)
        right = DocumentField("f", [1], False)
        assert left == right
        assert hash(left) == hash(right)

    def test_value_kinds_distinguished(self) -> None:
        assert DocumentField("f", [1]) != DocumentField("f", [True])
        assert DocumentField("f", [1]) != DocumentField("f", [1.0])

    def test_order_matters(self) -> None:
        assert DocumentField("f", [1, 2]) != DocumentField("f", [2, 1])

    def test_name_matters(self) -> None:
        assert DocumentField("f", [1]) != DocumentField("g", [1])

    def test_nan_values_equal(self) -> None:
        assert DocumentField("f", [float("nan")]) == DocumentField("f", [float("nan")])

    def test_usable_in_sets(self) -> None:
        fields = {DocumentField("f", [{"a": 1}]), DocumentField("f", [{"a": 1}], True)}
        assert len(fields) == 1

    def test_not_equal_to_other_types(self) -> None:
        assert DocumentField("f", []) != ("f", [])
