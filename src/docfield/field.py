"""The DocumentField entity: a named, ordered list of values on a hit or fetch result."""
from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from docfield.errors import ConstructionError, UnsupportedValueError
from docfield.metadata import DEFAULT_CLASSIFIER, MetadataClassifier
from docfield.values import DEFAULT_MAX_DEPTH, FieldValue, check_text, freeze_value, value_key


@dataclass(frozen=True, slots=True, eq=False)
class DocumentField:
    """A single field name and its values, part of a search hit or get result.

    ``declared_metadata`` records what the producer claimed (for instance
    "decoded outside ``_source``"). It is kept for callers that still pass it
    but is not authoritative: ``is_metadata_field()`` always asks the
    classifier. Equality and hashing cover ``name`` and ``values`` only.
    """

    name: str
    values: tuple[FieldValue, ...]
    declared_metadata: bool = field(default=False)

    def __post_init__(self) -> None:
        if self.name is None:
            raise ConstructionError("name must not be None")
        if not isinstance(self.name, str):
            raise ConstructionError(f"name must be str, got {type(self.name).__name__}")
        if not self.name:
            raise ConstructionError("name cannot be empty")
        try:
            check_text(self.name, "name")
        except UnsupportedValueError as exc:
            raise ConstructionError(str(exc)) from exc
        if self.values is None:
            raise ConstructionError("values must not be None")
        if isinstance(self.values, (str, bytes, bytearray, dict)) or not isinstance(
            self.values, Iterable,
        ):
            raise ConstructionError(
                f"values must be an iterable of field values, got {type(self.values).__name__}",
            )
        object.__setattr__(self, "values", _freeze_values(self.values))
        object.__setattr__(self, "declared_metadata", bool(self.declared_metadata))

    @property
    def value(self) -> FieldValue:
        """The first value, or ``None`` when the field has no values."""
        if not self.values:
            return None
        return self.values[0]

    def is_metadata_field(self, classifier: MetadataClassifier = DEFAULT_CLASSIFIER) -> bool:
        return classifier.is_metadata(self.name)

    def __iter__(self) -> Iterator[FieldValue]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, DocumentField):
            return NotImplemented
        return self.name == other.name and _values_key(self.values) == _values_key(other.values)

    def __hash__(self) -> int:
        return hash((self.name, _values_key(self.values)))

    def __repr__(self) -> str:
        return f"DocumentField(name={self.name!r}, values={list(self.values)!r})"


def _freeze_values(values: Iterable[object]) -> tuple[FieldValue, ...]:
    return tuple(freeze_value(v, max_depth=DEFAULT_MAX_DEPTH) for v in values)


def _values_key(values: tuple[FieldValue, ...]) -> tuple[object, ...]:
    return tuple(value_key(v) for v in values)
