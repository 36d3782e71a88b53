"""Metadata field classification.

The answer is always recomputed from the field name. A flag stored on a
``DocumentField`` or carried in a decoded payload is never substituted for it.
"""
from __future__ import annotations

from dataclasses import dataclass

from docfield.registry import FieldTypeRegistry, StaticFieldRegistry

IGNORED_FIELD_NAME = "_ignored"

BUILTIN_METADATA_FIELDS: frozenset[str] = frozenset({
    "_id", "_type", "_routing", "_index",
    "_size", "_timestamp", "_ttl", IGNORED_FIELD_NAME,
})


@dataclass(frozen=True, slots=True)
class MetadataClassifier:
    """Built-in reserved names first, then the registry on a miss."""

    registry: FieldTypeRegistry | None = None
    builtin: frozenset[str] = BUILTIN_METADATA_FIELDS

    def is_metadata(self, name: str) -> bool:
        if name in self.builtin:
            return True
        if self.registry is None:
            return False
        return self.registry.is_metadata_field(name)


DEFAULT_CLASSIFIER = MetadataClassifier(registry=StaticFieldRegistry())
