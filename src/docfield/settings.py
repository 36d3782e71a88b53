"""Codec configuration.

Settings are immutable and can be shared by every codec instance. A settings
file is a flat JSON object whose keys are the ``CodecSettings`` field names::

    {"accept_object_grammar": false, "extra_metadata_fields": ["_tier"]}
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from docfield.io_utils import load_json
from docfield.metadata import BUILTIN_METADATA_FIELDS, MetadataClassifier
from docfield.registry import FieldTypeRegistry, StaticFieldRegistry
from docfield.stream import DEFAULT_MAX_COLLECTION_SIZE
from docfield.values import DEFAULT_MAX_DEPTH


@dataclass(frozen=True, slots=True)
class CodecSettings:
    """Knobs shared by the binary and text codecs.

    ``accept_object_grammar`` switches the text reader between the symmetric
    decoder (object grammar accepted) and the older array-only decoder, which
    rejects the object grammar with ``UnsupportedFormatError``.
    """

    accept_object_grammar: bool = True
    max_value_depth: int = DEFAULT_MAX_DEPTH
    max_collection_size: int = DEFAULT_MAX_COLLECTION_SIZE
    extra_metadata_fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not 1 <= self.max_value_depth <= DEFAULT_MAX_DEPTH:
            raise ValueError(
                f"max_value_depth must be in [1, {DEFAULT_MAX_DEPTH}], got {self.max_value_depth}",
            )
        if self.max_collection_size < 0:
            raise ValueError(
                f"max_collection_size must be >= 0, got {self.max_collection_size}",
            )
        for name in self.extra_metadata_fields:
            if not isinstance(name, str) or not name:
                raise ValueError(f"extra_metadata_fields entries must be non-empty str, got {name!r}")


DEFAULT_SETTINGS = CodecSettings()

_FIELD_TYPES: dict[str, type] = {
    "accept_object_grammar": bool,
    "max_value_depth": int,
    "max_collection_size": int,
    "extra_metadata_fields": list,
}


def settings_from_dict(payload: dict[str, Any]) -> CodecSettings:
    """Build settings from a parsed JSON object, rejecting unknown keys."""
    known = {f.name for f in fields(CodecSettings)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ValueError(f"Unknown settings keys: {', '.join(unknown)}")
    kwargs: dict[str, Any] = {}
    for key, value in payload.items():
        expected = _FIELD_TYPES[key]
        # bool is an int subclass; reject it where a count is expected
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ValueError(
                f"Setting {key!r} must be {expected.__name__}, got {type(value).__name__}",
            )
        kwargs[key] = tuple(value) if expected is list else value
    return CodecSettings(**kwargs)


def load_settings(path: Path) -> CodecSettings:
    """Load settings from a JSON file."""
    payload = load_json(path)
    if not isinstance(payload, dict):
        raise ValueError(f"Settings file {path} must contain a JSON object")
    return settings_from_dict(payload)


def build_classifier(
    settings: CodecSettings = DEFAULT_SETTINGS,
    registry: FieldTypeRegistry | None = None,
) -> MetadataClassifier:
    """Classifier with the built-in names plus ``extra_metadata_fields``."""
    return MetadataClassifier(
        registry=registry if registry is not None else StaticFieldRegistry(),
        builtin=BUILTIN_METADATA_FIELDS | frozenset(settings.extra_metadata_fields),
    )
