"""Structured text (JSON) codec for document fields.

One shape is written::

    {"<name>": {"value": [<scalar>, ...], "isMetadata": <bool>}}

Two shapes are read. The grammar is chosen once, from the single token after
the field name:

* ``START_ARRAY``: legacy grammar, ``{"<name>": [<scalar>, ...]}``. There is
  no metadata bit in the payload.
* ``START_OBJECT``: the grammar above. Can be disabled through
  ``CodecSettings.accept_object_grammar`` to behave like older readers.

A grammar is never retried after partial consumption.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from docfield.errors import (
    ConstructionError,
    MalformedFieldError,
    UnsupportedFormatError,
    UnsupportedValueError,
)
from docfield.field import DocumentField
from docfield.metadata import DEFAULT_CLASSIFIER, MetadataClassifier
from docfield.settings import DEFAULT_SETTINGS, CodecSettings
from docfield.values import FieldValue
from docfield.xcontent import SCALAR_TOKENS, ContentBuilder, Token, TokenParser

log = logging.getLogger(__name__)

VALUES_KEY = "value"
IS_METADATA_KEY = "isMetadata"


def _unexpected(parser: TokenParser, token: Token | None) -> MalformedFieldError:
    return MalformedFieldError(
        f"Failed to parse object: unexpected token [{token}] found",
        token=token,
        location=parser.location,
    )


def _expect(parser: TokenParser, expected: Token, token: Token | None) -> None:
    if token is not expected:
        raise MalformedFieldError(
            f"Failed to parse object: expecting token of type [{expected}] but found [{token}]",
            token=token,
            location=parser.location,
        )


@dataclass(frozen=True, slots=True)
class TextFieldCodec:
    """Stateless JSON writer and dual-grammar reader for document fields."""

    settings: CodecSettings = DEFAULT_SETTINGS
    classifier: MetadataClassifier = DEFAULT_CLASSIFIER

    # -- encoding ---------------------------------------------------------

    def write_field(self, field: DocumentField, builder: ContentBuilder) -> None:
        """Write ``"<name>": {...}`` into an already-open object."""
        builder.start_object(field.name)
        builder.start_array(VALUES_KEY)
        for value in field.values:
            # Values arrive already rendered for display, so scalars are enough.
            try:
                builder.value(value)
            except UnsupportedValueError as exc:
                raise UnsupportedValueError(f"field [{field.name}]: {exc}") from exc
        builder.end_array()
        builder.field(IS_METADATA_KEY, field.is_metadata_field(self.classifier))
        builder.end_object()

    def write_fields(
        self,
        fields: Mapping[str, DocumentField] | Iterable[DocumentField],
        builder: ContentBuilder,
    ) -> None:
        items = fields.values() if isinstance(fields, Mapping) else fields
        for field in items:
            self.write_field(field, builder)

    def field_to_json(self, field: DocumentField) -> bytes:
        builder = ContentBuilder().start_object()
        self.write_field(field, builder)
        return builder.end_object().to_bytes()

    def fields_to_json(
        self, fields: Mapping[str, DocumentField] | Iterable[DocumentField],
    ) -> bytes:
        builder = ContentBuilder().start_object()
        self.write_fields(fields, builder)
        return builder.end_object().to_bytes()

    # -- decoding ---------------------------------------------------------

    def read_field(self, parser: TokenParser, inside_source: bool) -> DocumentField:
        """Decode one field; the parser must be positioned on its name.

        ``inside_source`` is true when the field sits inside the primary
        document body. For the legacy grammar the declared metadata flag is
        ``not inside_source``; it stays informational either way.
        """
        _expect(parser, Token.FIELD_NAME, parser.current_token)
        name = parser.current_name
        name_location = parser.location
        token = parser.next_token()
        if token is Token.START_ARRAY:
            log.debug("field %r: legacy array grammar", name)
            values = self._read_values_array(parser)
            declared = not inside_source
        elif token is Token.START_OBJECT:
            if not self.settings.accept_object_grammar:
                raise UnsupportedFormatError(
                    f"field [{name}]: object grammar is disabled",
                    token=token,
                    location=parser.location,
                )
            log.debug("field %r: object grammar", name)
            values, payload_flag = self._read_field_object(parser, name)
            declared = payload_flag if payload_flag is not None else not inside_source
        else:
            raise _unexpected(parser, token)
        try:
            return DocumentField(name, values, declared)  # type: ignore[arg-type]
        except (ConstructionError, UnsupportedValueError) as exc:
            raise MalformedFieldError(str(exc), token=Token.FIELD_NAME, location=name_location) from exc

    def _read_values_array(self, parser: TokenParser) -> list[FieldValue]:
        values: list[FieldValue] = []
        while (token := parser.next_token()) is not Token.END_ARRAY:
            if token is None:
                raise _unexpected(parser, token)
            values.append(self.parse_fields_value(parser))
        return values

    def _read_field_object(
        self, parser: TokenParser, name: str | None,
    ) -> tuple[list[FieldValue], bool | None]:
        values: list[FieldValue] | None = None
        flag: bool | None = None
        seen: set[str] = set()
        while (token := parser.next_token()) is not Token.END_OBJECT:
            _expect(parser, Token.FIELD_NAME, token)
            member = parser.current_name or ""
            if member in seen:
                raise MalformedFieldError(
                    f"field [{name}]: duplicate member [{member}]",
                    token=token,
                    location=parser.location,
                )
            seen.add(member)
            token = parser.next_token()
            if member == VALUES_KEY:
                _expect(parser, Token.START_ARRAY, token)
                values = self._read_values_array(parser)
            elif member == IS_METADATA_KEY:
                _expect(parser, Token.VALUE_BOOLEAN, token)
                flag = bool(parser.scalar_value())
            else:
                raise MalformedFieldError(
                    f"field [{name}]: unknown member [{member}]",
                    token=token,
                    location=parser.location,
                )
        if values is None:
            raise MalformedFieldError(
                f"field [{name}]: missing required member [{VALUES_KEY}]",
                token=token,
                location=parser.location,
            )
        return values, flag

    def parse_fields_value(self, parser: TokenParser) -> FieldValue:
        """Read the value at the current token: scalar, array or object."""
        return self._parse_value(parser, 0)

    def _parse_value(self, parser: TokenParser, depth: int) -> FieldValue:
        token = parser.current_token
        if token in SCALAR_TOKENS:
            return parser.scalar_value()
        if token not in (Token.START_ARRAY, Token.START_OBJECT):
            raise _unexpected(parser, token)
        if depth >= self.settings.max_value_depth:
            raise MalformedFieldError(
                f"value nesting exceeds max depth {self.settings.max_value_depth}",
                token=token,
                location=parser.location,
            )
        if token is Token.START_ARRAY:
            items: list[FieldValue] = []
            while (token := parser.next_token()) is not Token.END_ARRAY:
                if token is None:
                    raise _unexpected(parser, token)
                items.append(self._parse_value(parser, depth + 1))
            return items
        mapping: dict[str, FieldValue] = {}
        while (token := parser.next_token()) is not Token.END_OBJECT:
            _expect(parser, Token.FIELD_NAME, token)
            key = parser.current_name or ""
            parser.next_token()
            mapping[key] = self._parse_value(parser, depth + 1)
        return mapping

    def parse_fields_object(
        self, parser: TokenParser, inside_source: bool,
    ) -> dict[str, DocumentField]:
        """Read an object of fields; the parser must be on its START_OBJECT."""
        _expect(parser, Token.START_OBJECT, parser.current_token)
        result: dict[str, DocumentField] = {}
        while (token := parser.next_token()) is not Token.END_OBJECT:
            location = parser.location
            field = self.read_field(parser, inside_source)
            if field.name in result:
                raise MalformedFieldError(
                    f"duplicate field [{field.name}]", token=token, location=location,
                )
            result[field.name] = field
        return result

    def field_from_json(self, data: bytes | str, inside_source: bool = False) -> DocumentField:
        """Decode a document holding exactly one field."""
        parser = TokenParser.from_json(data)
        _expect(parser, Token.START_OBJECT, parser.next_token())
        parser.next_token()
        field = self.read_field(parser, inside_source)
        token = parser.next_token()
        if token is not Token.END_OBJECT:
            raise _unexpected(parser, token)
        return field

    def fields_from_json(
        self, data: bytes | str, inside_source: bool = False,
    ) -> dict[str, DocumentField]:
        parser = TokenParser.from_json(data)
        parser.next_token()
        return self.parse_fields_object(parser, inside_source)


def split_metadata_fields(
    fields: Mapping[str, DocumentField],
    classifier: MetadataClassifier = DEFAULT_CLASSIFIER,
) -> tuple[dict[str, DocumentField], dict[str, DocumentField]]:
    """Partition fields into ``(metadata_fields, document_fields)``, order kept."""
    metadata: dict[str, DocumentField] = {}
    document: dict[str, DocumentField] = {}
    for name, field in fields.items():
        target = metadata if field.is_metadata_field(classifier) else document
        target[name] = field
    return metadata, document


_DEFAULT_CODEC = TextFieldCodec()


def field_to_json(field: DocumentField) -> bytes:
    return _DEFAULT_CODEC.field_to_json(field)


def field_from_json(data: bytes | str, inside_source: bool = False) -> DocumentField:
    return _DEFAULT_CODEC.field_from_json(data, inside_source)
