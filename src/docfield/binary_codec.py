"""Binary transport codec for document fields.

Layout of one field::

    [string name][vint value count][generic value]...

Strings (names, string values and map keys) are a vint count of UTF-16
code units followed by one to three bytes per unit; see ``docfield.stream``.

A field container (the ``fields`` of a hit or get result) is a vint count
followed by that many fields.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from docfield.errors import BinaryDecodeError, ConstructionError
from docfield.field import DocumentField
from docfield.settings import DEFAULT_SETTINGS, CodecSettings
from docfield.stream import BytesStreamOutput, StreamInput, StreamOutput
from docfield.values import FieldValue

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BinaryFieldCodec:
    """Stateless encoder/decoder; one instance can serve any number of threads."""

    settings: CodecSettings = DEFAULT_SETTINGS

    def input_for(self, data: bytes) -> StreamInput:
        return StreamInput.from_bytes(
            data,
            max_depth=self.settings.max_value_depth,
            max_collection_size=self.settings.max_collection_size,
        )

    def write_field(self, field: DocumentField, out: StreamOutput) -> None:
        out.write_string(field.name)
        out.write_vint(len(field.values))
        for value in field.values:
            out.write_generic_value(value)

    def read_field(self, inp: StreamInput) -> DocumentField:
        start = inp.position
        name = inp.read_string()
        count = inp.read_size()
        values: list[FieldValue] = [inp.read_generic_value() for _ in range(count)]
        try:
            field = DocumentField(name, values)
        except ConstructionError as exc:
            raise BinaryDecodeError(str(exc), offset=start) from exc
        log.debug("decoded field %r with %d values from byte %d", name, count, start)
        return field

    def write_fields(
        self,
        fields: Mapping[str, DocumentField] | Iterable[DocumentField],
        out: StreamOutput,
    ) -> None:
        items = list(fields.values()) if isinstance(fields, Mapping) else list(fields)
        out.write_vint(len(items))
        for field in items:
            self.write_field(field, out)

    def read_fields(self, inp: StreamInput) -> dict[str, DocumentField]:
        count = inp.read_size()
        result: dict[str, DocumentField] = {}
        for _ in range(count):
            start = inp.position
            field = self.read_field(inp)
            if field.name in result:
                raise BinaryDecodeError(f"duplicate field [{field.name}]", offset=start)
            result[field.name] = field
        return result

    def field_to_bytes(self, field: DocumentField) -> bytes:
        out = BytesStreamOutput()
        self.write_field(field, out)
        return out.getvalue()

    def field_from_bytes(self, data: bytes) -> DocumentField:
        inp = self.input_for(data)
        field = self.read_field(inp)
        _ensure_consumed(inp, len(data))
        return field

    def fields_to_bytes(
        self, fields: Mapping[str, DocumentField] | Iterable[DocumentField],
    ) -> bytes:
        out = BytesStreamOutput()
        self.write_fields(fields, out)
        return out.getvalue()

    def fields_from_bytes(self, data: bytes) -> dict[str, DocumentField]:
        inp = self.input_for(data)
        result = self.read_fields(inp)
        _ensure_consumed(inp, len(data))
        return result


def _ensure_consumed(inp: StreamInput, total: int) -> None:
    if inp.position != total:
        raise BinaryDecodeError(
            f"{total - inp.position} trailing bytes after field data", offset=inp.position,
        )


_DEFAULT_CODEC = BinaryFieldCodec()


def field_to_bytes(field: DocumentField) -> bytes:
    return _DEFAULT_CODEC.field_to_bytes(field)


def field_from_bytes(data: bytes) -> DocumentField:
    return _DEFAULT_CODEC.field_from_bytes(data)
