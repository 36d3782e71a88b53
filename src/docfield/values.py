"""Generic value model carried by document fields.

A field value is one member of a closed, recursive union::

    None | bool | int | float | str | bytes | list[FieldValue] | dict[str, FieldValue]

Both codecs dispatch on ``kind_of`` so that every consumer handles every
``ValueKind``; anything outside the union is rejected with
``UnsupportedValueError`` instead of being passed through.

Values held by a ``DocumentField`` are frozen: lists become tuples and maps
become read-only mapping proxies.
"""
from __future__ import annotations

import math
import struct
from collections.abc import Hashable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import TypeAlias

from docfield.errors import UnsupportedValueError

FieldValue: TypeAlias = (
    "None"
    " | bool"
    " | int"
    " | float"
    " | str"
    " | bytes"
    " | list[FieldValue]"
    " | tuple[FieldValue, ...]"
    " | dict[str, FieldValue]"
    " | Mapping[str, FieldValue]"
)

LONG_MIN = -(2**63)
LONG_MAX = 2**63 - 1
DEFAULT_MAX_DEPTH = 64


class ValueKind(Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    LONG = "long"
    DOUBLE = "double"
    STRING = "string"
    BINARY = "binary"
    LIST = "list"
    MAP = "map"


def check_text(value: str, what: str = "string") -> str:
    """Reject strings holding lone surrogates; neither codec can encode them."""
    if not value.isascii():
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise UnsupportedValueError(
                f"{what} is not valid Unicode: lone surrogate at index {exc.start}",
            ) from exc
    return value


def kind_of(value: object) -> ValueKind:
    """Classify a value into its ``ValueKind``.

    ``bool`` is tested before ``int`` because it is an ``int`` subclass.
    Tuples count as lists, any ``Mapping`` as a map and
    ``bytearray``/``memoryview`` as binary; ``freeze_value`` normalizes them.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        if not LONG_MIN <= value <= LONG_MAX:
            raise UnsupportedValueError(f"integer {value} does not fit in a signed 64-bit long")
        return ValueKind.LONG
    if isinstance(value, float):
        return ValueKind.DOUBLE
    if isinstance(value, str):
        check_text(value)
        return ValueKind.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BINARY
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    if isinstance(value, Mapping):
        return ValueKind.MAP
    raise UnsupportedValueError(
        f"unsupported field value type {type(value).__name__!r}",
    )


def freeze_value(value: object, *, max_depth: int = DEFAULT_MAX_DEPTH) -> FieldValue:
    """Validate ``value`` and return an immutable, unaliased copy of it."""
    return _freeze(value, max_depth, 0)


def _freeze(value: object, max_depth: int, depth: int) -> FieldValue:
    kind = kind_of(value)
    if kind in (ValueKind.LIST, ValueKind.MAP) and depth >= max_depth:
        raise UnsupportedValueError(f"value nesting exceeds max depth {max_depth}")
    if kind is ValueKind.BINARY:
        return bytes(value)  # type: ignore[arg-type]
    if kind is ValueKind.LIST:
        return tuple(_freeze(item, max_depth, depth + 1) for item in value)  # type: ignore[union-attr]
    if kind is ValueKind.MAP:
        frozen: dict[str, FieldValue] = {}
        for key, item in value.items():  # type: ignore[union-attr]
            if not isinstance(key, str):
                raise UnsupportedValueError(
                    f"map keys must be str, got {type(key).__name__!r}",
                )
            check_text(key, "map key")
            frozen[key] = _freeze(item, max_depth, depth + 1)
        return MappingProxyType(frozen)
    return value  # type: ignore[return-value]


def value_key(value: object) -> Hashable:
    """Hashable key such that two values are equal iff their keys are equal.

    Floats follow ``Double.equals`` semantics: every NaN is equal to every
    other NaN and ``0.0`` differs from ``-0.0``. Maps compare as unordered
    entry sets; lists compare in order.
    """
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        return (kind,)
    if kind is ValueKind.DOUBLE:
        if math.isnan(value):  # type: ignore[arg-type]
            return (kind, "NaN")
        return (kind, struct.pack(">d", value))
    if kind is ValueKind.BINARY:
        return (kind, bytes(value))  # type: ignore[arg-type]
    if kind is ValueKind.LIST:
        return (kind, tuple(value_key(item) for item in value))  # type: ignore[union-attr]
    if kind is ValueKind.MAP:
        return (
            kind,
            frozenset((key, value_key(item)) for key, item in value.items()),  # type: ignore[union-attr]
        )
    return (kind, value)


def values_equal(left: object, right: object) -> bool:
    """Total equality over the value union."""
    return value_key(left) == value_key(right)
