"""Token-stream view of JSON content, plus a content builder.

``TokenParser`` parses a JSON document with orjson and replays it as a flat
token stream, so decoders can be written against ``current_token`` /
``next_token`` the way streaming parsers are used. Every token carries a
JSON-pointer ``TokenLocation`` for error reporting.

``ContentBuilder`` is the write side: nested ``start_*``/``end_*`` calls build
an insertion-ordered document that orjson serializes deterministically.
"""
from __future__ import annotations

import base64
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeAlias

import orjson

from docfield.errors import MalformedFieldError, UnsupportedValueError
from docfield.values import ValueKind, check_text, kind_of

ScalarValue: TypeAlias = None | bool | int | float | str


class Token(Enum):
    START_OBJECT = "START_OBJECT"
    END_OBJECT = "END_OBJECT"
    START_ARRAY = "START_ARRAY"
    END_ARRAY = "END_ARRAY"
    FIELD_NAME = "FIELD_NAME"
    VALUE_STRING = "VALUE_STRING"
    VALUE_NUMBER = "VALUE_NUMBER"
    VALUE_BOOLEAN = "VALUE_BOOLEAN"
    VALUE_NULL = "VALUE_NULL"

    def __str__(self) -> str:
        return self.value


SCALAR_TOKENS: frozenset[Token] = frozenset({
    Token.VALUE_STRING, Token.VALUE_NUMBER, Token.VALUE_BOOLEAN, Token.VALUE_NULL,
})


@dataclass(frozen=True, slots=True)
class TokenLocation:
    """Where a token sits: a JSON pointer, or line/column for syntax errors."""

    path: str = ""
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        if self.line is not None:
            return f"line {self.line}, column {self.column}"
        return self.path or "/"


@dataclass(frozen=True, slots=True)
class _Event:
    token: Token
    name: str | None
    value: ScalarValue
    location: TokenLocation


def _escape_pointer(key: str) -> str:
    return key.replace("~", "~0").replace("/", "~1")


def _scalar_token(value: Any) -> Token:
    if value is None:
        return Token.VALUE_NULL
    if isinstance(value, bool):
        return Token.VALUE_BOOLEAN
    if isinstance(value, (int, float)):
        return Token.VALUE_NUMBER
    return Token.VALUE_STRING


def _flatten(node: Any, name: str | None, path: str, events: list[_Event]) -> None:
    here = TokenLocation(path)
    if isinstance(node, dict):
        events.append(_Event(Token.START_OBJECT, name, None, here))
        for key, child in node.items():
            child_path = f"{path}/{_escape_pointer(key)}"
            events.append(_Event(Token.FIELD_NAME, key, None, TokenLocation(child_path)))
            _flatten(child, key, child_path, events)
        events.append(_Event(Token.END_OBJECT, name, None, here))
    elif isinstance(node, list):
        events.append(_Event(Token.START_ARRAY, name, None, here))
        for idx, child in enumerate(node):
            _flatten(child, None, f"{path}/{idx}", events)
        events.append(_Event(Token.END_ARRAY, name, None, here))
    else:
        events.append(_Event(_scalar_token(node), name, node, here))


class TokenParser:
    """Replays a parsed JSON document as a token stream.

    Before the first ``next_token()`` call ``current_token`` is ``None``;
    after the last token it is ``None`` again.
    """

    def __init__(self, document: Any) -> None:
        self._events: list[_Event] = []
        _flatten(document, None, "", self._events)
        self._index = -1

    @classmethod
    def from_json(cls, data: bytes | str) -> TokenParser:
        try:
            document = orjson.loads(data)
        except orjson.JSONDecodeError as exc:
            raise MalformedFieldError(
                f"Failed to parse content: {exc.msg}",
                location=TokenLocation(line=exc.lineno, column=exc.colno),
            ) from exc
        return cls(document)

    def _event(self) -> _Event | None:
        if 0 <= self._index < len(self._events):
            return self._events[self._index]
        return None

    @property
    def current_token(self) -> Token | None:
        event = self._event()
        return event.token if event is not None else None

    @property
    def current_name(self) -> str | None:
        event = self._event()
        return event.name if event is not None else None

    @property
    def location(self) -> TokenLocation:
        event = self._event()
        if event is not None:
            return event.location
        if self._events:
            return self._events[-1].location
        return TokenLocation()

    def next_token(self) -> Token | None:
        if self._index < len(self._events):
            self._index += 1
        return self.current_token

    def scalar_value(self) -> ScalarValue:
        event = self._event()
        if event is None or event.token not in SCALAR_TOKENS:
            raise MalformedFieldError(
                f"expected a scalar value but found [{self.current_token}]",
                token=self.current_token,
                location=self.location,
            )
        return event.value


class ContentBuilder:
    """Builds a JSON document through nested start/end calls."""

    def __init__(self) -> None:
        self._root: Any = None
        self._has_root = False
        self._stack: list[dict[str, Any] | list[Any]] = []
        self._pending_name: str | None = None

    def _attach(self, node: Any) -> None:
        if not self._stack:
            if self._has_root:
                raise ValueError("document already has a root value")
            self._root = node
            self._has_root = True
            return
        top = self._stack[-1]
        if isinstance(top, dict):
            if self._pending_name is None:
                raise ValueError("a value inside an object needs a field name")
            if self._pending_name in top:
                raise ValueError(f"duplicate field name [{self._pending_name}]")
            top[self._pending_name] = node
            self._pending_name = None
        else:
            top.append(node)

    def field_name(self, name: str) -> ContentBuilder:
        if not self._stack or not isinstance(self._stack[-1], dict):
            raise ValueError("field names are only valid inside an object")
        if self._pending_name is not None:
            raise ValueError(f"field [{self._pending_name}] has no value")
        self._pending_name = check_text(name, "field name")
        return self

    def start_object(self, name: str | None = None) -> ContentBuilder:
        if name is not None:
            self.field_name(name)
        node: dict[str, Any] = {}
        self._attach(node)
        self._stack.append(node)
        return self

    def end_object(self) -> ContentBuilder:
        if not self._stack or not isinstance(self._stack[-1], dict):
            raise ValueError("end_object without a matching start_object")
        if self._pending_name is not None:
            raise ValueError(f"field [{self._pending_name}] has no value")
        self._stack.pop()
        return self

    def start_array(self, name: str | None = None) -> ContentBuilder:
        if name is not None:
            self.field_name(name)
        node: list[Any] = []
        self._attach(node)
        self._stack.append(node)
        return self

    def end_array(self) -> ContentBuilder:
        if not self._stack or not isinstance(self._stack[-1], list):
            raise ValueError("end_array without a matching start_array")
        self._stack.pop()
        return self

    def value(self, value: object) -> ContentBuilder:
        """Write a scalar: null, boolean, number, string, or bytes as base64."""
        self._attach(render_scalar(value))
        return self

    def field(self, name: str, value: object) -> ContentBuilder:
        self.field_name(name)
        return self.value(value)

    def to_bytes(self) -> bytes:
        if self._stack or not self._has_root:
            raise ValueError("document is incomplete")
        return orjson.dumps(self._root)


def render_scalar(value: object) -> ScalarValue:
    kind = kind_of(value)
    if kind in (ValueKind.NULL, ValueKind.BOOLEAN, ValueKind.LONG, ValueKind.STRING):
        return value  # type: ignore[return-value]
    if kind is ValueKind.DOUBLE:
        if not math.isfinite(value):  # type: ignore[arg-type]
            raise UnsupportedValueError(f"non-finite number {value!r} has no JSON form")
        return value  # type: ignore[return-value]
    if kind is ValueKind.BINARY:
        return base64.b64encode(bytes(value)).decode("ascii")  # type: ignore[arg-type]
    raise UnsupportedValueError(f"{kind.value} values cannot be rendered as a scalar")
