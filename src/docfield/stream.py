"""Binary stream primitives: varints, strings and generic values.

Wire layout of a generic value is ``[1-byte type tag][payload]``:

    tag  kind                       payload
    -1   null                       (none)
     0   string                     vint UTF-16 unit count + 1-3 bytes per unit
     1   int32 (read only)          4 bytes, big endian
     2   long                       8 bytes, big endian
     3   float32 (read only)        4 bytes IEEE, big endian
     4   double                     8 bytes IEEE, big endian
     5   boolean                    1 byte, 0 or 1
     6   binary                     vint length + bytes
     7   list                       vint size + values
     8   object array (read only)   vint size + values
     9   ordered map                vint size + (string key, value) pairs
    10   hash map (read only)       same as 9

Read-only tags are accepted from older writers and decoded into the closed
value union; the writer only ever emits -1, 0, 2, 4, 5, 6, 7 and 9.
"""
from __future__ import annotations

import io
import struct
from typing import BinaryIO

from docfield.errors import (
    BinaryDecodeError,
    TruncatedInputError,
    UnknownValueTagError,
    UnsupportedValueError,
)
from docfield.values import DEFAULT_MAX_DEPTH, FieldValue, ValueKind, check_text, kind_of

TAG_NULL = -1
TAG_STRING = 0
TAG_INT = 1
TAG_LONG = 2
TAG_FLOAT = 3
TAG_DOUBLE = 4
TAG_BOOLEAN = 5
TAG_BYTES = 6
TAG_LIST = 7
TAG_OBJECT_ARRAY = 8
TAG_ORDERED_MAP = 9
TAG_MAP = 10

VINT_MAX = 2**31 - 1
VINT_MAX_BYTES = 5
DEFAULT_MAX_COLLECTION_SIZE = 1_000_000

_LONG = struct.Struct(">q")
_INT = struct.Struct(">i")
_DOUBLE = struct.Struct(">d")
_FLOAT = struct.Struct(">f")
_CHAR = struct.Struct(">H")


class StreamOutput:
    """Writes primitives to a caller-owned binary sink."""

    def __init__(self, sink: BinaryIO) -> None:
        self._sink = sink

    def write_bytes(self, data: bytes) -> None:
        self._sink.write(data)

    def write_byte(self, value: int) -> None:
        self.write_bytes(bytes((value & 0xFF,)))

    def write_vint(self, value: int) -> None:
        if not 0 <= value <= VINT_MAX:
            raise ValueError(f"vint must be in [0, {VINT_MAX}], got {value}")
        buf = bytearray()
        while value & ~0x7F:
            buf.append((value & 0x7F) | 0x80)
            value >>= 7
        buf.append(value)
        self.write_bytes(bytes(buf))

    def write_string(self, value: str) -> None:
        """Write a vint UTF-16 code unit count, then 1 to 3 bytes per unit.

        Supplementary characters go out as two 3-byte surrogate units.
        """
        check_text(value)
        if value.isascii():
            self.write_vint(len(value))
            self.write_bytes(value.encode("ascii"))
            return
        units = value.encode("utf-16-be")
        buf = bytearray()
        for (c,) in _CHAR.iter_unpack(units):
            if c <= 0x7F:
                buf.append(c)
            elif c > 0x7FF:
                buf.extend((0xE0 | c >> 12, 0x80 | (c >> 6 & 0x3F), 0x80 | (c & 0x3F)))
            else:
                buf.extend((0xC0 | (c >> 6 & 0x1F), 0x80 | (c & 0x3F)))
        self.write_vint(len(units) // 2)
        self.write_bytes(bytes(buf))

    def write_long(self, value: int) -> None:
        self.write_bytes(_LONG.pack(value))

    def write_double(self, value: float) -> None:
        self.write_bytes(_DOUBLE.pack(value))

    def write_boolean(self, value: bool) -> None:
        self.write_byte(1 if value else 0)

    def write_generic_value(self, value: object) -> None:
        kind = kind_of(value)
        if kind is ValueKind.NULL:
            self.write_byte(TAG_NULL)
        elif kind is ValueKind.STRING:
            self.write_byte(TAG_STRING)
            self.write_string(value)  # type: ignore[arg-type]
        elif kind is ValueKind.LONG:
            self.write_byte(TAG_LONG)
            self.write_long(value)  # type: ignore[arg-type]
        elif kind is ValueKind.DOUBLE:
            self.write_byte(TAG_DOUBLE)
            self.write_double(value)  # type: ignore[arg-type]
        elif kind is ValueKind.BOOLEAN:
            self.write_byte(TAG_BOOLEAN)
            self.write_boolean(value)  # type: ignore[arg-type]
        elif kind is ValueKind.BINARY:
            data = bytes(value)  # type: ignore[arg-type]
            self.write_byte(TAG_BYTES)
            self.write_vint(len(data))
            self.write_bytes(data)
        elif kind is ValueKind.LIST:
            items = list(value)  # type: ignore[arg-type]
            self.write_byte(TAG_LIST)
            self.write_vint(len(items))
            for item in items:
                self.write_generic_value(item)
        elif kind is ValueKind.MAP:
            entries = value.items()  # type: ignore[union-attr]
            for key, _ in entries:
                if not isinstance(key, str):
                    raise UnsupportedValueError(
                        f"map keys must be str, got {type(key).__name__!r}",
                    )
                check_text(key, "map key")
            self.write_byte(TAG_ORDERED_MAP)
            self.write_vint(len(entries))
            for key, item in entries:
                self.write_string(key)
                self.write_generic_value(item)
        else:
            raise AssertionError(f"unhandled value kind {kind}")


class BytesStreamOutput(StreamOutput):
    """StreamOutput over an in-memory buffer."""

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        super().__init__(self._buffer)

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()


class StreamInput:
    """Reads primitives from a caller-owned binary source.

    ``max_depth`` bounds list/map nesting and ``max_collection_size`` bounds
    any declared element count, so a corrupt length cannot drive an
    unbounded read.
    """

    def __init__(
        self,
        source: BinaryIO,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_collection_size: int = DEFAULT_MAX_COLLECTION_SIZE,
    ) -> None:
        self._source = source
        self._position = 0
        self.max_depth = max_depth
        self.max_collection_size = max_collection_size

    @classmethod
    def from_bytes(cls, data: bytes, **kwargs: int) -> StreamInput:
        return cls(io.BytesIO(data), **kwargs)

    @property
    def position(self) -> int:
        """Number of bytes consumed so far."""
        return self._position

    def read_bytes(self, n: int) -> bytes:
        data = self._source.read(n)
        if len(data) < n:
            raise TruncatedInputError(
                f"expected {n} bytes but only {len(data)} remain",
                offset=self._position + len(data),
            )
        self._position += n
        return data

    def read_byte(self) -> int:
        return self.read_bytes(1)[0]

    def read_vint(self) -> int:
        start = self._position
        result = 0
        for shift in range(0, 7 * VINT_MAX_BYTES, 7):
            b = self.read_byte()
            result |= (b & 0x7F) << shift
            if not b & 0x80:
                if result > VINT_MAX:
                    raise BinaryDecodeError(f"vint {result} exceeds {VINT_MAX}", offset=start)
                return result
        raise BinaryDecodeError(
            f"vint longer than {VINT_MAX_BYTES} bytes", offset=start,
        )

    def read_size(self) -> int:
        start = self._position
        size = self.read_vint()
        if size > self.max_collection_size:
            raise BinaryDecodeError(
                f"declared size {size} exceeds max_collection_size {self.max_collection_size}",
                offset=start,
            )
        return size

    def read_string(self) -> str:
        start = self._position
        count = self.read_vint()
        units: list[int] = []
        for _ in range(count):
            offset = self._position
            b = self.read_byte()
            lead = b >> 4
            if lead < 8:
                units.append(b)
            elif lead in (12, 13):
                units.append((b & 0x1F) << 6 | self.read_byte() & 0x3F)
            elif lead == 14:
                b2, b3 = self.read_bytes(2)
                units.append((b & 0x0F) << 12 | (b2 & 0x3F) << 6 | b3 & 0x3F)
            else:
                raise BinaryDecodeError(f"invalid string lead byte [0x{b:02x}]", offset=offset)
        try:
            return struct.pack(f">{count}H", *units).decode("utf-16-be")
        except UnicodeDecodeError as exc:
            raise BinaryDecodeError(f"invalid string: {exc.reason}", offset=start) from exc

    def read_long(self) -> int:
        return _LONG.unpack(self.read_bytes(8))[0]

    def read_double(self) -> float:
        return _DOUBLE.unpack(self.read_bytes(8))[0]

    def read_boolean(self) -> bool:
        start = self._position
        b = self.read_byte()
        if b not in (0, 1):
            raise BinaryDecodeError(f"unexpected boolean byte [{b}]", offset=start)
        return b == 1

    def read_generic_value(self) -> FieldValue:
        return self._read_value(0)

    def _read_value(self, depth: int) -> FieldValue:
        start = self._position
        tag = self.read_byte()
        if tag == 0xFF:
            return None
        if tag == TAG_STRING:
            return self.read_string()
        if tag == TAG_INT:
            return _INT.unpack(self.read_bytes(4))[0]
        if tag == TAG_LONG:
            return self.read_long()
        if tag == TAG_FLOAT:
            return _FLOAT.unpack(self.read_bytes(4))[0]
        if tag == TAG_DOUBLE:
            return self.read_double()
        if tag == TAG_BOOLEAN:
            return self.read_boolean()
        if tag == TAG_BYTES:
            return self.read_bytes(self.read_vint())
        if tag in (TAG_LIST, TAG_OBJECT_ARRAY, TAG_ORDERED_MAP, TAG_MAP):
            if depth >= self.max_depth:
                raise BinaryDecodeError(
                    f"value nesting exceeds max depth {self.max_depth}", offset=start,
                )
            size = self.read_size()
            if tag in (TAG_LIST, TAG_OBJECT_ARRAY):
                return [self._read_value(depth + 1) for _ in range(size)]
            mapping: dict[str, FieldValue] = {}
            for _ in range(size):
                key_offset = self._position
                key = self.read_string()
                if key in mapping:
                    raise BinaryDecodeError(f"duplicate map key [{key}]", offset=key_offset)
                mapping[key] = self._read_value(depth + 1)
            return mapping
        raise UnknownValueTagError(_signed_byte(tag), offset=start)


def _signed_byte(b: int) -> int:
    return b - 256 if b > 127 else b
