"""Exception taxonomy shared by the binary and text field codecs."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docfield.xcontent import Token, TokenLocation


class FieldCodecError(Exception):
    """Base class for every error raised by docfield."""


class ConstructionError(FieldCodecError, ValueError):
    """Raised when a DocumentField is built from a missing or invalid name/values."""


class UnsupportedValueError(FieldCodecError, TypeError):
    """Raised when a value falls outside the generic value union."""


class BinaryDecodeError(FieldCodecError):
    """Raised when a binary stream cannot be decoded.

    ``offset`` is the byte position in the source where decoding stopped.
    The stream is left in an indeterminate position.
    """

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        self.offset = offset
        where = f" at byte {offset}" if offset is not None else ""
        super().__init__(f"{message}{where}")


class TruncatedInputError(BinaryDecodeError):
    """Raised when the source ends before the declared content is read."""


class UnknownValueTagError(BinaryDecodeError):
    """Raised on a generic value type tag outside the closed value set."""

    def __init__(self, tag: int, *, offset: int | None = None) -> None:
        self.tag = tag
        super().__init__(f"unknown generic value type tag [{tag}]", offset=offset)


class TextDecodeError(FieldCodecError):
    """Raised when structured text cannot be decoded into a field."""

    def __init__(
        self,
        message: str,
        *,
        token: Token | None = None,
        location: TokenLocation | None = None,
    ) -> None:
        self.token = token
        self.location = location
        where = f"[{location}] " if location is not None else ""
        super().__init__(f"{where}{message}")


class MalformedFieldError(TextDecodeError):
    """Raised when the token stream does not match either field grammar."""


class UnsupportedFormatError(TextDecodeError):
    """Raised when a recognized but disabled grammar is encountered."""
