"""docfield: binary and JSON codecs for document fields on hits and get results."""

from docfield.binary_codec import BinaryFieldCodec, field_from_bytes, field_to_bytes
from docfield.errors import (
    BinaryDecodeError,
    ConstructionError,
    FieldCodecError,
    MalformedFieldError,
    TextDecodeError,
    TruncatedInputError,
    UnknownValueTagError,
    UnsupportedFormatError,
    UnsupportedValueError,
)
from docfield.field import DocumentField
from docfield.metadata import (
    BUILTIN_METADATA_FIELDS,
    DEFAULT_CLASSIFIER,
    MetadataClassifier,
)
from docfield.registry import (
    DuckDbFieldRegistry,
    FieldTypeRegistry,
    StaticFieldRegistry,
)
from docfield.settings import CodecSettings, build_classifier, load_settings
from docfield.stream import BytesStreamOutput, StreamInput, StreamOutput
from docfield.text_codec import (
    TextFieldCodec,
    field_from_json,
    field_to_json,
    split_metadata_fields,
)
from docfield.values import FieldValue, ValueKind, kind_of, values_equal
from docfield.xcontent import ContentBuilder, Token, TokenLocation, TokenParser

__all__ = [
    "BUILTIN_METADATA_FIELDS",
    "BinaryDecodeError",
    "BinaryFieldCodec",
    "BytesStreamOutput",
    "CodecSettings",
    "ConstructionError",
    "ContentBuilder",
    "DEFAULT_CLASSIFIER",
    "DocumentField",
    "DuckDbFieldRegistry",
    "FieldCodecError",
    "FieldTypeRegistry",
    "FieldValue",
    "MalformedFieldError",
    "MetadataClassifier",
    "StaticFieldRegistry",
    "StreamInput",
    "StreamOutput",
    "TextDecodeError",
    "TextFieldCodec",
    "Token",
    "TokenLocation",
    "TokenParser",
    "TruncatedInputError",
    "UnknownValueTagError",
    "UnsupportedFormatError",
    "UnsupportedValueError",
    "ValueKind",
    "build_classifier",
    "field_from_bytes",
    "field_from_json",
    "field_to_bytes",
    "field_to_json",
    "kind_of",
    "load_settings",
    "split_metadata_fields",
    "values_equal",
]
