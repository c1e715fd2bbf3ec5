"""Form (``application/x-www-form-urlencoded``) codec for nested values.

Bracketed keys such as ``user[tags][]=a`` address fields of msgspec structs
and dataclasses, string-keyed mappings, sequences, and dynamic ``Any`` slots
whose shape is inferred while decoding.
"""

from __future__ import annotations

from serde_form.codec import (
    DEFAULT_CODEC,
    FormCodec,
    decode_form_pairs,
    dumps_form,
    encode_form_pairs,
    loads_form,
)
from serde_form.config import FormCodecConfig, config_from_env, config_from_mapping
from serde_form.core_types import (
    DynamicValue,
    Float32,
    Float64,
    FormMarshaler,
    FormPairs,
    FormUnmarshaler,
    Int8,
    Int16,
    Int32,
    Int64,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
)
from serde_form.errors import (
    FormConfigError,
    FormError,
    FormErrorKind,
    FormInvalidCallError,
    FormLimitError,
    FormStructureError,
    FormSyntaxError,
    FormTypeError,
)
from serde_form.infer import infer
from serde_form.paths import PathSegment, parse_key, render_path
from serde_form.schema import DEFAULT_SCHEMA_CACHE, FieldSchema, SchemaCache
from serde_form.stream import FormDecoder, FormEncoder
from serde_form.tags import FieldTag, parse_tag
from serde_form.wire import parse_form, serialize_form

__all__ = [
    "DEFAULT_CODEC",
    "DEFAULT_SCHEMA_CACHE",
    "DynamicValue",
    "FieldSchema",
    "FieldTag",
    "Float32",
    "Float64",
    "FormCodec",
    "FormCodecConfig",
    "FormConfigError",
    "FormDecoder",
    "FormEncoder",
    "FormError",
    "FormErrorKind",
    "FormInvalidCallError",
    "FormLimitError",
    "FormMarshaler",
    "FormPairs",
    "FormStructureError",
    "FormSyntaxError",
    "FormTypeError",
    "FormUnmarshaler",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "PathSegment",
    "SchemaCache",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "config_from_env",
    "config_from_mapping",
    "decode_form_pairs",
    "dumps_form",
    "encode_form_pairs",
    "infer",
    "loads_form",
    "parse_form",
    "parse_key",
    "parse_tag",
    "render_path",
    "serialize_form",
]
