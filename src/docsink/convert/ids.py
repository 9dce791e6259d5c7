# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Document id resolution.

Three mutually exclusive modes (`KeyMode`):

- EMBEDDED:  the key is a JSON object carrying `uuid` (the id) and `index`
             (suffix of the destination index, `<topic>-<index>` lower-cased).
- SYNTHETIC: `<topic>+<partition>+<offset>`; unique because the upstream log
             identifies a record by those three.
- DIRECT:    the key itself, when it is an integer or a string.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Final

from ..api.errors import EmptyKeyError, KeyDecodingError, NullKeyError, SchemaError, UnsupportedKeyTypeError
from ..codec.json_codec import Codec
from ..data.records import SinkRecord
from ..data.schema import INTEGER_TYPES, Schema, SchemaType, schema_type_for_value

__all__ = ["EMBEDDED_ID_FIELD", "EMBEDDED_INDEX_FIELD", "KeyMode", "convert_key", "resolve_id"]


class KeyMode(str, Enum):
    """How a record's document id is derived."""

    EMBEDDED = "embedded"
    SYNTHETIC = "synthetic"
    DIRECT = "direct"


EMBEDDED_ID_FIELD: Final[str] = "uuid"
EMBEDDED_INDEX_FIELD: Final[str] = "index"

_ID_TYPES: Final[frozenset[SchemaType]] = INTEGER_TYPES | {SchemaType.STRING}


def convert_key(key_schema: Schema | None, key: Any) -> str:
    """Render a simple-typed key as a document id."""
    if key is None:
        raise NullKeyError("Key is used as document id and can not be null.")

    if key_schema is not None:
        schema_type = key_schema.type
    else:
        schema_type = schema_type_for_value(key)
        if schema_type is None:
            raise UnsupportedKeyTypeError(f"Python type {type(key).__name__} does not have corresponding schema type.")

    if schema_type not in _ID_TYPES:
        raise UnsupportedKeyTypeError(f"{schema_type.value.upper()} is not supported as the document id.")
    doc_id = str(key)
    if not doc_id:
        raise EmptyKeyError("Key is used as document id and can not be empty.")
    return doc_id


def _embedded_key(record: SinkRecord, codec: Codec) -> tuple[str, str]:
    try:
        raw = codec.encode(record.topic, record.key_schema, record.key)
        _, decoded = codec.decode(record.topic, raw)
    except SchemaError as e:
        raise KeyDecodingError(f"cannot decode embedded JSON key: {e}") from e

    if not isinstance(decoded, Mapping):
        raise KeyDecodingError(f"embedded key must decode to an object, got {type(decoded).__name__}")
    missing = [f for f in (EMBEDDED_ID_FIELD, EMBEDDED_INDEX_FIELD) if decoded.get(f) is None]
    if missing:
        raise KeyDecodingError(f"embedded key is missing required fields: {missing}")

    doc_id = str(decoded[EMBEDDED_ID_FIELD])
    if not doc_id:
        raise KeyDecodingError(f"embedded key has an empty '{EMBEDDED_ID_FIELD}'")
    index = f"{record.topic}-{decoded[EMBEDDED_INDEX_FIELD]}".lower()
    return doc_id, index


def resolve_id(record: SinkRecord, mode: KeyMode, codec: Codec) -> tuple[str, str | None]:
    """
    Return `(document_id, index_override)` for `record`.

    `codec` must be schema-less; it is only used in EMBEDDED mode, to read the
    key as a JSON object. The override is None outside EMBEDDED mode.
    """
    if mode is KeyMode.EMBEDDED:
        return _embedded_key(record, codec)
    if mode is KeyMode.SYNTHETIC:
        return f"{record.topic}+{record.partition}+{record.offset}", None
    if mode is KeyMode.DIRECT:
        return convert_key(record.key_schema, record.key), None
    raise ValueError(f"unknown key mode: {mode!r}")
