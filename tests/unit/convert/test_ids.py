from __future__ import annotations

import pytest

from docsink.api.errors import EmptyKeyError, KeyDecodingError, NullKeyError, UnsupportedKeyTypeError
from docsink.convert.ids import KeyMode, convert_key, resolve_id
from docsink.data.schema import (
    BOOLEAN_SCHEMA,
    BYTES_SCHEMA,
    FLOAT64_SCHEMA,
    INT8_SCHEMA,
    INT32_SCHEMA,
    INT64_SCHEMA,
    STRING_SCHEMA,
    struct_schema,
)
from docsink.data.struct import Struct
from tests.helpers import mk_record

pytestmark = [pytest.mark.unit, pytest.mark.ids]


# ---- DIRECT -----------------------------------------------------------------


@pytest.mark.parametrize(
    "schema,key,expected",
    [
        (INT64_SCHEMA, 7, "7"),
        (INT8_SCHEMA, -3, "-3"),
        (STRING_SCHEMA, "abc", "abc"),
        (None, 7, "7"),
        (None, "abc", "abc"),
    ],
)
def test_simple_keys_become_ids(schema, key, expected):
    assert convert_key(schema, key) == expected


def test_null_key_is_rejected():
    with pytest.raises(NullKeyError, match="can not be null"):
        convert_key(INT32_SCHEMA, None)


@pytest.mark.parametrize(
    "schema,key,type_name",
    [
        (FLOAT64_SCHEMA, 1.5, "FLOAT64"),
        (BOOLEAN_SCHEMA, True, "BOOLEAN"),
        (BYTES_SCHEMA, b"x", "BYTES"),
        (None, True, "BOOLEAN"),
        (None, 1.5, "FLOAT64"),
        (None, {"a": 1}, "MAP"),
    ],
)
def test_unsupported_key_types_are_rejected(schema, key, type_name):
    with pytest.raises(UnsupportedKeyTypeError, match=f"{type_name} is not supported as the document id"):
        convert_key(schema, key)


def test_empty_string_key_is_rejected():
    with pytest.raises(EmptyKeyError, match="can not be empty"):
        convert_key(STRING_SCHEMA, "")
    with pytest.raises(EmptyKeyError):
        convert_key(None, "")


def test_untyped_key_without_schema_counterpart_is_rejected():
    with pytest.raises(UnsupportedKeyTypeError, match="does not have corresponding schema type"):
        convert_key(None, object())


def test_direct_mode_has_no_index_override(codec):
    assert resolve_id(mk_record(None, None, key=7), KeyMode.DIRECT, codec) == ("7", None)


# ---- SYNTHETIC --------------------------------------------------------------


def test_synthetic_id_from_coordinates(codec):
    rec = mk_record(None, None, key=None, topic="orders", partition=3, offset=42)
    assert resolve_id(rec, KeyMode.SYNTHETIC, codec) == ("orders+3+42", None)


def test_synthetic_ids_differ_per_offset(codec):
    ids = {resolve_id(mk_record(None, None, offset=o), KeyMode.SYNTHETIC, codec)[0] for o in range(5)}
    assert len(ids) == 5


# ---- EMBEDDED ---------------------------------------------------------------


def test_embedded_key_sets_id_and_index(codec):
    rec = mk_record(None, None, key={"uuid": "abc-123", "index": "5"}, topic="events")
    assert resolve_id(rec, KeyMode.EMBEDDED, codec) == ("abc-123", "events-5")


def test_embedded_index_is_lower_cased_and_values_stringified(codec):
    rec = mk_record(None, None, key={"uuid": 99, "index": "Archive"}, topic="Events")
    assert resolve_id(rec, KeyMode.EMBEDDED, codec) == ("99", "events-archive")


def test_embedded_struct_key_is_read_through_the_codec(codec):
    key_schema = struct_schema("Key", [("uuid", STRING_SCHEMA), ("index", INT32_SCHEMA)])
    key = Struct(key_schema).put("uuid", "u-1").put("index", 2024)
    rec = mk_record(None, None, key=key, key_schema=key_schema, topic="logs")
    assert resolve_id(rec, KeyMode.EMBEDDED, codec) == ("u-1", "logs-2024")


@pytest.mark.parametrize(
    "key",
    [
        {"uuid": "abc"},
        {"index": "5"},
        {"uuid": None, "index": "5"},
        {"uuid": "", "index": "5"},
        "plain-string",
        [1, 2],
        None,
        object(),
    ],
)
def test_bad_embedded_keys_are_rejected(codec, key):
    with pytest.raises(KeyDecodingError):
        resolve_id(mk_record(None, None, key=key), KeyMode.EMBEDDED, codec)
