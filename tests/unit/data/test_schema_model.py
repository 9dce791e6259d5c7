from __future__ import annotations

from decimal import Decimal

import pytest

from docsink.api.errors import SchemaError
from docsink.data.schema import (
    DECIMAL_LOGICAL_NAME,
    INT32_SCHEMA,
    INT64_SCHEMA,
    STRING_SCHEMA,
    Field,
    Schema,
    SchemaType,
    array_schema,
    decimal_schema,
    map_schema,
    schema_type_for_value,
    struct_schema,
)
from docsink.data.struct import Struct

pytestmark = [pytest.mark.unit, pytest.mark.data]


def test_struct_schema_assigns_positions_in_order():
    s = struct_schema("Person", [("name", STRING_SCHEMA), ("age", INT32_SCHEMA)])
    assert [(f.name, f.index) for f in s.fields] == [("name", 0), ("age", 1)]
    assert s.field("age").schema is INT32_SCHEMA
    assert s.field("missing") is None


def test_field_lookup_on_non_struct_is_an_error():
    with pytest.raises(SchemaError):
        STRING_SCHEMA.field("x")


def test_type_name_prefers_schema_name():
    assert INT32_SCHEMA.type_name == "INT32"
    assert decimal_schema(2).type_name == DECIMAL_LOGICAL_NAME
    assert struct_schema("Person", []).type_name == "Person"


def test_type_is_coerced_from_string():
    assert Schema("int16").type is SchemaType.INT16
    with pytest.raises(SchemaError):
        Schema("uuid")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"type": SchemaType.MAP, "key_schema": STRING_SCHEMA},
        {"type": SchemaType.ARRAY},
        {"type": SchemaType.ARRAY, "key_schema": STRING_SCHEMA, "value_schema": STRING_SCHEMA},
        {"type": SchemaType.INT32, "value_schema": STRING_SCHEMA},
        {"type": SchemaType.STRING, "fields": (Field("x", 0, STRING_SCHEMA),)},
    ],
)
def test_malformed_container_shapes_are_rejected(kwargs):
    with pytest.raises(SchemaError):
        Schema(**kwargs)


def test_duplicate_or_misnumbered_fields_are_rejected():
    with pytest.raises(SchemaError):
        struct_schema("Dup", [("a", STRING_SCHEMA), ("a", INT32_SCHEMA)])
    with pytest.raises(SchemaError):
        Schema(SchemaType.STRUCT, name="Bad", fields=(Field("a", 1, STRING_SCHEMA),))


def test_logical_type_on_wrong_storage_is_rejected():
    with pytest.raises(SchemaError):
        Schema(SchemaType.INT32, name=DECIMAL_LOGICAL_NAME)


def test_default_must_conform():
    assert decimal_schema(2, default_value=Decimal("1.50")).default_value == Decimal("1.50")
    with pytest.raises(SchemaError):
        INT32_SCHEMA.with_default("seven")
    with pytest.raises(SchemaError):
        Schema(SchemaType.INT8, default_value=300)


def test_derivations_return_new_nodes():
    opt = INT64_SCHEMA.as_optional()
    assert opt.optional and not INT64_SCHEMA.optional
    assert map_schema(STRING_SCHEMA, INT32_SCHEMA, optional=True).optional
    assert array_schema(INT32_SCHEMA).value_schema is INT32_SCHEMA


@pytest.mark.parametrize(
    "value,expected",
    [
        (True, SchemaType.BOOLEAN),
        (7, SchemaType.INT64),
        (1.5, SchemaType.FLOAT64),
        ("x", SchemaType.STRING),
        (b"x", SchemaType.BYTES),
        ([1], SchemaType.ARRAY),
        ({"a": 1}, SchemaType.MAP),
        (object(), None),
    ],
)
def test_schema_type_for_value(value, expected):
    assert schema_type_for_value(value) is expected


def test_schema_type_for_struct_value():
    s = struct_schema("S", [])
    assert schema_type_for_value(Struct(s)) is SchemaType.STRUCT
