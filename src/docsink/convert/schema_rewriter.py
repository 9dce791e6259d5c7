# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Schema rewriting for document stores.

The JSON documents we produce cannot carry the decimal logical type and have
no notion of a map with typed keys, so before serialization:

- decimal                -> float64
- map<K, V>              -> array<struct{key: K', value: V'}>
- date/time/timestamp    -> unchanged (already epoch numbers on the wire)
- arrays/structs         -> rebuilt around rewritten children

`rewrite_schema` is the single source of truth for the output shape;
`rewrite_value` must always be called with the schema it returns.
"""

from dataclasses import replace

from ..api.errors import InternalSchemaMismatchError
from ..core.types import MAP_KEY, MAP_STRUCT_NAME_SEPARATOR, MAP_VALUE
from ..data.schema import (
    DATE_LOGICAL_NAME,
    DECIMAL_LOGICAL_NAME,
    TIME_LOGICAL_NAME,
    TIMESTAMP_LOGICAL_NAME,
    Field,
    Schema,
    SchemaType,
)
from .value_rewriter import rewrite_value

__all__ = ["MAP_KEY", "MAP_VALUE", "MAP_STRUCT_NAME_SEPARATOR", "map_entry_schema", "rewrite_schema"]


def _copy_schema_basics(source: Schema, target: Schema) -> Schema:
    """
    Carry optionality and (rewritten) default value from `source` onto
    `target`. Struct-level defaults are not carried.
    """
    if source.optional and not target.optional:
        target = replace(target, optional=True)
    if source.default_value is not None and source.type is not SchemaType.STRUCT:
        target = replace(target, default_value=rewrite_value(source.default_value, source, target))
    return target


def map_entry_schema(key_schema: Schema, value_schema: Schema) -> Schema:
    """Struct standing in for one entry of a map<key_schema, value_schema>."""
    name = f"{key_schema.type_name}{MAP_STRUCT_NAME_SEPARATOR}{value_schema.type_name}"
    return Schema(
        SchemaType.STRUCT,
        name=name,
        fields=(
            Field(MAP_KEY, 0, rewrite_schema(key_schema)),
            Field(MAP_VALUE, 1, rewrite_schema(value_schema)),
        ),
    )


def rewrite_schema(schema: Schema | None) -> Schema | None:
    """Return the document-store equivalent of `schema` (None passes through)."""
    if schema is None:
        return None

    name = schema.name
    if name == DECIMAL_LOGICAL_NAME:
        return _copy_schema_basics(schema, Schema(SchemaType.FLOAT64))
    if name in (DATE_LOGICAL_NAME, TIME_LOGICAL_NAME, TIMESTAMP_LOGICAL_NAME):
        return schema

    t = schema.type
    if t is SchemaType.ARRAY:
        element = rewrite_schema(schema.value_schema)
        return _copy_schema_basics(schema, replace(schema, value_schema=element, default_value=None))
    if t is SchemaType.MAP:
        entry = map_entry_schema(schema.key_schema, schema.value_schema)
        return _copy_schema_basics(schema, Schema(SchemaType.ARRAY, value_schema=entry))
    if t is SchemaType.STRUCT:
        fields = tuple(Field(f.name, f.index, rewrite_schema(f.schema)) for f in schema.fields)
        return _copy_schema_basics(schema, replace(schema, fields=fields, default_value=None))
    if t.is_primitive:
        return schema
    raise InternalSchemaMismatchError(f"unhandled schema type: {t!r}")
