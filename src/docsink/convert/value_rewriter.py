# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Value rewriting: the value-side twin of `schema_rewriter`.

`rewrite_value(value, schema, new_schema)` walks `value` together with its
original `schema` and the `new_schema` produced by `rewrite_schema(schema)`,
building a fresh value tree shaped like `new_schema`. The new schema is never
re-derived here; every recursive call receives its node-correspondent, so the
two walks cannot drift apart. Input values are never mutated.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from ..api.errors import InternalSchemaMismatchError, MissingRequiredValueError, SchemaError
from ..core.types import MAP_KEY, MAP_VALUE
from ..data.schema import (
    DATE_LOGICAL_NAME,
    DECIMAL_LOGICAL_NAME,
    TIME_LOGICAL_NAME,
    TIMESTAMP_LOGICAL_NAME,
    Field,
    Schema,
    SchemaType,
)
from ..data.struct import Struct

__all__ = ["rewrite_value"]


def _expect(new_schema: Schema | None, kind: SchemaType, old: Schema) -> Schema:
    if new_schema is None or new_schema.type is not kind:
        got = "None" if new_schema is None else new_schema.type.value
        raise InternalSchemaMismatchError(
            f"schema pair diverges: {old.type.value} {old.name or ''} expects a {kind.value} counterpart, got {got}"
        )
    return new_schema


def _entry_fields(entry: Schema | None, old: Schema) -> tuple[Schema, Field, Field]:
    entry = _expect(entry, SchemaType.STRUCT, old)
    key_field, value_field = entry.field(MAP_KEY), entry.field(MAP_VALUE)
    if key_field is None or value_field is None:
        raise InternalSchemaMismatchError(f"map entry struct {entry.name!r} lacks '{MAP_KEY}'/'{MAP_VALUE}' fields")
    return entry, key_field, value_field


def rewrite_value(value: Any, schema: Schema | None, new_schema: Schema | None) -> Any:
    """
    Rewrite `value` (conforming to `schema`) into a value conforming to
    `new_schema`.

    Raises:
        MissingRequiredValueError: `value` is None for a required schema
            without a default.
        InternalSchemaMismatchError: `new_schema` is not the rewrite of
            `schema` at this position.
        SchemaError: `value` does not conform to `schema`.
    """
    if schema is None:
        return value

    if value is None:
        if schema.default_value is not None:
            # defaults live in the old data model; express them in the new one
            return rewrite_value(schema.default_value, schema, new_schema)
        if schema.optional:
            return None
        raise MissingRequiredValueError("null value for field that is required and has no default value")

    name = schema.name
    if name == DECIMAL_LOGICAL_NAME:
        # precision loss accepted: documents store decimals as doubles
        if isinstance(value, bool) or not isinstance(value, (Decimal, int, float)):
            raise SchemaError(f"decimal value expected, got {type(value).__name__}")
        return float(value)
    if name in (DATE_LOGICAL_NAME, TIME_LOGICAL_NAME, TIMESTAMP_LOGICAL_NAME):
        return value

    t = schema.type
    if t is SchemaType.ARRAY:
        element = _expect(new_schema, SchemaType.ARRAY, schema).value_schema
        if not isinstance(value, (list, tuple)):
            raise SchemaError(f"array value expected, got {type(value).__name__}")
        return [rewrite_value(item, schema.value_schema, element) for item in value]

    if t is SchemaType.MAP:
        entry, key_field, value_field = _entry_fields(_expect(new_schema, SchemaType.ARRAY, schema).value_schema, schema)
        if not isinstance(value, Mapping):
            raise SchemaError(f"map value expected, got {type(value).__name__}")
        # iteration order of the input mapping is kept as-is
        entries = []
        for k, v in value.items():
            pair = Struct(entry)
            pair.put(MAP_KEY, rewrite_value(k, schema.key_schema, key_field.schema))
            pair.put(MAP_VALUE, rewrite_value(v, schema.value_schema, value_field.schema))
            entries.append(pair)
        return entries

    if t is SchemaType.STRUCT:
        target = _expect(new_schema, SchemaType.STRUCT, schema)
        if not isinstance(value, Struct):
            raise SchemaError(f"Struct value expected for {schema.name!r}, got {type(value).__name__}")
        out = Struct(target)
        for f in schema.fields:
            counterpart = target.field(f.name)
            if counterpart is None:
                raise InternalSchemaMismatchError(f"field {f.name!r} of {schema.name!r} is missing from the rewritten schema")
            out.put(f.name, rewrite_value(value.get(f.name), f.schema, counterpart.schema))
        return out

    if t.is_primitive:
        return value
    raise InternalSchemaMismatchError(f"unhandled schema type: {t!r}")
