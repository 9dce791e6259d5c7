# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Struct values and schema/value conformance checks.

Values are plain Python objects (ints, floats, str, bytes, lists, dicts) except
for structs, which are `Struct` instances bound to their struct schema.
Logical types use their natural Python representation:

    decimal   -> decimal.Decimal
    date      -> datetime.date (not datetime)
    time      -> datetime.time
    timestamp -> datetime.datetime
"""

import datetime as dt
from collections.abc import Iterator, Mapping
from decimal import Decimal
from typing import Any, Final

from ..api.errors import SchemaError
from .schema import (
    DATE_LOGICAL_NAME,
    DECIMAL_LOGICAL_NAME,
    TIME_LOGICAL_NAME,
    TIMESTAMP_LOGICAL_NAME,
    Field,
    Schema,
    SchemaType,
)

__all__ = ["Struct", "validate_value"]


_INT_RANGES: Final[dict[SchemaType, tuple[int, int]]] = {
    SchemaType.INT8: (-(2**7), 2**7 - 1),
    SchemaType.INT16: (-(2**15), 2**15 - 1),
    SchemaType.INT32: (-(2**31), 2**31 - 1),
    SchemaType.INT64: (-(2**63), 2**63 - 1),
}


def _fail(path: str, schema: Schema, value: Any) -> SchemaError:
    what = schema.logical_name or schema.type.value
    return SchemaError(f"{path}: {type(value).__name__} value {value!r} does not match schema type {what}")


def validate_value(schema: Schema, value: Any, *, path: str = "$") -> None:
    """
    Check that `value` conforms to `schema`, recursively.

    `None` is accepted when the schema is optional or has a default (the
    default is substituted on read). Raises SchemaError on the first mismatch.
    """
    if value is None:
        if schema.optional or schema.default_value is not None:
            return
        raise SchemaError(f"{path}: null used for required field")

    logical = schema.logical_name
    if logical == DECIMAL_LOGICAL_NAME:
        if not isinstance(value, Decimal):
            raise _fail(path, schema, value)
        return
    if logical == DATE_LOGICAL_NAME:
        if not isinstance(value, dt.date) or isinstance(value, dt.datetime):
            raise _fail(path, schema, value)
        return
    if logical == TIME_LOGICAL_NAME:
        if not isinstance(value, dt.time):
            raise _fail(path, schema, value)
        return
    if logical == TIMESTAMP_LOGICAL_NAME:
        if not isinstance(value, dt.datetime):
            raise _fail(path, schema, value)
        return

    t = schema.type
    if t in _INT_RANGES:
        if not isinstance(value, int) or isinstance(value, bool):
            raise _fail(path, schema, value)
        lo, hi = _INT_RANGES[t]
        if not lo <= value <= hi:
            raise SchemaError(f"{path}: {value} out of range for {t.value}")
    elif t in (SchemaType.FLOAT32, SchemaType.FLOAT64):
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise _fail(path, schema, value)
    elif t is SchemaType.BOOLEAN:
        if not isinstance(value, bool):
            raise _fail(path, schema, value)
    elif t is SchemaType.STRING:
        if not isinstance(value, str):
            raise _fail(path, schema, value)
    elif t is SchemaType.BYTES:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise _fail(path, schema, value)
    elif t is SchemaType.ARRAY:
        if not isinstance(value, (list, tuple)):
            raise _fail(path, schema, value)
        for i, item in enumerate(value):
            validate_value(schema.value_schema, item, path=f"{path}[{i}]")
    elif t is SchemaType.MAP:
        if not isinstance(value, Mapping):
            raise _fail(path, schema, value)
        for k, v in value.items():
            validate_value(schema.key_schema, k, path=f"{path}.<key>")
            validate_value(schema.value_schema, v, path=f"{path}[{k!r}]")
    elif t is SchemaType.STRUCT:
        if not isinstance(value, Struct):
            raise _fail(path, schema, value)
        # struct-level defaults are not part of the shape
        if value.schema.name != schema.name or value.schema.fields != schema.fields:
            raise SchemaError(f"{path}: struct schema {value.schema.name!r} does not match {schema.name!r}")
        value.validate(path=path)
    else:
        raise SchemaError(f"{path}: unhandled schema type {t!r}")


class Struct:
    """
    A value of a struct schema. Fields are set with `put()` (validated) and
    read with `get()`, which falls back to the field's default when unset.
    """

    __slots__ = ("_schema", "_values")

    def __init__(self, schema: Schema) -> None:
        if schema.type is not SchemaType.STRUCT:
            raise SchemaError(f"Struct requires a struct schema, got {schema.type.value}")
        self._schema = schema
        self._values: dict[str, Any] = {}

    @property
    def schema(self) -> Schema:
        return self._schema

    def _lookup(self, name: str) -> Field:
        f = self._schema.field(name)
        if f is None:
            raise SchemaError(f"{name!r} is not a field of struct {self._schema.name!r}")
        return f

    def put(self, name: str, value: Any) -> Struct:
        f = self._lookup(name)
        validate_value(f.schema, value, path=name)
        self._values[name] = value
        return self

    def get(self, name: str) -> Any:
        f = self._lookup(name)
        value = self._values.get(name)
        if value is None:
            return f.schema.default_value
        return value

    def get_without_default(self, name: str) -> Any:
        self._lookup(name)
        return self._values.get(name)

    def items(self) -> Iterator[tuple[str, Any]]:
        """Yield `(field_name, value)` in schema order, defaults applied."""
        for f in self._schema.fields:
            yield f.name, self.get(f.name)

    def validate(self, *, path: str = "$") -> None:
        """Ensure every field holds a conforming value (required ones set)."""
        for f in self._schema.fields:
            validate_value(f.schema, self._values.get(f.name), path=f"{path}.{f.name}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Struct):
            return NotImplemented
        if self._schema != other._schema:
            return False
        return all(self._values.get(f.name) == other._values.get(f.name) for f in self._schema.fields)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"Struct{{{body}}}"
