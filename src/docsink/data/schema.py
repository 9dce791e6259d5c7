# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
docsink.data.schema
===================

Connect-style schema model: an immutable tree of `Schema` nodes.

- `SchemaType` is a closed set of physical types; dispatch code is expected to
  cover every member explicitly.
- Logical types (decimal/date/time/timestamp) are ordinary schemas with a
  well-known `name` over a physical storage type, exactly as in Kafka Connect.
- Shape invariants are checked in `Schema.__post_init__` and raise
  `SchemaError`; value/default checks live in `docsink.data.struct`.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Final

from ..api.errors import SchemaError

__all__ = [
    "DATE_LOGICAL_NAME",
    "DECIMAL_LOGICAL_NAME",
    "DECIMAL_SCALE_PARAM",
    "INTEGER_TYPES",
    "LOGICAL_NAMES",
    "TIMESTAMP_LOGICAL_NAME",
    "TIME_LOGICAL_NAME",
    "Field",
    "Schema",
    "SchemaType",
    "array_schema",
    "date_schema",
    "decimal_schema",
    "map_schema",
    "schema_type_for_value",
    "struct_schema",
    "time_schema",
    "timestamp_schema",
]


class SchemaType(str, Enum):
    """Physical schema type."""

    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOLEAN = "boolean"
    STRING = "string"
    BYTES = "bytes"
    ARRAY = "array"
    MAP = "map"
    STRUCT = "struct"

    @property
    def is_primitive(self) -> bool:
        return self not in (SchemaType.ARRAY, SchemaType.MAP, SchemaType.STRUCT)


INTEGER_TYPES: Final[frozenset[SchemaType]] = frozenset(
    {SchemaType.INT8, SchemaType.INT16, SchemaType.INT32, SchemaType.INT64}
)

# ---- Logical types -----------------------------------------------------------

DECIMAL_LOGICAL_NAME: Final[str] = "org.apache.kafka.connect.data.Decimal"
DATE_LOGICAL_NAME: Final[str] = "org.apache.kafka.connect.data.Date"
TIME_LOGICAL_NAME: Final[str] = "org.apache.kafka.connect.data.Time"
TIMESTAMP_LOGICAL_NAME: Final[str] = "org.apache.kafka.connect.data.Timestamp"

LOGICAL_NAMES: Final[frozenset[str]] = frozenset(
    {DECIMAL_LOGICAL_NAME, DATE_LOGICAL_NAME, TIME_LOGICAL_NAME, TIMESTAMP_LOGICAL_NAME}
)

DECIMAL_SCALE_PARAM: Final[str] = "scale"

# storage type each logical name must sit on
_LOGICAL_STORAGE: Final[dict[str, SchemaType]] = {
    DECIMAL_LOGICAL_NAME: SchemaType.BYTES,
    DATE_LOGICAL_NAME: SchemaType.INT32,
    TIME_LOGICAL_NAME: SchemaType.INT32,
    TIMESTAMP_LOGICAL_NAME: SchemaType.INT64,
}


@dataclass(frozen=True)
class Field:
    """A named, positioned member of a struct schema."""

    name: str
    index: int
    schema: Schema


@dataclass(frozen=True)
class Schema:
    """
    Immutable schema node.

    Attributes:
        type: Physical type.
        name: Logical-type identifier or struct type name.
        optional: Whether `None` is an acceptable value.
        default_value: Value used when the actual value is `None`
            (`None` means "no default").
        version/doc/parameters: Carried verbatim; decimal keeps `scale` in
            `parameters`.
        key_schema: Map key schema (maps only).
        value_schema: Array element or map value schema.
        fields: Struct members in declaration order (structs only).
    """

    type: SchemaType
    name: str | None = None
    optional: bool = False
    default_value: Any = None
    version: int | None = None
    doc: str | None = None
    parameters: Mapping[str, str] | None = None
    key_schema: Schema | None = None
    value_schema: Schema | None = None
    fields: tuple[Field, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.type, SchemaType):
            try:
                object.__setattr__(self, "type", SchemaType(self.type))
            except ValueError as e:
                raise SchemaError(f"unknown schema type: {self.type!r}") from e

        if self.type is SchemaType.MAP:
            if self.key_schema is None or self.value_schema is None:
                raise SchemaError("map schema requires both key_schema and value_schema")
        elif self.type is SchemaType.ARRAY:
            if self.value_schema is None or self.key_schema is not None:
                raise SchemaError("array schema requires exactly one element schema")
        elif self.key_schema is not None or self.value_schema is not None:
            raise SchemaError(f"{self.type.value} schema cannot have key/value schemas")

        if self.type is SchemaType.STRUCT:
            object.__setattr__(self, "fields", tuple(self.fields))
            seen: set[str] = set()
            for pos, f in enumerate(self.fields):
                if f.name in seen:
                    raise SchemaError(f"duplicate field {f.name!r} in struct {self.name!r}")
                if f.index != pos:
                    raise SchemaError(f"field {f.name!r} has index {f.index}, expected {pos}")
                seen.add(f.name)
        elif self.fields:
            raise SchemaError(f"{self.type.value} schema cannot have fields")

        storage = _LOGICAL_STORAGE.get(self.name or "")
        if storage is not None and storage is not self.type:
            raise SchemaError(f"logical type {self.name} must be stored as {storage.value}, got {self.type.value}")

        if self.default_value is not None:
            from .struct import validate_value  # local import to avoid cycles

            validate_value(self, self.default_value, path="<default>")

    # ---- Accessors ----------------------------------------------------------

    def field(self, name: str) -> Field | None:
        """Return the struct field called `name`, or None."""
        if self.type is not SchemaType.STRUCT:
            raise SchemaError(f"cannot look up field {name!r} on a {self.type.value} schema")
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def logical_name(self) -> str | None:
        """The logical-type name if this schema is one of the known logical types."""
        return self.name if self.name in LOGICAL_NAMES else None

    @property
    def type_name(self) -> str:
        """Schema name, falling back to the upper-cased physical type (e.g. `INT32`)."""
        return self.name if self.name is not None else self.type.value.upper()

    # ---- Derivations --------------------------------------------------------

    def as_optional(self) -> Schema:
        return replace(self, optional=True)

    def with_default(self, value: Any) -> Schema:
        return replace(self, default_value=value)


# ---- Constructors ------------------------------------------------------------


def struct_schema(
    name: str | None,
    fields: Iterable[tuple[str, Schema]],
    *,
    optional: bool = False,
    version: int | None = None,
    doc: str | None = None,
) -> Schema:
    """Build a struct schema from `(field_name, schema)` pairs, in order."""
    members = tuple(Field(fname, i, fschema) for i, (fname, fschema) in enumerate(fields))
    return Schema(SchemaType.STRUCT, name=name, optional=optional, version=version, doc=doc, fields=members)


def array_schema(element: Schema, *, optional: bool = False, default_value: Any = None) -> Schema:
    return Schema(SchemaType.ARRAY, optional=optional, default_value=default_value, value_schema=element)


def map_schema(key: Schema, value: Schema, *, optional: bool = False, default_value: Any = None) -> Schema:
    return Schema(SchemaType.MAP, optional=optional, default_value=default_value, key_schema=key, value_schema=value)


def decimal_schema(scale: int, *, optional: bool = False, default_value: Decimal | None = None) -> Schema:
    """Arbitrary-precision decimal with a fixed `scale`, stored as bytes."""
    return Schema(
        SchemaType.BYTES,
        name=DECIMAL_LOGICAL_NAME,
        optional=optional,
        default_value=default_value,
        version=1,
        parameters={DECIMAL_SCALE_PARAM: str(scale)},
    )


def date_schema(*, optional: bool = False) -> Schema:
    """Calendar date, stored as int32 days since the Unix epoch."""
    return Schema(SchemaType.INT32, name=DATE_LOGICAL_NAME, optional=optional, version=1)


def time_schema(*, optional: bool = False) -> Schema:
    """Time of day, stored as int32 milliseconds since midnight."""
    return Schema(SchemaType.INT32, name=TIME_LOGICAL_NAME, optional=optional, version=1)


def timestamp_schema(*, optional: bool = False) -> Schema:
    """Instant, stored as int64 milliseconds since the Unix epoch."""
    return Schema(SchemaType.INT64, name=TIMESTAMP_LOGICAL_NAME, optional=optional, version=1)


# ---- Predefined primitives ---------------------------------------------------

INT8_SCHEMA: Final[Schema] = Schema(SchemaType.INT8)
INT16_SCHEMA: Final[Schema] = Schema(SchemaType.INT16)
INT32_SCHEMA: Final[Schema] = Schema(SchemaType.INT32)
INT64_SCHEMA: Final[Schema] = Schema(SchemaType.INT64)
FLOAT32_SCHEMA: Final[Schema] = Schema(SchemaType.FLOAT32)
FLOAT64_SCHEMA: Final[Schema] = Schema(SchemaType.FLOAT64)
BOOLEAN_SCHEMA: Final[Schema] = Schema(SchemaType.BOOLEAN)
STRING_SCHEMA: Final[Schema] = Schema(SchemaType.STRING)
BYTES_SCHEMA: Final[Schema] = Schema(SchemaType.BYTES)

OPTIONAL_INT8_SCHEMA: Final[Schema] = Schema(SchemaType.INT8, optional=True)
OPTIONAL_INT16_SCHEMA: Final[Schema] = Schema(SchemaType.INT16, optional=True)
OPTIONAL_INT32_SCHEMA: Final[Schema] = Schema(SchemaType.INT32, optional=True)
OPTIONAL_INT64_SCHEMA: Final[Schema] = Schema(SchemaType.INT64, optional=True)
OPTIONAL_FLOAT32_SCHEMA: Final[Schema] = Schema(SchemaType.FLOAT32, optional=True)
OPTIONAL_FLOAT64_SCHEMA: Final[Schema] = Schema(SchemaType.FLOAT64, optional=True)
OPTIONAL_BOOLEAN_SCHEMA: Final[Schema] = Schema(SchemaType.BOOLEAN, optional=True)
OPTIONAL_STRING_SCHEMA: Final[Schema] = Schema(SchemaType.STRING, optional=True)
OPTIONAL_BYTES_SCHEMA: Final[Schema] = Schema(SchemaType.BYTES, optional=True)


def schema_type_for_value(value: Any) -> SchemaType | None:
    """
    Infer the physical type of a schema-less value, or None when the runtime
    type has no schema counterpart.
    """
    from .struct import Struct  # local import to avoid cycles

    # bool is a subclass of int; must be checked first
    if isinstance(value, bool):
        return SchemaType.BOOLEAN
    if isinstance(value, int):
        return SchemaType.INT64
    if isinstance(value, float):
        return SchemaType.FLOAT64
    if isinstance(value, str):
        return SchemaType.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return SchemaType.BYTES
    if isinstance(value, (list, tuple)):
        return SchemaType.ARRAY
    if isinstance(value, Mapping):
        return SchemaType.MAP
    if isinstance(value, Struct):
        return SchemaType.STRUCT
    return None
