# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
docsink.codec.json_codec
========================

JSON codec for typed values, wire-compatible with the Kafka Connect JSON
converter.

- `JsonCodec(schemas_enable=False)` emits bare JSON values; with
  `schemas_enable=True` every message is an envelope
  `{"schema": <schema json>, "payload": <value>}`.
- With a schema, values are rendered by schema (bytes -> base64, decimal ->
  base64 of the unscaled two's-complement integer, date -> epoch days, time ->
  millis of day, timestamp -> epoch millis).
- Without a schema, representation is inferred from the runtime type.

Codecs are immutable and thread-safe; one instance may be shared freely.
"""

import base64
import datetime as dt
import json
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import UTC
from decimal import Decimal
from typing import Any, ClassVar, Protocol

from ..api.errors import SchemaError
from ..data.schema import (
    DATE_LOGICAL_NAME,
    DECIMAL_LOGICAL_NAME,
    DECIMAL_SCALE_PARAM,
    TIME_LOGICAL_NAME,
    TIMESTAMP_LOGICAL_NAME,
    Field,
    Schema,
    SchemaType,
)
from ..data.struct import Struct, validate_value

__all__ = [
    "Codec",
    "JsonCodec",
    "from_connect_data",
    "get_default_codec",
    "schema_from_json",
    "schema_to_json",
    "to_connect_data",
]


class Codec(Protocol):
    """Protocol of a record codec. Implementations must be pure and thread-safe."""

    name: str

    def encode(self, topic: str, schema: Schema | None, value: Any) -> bytes: ...

    def decode(self, topic: str, data: bytes | None, schema: Schema | None = None) -> tuple[Schema | None, Any]: ...


_EPOCH_DATE = dt.date(1970, 1, 1)
_EPOCH_TS = dt.datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = dt.timedelta(milliseconds=1)


def _dumps(x: Any) -> bytes:
    try:
        return json.dumps(x, ensure_ascii=False, separators=(",", ":"), allow_nan=False).encode("utf-8")
    except ValueError as e:
        # NaN and +-Infinity have no JSON representation
        raise SchemaError(f"value cannot be written as JSON: {e}") from e


def _loads(b: bytes) -> Any:
    try:
        return json.loads(b.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SchemaError(f"payload is not valid UTF-8 JSON: {e}") from e


# ---------------------------------------------------------------------------
# Logical type encodings
# ---------------------------------------------------------------------------


def _decimal_scale(schema: Schema) -> int:
    raw = (schema.parameters or {}).get(DECIMAL_SCALE_PARAM)
    if raw is None:
        raise SchemaError("decimal schema is missing the 'scale' parameter")
    return int(raw)


def _decimal_to_bytes(value: Decimal, scale: int) -> bytes:
    sign, digits, exp = value.as_tuple()
    if not isinstance(exp, int):
        raise SchemaError(f"cannot encode non-finite decimal {value}")
    unscaled = int("".join(map(str, digits)) or "0")
    shift = scale + exp
    if shift >= 0:
        unscaled *= 10**shift
    else:
        unscaled, rem = divmod(unscaled, 10**-shift)
        if rem:
            raise SchemaError(f"decimal {value} has more than {scale} fractional digits")
    if sign:
        unscaled = -unscaled
    # minimal two's-complement length, as BigInteger.toByteArray
    bits = unscaled.bit_length() if unscaled >= 0 else (~unscaled).bit_length()
    return unscaled.to_bytes(bits // 8 + 1, "big", signed=True)


def _decimal_from_bytes(raw: bytes, scale: int) -> Decimal:
    unscaled = int.from_bytes(raw, "big", signed=True)
    digits = tuple(int(c) for c in str(abs(unscaled)))
    return Decimal((1 if unscaled < 0 else 0, digits, -scale))


def _date_to_days(value: dt.date) -> int:
    return (value - _EPOCH_DATE).days


def _time_to_millis(value: dt.time) -> int:
    return ((value.hour * 60 + value.minute) * 60 + value.second) * 1000 + value.microsecond // 1000


def _millis_to_time(ms: int) -> dt.time:
    seconds, millis = divmod(ms, 1000)
    minutes, second = divmod(seconds, 60)
    hour, minute = divmod(minutes, 60)
    return dt.time(hour, minute, second, millis * 1000)


def _timestamp_to_millis(value: dt.datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - _EPOCH_TS) // _ONE_MS


# ---------------------------------------------------------------------------
# Typed value -> JSON value
# ---------------------------------------------------------------------------


def from_connect_data(schema: Schema | None, value: Any) -> Any:
    """Render a typed value as a JSON-compatible Python object."""
    if schema is None:
        return _infer_json(value)

    if value is None:
        if schema.default_value is not None:
            return from_connect_data(schema, schema.default_value)
        if schema.optional:
            return None
        raise SchemaError("null value for field that is required and has no default value")

    logical = schema.logical_name
    if logical == DECIMAL_LOGICAL_NAME:
        return base64.b64encode(_decimal_to_bytes(value, _decimal_scale(schema))).decode("ascii")
    if logical == DATE_LOGICAL_NAME:
        return _date_to_days(value)
    if logical == TIME_LOGICAL_NAME:
        return _time_to_millis(value)
    if logical == TIMESTAMP_LOGICAL_NAME:
        return _timestamp_to_millis(value)

    t = schema.type
    if t is SchemaType.BYTES:
        return base64.b64encode(bytes(value)).decode("ascii")
    if t is SchemaType.ARRAY:
        return [from_connect_data(schema.value_schema, item) for item in value]
    if t is SchemaType.MAP:
        if schema.key_schema.type is SchemaType.STRING:
            return {k: from_connect_data(schema.value_schema, v) for k, v in value.items()}
        return [
            [from_connect_data(schema.key_schema, k), from_connect_data(schema.value_schema, v)]
            for k, v in value.items()
        ]
    if t is SchemaType.STRUCT:
        if not isinstance(value, Struct):
            raise SchemaError(f"expected Struct for struct schema {schema.name!r}, got {type(value).__name__}")
        return {f.name: from_connect_data(f.schema, value.get(f.name)) for f in schema.fields}
    if t in (SchemaType.FLOAT32, SchemaType.FLOAT64):
        return float(value)
    # int8..int64, boolean, string
    return value


def _infer_json(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    # datetime is a subclass of date
    if isinstance(value, dt.datetime):
        return _timestamp_to_millis(value)
    if isinstance(value, dt.date):
        return _date_to_days(value)
    if isinstance(value, dt.time):
        return _time_to_millis(value)
    if isinstance(value, (list, tuple)):
        return [_infer_json(v) for v in value]
    if isinstance(value, Mapping):
        if all(isinstance(k, str) for k in value):
            return {k: _infer_json(v) for k, v in value.items()}
        return [[_infer_json(k), _infer_json(v)] for k, v in value.items()]
    if isinstance(value, Struct):
        return from_connect_data(value.schema, value)
    raise SchemaError(f"{type(value).__name__} has no corresponding schema type")


# ---------------------------------------------------------------------------
# JSON value -> typed value
# ---------------------------------------------------------------------------


def to_connect_data(schema: Schema | None, value: Any) -> Any:
    """Rebuild a typed value from its JSON form, driven by `schema`."""
    if schema is None:
        return value

    if value is None:
        if schema.default_value is not None:
            return schema.default_value
        if schema.optional:
            return None
        raise SchemaError("null value for field that is required and has no default value")

    logical = schema.logical_name
    if logical == DECIMAL_LOGICAL_NAME:
        if isinstance(value, str):
            return _decimal_from_bytes(base64.b64decode(value), _decimal_scale(schema))
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return Decimal(str(value))
        raise SchemaError(f"cannot read decimal from {type(value).__name__}")
    if logical == DATE_LOGICAL_NAME:
        return _EPOCH_DATE + dt.timedelta(days=_as_int(value))
    if logical == TIME_LOGICAL_NAME:
        return _millis_to_time(_as_int(value))
    if logical == TIMESTAMP_LOGICAL_NAME:
        return _EPOCH_TS + _as_int(value) * _ONE_MS

    t = schema.type
    if t is SchemaType.BYTES:
        if not isinstance(value, str):
            raise SchemaError(f"expected base64 text for bytes, got {type(value).__name__}")
        return base64.b64decode(value)
    if t in (SchemaType.FLOAT32, SchemaType.FLOAT64):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SchemaError(f"expected number for {t.value}, got {type(value).__name__}")
        return float(value)
    if t is SchemaType.ARRAY:
        if not isinstance(value, list):
            raise SchemaError(f"expected array, got {type(value).__name__}")
        return [to_connect_data(schema.value_schema, item) for item in value]
    if t is SchemaType.MAP:
        if isinstance(value, dict):
            pairs = value.items()
        elif isinstance(value, list):
            pairs = value
        else:
            raise SchemaError(f"expected object or array of pairs for map, got {type(value).__name__}")
        out: dict[Any, Any] = {}
        for pair in pairs:
            if len(pair) != 2:
                raise SchemaError("map entries must be [key, value] pairs")
            k, v = pair
            out[to_connect_data(schema.key_schema, k)] = to_connect_data(schema.value_schema, v)
        return out
    if t is SchemaType.STRUCT:
        if not isinstance(value, dict):
            raise SchemaError(f"expected object for struct {schema.name!r}, got {type(value).__name__}")
        struct = Struct(schema)
        for f in schema.fields:
            struct.put(f.name, to_connect_data(f.schema, value.get(f.name)))
        return struct
    # int8..int64, boolean, string
    validate_value(schema, value)
    return value


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError(f"expected integer, got {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# Schema <-> JSON
# ---------------------------------------------------------------------------

# Connect spells the float types differently on the wire
_WIRE_TYPE_NAMES: dict[SchemaType, str] = {SchemaType.FLOAT32: "float", SchemaType.FLOAT64: "double"}
_TYPES_BY_WIRE_NAME: dict[str, SchemaType] = {
    **{t.value: t for t in SchemaType if t not in _WIRE_TYPE_NAMES},
    **{n: t for t, n in _WIRE_TYPE_NAMES.items()},
}


def schema_to_json(schema: Schema | None) -> dict[str, Any] | None:
    """Render a schema in Kafka Connect's JSON schema format."""
    if schema is None:
        return None
    out: dict[str, Any] = {"type": _WIRE_TYPE_NAMES.get(schema.type, schema.type.value), "optional": schema.optional}
    if schema.name is not None:
        out["name"] = schema.name
    if schema.version is not None:
        out["version"] = schema.version
    if schema.doc is not None:
        out["doc"] = schema.doc
    if schema.parameters:
        out["parameters"] = dict(schema.parameters)
    if schema.default_value is not None:
        out["default"] = from_connect_data(schema, schema.default_value)

    if schema.type is SchemaType.STRUCT:
        out["fields"] = [{**schema_to_json(f.schema), "field": f.name} for f in schema.fields]
    elif schema.type is SchemaType.ARRAY:
        out["items"] = schema_to_json(schema.value_schema)
    elif schema.type is SchemaType.MAP:
        out["keys"] = schema_to_json(schema.key_schema)
        out["values"] = schema_to_json(schema.value_schema)
    return out


def schema_from_json(obj: Any) -> Schema | None:
    """Parse Kafka Connect's JSON schema format."""
    if obj is None:
        return None
    if not isinstance(obj, dict) or not isinstance(obj.get("type"), str):
        raise SchemaError("schema must be an object with a 'type' field")
    t = _TYPES_BY_WIRE_NAME.get(obj["type"])
    if t is None:
        raise SchemaError(f"unknown schema type: {obj['type']!r}")

    kwargs: dict[str, Any] = {
        "name": obj.get("name"),
        "optional": bool(obj.get("optional", False)),
        "version": obj.get("version"),
        "doc": obj.get("doc"),
        "parameters": obj.get("parameters"),
    }
    if t is SchemaType.STRUCT:
        members = obj.get("fields")
        if not isinstance(members, list):
            raise SchemaError("struct schema requires a 'fields' array")
        fields = []
        for i, fobj in enumerate(members):
            if not isinstance(fobj, dict) or "field" not in fobj:
                raise SchemaError("struct field entries require a 'field' name")
            fields.append(Field(fobj["field"], i, schema_from_json(fobj)))
        kwargs["fields"] = tuple(fields)
    elif t is SchemaType.ARRAY:
        kwargs["value_schema"] = schema_from_json(obj.get("items"))
    elif t is SchemaType.MAP:
        kwargs["key_schema"] = schema_from_json(obj.get("keys"))
        kwargs["value_schema"] = schema_from_json(obj.get("values"))

    schema = Schema(t, **kwargs)
    if obj.get("default") is not None:
        schema = replace(schema, default_value=to_connect_data(schema, obj["default"]))
    return schema


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JsonCodec:
    """
    Kafka Connect compatible JSON codec.

    Args:
        schemas_enable: Wrap every message in a `{"schema", "payload"}` envelope.
    """

    schemas_enable: bool = False

    name: ClassVar[str] = "json"

    def encode(self, topic: str, schema: Schema | None, value: Any) -> bytes:
        payload = from_connect_data(schema, value)
        if self.schemas_enable:
            return _dumps({"schema": schema_to_json(schema), "payload": payload})
        return _dumps(payload)

    def decode(self, topic: str, data: bytes | None, schema: Schema | None = None) -> tuple[Schema | None, Any]:
        """
        Parse bytes produced by `encode`.

        In envelope mode the embedded schema is used unless `schema` is given;
        in schema-less mode the bare JSON is returned, or rebuilt against
        `schema` when one is given.
        """
        if data is None:
            return schema, None
        obj = _loads(data)
        if self.schemas_enable:
            if not isinstance(obj, dict) or set(obj) != {"schema", "payload"}:
                raise SchemaError('envelope mode requires exactly "schema" and "payload" fields')
            if schema is None:
                schema = schema_from_json(obj["schema"])
            obj = obj["payload"]
        return schema, to_connect_data(schema, obj)


_default_codec: JsonCodec | None = None


def get_default_codec() -> JsonCodec:
    """Process-wide schema-less codec (lazily created)."""
    global _default_codec
    if _default_codec is None:
        _default_codec = JsonCodec(schemas_enable=False)
    return _default_codec
