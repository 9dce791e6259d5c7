from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any

from docsink.data.records import SinkRecord
from docsink.data.schema import (
    INT64_SCHEMA,
    OPTIONAL_STRING_SCHEMA,
    STRING_SCHEMA,
    Schema,
    array_schema,
    date_schema,
    decimal_schema,
    map_schema,
    struct_schema,
)
from docsink.data.struct import Struct


def mk_record(
    value_schema: Schema | None,
    value: Any,
    *,
    key: Any = "k1",
    key_schema: Schema | None = None,
    topic: str = "orders",
    partition: int = 0,
    offset: int = 0,
) -> SinkRecord:
    return SinkRecord(
        topic=topic,
        partition=partition,
        offset=offset,
        key_schema=key_schema,
        key=key,
        value_schema=value_schema,
        value=value,
    )


def order_schema() -> Schema:
    """Struct mixing every rewritten shape: decimal, map, array of decimals, date."""
    return struct_schema(
        "shop.Order",
        [
            ("id", INT64_SCHEMA),
            ("price", decimal_schema(2)),
            ("tags", map_schema(STRING_SCHEMA, INT64_SCHEMA)),
            ("parts", array_schema(decimal_schema(1))),
            ("placed", date_schema()),
            ("note", OPTIONAL_STRING_SCHEMA),
        ],
    )


def order_value(schema: Schema | None = None) -> Struct:
    schema = schema or order_schema()
    return (
        Struct(schema)
        .put("id", 42)
        .put("price", Decimal("12.50"))
        .put("tags", {"b": 1, "a": 2})
        .put("parts", [Decimal("0.5"), Decimal("1.5")])
        .put("placed", dt.date(2024, 1, 31))
    )
