# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Kafka intake for the converter.

Turns raw `aiokafka` consumer records into `SinkRecord`s and streams them
through a `DataConverter`. Consumer lifecycle (start/stop/commit) stays with
the caller; nothing here talks to the broker.
"""

from collections.abc import AsyncIterable, AsyncIterator

from aiokafka.structs import ConsumerRecord

from ..api.errors import DocsinkError
from ..codec.json_codec import Codec
from ..convert.converter import DataConverter
from ..core.config import ConverterConfig
from ..core.log import get_logger
from ..data.records import IndexableRecord, SinkRecord

__all__ = ["convert_stream", "sink_record_from_consumer_record"]

log = get_logger("transport.kafka")


def sink_record_from_consumer_record(rec: ConsumerRecord, codec: Codec) -> SinkRecord:
    """
    Decode key and value bytes of `rec` with `codec`.

    Raises:
        SchemaError: key or value bytes are not valid for `codec`; the error
            carries the record's coordinates.
    """
    try:
        key_schema, key = codec.decode(rec.topic, rec.key)
        value_schema, value = codec.decode(rec.topic, rec.value)
    except DocsinkError as e:
        e.attach({"topic": rec.topic, "partition": rec.partition, "offset": rec.offset})
        raise
    return SinkRecord(
        topic=rec.topic,
        partition=rec.partition,
        offset=rec.offset,
        key_schema=key_schema,
        key=key,
        value_schema=value_schema,
        value=value,
        timestamp=rec.timestamp,
    )


async def convert_stream(
    records: AsyncIterable[ConsumerRecord],
    converter: DataConverter,
    cfg: ConverterConfig,
) -> AsyncIterator[IndexableRecord]:
    """
    Yield one `IndexableRecord` per consumed record, in order.

    `records` is typically a started `AIOKafkaConsumer` created without
    deserializers. The first failing record ends the stream with its error.
    """
    count = 0
    async for rec in records:
        yield converter.convert(sink_record_from_consumer_record(rec, converter.codec), cfg)
        count += 1
    log.info("record stream drained", event="convert.stream.done", count=count)
