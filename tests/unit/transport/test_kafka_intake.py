from __future__ import annotations

import json

import pytest

from docsink.api.errors import NullKeyError, SchemaError
from docsink.codec.json_codec import JsonCodec
from docsink.convert.converter import DataConverter
from docsink.core.config import ConverterConfig
from docsink.transport.kafka import convert_stream, sink_record_from_consumer_record
from tests.helpers import AIOKafkaConsumerMock, consumer_record

pytestmark = [pytest.mark.unit, pytest.mark.transport]


def test_consumer_record_is_decoded(codec):
    rec = consumer_record("orders", 12, key="k1", value={"a": 1}, partition=2)
    sr = sink_record_from_consumer_record(rec, codec)
    assert (sr.topic, sr.partition, sr.offset) == ("orders", 2, 12)
    assert (sr.key_schema, sr.key) == (None, "k1")
    assert (sr.value_schema, sr.value) == (None, {"a": 1})
    assert sr.timestamp == rec.timestamp


def test_null_bytes_stay_null(codec):
    sr = sink_record_from_consumer_record(consumer_record("orders", 0), codec)
    assert sr.key is None and sr.value is None


def test_envelope_records_carry_schemas():
    codec = JsonCodec(schemas_enable=True)
    value = {"schema": {"type": "string", "optional": False}, "payload": "hi"}
    sr = sink_record_from_consumer_record(consumer_record("t", 0, value=value), codec)
    assert sr.value_schema is not None and sr.value == "hi"


def test_undecodable_bytes_fail_with_coordinates(codec):
    rec = consumer_record("orders", 7, value=b"{nope", partition=1)
    with pytest.raises(SchemaError) as ei:
        sink_record_from_consumer_record(rec, codec)
    assert ei.value.record_coordinates == {"topic": "orders", "partition": 1, "offset": 7}


@pytest.mark.asyncio
async def test_stream_is_one_to_one_ordered_and_leaves_consumer_alone(converter, caplog):
    caplog.set_level("INFO", logger="docsink")
    consumer = AIOKafkaConsumerMock(
        [consumer_record("Orders", i, key=f"k{i}", value={"n": i}) for i in range(3)]
    )

    out = [doc async for doc in convert_stream(consumer, converter, ConverterConfig())]

    assert [d.key.id for d in out] == ["k0", "k1", "k2"]
    assert [d.offset for d in out] == [0, 1, 2]
    assert {d.key.index for d in out} == {"orders"}
    assert [json.loads(d.payload) for d in out] == [{"n": 0}, {"n": 1}, {"n": 2}]
    assert consumer.calls == {"start": 0, "stop": 0, "commit": 0}

    done = next(r for r in caplog.records if getattr(r, "event", "") == "convert.stream.done")
    assert done.count == 3


@pytest.mark.asyncio
async def test_stream_uses_synthetic_ids_when_keys_ignored(converter):
    consumer = AIOKafkaConsumerMock([consumer_record("clicks", 5, value=1)])
    cfg = ConverterConfig(key_ignore=True)
    [doc] = [d async for d in convert_stream(consumer, converter, cfg)]
    assert doc.key.id == "clicks+0+5"


@pytest.mark.asyncio
async def test_stream_stops_at_first_failure(converter):
    consumer = AIOKafkaConsumerMock(
        [
            consumer_record("orders", 0, key="k0", value=1),
            consumer_record("orders", 1, key=None, value=2),
            consumer_record("orders", 2, key="k2", value=3),
        ]
    )
    seen = []
    with pytest.raises(NullKeyError) as ei:
        async for doc in convert_stream(consumer, converter, ConverterConfig()):
            seen.append(doc.offset)
    assert seen == [0]
    assert ei.value.record_coordinates["offset"] == 1


@pytest.mark.asyncio
async def test_stream_from_config_reads_envelopes():
    cfg = ConverterConfig(schemas_enable=True)
    converter = DataConverter.from_config(cfg)
    value = {
        "schema": {
            "type": "struct",
            "name": "P",
            "optional": False,
            "fields": [{"field": "price", "type": "bytes", "name": "org.apache.kafka.connect.data.Decimal",
                        "version": 1, "parameters": {"scale": "2"}, "optional": False}],
        },
        "payload": {"price": "BOI="},
    }
    key = {"schema": {"type": "int64", "optional": False}, "payload": 9}
    consumer = AIOKafkaConsumerMock([consumer_record("prices", 0, key=key, value=value)])

    [doc] = [d async for d in convert_stream(consumer, converter, cfg)]
    body = json.loads(doc.payload)
    assert doc.key.id == "9"
    assert body["payload"] == {"price": 12.5}
    assert body["schema"]["fields"][0]["type"] == "double"
