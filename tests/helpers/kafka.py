from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from aiokafka.structs import ConsumerRecord

from docsink.core.log import get_logger, log_context

LOG = get_logger("test.kafka")


def _raw(x: Any) -> bytes | None:
    if x is None or isinstance(x, bytes):
        return x
    return json.dumps(x, separators=(",", ":")).encode("utf-8")


def consumer_record(
    topic: str,
    offset: int,
    *,
    key: Any = None,
    value: Any = None,
    partition: int = 0,
    timestamp: int = 1_700_000_000_000,
) -> ConsumerRecord:
    """Build an aiokafka ConsumerRecord; non-bytes key/value are JSON-encoded."""
    k, v = _raw(key), _raw(value)
    return ConsumerRecord(
        topic=topic,
        partition=partition,
        offset=offset,
        timestamp=timestamp,
        timestamp_type=0,
        key=k,
        value=v,
        checksum=None,
        serialized_key_size=len(k) if k is not None else -1,
        serialized_value_size=len(v) if v is not None else -1,
        headers=(),
    )


class AIOKafkaConsumerMock:
    """
    Replays a fixed list of records as an async iterator, the way a started
    AIOKafkaConsumer does. Lifecycle calls are counted so tests can assert the
    code under test left them alone.
    """

    def __init__(self, records: Iterable[ConsumerRecord]) -> None:
        self._records = list(records)
        self.calls: dict[str, int] = {"start": 0, "stop": 0, "commit": 0}

    async def start(self) -> None:
        self.calls["start"] += 1

    async def stop(self) -> None:
        self.calls["stop"] += 1

    async def commit(self) -> None:
        self.calls["commit"] += 1

    def __aiter__(self):
        return self._gen()

    async def _gen(self):
        for rec in self._records:
            with log_context(topic=rec.topic, partition=rec.partition, offset=rec.offset):
                LOG.debug("consumer.get", event="consumer.get")
            yield rec
