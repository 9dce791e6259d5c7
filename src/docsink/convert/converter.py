# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Record -> document conversion.

`DataConverter.convert_record` is the entry point: it resolves the document
id, rewrites the value schema/value pair (unless disabled or in embedded-key
mode), serializes the result and assembles an `IndexableRecord`.

The converter holds two immutable codecs and a logger, so one instance can
serve any number of threads or tasks concurrently.
"""

from collections.abc import Iterable
from typing import Any

from ..api.errors import DocsinkError, classify_error
from ..codec.json_codec import Codec, JsonCodec
from ..core.config import ConverterConfig
from ..core.log import get_logger, log_context
from ..data.records import DocumentKey, IndexableRecord, SinkRecord
from .ids import KeyMode, resolve_id
from .schema_rewriter import rewrite_schema
from .value_rewriter import rewrite_value

__all__ = ["DataConverter"]


class DataConverter:
    """
    Converts `SinkRecord`s into `IndexableRecord`s.

    Args:
        codec: Serializes the document body. Defaults to a schema-less JSON codec.
        key_codec: Reads embedded JSON keys; must be schema-less.
    """

    def __init__(self, codec: Codec | None = None, *, key_codec: Codec | None = None) -> None:
        self._codec = codec or JsonCodec(schemas_enable=False)
        self._key_codec = key_codec or JsonCodec(schemas_enable=False)
        self.log = get_logger("convert")

    @classmethod
    def from_config(cls, cfg: ConverterConfig) -> DataConverter:
        return cls(JsonCodec(schemas_enable=cfg.schemas_enable))

    @property
    def codec(self) -> Codec:
        return self._codec

    def convert_record(
        self,
        record: SinkRecord,
        index: str,
        doc_type: str,
        key_mode: KeyMode,
        rewrite_schemas: bool = True,
    ) -> IndexableRecord:
        """
        Convert one record.

        In EMBEDDED mode the key also overrides `index`, and the value is
        serialized as-is. Otherwise the value is rewritten for the document
        store when `rewrite_schemas` is true.

        Raises:
            DocsinkError: any per-record failure, annotated with the record's
                topic/partition/offset.
        """
        with log_context(**record.coordinates):
            try:
                doc = self._convert(record, index, doc_type, key_mode, rewrite_schemas)
            except DocsinkError as e:
                e.attach(record.coordinates)
                reason, _ = classify_error(e)
                self.log.error(
                    "record conversion failed",
                    event="convert.record.failed",
                    reason=reason,
                    error=e.message,
                    key_mode=key_mode.value,
                )
                raise
        return doc

    def _convert(
        self,
        record: SinkRecord,
        index: str,
        doc_type: str,
        key_mode: KeyMode,
        rewrite_schemas: bool,
    ) -> IndexableRecord:
        doc_id, index_override = resolve_id(record, key_mode, self._key_codec)

        schema: Any
        if key_mode is KeyMode.EMBEDDED or not rewrite_schemas:
            schema, value = record.value_schema, record.value
        else:
            schema = rewrite_schema(record.value_schema)
            value = rewrite_value(record.value, record.value_schema, schema)

        payload = self._codec.encode(record.topic, schema, value)
        key = DocumentKey(index=index_override or index, type=doc_type, id=doc_id)
        self.log.debug("record converted", event="convert.record.ok", index=key.index, doc_id=doc_id)
        return IndexableRecord(key=key, payload=payload, offset=record.offset)

    # ---- Config-driven shortcuts -------------------------------------------

    def convert(self, record: SinkRecord, cfg: ConverterConfig) -> IndexableRecord:
        """Convert using the per-topic settings of `cfg`."""
        return self.convert_record(
            record,
            index=cfg.index_for(record.topic),
            doc_type=cfg.type_name,
            key_mode=cfg.key_mode_for(record.topic),
            rewrite_schemas=cfg.rewrite_schemas_for(record.topic),
        )

    def convert_all(self, records: Iterable[SinkRecord], cfg: ConverterConfig) -> list[IndexableRecord]:
        """Convert records 1:1 in order; the first failure aborts the call."""
        return [self.convert(r, cfg) for r in records]
