# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Record envelopes at the converter's two boundaries.

- `SinkRecord`: read-only upstream record (topic/partition/offset plus typed
  key and value with their schemas).
- `IndexableRecord`: the converter's output, one per input record: the
  document identity (`DocumentKey`), the serialized JSON payload and the source
  offset carried through for ack bookkeeping.

Output models are Pydantic v2 with `extra="forbid"` and frozen instances.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .schema import Schema

__all__ = ["DocumentKey", "IndexableRecord", "SinkRecord"]


@dataclass(frozen=True)
class SinkRecord:
    """
    A single record handed to the converter.

    Attributes:
        topic: Source topic.
        partition: Zero-based partition index.
        offset: Offset within the partition; unique per topic+partition.
        key_schema: Schema of `key`, or None for schema-less keys.
        key: Key value (may be None).
        value_schema: Schema of `value`, or None for schema-less values.
        value: Value tree (may be None, e.g. tombstones).
        timestamp: Optional record timestamp (epoch ms).
    """

    topic: str
    partition: int
    offset: int
    key_schema: Schema | None
    key: Any
    value_schema: Schema | None
    value: Any
    timestamp: int | None = None

    @property
    def coordinates(self) -> dict[str, Any]:
        return {"topic": self.topic, "partition": self.partition, "offset": self.offset}


class DocumentKey(BaseModel):
    """Destination identity of a document: index, mapping type and id."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    index: str
    type: str
    id: str

    @field_validator("index", "id")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must be a non-empty string")
        return v


class IndexableRecord(BaseModel):
    """
    Converted record ready for the destination client.

    Fields:
        key: Document identity.
        payload: UTF-8 JSON bytes of the document body.
        offset: Source offset of the record this document was built from.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    key: DocumentKey
    payload: bytes
    offset: int = Field(ge=0)
