# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from .kafka import convert_stream, sink_record_from_consumer_record

__all__ = ["convert_stream", "sink_record_from_consumer_record"]
