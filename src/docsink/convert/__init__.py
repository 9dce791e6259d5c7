# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

# ids must load before converter: core.config imports it
from .ids import KeyMode, convert_key, resolve_id
from .schema_rewriter import map_entry_schema, rewrite_schema
from .value_rewriter import rewrite_value
from .converter import DataConverter

__all__ = [
    "DataConverter",
    "KeyMode",
    "convert_key",
    "map_entry_schema",
    "resolve_id",
    "rewrite_schema",
    "rewrite_value",
]
