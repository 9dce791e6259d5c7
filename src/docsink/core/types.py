# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
docsink.core.types
==================

Small constants shared by the schema and value rewriters and the config.
Keep this module **tiny** and dependency-free.
"""

from typing import Final

# Field names of the struct that stands in for one map entry.
MAP_KEY: Final[str] = "key"
MAP_VALUE: Final[str] = "value"

# Joins key and value type names into the entry struct's name, e.g. "STRING-INT32".
MAP_STRUCT_NAME_SEPARATOR: Final[str] = "-"

DEFAULT_DOCUMENT_TYPE: Final[str] = "_doc"


__all__ = [
    "DEFAULT_DOCUMENT_TYPE",
    "MAP_KEY",
    "MAP_STRUCT_NAME_SEPARATOR",
    "MAP_VALUE",
]
