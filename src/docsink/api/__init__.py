# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Public extension surface of docsink: the error taxonomy.
"""

from .errors import (
    ConfigError,
    ConversionError,
    DocsinkError,
    EmptyKeyError,
    InternalSchemaMismatchError,
    KeyDecodingError,
    MissingRequiredValueError,
    NullKeyError,
    SchemaError,
    UnsupportedKeyTypeError,
    classify_error,
)

__all__ = [
    "ConfigError",
    "ConversionError",
    "DocsinkError",
    "EmptyKeyError",
    "InternalSchemaMismatchError",
    "KeyDecodingError",
    "MissingRequiredValueError",
    "NullKeyError",
    "SchemaError",
    "UnsupportedKeyTypeError",
    "classify_error",
]
