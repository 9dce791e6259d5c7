# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Error taxonomy for docsink.

Every error raised while converting a single record is unrecoverable for that
record: retrying the same input yields the same failure. The calling layer
decides between dead-lettering and aborting; `classify_error` gives it a
stable reason code to route on.
"""

import re
from collections.abc import Mapping
from typing import Any

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


class DocsinkError(Exception):
    """
    Base class for all docsink errors.

    `record_coordinates` is attached by the converter once the failing record
    is known, so operators can locate it (topic/partition/offset).
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.record_coordinates: dict[str, Any] | None = None

    def attach(self, coordinates: Mapping[str, Any]) -> DocsinkError:
        # first attachment wins
        if self.record_coordinates is None:
            self.record_coordinates = dict(coordinates)
        return self

    def __str__(self) -> str:
        if not self.record_coordinates:
            return self.message
        where = ", ".join(f"{k}={v}" for k, v in self.record_coordinates.items())
        return f"{self.message} [{where}]"


class ConfigError(DocsinkError, ValueError):
    """Invalid converter configuration."""

    ...


class SchemaError(DocsinkError):
    """
    A schema is malformed, or a value does not fit the schema it is paired
    with (wrong Python type, unknown struct field, missing required field).
    """

    ...


class ConversionError(DocsinkError):
    """Per-record conversion failure. Never retried inside docsink."""

    ...


class NullKeyError(ConversionError):
    """The record key is used as document id but is null."""

    ...


class EmptyKeyError(ConversionError):
    """The record key renders to an empty document id."""

    ...


class UnsupportedKeyTypeError(ConversionError):
    """The key's schema type cannot be used as a document id."""

    ...


class KeyDecodingError(ConversionError):
    """An embedded JSON key is malformed or lacks `uuid`/`index`."""

    ...


class MissingRequiredValueError(ConversionError):
    """A required value is null and its schema has no default."""

    ...


class InternalSchemaMismatchError(ConversionError):
    """
    The old/new schema pair handed to the value rewriter diverges in shape.
    Indicates a bug in the schema rewriter or a caller mixing schema pairs.
    """

    ...


_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def classify_error(exc: BaseException) -> tuple[str, bool]:
    """
    Map an exception to `(reason_code, permanent)`.

    All docsink errors are permanent; anything else is reported as
    `unexpected_error` and left to the caller's retry policy.
    """
    if isinstance(exc, DocsinkError):
        return _CAMEL_RE.sub("_", type(exc).__name__).lower(), True
    return "unexpected_error", False
