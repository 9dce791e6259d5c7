from __future__ import annotations

# Runtime package version, taken from the installed distribution metadata.
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

try:
    __version__ = _pkg_version("docsink")
except PackageNotFoundError:  # pragma: no cover
    # running from a source checkout without an install
    __version__ = "0.0.0"

from .api.errors import ConversionError, DocsinkError
from .codec.json_codec import JsonCodec
from .convert.converter import DataConverter
from .convert.ids import KeyMode
from .core.config import ConverterConfig
from .data.records import DocumentKey, IndexableRecord, SinkRecord

__all__ = [
    "ConversionError",
    "ConverterConfig",
    "DataConverter",
    "DocsinkError",
    "DocumentKey",
    "IndexableRecord",
    "JsonCodec",
    "KeyMode",
    "SinkRecord",
    "__version__",
]
