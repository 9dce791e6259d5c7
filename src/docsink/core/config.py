# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
docsink.core.config
===================

Strongly-typed converter configuration.
- No external deps; optional JSON file loading.
- Per-topic overrides for index name, key handling and schema handling.
- Small env overrides for convenience.

If a config file path is not provided or not found, defaults are used.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..api.errors import ConfigError
from ..convert.ids import KeyMode
from .types import DEFAULT_DOCUMENT_TYPE


def _parse_csv_env(name: str) -> list[str]:
    val = os.getenv(name)
    if not val:
        return []
    return [s.strip() for s in val.split(",") if s.strip()]


def _parse_bool_env(name: str) -> bool | None:
    val = os.getenv(name)
    if val is None or not val.strip():
        return None
    return val.strip().lower() in ("1", "true", "yes", "on")


def _try_load_json(path: Path | None) -> dict[str, Any]:
    if not path or not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")
    return data


# ---------------------------------------------------------------------------


@dataclass
class ConverterConfig:
    """Record-to-document conversion settings."""

    # ---- Document identity
    type_name: str = DEFAULT_DOCUMENT_TYPE
    topic_index_map: dict[str, str] = field(default_factory=dict)

    # ---- Key handling
    key_ignore: bool = False
    json_key: bool = False
    topic_key_ignore: list[str] = field(default_factory=list)

    # ---- Schema handling
    schema_ignore: bool = False
    topic_schema_ignore: list[str] = field(default_factory=list)

    # ---- Codec
    schemas_enable: bool = False

    # ---- Methods ------------------------------------------------------------

    def __post_init__(self) -> None:
        if not isinstance(self.type_name, str) or not self.type_name:
            raise ConfigError("type_name must be a non-empty string")
        if not isinstance(self.topic_index_map, dict) or not all(
            isinstance(k, str) and isinstance(v, str) and k and v for k, v in self.topic_index_map.items()
        ):
            raise ConfigError("topic_index_map must map non-empty topic names to non-empty index names")
        for name in ("topic_key_ignore", "topic_schema_ignore"):
            topics = getattr(self, name)
            if not isinstance(topics, list) or not all(isinstance(x, str) and x for x in topics):
                raise ConfigError(f"{name} must be a list of non-empty strings")

    # Per-topic helpers
    def index_for(self, topic: str) -> str:
        """Destination index: explicit mapping, else the topic lower-cased."""
        return self.topic_index_map.get(topic) or topic.lower()

    def key_mode_for(self, topic: str) -> KeyMode:
        if self.json_key:
            return KeyMode.EMBEDDED
        if self.key_ignore or topic in self.topic_key_ignore:
            return KeyMode.SYNTHETIC
        return KeyMode.DIRECT

    def rewrite_schemas_for(self, topic: str) -> bool:
        return not (self.schema_ignore or topic in self.topic_schema_ignore)

    # Loader
    @classmethod
    def load(cls, path: Path | str | None = None, *, overrides: dict[str, Any] | None = None) -> ConverterConfig:
        """
        Load config from JSON file (if provided), then apply env and overrides.

        Env overrides:
          - DOCSINK_TYPE_NAME
          - DOCSINK_KEY_IGNORE, DOCSINK_SCHEMA_IGNORE, DOCSINK_JSON_KEY (bool)
          - DOCSINK_TOPIC_KEY_IGNORE, DOCSINK_TOPIC_SCHEMA_IGNORE (comma-separated)
        """
        data: dict[str, Any] = {}

        # File
        data.update(_try_load_json(Path(path) if path else None))

        # Env
        if os.getenv("DOCSINK_TYPE_NAME"):
            data["type_name"] = os.environ["DOCSINK_TYPE_NAME"]
        for env_name, key in (
            ("DOCSINK_KEY_IGNORE", "key_ignore"),
            ("DOCSINK_SCHEMA_IGNORE", "schema_ignore"),
            ("DOCSINK_JSON_KEY", "json_key"),
        ):
            flag = _parse_bool_env(env_name)
            if flag is not None:
                data[key] = flag
        for env_name, key in (
            ("DOCSINK_TOPIC_KEY_IGNORE", "topic_key_ignore"),
            ("DOCSINK_TOPIC_SCHEMA_IGNORE", "topic_schema_ignore"),
        ):
            topics = _parse_csv_env(env_name)
            if topics:
                data[key] = topics

        # Overrides
        if overrides:
            data.update(overrides)

        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(f"invalid config: {e}") from e
