# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
docsink.core.log
================

Structured logging for the `docsink` logger namespace.

- Silent by default (NullHandler); applications opt in via
  `enable_stdout_logging()` or `configure_from_env()`.
- `get_logger()` returns an adapter accepting keyword fields:
      log.info("converted", event="convert.record.ok", index=..., doc_id=...)
- `log_context()` scopes record coordinates (topic/partition/offset) to the
  current thread/task via contextvars; formatters merge them into each line.
"""

import contextvars
import json
import logging
import os
import sys
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, ClassVar, Final

__all__ = [
    "bind_context",
    "configure_from_env",
    "disable_stdout_logging",
    "enable_stdout_logging",
    "get_logger",
    "log_context",
    "set_level",
]

# ---------- Context ----------

_log_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar("docsink_log_ctx", default=None)


def _ctx_copy() -> dict[str, Any]:
    ctx = _log_context.get()
    return dict(ctx) if ctx else {}


def bind_context(**fields: Any) -> None:
    """Merge fields into the current structured log context."""
    ctx = _ctx_copy()
    ctx.update({k: v for k, v in fields.items() if v is not None})
    _log_context.set(ctx)


@contextmanager
def log_context(**fields: Any):
    """
    Temporarily add fields to the structured log context.
    Restores the previous context on exit.
    """
    token = _log_context.set({**_ctx_copy(), **{k: v for k, v in fields.items() if v is not None}})
    try:
        yield
    finally:
        _log_context.reset(token)


# ---------- Formatters ----------

# attributes every LogRecord carries; anything else came in through `extra`
_STD_ATTRS: Final[frozenset[str]] = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {
    "message",
    "asctime",
}
_COORD_KEYS: Final[tuple[str, ...]] = ("topic", "partition", "offset")


def _iso_utc_ms(ts: float) -> str:
    dt = datetime.fromtimestamp(ts, tz=UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line: ts, level, logger, message, context fields,
    `extra` fields and, when present, the exception type/message.
    """

    def __init__(self, *, include_stack: bool = False) -> None:
        super().__init__()
        self.include_stack = include_stack

    def format(self, record: logging.LogRecord) -> str:
        out: dict[str, Any] = {
            "ts": _iso_utc_ms(record.created),
            "level": record.levelname,
            "logger": record.name,
        }
        msg = record.getMessage()
        if msg:
            out["message"] = msg

        ctx = _log_context.get()
        if ctx:
            out.update(ctx)

        for k, v in record.__dict__.items():
            if k in _STD_ATTRS or k in out:
                continue
            out[k] = v

        if record.exc_info:
            exc_type = record.exc_info[0].__name__ if record.exc_info[0] else "Exception"
            out["error"] = {
                "type": exc_type,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }
            if self.include_stack:
                out["error"]["stack"] = self.formatException(record.exc_info)

        return json.dumps(out, ensure_ascii=False, separators=(",", ":"), default=str)


class HumanFormatter(logging.Formatter):
    """Compact formatter for local debugging."""

    default_time_format = "%Y-%m-%d %H:%M:%S"
    default_msec_format = "%s.%03d"

    def format(self, record: logging.LogRecord) -> str:
        s = f"{self.formatTime(record)} {record.levelname:<5} {record.name}: {record.getMessage()}"
        ctx = _log_context.get()
        if ctx:
            compact = {k: ctx[k] for k in _COORD_KEYS if ctx.get(k) is not None}
            if compact:
                s += "  [" + ", ".join(f"{k}={v}" for k, v in compact.items()) + "]"
        if record.exc_info:
            s += "\n" + self.formatException(record.exc_info)
        return s


# ---------- Filters / adapter ----------


class ContextFilter(logging.Filter):
    """Copy context fields onto the record so handlers and caplog can see them."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _log_context.get()
        if ctx:
            for k, v in ctx.items():
                if k not in record.__dict__:
                    record.__dict__[k] = v
        return True


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= self.max_level


class _KwExtraAdapter(logging.LoggerAdapter):
    """
    Moves unknown keyword arguments into `extra={...}`; names that clash with
    LogRecord attributes are prefixed with `field_`.
    """

    _allowed_passthrough: ClassVar[frozenset[str]] = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

    def process(self, msg, kwargs):
        extra = kwargs.get("extra")
        if not isinstance(extra, dict):
            extra = {}
        for k in [k for k in kwargs if k not in self._allowed_passthrough]:
            v = kwargs.pop(k)
            key = f"field_{k}" if k in _STD_ATTRS else k
            extra.setdefault(key, v)
        kwargs["extra"] = extra
        return msg, kwargs


# ---------- Public configuration API ----------

_DOCSINK_LOGGER_NAME = "docsink"
_configured = False
_stdout_handler_key = "_docsink_stdout_handler"
_stderr_handler_key = "_docsink_stderr_handler"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Invalid level name: {level!r}")
        return resolved
    return level


def _bootstrap_minimal() -> None:
    global _configured
    if _configured:
        return
    lg = logging.getLogger(_DOCSINK_LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in lg.handlers):
        lg.addHandler(logging.NullHandler())
    if not any(isinstance(f, ContextFilter) for f in lg.filters):
        lg.addFilter(ContextFilter())
    _configured = True


def get_logger(name: str | None = None) -> logging.LoggerAdapter:
    """Namespaced logger adapter under `docsink` accepting keyword fields."""
    _bootstrap_minimal()
    base = logging.getLogger(_DOCSINK_LOGGER_NAME)
    target = base.getChild(name) if name else base
    if not any(isinstance(f, ContextFilter) for f in target.filters):
        target.addFilter(ContextFilter())
    return _KwExtraAdapter(target, {})


def set_level(level: int | str) -> None:
    logging.getLogger(_DOCSINK_LOGGER_NAME).setLevel(_resolve_level(level))


def _make_formatter(*, json_output: bool, include_stack: bool, pretty: bool) -> logging.Formatter:
    if pretty:
        return HumanFormatter()
    if json_output:
        return JsonFormatter(include_stack=include_stack)
    return logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")


def _stream_handler(stream: Any, name: str, level: int, fmt: logging.Formatter) -> logging.Handler:
    h = logging.StreamHandler(stream)
    h.set_name(name)
    h.setLevel(level)
    h.setFormatter(fmt)
    return h


def enable_stdout_logging(
    *,
    level: int | str = logging.INFO,
    json_output: bool = True,
    include_stack: bool = False,
    pretty: bool = False,
    route_errors_to_stderr: bool = False,
) -> None:
    """
    Attach stream handlers to the `docsink` logger.
    - pretty=True -> HumanFormatter; else json_output -> JsonFormatter
    - route_errors_to_stderr=True -> ERROR+ to stderr, the rest to stdout
    """
    level = _resolve_level(level)
    _bootstrap_minimal()
    lg = logging.getLogger(_DOCSINK_LOGGER_NAME)
    disable_stdout_logging()

    fmt = _make_formatter(json_output=json_output, include_stack=include_stack, pretty=pretty)
    h_out = _stream_handler(sys.stdout, _stdout_handler_key, level, fmt)
    if route_errors_to_stderr:
        h_out.addFilter(_MaxLevelFilter(logging.WARNING))
        lg.addHandler(_stream_handler(sys.stderr, _stderr_handler_key, max(level, logging.ERROR), fmt))
    lg.addHandler(h_out)
    if lg.level == logging.NOTSET or lg.level > level:
        lg.setLevel(level)


def disable_stdout_logging() -> None:
    """Detach handlers installed by `enable_stdout_logging`, if any."""
    lg = logging.getLogger(_DOCSINK_LOGGER_NAME)
    for h in list(lg.handlers):
        if h.get_name() in (_stdout_handler_key, _stderr_handler_key):
            lg.removeHandler(h)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes", "on")


def configure_from_env() -> None:
    """
    Optional: call once in application entrypoints/tests.
    Honors:
      - DOCSINK_LOG_STDOUT=1|true -> enable stdout
      - DOCSINK_LOG_LEVEL=DEBUG|INFO|...
      - DOCSINK_LOG_PRETTY=1 -> human formatter instead of JSON
      - DOCSINK_LOG_STACK=1 -> include stack in JSON logs
    """
    level = os.getenv("DOCSINK_LOG_LEVEL", "INFO")
    pretty = _env_flag("DOCSINK_LOG_PRETTY")

    _bootstrap_minimal()
    set_level(level)
    if _env_flag("DOCSINK_LOG_STDOUT"):
        enable_stdout_logging(
            level=level, json_output=not pretty, include_stack=_env_flag("DOCSINK_LOG_STACK"), pretty=pretty
        )
    else:
        disable_stdout_logging()


_bootstrap_minimal()
