"""
Structured logging for the request kernel (``request_kernel.logging_config``).

Every record emitted under the ``request_kernel`` logger is written as one
JSON object per line.  Services log short event names (``transition_committed``,
``transition_conflict`` ...) and put the details in ``extra=`` or in the
exception they attach, never in the message text.

Record layout:

    ts, level, logger, message          always
    correlation_id, request_id,
    actor_id, role                      whatever LogContext has bound
    <extra keys>                        from ``extra=``
    exc_type, exc_message, exc_code,
    exc_<attribute>                     when the record carries an exception;
                                        kernel errors contribute every public
                                        attribute (``exc_expected_status`` ...)
    traceback                           ERROR and above only

Enums are written by name (``CLUB_APPROVED``), string enums by value
(``club``); UUIDs and datetimes as strings.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any
from uuid import UUID

_LOGGER_PREFIX = "request_kernel"

CONTEXT_FIELDS: tuple[str, ...] = ("correlation_id", "request_id", "actor_id", "role")

_context: ContextVar[Mapping[str, str]] = ContextVar(
    "request_kernel_log_context", default=MappingProxyType({}),
)


class LogContext:
    """Fields stamped onto every record logged inside a ``bind`` block.

    Backed by a single ContextVar, so bindings follow the current thread
    or task and never leak into a concurrent call.
    """

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Add fields for the duration of the block; None values are skipped.

        Nested binds layer on top of the outer ones and the previous
        bindings come back on exit, even when the block raises.
        """
        unknown = sorted(set(fields) - set(CONTEXT_FIELDS))
        if unknown:
            raise TypeError(f"Unknown log context fields: {', '.join(unknown)}")
        merged = dict(_context.get())
        merged.update({k: v for k, v in fields.items() if v is not None})
        token = _context.set(MappingProxyType(merged))
        try:
            yield
        finally:
            _context.reset(token)

    @staticmethod
    def snapshot() -> dict[str, str]:
        """Currently bound fields."""
        return dict(_context.get())


_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value if isinstance(value, str) else value.name
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted((_jsonable(v) for v in value), key=str)
    return value


class StructuredFormatter(logging.Formatter):
    """One JSON line per record; see the module docstring for the layout."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.snapshot())

        for key, value in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = _jsonable(value)

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            code = getattr(exc, "code", None)
            if code is not None:
                payload["exc_code"] = code
            for name, value in vars(exc).items():
                if not name.startswith("_"):
                    payload[f"exc_{name}"] = _jsonable(value)
            if record.levelno >= logging.ERROR:
                payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``request_kernel`` namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_handler: logging.Handler | None = None
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str | None = None,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """Attach the JSON handler to the ``request_kernel`` logger.

    The handler is attached on the first call only; ``stream`` and
    ``handler`` are ignored afterwards.  ``level`` applies on every call
    that passes one, so settings loaded later can still adjust it.  The
    first call defaults the level to INFO.
    """
    global _handler
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        if _handler is None:
            _handler = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
            _handler.setFormatter(StructuredFormatter())
            kernel_logger.addHandler(_handler)
            kernel_logger.propagate = False
            if level is None:
                level = logging.INFO
        if level is not None:
            kernel_logger.setLevel(level)
    return kernel_logger
