"""Structured logging helpers shared by every layer of the service.

Purpose
    Keep log emissions predictable and machine-friendly without tying the
    package to a logging backend. The package logger is silent until the host
    (or the ``serve`` command) attaches a handler.

Contents
    - ``TRACE_ID``: context variable carrying the active trace identifier.
    - ``get_logger``: returns the package logger.
    - ``bind_trace_id``: binds or clears the trace identifier.
    - ``log_debug`` / ``log_info`` / ``log_error``: structured emitters.
    - ``make_event``: builder for layer/path event payloads.
    - ``configure_console_logging``: attaches a stream handler for ``serve``.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("greeting_service_trace_id", default=None)
"""Trace identifier attached to every structured record (e.g. one per refresh)."""

LOGGER_NAME: Final[str] = "greeting_service"
CONSOLE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s %(context)s"

_LOGGER: Final[logging.Logger] = logging.getLogger(LOGGER_NAME)
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Examples
    --------
    >>> bind_trace_id('refresh-1')
    >>> TRACE_ID.get()
    'refresh-1'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry that includes the trace context."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry that includes the trace context."""

    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry that includes the trace context."""

    _emit(logging.ERROR, message, fields)


def make_event(
    layer: str,
    path: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a ``layer``/``path`` event payload merged with optional detail.

    >>> make_event('env', None, {'keys': 3})
    {'layer': 'env', 'path': None, 'keys': 3}
    """

    event: dict[str, Any] = {"layer": layer, "path": path}
    if payload:
        event |= dict(payload)
    return event


def configure_console_logging(level: int | str = logging.INFO) -> logging.Handler:
    """Attach a console handler to the package logger and return it.

    Records emitted outside the structured helpers (Werkzeug, third-party
    code) never carry ``context``; the handler's filter fills it in so the
    shared format string always renders.
    """

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handler.addFilter(_ensure_context)
    _LOGGER.addHandler(handler)
    _LOGGER.setLevel(level)
    return handler


def _ensure_context(record: logging.LogRecord) -> bool:
    if not hasattr(record, "context"):
        record.context = {}
    return True


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    _LOGGER.log(level, message, extra={"context": context})
