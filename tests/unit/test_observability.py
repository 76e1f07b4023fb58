"""Structured logging helpers: null handler, trace binding, event payloads."""

from __future__ import annotations

import logging

import pytest

from greeting_service import bind_trace_id, get_logger
from greeting_service.observability import TRACE_ID, configure_console_logging, log_info, make_event


def test_null_handler_present() -> None:
    """The package logger stays silent until a host attaches a handler."""

    logger = get_logger()
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="greeting_service")
    bind_trace_id("trace-123")
    try:
        log_info("greeting_refreshed", layer="refresh", path=None)
    finally:
        bind_trace_id(None)
    record = caplog.records[-1]
    assert record.getMessage() == "greeting_refreshed"
    assert getattr(record, "context") == {"trace_id": "trace-123", "layer": "refresh", "path": None}


def test_bind_trace_id_clears_context() -> None:
    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    assert make_event("env", None, {"keys": 3}) == {"layer": "env", "path": None, "keys": 3}
    assert make_event("app", "/etc/x.toml") == {"layer": "app", "path": "/etc/x.toml"}


def test_console_logging_formats_foreign_records() -> None:
    logger = get_logger()
    previous_level = logger.level
    handler = configure_console_logging(logging.DEBUG)
    try:
        record = logging.LogRecord("greeting_service.web", logging.INFO, __file__, 1, "plain", None, None)
        assert handler.filter(record)
        assert "plain {}" in handler.format(record)
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
