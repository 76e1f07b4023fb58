"""Refresher behaviour: swapping the greeting, reporting changed keys, failure handling."""

from __future__ import annotations

import logging
import threading

import pytest

from greeting_service.adapters.static import StaticConfigSource
from greeting_service.application.greeting import GreetingCell, GreetingHandler
from greeting_service.application.refresh import ConfigRefresher, changed_keys
from greeting_service.domain.config import Config
from greeting_service.domain.errors import ConfigError, InvalidFormat
from greeting_service.domain.greeting import GreetingConfig


class FlakySource:
    """Source that fails on demand, standing in for an unreachable config service."""

    def __init__(self, data: dict) -> None:
        self.inner = StaticConfigSource(data)
        self.fail = False

    def load(self) -> Config:
        if self.fail:
            raise InvalidFormat("config service returned garbage")
        return self.inner.load()


def _wire(source) -> tuple[ConfigRefresher, GreetingHandler]:
    snapshot = source.load()
    cell = GreetingCell(GreetingConfig(snapshot.get("greeting", default="Hello")))
    return ConfigRefresher(source, cell, initial=snapshot), GreetingHandler(cell)


def test_refresh_replaces_greeting_mid_session() -> None:
    source = StaticConfigSource({"greeting": "Hello"})
    refresher, handler = _wire(source)
    assert handler.hello() == "Hello World!"

    source.update({"greeting": "Howdy"})
    assert refresher.refresh() == ("greeting",)
    assert handler.hello() == "Howdy World!"
    assert refresher.config.get("greeting") == "Howdy"


def test_refresh_without_changes_reports_nothing() -> None:
    source = StaticConfigSource({"greeting": "Hi", "server": {"port": 9000}})
    refresher, handler = _wire(source)
    assert refresher.refresh() == ()
    assert handler.hello() == "Hi World!"


def test_removing_greeting_falls_back_to_default() -> None:
    source = StaticConfigSource({"greeting": "Hi"})
    refresher, handler = _wire(source)
    source.update({})
    assert refresher.refresh() == ("greeting",)
    assert handler.hello() == "Hello World!"


def test_failed_refresh_keeps_previous_value(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="greeting_service")
    source = FlakySource({"greeting": "Hi"})
    refresher, handler = _wire(source)
    source.fail = True
    with pytest.raises(ConfigError):
        refresher.refresh()
    assert handler.hello() == "Hi World!"
    assert refresher.config.get("greeting") == "Hi"
    assert any(record.getMessage() == "refresh_failed" for record in caplog.records)


def test_invalid_greeting_type_keeps_previous_value() -> None:
    source = StaticConfigSource({"greeting": "Hi"})
    refresher, handler = _wire(source)
    source.update({"greeting": {"text": "Yo"}})
    with pytest.raises(ConfigError):
        refresher.refresh()
    assert handler.hello() == "Hi World!"


def test_refresh_log_carries_trace_id(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="greeting_service")
    source = StaticConfigSource({"greeting": "Hello"})
    refresher, _ = _wire(source)
    source.update({"greeting": "Howdy"})
    refresher.refresh()
    record = next(r for r in caplog.records if r.getMessage() == "greeting_refreshed")
    context = getattr(record, "context")
    assert context["trace_id"].startswith("refresh-")
    assert context["previous"] == "Hello"
    assert context["current"] == "Howdy"


def test_concurrent_refreshes_and_reads() -> None:
    source = StaticConfigSource({"greeting": "Hello"})
    refresher, handler = _wire(source)
    results: list[str] = []
    lock = threading.Lock()

    def flip(value: str) -> None:
        for _ in range(50):
            source.update({"greeting": value})
            refresher.refresh()

    def read() -> None:
        local = [handler.hello() for _ in range(500)]
        with lock:
            results.extend(local)

    threads = [
        threading.Thread(target=flip, args=("Hello",)),
        threading.Thread(target=flip, args=("Howdy",)),
        threading.Thread(target=read),
        threading.Thread(target=read),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert set(results) <= {"Hello World!", "Howdy World!"}


def test_changed_keys_covers_added_removed_and_modified() -> None:
    before = {"greeting": "Hi", "server": {"port": 1, "host": "a"}}
    after = {"server": {"port": 2, "host": "a"}, "refresh": {"interval": 5}}
    assert changed_keys(before, after) == ("greeting", "refresh.interval", "server.port")
