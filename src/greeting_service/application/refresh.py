"""Refresh orchestration.

Purpose
-------
Re-resolve configuration from a :class:`~greeting_service.application.ports.ConfigSource`,
install the resulting greeting into the shared cell, and report which dotted
keys changed. Whatever triggers a refresh (an admin endpoint, a poller, a
signal handler) only needs to call :meth:`ConfigRefresher.refresh`.

Contents
--------
* :class:`ConfigRefresher` – the refresh operation.
* :func:`changed_keys` – dotted-key diff between two snapshots.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Mapping
from typing import Any

from ..domain.config import EMPTY_CONFIG, Config, flatten
from ..domain.errors import ConfigError
from ..domain.greeting import greeting_from_config
from ..observability import bind_trace_id, log_error, log_info
from .greeting import GreetingCell
from .ports import ConfigSource


class ConfigRefresher:
    """Reload configuration and swap the greeting in place.

    Refreshes are serialised; a failed refresh leaves both the cell and
    :attr:`config` untouched and re-raises the :class:`ConfigError`.

    Examples
    --------
    >>> from greeting_service.adapters.static import StaticConfigSource
    >>> source = StaticConfigSource({"greeting": "Hello"})
    >>> cell = GreetingCell()
    >>> refresher = ConfigRefresher(source, cell, initial=source.load())
    >>> source.update({"greeting": "Howdy"})
    >>> refresher.refresh()
    ('greeting',)
    >>> cell.current().greeting
    'Howdy'
    """

    def __init__(self, source: ConfigSource, cell: GreetingCell, *, initial: Config | None = None) -> None:
        self._source = source
        self._cell = cell
        self._config = initial if initial is not None else EMPTY_CONFIG
        self._lock = threading.Lock()

    @property
    def config(self) -> Config:
        """Last snapshot that was loaded successfully."""

        return self._config

    @property
    def cell(self) -> GreetingCell:
        return self._cell

    def refresh(self) -> tuple[str, ...]:
        """Reload configuration and return the sorted dotted keys that changed."""

        with self._lock:
            bind_trace_id(f"refresh-{uuid.uuid4().hex[:12]}")
            try:
                return self._refresh_locked()
            finally:
                bind_trace_id(None)

    def _refresh_locked(self) -> tuple[str, ...]:
        try:
            snapshot = self._source.load()
            greeting = greeting_from_config(snapshot)
        except ConfigError as exc:
            log_error("refresh_failed", layer="refresh", path=None, error=str(exc))
            raise
        changed = changed_keys(self._config, snapshot)
        self._config = snapshot
        previous = self._cell.replace(greeting)
        log_info(
            "greeting_refreshed",
            layer="refresh",
            path=None,
            changed=list(changed),
            previous=previous.greeting,
            current=greeting.greeting,
        )
        return changed


def changed_keys(before: Mapping[str, Any], after: Mapping[str, Any]) -> tuple[str, ...]:
    """Return sorted dotted keys added, removed, or modified between two snapshots.

    >>> changed_keys({"greeting": "Hi", "server": {"port": 1}}, {"server": {"port": 2}, "extra": True})
    ('extra', 'greeting', 'server.port')
    >>> changed_keys({"a": 1}, {"a": 1})
    ()
    """

    old = flatten(before)
    new = flatten(after)
    keys = old.keys() | new.keys()
    _missing = object()
    return tuple(sorted(key for key in keys if old.get(key, _missing) != new.get(key, _missing)))
