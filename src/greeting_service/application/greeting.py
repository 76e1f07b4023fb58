"""Shared greeting cell and the ``/hello`` handler.

Purpose
-------
Give the handler and the refresher one owner for the current
:class:`~greeting_service.domain.greeting.GreetingConfig`. The cell stores an
immutable value and swaps the reference under a lock; readers load the
reference once per call and therefore always see a whole value.

Contents
--------
* :class:`GreetingCell` – thread-safe holder of the current greeting.
* :class:`GreetingHandler` – ``hello()`` operation served on ``GET /hello``.
"""

from __future__ import annotations

import threading

from ..domain.greeting import GreetingConfig, format_greeting
from ..observability import log_debug


class GreetingCell:
    """Atomically replaceable reference to a :class:`GreetingConfig`.

    Examples
    --------
    >>> cell = GreetingCell()
    >>> cell.current().greeting
    'Hello'
    >>> cell.replace(GreetingConfig("Howdy")).greeting
    'Hello'
    >>> cell.current().greeting, cell.version
    ('Howdy', 1)
    """

    def __init__(self, initial: GreetingConfig | None = None) -> None:
        # value and version travel together in one tuple
        self._state: tuple[GreetingConfig, int] = (initial if initial is not None else GreetingConfig(), 0)
        self._lock = threading.Lock()

    def current(self) -> GreetingConfig:
        """Return the value in effect right now."""

        return self._state[0]

    def snapshot(self) -> tuple[GreetingConfig, int]:
        """Return ``(value, version)`` as installed by the same replacement."""

        return self._state

    def replace(self, value: GreetingConfig) -> GreetingConfig:
        """Install *value* and return the one it replaced."""

        with self._lock:
            previous, version = self._state
            self._state = (value, version + 1)
            return previous

    @property
    def version(self) -> int:
        """Number of replacements since construction."""

        return self._state[1]


class GreetingHandler:
    """Render the greeting for ``GET /hello``.

    The handler owns no state beyond the cell reference; it never triggers a
    refresh and never fails.

    >>> GreetingHandler(GreetingCell(GreetingConfig("Hi"))).hello()
    'Hi World!'
    """

    def __init__(self, cell: GreetingCell) -> None:
        self._cell = cell

    @property
    def cell(self) -> GreetingCell:
        return self._cell

    def hello(self) -> str:
        """Return ``"<greeting> World!"`` for the value current at call time."""

        value, version = self._cell.snapshot()
        message = format_greeting(value)
        log_debug("hello_served", layer="handler", path=None, version=version)
        return message
