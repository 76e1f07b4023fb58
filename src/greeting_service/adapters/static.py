"""In-memory configuration source.

Used when the service is embedded in another process that already owns its
configuration, and throughout the test-suite. ``update`` stands in for an
external configuration service pushing a new revision.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping

from ..application.merge import merge_layers
from ..domain.config import Config


class StaticConfigSource:
    """Serve a replaceable in-memory payload as a :class:`Config` snapshot.

    >>> source = StaticConfigSource({"greeting": "Hi"}, layer="memory")
    >>> snapshot = source.load()
    >>> snapshot.get("greeting"), snapshot.origin("greeting")["layer"]
    ('Hi', 'memory')
    """

    def __init__(self, data: Mapping[str, object] | None = None, *, layer: str = "static") -> None:
        self._layer = layer
        self._data: Mapping[str, object] = dict(data or {})
        self._lock = threading.Lock()

    def update(self, data: Mapping[str, object]) -> None:
        """Replace the payload returned by subsequent :meth:`load` calls."""

        with self._lock:
            self._data = dict(data)

    def load(self) -> Config:
        with self._lock:
            payload = self._data
        merged, meta = merge_layers([(self._layer, payload, None)])
        return Config(merged, meta)
