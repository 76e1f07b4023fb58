"""Immutable configuration snapshot.

Purpose
-------
Carry one resolved configuration snapshot (merged values plus provenance)
through the service. Every refresh produces a brand-new :class:`Config`; a
snapshot is never edited after it is built, which is what lets the refresher
compare the previous and the next snapshot safely.

Contents
--------
* :class:`SourceInfo` – where a dotted key came from.
* :class:`Config` – read-only ``Mapping`` with dotted lookups and provenance.
* :func:`flatten` – dotted-key view of a nested mapping.
* :data:`EMPTY_CONFIG` – shared empty snapshot.
"""

from __future__ import annotations

import json
from collections.abc import Mapping as MappingABC
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, TypedDict


class SourceInfo(TypedDict):
    """Provenance of a resolved key.

    Attributes
    ----------
    layer:
        ``"app"``, ``"host"``, ``"user"``, ``"dotenv"``, ``"env"`` or a
        caller-supplied name for static sources.
    path:
        File that supplied the key, ``None`` for in-memory sources.
    key:
        Fully qualified dotted key (for example ``"server.port"``).
    """

    layer: str
    path: str | None
    key: str


@dataclass(frozen=True, slots=True)
class Config(MappingABC[str, Any]):
    """Read-only mapping over a merged configuration tree.

    Examples
    --------
    >>> cfg = Config(
    ...     {"greeting": "Hi", "server": {"port": 9000}},
    ...     {"greeting": {"layer": "env", "path": None, "key": "greeting"}},
    ... )
    >>> cfg.get("server.port")
    9000
    >>> cfg.get("server.host", default="127.0.0.1")
    '127.0.0.1'
    >>> cfg.origin("greeting")["layer"]
    'env'
    """

    _data: Mapping[str, Any]
    _meta: Mapping[str, SourceInfo]

    def __post_init__(self) -> None:
        object.__setattr__(self, "_data", MappingProxyType(dict(self._data)))
        object.__setattr__(self, "_meta", MappingProxyType(dict(self._meta)))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str, *, default: Any = None) -> Any:  # type: ignore[override]
        """Resolve *key* as a dotted path, returning *default* when any segment is missing."""

        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, MappingABC) or part not in current:
                return default
            current = current[part]
        return current

    def origin(self, key: str) -> SourceInfo | None:
        """Return provenance for the dotted *key* or ``None`` when no layer set it."""

        return self._meta.get(key)

    def as_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy of the configuration tree.

        Examples
        --------
        >>> cfg = Config({"server": {"port": 8080}}, {})
        >>> clone = cfg.as_dict()
        >>> clone["server"]["port"] = 1
        >>> cfg.get("server.port")
        8080
        """

        return _thaw(self._data)

    def provenance(self) -> dict[str, SourceInfo]:
        """Return a plain ``dict`` copy of the provenance table."""

        return {key: SourceInfo(**info) for key, info in self._meta.items()}

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise the configuration tree as compact JSON.

        >>> Config({"greeting": "Hi"}, {}).to_json()
        '{"greeting":"Hi"}'
        """

        return json.dumps(self.as_dict(), indent=indent, separators=(",", ":"), ensure_ascii=False)

    def with_overrides(self, overrides: Mapping[str, Any]) -> Config:
        """Return a new snapshot with top-level *overrides* applied; provenance is shared."""

        merged = dict(self._data)
        merged.update(overrides)
        return Config(merged, self._meta)


def flatten(mapping: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Return ``{dotted_key: leaf_value}`` for every scalar leaf of *mapping*.

    Empty tables are kept as leaves so their appearance or removal is visible.

    >>> flatten({"server": {"host": "::", "port": 80}, "greeting": "Hi"})
    {'server.host': '::', 'server.port': 80, 'greeting': 'Hi'}
    """

    flat: dict[str, Any] = {}
    for key, value in mapping.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, MappingABC) and value:
            flat.update(flatten(value, dotted))
        else:
            flat[dotted] = value
    return flat


def _thaw(value: Any) -> Any:
    if isinstance(value, MappingABC):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_thaw(item) for item in value]
    if isinstance(value, (set, tuple)):
        return type(value)(_thaw(item) for item in value)
    return value


EMPTY_CONFIG = Config({}, {})
"""Snapshot used when no layer produced any value."""
