"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Structural contracts the composition root and the refresher depend on, so the
configuration transport and the refresh trigger stay pluggable.

Contents
--------
* :class:`PathResolver` – candidate files per configuration layer.
* :class:`FileLoader` – parses one structured file.
* :class:`DotEnvLoader` – loads the first discovered ``.env`` file.
* :class:`EnvLoader` – captures prefixed environment variables.
* :class:`ConfigSource` – produces a fresh configuration snapshot on demand.
* :class:`RefreshTrigger` – decides *when* a refresh happens.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol, runtime_checkable

from ..domain.config import Config


@runtime_checkable
class PathResolver(Protocol):
    """Discover configuration artifacts for each logical layer."""

    def app(self) -> Iterable[str]:
        """Yield candidate system-wide configuration paths."""

    def host(self) -> Iterable[str]:
        """Yield host-specific overrides."""

    def user(self) -> Iterable[str]:
        """Yield user-level configuration locations."""

    def dotenv(self) -> Iterable[str]:
        """Yield extra ``.env`` candidates outside the upward search."""


@runtime_checkable
class FileLoader(Protocol):
    """Parse a structured configuration file into a mapping."""

    def load(self, path: str) -> Mapping[str, object]:
        """Read *path* and return a mapping or raise ``InvalidFormat``/``NotFound``."""


@runtime_checkable
class DotEnvLoader(Protocol):
    """Materialise a ``.env`` file into nested dictionaries."""

    def load(self, start_dir: str | None = None) -> Mapping[str, object]:
        """Search from *start_dir* upwards (plus extras) and return the first parsed file."""


@runtime_checkable
class EnvLoader(Protocol):
    """Translate process environment variables into nested dictionaries."""

    def load(self, prefix: str) -> Mapping[str, object]:
        """Return variables that match *prefix* (``__`` for nesting)."""


@runtime_checkable
class ConfigSource(Protocol):
    """Where configuration snapshots come from.

    Implementations may read files, query a remote configuration service, or
    hold values in memory. ``load`` is called once at startup and again on
    every refresh, possibly from a background thread.
    """

    def load(self) -> Config:
        """Return a complete, freshly resolved snapshot or raise ``ConfigError``."""


@runtime_checkable
class RefreshTrigger(Protocol):
    """Something that calls the refresher when configuration may have changed."""

    def start(self) -> None:
        """Begin watching; must return promptly."""

    def stop(self) -> None:
        """Stop watching and release resources."""
