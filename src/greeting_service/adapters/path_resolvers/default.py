"""Filesystem path resolution for configuration layers.

Purpose
-------
Know where each layer's files live on Linux, macOS and Windows so the
composition root never touches platform conventions. Every root directory can
be redirected with a ``GREETING_LAYER_*`` variable, which is how the tests and
containerised deployments point the service at their own trees.

Layout
------
============  ==========================================  ===============================================
Layer         Linux                                       macOS / Windows
============  ==========================================  ===============================================
``app``       ``$GREETING_LAYER_ETC/<slug>/``             ``Application Support/<vendor>/<app>/`` /
              (default ``/etc/<slug>/``)                  ``ProgramData\\<vendor>\\<app>\\``
``host``      ``<app dir>/hosts/<hostname>.toml``         same, under the app directory
``user``      ``$XDG_CONFIG_HOME/<slug>/``                ``~/Library/Application Support/<vendor>/<app>/``
                                                          / ``%APPDATA%\\<vendor>\\<app>\\``
============  ==========================================  ===============================================

Each ``app``/``user`` directory contributes ``config.toml`` followed by the
sorted entries of ``config.d/``.
"""

from __future__ import annotations

import os
import socket
import sys
from pathlib import Path
from typing import Iterator, Mapping

from ...observability import log_debug

_ALLOWED_EXTENSIONS = (".toml", ".yaml", ".yml", ".json")

ENV_ETC = "GREETING_LAYER_ETC"
ENV_MAC_APP_ROOT = "GREETING_LAYER_MAC_APP_ROOT"
ENV_MAC_HOME_ROOT = "GREETING_LAYER_MAC_HOME_ROOT"
ENV_PROGRAMDATA = "GREETING_LAYER_PROGRAMDATA"
ENV_APPDATA = "GREETING_LAYER_APPDATA"
ENV_LOCALAPPDATA = "GREETING_LAYER_LOCALAPPDATA"


class DefaultPathResolver:
    """Resolve candidate paths for each configuration layer.

    Parameters
    ----------
    vendor / app / slug:
        Naming context; Linux uses *slug*, macOS and Windows use
        ``<vendor>/<app>``.
    env:
        Overrides merged on top of :data:`os.environ`.
    platform / hostname:
        Defaults to the running interpreter and machine.
    """

    def __init__(
        self,
        *,
        vendor: str,
        app: str,
        slug: str,
        env: Mapping[str, str] | None = None,
        platform: str | None = None,
        hostname: str | None = None,
    ) -> None:
        self.vendor = vendor
        self.application = app
        self.slug = slug
        self.env = {**os.environ, **(env or {})}
        self.platform = platform or sys.platform
        self.hostname = hostname or socket.gethostname()

    def app(self) -> list[str]:
        """Return system-wide files (lowest precedence)."""

        return self._collect("app", _layer_files(self._app_dir()))

    def host(self) -> list[str]:
        """Return the ``hosts/<hostname>.toml`` override when it exists."""

        candidate = self._app_dir() / "hosts" / f"{self.hostname}.toml"
        return self._collect("host", [str(candidate)] if candidate.is_file() else [])

    def user(self) -> list[str]:
        """Return per-user files."""

        return self._collect("user", _layer_files(self._user_dir()))

    def dotenv(self) -> list[str]:
        """Return the user-directory ``.env`` (the upward search is the dotenv loader's job).

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> target = Path(tmp.name) / "greeting-service"
        >>> target.mkdir()
        >>> _ = (target / ".env").write_text("GREETING=Hi", encoding="utf-8")
        >>> resolver = DefaultPathResolver(vendor="Acme", app="Greeter", slug="greeting-service",
        ...                                env={"XDG_CONFIG_HOME": tmp.name}, platform="linux")
        >>> [Path(p).name for p in resolver.dotenv()]
        ['.env']
        >>> tmp.cleanup()
        """

        candidate = self._user_dir() / ".env"
        return [str(candidate)] if candidate.is_file() else []

    def _collect(self, layer: str, paths: list[str]) -> list[str]:
        if paths:
            log_debug("path_candidates", layer=layer, path=None, count=len(paths))
        return paths

    def _app_dir(self) -> Path:
        if self.platform == "darwin":
            root = self.env.get(ENV_MAC_APP_ROOT, "/Library/Application Support")
            return Path(root) / self.vendor / self.application
        if self.platform.startswith("win"):
            root = self.env.get(ENV_PROGRAMDATA, self.env.get("ProgramData", r"C:\ProgramData"))
            return Path(root) / self.vendor / self.application
        return Path(self.env.get(ENV_ETC, "/etc")) / self.slug

    def _user_dir(self) -> Path:
        if self.platform == "darwin":
            root = self.env.get(ENV_MAC_HOME_ROOT, str(Path.home() / "Library" / "Application Support"))
            return Path(root) / self.vendor / self.application
        if self.platform.startswith("win"):
            roaming = Path(self.env.get(ENV_APPDATA, self.env.get("APPDATA", str(Path.home() / "AppData" / "Roaming"))))
            local = Path(self.env.get(ENV_LOCALAPPDATA, self.env.get("LOCALAPPDATA", str(Path.home() / "AppData" / "Local"))))
            base = roaming / self.vendor / self.application
            return base if base.exists() else local / self.vendor / self.application
        xdg = self.env.get("XDG_CONFIG_HOME")
        return (Path(xdg) if xdg else Path.home() / ".config") / self.slug


def _layer_files(base: Path) -> list[str]:
    """Return ``config.toml`` then sorted ``config.d`` entries under *base*.

    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> (root / "config.d").mkdir()
    >>> _ = (root / "config.toml").write_text('greeting = "Hello"', encoding="utf-8")
    >>> _ = (root / "config.d" / "20-b.yaml").write_text("greeting: Hi", encoding="utf-8")
    >>> _ = (root / "config.d" / "10-a.json").write_text("{}", encoding="utf-8")
    >>> _ = (root / "config.d" / "README.md").write_text("", encoding="utf-8")
    >>> [Path(p).name for p in _layer_files(root)]
    ['config.toml', '10-a.json', '20-b.yaml']
    >>> tmp.cleanup()
    """

    found: list[str] = []
    config_file = base / "config.toml"
    if config_file.is_file():
        found.append(str(config_file))
    config_dir = base / "config.d"
    if config_dir.is_dir():
        found.extend(
            str(path)
            for path in sorted(config_dir.iterdir())
            if path.is_file() and path.suffix.lower() in _ALLOWED_EXTENSIONS
        )
    return found


def iter_layers(resolver: DefaultPathResolver) -> Iterator[tuple[str, list[str]]]:
    """Yield ``(layer, paths)`` for the file-backed layers in precedence order."""

    yield "app", resolver.app()
    yield "host", resolver.host()
    yield "user", resolver.user()
