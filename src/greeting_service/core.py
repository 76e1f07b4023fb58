"""Composition root for ``greeting_service``.

Purpose
-------
Wire adapters (filesystem, dotenv, environment) into configuration snapshots,
and wire snapshots, the greeting cell, the handler, the refresher and the Flask
application into one :class:`GreetingService`. Nothing else in the package
constructs these collaborators.

Contents
--------
* :class:`LayerLoadError` – a layer file failed to parse.
* :func:`read_config` / :func:`read_config_raw` – layered resolution.
* :class:`LayeredConfigSource` – :class:`ConfigSource` over the layered files.
* :class:`GreetingService` / :func:`build_service` – the assembled service.

System Role
-----------
Precedence is ``app → host → user → dotenv → env``. The CLI and embedding
applications call :func:`build_service`; a refresh re-runs the same layered
resolution through :class:`LayeredConfigSource`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Sequence

import flask

from .adapters.dotenv.default import DefaultDotEnvLoader
from .adapters.env.default import DefaultEnvLoader, default_env_prefix
from .adapters.file_loaders.structured import loader_for
from .adapters.path_resolvers.default import DefaultPathResolver, iter_layers
from .adapters.web.flask_app import create_app
from .application.greeting import GreetingCell, GreetingHandler
from .application.merge import merge_layers
from .application.ports import ConfigSource
from .application.refresh import ConfigRefresher
from .domain.config import EMPTY_CONFIG, Config
from .domain.errors import ConfigError, InvalidFormat, NotFound
from .domain.greeting import greeting_from_config
from .domain.settings import ServerSettings, settings_from_config
from .observability import log_debug, log_info, make_event

DEFAULT_VENDOR = "GreetingService"
DEFAULT_APP = "GreetingService"
DEFAULT_SLUG = "greeting-service"

LayerEntry = tuple[str, Mapping[str, object], str | None]


class LayerLoadError(ConfigError):
    """Raised when a configuration layer file exists but cannot be parsed."""


def read_config(
    *,
    vendor: str = DEFAULT_VENDOR,
    app: str = DEFAULT_APP,
    slug: str = DEFAULT_SLUG,
    prefer: Sequence[str] | None = None,
    start_dir: str | None = None,
) -> Config:
    """Return the merged configuration as a :class:`Config` snapshot.

    Returns :data:`EMPTY_CONFIG` when no layer produced a value, in which case
    the service runs on defaults (``"Hello"``, ``127.0.0.1:8080``).
    """

    data, meta = read_config_raw(vendor=vendor, app=app, slug=slug, prefer=prefer, start_dir=start_dir)
    if not data:
        return EMPTY_CONFIG
    return Config(data, meta)


def read_config_raw(
    *,
    vendor: str = DEFAULT_VENDOR,
    app: str = DEFAULT_APP,
    slug: str = DEFAULT_SLUG,
    prefer: Sequence[str] | None = None,
    start_dir: str | None = None,
) -> tuple[dict[str, object], dict[str, dict[str, object]]]:
    """Return ``(merged_data, provenance)`` without wrapping them in :class:`Config`.

    Raises
    ------
    LayerLoadError
        A discovered file is malformed.
    InvalidFormat
        The discovered ``.env`` file is malformed.
    """

    resolver = DefaultPathResolver(vendor=vendor, app=app, slug=slug)
    dotenv_loader = DefaultDotEnvLoader(extras=resolver.dotenv())

    layers: list[LayerEntry] = []
    for layer_name, paths in iter_layers(resolver):
        entries = _load_files(layer_name, paths, prefer)
        if entries:
            log_debug("layer_loaded", **make_event(layer_name, None, {"files": len(entries)}))
            layers.extend(entries)

    dotenv_data = dotenv_loader.load(start_dir)
    if dotenv_data:
        layers.append(("dotenv", dotenv_data, dotenv_loader.last_loaded_path))
        log_debug("layer_loaded", **make_event("dotenv", dotenv_loader.last_loaded_path, {"keys": len(dotenv_data)}))

    env_data = DefaultEnvLoader().load(default_env_prefix(slug))
    if env_data:
        layers.append(("env", env_data, None))
        log_debug("layer_loaded", **make_event("env", None, {"keys": len(env_data)}))

    if not layers:
        log_info("configuration_empty", layer="none", path=None)
        return {}, {}

    merged, meta = merge_layers(layers)
    log_info("configuration_merged", layer="final", path=None, total_layers=len(layers))
    return merged, meta


def _load_files(layer: str, paths: Iterable[str], prefer: Sequence[str] | None) -> list[LayerEntry]:
    """Parse *paths* for *layer*, skipping unknown suffixes, vanished files and empty tables."""

    collected: list[LayerEntry] = []
    for path in _order_paths(paths, prefer):
        loader = loader_for(path)
        if loader is None:
            continue
        try:
            data = loader.load(path)
        except NotFound:
            continue
        except InvalidFormat as exc:
            log_debug("layer_error", layer=layer, path=path, error=str(exc))
            raise LayerLoadError(f"Failed to load {layer} layer file {path}: {exc}") from exc
        if data:
            collected.append((layer, data, path))
    return collected


def _order_paths(paths: Iterable[str], prefer: Sequence[str] | None) -> list[str]:
    """Stable-sort *paths* so preferred suffixes come first.

    >>> _order_paths(["a.json", "b.yaml", "c.toml"], ["toml", ".yaml"])
    ['c.toml', 'b.yaml', 'a.json']
    """

    path_list = list(paths)
    if not prefer:
        return path_list
    ranking = {suffix.lower().lstrip("."): idx for idx, suffix in enumerate(prefer)}
    return sorted(path_list, key=lambda p: ranking.get(Path(p).suffix.lower().lstrip("."), len(ranking)))


class LayeredConfigSource:
    """:class:`ConfigSource` that re-runs layered resolution on every load."""

    def __init__(
        self,
        *,
        vendor: str = DEFAULT_VENDOR,
        app: str = DEFAULT_APP,
        slug: str = DEFAULT_SLUG,
        prefer: Sequence[str] | None = None,
        start_dir: str | None = None,
    ) -> None:
        self.vendor = vendor
        self.app = app
        self.slug = slug
        self.prefer = tuple(prefer) if prefer else None
        self.start_dir = start_dir

    def load(self) -> Config:
        return read_config(
            vendor=self.vendor,
            app=self.app,
            slug=self.slug,
            prefer=self.prefer,
            start_dir=self.start_dir,
        )


@dataclass(frozen=True, slots=True)
class GreetingService:
    """Everything :func:`build_service` assembles, ready to serve."""

    source: ConfigSource
    settings: ServerSettings
    cell: GreetingCell
    handler: GreetingHandler
    refresher: ConfigRefresher
    app: flask.Flask

    def hello(self) -> str:
        return self.handler.hello()

    def refresh(self) -> tuple[str, ...]:
        return self.refresher.refresh()


def build_service(
    *,
    vendor: str = DEFAULT_VENDOR,
    app: str = DEFAULT_APP,
    slug: str = DEFAULT_SLUG,
    prefer: Sequence[str] | None = None,
    start_dir: str | None = None,
    source: ConfigSource | None = None,
) -> GreetingService:
    """Load configuration once and assemble the service around it.

    *source* replaces the layered files/dotenv/env resolution, e.g. with a
    :class:`~greeting_service.adapters.static.StaticConfigSource`.

    Examples
    --------
    >>> from greeting_service.adapters.static import StaticConfigSource
    >>> service = build_service(source=StaticConfigSource({"greeting": "Hi", "server": {"port": 9000}}))
    >>> service.hello(), service.settings.port
    ('Hi World!', 9000)
    """

    if source is None:
        source = LayeredConfigSource(vendor=vendor, app=app, slug=slug, prefer=prefer, start_dir=start_dir)
    snapshot = source.load()
    settings = settings_from_config(snapshot)
    cell = GreetingCell(greeting_from_config(snapshot))
    handler = GreetingHandler(cell)
    refresher = ConfigRefresher(source, cell, initial=snapshot)
    log_info("service_built", layer="service", path=None, greeting=cell.current().greeting)
    return GreetingService(
        source=source,
        settings=settings,
        cell=cell,
        handler=handler,
        refresher=refresher,
        app=create_app(handler, refresher),
    )


__all__ = [
    "DEFAULT_APP",
    "DEFAULT_SLUG",
    "DEFAULT_VENDOR",
    "GreetingService",
    "LayerLoadError",
    "LayeredConfigSource",
    "build_service",
    "default_env_prefix",
    "read_config",
    "read_config_raw",
]
