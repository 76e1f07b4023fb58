"""Greeting service with a refreshable, layered ``greeting`` property.

``GET /hello`` answers ``"<greeting> World!"``; the greeting defaults to
``"Hello"`` and can be changed at runtime through ``POST /actuator/refresh``
or the polling refresher without restarting the process.
"""

from __future__ import annotations

from .adapters.refresh.polling import PollingRefresher
from .adapters.static import StaticConfigSource
from .adapters.web.flask_app import create_app
from .application.greeting import GreetingCell, GreetingHandler
from .application.refresh import ConfigRefresher, changed_keys
from .core import (
    GreetingService,
    LayeredConfigSource,
    LayerLoadError,
    build_service,
    default_env_prefix,
    read_config,
    read_config_raw,
)
from .domain.config import EMPTY_CONFIG, Config, SourceInfo
from .domain.errors import ConfigError, InvalidFormat, NotFound, ValidationError
from .domain.greeting import DEFAULT_GREETING, GreetingConfig, format_greeting, greeting_from_config
from .domain.settings import ServerSettings, settings_from_config
from .observability import bind_trace_id, get_logger

__all__ = [
    "Config",
    "ConfigError",
    "ConfigRefresher",
    "DEFAULT_GREETING",
    "EMPTY_CONFIG",
    "GreetingCell",
    "GreetingConfig",
    "GreetingHandler",
    "GreetingService",
    "InvalidFormat",
    "LayerLoadError",
    "LayeredConfigSource",
    "NotFound",
    "PollingRefresher",
    "ServerSettings",
    "SourceInfo",
    "StaticConfigSource",
    "ValidationError",
    "bind_trace_id",
    "build_service",
    "changed_keys",
    "create_app",
    "default_env_prefix",
    "format_greeting",
    "get_logger",
    "greeting_from_config",
    "read_config",
    "read_config_raw",
    "settings_from_config",
]
