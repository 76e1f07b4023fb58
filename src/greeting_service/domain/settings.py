"""Runtime settings for the HTTP surface and the polling refresher."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from .errors import ValidationError

DEFAULT_HOST: Final[str] = "127.0.0.1"
DEFAULT_PORT: Final[int] = 8080
DEFAULT_REFRESH_INTERVAL: Final[float] = 0.0


@dataclass(frozen=True, slots=True)
class ServerSettings:
    """Where to listen and how often to poll for configuration changes.

    ``refresh_interval`` of ``0`` disables polling; refreshes then only happen
    through ``POST /actuator/refresh``.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL


def settings_from_config(config: Mapping[str, Any]) -> ServerSettings:
    """Read ``server.host``, ``server.port`` and ``refresh.interval`` from *config*.

    >>> settings_from_config({"server": {"port": 9000}})
    ServerSettings(host='127.0.0.1', port=9000, refresh_interval=0.0)
    >>> settings_from_config({"server": {"port": "x"}})
    Traceback (most recent call last):
    ...
    greeting_service.domain.errors.ValidationError: server.port must be an integer, got 'x'
    """

    server = _table(config, "server")
    refresh = _table(config, "refresh")
    host = server.get("host", DEFAULT_HOST)
    if not isinstance(host, str) or not host:
        raise ValidationError(f"server.host must be a non-empty string, got {host!r}")
    return ServerSettings(
        host=host,
        port=_port(server.get("port", DEFAULT_PORT)),
        refresh_interval=_interval(refresh.get("interval", DEFAULT_REFRESH_INTERVAL)),
    )


def _table(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, Mapping):
        raise ValidationError(f"{name} must be a table, got {type(value).__name__}")
    return value


def _port(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValidationError(f"server.port must be an integer, got {value!r}")
    try:
        port = int(value)
    except ValueError as exc:
        raise ValidationError(f"server.port must be an integer, got {value!r}") from exc
    if not 0 <= port <= 65535:
        raise ValidationError(f"server.port out of range: {port}")
    return port


def _interval(value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"refresh.interval must be a number, got {value!r}")
    try:
        interval = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"refresh.interval must be a number, got {value!r}") from exc
    if interval < 0:
        raise ValidationError(f"refresh.interval must not be negative, got {interval}")
    return interval
