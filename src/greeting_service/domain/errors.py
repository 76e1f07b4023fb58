"""Domain-level exception hierarchy.

Purpose
-------
Name every failure the greeting service can surface while resolving or
refreshing configuration. The hierarchy lives in the domain layer so adapters,
the refresher, and the HTTP/CLI surfaces can all depend on it without pulling
in each other.

Contents
--------
* :class:`ConfigError` – base class; catch it to handle every service failure.
* :class:`InvalidFormat` – a file or ``.env`` payload could not be parsed.
* :class:`ValidationError` – parsed values have the wrong shape or type.
* :class:`NotFound` – an optional resource is missing (never fatal).

System Role
-----------
The greeting handler itself never raises. Errors only appear while a
configuration snapshot is being built, and the refresher keeps the previous
greeting in place whenever one of these is raised.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``greeting_service``."""


class InvalidFormat(ConfigError):
    """Raised when an input artifact cannot be parsed into structured data.

    Typical Sources
    ---------------
    Structured file loaders (:mod:`tomllib`, :mod:`json`, :mod:`yaml`) and the
    dotenv parser.
    """


class ValidationError(ConfigError):
    """Raised when a configuration value parses but has an unusable type.

    Examples: a ``greeting`` table instead of a string, or a non-numeric
    ``server.port``.
    """


class NotFound(ConfigError):
    """Represents missing-but-optional resources (files, directories, etc.).

    The composition root skips the resource and keeps loading other layers.
    """
