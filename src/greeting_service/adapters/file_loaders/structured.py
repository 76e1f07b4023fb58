"""Structured configuration file loaders.

Purpose
-------
Parse TOML, JSON and YAML files into mappings for the merge policy. Each
loader raises :class:`NotFound` for a vanished file (files can disappear
between discovery and a refresh) and :class:`InvalidFormat` for content that
does not parse or is not a table.

Contents
--------
* :class:`BaseFileLoader` – shared read/validate helpers.
* :class:`TOMLFileLoader`, :class:`JSONFileLoader`, :class:`YAMLFileLoader`.
* :data:`FILE_LOADERS` – suffix → loader table used by the composition root.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Mapping

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover - exercised on 3.10 only
    import tomli as tomllib

import yaml

from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error


class BaseFileLoader:
    """Common read/parse/validate pipeline; subclasses name a format and a parser."""

    format_name = "text"

    def load(self, path: str) -> Mapping[str, object]:
        payload = self._read(path)
        try:
            data = self._parse(payload)
        except self._errors() as exc:
            log_error("config_file_invalid", layer="file", path=path, format=self.format_name, error=str(exc))
            raise InvalidFormat(f"Invalid {self.format_name.upper()} in {path}: {exc}") from exc
        result = self._ensure_mapping({} if data is None else data, path=path)
        log_debug("config_file_loaded", layer="file", path=path, format=self.format_name)
        return result

    def _parse(self, payload: bytes) -> Any:
        raise NotImplementedError

    def _errors(self) -> tuple[type[Exception], ...]:
        return (ValueError,)

    @staticmethod
    def _read(path: str) -> bytes:
        file_path = Path(path)
        try:
            payload = file_path.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise NotFound(f"Configuration file not found: {path}") from exc
        except OSError as exc:
            log_error("config_file_unreadable", layer="file", path=path, error=str(exc))
            raise InvalidFormat(f"Cannot read {path}: {exc}") from exc
        log_debug("config_file_read", layer="file", path=path, size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Reject documents whose top level is not a table.

        >>> BaseFileLoader._ensure_mapping(["greeting"], path="demo.json")
        Traceback (most recent call last):
        ...
        greeting_service.domain.errors.InvalidFormat: File demo.json did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        return data


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents (the canonical format)."""

    format_name = "toml"

    def _parse(self, payload: bytes) -> Any:
        return tomllib.loads(payload.decode("utf-8"))

    def _errors(self) -> tuple[type[Exception], ...]:
        return (tomllib.TOMLDecodeError, UnicodeDecodeError)


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    format_name = "json"

    def _parse(self, payload: bytes) -> Any:
        return json.loads(payload)

    def _errors(self) -> tuple[type[Exception], ...]:
        return (json.JSONDecodeError, UnicodeDecodeError)


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents with ``yaml.safe_load``; an empty document is an empty table."""

    format_name = "yaml"

    def _parse(self, payload: bytes) -> Any:
        return yaml.safe_load(payload)

    def _errors(self) -> tuple[type[Exception], ...]:
        return (yaml.YAMLError,)


FILE_LOADERS: dict[str, BaseFileLoader] = {
    ".toml": TOMLFileLoader(),
    ".json": JSONFileLoader(),
    ".yaml": YAMLFileLoader(),
    ".yml": YAMLFileLoader(),
}
"""Loaders keyed by lower-case file suffix."""


def loader_for(path: str) -> BaseFileLoader | None:
    """Return the loader registered for *path*'s suffix, if any.

    >>> type(loader_for("/etc/greeting-service/config.d/10-greeting.YML")).__name__
    'YAMLFileLoader'
    >>> loader_for("notes.txt") is None
    True
    """

    return FILE_LOADERS.get(Path(path).suffix.lower())
