"""Environment variable adapter.

Purpose
-------
Turn ``<PREFIX>_*`` process variables into the highest-precedence layer. This
is how deployments typically override ``greeting`` without touching files:
``GREETING_SERVICE_GREETING=Howdy``.

Key behaviours
--------------
* Only variables carrying the slug-derived prefix are captured.
* ``__`` nests (``GREETING_SERVICE_SERVER__PORT`` → ``{"server": {"port": ...}}``).
* Values are coerced: ``true``/``false``, integers, floats, ``null``/``none``.
  ``greeting`` is exempt and keeps its text verbatim (``007`` stays ``"007"``).
* Keys are stored lower-case.
"""

from __future__ import annotations

import os
from typing import Iterable, Mapping

from ...domain.greeting import GREETING_KEY
from ...observability import log_debug

TEXT_KEYS: frozenset[str] = frozenset({GREETING_KEY})

# "Infinity", "nan" and "1_000" stay text
_FLOAT_CHARS = frozenset("0123456789.+-e")


def default_env_prefix(slug: str) -> str:
    """Return the environment prefix for *slug*.

    >>> default_env_prefix('greeting-service')
    'GREETING_SERVICE'
    """

    return slug.replace("-", "_").upper()


class DefaultEnvLoader:
    """Load environment variables that belong to the service namespace.

    Values are coerced to primitives except for the dotted keys in
    *text_keys*, which keep the exact text of the variable.
    """

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        text_keys: Iterable[str] = TEXT_KEYS,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        self._text_keys = frozenset(key.lower() for key in text_keys)

    def load(self, prefix: str) -> dict[str, object]:
        """Return a nested mapping of variables carrying *prefix*.

        Examples
        --------
        >>> loader = DefaultEnvLoader(environ={
        ...     'GREETING_SERVICE_GREETING': '007',
        ...     'GREETING_SERVICE_SERVER__PORT': '9000',
        ...     'HOME': '/root',
        ... })
        >>> loader.load('GREETING_SERVICE')
        {'greeting': '007', 'server': {'port': 9000}}
        """

        if prefix and not prefix.endswith("_"):
            prefix = f"{prefix}_"
        collected: dict[str, object] = {}
        for key, value in self._environ.items():
            if not key.startswith(prefix):
                continue
            stripped = key[len(prefix) :]
            if not stripped:
                continue
            dotted = stripped.lower().replace("__", ".")
            assign_nested(collected, stripped, value if dotted in self._text_keys else _coerce(value))
        log_debug("env_variables_loaded", layer="env", path=None, keys=sorted(collected))
        return collected


def assign_nested(
    target: dict[str, object],
    key: str,
    value: object,
    *,
    error_cls: type[Exception] = ValueError,
) -> None:
    """Store *value* under *key*, treating ``__`` as a nesting delimiter.

    Lookups are case-insensitive so ``SERVER__PORT`` and ``server__port``
    address the same slot. *error_cls* is raised when a scalar already
    occupies a slot that now needs to be a table.

    >>> data: dict[str, object] = {}
    >>> assign_nested(data, 'SERVER__HOST', '0.0.0.0')
    >>> data
    {'server': {'host': '0.0.0.0'}}
    """

    *parents, leaf = key.split("__")
    cursor = target
    for part in parents:
        slot = _slot(cursor, part)
        child = cursor.setdefault(slot, {})
        if not isinstance(child, dict):
            raise error_cls(f"Cannot override scalar with mapping for key {key}")
        cursor = child
    cursor[_slot(cursor, leaf)] = value


def _slot(mapping: dict[str, object], key: str) -> str:
    lower = key.lower()
    for existing in mapping:
        if existing.lower() == lower:
            return existing
    return lower


def _coerce(value: str) -> object:
    """Coerce textual environment values to Python primitives where possible.

    >>> _coerce('true'), _coerce('10'), _coerce('-3'), _coerce('2.5'), _coerce('none'), _coerce('Howdy')
    (True, 10, -3, 2.5, None, 'Howdy')
    """

    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    digits = value[1:] if value.startswith("-") else value
    if digits.isascii() and digits.isdigit():
        return int(value)
    if not value or not set(lowered) <= _FLOAT_CHARS:
        return value
    try:
        return float(value)
    except ValueError:
        return value
