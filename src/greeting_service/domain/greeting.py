"""Greeting value object and its resolution rules.

Purpose
-------
Hold the one configurable string the service renders and the rules that turn
a configuration snapshot into it. Pure functions only; no I/O.

Contents
--------
* :data:`DEFAULT_GREETING` / :data:`GREETING_KEY` / :data:`SUFFIX`
* :class:`GreetingConfig` – immutable value held by the config cell.
* :func:`greeting_from_config` – resolve ``greeting`` with defaulting.
* :func:`format_greeting` – ``"<greeting> World!"``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from .errors import ValidationError

DEFAULT_GREETING: Final[str] = "Hello"
GREETING_KEY: Final[str] = "greeting"
SUFFIX: Final[str] = "World!"


@dataclass(frozen=True, slots=True)
class GreetingConfig:
    """The greeting currently in effect.

    Instances are never modified; a refresh replaces the whole value.

    >>> GreetingConfig().greeting
    'Hello'
    """

    greeting: str = DEFAULT_GREETING


def greeting_from_config(config: Mapping[str, Any]) -> GreetingConfig:
    """Build a :class:`GreetingConfig` from a configuration snapshot.

    Absent keys and ``None`` fall back to :data:`DEFAULT_GREETING`. Scalars
    produced by environment coercion are rendered back to text. An empty
    string is a real value and is kept as-is.

    Examples
    --------
    >>> greeting_from_config({}).greeting
    'Hello'
    >>> greeting_from_config({"greeting": "Hi"}).greeting
    'Hi'
    >>> greeting_from_config({"greeting": True}).greeting
    'true'
    >>> greeting_from_config({"greeting": {"nested": 1}})
    Traceback (most recent call last):
    ...
    greeting_service.domain.errors.ValidationError: greeting must be a string, got dict
    """

    raw = config.get(GREETING_KEY)
    if raw is None:
        return GreetingConfig()
    if isinstance(raw, str):
        return GreetingConfig(raw)
    if isinstance(raw, bool):
        return GreetingConfig("true" if raw else "false")
    if isinstance(raw, (int, float)):
        return GreetingConfig(str(raw))
    raise ValidationError(f"{GREETING_KEY} must be a string, got {type(raw).__name__}")


def format_greeting(config: GreetingConfig) -> str:
    """Join the greeting and :data:`SUFFIX` with a single space.

    >>> format_greeting(GreetingConfig("Howdy"))
    'Howdy World!'
    >>> format_greeting(GreetingConfig(""))
    ' World!'
    """

    return " ".join((config.greeting, SUFFIX))
