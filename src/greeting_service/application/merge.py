"""Layer merge policy.

Purpose
-------
Fold ordered layer payloads into one nested mapping and record which layer
supplied each dotted key. Pure and I/O-free so the refresher can call it on
every reload.

Contents
    - ``merge_layers``: public entry point.
    - ``_merge_mapping`` / ``_merge_branch`` / ``_set_scalar``: recursive
      helpers keeping provenance in step with values.

System Role
-----------
Called by :mod:`greeting_service.core` with layers ordered
``app → host → user → dotenv → env``; the last layer to set a key wins.
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Iterable

Layer = tuple[str, Mapping[str, object], str | None]
Provenance = dict[str, dict[str, object]]


def merge_layers(layers: Iterable[Layer]) -> tuple[dict[str, object], Provenance]:
    """Merge *layers* (lowest precedence first) and return ``(data, provenance)``.

    Nested tables merge key by key; scalars replace. An empty table in a later
    layer does not wipe an existing top-level table.

    Examples
    --------
    >>> merged, meta = merge_layers([
    ...     ("app", {"greeting": "Hello", "server": {"port": 8080}}, "/etc/greeting-service/config.toml"),
    ...     ("env", {"greeting": "Howdy"}, None),
    ... ])
    >>> merged["greeting"], merged["server"]["port"], meta["greeting"]["layer"]
    ('Howdy', 8080, 'env')
    """

    merged: dict[str, object] = {}
    meta: Provenance = {}
    for layer_name, data, path in layers:
        _merge_mapping(merged, meta, deepcopy(dict(data)), layer_name, path, [])
    return merged, meta


def _merge_mapping(
    target: dict[str, object],
    meta: Provenance,
    incoming: Mapping[str, object],
    layer: str,
    path: str | None,
    segments: list[str],
) -> None:
    for key, value in incoming.items():
        dotted = ".".join([*segments, key])
        if isinstance(value, Mapping):
            _merge_branch(target, meta, key, value, dotted, layer, path, segments)
        else:
            _set_scalar(target, meta, key, value, dotted, layer, path)


def _merge_branch(
    target: dict[str, object],
    meta: Provenance,
    key: str,
    value: Mapping[str, object],
    dotted: str,
    layer: str,
    path: str | None,
    segments: list[str],
) -> None:
    existing = target.get(key)
    if not value:
        if isinstance(existing, Mapping) and not segments:
            return
        _forget(meta, dotted)
        target[key] = {}
        return

    if isinstance(existing, Mapping):
        container: dict[str, object] = dict(existing)
    else:
        # a scalar is being replaced by a table
        _forget(meta, dotted)
        container = {}
    target[key] = container
    _merge_mapping(container, meta, value, layer, path, [*segments, key])


def _set_scalar(
    target: dict[str, object],
    meta: Provenance,
    key: str,
    value: object,
    dotted: str,
    layer: str,
    path: str | None,
) -> None:
    _forget(meta, dotted)
    target[key] = value
    meta[dotted] = {"layer": layer, "path": path, "key": dotted}


def _forget(meta: Provenance, prefix: str) -> None:
    """Drop provenance for *prefix* and everything nested below it."""

    for meta_key in [k for k in meta if k == prefix or k.startswith(prefix + ".")]:
        del meta[meta_key]
