"""`.env` adapter.

Purpose
-------
Supply the ``dotenv`` layer: the first ``.env`` found walking upward from the
start directory, then any extra candidates the path resolver offers (the user
config directory). Keys nest with ``__`` exactly like environment variables,
but values are kept as text.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Iterable, Iterator

from ...domain.errors import InvalidFormat
from ...observability import log_debug, log_error
from ..env.default import assign_nested


class DefaultDotEnvLoader:
    """Load one dotenv file into a nested configuration dictionary."""

    def __init__(self, *, extras: Iterable[str] | None = None) -> None:
        self._extras = [Path(p) for p in extras or []]
        self.last_loaded_path: str | None = None

    def load(self, start_dir: str | None = None) -> Mapping[str, object]:
        """Parse and return the first dotenv file in the search order.

        Sets :attr:`last_loaded_path` so the composition root can attach the
        file to provenance.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> _ = (Path(tmp.name) / '.env').write_text('GREETING="Good day"', encoding='utf-8')
        >>> DefaultDotEnvLoader().load(tmp.name)["greeting"]
        'Good day'
        >>> tmp.cleanup()
        """

        self.last_loaded_path = None
        for candidate in [*_walk_up(start_dir), *self._extras]:
            if candidate.is_file():
                self.last_loaded_path = str(candidate)
                data = parse_dotenv(candidate)
                log_debug("dotenv_loaded", layer="dotenv", path=self.last_loaded_path, keys=sorted(data))
                return data
        log_debug("dotenv_not_found", layer="dotenv", path=None)
        return {}


def _walk_up(start_dir: str | None) -> Iterator[Path]:
    base = Path(start_dir) if start_dir else Path.cwd()
    for directory in (base, *base.parents):
        yield directory / ".env"


def parse_dotenv(path: Path) -> dict[str, object]:
    """Parse *path* strictly; a non-comment line without ``=`` is :class:`InvalidFormat`.

    Supports ``export`` prefixes, quoted values, and trailing `` #`` comments.
    """

    try:
        lines = path.read_text(encoding="utf-8").split("\n")
    except (OSError, UnicodeDecodeError) as exc:
        log_error("dotenv_unreadable", layer="dotenv", path=str(path), error=str(exc))
        raise InvalidFormat(f"Cannot read {path}: {exc}") from exc

    result: dict[str, object] = {}
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            log_error("dotenv_invalid_line", layer="dotenv", path=str(path), line=line_number)
            raise InvalidFormat(f"Malformed line {line_number} in {path}")
        assign_nested(result, key, _unquote(value.strip()), error_cls=InvalidFormat)
    return result


def _unquote(value: str) -> str:
    """Strip matching quotes, or an unquoted trailing comment.

    >>> _unquote('"Hello # not a comment"')
    'Hello # not a comment'
    >>> _unquote("Howdy # comment")
    'Howdy'
    >>> _unquote("# only comment")
    ''
    """

    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    if value.startswith("#"):
        return ""
    return value.split(" #", 1)[0].rstrip()
