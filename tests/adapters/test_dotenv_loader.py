from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from greeting_service.adapters.dotenv.default import DefaultDotEnvLoader
from greeting_service.domain.errors import InvalidFormat


def test_dotenv_loader_parses_nested(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# service overrides\n"
        "GREETING='Good morning'\n"
        "export SERVER__PORT=9000\n"
        "SERVER__HOST=0.0.0.0 # all interfaces\n",
        encoding="utf-8",
    )
    loader = DefaultDotEnvLoader()
    data = loader.load(str(tmp_path))
    assert data == {"greeting": "Good morning", "server": {"port": "9000", "host": "0.0.0.0"}}
    assert loader.last_loaded_path == str(env_file)


def test_dotenv_loader_searches_parent_directories(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("GREETING=Hi\n", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert DefaultDotEnvLoader().load(str(nested)) == {"greeting": "Hi"}


def test_dotenv_loader_uses_extras_after_upward_search(tmp_path: Path) -> None:
    extra = tmp_path / "user" / ".env"
    extra.parent.mkdir()
    extra.write_text("GREETING=Howdy\n", encoding="utf-8")
    project = tmp_path / "project"
    project.mkdir()
    loader = DefaultDotEnvLoader(extras=[str(extra)])
    assert loader.load(str(project)) == {"greeting": "Howdy"}
    assert loader.last_loaded_path == str(extra)


def test_dotenv_loader_returns_empty_when_not_found(tmp_path: Path) -> None:
    loader = DefaultDotEnvLoader()
    assert loader.load(str(tmp_path)) == {}
    assert loader.last_loaded_path is None


@pytest.mark.parametrize("body", ["GREETING\n", "=Hi\n", "SERVER=x\nSERVER__PORT=1\n"])
def test_dotenv_loader_rejects_malformed_files(tmp_path: Path, body: str) -> None:
    (tmp_path / ".env").write_text(body, encoding="utf-8")
    with pytest.raises(InvalidFormat):
        DefaultDotEnvLoader().load(str(tmp_path))


def test_dotenv_loader_rejects_undecodable_file(tmp_path: Path) -> None:
    (tmp_path / ".env").write_bytes(b"GREETING=\xff\xfe\n")
    with pytest.raises(InvalidFormat, match="Cannot read"):
        DefaultDotEnvLoader().load(str(tmp_path))


SEGMENT = st.text(min_size=1, max_size=5, alphabet=st.characters(min_codepoint=65, max_codepoint=90))
DOTENV_VALUE = st.text(min_size=1, max_size=8, alphabet=st.characters(min_codepoint=97, max_codepoint=122))


def _no_prefix(paths):
    seen = []
    for parts in paths:
        for existing in seen:
            if parts[: len(existing)] == existing or existing[: len(parts)] == parts:
                return False
        seen.append(parts)
    return True


@st.composite
def dotenv_entries(draw):
    path_lists = draw(st.lists(st.lists(SEGMENT, min_size=1, max_size=3), min_size=1, max_size=5).filter(_no_prefix))
    values = draw(st.lists(DOTENV_VALUE, min_size=len(path_lists), max_size=len(path_lists)))
    return {"__".join(parts): value for parts, value in zip(path_lists, values)}


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(entries=dotenv_entries())
def test_dotenv_loader_handles_random_namespace(entries, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("\n".join(f"{k}={v}" for k, v in entries.items()) + "\n", encoding="utf-8")

    data = DefaultDotEnvLoader().load(str(tmp_path))

    for raw_key, value in entries.items():
        *parents, leaf = [part.lower() for part in raw_key.split("__")]
        cursor = data
        for part in parents:
            cursor = cursor[part]
        assert cursor[leaf] == value
