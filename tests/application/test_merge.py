from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from greeting_service.application.merge import merge_layers


SCALAR = st.one_of(st.booleans(), st.integers(), st.text(min_size=1, max_size=5))
VALUE = st.recursive(
    SCALAR,
    lambda children: st.dictionaries(st.text(min_size=1, max_size=5), children, max_size=3),
    max_leaves=10,
)
MAPPING = st.dictionaries(st.text(min_size=1, max_size=5), VALUE, max_size=4)


def test_later_layer_overrides_greeting() -> None:
    layers = [
        ("app", {"greeting": "Hello", "server": {"port": 8080}}, "/etc/greeting-service/config.toml"),
        ("user", {"greeting": "Hi"}, "/home/u/.config/greeting-service/config.toml"),
        ("env", {"server": {"host": "0.0.0.0"}}, None),
    ]
    merged, meta = merge_layers(layers)
    assert merged == {"greeting": "Hi", "server": {"port": 8080, "host": "0.0.0.0"}}
    assert meta["greeting"] == {"layer": "user", "path": "/home/u/.config/greeting-service/config.toml", "key": "greeting"}
    assert meta["server.port"]["layer"] == "app"
    assert meta["server.host"]["layer"] == "env"


def test_scalar_replaced_by_table_drops_stale_provenance() -> None:
    merged, meta = merge_layers([("app", {"greeting": "Hi"}, None), ("env", {"greeting": {"text": "Yo"}}, None)])
    assert merged["greeting"] == {"text": "Yo"}
    assert "greeting" not in meta
    assert meta["greeting.text"]["layer"] == "env"


def test_empty_top_level_table_does_not_wipe_previous() -> None:
    merged, _ = merge_layers([("app", {"server": {"port": 1}}, None), ("env", {"server": {}}, None)])
    assert merged["server"] == {"port": 1}


def test_inputs_are_not_mutated() -> None:
    app_layer = {"server": {"port": 1}}
    merge_layers([("app", app_layer, None), ("env", {"server": {"port": 2}}, None)])
    assert app_layer == {"server": {"port": 1}}


def test_merge_is_idempotent() -> None:
    layers = [
        ("app", {"greeting": "Hello", "ports": [8080]}, "app.toml"),
        ("env", {"greeting": "Howdy"}, None),
    ]
    assert merge_layers(layers) == merge_layers(layers)


@given(MAPPING, MAPPING, MAPPING)
def test_merge_associative(lhs, mid, rhs) -> None:
    left, _ = merge_layers([("lhs", lhs, None), ("mid", mid, None), ("rhs", rhs, None)])
    left_then_right, _ = merge_layers([("lhs-mid", left, None), ("rhs", rhs, None)])
    right_then_left, _ = merge_layers(
        [("lhs", lhs, None), ("mid-rhs", merge_layers([("mid", mid, None), ("rhs", rhs, None)])[0], None)]
    )
    assert left_then_right == right_then_left


@given(MAPPING, st.text(min_size=1, max_size=10))
def test_last_greeting_wins(base, greeting) -> None:
    merged, meta = merge_layers([("app", base, None), ("env", {"greeting": greeting}, None)])
    assert merged["greeting"] == greeting
    assert meta["greeting"]["layer"] == "env"
