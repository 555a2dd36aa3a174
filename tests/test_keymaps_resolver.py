from __future__ import annotations

from chordmap.keymaps import (
    ActiveKeymap,
    KeyFunction,
    KeymapTable,
    KeySequence,
    resolve,
)


def make_active(*pairs: tuple[tuple[str, ...], KeyFunction]) -> ActiveKeymap:
    table = KeymapTable()
    for keys, function in pairs:
        table.bind(KeySequence(*keys), function)
    return ActiveKeymap.from_table("test", table)


def test_empty_first_chord_resolves_to_nil() -> None:
    active = make_active((("Control+X", "o"), KeyFunction.NEXT_PANEL))

    assert resolve(active, "", "") is KeyFunction.NIL
    assert resolve(active, "", "o") is KeyFunction.NIL


def test_prefix_chord_needs_second_key() -> None:
    active = make_active((("Control+X", "o"), KeyFunction.NEXT_PANEL))

    assert resolve(active, "Control+X") is KeyFunction.NEEDS_SECOND_KEY
    assert resolve(active, "Control+X", "o") is KeyFunction.NEXT_PANEL


def test_single_key_binding_resolves_directly() -> None:
    active = make_active((("Control+L",), KeyFunction.GOTO_LINE))

    assert resolve(active, "Control+L") is KeyFunction.GOTO_LINE
    assert resolve(active, "Control+K") is KeyFunction.NIL


def test_unknown_second_chord_is_nil() -> None:
    active = make_active((("Control+X", "o"), KeyFunction.NEXT_PANEL))

    assert resolve(active, "Control+X", "q") is KeyFunction.NIL


def test_prefix_wins_over_single_key_binding() -> None:
    active = make_active(
        (("Control+C",), KeyFunction.BUFFER_SAVE),
        (("Control+C", "Control+C"), KeyFunction.EXECUTE_COMMAND),
    )

    assert resolve(active, "Control+C") is KeyFunction.NEEDS_SECOND_KEY
    assert resolve(active, "Control+C", "Control+C") is KeyFunction.EXECUTE_COMMAND


def test_pair_lookup_ignores_stale_prefix_index() -> None:
    table = KeymapTable()
    table.bind(KeySequence("Control+X", "o"), KeyFunction.NEXT_PANEL)
    stale = ActiveKeymap(name="stale", bindings=table.as_dict(), prefixes=frozenset())

    assert resolve(stale, "Control+X") is KeyFunction.NIL
    assert resolve(stale, "Control+X", "o") is KeyFunction.NEXT_PANEL


def test_resolution_is_deterministic() -> None:
    active = make_active(
        (("Control+X", "o"), KeyFunction.NEXT_PANEL),
        (("Control+L",), KeyFunction.GOTO_LINE),
    )
    inputs = [("Control+X", ""), ("Control+X", "o"), ("Control+L", ""), ("q", "")]

    first_pass = [resolve(active, a, b) for a, b in inputs]
    second_pass = [resolve(active, a, b) for a, b in inputs]

    assert first_pass == second_pass


def test_snapshot_is_detached_from_source_table() -> None:
    table = KeymapTable()
    table.bind(KeySequence("Control+L"), KeyFunction.GOTO_LINE)
    active = ActiveKeymap.from_table("test", table)

    table.bind(KeySequence("Control+L", "x"), KeyFunction.SEARCH_FILE)

    assert resolve(active, "Control+L") is KeyFunction.GOTO_LINE
    assert active.table() != table
