from __future__ import annotations

from chordmap.keymaps import (
    STANDARD_KEYMAPS,
    KeyFunction,
    KeymapRegistry,
    KeymapTable,
    KeySequence,
    NamedKeymap,
    standard_registry,
)


def make_keymap(name: str, *keys: str) -> NamedKeymap:
    table = KeymapTable()
    sequence = KeySequence(*keys) if keys else KeySequence("Control+L")
    table.bind(sequence, KeyFunction.GOTO_LINE)
    return NamedKeymap(name, f"{name} keymap", table)


def test_lookup_returns_table_and_index() -> None:
    registry = KeymapRegistry([make_keymap("one"), make_keymap("two")])

    match = registry.lookup("two")

    assert match is not None
    assert match.index == 1
    assert match.table is registry[1].table


def test_lookup_miss_returns_none() -> None:
    registry = KeymapRegistry([make_keymap("one")])

    assert registry.lookup("missing") is None
    assert len(registry) == 1


def test_duplicate_names_first_match_wins() -> None:
    registry = KeymapRegistry(
        [make_keymap("dup", "Control+A"), make_keymap("dup", "Control+B")]
    )

    match = registry.lookup("dup")

    assert match is not None
    assert match.index == 0
    assert KeySequence("Control+A") in match.table
    assert registry.names() == ["dup", "dup"]


def test_clone_from_is_a_deep_copy() -> None:
    source = KeymapRegistry([make_keymap("one")])
    target = KeymapRegistry()

    target.clone_from(source)
    target[0].table.bind(KeySequence("Control+K"), KeyFunction.SEARCH_FILE)

    assert KeySequence("Control+K") not in source[0].table
    assert target.names() == ["one"]


def test_constructor_copies_its_input() -> None:
    keymap = make_keymap("one")
    registry = KeymapRegistry([keymap])

    keymap.table.bind(KeySequence("Control+K"), KeyFunction.SEARCH_FILE)

    assert KeySequence("Control+K") not in registry[0].table


def test_reset_to_canonical_restores_standard_maps_and_marks_changed() -> None:
    registry = standard_registry()
    registry.remove("MacStd")
    registry.add(make_keymap("custom"))
    registry.mark_saved()

    registry.reset_to_canonical()

    assert registry.names() == [keymap.name for keymap in STANDARD_KEYMAPS]
    assert registry.changed
    for restored, standard in zip(registry, STANDARD_KEYMAPS):
        assert restored.table == standard.table
        assert restored.table is not standard.table


def test_add_and_remove_touch_revision() -> None:
    registry = KeymapRegistry()
    before = registry.revision()

    registry.add(make_keymap("one"))
    removed = registry.remove("one")

    assert removed is not None
    assert registry.revision() == before + 2
    assert registry.remove("one") is None


def test_canonical_table_falls_back_to_first_standard_map() -> None:
    registry = standard_registry()

    assert registry.canonical_table("LinuxStd") == STANDARD_KEYMAPS[2].table
    assert registry.canonical_table("nope") == STANDARD_KEYMAPS[0].table
    assert KeymapRegistry().canonical_table("nope") == STANDARD_KEYMAPS[0].table
    assert KeymapRegistry(canonical=()).canonical_table("nope") is None


def test_plain_registry_resets_to_standard_maps() -> None:
    registry = KeymapRegistry([make_keymap("one")])

    registry.reset_to_canonical()

    assert registry.names() == [keymap.name for keymap in STANDARD_KEYMAPS]
    assert registry[0].table is not STANDARD_KEYMAPS[0].table


def test_empty_canonical_resets_to_nothing() -> None:
    registry = KeymapRegistry([make_keymap("one")], canonical=())

    registry.reset_to_canonical()

    assert len(registry) == 0


def test_standard_maps_bind_every_command() -> None:
    for keymap in STANDARD_KEYMAPS:
        assert set(KeyFunction.commands()) <= keymap.table.bound_functions()
        singles = {seq.first for seq in keymap.table if not seq.is_two_key}
        assert not singles & keymap.table.prefix_index()


def test_stats_summarize_registry() -> None:
    registry = KeymapRegistry([make_keymap("one"), make_keymap("two")])

    stats = registry.stats()

    assert stats.keymap_count == 2
    assert stats.binding_count == 2
    assert stats.names == ("one", "two")
    assert stats.changed is False
