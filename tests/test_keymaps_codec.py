from __future__ import annotations

import json
from pathlib import Path

import pytest

from chordmap.keymaps import (
    KeyFunction,
    KeymapPersistenceError,
    KeymapTable,
    KeySequence,
    NamedKeymap,
    KeymapRegistry,
    open_json,
    reconcile,
    save_json,
    standard_registry,
    standard_table,
)
from chordmap.keymaps import codec


def test_encode_table_uses_semicolon_keys_and_labels() -> None:
    table = KeymapTable()
    table.bind(KeySequence("Control+X", "o"), KeyFunction.NEXT_PANEL)
    table.bind(KeySequence("Control+L"), KeyFunction.GOTO_LINE)

    assert codec.encode_table(table) == {
        "Control+L;": "GotoLine",
        "Control+X;o": "NextPanel",
    }


def test_table_round_trip_is_equal() -> None:
    table = standard_table("MacEmacs")

    decoded = codec.decode_table(json.loads(json.dumps(codec.encode_table(table))))

    assert decoded == table


def test_decode_table_keeps_retired_functions_as_nil() -> None:
    table = codec.decode_table({"Control+X;o": "NextPanel", "Control+M;": "Minimap"})

    assert table.lookup(KeySequence("Control+M")) is KeyFunction.NIL

    reconcile(table, standard_table("LinuxStd"))

    assert KeySequence("Control+M") not in table


def test_decode_table_never_stores_needs_second_key() -> None:
    table = codec.decode_table({"Control+Q;": "NeedsSecondKey"})

    assert table.lookup(KeySequence("Control+Q")) is KeyFunction.NIL


def test_decode_table_keeps_empty_first_chord_as_nil() -> None:
    table = codec.decode_table(
        {";": "NextPanel", ";o": "PrevPanel", "Control+X;o": "NextPanel"}
    )

    assert table.lookup(KeySequence("")) is KeyFunction.NIL
    assert table.lookup(KeySequence("", "o")) is KeyFunction.NIL

    report = reconcile(table, standard_table("LinuxStd"))

    assert {entry.sequence for entry in report.removed} == {
        KeySequence(""),
        KeySequence("", "o"),
    }
    assert table.lookup(KeySequence("Control+X", "o")) is KeyFunction.NEXT_PANEL
    assert table.lookup(KeySequence("Control+X", "p")) is KeyFunction.PREV_PANEL


def test_registry_round_trip_through_file(tmp_path: Path) -> None:
    source = standard_registry()
    path = tmp_path / "keymaps.json"

    save_json(source, path)
    loaded = KeymapRegistry()
    open_json(loaded, path)

    assert loaded.names() == source.names()
    for left, right in zip(loaded, source):
        assert left.description == right.description
        assert left.table == right.table
    assert not loaded.changed


def test_saved_file_uses_name_desc_map_objects(tmp_path: Path) -> None:
    registry = KeymapRegistry([NamedKeymap("Mine", "custom", standard_table())])
    path = tmp_path / "keymaps.json"

    save_json(registry, path)
    data = json.loads(path.read_text(encoding="utf-8"))

    assert data[0]["Name"] == "Mine"
    assert data[0]["Desc"] == "custom"
    assert data[0]["Map"]["Control+X;o"] == "NextPanel"


def test_failed_open_leaves_registry_unchanged(tmp_path: Path) -> None:
    registry = standard_registry()
    names = registry.names()
    broken = tmp_path / "broken.json"
    broken.write_text("[{\"Name\": \"x\", \"Map\": ", encoding="utf-8")

    with pytest.raises(KeymapPersistenceError):
        open_json(registry, broken)
    with pytest.raises(KeymapPersistenceError):
        open_json(registry, tmp_path / "missing.json")

    assert registry.names() == names


def test_failed_replace_leaves_existing_file_unchanged(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    registry = standard_registry()
    target = tmp_path / "keymaps.json"
    target.write_text("original", encoding="utf-8")

    def fail_replace(src: str, dst: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(codec.os, "replace", fail_replace)

    with pytest.raises(KeymapPersistenceError, match="disk full"):
        save_json(registry, target)

    assert target.read_text(encoding="utf-8") == "original"
    assert list(tmp_path.iterdir()) == [target]
    assert list(tmp_path.glob(".keymaps.json.*.tmp")) == []


def test_failed_save_to_missing_directory_raises(tmp_path: Path) -> None:
    registry = standard_registry()

    with pytest.raises(KeymapPersistenceError):
        save_json(registry, tmp_path / "no-such-dir" / "keymaps.json")

    assert list(tmp_path.iterdir()) == []


def test_save_clears_changed_flag(tmp_path: Path) -> None:
    registry = standard_registry()
    registry.reset_to_canonical()
    assert registry.changed

    save_json(registry, tmp_path / "keymaps.json")

    assert not registry.changed
