"""Compiled-in standard keymaps.

Every standard map binds every command function, so reconciling a custom map
against any of them can always copy a real binding. Chords use the input
layer's ``Modifier+Key`` spelling; ``Meta`` is the Command key on macOS.
"""

from __future__ import annotations

from typing import Mapping, Optional

from chordmap.runtime import settings

from .models import KeyFunction, KeySequence
from .registry import KeymapRegistry, NamedKeymap
from .table import KeymapTable

KF = KeyFunction

# Control+X / Control+C prefixed sequences shared by every map.
_EMACS_CORE: Mapping[KeySequence, KeyFunction] = {
    KeySequence("Control+X", "o"): KF.NEXT_PANEL,
    KeySequence("Control+X", "p"): KF.PREV_PANEL,
    KeySequence("Control+X", "f"): KF.FILE_OPEN,
    KeySequence("Control+X", "Control+F"): KF.FILE_OPEN,
    KeySequence("Control+X", "b"): KF.BUFFER_SELECT,
    KeySequence("Control+X", "s"): KF.BUFFER_SAVE,
    KeySequence("Control+C", "Control+C"): KF.EXECUTE_COMMAND,
}

_MAC_SEARCH: Mapping[KeySequence, KeyFunction] = {
    KeySequence("Meta+L"): KF.GOTO_LINE,
    KeySequence("Meta+F"): KF.SEARCH_FILE,
    KeySequence("Meta+Shift+F"): KF.SEARCH_PROJECT,
}

_PC_SEARCH: Mapping[KeySequence, KeyFunction] = {
    KeySequence("Control+L"): KF.GOTO_LINE,
    KeySequence("Control+F"): KF.SEARCH_FILE,
    KeySequence("Control+Shift+F"): KF.SEARCH_PROJECT,
}

_EMACS_SEARCH: Mapping[KeySequence, KeyFunction] = {
    KeySequence("Control+X", "g"): KF.GOTO_LINE,
    KeySequence("Control+X", "Control+S"): KF.SEARCH_FILE,
    KeySequence("Control+X", "Control+P"): KF.SEARCH_PROJECT,
}


def _table(*parts: Mapping[KeySequence, KeyFunction]) -> KeymapTable:
    table = KeymapTable()
    for part in parts:
        for sequence, function in part.items():
            table.bind(sequence, function)
    return table


STANDARD_KEYMAPS: tuple[NamedKeymap, ...] = (
    NamedKeymap("MacStd", "Standard Mac KeyMap", _table(_EMACS_CORE, _MAC_SEARCH)),
    NamedKeymap(
        "MacEmacs",
        "Mac with emacs-style navigation -- emacs wins in conflicts",
        _table(_EMACS_CORE, _EMACS_SEARCH),
    ),
    NamedKeymap(
        "LinuxStd", "Standard Linux KeyMap", _table(_EMACS_CORE, _PC_SEARCH)
    ),
    NamedKeymap(
        "LinuxEmacs",
        "Linux with emacs-style navigation -- emacs wins in conflicts",
        _table(_EMACS_CORE, _EMACS_SEARCH),
    ),
    NamedKeymap(
        "WindowsStd", "Standard Windows KeyMap", _table(_EMACS_CORE, _PC_SEARCH)
    ),
    NamedKeymap(
        "ChromeStd",
        "Standard chrome-browser and linux-under-chrome bindings",
        _table(_EMACS_CORE, _PC_SEARCH),
    ),
)


def standard_registry(*, logger_name: str | None = None) -> KeymapRegistry:
    """Fresh registry holding deep copies of the standard keymaps."""

    return KeymapRegistry(
        STANDARD_KEYMAPS, canonical=STANDARD_KEYMAPS, logger_name=logger_name
    )


def standard_table(name: Optional[str] = None) -> KeymapTable:
    """Copy of the standard table ``name`` (platform default when omitted).

    Unknown names fall back to the first standard map.
    """

    wanted = name or settings.default_keymap_name()
    for keymap in STANDARD_KEYMAPS:
        if keymap.name == wanted:
            return keymap.table.copy()
    return STANDARD_KEYMAPS[0].table.copy()


__all__ = [
    "STANDARD_KEYMAPS",
    "standard_registry",
    "standard_table",
]
