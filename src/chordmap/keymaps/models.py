"""Value types for key chords, sequences and key functions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Mapping

KeyChord = str
"""One key press plus modifiers (``"Control+X"``), produced by the input layer."""

SEQUENCE_DELIMITER = ";"


def _camel(name: str) -> str:
    return "".join(part.capitalize() for part in name.split("_"))


class KeyFunction(IntEnum):
    """Closed set of commands a key sequence can trigger.

    ``NIL`` and ``NEEDS_SECOND_KEY`` are signals, never stored bindings.
    """

    NIL = 0
    NEEDS_SECOND_KEY = 1  # first chord starts a two-key sequence
    NEXT_PANEL = 2  # move to next panel to the right
    PREV_PANEL = 3  # move to prev panel to the left
    GOTO_LINE = 4  # go to a line number in the active text view
    SEARCH_FILE = 5  # search / replace within the active text view
    SEARCH_PROJECT = 6  # search / replace across the whole project
    FILE_OPEN = 7  # open a file in the active text view
    BUFFER_SELECT = 8  # select an open buffer for the active text view
    BUFFER_SAVE = 9  # save the active buffer to its file
    EXECUTE_COMMAND = 10  # run a command on the active buffer

    @property
    def label(self) -> str:
        """Stable persisted name, e.g. ``"NextPanel"``."""

        return _LABELS[self]

    @property
    def is_sentinel(self) -> bool:
        return self in (KeyFunction.NIL, KeyFunction.NEEDS_SECOND_KEY)

    @classmethod
    def commands(cls) -> tuple["KeyFunction", ...]:
        return tuple(member for member in cls if not member.is_sentinel)

    @classmethod
    def parse(cls, label: str) -> "KeyFunction":
        """Map a persisted label back to a member.

        Labels of retired functions come back as ``NIL`` so reconciliation
        can purge the stale binding instead of failing the whole load.
        """

        return _BY_LABEL.get(_normalize_label(label), cls.NIL)


def _normalize_label(label: str) -> str:
    cleaned = re.sub(r"[^0-9a-z]", "", label.strip().lower())
    if cleaned.startswith("keyfun"):
        cleaned = cleaned[len("keyfun"):]
    return cleaned


_LABELS: Mapping[KeyFunction, str] = {
    member: _camel(member.name) for member in KeyFunction
}
_ALIASES: Mapping[str, KeyFunction] = {
    "needs2": KeyFunction.NEEDS_SECOND_KEY,
    "searchproj": KeyFunction.SEARCH_PROJECT,
    "bufselect": KeyFunction.BUFFER_SELECT,
    "bufsave": KeyFunction.BUFFER_SAVE,
    "execcmd": KeyFunction.EXECUTE_COMMAND,
}
_BY_LABEL: Mapping[str, KeyFunction] = {
    **_ALIASES,
    **{_normalize_label(label): member for member, label in _LABELS.items()},
}


@dataclass(frozen=True, slots=True, order=True)
class KeySequence:
    """One or two chords typed in a row; ``second == ""`` means single-key."""

    first: KeyChord = ""
    second: KeyChord = ""

    @property
    def is_empty(self) -> bool:
        return not self.first and not self.second

    @property
    def is_two_key(self) -> bool:
        return bool(self.second)

    def encode(self) -> str:
        return f"{self.first}{SEQUENCE_DELIMITER}{self.second}"

    @classmethod
    def decode(cls, text: str) -> "KeySequence":
        first, _, second = text.partition(SEQUENCE_DELIMITER)
        return cls(first, second)

    def __str__(self) -> str:
        if self.second:
            return f"{self.first} {self.second}"
        return self.first


EMPTY_SEQUENCE = KeySequence()


@dataclass(frozen=True, slots=True)
class KeymapEntry:
    """A single ``sequence -> function`` row, used for sorting and diffing."""

    sequence: KeySequence
    function: KeyFunction

    @property
    def sort_key(self) -> tuple[int, str, str]:
        return (int(self.function), self.sequence.first, self.sequence.second)


PLACEHOLDER_PREFIX = "- Not Set - "


def placeholder_chord(function: KeyFunction) -> KeyChord:
    """First chord marking a command that has no usable binding."""

    return f"{PLACEHOLDER_PREFIX}{function.label}"


__all__ = [
    "KeyChord",
    "KeyFunction",
    "KeySequence",
    "KeymapEntry",
    "EMPTY_SEQUENCE",
    "SEQUENCE_DELIMITER",
    "PLACEHOLDER_PREFIX",
    "placeholder_chord",
]
