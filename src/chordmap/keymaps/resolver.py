"""Chord resolution against an immutable snapshot of the active keymap."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .models import KeyChord, KeyFunction, KeySequence
from .table import KeymapTable


@dataclass(frozen=True, slots=True)
class ActiveKeymap:
    """Published view of the active table plus its prefix index."""

    name: str = ""
    bindings: Mapping[KeySequence, KeyFunction] = field(
        default_factory=lambda: MappingProxyType({})
    )
    prefixes: frozenset[KeyChord] = frozenset()

    @classmethod
    def from_table(cls, name: str, table: KeymapTable) -> "ActiveKeymap":
        return cls(
            name=name,
            bindings=MappingProxyType(table.as_dict()),
            prefixes=table.prefix_index(),
        )

    def table(self) -> KeymapTable:
        return KeymapTable(self.bindings)


def resolve(
    active: ActiveKeymap, first: KeyChord, second: KeyChord = ""
) -> KeyFunction:
    """Translate one or two chords into a key function.

    With only ``first`` available, a chord that starts any two-key sequence
    yields ``NEEDS_SECOND_KEY`` so the input layer waits for another key.
    A full pair is looked up directly even when ``first`` is not a known
    prefix.
    """

    if not first:
        return KeyFunction.NIL
    if not second and first in active.prefixes:
        return KeyFunction.NEEDS_SECOND_KEY
    return active.bindings.get(KeySequence(first, second), KeyFunction.NIL)


__all__ = ["ActiveKeymap", "resolve"]
