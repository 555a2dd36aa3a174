"""Keymap table mapping key sequences to key functions."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Mapping, Optional

from .models import (
    EMPTY_SEQUENCE,
    KeyChord,
    KeyFunction,
    KeymapEntry,
    KeySequence,
)


class KeymapConflictError(RuntimeError):
    """Raised when binding a sequence that already triggers another function."""

    def __init__(
        self, sequence: KeySequence, existing: KeyFunction, requested: KeyFunction
    ):
        super().__init__(
            f"Sequence '{sequence}' already bound to {existing.label}, "
            f"cannot bind {requested.label}"
        )
        self.sequence = sequence
        self.existing = existing
        self.requested = requested


class KeymapTable:
    """Unique ``KeySequence -> KeyFunction`` mapping.

    Several sequences may trigger the same function. The raw constructor
    accepts ``NIL`` so that bindings to retired functions survive decoding
    until reconciliation purges them; ``bind`` only accepts real commands.
    """

    __slots__ = ("_entries",)

    def __init__(
        self, entries: Mapping[KeySequence, KeyFunction] | None = None
    ) -> None:
        self._entries: Dict[KeySequence, KeyFunction] = {}
        for sequence, function in (entries or {}).items():
            if function is KeyFunction.NEEDS_SECOND_KEY:
                raise ValueError(
                    f"Sequence '{sequence}' cannot be bound to NEEDS_SECOND_KEY"
                )
            self._entries[sequence] = KeyFunction(function)

    @classmethod
    def from_entries(cls, entries: Iterable[KeymapEntry]) -> "KeymapTable":
        table = cls()
        for entry in entries:
            table.bind(entry.sequence, entry.function)
        return table

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[KeySequence]:
        return iter(self._entries)

    def __contains__(self, sequence: object) -> bool:
        return sequence in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeymapTable):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"KeymapTable({len(self._entries)} entries)"

    def lookup(self, sequence: KeySequence) -> Optional[KeyFunction]:
        return self._entries.get(sequence)

    def items(self) -> list[tuple[KeySequence, KeyFunction]]:
        return list(self._entries.items())

    def as_dict(self) -> Dict[KeySequence, KeyFunction]:
        return dict(self._entries)

    def bind(
        self, sequence: KeySequence, function: KeyFunction, *, replace: bool = True
    ) -> None:
        if sequence.is_empty or not sequence.first:
            raise ValueError("Cannot bind an empty key sequence")
        if function.is_sentinel:
            raise ValueError(f"Cannot bind '{sequence}' to {function.name}")
        existing = self._entries.get(sequence)
        if not replace and existing is not None and existing is not function:
            raise KeymapConflictError(sequence, existing, function)
        self._entries[sequence] = function

    def unbind(self, sequence: KeySequence) -> Optional[KeyFunction]:
        return self._entries.pop(sequence, None)

    def clear(self) -> None:
        self._entries.clear()

    def copy(self) -> "KeymapTable":
        clone = KeymapTable()
        clone._entries = dict(self._entries)
        return clone

    def to_entries(self) -> list[KeymapEntry]:
        return [KeymapEntry(seq, fn) for seq, fn in self._entries.items()]

    def sorted_entries(self) -> list[KeymapEntry]:
        """Entries ordered by function ordinal, then sequence."""

        return sorted(self.to_entries(), key=lambda entry: entry.sort_key)

    def sequences_for_function(self, function: KeyFunction) -> list[KeySequence]:
        return sorted(seq for seq, fn in self._entries.items() if fn is function)

    def sequence_for_function(self, function: KeyFunction) -> KeySequence:
        # lexicographically smallest, so editors always show the same one
        matches = self.sequences_for_function(function)
        return matches[0] if matches else EMPTY_SEQUENCE

    def bound_functions(self) -> set[KeyFunction]:
        return set(self._entries.values())

    def prefix_index(self) -> frozenset[KeyChord]:
        """First chords of every two-key sequence, rebuilt on each call."""

        return frozenset(seq.first for seq in self._entries if seq.is_two_key)


__all__ = ["KeymapTable", "KeymapConflictError"]
