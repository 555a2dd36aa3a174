"""Named collection of keymap tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence

from chordmap.runtime.telemetry import record_event

from .table import KeymapTable


@dataclass(slots=True)
class NamedKeymap:
    """A keymap table plus the name users pick it by."""

    name: str
    description: str = ""
    table: KeymapTable = field(default_factory=KeymapTable)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("keymap name cannot be empty")

    def copy(self) -> "NamedKeymap":
        return NamedKeymap(self.name, self.description, self.table.copy())


@dataclass(frozen=True, slots=True)
class KeymapMatch:
    """Registry hit: the owned table and its position."""

    table: KeymapTable
    index: int
    name: str


@dataclass(slots=True)
class RegistryStats:
    """Lightweight snapshot describing registry state."""

    keymap_count: int
    binding_count: int
    names: tuple[str, ...]
    changed: bool


class KeymapRegistry:
    """Ordered keymaps, looked up by name.

    Duplicate names are kept; ``lookup`` returns the first one. ``canonical``
    is the compiled-in set that ``reset_to_canonical`` restores; it defaults
    to the standard keymaps, and an explicit empty sequence means none.
    """

    def __init__(
        self,
        keymaps: Iterable[NamedKeymap] = (),
        *,
        canonical: Optional[Sequence[NamedKeymap]] = None,
        logger_name: str | None = None,
    ) -> None:
        self._keymaps: List[NamedKeymap] = [keymap.copy() for keymap in keymaps]
        if canonical is None:
            from .defaults import STANDARD_KEYMAPS

            canonical = STANDARD_KEYMAPS
        self._canonical: tuple[NamedKeymap, ...] = tuple(
            keymap.copy() for keymap in canonical
        )
        self._logger_name = logger_name
        self._revision = 0
        self.changed = False

    def __len__(self) -> int:
        return len(self._keymaps)

    def __iter__(self) -> Iterator[NamedKeymap]:
        return iter(self._keymaps)

    def __getitem__(self, index: int) -> NamedKeymap:
        return self._keymaps[index]

    @property
    def canonical(self) -> tuple[NamedKeymap, ...]:
        return self._canonical

    def revision(self) -> int:
        return self._revision

    def names(self) -> list[str]:
        return [keymap.name for keymap in self._keymaps]

    def lookup(self, name: str) -> Optional[KeymapMatch]:
        for index, keymap in enumerate(self._keymaps):
            if keymap.name == name:
                return KeymapMatch(table=keymap.table, index=index, name=name)
        record_event(
            "keymaps::lookup_miss",
            level="warning",
            data={"name": name, "available": self.names()},
            logger_name=self._logger_name,
        )
        return None

    def canonical_table(self, name: str) -> Optional[KeymapTable]:
        """Compiled-in table called ``name``, falling back to the first one."""

        for keymap in self._canonical:
            if keymap.name == name:
                return keymap.table
        if self._canonical:
            return self._canonical[0].table
        return None

    def add(self, keymap: NamedKeymap) -> NamedKeymap:
        self._keymaps.append(keymap)
        self._touch()
        return keymap

    def remove(self, name: str) -> Optional[NamedKeymap]:
        for index, keymap in enumerate(self._keymaps):
            if keymap.name == name:
                del self._keymaps[index]
                self._touch()
                return keymap
        return None

    def replace_all(self, keymaps: Iterable[NamedKeymap]) -> None:
        self._keymaps = list(keymaps)
        self._touch()

    def clone_from(self, other: "KeymapRegistry | Iterable[NamedKeymap]") -> None:
        """Deep-copy every keymap of ``other``; nothing is shared afterwards."""

        self.replace_all(keymap.copy() for keymap in other)

    def copy(self) -> "KeymapRegistry":
        return KeymapRegistry(
            self._keymaps, canonical=self._canonical, logger_name=self._logger_name
        )

    def reset_to_canonical(self) -> None:
        self.clone_from(self._canonical)

    def mark_saved(self) -> None:
        self.changed = False

    def stats(self) -> RegistryStats:
        return RegistryStats(
            keymap_count=len(self._keymaps),
            binding_count=sum(len(keymap.table) for keymap in self._keymaps),
            names=tuple(self.names()),
            changed=self.changed,
        )

    def _touch(self) -> None:
        self._revision += 1
        self.changed = True


__all__ = [
    "NamedKeymap",
    "KeymapMatch",
    "KeymapRegistry",
    "RegistryStats",
]
