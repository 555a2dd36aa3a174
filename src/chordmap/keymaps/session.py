"""Owner of the active keymap.

A ``KeymapSession`` holds one registry and publishes the active table as an
immutable ``ActiveKeymap`` snapshot. Writers (``activate``, ``update``,
``reset_to_canonical``) serialize on a lock and swap the snapshot only once
reconciliation has finished, so ``resolve`` never sees a half-built prefix
index and needs no locking.
"""

from __future__ import annotations

import threading
from typing import Optional, Sequence

from chordmap.runtime import settings
from chordmap.runtime.telemetry import span

from .defaults import STANDARD_KEYMAPS, standard_registry, standard_table
from .models import KeyChord, KeyFunction, KeySequence
from .reconcile import ReconcileReport, reconcile
from .registry import KeymapRegistry, NamedKeymap
from .resolver import ActiveKeymap, resolve
from .table import KeymapTable


class KeymapSession:
    """Active-keymap state for one application.

    ``canonical`` overrides the registry's compiled-in keymaps as the
    reconcile target and the set ``reset_to_canonical`` restores. With
    neither set, the standard keymaps are used.
    """

    def __init__(
        self,
        registry: KeymapRegistry | None = None,
        *,
        default_name: str | None = None,
        canonical: Optional[Sequence[NamedKeymap]] = None,
        logger_name: str | None = None,
    ) -> None:
        if registry is None:
            registry = standard_registry(logger_name=logger_name)
        self._registry = registry
        self._default_name = default_name or settings.default_keymap_name()
        self._canonical: tuple[NamedKeymap, ...] = tuple(
            keymap.copy() for keymap in canonical or ()
        )
        self._logger_name = logger_name
        self._lock = threading.RLock()
        self._active = ActiveKeymap()
        if self.activate(self._default_name) is None:
            fallback = settings.platform_keymap_name()
            if fallback != self._default_name:
                self.activate(fallback)

    @property
    def registry(self) -> KeymapRegistry:
        return self._registry

    @property
    def default_name(self) -> str:
        return self._default_name

    @property
    def active(self) -> ActiveKeymap:
        return self._active

    def active_table(self) -> KeymapTable:
        return self._active.table()

    @property
    def canonical(self) -> tuple[NamedKeymap, ...]:
        return self._canonical or self._registry.canonical or STANDARD_KEYMAPS

    def default_table(self) -> KeymapTable:
        """Canonical table that custom maps are reconciled against.

        Unknown default names fall back to the first canonical keymap.
        """

        if self._canonical:
            for keymap in self._canonical:
                if keymap.name == self._default_name:
                    return keymap.table
            return self._canonical[0].table
        table = self._registry.canonical_table(self._default_name)
        return table if table is not None else standard_table(self._default_name)

    def resolve(self, first: KeyChord, second: KeyChord = "") -> KeyFunction:
        active = self._active
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"keymap": active.name, "first": first, "second": second},
        ) as handle:
            function = resolve(active, first, second)
            handle.add_metadata("function", function.name)
            return function

    def needs_second_key(self, chord: KeyChord) -> bool:
        return chord in self._active.prefixes

    def sequence_for_function(self, function: KeyFunction) -> KeySequence:
        return self.active_table().sequence_for_function(function)

    def update(self, table: KeymapTable) -> ReconcileReport:
        """Reconcile ``table`` in place against the canonical default."""

        with self._lock:
            return reconcile(
                table, self.default_table(), logger_name=self._logger_name
            )

    def activate(self, name: str) -> Optional[ReconcileReport]:
        """Make the registry keymap ``name`` active.

        Returns ``None`` and keeps the current keymap when ``name`` is not
        registered.
        """

        with self._lock, span(
            "keymaps::activate",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"name": name},
        ) as handle:
            match = self._registry.lookup(name)
            if match is None:
                handle.add_metadata("status", "miss")
                return None
            return self._publish(name, match.table)

    def activate_table(
        self, table: KeymapTable, name: str = "custom"
    ) -> ReconcileReport:
        """Reconcile and activate a table that is not in the registry."""

        with self._lock:
            return self._publish(name, table)

    def reset_to_canonical(self) -> Optional[ReconcileReport]:
        """Restore the compiled-in keymaps and re-activate the current name."""

        with self._lock:
            self._registry.clone_from(self.canonical)
            name = self._active.name or self._default_name
            report = self.activate(name)
            if report is None and name != self._default_name:
                report = self.activate(self._default_name)
            return report

    def _publish(self, name: str, table: KeymapTable) -> ReconcileReport:
        report = self.update(table)
        self._active = ActiveKeymap.from_table(name, table)
        return report


__all__ = ["KeymapSession"]
