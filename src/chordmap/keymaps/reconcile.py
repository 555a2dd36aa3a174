"""Reconciliation of a keymap table against the canonical default table.

``reconcile`` repairs a candidate table in place so that

* no entry is bound to ``NIL`` or ``NEEDS_SECOND_KEY`` (stale entries, e.g.
  functions renamed since the table was saved, are dropped);
* every command function bound by the default table has at least one
  binding here too, copied from the default table where possible and from
  a ``"- Not Set - <Label>"`` placeholder otherwise (a default sequence
  that would turn a user binding into a prefix collision is never copied);
* an empty table simply becomes a copy of the default table;
* single-key bindings shadowed by a two-key sequence with the same first
  chord are reported. They are left in place: the resolver treats such a
  chord as a prefix, so the single-key binding stays unreachable until the
  user fixes it.

Nothing here raises for bad data. Every repair and every conflict is written
to telemetry as a warning and collected in the returned ``ReconcileReport``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from chordmap.runtime.telemetry import record_event, span

from .models import (
    KeyChord,
    KeyFunction,
    KeymapEntry,
    KeySequence,
    placeholder_chord,
)
from .table import KeymapTable


@dataclass(frozen=True, slots=True)
class PrefixConflict:
    """Single-key binding whose chord also starts a two-key sequence."""

    sequence: KeySequence
    function: KeyFunction
    shadowed_by: tuple[KeymapEntry, ...] = ()


@dataclass(slots=True)
class ReconcileReport:
    """What ``reconcile`` changed or flagged."""

    removed: list[KeymapEntry] = field(default_factory=list)
    filled: list[KeymapEntry] = field(default_factory=list)
    placeholders: list[KeymapEntry] = field(default_factory=list)
    conflicts: list[PrefixConflict] = field(default_factory=list)
    prefixes: frozenset[KeyChord] = frozenset()
    bootstrapped: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.removed or self.filled or self.placeholders)


def reconcile(
    table: KeymapTable,
    default: KeymapTable,
    *,
    logger_name: Optional[str] = None,
) -> ReconcileReport:
    """Bring ``table`` in line with ``default``; see the module docstring."""

    report = ReconcileReport()
    with span(
        "keymaps::reconcile",
        logger_name=logger_name,
        component="keymaps",
        metadata={"entries": len(table), "default_entries": len(default)},
    ) as handle:
        _purge_stale(table, report, logger_name)

        if not len(table):
            for entry in default.sorted_entries():
                if entry.function.is_sentinel:
                    continue
                table.bind(entry.sequence, entry.function)
            report.bootstrapped = True
        else:
            _fill_missing(table, default, report, logger_name)

        report.prefixes = table.prefix_index()
        _collect_conflicts(table, report, logger_name)

        handle.add_metadata("removed", len(report.removed))
        handle.add_metadata("filled", len(report.filled))
        handle.add_metadata("placeholders", len(report.placeholders))
        handle.add_metadata("conflicts", len(report.conflicts))
    return report


def _purge_stale(
    table: KeymapTable, report: ReconcileReport, logger_name: Optional[str]
) -> None:
    for sequence, function in table.items():
        if not function.is_sentinel:
            continue
        table.unbind(sequence)
        report.removed.append(KeymapEntry(sequence, function))
        record_event(
            "keymaps::stale_binding",
            level="warning",
            data={"sequence": sequence.encode(), "function": function.name},
            logger_name=logger_name,
        )


def _group_by_function(
    entries: Sequence[KeymapEntry],
) -> Iterator[tuple[KeyFunction, list[KeymapEntry]]]:
    """Consecutive runs of ``entries`` (already sorted) sharing a function."""

    index = 0
    while index < len(entries):
        function = entries[index].function
        run: list[KeymapEntry] = []
        while index < len(entries) and entries[index].function is function:
            run.append(entries[index])
            index += 1
        yield function, run


def _fill_missing(
    table: KeymapTable,
    default: KeymapTable,
    report: ReconcileReport,
    logger_name: Optional[str],
) -> None:
    # Merge-join over both tables sorted by function ordinal. Each command
    # function is visited exactly once, in ascending ordinal order.
    defaults = [
        (function, run)
        for function, run in _group_by_function(default.sorted_entries())
        if not function.is_sentinel
    ]
    bound = [fn for fn, _ in _group_by_function(table.sorted_entries())]

    mi = 0
    for function, default_run in defaults:
        while mi < len(bound) and bound[mi] < function:
            mi += 1
        if mi < len(bound) and bound[mi] is function:
            mi += 1
            continue
        _bind_missing(table, function, default_run, report, logger_name)


def _fillable(table: KeymapTable, sequence: KeySequence) -> bool:
    """True when binding ``sequence`` adds no prefix collision."""

    if sequence in table:
        return False
    if sequence.is_two_key:
        return KeySequence(sequence.first) not in table
    return sequence.first not in table.prefix_index()


def _bind_missing(
    table: KeymapTable,
    function: KeyFunction,
    default_run: list[KeymapEntry],
    report: ReconcileReport,
    logger_name: Optional[str],
) -> None:
    for entry in default_run:
        if not _fillable(table, entry.sequence):
            continue
        table.bind(entry.sequence, function)
        report.filled.append(entry)
        record_event(
            "keymaps::filled_binding",
            level="info",
            data={"sequence": entry.sequence.encode(), "function": function.label},
            logger_name=logger_name,
        )
        return

    # every default sequence for it is taken or would collide with a prefix
    placeholder = KeymapEntry(KeySequence(placeholder_chord(function)), function)
    table.bind(placeholder.sequence, function)
    report.placeholders.append(placeholder)
    record_event(
        "keymaps::placeholder_binding",
        level="warning",
        data={"function": function.label, "chord": placeholder.sequence.first},
        logger_name=logger_name,
    )


def _collect_conflicts(
    table: KeymapTable, report: ReconcileReport, logger_name: Optional[str]
) -> None:
    entries = table.sorted_entries()
    two_key = [entry for entry in entries if entry.sequence.is_two_key]
    for entry in entries:
        sequence = entry.sequence
        if sequence.is_two_key or sequence.first not in report.prefixes:
            continue
        shadowed_by = tuple(
            other for other in two_key if other.sequence.first == sequence.first
        )
        report.conflicts.append(
            PrefixConflict(sequence, entry.function, shadowed_by)
        )
        record_event(
            "keymaps::prefix_conflict",
            level="warning",
            data={
                "sequence": sequence.encode(),
                "function": entry.function.label,
                "shadowed_by": [other.sequence.encode() for other in shadowed_by],
            },
            logger_name=logger_name,
        )


__all__ = ["PrefixConflict", "ReconcileReport", "reconcile"]
