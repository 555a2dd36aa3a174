"""Key-sequence resolution, reconciliation and keymap registries."""

from .models import (
    EMPTY_SEQUENCE,
    KeyChord,
    KeyFunction,
    KeymapEntry,
    KeySequence,
    placeholder_chord,
)
from .table import KeymapConflictError, KeymapTable
from .resolver import ActiveKeymap, resolve
from .reconcile import PrefixConflict, ReconcileReport, reconcile
from .registry import KeymapMatch, KeymapRegistry, NamedKeymap, RegistryStats
from .defaults import STANDARD_KEYMAPS, standard_registry, standard_table
from .codec import KeymapPersistenceError, open_json, save_json
from .session import KeymapSession

__all__ = [
    "EMPTY_SEQUENCE",
    "KeyChord",
    "KeyFunction",
    "KeymapEntry",
    "KeySequence",
    "placeholder_chord",
    "KeymapTable",
    "KeymapConflictError",
    "ActiveKeymap",
    "resolve",
    "PrefixConflict",
    "ReconcileReport",
    "reconcile",
    "KeymapMatch",
    "KeymapRegistry",
    "NamedKeymap",
    "RegistryStats",
    "STANDARD_KEYMAPS",
    "standard_registry",
    "standard_table",
    "KeymapPersistenceError",
    "open_json",
    "save_json",
    "KeymapSession",
]
