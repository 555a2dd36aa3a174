"""JSON encoding of keymaps and the prefs-file round trip.

A table is stored as an object keyed by the encoded sequence
(``"Control+X;o"``) with the function label as value; a registry is a list of
``{"Name": ..., "Desc": ..., "Map": {...}}`` objects.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from chordmap.runtime.telemetry import record_event, span

from .models import KeyFunction, KeySequence
from .registry import KeymapRegistry, NamedKeymap
from .table import KeymapTable

PathLike = Union[str, os.PathLike]


class KeymapPersistenceError(RuntimeError):
    """Reading or writing a keymaps file failed; nothing was changed."""

    def __init__(self, path: PathLike, reason: str):
        super().__init__(f"{os.fspath(path)}: {reason}")
        self.path = Path(path)
        self.reason = reason


def encode_sequence(sequence: KeySequence) -> str:
    return sequence.encode()


def decode_sequence(text: str) -> KeySequence:
    return KeySequence.decode(text)


def encode_table(table: KeymapTable) -> Dict[str, str]:
    return {
        sequence.encode(): function.label
        for sequence, function in sorted(table.items())
    }


def decode_table(data: Mapping[str, Any]) -> KeymapTable:
    """Rebuild a table; unknown function labels come back as ``NIL``.

    Keys with an empty first chord can never be typed, so they are kept as
    ``NIL`` too and purged by reconciliation.
    """

    if not isinstance(data, Mapping):
        raise ValueError(f"keymap must be an object, got {type(data).__name__}")
    entries: Dict[KeySequence, KeyFunction] = {}
    for text, label in data.items():
        sequence = KeySequence.decode(str(text))
        function = KeyFunction.parse(str(label))
        if function.is_sentinel or not sequence.first:
            function = KeyFunction.NIL
        entries[sequence] = function
    return KeymapTable(entries)


def encode_registry(registry: KeymapRegistry) -> List[Dict[str, Any]]:
    return [
        {
            "Name": keymap.name,
            "Desc": keymap.description,
            "Map": encode_table(keymap.table),
        }
        for keymap in registry
    ]


def decode_keymaps(data: Any) -> List[NamedKeymap]:
    if not isinstance(data, list):
        raise ValueError("keymaps file must hold a list")
    keymaps: List[NamedKeymap] = []
    for item in data:
        if not isinstance(item, Mapping):
            raise ValueError("each keymap must be an object")
        keymaps.append(
            NamedKeymap(
                name=str(item.get("Name", "")),
                description=str(item.get("Desc", "")),
                table=decode_table(item.get("Map") or {}),
            )
        )
    return keymaps


def dumps(registry: KeymapRegistry) -> str:
    return json.dumps(encode_registry(registry), indent=2)


def loads(text: str) -> List[NamedKeymap]:
    return decode_keymaps(json.loads(text))


def open_json(
    registry: KeymapRegistry, path: PathLike, *, logger_name: Optional[str] = None
) -> None:
    """Replace the registry contents with the keymaps stored at ``path``.

    The file is fully parsed before anything is replaced, so a failed load
    leaves ``registry`` exactly as it was.
    """

    with span(
        "keymaps::open_json",
        logger_name=logger_name,
        component="keymaps",
        metadata={"path": os.fspath(path)},
    ) as handle:
        try:
            keymaps = loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            _report_failure("open", path, exc, logger_name)
            raise KeymapPersistenceError(path, str(exc)) from exc
        registry.replace_all(keymaps)
        registry.mark_saved()
        handle.add_metadata("keymaps", len(keymaps))


def save_json(
    registry: KeymapRegistry, path: PathLike, *, logger_name: Optional[str] = None
) -> None:
    """Write the registry to ``path`` atomically.

    The data goes to a temporary file next to ``path`` which then replaces
    it, so a failed save leaves the previous file untouched.
    """

    target = Path(path)
    with span(
        "keymaps::save_json",
        logger_name=logger_name,
        component="keymaps",
        metadata={"path": os.fspath(target)},
    ):
        try:
            payload = dumps(registry)
            fd, tmp_name = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
        except (OSError, ValueError) as exc:
            _report_failure("save", target, exc, logger_name)
            raise KeymapPersistenceError(target, str(exc)) from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, target)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            _report_failure("save", target, exc, logger_name)
            raise KeymapPersistenceError(target, str(exc)) from exc
        registry.mark_saved()


def _report_failure(
    operation: str, path: PathLike, exc: Exception, logger_name: Optional[str]
) -> None:
    record_event(
        "keymaps::persistence_error",
        level="error",
        data={"operation": operation, "path": os.fspath(path), "error": str(exc)},
        logger_name=logger_name,
    )


__all__ = [
    "KeymapPersistenceError",
    "encode_sequence",
    "decode_sequence",
    "encode_table",
    "decode_table",
    "encode_registry",
    "decode_keymaps",
    "dumps",
    "loads",
    "open_json",
    "save_json",
]
