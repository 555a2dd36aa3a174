"""Environment-driven settings for chordmap.

Every knob is read from an environment variable carrying the ``CHORDMAP_``
prefix so embedding applications can tune behaviour without code changes.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

ENV_PREFIX = "CHORDMAP_"
DEFAULT_PREFS_FILE = "key_maps_prefs.json"

_PLATFORM_KEYMAPS = {
    "darwin": "MacStd",
    "win32": "WindowsStd",
}
_FALLBACK_KEYMAP = "LinuxStd"


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool) -> bool:
    raw = env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def platform_keymap_name(platform: Optional[str] = None) -> str:
    """Name of the standard keymap matching ``platform`` (``sys.platform``)."""

    key = platform or sys.platform
    return _PLATFORM_KEYMAPS.get(key, _FALLBACK_KEYMAP)


def default_keymap_name(platform: Optional[str] = None) -> str:
    """Keymap activated at startup; ``CHORDMAP_KEYMAP`` wins when set."""

    override = (env("KEYMAP") or "").strip()
    if override:
        return override
    return platform_keymap_name(platform)


def prefs_file_name() -> str:
    return env("PREFS_FILE") or DEFAULT_PREFS_FILE


__all__ = [
    "ENV_PREFIX",
    "DEFAULT_PREFS_FILE",
    "env",
    "env_flag",
    "platform_keymap_name",
    "default_keymap_name",
    "prefs_file_name",
]
