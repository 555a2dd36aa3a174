"""Runtime services shared by the keymap core."""

from . import settings, telemetry

__all__ = ["settings", "telemetry"]
