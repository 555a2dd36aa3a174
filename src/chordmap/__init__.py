"""Chorded key-sequence to command resolution for editors."""

__all__ = [
    "keymaps",
    "runtime",
]

__version__ = "0.1.0"
