"""Helpers for writing index query strings."""

from __future__ import annotations

_SPECIAL_CHARACTERS = set('\\+-!():^[]"{}~*?|&/')


def escape(term: str) -> str:
    """Backslash-escape characters that carry meaning in a query string.

    Every special character stays literal, including a ``*`` inside a word.
    """

    return "".join(f"\\{ch}" if ch in _SPECIAL_CHARACTERS else ch for ch in term)


__all__ = ["escape"]
