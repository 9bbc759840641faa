"""Normalized string keys used for deduplication.

Component names, feature names, hardware strings and colour labels are
compared case-insensitively after trimming. ``NormalizedKey`` marks a
string that has been through that normalization so raw display strings are
never used as set/map keys by accident.
"""

from __future__ import annotations

from typing import Any, Iterable, NewType

NormalizedKey = NewType("NormalizedKey", str)


def normalize_key(text: Any) -> NormalizedKey:
    """Trim and lowercase a display string.

    Non-string input normalizes to the empty key, which callers treat as
    "no key".
    """
    if not isinstance(text, str):
        return NormalizedKey("")
    return NormalizedKey(text.strip().lower())


class KeySet:
    """Set of normalized keys with first-write-wins insertion."""

    def __init__(self, initial: Iterable[Any] = ()) -> None:
        self._keys: set[NormalizedKey] = set()
        for value in initial:
            self.add(value)

    def add(self, value: Any) -> bool:
        """Record a key. Returns False when empty or already present."""
        key = normalize_key(value)
        if not key or key in self._keys:
            return False
        self._keys.add(key)
        return True

    def __contains__(self, value: object) -> bool:
        return normalize_key(value) in self._keys

    def __len__(self) -> int:
        return len(self._keys)
