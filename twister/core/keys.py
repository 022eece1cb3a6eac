from __future__ import annotations

from collections.abc import Iterable

# Simple US layout without symbols: digits, letters and the space bar.
KEY_ROWS: tuple[tuple[str, ...], ...] = (
    ("1", "2", "3", "4", "5", "6", "7", "8", "9", "0"),
    ("Q", "W", "E", "R", "T", "Y", "U", "I", "O", "P"),
    ("A", "S", "D", "F", "G", "H", "J", "K", "L"),
    ("Z", "X", "C", "V", "B", "N", "M"),
    ("SPACE",),
)

ALL_KEYS: tuple[str, ...] = tuple(k for row in KEY_ROWS for k in row)

_KEY_ORDER: dict[str, int] = {k: i for i, k in enumerate(ALL_KEYS)}


def validate_key(value: str) -> str:
    """Accept only identifiers from the canonical alphabet.

    Normalizing raw device input (lowercase letters, " " for space, ...) is the
    producer's job; anything else is a contract violation.
    """

    if value not in _KEY_ORDER:
        raise ValueError(f"Unknown key: {value!r}")
    return value


def sort_keys(keys: Iterable[str]) -> list[str]:
    """Sort keys in keyboard layout order."""

    return sorted(keys, key=_KEY_ORDER.__getitem__)


def key_label(key: str) -> str:
    return "Space" if key == "SPACE" else key
