"""Row labels for seat maps.

Rows are labelled spreadsheet-style so that seating blocks with more than 26
rows keep unique, sortable labels::

    1 -> A, 26 -> Z, 27 -> AA, 28 -> AB, 702 -> ZZ, 703 -> AAA
"""

from __future__ import annotations

_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def row_label(index: int) -> str:
    """Return the label for a 1-based row index."""
    if isinstance(index, bool) or not isinstance(index, int) or index < 1:
        raise ValueError(f"row index must be a positive integer, got {index!r}")

    label = ""
    n = index
    while n > 0:
        n, rem = divmod(n - 1, 26)
        label = _ALPHABET[rem] + label
    return label


def row_index(label: str) -> int:
    """Inverse of :func:`row_label` (case-insensitive)."""
    if not isinstance(label, str):
        raise ValueError(f"row label must be a string, got {label!r}")
    text = label.strip().upper()
    if not text or any(ch not in _ALPHABET for ch in text):
        raise ValueError(f"invalid row label {label!r}")

    index = 0
    for ch in text:
        index = index * 26 + (_ALPHABET.index(ch) + 1)
    return index


def row_labels(count: int) -> list[str]:
    """First ``count`` row labels in order."""
    return [row_label(i) for i in range(1, count + 1)]
