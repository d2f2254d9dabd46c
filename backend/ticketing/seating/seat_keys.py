"""Canonical seat addressing.

Booked seats reach the engine in several shapes (``"A12"`` strings,
``{"row": 1, "column": 12}`` with a numeric row, ``{"row": "A", "column": 12}``
with a letter row). They are normalized here, once, into :class:`SeatKey` so
that nothing downstream has to know about the wire formats.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .labels import row_index, row_label

logger = logging.getLogger(__name__)

_SEAT_CODE_RE = re.compile(r"^([A-Za-z]+)\s*-?\s*(\d+)$")


class InvalidSeatError(ValueError):
    """Raised when a seat reference cannot be understood."""


@dataclass(frozen=True, order=True)
class SeatKey:
    """A seat address: 1-based row and 1-based column."""

    row: int
    column: int

    def __post_init__(self) -> None:
        if self.row < 1:
            raise InvalidSeatError(f"row must be >= 1, got {self.row}")
        if self.column < 1:
            raise InvalidSeatError(f"column must be >= 1, got {self.column}")

    @property
    def row_label(self) -> str:
        return row_label(self.row)

    @property
    def label(self) -> str:
        """Printable seat code, e.g. ``B7``."""
        return f"{self.row_label}{self.column}"

    def __str__(self) -> str:
        return self.label


def _parse_row(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidSeatError(f"invalid row {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
        try:
            return row_index(text)
        except ValueError as exc:
            raise InvalidSeatError(f"invalid row {value!r}") from exc
    raise InvalidSeatError(f"invalid row {value!r}")


def _parse_column(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidSeatError(f"invalid column {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise InvalidSeatError(f"invalid column {value!r}")


def normalize_seat(raw: Any) -> SeatKey:
    """Convert any supported seat reference into a :class:`SeatKey`.

    Accepted forms: ``SeatKey``; seat codes such as ``"A12"`` or ``"aa-3"``;
    mappings with ``row``/``column`` keys (row numeric 1-based or a letter
    label); ``(row, column)`` pairs. Objects exposing ``row`` and ``column``
    attributes are treated like mappings.
    """
    if isinstance(raw, SeatKey):
        return raw

    if isinstance(raw, str):
        match = _SEAT_CODE_RE.match(raw.strip())
        if not match:
            raise InvalidSeatError(f"invalid seat code {raw!r}")
        letters, digits = match.groups()
        return SeatKey(row=row_index(letters), column=int(digits))

    if isinstance(raw, Mapping):
        if "row" not in raw or "column" not in raw:
            raise InvalidSeatError(f"seat mapping needs row and column: {raw!r}")
        return SeatKey(row=_parse_row(raw["row"]), column=_parse_column(raw["column"]))

    if isinstance(raw, (tuple, list)) and len(raw) == 2:
        return SeatKey(row=_parse_row(raw[0]), column=_parse_column(raw[1]))

    if hasattr(raw, "row") and hasattr(raw, "column"):
        return SeatKey(row=_parse_row(raw.row), column=_parse_column(raw.column))

    raise InvalidSeatError(f"unsupported seat reference {raw!r}")


def normalize_seats(raws: Iterable[Any] | None) -> frozenset[SeatKey]:
    """Best-effort bulk normalization; unreadable entries are dropped."""
    keys: set[SeatKey] = set()
    for raw in raws or ():
        try:
            keys.add(normalize_seat(raw))
        except InvalidSeatError as exc:
            logger.warning("Ignoring unreadable seat reference: %s", exc)
    return frozenset(keys)
