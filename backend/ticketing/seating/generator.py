"""Seat map generation from ticket-type seating arrangements.

A ticket type owns a rectangular block of ``rows x columns`` seats, optionally
with a shorter last row. The seat map is a pure projection of that
configuration plus the already-booked seats; nothing here touches bookings.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .labels import row_label
from .seat_keys import SeatKey, normalize_seats

logger = logging.getLogger(__name__)


class SeatStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    BOOKED = "booked"
    SELECTED = "selected"


class SeatUnavailableError(ValueError):
    """Raised when not enough free seats remain for an allocation."""


@dataclass(frozen=True)
class SeatArrangement:
    """Seating grid of a ticket type.

    Parameters
    ----------
    rows : int
        Number of rows, >= 1.
    columns : int
        Seats per full row, >= 1.
    last_row_columns : int or None
        Seats in the final row when it is shorter than the others.
    """

    rows: int
    columns: int
    last_row_columns: int | None = None

    def __post_init__(self) -> None:
        for name in ("rows", "columns"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        last = self.last_row_columns
        if last is not None:
            if isinstance(last, bool) or not isinstance(last, int) or not 1 <= last <= self.columns:
                raise ValueError(
                    f"last_row_columns must be between 1 and {self.columns}, got {last!r}"
                )

    @classmethod
    def from_config(cls, config: SeatArrangement | Mapping[str, Any]) -> SeatArrangement:
        """Build from a mapping using either snake_case or camelCase keys."""
        if isinstance(config, SeatArrangement):
            return config
        if not isinstance(config, Mapping):
            raise ValueError(f"seat arrangement must be a mapping, got {type(config).__name__}")
        last = config.get("last_row_columns", config.get("lastRowColumns"))
        return cls(
            rows=config.get("rows"),
            columns=config.get("columns"),
            last_row_columns=last or None,
        )

    def columns_in_row(self, row: int) -> int:
        if row == self.rows and self.last_row_columns:
            return self.last_row_columns
        return self.columns

    @property
    def capacity(self) -> int:
        return (self.rows - 1) * self.columns + self.columns_in_row(self.rows)

    def contains(self, key: SeatKey) -> bool:
        return 1 <= key.row <= self.rows and 1 <= key.column <= self.columns_in_row(key.row)

    def iter_keys(self) -> Iterator[SeatKey]:
        """All seats, row by row, column ascending."""
        for row in range(1, self.rows + 1):
            for column in range(1, self.columns_in_row(row) + 1):
                yield SeatKey(row=row, column=column)


@dataclass
class TicketTypeLayout:
    """Input for one ticket type: price, grid and occupied seats.

    ``arrangement`` may be a :class:`SeatArrangement`, a raw mapping, or None.
    Booked and reserved seats may use any form :func:`normalize_seat` accepts.
    """

    ticket_type_id: str
    price: float
    arrangement: SeatArrangement | Mapping[str, Any] | None
    booked_seats: Iterable[Any] = field(default_factory=tuple)
    reserved_seats: Iterable[Any] = field(default_factory=tuple)


@dataclass(frozen=True)
class GeneratedSeat:
    id: str
    row: str
    column: int
    status: SeatStatus
    price: float
    ticket_type_id: str


def seat_capacity(arrangement: SeatArrangement | Mapping[str, Any]) -> int:
    return SeatArrangement.from_config(arrangement).capacity


def generate_seats(
    layouts: Iterable[TicketTypeLayout],
    selected: Iterable[Any] = (),
) -> list[GeneratedSeat]:
    """Expand ticket-type layouts into a flat seat list.

    Seats are emitted ticket type by ticket type, row by row, column
    ascending. A seat is ``booked`` if it appears in the booked seats,
    otherwise ``reserved``, ``selected`` or ``available`` in that order.
    Ticket types without a usable arrangement contribute no seats.
    """
    selected_keys = normalize_seats(selected)
    seats: list[GeneratedSeat] = []

    for layout in layouts:
        if layout.arrangement is None:
            logger.warning("Ticket type %s has no seat arrangement; skipping", layout.ticket_type_id)
            continue
        try:
            arrangement = SeatArrangement.from_config(layout.arrangement)
        except (TypeError, ValueError) as exc:
            logger.warning(
                "Ticket type %s has a malformed seat arrangement (%s); skipping",
                layout.ticket_type_id, exc,
            )
            continue

        booked = normalize_seats(layout.booked_seats)
        reserved = normalize_seats(layout.reserved_seats)

        for key in arrangement.iter_keys():
            if key in booked:
                status = SeatStatus.BOOKED
            elif key in reserved:
                status = SeatStatus.RESERVED
            elif key in selected_keys:
                status = SeatStatus.SELECTED
            else:
                status = SeatStatus.AVAILABLE
            seats.append(GeneratedSeat(
                id=key.label,
                row=row_label(key.row),
                column=key.column,
                status=status,
                price=layout.price,
                ticket_type_id=layout.ticket_type_id,
            ))

    return seats


def allocate_seats(
    arrangement: SeatArrangement | Mapping[str, Any],
    taken: Iterable[Any],
    quantity: int,
) -> list[SeatKey]:
    """Pick ``quantity`` free seats, first-fit in row-major order."""
    if quantity < 1:
        raise ValueError(f"quantity must be >= 1, got {quantity}")
    grid = SeatArrangement.from_config(arrangement)
    occupied = normalize_seats(taken)

    picked: list[SeatKey] = []
    for key in grid.iter_keys():
        if key in occupied:
            continue
        picked.append(key)
        if len(picked) == quantity:
            return picked

    raise SeatUnavailableError(
        f"Only {len(picked)} seats left, {quantity} requested"
    )
