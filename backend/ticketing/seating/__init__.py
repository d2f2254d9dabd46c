"""Seat maps -- row labelling, seat addressing, generation and allocation."""

from .labels import row_index, row_label, row_labels
from .seat_keys import InvalidSeatError, SeatKey, normalize_seat, normalize_seats
from .generator import (
    GeneratedSeat,
    SeatArrangement,
    SeatStatus,
    SeatUnavailableError,
    TicketTypeLayout,
    allocate_seats,
    generate_seats,
    seat_capacity,
)

__all__ = [
    "row_index",
    "row_label",
    "row_labels",
    "InvalidSeatError",
    "SeatKey",
    "normalize_seat",
    "normalize_seats",
    "GeneratedSeat",
    "SeatArrangement",
    "SeatStatus",
    "SeatUnavailableError",
    "TicketTypeLayout",
    "allocate_seats",
    "generate_seats",
    "seat_capacity",
]
