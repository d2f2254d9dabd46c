"""Seat-selection checks performed before an order is stored."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ticketing.seating import SeatArrangement, SeatKey, normalize_seat, normalize_seats

from .errors import DuplicateSeatError, SeatCountMismatchError, SeatOutOfRangeError, SeatTakenError


def validate_selection(
    arrangement: SeatArrangement | Mapping[str, Any],
    taken: Iterable[Any],
    requested: Iterable[Any],
    quantity: int,
) -> list[SeatKey]:
    """Return the requested seats as keys, or raise a :class:`BookingError`.

    Unreadable seat references propagate as ``InvalidSeatError``.
    """
    grid = SeatArrangement.from_config(arrangement)
    occupied = normalize_seats(taken)
    keys = [normalize_seat(raw) for raw in requested]

    if len(keys) != quantity:
        raise SeatCountMismatchError(len(keys), quantity)

    seen: set[SeatKey] = set()
    for key in keys:
        if key in seen:
            raise DuplicateSeatError(key.label)
        seen.add(key)
        if not grid.contains(key):
            raise SeatOutOfRangeError(key.label)
        if key in occupied:
            raise SeatTakenError(key.label)

    return keys
