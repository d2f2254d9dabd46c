"""Booking rule violations. Messages are safe to show to end users."""

from __future__ import annotations


class BookingError(ValueError):
    """Base class for rejected bookings."""


class SeatCountMismatchError(BookingError):
    def __init__(self, selected: int, quantity: int) -> None:
        super().__init__(
            f"Number of seats selected ({selected}) does not match quantity ({quantity})"
        )


class DuplicateSeatError(BookingError):
    def __init__(self, label: str) -> None:
        super().__init__(f"Seat {label} was selected more than once")


class SeatOutOfRangeError(BookingError):
    def __init__(self, label: str) -> None:
        super().__init__(f"Seat {label} is out of range")


class SeatTakenError(BookingError):
    def __init__(self, label: str) -> None:
        super().__init__(f"Seat {label} is already booked")
