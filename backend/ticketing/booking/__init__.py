"""Booking rules: seat-selection validation and promotional discounts."""

from .errors import (
    BookingError,
    DuplicateSeatError,
    SeatCountMismatchError,
    SeatOutOfRangeError,
    SeatTakenError,
)
from .offers import DiscountType, PromoOffer, compute_discount
from .validation import validate_selection

__all__ = [
    "BookingError",
    "DuplicateSeatError",
    "SeatCountMismatchError",
    "SeatOutOfRangeError",
    "SeatTakenError",
    "DiscountType",
    "PromoOffer",
    "compute_discount",
    "validate_selection",
]
