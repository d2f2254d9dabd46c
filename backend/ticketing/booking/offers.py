"""Promotional offers and order discounts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass
class PromoOffer:
    """A promotional code attached to an event.

    Parameters
    ----------
    discount_value : float
        Percent off for ``percentage`` offers, currency amount for ``fixed``.
    max_uses : int
        Redemptions allowed in total; ``current_uses`` counts those made.
    """

    code: str
    discount_type: DiscountType
    discount_value: float
    valid_from: datetime
    valid_until: datetime
    max_uses: int = 100
    current_uses: int = 0
    active: bool = True

    def __post_init__(self) -> None:
        self.discount_type = DiscountType(self.discount_type)
        if self.discount_value < 0:
            raise ValueError(f"discount_value must be >= 0, got {self.discount_value}")
        if self.discount_type is DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError(f"percentage discount cannot exceed 100, got {self.discount_value}")
        if _aware(self.valid_until) < _aware(self.valid_from):
            raise ValueError("Offer end date must be after start date")

    def is_redeemable(self, now: datetime) -> bool:
        moment = _aware(now)
        return (
            self.active
            and self.current_uses < self.max_uses
            and _aware(self.valid_from) <= moment <= _aware(self.valid_until)
        )


def _aware(value: datetime) -> datetime:
    # Naive datetimes coming back from SQLite are UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def compute_discount(offer: PromoOffer | None, subtotal: float, now: datetime) -> float:
    """Discount for ``subtotal``; never more than the subtotal itself."""
    if offer is None or subtotal <= 0 or not offer.is_redeemable(now):
        return 0.0
    if offer.discount_type is DiscountType.PERCENTAGE:
        discount = subtotal * offer.discount_value / 100
    else:
        discount = offer.discount_value
    return round(min(discount, subtotal), 2)
