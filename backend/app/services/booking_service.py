"""Order placement, confirmation and cancellation, plus seat-map loading."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.event import Event
from app.models.offer import PromotionalOffer
from app.models.order import Order, OrderItem, OrderStatus
from app.models.ticket_type import BookedSeat, TicketType
from app.models.user import User
from app.schemas.order import OrderCreate, PaymentInfo
from ticketing.booking import BookingError, PromoOffer, compute_discount, validate_selection
from ticketing.seating import (
    GeneratedSeat,
    SeatKey,
    TicketTypeLayout,
    allocate_seats,
    generate_seats,
)

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    pass


class SeatConflictError(Exception):
    """Another order took one of the seats while this one was being placed."""


# ══════════════════════════════════════════════════════════════════════
# Loading
# ══════════════════════════════════════════════════════════════════════

def _event_with_seats():
    return select(Event).options(
        selectinload(Event.ticket_types)
        .selectinload(TicketType.booked_seats)
        .selectinload(BookedSeat.order_item)
        .selectinload(OrderItem.order),
        selectinload(Event.promotional_offers),
    ).execution_options(populate_existing=True)


async def load_event(db: AsyncSession, event_id: uuid.UUID) -> Event | None:
    result = await db.execute(_event_with_seats().where(Event.id == event_id))
    return result.scalar_one_or_none()


async def load_order(db: AsyncSession, order_id: uuid.UUID) -> Order | None:
    result = await db.execute(
        select(Order)
        .options(selectinload(Order.items).selectinload(OrderItem.seats))
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _held_seats(ticket_type: TicketType, status: OrderStatus) -> list[BookedSeat]:
    return [s for s in ticket_type.booked_seats if s.order_item.order.status == status.value]


def ticket_layouts(event: Event) -> list[TicketTypeLayout]:
    """Seat-map input for every ticket type; pending orders show as reserved."""
    return [
        TicketTypeLayout(
            ticket_type_id=str(tt.id),
            price=tt.price,
            arrangement=tt.seat_arrangement,
            booked_seats=_held_seats(tt, OrderStatus.CONFIRMED),
            reserved_seats=_held_seats(tt, OrderStatus.PENDING),
        )
        for tt in event.ticket_types
    ]


def build_seat_map(event: Event, ticket_type_id: uuid.UUID | None = None) -> list[GeneratedSeat]:
    layouts = ticket_layouts(event)
    if ticket_type_id is not None:
        layouts = [layout for layout in layouts if layout.ticket_type_id == str(ticket_type_id)]
    return generate_seats(layouts)


# ══════════════════════════════════════════════════════════════════════
# Orders
# ══════════════════════════════════════════════════════════════════════

def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def _tickets_sold(db: AsyncSession, event_id: uuid.UUID) -> dict[uuid.UUID, int]:
    """Tickets held by non-cancelled orders, per ticket type."""
    result = await db.execute(
        select(OrderItem.ticket_type_id, func.sum(OrderItem.quantity))
        .join(Order, OrderItem.order_id == Order.id)
        .where(Order.event_id == event_id, Order.status != OrderStatus.CANCELLED.value)
        .group_by(OrderItem.ticket_type_id)
    )
    return defaultdict(int, {tt_id: int(total or 0) for tt_id, total in result.all()})


def _find_offer(event: Event, code: str) -> PromotionalOffer:
    for offer in event.promotional_offers:
        if offer.code.lower() == code.strip().lower():
            return offer
    raise BookingError("Invalid promotional code")


def _to_promo(offer: PromotionalOffer) -> PromoOffer:
    return PromoOffer(
        code=offer.code,
        discount_type=offer.discount_type,
        discount_value=offer.discount_value,
        valid_from=_aware(offer.valid_from),
        valid_until=_aware(offer.valid_until),
        max_uses=offer.max_uses,
        current_uses=offer.current_uses,
        active=offer.active,
    )


def _pick_seats(
    ticket_type: TicketType, requested: list | None, quantity: int, taken: list,
) -> list[SeatKey]:
    if ticket_type.seat_arrangement is None:
        if requested:
            raise BookingError(f"Ticket type {ticket_type.name} has no assigned seating")
        return []
    if requested is not None:
        raw = [r if isinstance(r, str) else r.model_dump() for r in requested]
        return validate_selection(ticket_type.seat_arrangement, taken, raw, quantity)
    return allocate_seats(ticket_type.seat_arrangement, taken, quantity)


async def create_order(
    db: AsyncSession, user: User, body: OrderCreate, now: datetime | None = None,
) -> Order:
    """Place an order. Orders carrying payment details are confirmed at once.

    Raises ``NotFoundError`` for unknown or unpublished events,
    ``BookingError`` (and the seating errors, all ``ValueError``) for
    rejected selections, and ``SeatConflictError`` when a concurrent order
    claimed a seat first.
    """
    now = now or datetime.now(timezone.utc)
    event = await load_event(db, body.event_id)
    if event is None or not event.published:
        raise NotFoundError("Event not found")

    ticket_types = {tt.id: tt for tt in event.ticket_types}
    taken: dict[uuid.UUID, list] = {tt_id: list(tt.booked_seats) for tt_id, tt in ticket_types.items()}
    sold = await _tickets_sold(db, event.id)

    order = Order(
        id=uuid.uuid4(),
        user_id=user.id,
        event_id=event.id,
        total_amount=0.0,
        discount=0.0,
        created_at=now,
    )
    subtotal = 0.0
    total_quantity = 0

    for request in body.tickets:
        ticket_type = ticket_types.get(request.ticket_type_id)
        if ticket_type is None:
            raise BookingError("Ticket type not found for this event")
        if ticket_type.status != "active":
            raise BookingError(f"Ticket type {ticket_type.name} is not on sale")

        remaining = ticket_type.quantity - sold[ticket_type.id]
        if request.quantity > remaining:
            raise BookingError(
                f"Only {remaining} tickets left for {ticket_type.name}"
            )

        seats = _pick_seats(ticket_type, request.seats, request.quantity, taken[ticket_type.id])
        taken[ticket_type.id].extend(seats)
        sold[ticket_type.id] += request.quantity

        item = OrderItem(
            ticket_type_id=ticket_type.id,
            quantity=request.quantity,
            unit_price=ticket_type.price,
        )
        item.seats = [
            BookedSeat(ticket_type_id=ticket_type.id, row=key.row, column=key.column)
            for key in seats
        ]
        order.items.append(item)
        subtotal += ticket_type.price * request.quantity
        total_quantity += request.quantity

        if sold[ticket_type.id] >= ticket_type.quantity:
            ticket_type.status = "sold_out"

    if body.promo_code:
        offer = _find_offer(event, body.promo_code)
        promo = _to_promo(offer)
        if not promo.is_redeemable(now):
            raise BookingError("Promotional code is expired or no longer available")
        order.discount = compute_discount(promo, subtotal, now)
        order.promo_code = offer.code
        offer.current_uses += 1

    order.total_amount = round(subtotal - order.discount, 2)
    if body.payment is not None:
        order.status = OrderStatus.CONFIRMED.value
        order.payment_method = body.payment.method
        order.transaction_id = body.payment.transaction_id
        order.paid_at = now
    else:
        order.status = OrderStatus.PENDING.value

    event.available_seats = max(event.available_seats - total_quantity, 0)
    db.add(order)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Seat conflict while placing order for event %s: %s", event.id, exc.orig)
        raise SeatConflictError("One or more selected seats were just booked") from exc

    logger.info(
        "Order %s placed: %d tickets, total %.2f, status %s",
        order.id, total_quantity, order.total_amount, order.status,
        extra={"order_id": order.id, "event_id": event.id, "user_id": user.id},
    )
    return await load_order(db, order.id)


async def confirm_order(
    db: AsyncSession, order: Order, payment: PaymentInfo, now: datetime | None = None,
) -> Order:
    if order.status != OrderStatus.PENDING.value:
        raise BookingError(f"Only pending orders can be confirmed (order is {order.status})")
    order.status = OrderStatus.CONFIRMED.value
    order.payment_method = payment.method
    order.transaction_id = payment.transaction_id
    order.paid_at = now or datetime.now(timezone.utc)
    await db.commit()
    logger.info("Order %s confirmed", order.id, extra={"order_id": order.id})
    return await load_order(db, order.id)


async def cancel_order(db: AsyncSession, order: Order) -> Order:
    """Cancel ``order``, release its seats and give the tickets back."""
    if order.status == OrderStatus.CANCELLED.value:
        raise BookingError("Order is already cancelled")

    event = await db.get(Event, order.event_id)
    released = order.ticket_count
    for item in order.items:
        item.seats.clear()
        ticket_type = await db.get(TicketType, item.ticket_type_id)
        if ticket_type is not None and ticket_type.status == "sold_out":
            ticket_type.status = "active"
    if event is not None:
        event.available_seats = min(event.available_seats + released, event.total_seats)
    order.status = OrderStatus.CANCELLED.value
    await db.commit()

    logger.info(
        "Order %s cancelled, %d tickets released", order.id, released,
        extra={"order_id": order.id, "event_id": order.event_id},
    )
    return await load_order(db, order.id)
