"""Aggregate order records into report payloads.

Pure functions over plain records; the database layer lives in
``app.services.report_service``. Timestamps are bucketed in UTC; naive
datetimes are taken to be UTC already.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

import numpy as np

from .payload import (
    AllTimeReport,
    DailyReport,
    DaySales,
    EventSummaryRow,
    HourlySales,
    MonthlyReport,
    OrderRow,
    WeeklyReport,
)

CONFIRMED = "confirmed"
WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
INSUFFICIENT_DATA = "Insufficient data for the selected period."


class InsufficientDataError(ValueError):
    """No confirmed orders fall inside the requested period."""

    def __init__(self, message: str = INSUFFICIENT_DATA) -> None:
        super().__init__(message)


@dataclass(frozen=True)
class OrderRecord:
    id: str
    event_id: str
    event_name: str
    created_at: datetime
    status: str
    ticket_count: int
    total_amount: float


@dataclass(frozen=True)
class EventRecord:
    id: str
    name: str
    total_seats: int
    available_seats: int

    @property
    def filled_seats(self) -> int:
        return self.total_seats - self.available_seats


# ══════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════

def _utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _confirmed_between(
    orders: Iterable[OrderRecord], start: datetime, end: datetime,
) -> list[OrderRecord]:
    """Confirmed orders with ``start <= created_at < end``."""
    return [
        o for o in orders
        if o.status == CONFIRMED and start <= _utc(o.created_at) < end
    ]


def occupancy_percentage(events: Iterable[EventRecord]) -> float:
    """Filled seats over total seats, in percent; 0 when there are no seats."""
    total = filled = 0
    for event in events:
        if event.total_seats > 0:
            total += event.total_seats
            filled += event.filled_seats
    return filled / total * 100 if total > 0 else 0.0


def _events_of(orders: Sequence[OrderRecord], events: Iterable[EventRecord]) -> list[EventRecord]:
    """Distinct events referenced by ``orders``, each counted once."""
    wanted = {o.event_id for o in orders}
    return [e for e in events if e.id in wanted]


def _bucket(
    orders: Sequence[OrderRecord], index: np.ndarray, size: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Per-bucket ticket counts and revenue."""
    tickets = np.array([o.ticket_count for o in orders], dtype=np.float64)
    amounts = np.array([o.total_amount for o in orders], dtype=np.float64)
    counts = np.bincount(index, weights=tickets, minlength=size)
    revenue = np.bincount(index, weights=amounts, minlength=size)
    return counts, revenue


def _totals(orders: Sequence[OrderRecord]) -> tuple[int, float]:
    return (
        int(sum(o.ticket_count for o in orders)),
        round(float(sum(o.total_amount for o in orders)), 2),
    )


def _order_row(order: OrderRecord) -> OrderRow:
    return OrderRow(
        date=_utc(order.created_at),
        event_name=order.event_name or "Unknown Event",
        status=order.status,
        ticket_count=order.ticket_count,
        total_amount=order.total_amount,
        id=order.id,
        event_id=order.event_id,
    )


# ══════════════════════════════════════════════════════════════════════
# Period reports
# ══════════════════════════════════════════════════════════════════════

def build_daily_report(
    orders: Iterable[OrderRecord], events: Iterable[EventRecord], day: date,
) -> DailyReport:
    start = _day_start(day)
    scoped = _confirmed_between(orders, start, start + timedelta(days=1))
    if not scoped:
        raise InsufficientDataError()

    hours = np.array([_utc(o.created_at).hour for o in scoped], dtype=np.int64)
    counts, revenue = _bucket(scoped, hours, 24)
    tickets_sold, total = _totals(scoped)

    return DailyReport(
        tickets_sold=tickets_sold,
        revenue=total,
        occupancy_percentage=occupancy_percentage(_events_of(scoped, events)),
        date=day,
        sales=[
            HourlySales(hour=h, count=int(counts[h]), amount=round(float(revenue[h]), 2))
            for h in range(24)
        ],
    )


def week_bounds(anchor: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``anchor``."""
    monday = anchor - timedelta(days=anchor.weekday())
    return monday, monday + timedelta(days=6)


def build_weekly_report(
    orders: Iterable[OrderRecord], events: Iterable[EventRecord], anchor: date,
) -> WeeklyReport:
    monday, sunday = week_bounds(anchor)
    scoped = _confirmed_between(orders, _day_start(monday), _day_start(sunday + timedelta(days=1)))
    if not scoped:
        raise InsufficientDataError()

    weekdays = np.array([_utc(o.created_at).weekday() for o in scoped], dtype=np.int64)
    counts, revenue = _bucket(scoped, weekdays, 7)
    tickets_sold, total = _totals(scoped)

    return WeeklyReport(
        tickets_sold=tickets_sold,
        revenue=total,
        occupancy_percentage=occupancy_percentage(_events_of(scoped, events)),
        start_date=monday,
        end_date=sunday,
        sales=[
            DaySales(day=name, count=int(counts[i]), amount=round(float(revenue[i]), 2))
            for i, name in enumerate(WEEKDAYS)
        ],
    )


def build_monthly_report(
    orders: Iterable[OrderRecord], events: Iterable[EventRecord], year: int, month: int,
) -> MonthlyReport:
    days_in_month = calendar.monthrange(year, month)[1]
    first = date(year, month, 1)
    scoped = _confirmed_between(
        orders, _day_start(first), _day_start(first + timedelta(days=days_in_month)),
    )
    if not scoped:
        raise InsufficientDataError()

    # bucket 0 is day 1
    days = np.array([_utc(o.created_at).day - 1 for o in scoped], dtype=np.int64)
    counts, revenue = _bucket(scoped, days, days_in_month)
    tickets_sold, total = _totals(scoped)

    return MonthlyReport(
        tickets_sold=tickets_sold,
        revenue=total,
        occupancy_percentage=occupancy_percentage(_events_of(scoped, events)),
        month=month,
        year=year,
        sales=[
            DaySales(day=i + 1, count=int(counts[i]), amount=round(float(revenue[i]), 2))
            for i in range(days_in_month)
        ],
    )


# ══════════════════════════════════════════════════════════════════════
# All-time report
# ══════════════════════════════════════════════════════════════════════

def build_all_time_report(
    orders: Iterable[OrderRecord], events: Iterable[EventRecord],
) -> AllTimeReport:
    """Everything in scope. An empty scope yields an all-zero report."""
    orders = sorted(orders, key=lambda o: _utc(o.created_at))
    events = list(events)
    confirmed = [o for o in orders if o.status == CONFIRMED]
    tickets_sold, total = _totals(confirmed)

    orders_by_date: dict[str, list[OrderRow]] = {}
    for order in orders:
        key = _utc(order.created_at).date().isoformat()
        orders_by_date.setdefault(key, []).append(_order_row(order))

    event_summary = []
    for event in events:
        event_orders = [o for o in orders if o.event_id == event.id]
        event_confirmed = [o for o in event_orders if o.status == CONFIRMED]
        sold, event_revenue = _totals(event_confirmed)
        event_summary.append(EventSummaryRow(
            name=event.name,
            total_orders=len(event_orders),
            confirmed_orders=len(event_confirmed),
            tickets_sold=sold,
            revenue=event_revenue,
            occupancy_percentage=occupancy_percentage([event]) if sold else 0.0,
            event_id=event.id,
        ))

    occupancy_by_date: dict[str, float] = {}
    for key in orders_by_date:
        day_confirmed = [
            o for o in confirmed if _utc(o.created_at).date().isoformat() == key
        ]
        occupancy_by_date[key] = occupancy_percentage(_events_of(day_confirmed, events))

    return AllTimeReport(
        tickets_sold=tickets_sold,
        revenue=total,
        occupancy_percentage=occupancy_percentage(events),
        total_orders=len(orders),
        confirmed_orders=len(confirmed),
        orders=[_order_row(o) for o in orders],
        orders_by_date=orders_by_date,
        event_summary=event_summary,
        occupancy_by_date=occupancy_by_date,
    )
