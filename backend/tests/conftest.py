"""Shared test fixtures for TicketDesk engine and API tests."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from ticketing.reporting import (
    AllTimeReport,
    DailyReport,
    EventRecord,
    EventSummaryRow,
    HourlySales,
    OrderRecord,
    OrderRow,
)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# ======================================================================
# Seating fixtures
# ======================================================================

@pytest.fixture
def small_arrangement() -> dict:
    """Three rows of four seats with a two-seat last row (10 seats)."""
    return {"rows": 3, "columns": 4, "last_row_columns": 2}


# ======================================================================
# Report payload fixtures
# ======================================================================

@pytest.fixture
def daily_payload() -> DailyReport:
    """120 tickets for RM 6,000 on 1 May 2024, five sales at 10:00 of RM 250 each."""
    sales = [HourlySales(hour=h) for h in range(24)]
    sales[10] = HourlySales(hour=10, count=5, amount=250.0)
    sales[14] = HourlySales(hour=14, count=115, amount=5750.0)
    return DailyReport(
        tickets_sold=120,
        revenue=6000.0,
        occupancy_percentage=80.0,
        date=date(2024, 5, 1),
        sales=sales,
    )


@pytest.fixture
def camel_daily_payload() -> dict:
    """The same day in the loosely-typed camelCase shape older clients send."""
    return {
        "ticketsSold": 120,
        "revenue": 6000,
        "occupancyPercentage": 80,
        "date": "2024-05-01T00:00:00.000Z",
        "salesData": [{"hour": h, "count": 5 if h == 10 else 0} for h in range(24)],
        "revenueData": [{"hour": h, "amount": 250 if h == 10 else 0} for h in range(24)],
    }


def make_all_time(event_count: int, orders_per_event: int = 2) -> AllTimeReport:
    orders: list[OrderRow] = []
    summary: list[EventSummaryRow] = []
    by_date: dict[str, list[OrderRow]] = {}
    for i in range(event_count):
        name = f"Event {i + 1:02d}"
        for j in range(orders_per_event):
            row = OrderRow(
                date=utc(2024, 1 + (i % 12), 1 + j, 12),
                event_name=name,
                status="confirmed" if j % 2 == 0 else "pending",
                ticket_count=2,
                total_amount=100.0,
                id=f"order-{i}-{j}",
                event_id=f"event-{i}",
            )
            orders.append(row)
            by_date.setdefault(row.date.date().isoformat(), []).append(row)
        summary.append(EventSummaryRow(
            name=name,
            total_orders=orders_per_event,
            confirmed_orders=(orders_per_event + 1) // 2,
            tickets_sold=2 * ((orders_per_event + 1) // 2),
            revenue=100.0 * (i + 1),
            occupancy_percentage=10.0,
            event_id=f"event-{i}",
        ))
    confirmed = [o for o in orders if o.status == "confirmed"]
    return AllTimeReport(
        tickets_sold=sum(o.ticket_count for o in confirmed),
        revenue=sum(o.total_amount for o in confirmed),
        occupancy_percentage=10.0,
        total_orders=len(orders),
        confirmed_orders=len(confirmed),
        orders=orders,
        orders_by_date=by_date,
        event_summary=summary,
        occupancy_by_date={day: 10.0 for day in by_date},
    )


@pytest.fixture
def all_time_payload() -> AllTimeReport:
    return make_all_time(event_count=3)


@pytest.fixture
def all_time_factory():
    """Build all-time payloads with a chosen number of events."""
    return make_all_time


# ======================================================================
# Aggregation fixtures
# ======================================================================

@pytest.fixture
def concert_events() -> list[EventRecord]:
    return [
        EventRecord(id="e1", name="Jazz Night", total_seats=100, available_seats=20),
        EventRecord(id="e2", name="Rock Fest", total_seats=50, available_seats=50),
    ]


@pytest.fixture
def concert_orders() -> list[OrderRecord]:
    """Orders around Wednesday 1 May 2024 (UTC)."""
    return [
        OrderRecord("o1", "e1", "Jazz Night", utc(2024, 5, 1, 10, 15), "confirmed", 2, 100.0),
        OrderRecord("o2", "e1", "Jazz Night", utc(2024, 5, 1, 10, 45), "confirmed", 3, 150.0),
        OrderRecord("o3", "e1", "Jazz Night", utc(2024, 5, 1, 18, 0), "pending", 4, 200.0),
        OrderRecord("o4", "e1", "Jazz Night", utc(2024, 5, 3, 9, 0), "confirmed", 1, 50.0),
        OrderRecord("o5", "e2", "Rock Fest", utc(2024, 5, 20, 20, 0), "confirmed", 2, 80.0),
        OrderRecord("o6", "e2", "Rock Fest", utc(2024, 4, 30, 23, 59), "cancelled", 1, 40.0),
    ]
