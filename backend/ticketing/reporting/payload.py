"""Typed report payloads.

Each report type has its own dataclass. All of them carry the three summary
figures (tickets sold, revenue, occupancy); everything else is optional and
defaults to empty. :func:`coerce_payload` turns the loosely-typed mappings
produced by older clients (camelCase keys such as ``ticketsSold`` or
``salesData``) or by :mod:`ticketing.reporting.aggregation` into these types.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, ClassVar

from .formatting import parse_date


class ReportType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL = "all"


class ReportPayloadError(ValueError):
    """Raised when report data cannot be interpreted."""


# ══════════════════════════════════════════════════════════════════════
# Rows
# ══════════════════════════════════════════════════════════════════════

@dataclass
class HourlySales:
    hour: int
    count: int = 0
    amount: float = 0.0


@dataclass
class DaySales:
    """One day bucket. ``day`` is a weekday name or a day-of-month number."""

    day: str | int
    count: int = 0
    amount: float = 0.0


@dataclass
class OrderRow:
    date: datetime
    event_name: str
    status: str
    ticket_count: int = 0
    total_amount: float = 0.0
    id: str | None = None
    event_id: str | None = None


@dataclass
class EventSummaryRow:
    name: str
    total_orders: int = 0
    confirmed_orders: int = 0
    tickets_sold: int = 0
    revenue: float = 0.0
    occupancy_percentage: float = 0.0
    event_id: str | None = None


# ══════════════════════════════════════════════════════════════════════
# Reports
# ══════════════════════════════════════════════════════════════════════

@dataclass
class ReportSummary:
    tickets_sold: int
    revenue: float
    occupancy_percentage: float


@dataclass
class DailyReport(ReportSummary):
    report_type: ClassVar[ReportType] = ReportType.DAILY

    date: date | None = None
    sales: list[HourlySales] = field(default_factory=list)


@dataclass
class WeeklyReport(ReportSummary):
    report_type: ClassVar[ReportType] = ReportType.WEEKLY

    start_date: date | None = None
    end_date: date | None = None
    sales: list[DaySales] = field(default_factory=list)


@dataclass
class MonthlyReport(ReportSummary):
    report_type: ClassVar[ReportType] = ReportType.MONTHLY

    month: int | None = None
    year: int | None = None
    sales: list[DaySales] = field(default_factory=list)


@dataclass
class AllTimeReport(ReportSummary):
    report_type: ClassVar[ReportType] = ReportType.ALL

    total_orders: int = 0
    confirmed_orders: int = 0
    orders: list[OrderRow] = field(default_factory=list)
    orders_by_date: dict[str, list[OrderRow]] = field(default_factory=dict)
    event_summary: list[EventSummaryRow] = field(default_factory=list)
    occupancy_by_date: dict[str, float] = field(default_factory=dict)


Report = DailyReport | WeeklyReport | MonthlyReport | AllTimeReport

REPORT_CLASSES: dict[ReportType, type] = {
    ReportType.DAILY: DailyReport,
    ReportType.WEEKLY: WeeklyReport,
    ReportType.MONTHLY: MonthlyReport,
    ReportType.ALL: AllTimeReport,
}


# ══════════════════════════════════════════════════════════════════════
# Coercion
# ══════════════════════════════════════════════════════════════════════

_MISSING = object()


def _pick(data: Mapping[str, Any], *keys: str, default: Any = _MISSING) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    if default is _MISSING:
        raise ReportPayloadError(f"missing required field {keys[0]!r}")
    return default


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ReportPayloadError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ReportPayloadError(f"{name} must be a number, got {value!r}") from exc


def _integer(value: Any, name: str) -> int:
    number = _number(value, name)
    if not number.is_integer():
        raise ReportPayloadError(f"{name} must be a whole number, got {value!r}")
    return int(number)


def _datetime(value: Any, name: str) -> datetime:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ReportPayloadError(f"{name} is not a valid date: {value!r}") from exc
    else:
        raise ReportPayloadError(f"{name} is not a valid date: {value!r}")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _optional_date(data: Mapping[str, Any], *keys: str) -> date | None:
    value = _pick(data, *keys, default=None)
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as exc:
        raise ReportPayloadError(f"{keys[0]} is not a valid date: {value!r}") from exc


def _rows(data: Mapping[str, Any], *keys: str) -> list[Any]:
    value = _pick(data, *keys, default=[])
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ReportPayloadError(f"{keys[0]} must be a list")
    return list(value)


def _mapping(item: Any, name: str) -> Mapping[str, Any]:
    if isinstance(item, Mapping):
        return item
    if hasattr(item, "__dict__"):
        return vars(item)
    raise ReportPayloadError(f"{name} entries must be objects, got {item!r}")


def _sales_rows(data: Mapping[str, Any], key: str) -> list[tuple[Any, int, float]]:
    """Pair sales rows with revenue rows; returns ``(bucket, count, amount)``.

    Revenue rows match sales rows by ``key`` when they carry it, otherwise by
    position. An ``amount`` on the sales row itself wins over both.
    """
    sales = [_mapping(item, "salesData") for item in _rows(data, "salesData", "sales_data", "sales")]
    revenue = [_mapping(item, "revenueData") for item in _rows(data, "revenueData", "revenue_data")]

    by_key = {row[key]: row for row in revenue if key in row}
    paired = []
    for index, row in enumerate(sales):
        if key not in row:
            raise ReportPayloadError(f"sales row {index} has no {key!r}")
        bucket = row[key]
        if "amount" in row:
            amount = row["amount"]
        elif bucket in by_key:
            amount = by_key[bucket].get("amount", 0)
        elif not by_key and index < len(revenue):
            amount = revenue[index].get("amount", 0)
        else:
            amount = 0
        paired.append((
            bucket,
            _integer(row.get("count", 0), "count"),
            _number(amount, "amount"),
        ))
    return paired


def _order_row(item: Any) -> OrderRow:
    row = _mapping(item, "ordersData")
    order_id = _pick(row, "id", "_id", default=None)
    event_id = _pick(row, "event_id", "eventId", default=None)
    return OrderRow(
        date=_datetime(_pick(row, "date", "created_at", "createdAt"), "date"),
        event_name=str(_pick(row, "event_name", "eventName", default="")),
        status=str(_pick(row, "status", default="unknown")),
        ticket_count=_integer(_pick(row, "ticket_count", "ticketCount", default=0), "ticketCount"),
        total_amount=_number(_pick(row, "total_amount", "totalAmount", default=0), "totalAmount"),
        id=str(order_id) if order_id is not None else None,
        event_id=str(event_id) if event_id is not None else None,
    )


def _event_row(item: Any) -> EventSummaryRow:
    row = _mapping(item, "eventSummary")
    event_id = _pick(row, "event_id", "eventId", "id", default=None)
    return EventSummaryRow(
        name=str(_pick(row, "name", "event_name", "eventName", default="")),
        total_orders=_integer(_pick(row, "total_orders", "totalOrders", default=0), "totalOrders"),
        confirmed_orders=_integer(
            _pick(row, "confirmed_orders", "confirmedOrders", default=0), "confirmedOrders"
        ),
        tickets_sold=_integer(_pick(row, "tickets_sold", "ticketsSold", default=0), "ticketsSold"),
        revenue=_number(_pick(row, "revenue", default=0), "revenue"),
        occupancy_percentage=_number(
            _pick(row, "occupancy_percentage", "occupancyPercentage", default=0),
            "occupancyPercentage",
        ),
        event_id=str(event_id) if event_id is not None else None,
    )


def _summary(data: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "tickets_sold": _integer(_pick(data, "tickets_sold", "ticketsSold"), "ticketsSold"),
        "revenue": _number(_pick(data, "revenue"), "revenue"),
        "occupancy_percentage": _number(
            _pick(data, "occupancy_percentage", "occupancyPercentage"), "occupancyPercentage"
        ),
    }


def _coerce_daily(data: Mapping[str, Any]) -> DailyReport:
    sales = []
    for hour, count, amount in _sales_rows(data, "hour"):
        hour = _integer(hour, "hour")
        if not 0 <= hour <= 23:
            raise ReportPayloadError(f"hour must be between 0 and 23, got {hour}")
        sales.append(HourlySales(hour=hour, count=count, amount=amount))
    return DailyReport(**_summary(data), date=_optional_date(data, "date"), sales=sales)


def _coerce_weekly(data: Mapping[str, Any]) -> WeeklyReport:
    return WeeklyReport(
        **_summary(data),
        start_date=_optional_date(data, "start_date", "startDate"),
        end_date=_optional_date(data, "end_date", "endDate"),
        sales=[DaySales(day=str(day), count=count, amount=amount)
               for day, count, amount in _sales_rows(data, "day")],
    )


def _coerce_monthly(data: Mapping[str, Any]) -> MonthlyReport:
    month = _pick(data, "month", default=None)
    year = _pick(data, "year", default=None)
    if month is not None:
        month = _integer(month, "month")
        if not 1 <= month <= 12:
            raise ReportPayloadError(f"month must be between 1 and 12, got {month}")
    return MonthlyReport(
        **_summary(data),
        month=month,
        year=_integer(year, "year") if year is not None else None,
        sales=[DaySales(day=_integer(day, "day"), count=count, amount=amount)
               for day, count, amount in _sales_rows(data, "day")],
    )


def _coerce_all(data: Mapping[str, Any]) -> AllTimeReport:
    by_date = _pick(data, "orders_by_date", "ordersByDate", default={})
    if not isinstance(by_date, Mapping):
        raise ReportPayloadError("ordersByDate must be an object keyed by date")
    occupancy = _pick(data, "occupancy_by_date", "occupancyByDate", default={})
    if not isinstance(occupancy, Mapping):
        raise ReportPayloadError("occupancyByDate must be an object keyed by date")

    return AllTimeReport(
        **_summary(data),
        total_orders=_integer(_pick(data, "total_orders", "totalOrders", default=0), "totalOrders"),
        confirmed_orders=_integer(
            _pick(data, "confirmed_orders", "confirmedOrders", default=0), "confirmedOrders"
        ),
        orders=[_order_row(item) for item in _rows(data, "orders", "orders_data", "ordersData")],
        orders_by_date={
            str(day): [_order_row(item) for item in (rows or [])]
            for day, rows in by_date.items()
        },
        event_summary=[
            _event_row(item) for item in _rows(data, "event_summary", "eventSummary")
        ],
        occupancy_by_date={
            str(day): _number(value, "occupancyByDate") for day, value in occupancy.items()
        },
    )


_COERCERS = {
    ReportType.DAILY: _coerce_daily,
    ReportType.WEEKLY: _coerce_weekly,
    ReportType.MONTHLY: _coerce_monthly,
    ReportType.ALL: _coerce_all,
}


def coerce_payload(report_type: ReportType | str, data: Any) -> Report:
    """Validate ``data`` into the dataclass for ``report_type``.

    Already-typed payloads of the right class pass through unchanged.
    """
    try:
        kind = ReportType(report_type)
    except ValueError as exc:
        raise ReportPayloadError(f"unknown report type {report_type!r}") from exc

    if isinstance(data, ReportSummary):
        if not isinstance(data, REPORT_CLASSES[kind]):
            raise ReportPayloadError(
                f"expected a {kind.value} report, got {type(data).__name__}"
            )
        return data
    if not isinstance(data, Mapping):
        raise ReportPayloadError(f"report data must be a mapping, got {type(data).__name__}")
    return _COERCERS[kind](data)
