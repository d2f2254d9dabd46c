from datetime import date, datetime

from pydantic import BaseModel


class HourlySalesOut(BaseModel):
    hour: int
    count: int
    amount: float


class DaySalesOut(BaseModel):
    day: str | int
    count: int
    amount: float


class OrderRowOut(BaseModel):
    id: str | None
    event_id: str | None
    event_name: str
    date: datetime
    status: str
    ticket_count: int
    total_amount: float


class EventSummaryOut(BaseModel):
    event_id: str | None
    name: str
    total_orders: int
    confirmed_orders: int
    tickets_sold: int
    revenue: float
    occupancy_percentage: float


class ReportSummaryOut(BaseModel):
    tickets_sold: int
    revenue: float
    occupancy_percentage: float


class DailyReportResponse(ReportSummaryOut):
    date: date | None
    sales: list[HourlySalesOut]


class WeeklyReportResponse(ReportSummaryOut):
    start_date: date | None
    end_date: date | None
    sales: list[DaySalesOut]


class MonthlyReportResponse(ReportSummaryOut):
    month: int | None
    year: int | None
    sales: list[DaySalesOut]


class AllTimeReportResponse(ReportSummaryOut):
    total_orders: int
    confirmed_orders: int
    orders: list[OrderRowOut]
    orders_by_date: dict[str, list[OrderRowOut]]
    event_summary: list[EventSummaryOut]
    occupancy_by_date: dict[str, float]
