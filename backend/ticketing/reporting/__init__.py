"""Sales reporting: aggregation, typed payloads and PDF rendering."""

from .aggregation import (
    EventRecord,
    InsufficientDataError,
    OrderRecord,
    build_all_time_report,
    build_daily_report,
    build_monthly_report,
    build_weekly_report,
    week_bounds,
)
from .payload import (
    AllTimeReport,
    DailyReport,
    DaySales,
    EventSummaryRow,
    HourlySales,
    MonthlyReport,
    OrderRow,
    Report,
    ReportPayloadError,
    ReportSummary,
    ReportType,
    WeeklyReport,
    coerce_payload,
)
from .pdf_report import ReportRenderError, generate_pdf_report
from .table import TableResult, TableSpec, column_alignment, column_widths, draw_table

__all__ = [
    "EventRecord",
    "InsufficientDataError",
    "OrderRecord",
    "build_all_time_report",
    "build_daily_report",
    "build_monthly_report",
    "build_weekly_report",
    "week_bounds",
    "AllTimeReport",
    "DailyReport",
    "DaySales",
    "EventSummaryRow",
    "HourlySales",
    "MonthlyReport",
    "OrderRow",
    "Report",
    "ReportPayloadError",
    "ReportSummary",
    "ReportType",
    "WeeklyReport",
    "coerce_payload",
    "ReportRenderError",
    "generate_pdf_report",
    "TableResult",
    "TableSpec",
    "column_alignment",
    "column_widths",
    "draw_table",
]
