"""PDF sales report generation.

Produces an A4 report for one reporting period: a summary block, the sales
tables for the period and a notes section. All-time reports add recent
transactions, monthly trends, per-event performance and the order status
distribution. The document is drawn directly on a reportlab canvas and
returned as bytes; nothing is written to disk.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from io import BytesIO
from typing import Any

from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen.canvas import Canvas

from .formatting import (
    capitalize_first,
    format_currency,
    format_date,
    format_hour_range,
    format_month_year,
    format_percentage,
    month_name,
    parse_date,
    truncate,
)
from .layout import (
    C_MUTED,
    C_TEXT,
    FONT_BOLD,
    FONT_REGULAR,
    NORMAL_SIZE,
    PAGE_SIZE,
    SMALL_SIZE,
    SUBTITLE_SIZE,
    TITLE_SIZE,
    LayoutCursor,
    PageState,
)
from .payload import (
    AllTimeReport,
    DailyReport,
    MonthlyReport,
    Report,
    ReportType,
    WeeklyReport,
    coerce_payload,
)
from .table import TableResult, TableSpec, draw_table

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "TicketDesk"

RECENT_TRANSACTIONS_LIMIT = 10
RECENT_MONTHS_LIMIT = 12
TOP_EVENTS_LIMIT = 10
TRANSACTION_NAME_CHARS = 20
EVENT_NAME_CHARS = 25

SECTION_MIN_SPACE = 150
TABLE_SECTION_MIN_SPACE = 250
STATUS_SECTION_MIN_SPACE = 200
NOTES_MIN_SPACE = 100
INFO_ROW_HEIGHT = 20

NOTES = (
    "1. All financial values are displayed in Malaysian Ringgit (RM).",
    "2. Occupancy rate is calculated as the percentage of available seats that were sold.",
)
ALL_TIME_NOTE = "3. Event performance metrics include only confirmed orders."


class ReportRenderError(RuntimeError):
    """Raised when a report cannot be rendered; no partial output exists."""


# ══════════════════════════════════════════════════════════════════════
# Composer
# ══════════════════════════════════════════════════════════════════════

class _ReportComposer:
    def __init__(self, canvas: Canvas, title: str, report: Report) -> None:
        self.canvas = canvas
        self.title = title
        self.report = report
        self.cursor = LayoutCursor(canvas, page_size=PAGE_SIZE, running_header=title)
        self.tables: list[TableResult] = []

    # ── primitives ──

    def text_block(
        self,
        text: str,
        *,
        font: str = FONT_REGULAR,
        size: float = NORMAL_SIZE,
        align: str = "left",
        color=C_TEXT,
        underline: bool = False,
    ) -> None:
        cursor = self.cursor
        c = self.canvas
        lines = simpleSplit(text, font, size, cursor.content_width)
        line_height = size * 1.2
        cursor.ensure_space(line_height * len(lines))
        c.saveState()
        c.setFont(font, size)
        c.setFillColor(color)
        for line in lines:
            baseline = cursor.pdf_y(cursor.y + size)
            if align == "center":
                x = cursor.left + cursor.content_width / 2
                c.drawCentredString(x, baseline, line)
            else:
                c.drawString(cursor.left, baseline, line)
            if underline:
                width = c.stringWidth(line, font, size)
                c.setStrokeColor(color)
                c.setLineWidth(0.6)
                c.line(cursor.left, baseline - 2, cursor.left + width, baseline - 2)
            cursor.move_down(line_height)
        c.restoreState()

    def heading(self) -> None:
        self.cursor.enter(PageState.WRITING_HEADER)
        self.text_block(self.title, font=FONT_BOLD, size=TITLE_SIZE, align="center")
        self.cursor.move_down_lines(0.5, TITLE_SIZE)

    def section(self, title: str, min_space: float = SECTION_MIN_SPACE) -> None:
        self.cursor.enter(PageState.WRITING_SECTION)
        self.cursor.ensure_space(min_space)
        if not self.cursor.at_page_top:
            self.cursor.move_down_lines(0.5, SUBTITLE_SIZE)
        self.text_block(title, font=FONT_BOLD, size=SUBTITLE_SIZE, underline=True)
        self.cursor.move_down_lines(0.5, SUBTITLE_SIZE)

    def section_page(self, title: str) -> None:
        """Section that always opens on a fresh page."""
        self.cursor.enter(PageState.WRITING_SECTION)
        if not self.cursor.at_page_top:
            self.cursor.new_page()
        self.text_block(title, font=FONT_BOLD, size=SUBTITLE_SIZE, underline=True)
        self.cursor.move_down_lines(0.5, SUBTITLE_SIZE)

    def paragraph(self, text: str) -> None:
        self.text_block(text)
        self.cursor.move_down_lines(0.5, NORMAL_SIZE)

    def caption(self, text: str) -> None:
        self.text_block(text, size=SMALL_SIZE, align="center", color=C_MUTED)
        self.cursor.move_down_lines(0.5, SMALL_SIZE)

    def info_columns(self, items: list[tuple[str, Any]], columns: int = 2) -> None:
        cursor = self.cursor
        c = self.canvas
        col_width = cursor.content_width / columns
        for start in range(0, len(items), columns):
            # graphics state does not survive showPage()
            cursor.ensure_space(INFO_ROW_HEIGHT)
            c.saveState()
            c.setFont(FONT_REGULAR, NORMAL_SIZE)
            c.setFillColor(C_TEXT)
            baseline = cursor.pdf_y(cursor.y + NORMAL_SIZE)
            for offset, (label, value) in enumerate(items[start:start + columns]):
                c.drawString(cursor.left + offset * col_width, baseline, f"{label}: {value}")
            c.restoreState()
            cursor.move_down(INFO_ROW_HEIGHT)

    def table(self, headers: list[str], rows: list[list[str]]) -> None:
        spec = TableSpec(headers=tuple(headers), rows=tuple(tuple(r) for r in rows))
        self.tables.append(draw_table(self.canvas, self.cursor, spec))

    # ── sections ──

    def summary(self) -> None:
        report = self.report
        self.section("Summary")
        items: list[tuple[str, Any]] = [
            ("Total Tickets Sold", report.tickets_sold),
            ("Revenue", format_currency(report.revenue)),
            ("Seat Occupancy", format_percentage(report.occupancy_percentage)),
        ]
        if isinstance(report, DailyReport):
            if report.date:
                items.append(("Date", format_date(report.date)))
        elif isinstance(report, WeeklyReport):
            if report.start_date:
                items.append(("Start Date", format_date(report.start_date)))
            if report.end_date:
                items.append(("End Date", format_date(report.end_date)))
        elif isinstance(report, MonthlyReport):
            if report.month:
                items.append(("Month", month_name(report.month)))
            if report.year:
                items.append(("Year", report.year))
        elif isinstance(report, AllTimeReport):
            items.append(("Total Orders", report.total_orders))
            items.append(("Confirmed Orders", report.confirmed_orders))
        self.info_columns(items)

        if isinstance(report, AllTimeReport):
            self.caption(
                "* This report includes data from all completed events regardless of date."
            )

    def hourly_sales(self, report: DailyReport) -> None:
        if not report.sales:
            return
        self.section("Hourly Sales Analysis", TABLE_SECTION_MIN_SPACE)
        self.paragraph(
            "The table below shows ticket sales and revenue by hour for the selected date."
        )
        self.table(
            ["Hour", "Tickets Sold", "Revenue (RM)"],
            [[format_hour_range(row.hour), str(row.count), format_currency(row.amount)]
             for row in report.sales],
        )

    def daily_sales(self, report: WeeklyReport | MonthlyReport) -> None:
        if not report.sales:
            return
        self.section("Daily Sales Analysis", TABLE_SECTION_MIN_SPACE)
        if isinstance(report, MonthlyReport):
            period = "month"
            sales = sorted(report.sales, key=lambda row: int(row.day))
        else:
            period = "week"
            sales = report.sales
        self.paragraph(
            f"The table below shows ticket sales and revenue by day for the selected {period}."
        )
        self.table(
            ["Day", "Tickets Sold", "Revenue (RM)"],
            [[str(row.day), str(row.count), format_currency(row.amount)] for row in sales],
        )

    def recent_transactions(self, report: AllTimeReport) -> None:
        if not report.orders:
            return
        self.section("Recent Transactions", TABLE_SECTION_MIN_SPACE)
        self.paragraph(
            f"Below are the {RECENT_TRANSACTIONS_LIMIT} most recent transactions across all events:"
        )
        recent = sorted(report.orders, key=lambda o: o.date, reverse=True)
        self.table(
            ["Date", "Event", "Status", "Tickets", "Amount (RM)"],
            [
                [
                    format_date(order.date),
                    truncate(order.event_name, TRANSACTION_NAME_CHARS),
                    order.status,
                    str(order.ticket_count),
                    format_currency(order.total_amount),
                ]
                for order in recent[:RECENT_TRANSACTIONS_LIMIT]
            ],
        )

    def monthly_trends(self, report: AllTimeReport) -> None:
        if not report.orders_by_date:
            return
        self.section_page("Monthly Sales Trends")

        totals: dict[tuple[int, int], dict[str, float]] = defaultdict(
            lambda: {"orders": 0, "tickets": 0, "revenue": 0.0}
        )
        for day, orders in report.orders_by_date.items():
            when = parse_date(day)
            bucket = totals[(when.year, when.month)]
            for order in orders:
                bucket["orders"] += 1
                bucket["tickets"] += order.ticket_count
                bucket["revenue"] += order.total_amount

        months = sorted(totals)
        shown = months[-RECENT_MONTHS_LIMIT:]
        self.table(
            ["Month", "Orders", "Tickets Sold", "Revenue (RM)"],
            [
                [
                    format_month_year(f"{year:04d}-{month:02d}-01"),
                    str(int(totals[(year, month)]["orders"])),
                    str(int(totals[(year, month)]["tickets"])),
                    format_currency(totals[(year, month)]["revenue"]),
                ]
                for year, month in shown
            ],
        )
        if len(months) > RECENT_MONTHS_LIMIT:
            self.caption(
                f"* Showing the {RECENT_MONTHS_LIMIT} most recent months out of "
                f"{len(months)} total months."
            )

    def event_performance(self, report: AllTimeReport) -> None:
        if not report.event_summary:
            return
        self.section_page("Event Performance Summary")
        self.paragraph("The table below shows performance metrics for your top events:")

        top = sorted(report.event_summary, key=lambda e: e.revenue, reverse=True)
        self.table(
            ["Event Name", "Total Orders", "Confirmed", "Tickets Sold", "Revenue (RM)",
             "Occupancy (%)"],
            [
                [
                    truncate(event.name, EVENT_NAME_CHARS),
                    str(event.total_orders),
                    str(event.confirmed_orders),
                    str(event.tickets_sold),
                    format_currency(event.revenue),
                    format_percentage(event.occupancy_percentage),
                ]
                for event in top[:TOP_EVENTS_LIMIT]
            ],
        )
        if len(report.event_summary) > TOP_EVENTS_LIMIT:
            self.caption(
                f"* Showing top {TOP_EVENTS_LIMIT} events by revenue out of "
                f"{len(report.event_summary)} total events."
            )

    def status_distribution(self, report: AllTimeReport) -> None:
        if not report.orders:
            return
        counts = Counter(order.status or "unknown" for order in report.orders)
        total = len(report.orders)
        self.section("Order Status Distribution", STATUS_SECTION_MIN_SPACE)
        self.paragraph("The table below shows the distribution of orders by status:")
        self.table(
            ["Status", "Count", "Percentage (%)"],
            [
                [capitalize_first(status), str(count), format_percentage(count / total * 100)]
                for status, count in counts.items()
            ],
        )

    def notes(self) -> None:
        self.cursor.enter(PageState.WRITING_SECTION)
        self.cursor.ensure_space(NOTES_MIN_SPACE)
        self.cursor.move_down_lines(1, NORMAL_SIZE)
        self.text_block("Notes", font=FONT_BOLD, size=SUBTITLE_SIZE, underline=True)
        self.cursor.move_down_lines(0.5, SUBTITLE_SIZE)
        for line in NOTES:
            self.text_block(line)
        if isinstance(self.report, AllTimeReport):
            self.text_block(ALL_TIME_NOTE)

    # ── entry ──

    def compose(self) -> None:
        report = self.report
        self.heading()
        self.summary()
        if isinstance(report, DailyReport):
            self.hourly_sales(report)
        elif isinstance(report, (WeeklyReport, MonthlyReport)):
            self.daily_sales(report)
        else:
            self.recent_transactions(report)
            self.monthly_trends(report)
            self.event_performance(report)
            self.status_distribution(report)
        self.notes()
        self.cursor.finish()


# ══════════════════════════════════════════════════════════════════════
# Public API
# ══════════════════════════════════════════════════════════════════════

def generate_pdf_report(
    title: str,
    report: Report | dict,
    report_type: ReportType | str,
    *,
    author: str = DEFAULT_AUTHOR,
) -> bytes:
    """Render a sales report and return the finished PDF.

    Parameters
    ----------
    title : str
        Heading of the first page; also the document title metadata and the
        running header on continuation pages.
    report : payload dataclass or mapping
        Mappings are validated with :func:`coerce_payload`.
    report_type : ReportType or str
        ``daily``, ``weekly``, ``monthly`` or ``all``.

    Raises
    ------
    ReportRenderError
        On any failure, chained from the underlying exception.
    """
    try:
        payload = coerce_payload(report_type, report)
        buffer = BytesIO()
        canvas = Canvas(buffer, pagesize=PAGE_SIZE, pageCompression=0)
        canvas.setTitle(title)
        canvas.setAuthor(author)
        canvas.setSubject(f"{payload.report_type.value} sales report")

        composer = _ReportComposer(canvas, title, payload)
        composer.compose()
        canvas.save()
    except Exception as exc:
        logger.exception("Rendering %s report %r failed", report_type, title)
        raise ReportRenderError(f"Could not render report: {exc}") from exc

    pdf = buffer.getvalue()
    logger.info(
        "Rendered %s report %r: %d pages, %d tables, %d bytes",
        payload.report_type.value, title, composer.cursor.page,
        len(composer.tables), len(pdf),
    )
    return pdf
