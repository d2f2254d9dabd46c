"""Load the orders and events a user may report on and build report payloads."""

from __future__ import annotations

import logging
import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.models.event import Event
from app.models.order import Order
from app.models.user import User
from ticketing.reporting import (
    EventRecord,
    OrderRecord,
    Report,
    ReportType,
    build_all_time_report,
    build_daily_report,
    build_monthly_report,
    build_weekly_report,
    generate_pdf_report,
    week_bounds,
)

logger = logging.getLogger(__name__)


class EventNotVisibleError(LookupError):
    """The event does not exist or belongs to another organizer."""


def report_title(report_type: ReportType, day: date) -> str:
    if report_type is ReportType.DAILY:
        return f"Daily Report - {day:%B} {day.day}, {day.year}"
    if report_type is ReportType.WEEKLY:
        monday, sunday = week_bounds(day)
        return f"Weekly Report - {monday:%b} {monday.day} to {sunday:%b} {sunday.day}, {sunday.year}"
    if report_type is ReportType.MONTHLY:
        return f"Monthly Report - {day:%B %Y}"
    return "Sales Report - All Time"


def report_filename(report_type: ReportType, day: date) -> str:
    if report_type is ReportType.DAILY:
        return f"daily-report-{day:%Y-%m-%d}.pdf"
    if report_type is ReportType.WEEKLY:
        return f"weekly-report-{week_bounds(day)[0]:%Y-%m-%d}.pdf"
    if report_type is ReportType.MONTHLY:
        return f"monthly-report-{day:%Y-%m}.pdf"
    return f"all-time-report-{day:%Y-%m-%d}.pdf"


class ReportService:
    """Report data scoped to one user.

    Organizers see their own events; admins see every event. Passing an
    ``event_id`` narrows the scope to that event.
    """

    def __init__(self, db: AsyncSession, user: User):
        self.db = db
        self.user = user

    async def _events(self, event_id: uuid.UUID | None) -> list[Event]:
        if event_id is not None:
            event = await self.db.get(Event, event_id)
            if event is None or (not self.user.is_admin and event.organizer_id != self.user.id):
                raise EventNotVisibleError("Event not found")
            return [event]

        query = select(Event)
        if not self.user.is_admin:
            query = query.where(Event.organizer_id == self.user.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def load_records(
        self, event_id: uuid.UUID | None = None,
    ) -> tuple[list[OrderRecord], list[EventRecord]]:
        events = await self._events(event_id)
        if not events:
            return [], []

        names = {e.id: e.name for e in events}
        result = await self.db.execute(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.event_id.in_(list(names)))
        )
        orders = [
            OrderRecord(
                id=str(o.id),
                event_id=str(o.event_id),
                event_name=names[o.event_id],
                created_at=o.created_at,
                status=o.status,
                ticket_count=o.ticket_count,
                total_amount=o.total_amount,
            )
            for o in result.scalars().all()
        ]
        records = [
            EventRecord(
                id=str(e.id),
                name=e.name,
                total_seats=e.total_seats,
                available_seats=e.available_seats,
            )
            for e in events
        ]
        return orders, records

    async def build(
        self, report_type: ReportType, day: date, event_id: uuid.UUID | None = None,
    ) -> Report:
        """Raises ``InsufficientDataError`` for periods without confirmed orders."""
        orders, events = await self.load_records(event_id)
        if report_type is ReportType.DAILY:
            return build_daily_report(orders, events, day)
        if report_type is ReportType.WEEKLY:
            return build_weekly_report(orders, events, day)
        if report_type is ReportType.MONTHLY:
            return build_monthly_report(orders, events, day.year, day.month)
        return build_all_time_report(orders, events)

    async def render(
        self, report_type: ReportType, day: date, event_id: uuid.UUID | None = None,
    ) -> tuple[bytes, str]:
        """PDF bytes and download filename."""
        report = await self.build(report_type, day, event_id)
        title = report_title(report_type, day)
        pdf = await run_in_threadpool(
            generate_pdf_report, title, report, report_type, author=settings.report_author,
        )
        logger.info(
            "Report %s generated for user %s", title, self.user.id,
            extra={"user_id": self.user.id, "report_type": report_type.value},
        )
        return pdf, report_filename(report_type, day)
