"""Sales report endpoints: JSON summaries and PDF download."""
import dataclasses
import io
import uuid
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import require_organizer
from app.core.rate_limit import report_limiter
from app.models.database import get_db
from app.models.user import User
from app.schemas.report import (
    AllTimeReportResponse,
    DailyReportResponse,
    MonthlyReportResponse,
    WeeklyReportResponse,
)
from app.services.report_service import EventNotVisibleError, ReportService
from ticketing.reporting import InsufficientDataError, Report, ReportRenderError, ReportType

router = APIRouter()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _today() -> date:
    return datetime.now(timezone.utc).date()


async def _build(
    db: AsyncSession,
    user: User,
    response: Response,
    report_type: ReportType,
    day: date | None,
    event_id: uuid.UUID | None,
) -> dict:
    try:
        report: Report = await ReportService(db, user).build(report_type, day or _today(), event_id)
    except (EventNotVisibleError, InsufficientDataError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    response.headers.update(NO_CACHE_HEADERS)
    return dataclasses.asdict(report)


@router.get(
    "/daily",
    response_model=DailyReportResponse,
    summary="Daily sales report",
    description="Tickets, revenue and hourly sales of confirmed orders on one day (UTC).",
)
async def daily_report(
    response: Response,
    day: date | None = Query(default=None, alias="date"),
    event_id: uuid.UUID | None = None,
    user: User = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    return await _build(db, user, response, ReportType.DAILY, day, event_id)


@router.get(
    "/weekly",
    response_model=WeeklyReportResponse,
    summary="Weekly sales report",
    description="Sales per weekday for the Monday to Sunday week containing the given date.",
)
async def weekly_report(
    response: Response,
    day: date | None = Query(default=None, alias="date"),
    event_id: uuid.UUID | None = None,
    user: User = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    return await _build(db, user, response, ReportType.WEEKLY, day, event_id)


@router.get(
    "/monthly",
    response_model=MonthlyReportResponse,
    summary="Monthly sales report",
    description="Sales per day of the month containing the given date.",
)
async def monthly_report(
    response: Response,
    day: date | None = Query(default=None, alias="date"),
    event_id: uuid.UUID | None = None,
    user: User = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    return await _build(db, user, response, ReportType.MONTHLY, day, event_id)


@router.get(
    "/all",
    response_model=AllTimeReportResponse,
    summary="All-time sales report",
    description="Every order with per-event performance and occupancy by date.",
)
async def all_time_report(
    response: Response,
    event_id: uuid.UUID | None = None,
    user: User = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    return await _build(db, user, response, ReportType.ALL, None, event_id)


@router.get(
    "/download",
    summary="Download PDF report",
    description="Render a daily, weekly, monthly or all-time sales report as a PDF attachment.",
)
async def download_report(
    request: Request,
    report_type: ReportType = Query(alias="type"),
    day: date | None = Query(default=None, alias="date"),
    event_id: uuid.UUID | None = None,
    user: User = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    report_limiter.check(request)
    service = ReportService(db, user)
    try:
        pdf, filename = await service.render(report_type, day or _today(), event_id)
    except (EventNotVisibleError, InsufficientDataError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ReportRenderError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate PDF report",
        )

    return StreamingResponse(
        io.BytesIO(pdf),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            **NO_CACHE_HEADERS,
        },
    )
