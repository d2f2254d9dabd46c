import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.database import get_db
from app.models.event import Event
from app.models.waiting_list import WaitingListEntry
from app.schemas.waiting_list import WaitingListCreate, WaitingListResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/",
    response_model=WaitingListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Join waiting list",
    description="Add an email address to an event's waiting list. One entry per email and event.",
)
async def join_waiting_list(body: WaitingListCreate, db: AsyncSession = Depends(get_db)):
    event = await db.get(Event, body.event_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")

    email = body.email.lower()
    existing = await db.execute(
        select(WaitingListEntry).where(
            WaitingListEntry.event_id == body.event_id, WaitingListEntry.email == email,
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You are already on the waiting list for this event",
        )

    entry = WaitingListEntry(event_id=body.event_id, name=body.name, email=email, phone=body.phone)
    db.add(entry)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You are already on the waiting list for this event",
        )
    await db.refresh(entry)
    logger.info("Waiting list entry added", extra={"event_id": body.event_id})
    return entry


@router.get(
    "/",
    response_model=list[WaitingListResponse],
    summary="List waiting list entries",
    description="Every waiting list entry registered under an email address.",
)
async def list_entries(
    email: str = Query(min_length=3, max_length=255),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(WaitingListEntry)
        .where(WaitingListEntry.email == email.strip().lower())
        .order_by(WaitingListEntry.created_at.desc())
    )
    return result.scalars().all()


@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave waiting list",
    description="Remove a waiting list entry. The email must match the one it was registered with.",
)
async def leave_waiting_list(
    entry_id: uuid.UUID,
    email: str = Query(min_length=3, max_length=255),
    db: AsyncSession = Depends(get_db),
):
    entry = await db.get(WaitingListEntry, entry_id)
    if entry is None or entry.email != email.strip().lower():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Waiting list entry not found")
    await db.delete(entry)
    await db.commit()
