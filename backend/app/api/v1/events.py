import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.deps import require_organizer
from app.models.database import get_db
from app.models.event import Event
from app.models.offer import PromotionalOffer
from app.models.ticket_type import TicketType
from app.models.user import User
from app.schemas.event import (
    EventCreate,
    EventListResponse,
    EventResponse,
    EventUpdate,
    SeatMapResponse,
    SeatResponse,
    TicketTypeResponse,
)
from app.services.booking_service import build_seat_map, load_event

logger = logging.getLogger(__name__)

router = APIRouter()


def _with_listings():
    return select(Event).options(
        selectinload(Event.ticket_types), selectinload(Event.promotional_offers),
    )


async def _published_event(db: AsyncSession, event_id: uuid.UUID) -> Event:
    event = await load_event(db, event_id)
    if event is None or not event.published:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


async def _owned_event(db: AsyncSession, event_id: uuid.UUID, user: User) -> Event:
    event = await load_event(db, event_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    if event.organizer_id != user.id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the event organizer can modify this event",
        )
    return event


def _seat_map(event: Event, ticket_type_id: uuid.UUID | None = None) -> SeatMapResponse:
    seats = [
        SeatResponse(
            id=seat.id,
            row=seat.row,
            column=seat.column,
            status=seat.status.value,
            price=seat.price,
            ticket_type_id=seat.ticket_type_id,
        )
        for seat in build_seat_map(event, ticket_type_id)
    ]
    return SeatMapResponse(event_id=event.id, seats=seats)


@router.get(
    "/",
    response_model=EventListResponse,
    summary="List events",
    description="Published events ordered by date. Optional case-insensitive name search.",
)
async def list_events(
    search: str | None = Query(default=None, max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    conditions = [Event.published.is_(True)]
    if search:
        conditions.append(Event.name.ilike(f"%{search.strip()}%"))

    total = await db.scalar(select(func.count(Event.id)).where(*conditions))
    result = await db.execute(
        _with_listings()
        .where(*conditions)
        .order_by(Event.date.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return EventListResponse(
        items=[EventResponse.model_validate(e) for e in result.scalars().all()],
        total=total or 0,
        page=page,
        limit=limit,
    )


@router.get(
    "/mine",
    response_model=list[EventResponse],
    summary="List my events",
    description="Every event created by the current organizer, published or not.",
)
async def list_my_events(
    user: User = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        _with_listings().where(Event.organizer_id == user.id).order_by(Event.date.asc())
    )
    return result.scalars().all()


@router.post(
    "/",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create event",
    description=(
        "Create an event with its ticket types and promotional offers. "
        "Seat capacity is the sum of ticket type quantities."
    ),
)
async def create_event(
    body: EventCreate,
    user: User = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    data = body.model_dump(exclude={"ticket_types", "promotional_offers"})
    total_seats = sum(tt.quantity for tt in body.ticket_types)
    event = Event(
        organizer_id=user.id, total_seats=total_seats, available_seats=total_seats, **data
    )
    event.ticket_types = [TicketType(**tt.model_dump()) for tt in body.ticket_types]
    event.promotional_offers = [
        PromotionalOffer(**offer.model_dump()) for offer in body.promotional_offers
    ]
    db.add(event)
    await db.commit()

    logger.info(
        "Event %s created with %d ticket types, %d seats",
        event.id, len(body.ticket_types), total_seats,
        extra={"event_id": event.id, "user_id": user.id},
    )
    return await load_event(db, event.id)


@router.get(
    "/{event_id}",
    response_model=EventResponse,
    summary="Get event",
    description="Retrieve a published event with its ticket types and offers.",
)
async def get_event(event_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await _published_event(db, event_id)


@router.patch(
    "/{event_id}",
    response_model=EventResponse,
    summary="Update event",
    description="Partially update an event's details. Owner or admin only.",
)
async def update_event(
    event_id: uuid.UUID,
    body: EventUpdate,
    user: User = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    event = await _owned_event(db, event_id, user)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(event, field, value)
    await db.commit()
    return await load_event(db, event.id)


@router.delete(
    "/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete event",
    description="Delete an event with its ticket types, orders and waiting list. Owner or admin only.",
)
async def delete_event(
    event_id: uuid.UUID,
    user: User = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
):
    event = await _owned_event(db, event_id, user)
    await db.delete(event)
    await db.commit()
    logger.info("Event %s deleted", event_id, extra={"event_id": event_id, "user_id": user.id})


@router.get(
    "/{event_id}/tickets",
    response_model=list[TicketTypeResponse],
    summary="List ticket types",
    description="Ticket types of a published event in creation order.",
)
async def list_ticket_types(event_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    event = await _published_event(db, event_id)
    return event.ticket_types


@router.get(
    "/{event_id}/seats",
    response_model=SeatMapResponse,
    summary="Get seat map",
    description=(
        "Every seat of every ticket type with its status: booked (confirmed order), "
        "reserved (pending order) or available."
    ),
)
async def get_seat_map(event_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    event = await _published_event(db, event_id)
    return _seat_map(event)


@router.get(
    "/{event_id}/tickets/{ticket_type_id}/seats",
    response_model=SeatMapResponse,
    summary="Get ticket type seat map",
    description="Seat map restricted to one ticket type.",
)
async def get_ticket_type_seats(
    event_id: uuid.UUID,
    ticket_type_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    event = await _published_event(db, event_id)
    if not any(tt.id == ticket_type_id for tt in event.ticket_types):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket type not found")
    return _seat_map(event, ticket_type_id)
