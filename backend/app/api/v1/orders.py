import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.deps import get_current_user
from app.core.rate_limit import order_limiter
from app.models.database import get_db
from app.models.order import Order, OrderItem
from app.models.user import User
from app.schemas.order import OrderCreate, OrderResponse, PaymentInfo
from app.services.booking_service import (
    NotFoundError,
    SeatConflictError,
    cancel_order,
    confirm_order,
    create_order,
    load_order,
)

router = APIRouter()


async def _visible_order(db: AsyncSession, order_id: uuid.UUID, user: User) -> Order:
    order = await load_order(db, order_id)
    # Other users' orders are reported as missing
    if order is None or (order.user_id != user.id and not user.is_admin):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


@router.post(
    "/",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place order",
    description=(
        "Book tickets for a published event. Seats may be chosen explicitly or "
        "allocated automatically. Orders with payment details are confirmed "
        "immediately; otherwise they stay pending and their seats are reserved."
    ),
)
async def place_order(
    body: OrderCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order_limiter.check(request)
    try:
        return await create_order(db, user, body)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except SeatConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get(
    "/",
    response_model=list[OrderResponse],
    summary="List orders",
    description="Orders of the current user, newest first. Admins see every order.",
)
async def list_orders(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = (
        select(Order)
        .options(selectinload(Order.items).selectinload(OrderItem.seats))
        .order_by(Order.created_at.desc())
    )
    if not user.is_admin:
        query = query.where(Order.user_id == user.id)
    result = await db.execute(query)
    return result.scalars().all()


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
    description="Retrieve one order with its items and seats.",
)
async def get_order(
    order_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _visible_order(db, order_id, user)


@router.put(
    "/{order_id}/confirm",
    response_model=OrderResponse,
    summary="Confirm order",
    description="Record payment for a pending order. Its reserved seats become booked.",
)
async def confirm(
    order_id: uuid.UUID,
    body: PaymentInfo,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order = await _visible_order(db, order_id, user)
    try:
        return await confirm_order(db, order, body)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.put(
    "/{order_id}/cancel",
    response_model=OrderResponse,
    summary="Cancel order",
    description="Cancel an order, release its seats and restore event availability.",
)
async def cancel(
    order_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order = await _visible_order(db, order_id, user)
    try:
        return await cancel_order(db, order)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
