import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class SeatRef(BaseModel):
    """A seat as ``{"row": 1 | "A", "column": 12}``; codes like ``"A12"`` are also accepted."""

    row: int | str
    column: int = Field(ge=1)


class OrderTicketRequest(BaseModel):
    ticket_type_id: uuid.UUID
    quantity: int = Field(ge=1, le=50)
    seats: list[SeatRef | str] | None = None


class PaymentInfo(BaseModel):
    method: str = Field(min_length=1, max_length=50)
    transaction_id: str = Field(min_length=1, max_length=100)


class OrderCreate(BaseModel):
    event_id: uuid.UUID
    tickets: list[OrderTicketRequest] = Field(min_length=1)
    promo_code: str | None = Field(default=None, max_length=50)
    payment: PaymentInfo | None = None


class OrderItemResponse(BaseModel):
    ticket_type_id: uuid.UUID
    quantity: int
    unit_price: float
    seat_labels: list[str]

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    status: str
    total_amount: float
    discount: float
    promo_code: str | None
    payment_method: str | None
    transaction_id: str | None
    paid_at: datetime | None
    created_at: datetime
    ticket_count: int
    items: list[OrderItemResponse]

    model_config = {"from_attributes": True}
