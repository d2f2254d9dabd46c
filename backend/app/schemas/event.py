import re
import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class SeatArrangementSchema(BaseModel):
    rows: int = Field(ge=1, le=500)
    columns: int = Field(ge=1, le=500)
    last_row_columns: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _last_row_fits(self):
        if self.last_row_columns is not None and self.last_row_columns > self.columns:
            raise ValueError("last_row_columns cannot exceed columns")
        return self

    @property
    def capacity(self) -> int:
        last = self.last_row_columns or self.columns
        return (self.rows - 1) * self.columns + last


class TicketTypeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    start_date: datetime | None = None
    end_date: datetime | None = None
    seat_arrangement: SeatArrangementSchema | None = None

    @model_validator(mode="after")
    def _consistent(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("Ticket sales end date must be after start date")
        if self.seat_arrangement and self.seat_arrangement.capacity != self.quantity:
            raise ValueError(
                f"Quantity ({self.quantity}) must match seat arrangement capacity "
                f"({self.seat_arrangement.capacity})"
            )
        return self


class PromotionalOfferCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    code: str = Field(min_length=1, max_length=50)
    discount_type: Literal["percentage", "fixed"]
    discount_value: float = Field(ge=0)
    max_uses: int = Field(default=100, ge=1)
    valid_from: datetime
    valid_until: datetime
    active: bool = True

    @model_validator(mode="after")
    def _valid_window(self):
        if self.valid_until <= self.valid_from:
            raise ValueError("Offer end date must be after start date")
        if self.discount_type == "percentage" and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class EventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=2000)
    date: datetime
    time: str
    location: str = Field(min_length=1, max_length=255)
    tags: list[str] = Field(default_factory=list)
    published: bool = True
    ticket_types: list[TicketTypeCreate] = Field(min_length=1)
    promotional_offers: list[PromotionalOfferCreate] = Field(default_factory=list)

    @field_validator("date")
    @classmethod
    def _in_future(cls, value: datetime) -> datetime:
        aware = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        if aware <= datetime.now(timezone.utc):
            raise ValueError("Event date must be in the future")
        return aware

    @field_validator("time")
    @classmethod
    def _time_format(cls, value: str) -> str:
        if not _TIME_RE.match(value):
            raise ValueError("Time must be in HH:MM format")
        return value


class EventUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    date: datetime | None = None
    time: str | None = None
    location: str | None = Field(default=None, max_length=255)
    tags: list[str] | None = None
    published: bool | None = None

    @field_validator("time")
    @classmethod
    def _time_format(cls, value: str | None) -> str | None:
        if value is not None and not _TIME_RE.match(value):
            raise ValueError("Time must be in HH:MM format")
        return value


class TicketTypeResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str
    price: float
    quantity: int
    start_date: datetime | None
    end_date: datetime | None
    status: str
    seat_arrangement: dict | None

    model_config = {"from_attributes": True}


class PromotionalOfferResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str
    code: str
    discount_type: str
    discount_value: float
    max_uses: int
    current_uses: int
    valid_from: datetime
    valid_until: datetime
    active: bool

    model_config = {"from_attributes": True}


class EventResponse(BaseModel):
    id: uuid.UUID
    organizer_id: uuid.UUID
    name: str
    description: str
    date: datetime
    time: str
    location: str
    tags: list[str]
    total_seats: int
    available_seats: int
    published: bool
    approval_status: str
    created_at: datetime
    updated_at: datetime
    ticket_types: list[TicketTypeResponse] = []
    promotional_offers: list[PromotionalOfferResponse] = []

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    items: list[EventResponse]
    total: int
    page: int
    limit: int


class SeatResponse(BaseModel):
    id: str
    row: str
    column: int
    status: str
    price: float
    ticket_type_id: str

    model_config = {"from_attributes": True}


class SeatMapResponse(BaseModel):
    event_id: uuid.UUID
    seats: list[SeatResponse]
