import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.database import Base


class TicketType(Base):
    __tablename__ = "ticket_types"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    event_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), default="")
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(
        String(20), default="active"
    )  # active, sold_out, expired, discontinued
    # {"rows": int, "columns": int, "last_row_columns": int | None}
    seat_arrangement: Mapped[dict | None] = mapped_column(JSONB)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    event: Mapped["Event"] = relationship(back_populates="ticket_types")  # noqa: F821
    booked_seats: Mapped[list["BookedSeat"]] = relationship(
        back_populates="ticket_type", cascade="all, delete-orphan"
    )


class BookedSeat(Base):
    """A seat held by an order item. Rows and columns are 1-based."""

    __tablename__ = "booked_seats"
    __table_args__ = (
        UniqueConstraint("ticket_type_id", "seat_row", "seat_column", name="uq_booked_seat"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    ticket_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("ticket_types.id", ondelete="CASCADE"), nullable=False
    )
    order_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("order_items.id", ondelete="CASCADE"), nullable=False
    )
    row: Mapped[int] = mapped_column("seat_row", Integer, nullable=False)
    column: Mapped[int] = mapped_column("seat_column", Integer, nullable=False)

    ticket_type: Mapped["TicketType"] = relationship(back_populates="booked_seats")
    order_item: Mapped["OrderItem"] = relationship(back_populates="seats")  # noqa: F821
