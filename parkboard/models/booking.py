from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parkboard.db.base import Base
from parkboard.models._mixins import TimestampMixin
from parkboard.models._types import UTCDateTime
from parkboard.models.enums import BookingStatus


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"
    __table_args__ = (CheckConstraint("end_time > start_time", name="booking_valid_range"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    slot_id: Mapped[str] = mapped_column(String(36), ForeignKey("parking_slots.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    # Owner of the slot when the booking was admitted
    slot_owner_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)

    start_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    status: Mapped[str] = mapped_column(String(32), nullable=False, default=BookingStatus.CONFIRMED.value)  # confirmed/cancelled/completed/no_show
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    total_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    payment_status: Mapped[str | None] = mapped_column(String(32), nullable=True)  # pending/paid/refunded

    cancelled_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    cancel_reason: Mapped[str] = mapped_column(String(255), nullable=False, default="")
