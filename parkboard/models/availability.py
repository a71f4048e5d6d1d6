from __future__ import annotations

import uuid
from datetime import date, datetime, time

from sqlalchemy import CheckConstraint, Date, ForeignKey, JSON, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkboard.db.base import Base
from parkboard.models._mixins import TimestampMixin
from parkboard.models._types import UTCDateTime


class AvailabilityWindow(Base, TimestampMixin):
    __tablename__ = "slot_availability_windows"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    slot_id: Mapped[str] = mapped_column(String(36), ForeignKey("parking_slots.id", ondelete="CASCADE"), nullable=False, index=True)

    # Recurring pattern: [1,2,3,4,5] = weekdays, [6,0] = weekends (0 = Sunday)
    day_of_week: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)

    # Specific date range (inclusive)
    available_from: Mapped[date | None] = mapped_column(Date, nullable=True)
    available_until: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Local time of day; NULL start = 00:00, NULL or 00:00 end = end of day
    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    slot: Mapped["ParkingSlot"] = relationship("ParkingSlot", back_populates="availability_windows")


class BlackoutPeriod(Base):
    __tablename__ = "slot_blackout_dates"
    __table_args__ = (CheckConstraint("blackout_end > blackout_start", name="blackout_valid_range"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    slot_id: Mapped[str] = mapped_column(String(36), ForeignKey("parking_slots.id", ondelete="CASCADE"), nullable=False, index=True)

    blackout_start: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    blackout_end: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    created_by_user_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)

    slot: Mapped["ParkingSlot"] = relationship("ParkingSlot", back_populates="blackout_periods")
