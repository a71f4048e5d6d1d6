from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkboard.db.base import Base
from parkboard.models._mixins import TimestampMixin
from parkboard.models._types import UTCDateTime
from parkboard.models.enums import SlotStatus, SlotType


class ParkingSlot(Base, TimestampMixin):
    __tablename__ = "parking_slots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    slot_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    slot_type: Mapped[str] = mapped_column(String(32), nullable=False, default=SlotType.COVERED.value)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=SlotStatus.AVAILABLE.value)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # NULL owner means a shared slot anyone may book
    owner_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True, index=True)

    # Marketplace
    is_listed_for_rent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rental_rate_hourly: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    rental_rate_daily: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    # "Available now" posting
    quick_availability_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    quick_availability_until: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    quick_availability_posted_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    availability_windows: Mapped[list["AvailabilityWindow"]] = relationship(
        "AvailabilityWindow", back_populates="slot", cascade="all, delete-orphan"
    )
    blackout_periods: Mapped[list["BlackoutPeriod"]] = relationship(
        "BlackoutPeriod", back_populates="slot", cascade="all, delete-orphan"
    )
