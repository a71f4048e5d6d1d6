from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import AwareDatetime, BaseModel, Field

from parkboard.models.enums import BookingStatus, PaymentStatus


class BookingCreate(BaseModel):
    slot_id: str
    start_time: AwareDatetime
    end_time: AwareDatetime
    notes: str = Field(default="", max_length=1000)

    # Admins may book on behalf of a resident
    on_behalf_of: str | None = None


class BookingCancelRequest(BaseModel):
    reason: str = Field(default="", max_length=255)


class BookingOut(BaseModel):
    id: str
    slot_id: str
    user_id: str
    slot_owner_id: str | None
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    notes: str
    total_amount: Decimal | None = None
    hourly_rate: Decimal | None = None
    payment_status: PaymentStatus | None = None
    cancelled_at: datetime | None = None

    class Config:
        from_attributes = True
