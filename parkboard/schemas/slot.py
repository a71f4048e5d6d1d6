from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import AwareDatetime, BaseModel

from parkboard.models.enums import SlotStatus, SlotType


class SlotOut(BaseModel):
    id: str
    slot_number: str
    slot_type: SlotType
    status: SlotStatus
    description: str
    owner_id: str | None
    is_listed_for_rent: bool
    rental_rate_hourly: Decimal | None = None
    rental_rate_daily: Decimal | None = None
    quick_availability_active: bool
    quick_availability_until: datetime | None = None
    quick_availability_posted_at: datetime | None = None

    class Config:
        from_attributes = True


class QuickAvailabilityCreate(BaseModel):
    until: AwareDatetime


class CostOut(BaseModel):
    slot_id: str
    start_time: datetime
    end_time: datetime
    amount: Decimal
