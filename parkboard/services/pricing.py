from __future__ import annotations

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from parkboard.models.slot import ParkingSlot

CENTS = Decimal("0.01")
HOURS_PER_DAY = Decimal(24)
MICROSECOND = timedelta(microseconds=1)
MICROSECONDS_PER_HOUR = Decimal(3_600_000_000)


class PricingError(ValueError):
    pass


class SlotNotFound(LookupError):
    pass


def _hours(start: datetime, end: datetime) -> Decimal:
    return Decimal((end - start) // MICROSECOND) / MICROSECONDS_PER_HOUR


def has_marketplace_pricing(slot: ParkingSlot) -> bool:
    return slot.rental_rate_hourly is not None or slot.rental_rate_daily is not None


def booking_cost(
    hourly_rate: Decimal | None,
    daily_rate: Decimal | None,
    start: datetime,
    end: datetime,
) -> Decimal:
    """Price a rental, giving the renter the cheaper billing basis.

    Under 24 hours the hourly rate applies; from 24 hours on, the pro-rated
    daily rate is used when it is cheaper. With a daily rate below 24 times
    the hourly rate the price steps down at the 24 hour mark. A slot priced
    with only one rate is billed on that rate alone.
    """
    if end <= start:
        raise PricingError("end_time must be after start_time")
    if hourly_rate is None and daily_rate is None:
        raise PricingError("Slot has no rental rates")

    hours = _hours(start, end)
    by_hour = Decimal(str(hourly_rate)) * hours if hourly_rate is not None else None
    by_day = Decimal(str(daily_rate)) * (hours / HOURS_PER_DAY) if daily_rate is not None else None

    if by_hour is None:
        cost = by_day
    elif by_day is None:
        cost = by_hour
    elif hours < HOURS_PER_DAY:
        cost = by_hour
    else:
        cost = min(by_hour, by_day)

    return cost.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_cost(db: Session, *, slot_id: str, start: datetime, end: datetime) -> Decimal:
    slot = db.get(ParkingSlot, slot_id)
    if slot is None:
        raise SlotNotFound(slot_id)
    return booking_cost(slot.rental_rate_hourly, slot.rental_rate_daily, start, end)
