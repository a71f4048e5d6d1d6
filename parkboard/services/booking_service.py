from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from parkboard.core.config import BookingRules, get_booking_rules, get_settings
from parkboard.core.errors import Rejected, RejectionCode
from parkboard.models._types import utcnow
from parkboard.models.booking import Booking
from parkboard.models.enums import BookingStatus, PaymentStatus, SlotStatus
from parkboard.models.slot import ParkingSlot
from parkboard.services.availability_service import (
    carries_availability_data,
    load_blackouts,
    load_windows,
    resolve_availability,
)
from parkboard.services.intervals import duration_hours
from parkboard.services.ownership import can_request
from parkboard.services.pricing import booking_cost, has_marketplace_pricing
from parkboard.services.quick_availability import sweep_expired_quick_postings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Admitted:
    booking: Booking

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Cancelled:
    booking: Booking
    already_cancelled: bool = False

    @property
    def ok(self) -> bool:
        return True


def _reject(code: RejectionCode, message: str, **detail) -> Rejected:
    return Rejected(code=code, message=message, detail=detail, retryable=code == RejectionCode.NOT_FINALIZED)


def _check_request_shape(start: datetime, end: datetime, now: datetime, rules: BookingRules) -> Rejected | None:
    if end <= start:
        return _reject(RejectionCode.INVALID_TIME_RANGE, "end_time must be after start_time")

    hours = duration_hours(start, end)
    if hours < rules.min_duration_hours:
        return _reject(
            RejectionCode.DURATION_TOO_SHORT,
            f"Minimum booking duration is {rules.min_duration_hours:g} hour(s)",
            bound="min_duration_hours",
            limit=rules.min_duration_hours,
            actual=hours,
        )
    if hours > rules.max_duration_hours:
        return _reject(
            RejectionCode.DURATION_TOO_LONG,
            f"Maximum booking duration is {rules.max_duration_hours:g} hours",
            bound="max_duration_hours",
            limit=rules.max_duration_hours,
            actual=hours,
        )

    days_ahead = (start - now) / timedelta(days=1)
    if days_ahead > rules.max_advance_days:
        return _reject(
            RejectionCode.ADVANCE_HORIZON_EXCEEDED,
            f"Cannot book more than {rules.max_advance_days:g} days in advance",
            bound="max_advance_days",
            limit=rules.max_advance_days,
            actual=days_ahead,
        )
    return None


def find_conflicts(
    db: Session,
    *,
    slot_id: str,
    start: datetime,
    end: datetime,
    exclude_booking_id: str | None = None,
) -> list[Booking]:
    q = (
        select(Booking)
        .where(Booking.slot_id == slot_id)
        .where(Booking.status == BookingStatus.CONFIRMED.value)
        .where(Booking.start_time < end)
        .where(Booking.end_time > start)
    )
    if exclude_booking_id:
        q = q.where(Booking.id != exclude_booking_id)
    return db.execute(q).scalars().all()


def admit_booking(
    db: Session,
    *,
    slot_id: str,
    requester_id: str,
    start: datetime,
    end: datetime,
    notes: str = "",
    is_admin: bool = False,
    now: datetime | None = None,
    rules: BookingRules | None = None,
) -> Admitted | Rejected:
    """Validate a booking request and persist it when every check passes.

    Checks run in a fixed order and the first failure is returned; nothing is
    written for a rejected request. The slot row is locked for the conflict
    check and insert so concurrent admissions on the same slot serialise;
    the database exclusion constraint backs this up.
    """
    if now is None:
        now = utcnow()
    if rules is None:
        rules = get_booking_rules()

    # Lock the slot row for the rest of this transaction (no-op on SQLite)
    slot = db.execute(select(ParkingSlot).where(ParkingSlot.id == slot_id).with_for_update()).scalar_one_or_none()
    if slot is None:
        return _reject(RejectionCode.SLOT_NOT_FOUND, "Slot not found", slot_id=slot_id)

    rejection = _check_request_shape(start, end, now, rules)
    if rejection is None:
        rejection = _check_slot(db, slot, requester_id, start, end, now=now, is_admin=is_admin)
    if rejection is not None:
        db.rollback()
        logger.info("Booking rejected slot=%s requester=%s code=%s", slot_id, requester_id, rejection.code.value)
        return rejection

    booking = Booking(
        slot_id=slot.id,
        user_id=requester_id,
        slot_owner_id=slot.owner_id,
        start_time=start,
        end_time=end,
        status=BookingStatus.CONFIRMED.value,
        notes=notes or "",
    )
    if has_marketplace_pricing(slot):
        booking.total_amount = booking_cost(slot.rental_rate_hourly, slot.rental_rate_daily, start, end)
        booking.hourly_rate = slot.rental_rate_hourly
        booking.payment_status = PaymentStatus.PENDING.value

    db.add(booking)
    try:
        db.commit()
    except (IntegrityError, OperationalError):
        db.rollback()
        logger.warning("Booking insert failed slot=%s %s-%s", slot_id, start, end, exc_info=True)
        return _reject(
            RejectionCode.NOT_FINALIZED,
            "Booking could not be finalized, please try again",
            slot_id=slot_id,
        )
    db.refresh(booking)
    logger.info("Booking admitted id=%s slot=%s requester=%s", booking.id, slot_id, requester_id)

    # The booking is stored; a failed sweep is left for the next run
    try:
        sweep_expired_quick_postings(db, now=now)
    except (IntegrityError, OperationalError):
        db.rollback()
        logger.warning("Quick availability sweep after booking on slot %s failed", slot_id, exc_info=True)
    return Admitted(booking)


def _check_slot(
    db: Session,
    slot: ParkingSlot,
    requester_id: str,
    start: datetime,
    end: datetime,
    *,
    now: datetime,
    is_admin: bool,
) -> Rejected | None:
    if slot.status != SlotStatus.AVAILABLE.value:
        return _reject(RejectionCode.SLOT_NOT_BOOKABLE, f"Slot is currently {slot.status}", status=slot.status)

    eligibility = can_request(slot, requester_id, is_admin=is_admin)
    if not eligibility.eligible:
        return _reject(RejectionCode.OWNERSHIP_DENIED, eligibility.reason or "Not allowed to book this slot")

    windows = load_windows(db, slot.id)
    blackouts = load_blackouts(db, slot.id, start, end)
    if carries_availability_data(slot, windows, blackouts) and not resolve_availability(
        slot, windows, blackouts, start, end, now=now, tz=ZoneInfo(get_settings().timezone)
    ):
        return _reject(RejectionCode.AVAILABILITY_DENIED, "Slot is not offered for this time period")

    conflicts = find_conflicts(db, slot_id=slot.id, start=start, end=end)
    if conflicts:
        return _reject(
            RejectionCode.SCHEDULING_CONFLICT,
            "Slot is already booked for this time period",
            conflicting_booking_ids=[b.id for b in conflicts],
        )
    return None


def cancel_booking(
    db: Session,
    *,
    booking_id: str,
    requester_id: str,
    is_admin: bool = False,
    reason: str = "",
    now: datetime | None = None,
    rules: BookingRules | None = None,
) -> Cancelled | Rejected:
    """Cancel a confirmed booking.

    The renter and the slot owner may cancel until the grace period after
    the start has run out; admins may cancel at any time.
    """
    if now is None:
        now = utcnow()
    if rules is None:
        rules = get_booking_rules()

    booking = db.get(Booking, booking_id)
    if booking is None:
        return _reject(RejectionCode.BOOKING_NOT_FOUND, "Booking not found", booking_id=booking_id)

    if not is_admin and requester_id not in (booking.user_id, booking.slot_owner_id):
        return _reject(RejectionCode.CANCEL_FORBIDDEN, "Not authorized to cancel this booking")

    if booking.status == BookingStatus.CANCELLED.value:
        return Cancelled(booking, already_cancelled=True)

    if booking.status != BookingStatus.CONFIRMED.value:
        return _reject(
            RejectionCode.BOOKING_NOT_CANCELLABLE,
            "Cannot cancel completed or no_show bookings",
            status=booking.status,
        )

    grace = timedelta(hours=rules.cancellation_grace_hours)
    if not is_admin and booking.start_time < now - grace:
        return _reject(
            RejectionCode.CANCELLATION_WINDOW_CLOSED,
            f"Bookings can only be cancelled up to {rules.cancellation_grace_hours:g} hour(s) after they start",
            limit=rules.cancellation_grace_hours,
        )

    booking.status = BookingStatus.CANCELLED.value
    booking.cancelled_at = now
    booking.cancel_reason = (reason or "")[:255]
    if booking.payment_status == PaymentStatus.PAID.value:
        booking.payment_status = PaymentStatus.REFUNDED.value
    db.commit()
    db.refresh(booking)
    logger.info("Booking cancelled id=%s by=%s", booking.id, requester_id)
    return Cancelled(booking)


def find_alternative_slots(
    db: Session,
    *,
    requester_id: str,
    start: datetime,
    end: datetime,
    is_admin: bool = False,
    now: datetime | None = None,
) -> list[ParkingSlot]:
    """Slots the requester could book for the same window."""
    if now is None:
        now = utcnow()

    slots = db.execute(
        select(ParkingSlot).where(ParkingSlot.status == SlotStatus.AVAILABLE.value).order_by(ParkingSlot.slot_number)
    ).scalars().all()

    out: list[ParkingSlot] = []
    for slot in slots:
        if _check_slot(db, slot, requester_id, start, end, now=now, is_admin=is_admin) is None:
            out.append(slot)
    return out
