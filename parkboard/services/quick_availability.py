from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.orm import Session

from parkboard.models._types import utcnow
from parkboard.models.slot import ParkingSlot

logger = logging.getLogger(__name__)


class QuickPostingError(ValueError):
    pass


def post_quick_availability(db: Session, *, slot: ParkingSlot, until: datetime, now: datetime | None = None) -> ParkingSlot:
    """Mark a slot "available now" until ``until`` and list it for rent."""
    if now is None:
        now = utcnow()
    if until <= now:
        raise QuickPostingError("Quick availability must end in the future")

    slot.quick_availability_active = True
    slot.quick_availability_until = until
    slot.quick_availability_posted_at = now
    slot.is_listed_for_rent = True
    db.commit()
    db.refresh(slot)
    logger.info("Quick availability posted slot=%s until=%s", slot.id, until.isoformat())
    return slot


def clear_quick_availability(db: Session, *, slot: ParkingSlot) -> ParkingSlot:
    slot.quick_availability_active = False
    slot.quick_availability_until = None
    slot.quick_availability_posted_at = None
    slot.is_listed_for_rent = False
    db.commit()
    db.refresh(slot)
    return slot


def sweep_expired_quick_postings(db: Session, *, now: datetime | None = None) -> int:
    """Clear stale "available now" postings; returns the number of slots cleared.

    Safe to run any number of times: a second pass with the same ``now``
    finds nothing left to clear.
    """
    if now is None:
        now = utcnow()

    stmt = (
        update(ParkingSlot)
        .where(ParkingSlot.quick_availability_active == True)  # noqa: E712
        .where(ParkingSlot.quick_availability_until < now)
        .values(quick_availability_active=False, is_listed_for_rent=False)
        .execution_options(synchronize_session="fetch")
    )
    result = db.execute(stmt)
    db.commit()

    cleared = result.rowcount or 0
    if cleared:
        logger.info("Quick availability sweep cleared %s slot(s)", cleared)
    return cleared
