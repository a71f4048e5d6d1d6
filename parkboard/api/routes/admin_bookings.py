from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from pydantic import AwareDatetime
from sqlalchemy import select
from sqlalchemy.orm import Session

from parkboard.core.deps import get_db, require_admin
from parkboard.core.errors import Rejected, rejection_to_http
from parkboard.models.booking import Booking
from parkboard.models.enums import BookingStatus
from parkboard.schemas.booking import BookingCancelRequest, BookingOut
from parkboard.services.audit_service import audit_booking, write_audit_log
from parkboard.services.booking_service import cancel_booking
from parkboard.services.quick_availability import sweep_expired_quick_postings

router = APIRouter()


@router.get("/bookings", response_model=list[BookingOut])
def list_bookings(
    from_: AwareDatetime | None = Query(default=None, alias="from"),
    to: AwareDatetime | None = None,
    slot_id: str | None = None,
    user_id: str | None = None,
    status_: BookingStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    q = select(Booking)
    if from_:
        q = q.where(Booking.end_time > from_)
    if to:
        q = q.where(Booking.start_time < to)
    if slot_id:
        q = q.where(Booking.slot_id == slot_id)
    if user_id:
        q = q.where(Booking.user_id == user_id)
    if status_:
        q = q.where(Booking.status == status_.value)

    q = q.order_by(Booking.start_time.asc())
    return db.execute(q.limit(1000)).scalars().all()


@router.post("/bookings/{booking_id}/cancel", response_model=BookingOut)
def cancel_admin(
    booking_id: str,
    request: Request,
    payload: BookingCancelRequest | None = None,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    reason = payload.reason if payload else ""
    result = cancel_booking(db, booking_id=booking_id, requester_id=admin.id, is_admin=True, reason=reason)
    if isinstance(result, Rejected):
        raise rejection_to_http(result)

    if not result.already_cancelled:
        audit_booking(
            db,
            actor_user_id=admin.id,
            action_type="BOOKING_CANCEL_ADMIN",
            booking=result.booking,
            summary="Cancelled booking (admin)",
            request=request,
            cancel_reason=reason,
        )
    return result.booking


@router.post("/quick-availability/sweep")
def sweep(request: Request, db: Session = Depends(get_db), admin=Depends(require_admin)):
    cleared = sweep_expired_quick_postings(db)
    write_audit_log(
        db,
        actor_user_id=admin.id,
        action_type="QUICK_AVAILABILITY_SWEEP",
        target_type="slot",
        target_id="bulk",
        summary="Swept expired quick availability",
        diff_json={"count": cleared},
        request=request,
    )
    return {"ok": True, "cleared": cleared}
