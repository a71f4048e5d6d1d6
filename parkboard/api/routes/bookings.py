from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from parkboard.core.deps import get_current_user, get_db
from parkboard.core.errors import Rejected, rejection_to_http
from parkboard.core.rate_limit import RateLimiter, get_rate_limiter
from parkboard.models.booking import Booking
from parkboard.models.enums import BookingStatus
from parkboard.models.user import User
from parkboard.schemas.booking import BookingCancelRequest, BookingCreate, BookingOut
from parkboard.services.audit_service import audit_booking
from parkboard.services.booking_service import admit_booking, cancel_booking

router = APIRouter()


@router.get("", response_model=list[BookingOut])
def list_my_bookings(
    status_: BookingStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = select(Booking).where(Booking.user_id == user.id)
    if status_:
        q = q.where(Booking.status == status_.value)
    q = q.order_by(Booking.start_time.asc())
    return db.execute(q.limit(1000)).scalars().all()


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    limiter.check(f"booking:{user.id}")

    requester_id = user.id
    if payload.on_behalf_of and payload.on_behalf_of != user.id:
        if not user.is_admin:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can book on behalf of another resident")
        if db.get(User, payload.on_behalf_of) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        requester_id = payload.on_behalf_of

    result = admit_booking(
        db,
        slot_id=payload.slot_id,
        requester_id=requester_id,
        start=payload.start_time,
        end=payload.end_time,
        notes=payload.notes,
        is_admin=user.is_admin,
    )
    if isinstance(result, Rejected):
        raise rejection_to_http(result)

    booking = result.booking
    audit_booking(db, actor_user_id=user.id, action_type="BOOKING_CREATE", booking=booking, summary="Booking admitted", request=request)
    return booking


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    b = db.get(Booking, booking_id)
    if not b or (not user.is_admin and user.id not in (b.user_id, b.slot_owner_id)):
        raise HTTPException(status_code=404, detail="Booking not found")
    return b


@router.post("/{booking_id}/cancel", response_model=BookingOut)
def cancel(
    booking_id: str,
    request: Request,
    payload: BookingCancelRequest | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    reason = payload.reason if payload else ""
    result = cancel_booking(db, booking_id=booking_id, requester_id=user.id, reason=reason)
    if isinstance(result, Rejected):
        raise rejection_to_http(result)

    if not result.already_cancelled:
        audit_booking(
            db,
            actor_user_id=user.id,
            action_type="BOOKING_CANCEL",
            booking=result.booking,
            summary="Booking cancelled",
            request=request,
            cancel_reason=reason,
        )
    return result.booking
