from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import AwareDatetime
from sqlalchemy import select
from sqlalchemy.orm import Session

from parkboard.core.deps import get_current_user, get_db
from parkboard.models.availability import AvailabilityWindow, BlackoutPeriod
from parkboard.models.slot import ParkingSlot
from parkboard.models.user import User
from parkboard.schemas.availability import (
    AvailabilityCalendar,
    AvailabilityCheckOut,
    AvailabilityDay,
    AvailabilityWindowCreate,
    AvailabilityWindowOut,
    BlackoutCreate,
    BlackoutOut,
)
from parkboard.schemas.slot import CostOut, QuickAvailabilityCreate, SlotOut
from parkboard.services.audit_service import write_audit_log
from parkboard.services.availability_service import is_slot_available, list_slot_availability
from parkboard.services.booking_service import find_alternative_slots
from parkboard.services.pricing import PricingError, SlotNotFound, compute_cost
from parkboard.services.quick_availability import (
    QuickPostingError,
    clear_quick_availability,
    post_quick_availability,
)

router = APIRouter()


def _get_slot(db: Session, slot_id: str) -> ParkingSlot:
    slot = db.get(ParkingSlot, slot_id)
    if not slot:
        raise HTTPException(status_code=404, detail="Slot not found")
    return slot


def _get_managed_slot(db: Session, slot_id: str, user: User) -> ParkingSlot:
    slot = _get_slot(db, slot_id)
    if not user.is_admin and slot.owner_id != user.id:
        raise HTTPException(status_code=403, detail="Only the slot owner can change its availability")
    return slot


def _check_range(start, end) -> None:
    if end <= start:
        raise HTTPException(status_code=400, detail="end_time must be after start_time")


@router.get("", response_model=list[SlotOut])
def list_slots(
    listed_only: bool = False,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = select(ParkingSlot).order_by(ParkingSlot.slot_number)
    if listed_only:
        q = q.where(ParkingSlot.is_listed_for_rent == True)  # noqa: E712
    return db.execute(q.limit(1000)).scalars().all()


@router.get("/alternatives", response_model=list[SlotOut])
def alternatives(
    start_time: AwareDatetime,
    end_time: AwareDatetime,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    _check_range(start_time, end_time)
    return find_alternative_slots(db, requester_id=user.id, start=start_time, end=end_time, is_admin=user.is_admin)


@router.get("/{slot_id}", response_model=SlotOut)
def get_slot(slot_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _get_slot(db, slot_id)


@router.get("/{slot_id}/availability", response_model=AvailabilityCheckOut)
def check_availability(
    slot_id: str,
    start_time: AwareDatetime,
    end_time: AwareDatetime,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        available = is_slot_available(db, slot_id=slot_id, start=start_time, end=end_time)
    except SlotNotFound:
        raise HTTPException(status_code=404, detail="Slot not found")
    return AvailabilityCheckOut(slot_id=slot_id, start_time=start_time, end_time=end_time, available=available)


@router.get("/{slot_id}/availability/calendar", response_model=AvailabilityCalendar)
def availability_calendar(
    slot_id: str,
    from_date: date,
    to_date: date,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if from_date > to_date:
        raise HTTPException(status_code=400, detail="Invalid date range")
    if (to_date - from_date).days > 92:
        raise HTTPException(status_code=400, detail="Date range too long")
    try:
        days = list_slot_availability(db, slot_id=slot_id, from_date=from_date, to_date=to_date)
    except SlotNotFound:
        raise HTTPException(status_code=404, detail="Slot not found")
    return AvailabilityCalendar(slot_id=slot_id, days=[AvailabilityDay(**d) for d in days])


@router.get("/{slot_id}/cost", response_model=CostOut)
def cost(
    slot_id: str,
    start_time: AwareDatetime,
    end_time: AwareDatetime,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        amount = compute_cost(db, slot_id=slot_id, start=start_time, end=end_time)
    except SlotNotFound:
        raise HTTPException(status_code=404, detail="Slot not found")
    except PricingError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CostOut(slot_id=slot_id, start_time=start_time, end_time=end_time, amount=amount)


@router.post("/{slot_id}/quick-availability", response_model=SlotOut)
def post_quick(
    slot_id: str,
    payload: QuickAvailabilityCreate,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    slot = _get_managed_slot(db, slot_id, user)
    try:
        slot = post_quick_availability(db, slot=slot, until=payload.until)
    except QuickPostingError as e:
        raise HTTPException(status_code=400, detail=str(e))

    write_audit_log(
        db,
        actor_user_id=user.id,
        action_type="QUICK_AVAILABILITY_POST",
        target_type="slot",
        target_id=slot.id,
        summary="Posted quick availability",
        diff_json={"until": payload.until.isoformat()},
        request=request,
    )
    return slot


@router.delete("/{slot_id}/quick-availability", response_model=SlotOut)
def delete_quick(slot_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    slot = _get_managed_slot(db, slot_id, user)
    return clear_quick_availability(db, slot=slot)


@router.get("/{slot_id}/windows", response_model=list[AvailabilityWindowOut])
def list_windows(slot_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _get_slot(db, slot_id)
    return db.execute(select(AvailabilityWindow).where(AvailabilityWindow.slot_id == slot_id)).scalars().all()


@router.post("/{slot_id}/windows", response_model=AvailabilityWindowOut)
def create_window(
    slot_id: str,
    payload: AvailabilityWindowCreate,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    _get_managed_slot(db, slot_id, user)
    w = AvailabilityWindow(slot_id=slot_id, **payload.model_dump())
    w.day_of_week = sorted(set(payload.day_of_week))
    db.add(w)
    db.commit()
    db.refresh(w)

    write_audit_log(db, actor_user_id=user.id, action_type="AVAILABILITY_WINDOW_CREATE", target_type="window", target_id=w.id, summary="Created availability window", request=request)
    return w


@router.delete("/{slot_id}/windows/{window_id}")
def delete_window(slot_id: str, window_id: str, request: Request, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _get_managed_slot(db, slot_id, user)
    w = db.get(AvailabilityWindow, window_id)
    if not w or w.slot_id != slot_id:
        raise HTTPException(status_code=404, detail="Not found")
    db.delete(w)
    db.commit()

    write_audit_log(db, actor_user_id=user.id, action_type="AVAILABILITY_WINDOW_DELETE", target_type="window", target_id=window_id, summary="Deleted availability window", request=request)
    return {"ok": True}


@router.get("/{slot_id}/blackouts", response_model=list[BlackoutOut])
def list_blackouts(slot_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _get_slot(db, slot_id)
    q = select(BlackoutPeriod).where(BlackoutPeriod.slot_id == slot_id).order_by(BlackoutPeriod.blackout_start)
    return db.execute(q).scalars().all()


@router.post("/{slot_id}/blackouts", response_model=BlackoutOut)
def create_blackout(
    slot_id: str,
    payload: BlackoutCreate,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    _get_managed_slot(db, slot_id, user)
    if payload.blackout_start >= payload.blackout_end:
        raise HTTPException(status_code=400, detail="Invalid time range")

    b = BlackoutPeriod(
        slot_id=slot_id,
        blackout_start=payload.blackout_start,
        blackout_end=payload.blackout_end,
        reason=payload.reason,
        created_by_user_id=user.id,
    )
    db.add(b)
    db.commit()
    db.refresh(b)

    write_audit_log(db, actor_user_id=user.id, action_type="BLACKOUT_CREATE", target_type="blackout", target_id=b.id, summary="Created blackout period", request=request)
    return b


@router.delete("/{slot_id}/blackouts/{blackout_id}")
def delete_blackout(slot_id: str, blackout_id: str, request: Request, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _get_managed_slot(db, slot_id, user)
    b = db.get(BlackoutPeriod, blackout_id)
    if not b or b.slot_id != slot_id:
        raise HTTPException(status_code=404, detail="Not found")
    db.delete(b)
    db.commit()

    write_audit_log(db, actor_user_id=user.id, action_type="BLACKOUT_DELETE", target_type="blackout", target_id=blackout_id, summary="Deleted blackout period", request=request)
    return {"ok": True}
