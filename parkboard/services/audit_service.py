from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from fastapi import Request
from sqlalchemy.orm import Session

from parkboard.models.audit_log import AuditLog
from parkboard.models.booking import Booking

# Free text residents type in (gate codes, plate numbers) never reaches the trail
SENSITIVE_KEYS = {
    "email",
    "name",
    "notes",
    "cancel_reason",
    "access_token",
}


def _jsonable(obj: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return {k: "<redacted>" if k in SENSITIVE_KEYS else _jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_jsonable(v) for v in obj]
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    return obj


def booking_snapshot(booking: Booking) -> dict[str, Any]:
    """The booking facts worth keeping next to an audit entry."""
    return {
        "slot_id": booking.slot_id,
        "user_id": booking.user_id,
        "slot_owner_id": booking.slot_owner_id,
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "status": booking.status,
        "total_amount": booking.total_amount,
        "payment_status": booking.payment_status,
    }


def write_audit_log(
    db: Session,
    *,
    actor_user_id: str | None,
    action_type: str,
    target_type: str = "",
    target_id: str = "",
    summary: str = "",
    diff_json: Mapping[str, Any] | None = None,
    request: Request | None = None,
) -> None:
    ip = ""
    ua = ""
    if request is not None:
        ip = request.client.host if request.client else ""
        ua = request.headers.get("user-agent", "")

    db.add(
        AuditLog(
            actor_user_id=actor_user_id,
            action_type=action_type,
            target_type=target_type,
            target_id=str(target_id),
            summary=summary[:255],
            diff_json=_jsonable(dict(diff_json)) if diff_json is not None else None,
            ip_address=ip,
            user_agent=ua[:255],
        )
    )
    db.commit()


def audit_booking(
    db: Session,
    *,
    actor_user_id: str,
    action_type: str,
    booking: Booking,
    summary: str,
    request: Request | None = None,
    **extra: Any,
) -> None:
    diff = booking_snapshot(booking)
    if actor_user_id != booking.user_id:
        diff["on_behalf_of"] = booking.user_id
    diff.update(extra)
    write_audit_log(
        db,
        actor_user_id=actor_user_id,
        action_type=action_type,
        target_type="booking",
        target_id=booking.id,
        summary=summary,
        diff_json=diff,
        request=request,
    )
