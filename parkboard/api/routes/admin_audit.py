from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import AwareDatetime
from sqlalchemy import select
from sqlalchemy.orm import Session

from parkboard.core.deps import get_db, require_admin
from parkboard.models.audit_log import AuditLog
from parkboard.schemas.audit import AuditLogOut

router = APIRouter()


@router.get("/audit-logs", response_model=list[AuditLogOut])
def list_audit_logs(
    from_: AwareDatetime | None = Query(default=None, alias="from"),
    to: AwareDatetime | None = None,
    actor_user_id: str | None = None,
    action_type: str | None = None,
    target_id: str | None = None,
    limit: int = Query(default=200, ge=1, le=500),
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    q = select(AuditLog).order_by(AuditLog.created_at.desc())
    if from_:
        q = q.where(AuditLog.created_at >= from_)
    if to:
        q = q.where(AuditLog.created_at <= to)
    if actor_user_id:
        q = q.where(AuditLog.actor_user_id == actor_user_id)
    if action_type:
        q = q.where(AuditLog.action_type == action_type)
    if target_id:
        q = q.where(AuditLog.target_id == target_id)

    return db.execute(q.limit(limit)).scalars().all()
