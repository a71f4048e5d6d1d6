from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class AuditLogOut(BaseModel):
    """One booking, availability or sweep action as recorded for admins."""

    id: str
    created_at: datetime
    actor_user_id: str | None
    action_type: str
    target_type: str
    target_id: str
    summary: str
    diff_json: dict[str, Any] | None

    class Config:
        from_attributes = True
