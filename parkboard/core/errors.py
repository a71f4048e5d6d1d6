"""
Rejection taxonomy for booking admission and cancellation.

Services return these as values; routes turn them into HTTP errors through
the single table below so every reason reaches the caller with its own
status code and message.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fastapi import HTTPException, status


class RejectionCode(str, Enum):
    SLOT_NOT_FOUND = "slot_not_found"
    INVALID_TIME_RANGE = "invalid_time_range"
    DURATION_TOO_SHORT = "duration_too_short"
    DURATION_TOO_LONG = "duration_too_long"
    ADVANCE_HORIZON_EXCEEDED = "advance_horizon_exceeded"
    SLOT_NOT_BOOKABLE = "slot_not_bookable"
    OWNERSHIP_DENIED = "ownership_denied"
    AVAILABILITY_DENIED = "availability_denied"
    SCHEDULING_CONFLICT = "scheduling_conflict"
    NOT_FINALIZED = "not_finalized"

    BOOKING_NOT_FOUND = "booking_not_found"
    CANCEL_FORBIDDEN = "cancel_forbidden"
    BOOKING_NOT_CANCELLABLE = "booking_not_cancellable"
    CANCELLATION_WINDOW_CLOSED = "cancellation_window_closed"


@dataclass(frozen=True)
class Rejected:
    code: RejectionCode
    message: str
    detail: dict[str, Any] = field(default_factory=dict)
    retryable: bool = False

    @property
    def ok(self) -> bool:
        return False


REJECTION_STATUS: dict[RejectionCode, int] = {
    RejectionCode.SLOT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RejectionCode.INVALID_TIME_RANGE: status.HTTP_400_BAD_REQUEST,
    RejectionCode.DURATION_TOO_SHORT: status.HTTP_400_BAD_REQUEST,
    RejectionCode.DURATION_TOO_LONG: status.HTTP_400_BAD_REQUEST,
    RejectionCode.ADVANCE_HORIZON_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    RejectionCode.SLOT_NOT_BOOKABLE: status.HTTP_400_BAD_REQUEST,
    RejectionCode.OWNERSHIP_DENIED: status.HTTP_403_FORBIDDEN,
    RejectionCode.AVAILABILITY_DENIED: status.HTTP_409_CONFLICT,
    RejectionCode.SCHEDULING_CONFLICT: status.HTTP_409_CONFLICT,
    RejectionCode.NOT_FINALIZED: status.HTTP_503_SERVICE_UNAVAILABLE,
    RejectionCode.BOOKING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RejectionCode.CANCEL_FORBIDDEN: status.HTTP_403_FORBIDDEN,
    RejectionCode.BOOKING_NOT_CANCELLABLE: status.HTTP_400_BAD_REQUEST,
    RejectionCode.CANCELLATION_WINDOW_CLOSED: status.HTTP_400_BAD_REQUEST,
}


def rejection_to_http(rejection: Rejected) -> HTTPException:
    headers = {"Retry-After": "1"} if rejection.retryable else None
    return HTTPException(
        status_code=REJECTION_STATUS.get(rejection.code, status.HTTP_400_BAD_REQUEST),
        detail={
            "code": rejection.code.value,
            "message": rejection.message,
            "retryable": rejection.retryable,
            **rejection.detail,
        },
        headers=headers,
    )
