"""Half-open ``[start, end)`` interval helpers.

A range ending at 10:00 and one starting at 10:00 do not overlap, which is
what allows back-to-back bookings on the same slot.
"""
from __future__ import annotations

from datetime import datetime


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


def duration_hours(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600
