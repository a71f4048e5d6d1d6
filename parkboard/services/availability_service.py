from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.orm import Session

from parkboard.core.config import get_settings
from parkboard.models.availability import AvailabilityWindow, BlackoutPeriod
from parkboard.models.slot import ParkingSlot
from parkboard.models._types import utcnow
from parkboard.services.intervals import overlaps
from parkboard.services.pricing import SlotNotFound

logger = logging.getLogger(__name__)

_DAY = timedelta(days=1)


def _daterange(start: date, end: date):
    cur = start
    while cur <= end:
        yield cur
        cur = cur + timedelta(days=1)


def _weekday(d: date) -> int:
    # 0 = Sunday ... 6 = Saturday
    return d.isoweekday() % 7


def _offset(t: time | None, *, end_of_day: bool = False) -> timedelta:
    if t is None or (end_of_day and t == time(0)):
        return _DAY if end_of_day else timedelta(0)
    return timedelta(hours=t.hour, minutes=t.minute, seconds=t.second, microseconds=t.microsecond)


def _local_segments(start: datetime, end: datetime, tz: ZoneInfo) -> Iterator[tuple[date, timedelta, timedelta]]:
    """Split ``[start, end)`` at local midnights.

    Yields ``(local_date, start_offset, end_offset)`` with offsets measured
    from that date's midnight; a segment running to midnight ends at 24h.
    """
    cur = start.astimezone(tz).replace(tzinfo=None)
    stop = end.astimezone(tz).replace(tzinfo=None)
    while cur < stop:
        midnight = datetime.combine(cur.date(), time(0))
        seg_end = min(stop, midnight + _DAY)
        yield cur.date(), cur - midnight, seg_end - midnight
        cur = seg_end


def window_matches_date(window: AvailabilityWindow, d: date) -> bool:
    if window.day_of_week and _weekday(d) in window.day_of_week:
        return True
    # A date range needs both bounds; a half-open range never matches
    if window.available_from is None or window.available_until is None:
        return False
    return window.available_from <= d <= window.available_until


def _window_covers(window: AvailabilityWindow, d: date, seg_start: timedelta, seg_end: timedelta) -> bool:
    if not window_matches_date(window, d):
        return False
    return _offset(window.start_time) <= seg_start and seg_end <= _offset(window.end_time, end_of_day=True)


def covered_by_windows(windows: Iterable[AvailabilityWindow], start: datetime, end: datetime, tz: ZoneInfo) -> bool:
    """Every local-day piece of the request must fall inside some window."""
    windows = list(windows)
    for d, seg_start, seg_end in _local_segments(start, end, tz):
        if not any(_window_covers(w, d, seg_start, seg_end) for w in windows):
            return False
    return True


def quick_posting_applies(slot: ParkingSlot, start: datetime, end: datetime, now: datetime) -> bool:
    until = slot.quick_availability_until
    if not slot.quick_availability_active or until is None:
        return False
    # The flag may be stale until the sweep runs, so expiry is checked here too
    if until <= now:
        return False
    return start >= now and until >= end


def is_constrained(slot: ParkingSlot, windows: Iterable[AvailabilityWindow]) -> bool:
    """Whether the slot is only offered through windows or a quick posting."""
    return bool(list(windows)) or slot.quick_availability_until is not None


def carries_availability_data(
    slot: ParkingSlot,
    windows: Iterable[AvailabilityWindow],
    blackouts: Iterable[BlackoutPeriod],
) -> bool:
    return is_constrained(slot, windows) or bool(list(blackouts))


def resolve_availability(
    slot: ParkingSlot,
    windows: Iterable[AvailabilityWindow],
    blackouts: Iterable[BlackoutPeriod],
    start: datetime,
    end: datetime,
    *,
    now: datetime,
    tz: ZoneInfo,
) -> bool:
    """Decide whether ``slot`` is offered for the whole of ``[start, end)``.

    Order matters: blackouts always win, then an unexpired quick posting
    grants availability, then recurring windows are consulted. A slot with
    neither windows nor a quick posting is offered whenever it is not
    blacked out.
    """
    if end <= start:
        return False

    for b in blackouts:
        if overlaps(b.blackout_start, b.blackout_end, start, end):
            return False

    if quick_posting_applies(slot, start, end, now):
        return True

    windows = list(windows)
    if not is_constrained(slot, windows):
        return True

    return covered_by_windows(windows, start, end, tz)


def load_windows(db: Session, slot_id: str) -> list[AvailabilityWindow]:
    return db.execute(select(AvailabilityWindow).where(AvailabilityWindow.slot_id == slot_id)).scalars().all()


def load_blackouts(db: Session, slot_id: str, start: datetime, end: datetime) -> list[BlackoutPeriod]:
    q = (
        select(BlackoutPeriod)
        .where(BlackoutPeriod.slot_id == slot_id)
        .where(BlackoutPeriod.blackout_start < end)
        .where(BlackoutPeriod.blackout_end > start)
    )
    return db.execute(q).scalars().all()


def slot_is_available(db: Session, slot: ParkingSlot, start: datetime, end: datetime, now: datetime | None = None) -> bool:
    if now is None:
        now = utcnow()
    tz = ZoneInfo(get_settings().timezone)
    return resolve_availability(
        slot,
        load_windows(db, slot.id),
        load_blackouts(db, slot.id, start, end),
        start,
        end,
        now=now,
        tz=tz,
    )


def is_slot_available(db: Session, *, slot_id: str, start: datetime, end: datetime, now: datetime | None = None) -> bool:
    slot = db.get(ParkingSlot, slot_id)
    if slot is None:
        raise SlotNotFound(slot_id)
    available = slot_is_available(db, slot, start, end, now=now)
    logger.debug("Availability slot=%s %s-%s: %s", slot_id, start, end, available)
    return available


def list_slot_availability(db: Session, *, slot_id: str, from_date: date, to_date: date, now: datetime | None = None) -> list[dict]:
    """Per local day: blackout flag, matching window hours and quick posting."""
    slot = db.get(ParkingSlot, slot_id)
    if slot is None:
        raise SlotNotFound(slot_id)
    if now is None:
        now = utcnow()

    tz = ZoneInfo(get_settings().timezone)
    range_start = datetime.combine(from_date, time(0)).replace(tzinfo=tz)
    range_end = datetime.combine(to_date + timedelta(days=1), time(0)).replace(tzinfo=tz)

    windows = load_windows(db, slot_id)
    blackouts = load_blackouts(db, slot_id, range_start, range_end)
    constrained = is_constrained(slot, windows)

    days: list[dict] = []
    for d in _daterange(from_date, to_date):
        day_start = datetime.combine(d, time(0)).replace(tzinfo=tz)
        day_end = datetime.combine(d + timedelta(days=1), time(0)).replace(tzinfo=tz)

        blocked = any(overlaps(b.blackout_start, b.blackout_end, day_start, day_end) for b in blackouts)
        quick = bool(
            slot.quick_availability_active
            and slot.quick_availability_until is not None
            and slot.quick_availability_until > now
            and overlaps(now, slot.quick_availability_until, day_start, day_end)
        )
        hours = [
            {"start_time": w.start_time, "end_time": w.end_time}
            for w in windows
            if window_matches_date(w, d)
        ]
        days.append(
            {
                "date": d,
                "blackout": blocked,
                "quick_available": quick,
                "windows": hours,
                "open_all_day": not blocked and not constrained,
            }
        )
    return days
