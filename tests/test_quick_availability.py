from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import utc
from parkboard.services.availability_service import is_slot_available
from parkboard.services.quick_availability import (
    QuickPostingError,
    clear_quick_availability,
    post_quick_availability,
    sweep_expired_quick_postings,
)

NOW = utc(2025, 12, 1, 0, 0)


def test_post_lists_slot_until_given_time(db, shared_slot):
    slot = post_quick_availability(db, slot=shared_slot, until=NOW + timedelta(hours=4), now=NOW)

    assert slot.quick_availability_active
    assert slot.is_listed_for_rent
    assert slot.quick_availability_until == NOW + timedelta(hours=4)
    assert slot.quick_availability_posted_at == NOW


def test_post_requires_future_end(db, shared_slot):
    with pytest.raises(QuickPostingError):
        post_quick_availability(db, slot=shared_slot, until=NOW, now=NOW)


def test_clear_returns_slot_to_unconstrained(db, shared_slot):
    post_quick_availability(db, slot=shared_slot, until=NOW + timedelta(hours=4), now=NOW)
    slot = clear_quick_availability(db, slot=shared_slot)

    assert not slot.quick_availability_active
    assert slot.quick_availability_until is None
    assert not slot.is_listed_for_rent
    later = NOW + timedelta(days=2)
    assert is_slot_available(db, slot_id=slot.id, start=later, end=later + timedelta(hours=2), now=NOW)


def test_sweep_clears_only_expired_postings(db, make_slot):
    expired = make_slot(quick_availability_active=True, quick_availability_until=NOW - timedelta(minutes=1), is_listed_for_rent=True)
    current = make_slot(quick_availability_active=True, quick_availability_until=NOW + timedelta(hours=1), is_listed_for_rent=True)

    assert sweep_expired_quick_postings(db, now=NOW) == 1

    db.refresh(expired)
    db.refresh(current)
    assert not expired.quick_availability_active
    assert not expired.is_listed_for_rent
    assert expired.quick_availability_until is not None
    assert current.quick_availability_active
    assert current.is_listed_for_rent


def test_sweep_is_idempotent(db, make_slot):
    make_slot(quick_availability_active=True, quick_availability_until=NOW - timedelta(hours=1), is_listed_for_rent=True)

    assert sweep_expired_quick_postings(db, now=NOW) == 1
    assert sweep_expired_quick_postings(db, now=NOW) == 0


def test_availability_does_not_depend_on_sweep(db, make_slot):
    slot = make_slot(quick_availability_active=True, quick_availability_until=NOW + timedelta(hours=1))
    later = NOW + timedelta(hours=2)
    request = dict(start=later + timedelta(hours=1), end=later + timedelta(hours=2), now=later)

    before = is_slot_available(db, slot_id=slot.id, **request)
    sweep_expired_quick_postings(db, now=later)
    after = is_slot_available(db, slot_id=slot.id, **request)

    assert before is False
    assert after is False
