from __future__ import annotations

from parkboard.models.slot import ParkingSlot
from parkboard.services.ownership import RESERVED_FOR_ANOTHER_RESIDENT, can_request


def test_shared_slot_is_open_to_anyone():
    slot = ParkingSlot(owner_id=None)
    assert can_request(slot, "u1").eligible
    assert can_request(slot, "u2").eligible


def test_owner_may_book_own_slot():
    slot = ParkingSlot(owner_id="u1")
    result = can_request(slot, "u1")
    assert result.eligible
    assert result.reason is None


def test_non_owner_is_refused():
    slot = ParkingSlot(owner_id="u1")
    result = can_request(slot, "u2")
    assert not result.eligible
    assert result.reason == RESERVED_FOR_ANOTHER_RESIDENT


def test_admin_may_book_any_slot():
    slot = ParkingSlot(owner_id="u1")
    assert can_request(slot, "admin", is_admin=True).eligible
