from __future__ import annotations

from dataclasses import dataclass

from parkboard.models.slot import ParkingSlot

RESERVED_FOR_ANOTHER_RESIDENT = "This slot is reserved for another resident"


@dataclass(frozen=True)
class Eligibility:
    eligible: bool
    reason: str | None = None


def can_request(slot: ParkingSlot, requester_id: str, *, is_admin: bool = False) -> Eligibility:
    """Decide whether ``requester_id`` may book ``slot``.

    Shared slots (no owner) are open to everyone, owned slots only to their
    owner. Admins may book any slot on behalf of a resident.
    """
    if slot.owner_id is None:
        return Eligibility(True)
    if slot.owner_id == requester_id:
        return Eligibility(True)
    if is_admin:
        return Eligibility(True)
    return Eligibility(False, RESERVED_FOR_ANOTHER_RESIDENT)
