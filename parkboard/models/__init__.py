# Import all models so that SQLAlchemy registers them for metadata.create_all
from parkboard.models.user import User
from parkboard.models.slot import ParkingSlot
from parkboard.models.availability import AvailabilityWindow, BlackoutPeriod
from parkboard.models.booking import Booking
from parkboard.models.audit_log import AuditLog

__all__ = [
    "User",
    "ParkingSlot",
    "AvailabilityWindow",
    "BlackoutPeriod",
    "Booking",
    "AuditLog",
]
