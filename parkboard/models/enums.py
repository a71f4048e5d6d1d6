"""Closed enumerations shared by models, schemas and services.

Values are the strings stored in the database.
"""
from __future__ import annotations

from enum import Enum


class SlotType(str, Enum):
    COVERED = "covered"
    UNCOVERED = "uncovered"
    VISITOR = "visitor"


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    RESERVED = "reserved"


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class UserRole(str, Enum):
    RESIDENT = "resident"
    ADMIN = "admin"
