from __future__ import annotations

import os

os.environ["TIMEZONE"] = "Asia/Manila"
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from parkboard.core.config import get_booking_rules, get_settings

get_settings.cache_clear()
get_booking_rules.cache_clear()

from parkboard.core.deps import get_db
from parkboard.core.rate_limit import InMemoryCounter, RateLimiter
from parkboard.core.security import create_access_token
from parkboard.db.base import Base
import parkboard.models  # noqa: F401
from parkboard.models.enums import SlotStatus, SlotType, UserRole
from parkboard.models.slot import ParkingSlot
from parkboard.models.user import User

MANILA = ZoneInfo("Asia/Manila")
UTC = timezone.utc


def local(*args) -> datetime:
    return datetime(*args, tzinfo=MANILA)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=UTC)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _user(db, email: str, role: UserRole = UserRole.RESIDENT) -> User:
    u = User(email=email, name=email.split("@")[0], role=role.value, is_active=True)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def resident(db) -> User:
    return _user(db, "alice@example.com")


@pytest.fixture
def other_resident(db) -> User:
    return _user(db, "bob@example.com")


@pytest.fixture
def admin(db) -> User:
    return _user(db, "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def make_slot(db):
    counter = {"n": 0}

    def factory(**kw) -> ParkingSlot:
        counter["n"] += 1
        values = {
            "slot_number": f"A-{counter['n']:02d}",
            "slot_type": SlotType.COVERED.value,
            "status": SlotStatus.AVAILABLE.value,
            "owner_id": None,
        }
        values.update(kw)
        slot = ParkingSlot(**values)
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    return factory


@pytest.fixture
def shared_slot(make_slot) -> ParkingSlot:
    return make_slot()


@pytest.fixture
def priced_slot(make_slot, resident) -> ParkingSlot:
    return make_slot(
        owner_id=resident.id,
        is_listed_for_rent=True,
        rental_rate_hourly=Decimal("50.00"),
        rental_rate_daily=Decimal("400.00"),
    )


@pytest.fixture
def client(session_factory):
    from parkboard.main import create_app

    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.rate_limiter = RateLimiter(InMemoryCounter(), max_attempts=1000, window_seconds=60)
    with TestClient(app) as c:
        yield c


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
