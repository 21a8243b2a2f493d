# backend/tests/conftest.py
"""
Pytest configuration for RoomBook.

Every test gets its own in-memory SQLite store with the full schema, so
tests never touch a real database and never share state.
"""

import os

# Set testing mode BEFORE any roombook imports
os.environ["IS_TESTING"] = "true"

from datetime import datetime
from typing import Callable, Iterator

from fastapi.testclient import TestClient
import pytest
import pytz
from sqlalchemy.orm import Session, sessionmaker

from roombook.api.dependencies import get_db, get_session_registry
from roombook.core.config import settings
from roombook.database import Base, build_engine
from roombook.main import app
from roombook.models import Room, RoomSchedule, Section
from roombook.services.session_registry import SessionRegistry

settings.is_testing = True

WEEKDAYS = range(0, 5)


class FakeClock:
    """Monotonic clock tests can move forward by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def tz() -> pytz.BaseTzInfo:
    return pytz.timezone("America/Toronto")


@pytest.fixture
def at(tz: pytz.BaseTzInfo) -> Callable[..., datetime]:
    """Build an aware operating-time datetime: ``at(2026, 10, 21, 10, 30)``."""

    def _at(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
        return tz.localize(datetime(year, month, day, hour, minute))

    return _at


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine) -> Iterator[Session]:
    """Create a new database session for each test."""
    TestSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestSessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def catalog(db: Session) -> dict:
    """
    Two rooms:

    - Library: open Monday-Friday 9:00-17:00, sections "Quiet Room A" (5) and "Study Hall" (12)
    - Gym: closed, same schedule, section "Court 1" (10)
    """
    library = Room(
        name="Library",
        closed=False,
        schedule=[RoomSchedule(day_of_week=day, open_hour=9, close_hour=17) for day in WEEKDAYS],
    )
    quiet_room = Section(name="Quiet Room A", capacity=5, room=library)
    study_hall = Section(name="Study Hall", capacity=12, room=library)

    gym = Room(
        name="Gym",
        closed=True,
        schedule=[RoomSchedule(day_of_week=day, open_hour=9, close_hour=17) for day in WEEKDAYS],
    )
    court = Section(name="Court 1", capacity=10, room=gym)

    db.add_all([library, quiet_room, study_hall, gym, court])
    db.commit()
    return {
        "room": library,
        "section": quiet_room,
        "other_section": study_hall,
        "closed_room": gym,
        "closed_section": court,
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> SessionRegistry:
    return SessionRegistry(timeout_seconds=600, clock=clock, date_window_days=14)


@pytest.fixture
def client(db: Session, registry: SessionRegistry):
    """Create a test client bound to the test store and a fresh registry."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_registry] = lambda: registry

    # Don't use context manager - lifespan would touch the default engine
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()

