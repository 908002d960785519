"""
Pytest configuration and fixtures

Engine tests are pure and need no database. API and store tests run against
an in-memory SQLite database created fresh for every test, so nothing
persists between tests.
"""
import pytest
import sys
import os
from datetime import datetime, timedelta
from uuid import uuid4

# Point the app at an in-memory database before anything imports core.database
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base
import models  # noqa: F401  (registers tables)
from services.training_engine.constants import ArcStatus, Mood, Soreness
from services.training_engine.models import ArcEnrollment, CheckIn, TrainingSession


# Fixed reference moment for engine tests: a Wednesday afternoon
NOW = datetime(2026, 3, 11, 16, 0)


class MutableClock:
    """Callable clock tests can move forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def child_id():
    return uuid4()


@pytest.fixture
def clock():
    return MutableClock(NOW)


def make_check_in(child_id, **overrides) -> CheckIn:
    """A NORMAL-day check-in unless overridden."""
    fields = dict(
        child_id=child_id,
        energy=3,
        soreness=Soreness.NONE,
        focus=3,
        mood=Mood.OKAY,
        time_available_minutes=30,
        pain_flag=False,
        created_at=NOW,
    )
    fields.update(overrides)
    return CheckIn(**fields)


def make_session(child_id, created_at, **overrides) -> TrainingSession:
    fields = dict(
        child_id=child_id,
        effort_level=6,
        mood=Mood.FOCUSED,
        duration_minutes=20,
        created_at=created_at,
    )
    fields.update(overrides)
    return TrainingSession(**fields)


def make_enrollment(child_id, arc_id, started_at, status=ArcStatus.ACTIVE, **overrides) -> ArcEnrollment:
    return ArcEnrollment(
        id=overrides.pop("id", uuid4()),
        child_id=child_id,
        arc_id=arc_id,
        status=status,
        started_at=started_at,
        **overrides,
    )


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps the single connection alive so every session (including
    the one the app uses through dependency overrides) sees the same tables.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def client(db_session, clock):
    """FastAPI TestClient bound to the test database and the test clock."""
    from fastapi.testclient import TestClient
    from core.database import get_db
    from core.dependencies import get_clock
    from main import app

    def override_get_db():
        try:
            yield db_session
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()
