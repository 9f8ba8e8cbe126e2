# backend/modules/occupancy/tests/conftest.py

import pytest
from typing import Generator
from datetime import date, datetime, time
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from core.database import Base, get_db
from modules.occupancy.enums import ReservationStatus
from modules.occupancy.models import LiveSessionRecord, ReservationRecord, TableRef
from modules.occupancy.schemas import OccupancyConfig

SERVICE_DATE = date(2024, 6, 14)

# Test database setup
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def at(hour: int, minute: int = 0, on: date = SERVICE_DATE) -> datetime:
    """Venue-local datetime on the service date"""
    return datetime.combine(on, time(hour, minute))


@pytest.fixture(scope="session", autouse=True)
def create_test_database():
    """Create test database tables."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create a test database session rolled back after each test."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def clock():
    """Fixed venue-local wall clock for route tests"""
    return at(19, 30)


@pytest.fixture
def client(db_session: Session, clock: datetime):
    """Create a test client with the database and clock overridden."""
    from app.main import app
    from modules.occupancy.routes.occupancy_routes import get_clock

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def config() -> OccupancyConfig:
    return OccupancyConfig(
        buffer_minutes=15,
        default_session_duration_minutes=90,
        risk_lookahead_minutes=120,
    )


@pytest.fixture
def table() -> TableRef:
    return TableRef(id=1, venue_id=1, label="T1")


@pytest.fixture
def make_session():
    """Factory for live session records"""

    def _make(id, table_id=1, created_at=None, started_at=None, game_id=None,
              estimated_duration_minutes=None):
        return LiveSessionRecord(
            id=id,
            table_id=table_id,
            created_at=created_at or at(19, 0),
            started_at=started_at,
            game_id=game_id,
            estimated_duration_minutes=estimated_duration_minutes,
        )

    return _make


@pytest.fixture
def make_reservation():
    """Factory for reservation records; start/end are 'HH:MM' strings"""

    def _make(id, start, end, table_id=1, on=SERVICE_DATE,
              status=ReservationStatus.CONFIRMED, party_size=2):
        return ReservationRecord(
            id=id,
            table_id=table_id,
            date=on,
            start=time.fromisoformat(start),
            end=time.fromisoformat(end),
            status=status,
            party_size=party_size,
        )

    return _make
