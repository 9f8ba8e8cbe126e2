# backend/modules/occupancy/tests/test_occupancy_repository.py

"""
Tests for the SQLAlchemy-backed occupancy data source
"""

import pytest
from datetime import date, datetime, time
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from modules.occupancy.enums import ReservationStatus
from modules.occupancy.models import (
    Game,
    LiveSession,
    Reservation,
    Venue,
    VenueOccupancySettings,
    VenueTable,
)
from modules.occupancy.services.occupancy_repository import SqlAlchemyOccupancyRepository

DAY = date(2024, 6, 14)


@pytest.fixture
def venue(db_session: Session):
    venue = Venue(name="Meeple Hall", slug="meeple-hall")
    db_session.add(venue)
    db_session.flush()
    return venue


@pytest.fixture
def venue_tables(db_session: Session, venue):
    tables = [
        VenueTable(venue_id=venue.id, label="T2", capacity=4),
        VenueTable(venue_id=venue.id, label="T1", capacity=6),
        VenueTable(venue_id=venue.id, label="Patio", capacity=4, is_active=False),
    ]
    db_session.add_all(tables)
    db_session.flush()
    return tables


@pytest.fixture
def repository(db_session: Session):
    return SqlAlchemyOccupancyRepository(db_session)


def add_reservation(db_session, venue, table, start, end, status=ReservationStatus.CONFIRMED,
                    on=DAY):
    reservation = Reservation(
        venue_id=venue.id,
        table_id=table.id if table else None,
        reservation_date=on,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
        status=status,
        party_size=4,
        guest_name="Guest",
    )
    db_session.add(reservation)
    db_session.flush()
    return reservation


class TestSqlAlchemyOccupancyRepository:
    """Test reads from the relational store"""

    def test_list_tables_active_only_ordered_by_label(self, repository, venue, venue_tables):
        tables = repository.list_tables(venue.id)

        assert [t.label for t in tables] == ["T1", "T2"]
        assert all(t.venue_id == venue.id for t in tables)
        assert all(t.is_active for t in tables)

    def test_list_tables_unknown_venue(self, repository):
        with pytest.raises(NotFoundError) as exc_info:
            repository.list_tables(999)

        assert exc_info.value.status_code == 404

    def test_list_active_sessions(self, db_session, repository, venue, venue_tables):
        table = venue_tables[0]
        game = Game(venue_id=venue.id, title="Root", max_time_minutes=90)
        db_session.add(game)
        db_session.flush()

        db_session.add_all(
            [
                LiveSession(
                    venue_id=venue.id,
                    table_id=table.id,
                    game_id=game.id,
                    created_at=datetime(2024, 6, 14, 18, 0),
                    started_at=datetime(2024, 6, 14, 18, 10),
                ),
                LiveSession(
                    venue_id=venue.id,
                    table_id=table.id,
                    created_at=datetime(2024, 6, 14, 18, 5),
                ),
                LiveSession(
                    venue_id=venue.id,
                    table_id=table.id,
                    created_at=datetime(2024, 6, 14, 16, 0),
                    ended_at=datetime(2024, 6, 14, 17, 30),
                ),
            ]
        )
        db_session.flush()

        sessions = repository.list_active_sessions(table.id)

        assert len(sessions) == 2
        playing, browsing = sessions
        assert playing.game_id == game.id
        assert playing.estimated_duration_minutes == 90
        assert playing.started_at == datetime(2024, 6, 14, 18, 10)
        assert browsing.game_id is None
        assert browsing.estimated_duration_minutes is None
        assert browsing.created_at == datetime(2024, 6, 14, 18, 5)

    def test_list_reservations_filters_status_and_date(
        self, db_session, repository, venue, venue_tables
    ):
        table, other_table = venue_tables[0], venue_tables[1]
        late = add_reservation(db_session, venue, table, "20:00", "21:30")
        early = add_reservation(db_session, venue, table, "18:00", "19:30",
                                status=ReservationStatus.PENDING)
        add_reservation(db_session, venue, table, "19:00", "20:00",
                        status=ReservationStatus.CANCELLED)
        add_reservation(db_session, venue, table, "18:00", "19:00", on=date(2024, 6, 15))
        add_reservation(db_session, venue, other_table, "18:00", "19:00")
        add_reservation(db_session, venue, None, "18:00", "19:00")

        reservations = repository.list_reservations(table.id, DAY)

        assert [r.id for r in reservations] == [early.id, late.id]
        assert reservations[0].status == ReservationStatus.PENDING
        assert reservations[0].start == time(18, 0)
        assert reservations[0].guest_ref == "Guest"
        assert all(r.table_id == table.id and r.date == DAY for r in reservations)

    def test_venue_config(self, db_session, repository, venue):
        assert repository.get_venue_config(venue.id) is None

        db_session.add(
            VenueOccupancySettings(
                venue_id=venue.id,
                buffer_minutes=20,
                default_session_duration_minutes=150,
                risk_lookahead_minutes=180,
            )
        )
        db_session.flush()

        config = repository.get_venue_config(venue.id)

        assert config.buffer_minutes == 20
        assert config.default_session_duration_minutes == 150
        assert config.risk_lookahead_minutes == 180
