# backend/modules/occupancy/services/occupancy_repository.py

"""
Data access for the occupancy engine.

The aggregator only depends on the OccupancyDataSource protocol. Reads through
SqlAlchemyOccupancyRepository share one Session; callers that need a strongly
consistent snapshot should run the whole aggregation inside one transaction
(e.g. REPEATABLE READ) or hand the aggregator a SnapshotDataSource.
"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol, Tuple
import logging

from sqlalchemy.orm import Session, selectinload

from core.exceptions import NotFoundError
from ..enums.occupancy_enums import ACTIVE_RESERVATION_STATUSES
from ..models.occupancy_models import (
    LiveSession,
    Reservation,
    Venue,
    VenueOccupancySettings,
    VenueTable,
)
from ..models.snapshot_models import LiveSessionRecord, ReservationRecord, TableRef
from ..schemas.occupancy_schemas import OccupancyConfig

logger = logging.getLogger(__name__)


class OccupancyDataSource(Protocol):
    """Collaborator the aggregator reads tables, sessions and bookings from"""

    def list_tables(self, venue_id: int) -> List[TableRef]:
        ...

    def list_active_sessions(self, table_id: int) -> List[LiveSessionRecord]:
        ...

    def list_reservations(self, table_id: int, on_date: date) -> List[ReservationRecord]:
        ...

    def get_venue_config(self, venue_id: int) -> Optional[OccupancyConfig]:
        ...


class SqlAlchemyOccupancyRepository:
    """OccupancyDataSource backed by the relational database"""

    def __init__(self, db: Session):
        self.db = db

    def list_tables(self, venue_id: int) -> List[TableRef]:
        """Active tables of a venue ordered by label"""
        venue = self.db.query(Venue).filter(Venue.id == venue_id).first()
        if not venue:
            raise NotFoundError(f"Venue with ID {venue_id} not found")

        tables = (
            self.db.query(VenueTable)
            .filter(VenueTable.venue_id == venue_id, VenueTable.is_active == True)
            .order_by(VenueTable.label, VenueTable.id)
            .all()
        )
        return [self._table_ref(t) for t in tables]

    def list_active_sessions(self, table_id: int) -> List[LiveSessionRecord]:
        sessions = (
            self.db.query(LiveSession)
            .options(selectinload(LiveSession.game))
            .filter(LiveSession.table_id == table_id, LiveSession.ended_at.is_(None))
            .order_by(LiveSession.id)
            .all()
        )
        return [self._session_record(s) for s in sessions]

    def list_reservations(self, table_id: int, on_date: date) -> List[ReservationRecord]:
        """Pending and confirmed reservations of a table on a date"""
        reservations = (
            self.db.query(Reservation)
            .filter(
                Reservation.table_id == table_id,
                Reservation.reservation_date == on_date,
                Reservation.status.in_(list(ACTIVE_RESERVATION_STATUSES)),
            )
            .order_by(Reservation.start_time, Reservation.id)
            .all()
        )
        return [self._reservation_record(r) for r in reservations]

    def get_venue_config(self, venue_id: int) -> Optional[OccupancyConfig]:
        row = (
            self.db.query(VenueOccupancySettings)
            .filter(VenueOccupancySettings.venue_id == venue_id)
            .first()
        )
        if not row:
            return None
        return OccupancyConfig.model_validate(row)

    @staticmethod
    def _table_ref(table: VenueTable) -> TableRef:
        return TableRef(
            id=table.id,
            venue_id=table.venue_id,
            label=table.label,
            is_active=table.is_active,
        )

    @staticmethod
    def _session_record(session: LiveSession) -> LiveSessionRecord:
        return LiveSessionRecord(
            id=session.id,
            table_id=session.table_id,
            created_at=session.created_at,
            started_at=session.started_at,
            game_id=session.game_id,
            estimated_duration_minutes=(
                session.game.max_time_minutes if session.game else None
            ),
        )

    @staticmethod
    def _reservation_record(reservation: Reservation) -> ReservationRecord:
        return ReservationRecord(
            id=reservation.id,
            table_id=reservation.table_id,
            date=reservation.reservation_date,
            start=reservation.start_time,
            end=reservation.end_time,
            status=reservation.status,
            party_size=reservation.party_size,
            guest_ref=reservation.guest_name,
        )


class SnapshotDataSource:
    """OccupancyDataSource over records that were already fetched together"""

    def __init__(
        self,
        tables: Iterable[TableRef],
        sessions: Iterable[LiveSessionRecord] = (),
        reservations: Iterable[ReservationRecord] = (),
        config: Optional[OccupancyConfig] = None,
    ):
        self._tables = list(tables)
        self._config = config
        self._sessions: Dict[int, List[LiveSessionRecord]] = defaultdict(list)
        self._reservations: Dict[Tuple[int, date], List[ReservationRecord]] = defaultdict(list)

        for session in sessions:
            session.validate()
            self._sessions[session.table_id].append(session)

        unassigned = 0
        for reservation in reservations:
            if reservation.table_id is None:
                unassigned += 1
                continue
            self._reservations[(reservation.table_id, reservation.date)].append(reservation)
        if unassigned:
            logger.debug(f"Snapshot holds {unassigned} reservation(s) without a table")

    def list_tables(self, venue_id: int) -> List[TableRef]:
        return [t for t in self._tables if t.venue_id == venue_id and t.is_active]

    def list_active_sessions(self, table_id: int) -> List[LiveSessionRecord]:
        return list(self._sessions.get(table_id, []))

    def list_reservations(self, table_id: int, on_date: date) -> List[ReservationRecord]:
        return [
            r for r in self._reservations.get((table_id, on_date), []) if r.is_active
        ]

    def get_venue_config(self, venue_id: int) -> Optional[OccupancyConfig]:
        return self._config
