# backend/modules/occupancy/services/occupancy_aggregator.py

"""
Per-venue occupancy view: current occupant, double-bookings and turnover risk
for every active table on a date.
"""

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import logging

from core.config import Settings, get_settings
from ..exceptions.occupancy_exceptions import InconsistentSnapshotError
from ..models.snapshot_models import LiveSessionRecord, ReservationRecord, TableRef
from ..schemas.occupancy_schemas import OccupancyConfig
from .conflict_detector import Conflict, ConflictDetector, conflict_detector
from .occupancy_repository import OccupancyDataSource
from .session_resolver import ResolvedOccupant, SessionResolver, session_resolver
from .turnover_risk_service import (
    TurnoverRisk,
    TurnoverRiskEvaluator,
    estimate_session_end,
    reservation_end,
    turnover_risk_evaluator,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableOccupancy:
    """Occupancy of one table for the evaluated date"""

    table: TableRef
    occupant: Optional[ResolvedOccupant] = None
    conflicts: Tuple[Conflict, ...] = ()
    risk: Optional[TurnoverRisk] = None
    current_reservation_id: Optional[int] = None

    @property
    def table_id(self) -> int:
        return self.table.id

    @property
    def is_occupied(self) -> bool:
        return self.occupant is not None or self.current_reservation_id is not None


@dataclass(frozen=True)
class OccupancyView(Mapping):
    """Total map of table id -> TableOccupancy for one venue and date"""

    venue_id: int
    date: date
    evaluated_at: datetime
    config: OccupancyConfig
    tables: Dict[int, TableOccupancy] = field(default_factory=dict)

    def __getitem__(self, table_id: int) -> TableOccupancy:
        return self.tables[table_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self.tables)

    def __len__(self) -> int:
        return len(self.tables)

    @property
    def conflicts(self) -> List[Conflict]:
        return [c for entry in self.tables.values() for c in entry.conflicts]

    @property
    def risks(self) -> List[TurnoverRisk]:
        """Turnover risks, most severe first, then soonest booking first"""
        risks = [entry.risk for entry in self.tables.values() if entry.risk]
        return sorted(
            risks,
            key=lambda r: (-r.risk_level.rank, r.next_reservation_start, r.table_id),
        )

    @property
    def duplicate_session_table_ids(self) -> List[int]:
        return [
            table_id
            for table_id, entry in self.tables.items()
            if entry.occupant and entry.occupant.has_duplicates
        ]


class OccupancyAggregator:
    """Runs session resolution, conflict detection and risk evaluation per table"""

    def __init__(
        self,
        data_source: OccupancyDataSource,
        settings: Optional[Settings] = None,
        max_workers: Optional[int] = None,
        resolver: SessionResolver = session_resolver,
        detector: ConflictDetector = conflict_detector,
        evaluator: TurnoverRiskEvaluator = turnover_risk_evaluator,
    ):
        self.data_source = data_source
        self.settings = settings or get_settings()
        if max_workers is None and self.settings.occupancy_parallel_tables:
            max_workers = self.settings.occupancy_max_workers
        self.max_workers = max_workers
        self.resolver = resolver
        self.detector = detector
        self.evaluator = evaluator

    def aggregate(
        self, venue_id: int, on_date: date, now: Optional[datetime] = None
    ) -> OccupancyView:
        """
        Build the occupancy view for every active table of a venue.

        Args:
            venue_id: venue to evaluate
            on_date: venue-local date
            now: venue-local wall-clock time; defaults to the current time

        Returns:
            OccupancyView with an entry for every active table

        Fetch errors from the data source propagate unchanged.
        """
        now = now or datetime.now()
        config = self.data_source.get_venue_config(venue_id)
        if config is None:
            config = OccupancyConfig.from_settings(self.settings)

        tables = self.data_source.list_tables(venue_id)

        # All reads happen here on the calling thread; data sources such as a
        # SQLAlchemy Session are not thread safe
        inputs = [
            (
                table,
                self.data_source.list_active_sessions(table.id),
                self.data_source.list_reservations(table.id, on_date),
            )
            for table in tables
        ]

        def evaluate(item):
            table, sessions, reservations = item
            return self.evaluate_table(table, sessions, reservations, on_date, now, config)

        if self.max_workers and len(inputs) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                entries = list(pool.map(evaluate, inputs))
        else:
            entries = [evaluate(item) for item in inputs]

        results: Dict[int, TableOccupancy] = {}
        for entry in entries:
            if entry.table_id in results:
                raise InconsistentSnapshotError(
                    "table listed twice for one venue", {"table_id": entry.table_id}
                )
            results[entry.table_id] = entry

        view = OccupancyView(
            venue_id=venue_id,
            date=on_date,
            evaluated_at=now,
            config=config,
            tables=results,
        )
        logger.info(
            f"Evaluated occupancy for venue {venue_id} on {on_date.isoformat()}: "
            f"{len(results)} tables, {len(view.conflicts)} conflicts, "
            f"{len(view.risks)} turnover risks"
        )
        return view

    def evaluate_table(
        self,
        table: TableRef,
        sessions: Sequence[LiveSessionRecord],
        reservations: Sequence[ReservationRecord],
        on_date: date,
        now: datetime,
        config: OccupancyConfig,
    ) -> TableOccupancy:
        """Evaluate one table. Pure: same input, same output."""
        self._check_ownership(table, sessions, reservations, on_date)

        # Live sessions describe the present, so they only count for today
        occupant = None
        if on_date == now.date():
            occupant = self.resolver.resolve(sessions)

        conflicts = self.detector.detect_conflicts(reservations)

        active = sorted((r for r in reservations if r.is_active), key=lambda r: r.sort_key)
        current = self._current_reservation(active, now)

        if occupant is not None:
            current_end = estimate_session_end(
                occupant, config.default_session_duration_minutes, now
            )
        elif current is not None:
            current_end = reservation_end(current)
        else:
            current_end = None

        next_reservation = self._next_reservation(active, current, occupant, now)

        risk = self.evaluator.evaluate_risk(
            current_end,
            next_reservation,
            config.buffer_minutes,
            config.risk_lookahead_minutes,
        )

        self._check_references(table, reservations, conflicts, risk)

        return TableOccupancy(
            table=table,
            occupant=occupant,
            conflicts=tuple(conflicts),
            risk=risk,
            current_reservation_id=current.id if current else None,
        )

    @staticmethod
    def _current_reservation(
        active: List[ReservationRecord], now: datetime
    ) -> Optional[ReservationRecord]:
        holding = [r for r in active if r.start_at <= now < r.end_at]
        if not holding:
            return None
        # With overlapping bookings the table is held until the last one ends
        return max(holding, key=lambda r: (r.end_at, r.sort_key))

    @staticmethod
    def _next_reservation(
        active: List[ReservationRecord],
        current: Optional[ReservationRecord],
        occupant: Optional[ResolvedOccupant],
        now: datetime,
    ) -> Optional[ReservationRecord]:
        if occupant is not None:
            # A booking that already started while the party is still seated
            # is the one being overrun; bookings starting at or before the
            # check-in belong to the seated party
            return next(
                (
                    r for r in active
                    if r.end_at > now and r.start_at > occupant.occupied_since
                ),
                None,
            )
        return next((r for r in active if r.start_at >= now and r is not current), None)

    @staticmethod
    def _check_ownership(
        table: TableRef,
        sessions: Sequence[LiveSessionRecord],
        reservations: Sequence[ReservationRecord],
        on_date: date,
    ):
        for session in sessions:
            session.validate()
            if session.table_id != table.id:
                raise InconsistentSnapshotError(
                    f"session {session.id} fetched for table {table.id} "
                    f"belongs to table {session.table_id}"
                )
        for reservation in reservations:
            reservation.validate()
            if reservation.table_id != table.id or reservation.date != on_date:
                raise InconsistentSnapshotError(
                    f"reservation {reservation.id} fetched for table {table.id} "
                    f"on {on_date.isoformat()} does not match"
                )

    @staticmethod
    def _check_references(
        table: TableRef,
        reservations: Sequence[ReservationRecord],
        conflicts: List[Conflict],
        risk: Optional[TurnoverRisk],
    ):
        known = {r.id for r in reservations}
        referenced = set()
        for conflict in conflicts:
            referenced.update(conflict.reservation_ids)
        if risk is not None:
            referenced.add(risk.next_reservation_id)
            if risk.current_reservation_id is not None:
                referenced.add(risk.current_reservation_id)

        dangling = referenced - known
        if dangling:
            raise InconsistentSnapshotError(
                f"table {table.id} results reference unknown reservations",
                {"reservation_ids": sorted(dangling)},
            )
