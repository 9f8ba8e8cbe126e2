# backend/modules/occupancy/services/conflict_detector.py

"""
Double-booking detection for the reservations of one table on one day.

Two reservations conflict only when they share at least one minute. Touching
bookings (10:00-11:00 and 11:00-12:00) are valid back-to-back slots; whether
there is enough turnover time between them is a turnover risk, not a conflict.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional
import logging

from ..enums.occupancy_enums import ConflictSeverity
from ..exceptions.occupancy_exceptions import InconsistentSnapshotError
from ..models.interval import Interval
from ..models.snapshot_models import ReservationRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conflict:
    """Overlap between two reservations on the same table"""

    table_id: int
    reservation_a_id: int  # the earlier of the two, by (start, id)
    reservation_b_id: int
    overlap_minutes: int
    overlap: Interval
    severity: ConflictSeverity = ConflictSeverity.CRITICAL

    @property
    def reservation_ids(self) -> frozenset:
        return frozenset((self.reservation_a_id, self.reservation_b_id))


def classify_overlap(overlap_minutes: int) -> Optional[ConflictSeverity]:
    """Severity for an overlap length; None when the pair does not overlap."""
    if overlap_minutes >= 1:
        return ConflictSeverity.CRITICAL
    return None


class ConflictDetector:
    """Finds overlapping reservation pairs on a single table and day"""

    def detect_conflicts(
        self, reservations: Iterable[ReservationRecord]
    ) -> List[Conflict]:
        """
        Detect every overlapping pair of reservations.

        Reservations are swept in (start, id) order while tracking the ones
        still open at the current start, so only candidates that can overlap
        are compared.

        Args:
            reservations: reservations of one table for one date

        Returns:
            Conflicts ordered by (a.start, a.id, b.start, b.id)

        Raises:
            MalformedRecordError: a reservation ends at or before its start
            InconsistentSnapshotError: input spans several tables or dates,
                or repeats a reservation id
        """
        reservations = list(reservations)
        for reservation in reservations:
            reservation.validate()

        participating = [r for r in reservations if r.is_active]
        skipped = len(reservations) - len(participating)
        if skipped:
            logger.debug(f"Ignoring {skipped} reservation(s) not pending or confirmed")

        if len(participating) < 2:
            return []

        by_id = self._index_snapshot(participating)
        ordered = sorted(participating, key=lambda r: r.sort_key)

        conflicts: List[Conflict] = []
        open_reservations: List[ReservationRecord] = []

        for current in ordered:
            # Anything ending at or before this start can no longer overlap
            open_reservations = [
                r for r in open_reservations if r.end_at > current.start_at
            ]
            for earlier in open_reservations:
                conflict = self._compare(earlier, current)
                if conflict is not None:
                    conflicts.append(conflict)
            open_reservations.append(current)

        conflicts.sort(
            key=lambda c: (
                by_id[c.reservation_a_id].sort_key,
                by_id[c.reservation_b_id].sort_key,
            )
        )

        if conflicts:
            logger.warning(
                f"Table {ordered[0].table_id} on {ordered[0].date.isoformat()} has "
                f"{len(conflicts)} double-booking(s)"
            )
        return conflicts

    def _compare(
        self, earlier: ReservationRecord, later: ReservationRecord
    ) -> Optional[Conflict]:
        a, b = earlier.interval, later.interval
        overlap_minutes = a.overlap_minutes(b)
        severity = classify_overlap(overlap_minutes)
        if severity is None:
            return None

        return Conflict(
            table_id=earlier.table_id,
            reservation_a_id=earlier.id,
            reservation_b_id=later.id,
            overlap_minutes=overlap_minutes,
            overlap=a.intersection(b),
            severity=severity,
        )

    def _index_snapshot(
        self, reservations: List[ReservationRecord]
    ) -> Dict[int, ReservationRecord]:
        table_ids = {r.table_id for r in reservations}
        if len(table_ids) > 1:
            raise InconsistentSnapshotError(
                "reservations from several tables passed to one detection",
                {"table_ids": sorted(table_ids)},
            )

        dates = {r.date for r in reservations}
        if len(dates) > 1:
            raise InconsistentSnapshotError(
                "reservations from several dates passed to one detection",
                {"dates": sorted(d.isoformat() for d in dates)},
            )

        by_id = {r.id: r for r in reservations}
        if len(by_id) != len(reservations):
            raise InconsistentSnapshotError("duplicate reservation id in detection input")
        return by_id


# Create singleton service
conflict_detector = ConflictDetector()
