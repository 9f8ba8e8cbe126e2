# backend/modules/occupancy/services/turnover_risk_service.py

"""
Turnover risk between a table's current occupancy and its next booking.

A live session has no end timestamp, so its end is an estimate derived from
configuration (venue default duration, or the assigned game's play time). The
estimate's source travels with every risk so the dashboard can show that the
number is projected, not measured.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
import logging

from ..enums.occupancy_enums import EndEstimateSource, TurnoverRiskLevel
from ..exceptions.occupancy_exceptions import InconsistentSnapshotError
from ..models.interval import minutes_between
from ..models.snapshot_models import ReservationRecord
from .session_resolver import ResolvedOccupant

logger = logging.getLogger(__name__)

DEFAULT_RISK_LOOKAHEAD_MINUTES = 120


@dataclass(frozen=True)
class EstimatedEnd:
    """When the current occupancy of a table is expected to end"""

    table_id: int
    end_at: datetime
    source: EndEstimateSource
    session_id: Optional[int] = None
    reservation_id: Optional[int] = None


@dataclass(frozen=True)
class TurnoverRisk:
    """Risk that a table will not be ready for its next reservation"""

    table_id: int
    current_session_end_estimate: datetime
    end_estimate_source: EndEstimateSource
    next_reservation_id: int
    next_reservation_start: datetime
    buffer_minutes: int  # gap between current end and next start, may be negative
    required_buffer_minutes: int
    risk_level: TurnoverRiskLevel
    session_id: Optional[int] = None
    current_reservation_id: Optional[int] = None

    @property
    def is_estimated(self) -> bool:
        return self.end_estimate_source != EndEstimateSource.RESERVATION_END

    @property
    def is_projected_overrun(self) -> bool:
        return self.buffer_minutes <= 0

    def minutes_until_start(self, now: datetime) -> int:
        return minutes_between(now, self.next_reservation_start)


def estimate_session_end(
    occupant: ResolvedOccupant,
    default_duration_minutes: int,
    now: datetime,
) -> EstimatedEnd:
    """
    Estimate when a live session will end.

    Uses the game's play time when the session carries one, otherwise the
    venue default. Once the estimate is in the past the occupant is still
    seated, so the estimate becomes "now" and keeps moving with the clock.
    """
    session = occupant.session
    if session.estimated_duration_minutes:
        duration = session.estimated_duration_minutes
        source = EndEstimateSource.GAME_DURATION
    else:
        duration = default_duration_minutes
        source = EndEstimateSource.DEFAULT_SESSION_DURATION

    end_at = occupant.occupied_since + timedelta(minutes=duration)
    if end_at < now:
        end_at = now
        source = EndEstimateSource.OVERTIME

    return EstimatedEnd(
        table_id=occupant.table_id,
        end_at=end_at,
        source=source,
        session_id=session.id,
    )


def reservation_end(reservation: ReservationRecord) -> EstimatedEnd:
    """End of a reservation that currently holds the table."""
    return EstimatedEnd(
        table_id=reservation.table_id,
        end_at=reservation.interval.end_at,
        source=EndEstimateSource.RESERVATION_END,
        reservation_id=reservation.id,
    )


class TurnoverRiskEvaluator:
    """Classifies the gap between current occupancy and the next booking"""

    def classify(
        self,
        gap_minutes: int,
        buffer_minutes: int,
        lookahead_minutes: int = DEFAULT_RISK_LOOKAHEAD_MINUTES,
    ) -> Optional[TurnoverRiskLevel]:
        """
        Risk level for a gap, or None when it is too far out to act on.

        gap < buffer             -> high (includes projected overruns)
        buffer <= gap < 2*buffer -> medium
        gap >= 2*buffer          -> low, only while gap < lookahead
        """
        if buffer_minutes <= 0:
            raise ValueError("buffer_minutes must be positive")
        if lookahead_minutes <= 0:
            raise ValueError("lookahead_minutes must be positive")

        if gap_minutes < buffer_minutes:
            return TurnoverRiskLevel.HIGH
        if gap_minutes < 2 * buffer_minutes:
            return TurnoverRiskLevel.MEDIUM
        if gap_minutes < lookahead_minutes:
            return TurnoverRiskLevel.LOW
        return None

    def evaluate_risk(
        self,
        current_end: Optional[EstimatedEnd],
        next_reservation: Optional[ReservationRecord],
        buffer_minutes: int,
        lookahead_minutes: int = DEFAULT_RISK_LOOKAHEAD_MINUTES,
    ) -> Optional[TurnoverRisk]:
        """
        Evaluate turnover risk for one table.

        Args:
            current_end: end of the current occupancy, None when nobody holds
                the table
            next_reservation: the next pending/confirmed booking, if any
            buffer_minutes: turnover time the venue needs between parties
            lookahead_minutes: low risks at or beyond this gap are dropped

        Returns:
            TurnoverRisk, or None when there is nothing actionable
        """
        if current_end is None or next_reservation is None:
            return None

        next_reservation.validate()
        if not next_reservation.is_active:
            logger.debug(
                f"Reservation {next_reservation.id} is {next_reservation.status.value}; "
                f"no turnover risk"
            )
            return None

        if next_reservation.table_id != current_end.table_id:
            raise InconsistentSnapshotError(
                "next reservation belongs to a different table than the occupancy",
                {
                    "table_id": current_end.table_id,
                    "reservation_id": next_reservation.id,
                    "reservation_table_id": next_reservation.table_id,
                },
            )

        gap = minutes_between(current_end.end_at, next_reservation.start_at)
        level = self.classify(gap, buffer_minutes, lookahead_minutes)
        if level is None:
            return None

        if level == TurnoverRiskLevel.HIGH:
            logger.info(
                f"High turnover risk on table {current_end.table_id}: "
                f"{gap} min before reservation {next_reservation.id}"
            )

        return TurnoverRisk(
            table_id=current_end.table_id,
            current_session_end_estimate=current_end.end_at,
            end_estimate_source=current_end.source,
            next_reservation_id=next_reservation.id,
            next_reservation_start=next_reservation.start_at,
            buffer_minutes=gap,
            required_buffer_minutes=buffer_minutes,
            risk_level=level,
            session_id=current_end.session_id,
            current_reservation_id=current_end.reservation_id,
        )


# Create singleton service
turnover_risk_evaluator = TurnoverRiskEvaluator()
