# backend/modules/occupancy/services/alert_service.py

"""
Turns an occupancy view into alert items for the host dashboard.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import logging

from ..enums.occupancy_enums import EndEstimateSource, TurnoverRiskLevel
from ..models.interval import format_duration
from .occupancy_aggregator import OccupancyView, TableOccupancy

logger = logging.getLogger(__name__)

# Alert severities in display order
SEVERITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3, "warning": 4}


@dataclass
class OccupancyAlert:
    id: str
    type: str  # conflict, turnover_risk, duplicate_sessions
    severity: str
    table_id: int
    title: str
    message: str
    reservation_ids: List[int] = field(default_factory=list)
    session_ids: List[int] = field(default_factory=list)
    sort_time: Optional[datetime] = None


def format_clock(value) -> str:
    """Format a time or datetime as e.g. '6:30 PM'."""
    if isinstance(value, datetime):
        value = value.time()
    hour = value.hour % 12 or 12
    suffix = "PM" if value.hour >= 12 else "AM"
    return f"{hour}:{value.minute:02d} {suffix}"


def turnover_risk_message(entry: TableOccupancy, now: datetime) -> str:
    risk = entry.risk
    label = entry.table.label
    booking_time = format_clock(risk.next_reservation_start)

    if risk.end_estimate_source == EndEstimateSource.RESERVATION_END:
        since = "the current booking ends at " + format_clock(risk.current_session_end_estimate)
    elif entry.occupant is not None:
        since = (
            f"current session started at {format_clock(entry.occupant.occupied_since)} "
            f"({entry.occupant.elapsed_label(now)} ago)"
        )
    else:
        since = "current occupancy end is estimated"

    if risk.risk_level == TurnoverRiskLevel.HIGH:
        if risk.is_projected_overrun:
            overrun = format_duration(-risk.buffer_minutes) if risk.buffer_minutes else "0m"
            return (
                f"Table {label} is projected to run {overrun} into the {booking_time} "
                f"booking; {since}."
            )
        return (
            f"Table {label} may not be ready for the {booking_time} booking: only "
            f"{risk.buffer_minutes} min to turn over; {since}."
        )
    if risk.risk_level == TurnoverRiskLevel.MEDIUM:
        return (
            f"Table {label} has {risk.buffer_minutes} min before the "
            f"{booking_time} booking; {since}."
        )
    return (
        f"Keep an eye on Table {label}: booking at {booking_time} "
        f"(in {format_duration(risk.minutes_until_start(now))}); {since}."
    )


class OccupancyAlertService:
    """Builds alerts for conflicts, turnover risks and duplicate check-ins"""

    def build_alerts(self, view: OccupancyView) -> List[OccupancyAlert]:
        alerts: List[OccupancyAlert] = []

        for table_id, entry in view.items():
            label = entry.table.label

            for conflict in entry.conflicts:
                alerts.append(
                    OccupancyAlert(
                        id=f"conflict-{conflict.reservation_a_id}-{conflict.reservation_b_id}",
                        type="conflict",
                        severity=conflict.severity.value,
                        table_id=table_id,
                        title=f"Double booking: {label}",
                        message=(
                            f"Reservations {conflict.reservation_a_id} and "
                            f"{conflict.reservation_b_id} overlap by "
                            f"{format_duration(conflict.overlap_minutes)} "
                            f"({conflict.overlap.start.strftime('%H:%M')}-"
                            f"{conflict.overlap.end.strftime('%H:%M')})."
                        ),
                        reservation_ids=[conflict.reservation_a_id, conflict.reservation_b_id],
                        sort_time=conflict.overlap.start_at,
                    )
                )

            if entry.risk is not None:
                risk = entry.risk
                source = risk.session_id or risk.current_reservation_id
                alerts.append(
                    OccupancyAlert(
                        id=f"risk-{table_id}-{source}-{risk.next_reservation_id}",
                        type="turnover_risk",
                        severity=risk.risk_level.value,
                        table_id=table_id,
                        title=f"Turnover Risk: {label}",
                        message=turnover_risk_message(entry, view.evaluated_at),
                        reservation_ids=[risk.next_reservation_id],
                        session_ids=[risk.session_id] if risk.session_id else [],
                        sort_time=risk.next_reservation_start,
                    )
                )

            if entry.occupant is not None and entry.occupant.has_duplicates:
                occupant = entry.occupant
                alerts.append(
                    OccupancyAlert(
                        id=f"duplicates-{table_id}",
                        type="duplicate_sessions",
                        severity="warning",
                        table_id=table_id,
                        title=f"Duplicate check-ins: {label}",
                        message=(
                            f"Table {label} has {len(occupant.superseded_session_ids) + 1} "
                            f"active sessions; showing session {occupant.session_id}."
                        ),
                        session_ids=[occupant.session_id, *occupant.superseded_session_ids],
                        sort_time=occupant.occupied_since,
                    )
                )

        alerts.sort(
            key=lambda a: (
                SEVERITY_ORDER.get(a.severity, len(SEVERITY_ORDER)),
                a.sort_time or datetime.max,
                a.table_id,
                a.id,
            )
        )
        logger.debug(f"Built {len(alerts)} occupancy alert(s) for venue {view.venue_id}")
        return alerts


# Create singleton service
occupancy_alert_service = OccupancyAlertService()
