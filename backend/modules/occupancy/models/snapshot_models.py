# backend/modules/occupancy/models/snapshot_models.py

"""
In-memory records the occupancy engine evaluates.

These are plain value objects detached from the database session, so one
evaluation pass always works on a fixed snapshot.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..enums.occupancy_enums import ReservationStatus, ACTIVE_RESERVATION_STATUSES
from ..exceptions.occupancy_exceptions import MalformedRecordError
from .interval import Interval


@dataclass(frozen=True)
class TableRef:
    """A venue table, referenced by id from sessions and reservations"""

    id: int
    venue_id: int
    label: str
    is_active: bool = True


@dataclass(frozen=True)
class LiveSessionRecord:
    """One guest check-in that has not been closed yet"""

    id: int
    table_id: Optional[int]
    created_at: datetime
    started_at: Optional[datetime] = None
    game_id: Optional[int] = None
    # Max play time of the assigned game, when known
    estimated_duration_minutes: Optional[int] = None

    @property
    def is_playing(self) -> bool:
        return self.game_id is not None

    @property
    def effective_start(self) -> datetime:
        return self.started_at if self.started_at is not None else self.created_at

    def validate(self):
        if self.table_id is None:
            raise MalformedRecordError("live session", self.id, "missing table id")
        if self.created_at is None:
            raise MalformedRecordError("live session", self.id, "missing created_at")
        if self.estimated_duration_minutes is not None and self.estimated_duration_minutes <= 0:
            raise MalformedRecordError(
                "live session", self.id, "estimated duration must be positive"
            )


@dataclass(frozen=True)
class ReservationRecord:
    """A booking of one table for a [start, end) slot on one date"""

    id: int
    table_id: Optional[int]
    date: date
    start: time
    end: time
    status: ReservationStatus = ReservationStatus.CONFIRMED
    party_size: int = 1
    guest_ref: Optional[str] = None

    @property
    def interval(self) -> Interval:
        try:
            return Interval(date=self.date, start=self.start, end=self.end)
        except ValueError as e:
            raise MalformedRecordError("reservation", self.id, str(e)) from e

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.date, self.start)

    @property
    def end_at(self) -> datetime:
        return datetime.combine(self.date, self.end)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_RESERVATION_STATUSES

    @property
    def sort_key(self):
        return (self.start_at, self.id)

    def validate(self):
        if self.table_id is None:
            raise MalformedRecordError("reservation", self.id, "missing table id")
        if self.party_size is not None and self.party_size <= 0:
            raise MalformedRecordError("reservation", self.id, "party size must be positive")
        # Overlaps are measured in whole minutes
        for value in (self.start, self.end):
            if value.second or value.microsecond:
                raise MalformedRecordError(
                    "reservation", self.id,
                    f"time {value.isoformat()} is not on a whole minute",
                )
        # Raises for end <= start
        self.interval
