# backend/modules/occupancy/models/interval.py

"""
Venue-local time intervals.

Every interval is wall-clock time on a single calendar date at the venue. They
are never converted to UTC instants, so a DST change or a travelling admin
cannot shift a booking.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional


def minutes_between(earlier: datetime, later: datetime) -> int:
    """Whole minutes from earlier to later (negative when later is earlier)."""
    return int((later - earlier).total_seconds() // 60)


def format_duration(minutes: int) -> str:
    """Human readable duration, e.g. 95 -> '1h 35m'."""
    sign = "-" if minutes < 0 else ""
    minutes = abs(minutes)
    hours, mins = divmod(minutes, 60)
    if hours and mins:
        return f"{sign}{hours}h {mins}m"
    if hours:
        return f"{sign}{hours}h"
    return f"{sign}{mins}m"


@dataclass(frozen=True)
class Interval:
    """A [start, end) span on one date. end=None means still ongoing."""

    date: date
    start: time
    end: Optional[time] = None

    def __post_init__(self):
        if self.end is not None and self.end <= self.start:
            raise ValueError(
                f"Interval end {self.end.isoformat()} must be after "
                f"start {self.start.isoformat()}"
            )

    @classmethod
    def from_datetimes(cls, start: datetime, end: Optional[datetime] = None) -> "Interval":
        if end is not None and end.date() != start.date():
            raise ValueError("Interval cannot span more than one calendar date")
        return cls(
            date=start.date(),
            start=start.time(),
            end=end.time() if end is not None else None,
        )

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.date, self.start)

    @property
    def end_at(self) -> Optional[datetime]:
        if self.end is None:
            return None
        return datetime.combine(self.date, self.end)

    @property
    def duration_minutes(self) -> Optional[int]:
        if self.end is None:
            return None
        return minutes_between(self.start_at, self.end_at)

    def _require_closed(self, other: "Interval"):
        if self.is_open or other.is_open:
            raise ValueError("Open-ended intervals have no fixed overlap")

    def overlap_minutes(self, other: "Interval") -> int:
        """Length of the shared span in minutes; 0 when disjoint or touching."""
        self._require_closed(other)
        if self.date != other.date:
            return 0
        latest_start = max(self.start_at, other.start_at)
        earliest_end = min(self.end_at, other.end_at)
        return max(0, minutes_between(latest_start, earliest_end))

    def overlaps(self, other: "Interval") -> bool:
        self._require_closed(other)
        return (
            self.date == other.date
            and self.start_at < other.end_at
            and other.start_at < self.end_at
        )

    def is_adjacent(self, other: "Interval") -> bool:
        """True when one interval ends exactly where the other starts."""
        self._require_closed(other)
        return self.date == other.date and (
            self.end == other.start or other.end == self.start
        )

    def intersection(self, other: "Interval") -> Optional["Interval"]:
        if not self.overlaps(other):
            return None
        return Interval(
            date=self.date,
            start=max(self.start, other.start),
            end=min(self.end, other.end),
        )

    def contains(self, moment: datetime) -> bool:
        if moment < self.start_at:
            return False
        return self.end_at is None or moment < self.end_at

    def __str__(self) -> str:
        end = self.end.strftime("%H:%M") if self.end is not None else "..."
        return f"{self.date.isoformat()} {self.start.strftime('%H:%M')}-{end}"
