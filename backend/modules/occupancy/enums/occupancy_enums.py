from enum import Enum


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SEATED = "seated"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Only these take part in conflict and turnover evaluation
ACTIVE_RESERVATION_STATUSES = frozenset(
    {ReservationStatus.CONFIRMED, ReservationStatus.PENDING}
)


class OccupantActivity(str, Enum):
    """What the resolved occupant is doing at the table"""

    PLAYING = "playing"  # a game has been assigned
    BROWSING = "browsing"  # checked in, no game yet


class ConflictSeverity(str, Enum):
    # True overlaps have a single tier; near misses are turnover risks
    CRITICAL = "critical"


class TurnoverRiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {
    TurnoverRiskLevel.LOW: 1,
    TurnoverRiskLevel.MEDIUM: 2,
    TurnoverRiskLevel.HIGH: 3,
}


class EndEstimateSource(str, Enum):
    """Where a table's current end time came from"""

    DEFAULT_SESSION_DURATION = "default_session_duration"  # venue config
    GAME_DURATION = "game_duration"  # assigned game's play time
    OVERTIME = "overtime"  # estimate passed, occupant still seated
    RESERVATION_END = "reservation_end"
