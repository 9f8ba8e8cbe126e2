from .occupancy_enums import (
    ReservationStatus,
    ACTIVE_RESERVATION_STATUSES,
    OccupantActivity,
    ConflictSeverity,
    TurnoverRiskLevel,
    EndEstimateSource,
)

__all__ = [
    "ReservationStatus",
    "ACTIVE_RESERVATION_STATUSES",
    "OccupantActivity",
    "ConflictSeverity",
    "TurnoverRiskLevel",
    "EndEstimateSource",
]
