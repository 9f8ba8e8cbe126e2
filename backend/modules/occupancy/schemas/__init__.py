from .occupancy_schemas import (
    OccupancyConfig,
    IntervalResponse,
    ResolvedOccupantResponse,
    ConflictResponse,
    TurnoverRiskResponse,
    TableOccupancyResponse,
    OccupancyViewResponse,
    OccupancyAlertResponse,
)

__all__ = [
    "OccupancyConfig",
    "IntervalResponse",
    "ResolvedOccupantResponse",
    "ConflictResponse",
    "TurnoverRiskResponse",
    "TableOccupancyResponse",
    "OccupancyViewResponse",
    "OccupancyAlertResponse",
]
