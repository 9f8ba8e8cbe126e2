from .session_resolver import SessionResolver, ResolvedOccupant, session_resolver
from .conflict_detector import ConflictDetector, Conflict, classify_overlap, conflict_detector
from .turnover_risk_service import (
    TurnoverRiskEvaluator,
    TurnoverRisk,
    EstimatedEnd,
    estimate_session_end,
    reservation_end,
    turnover_risk_evaluator,
)
from .occupancy_repository import (
    OccupancyDataSource,
    SqlAlchemyOccupancyRepository,
    SnapshotDataSource,
)
from .occupancy_aggregator import OccupancyAggregator, OccupancyView, TableOccupancy
from .alert_service import OccupancyAlertService, OccupancyAlert, occupancy_alert_service

__all__ = [
    "SessionResolver",
    "ResolvedOccupant",
    "session_resolver",
    "ConflictDetector",
    "Conflict",
    "classify_overlap",
    "conflict_detector",
    "TurnoverRiskEvaluator",
    "TurnoverRisk",
    "EstimatedEnd",
    "estimate_session_end",
    "reservation_end",
    "turnover_risk_evaluator",
    "OccupancyDataSource",
    "SqlAlchemyOccupancyRepository",
    "SnapshotDataSource",
    "OccupancyAggregator",
    "OccupancyView",
    "TableOccupancy",
    "OccupancyAlertService",
    "OccupancyAlert",
    "occupancy_alert_service",
]
