# backend/modules/occupancy/__init__.py

from .enums.occupancy_enums import (
    ReservationStatus, OccupantActivity, ConflictSeverity,
    TurnoverRiskLevel, EndEstimateSource
)

from .exceptions.occupancy_exceptions import MalformedRecordError, InconsistentSnapshotError

from .models.interval import Interval
from .models.snapshot_models import TableRef, LiveSessionRecord, ReservationRecord
from .models.occupancy_models import (
    Venue, VenueTable, Game, LiveSession, Reservation, VenueOccupancySettings
)

from .schemas.occupancy_schemas import OccupancyConfig, OccupancyViewResponse

from .services.session_resolver import ResolvedOccupant, session_resolver
from .services.conflict_detector import Conflict, conflict_detector
from .services.turnover_risk_service import (
    TurnoverRisk, EstimatedEnd, turnover_risk_evaluator
)
from .services.occupancy_repository import (
    OccupancyDataSource, SqlAlchemyOccupancyRepository, SnapshotDataSource
)
from .services.occupancy_aggregator import OccupancyAggregator, OccupancyView, TableOccupancy
from .services.alert_service import occupancy_alert_service

from .routes.occupancy_routes import router as occupancy_router

# Standalone entry points for single-table callers (e.g. a live dashboard tile)
resolve = session_resolver.resolve
detect_conflicts = conflict_detector.detect_conflicts
evaluate_risk = turnover_risk_evaluator.evaluate_risk
build_alerts = occupancy_alert_service.build_alerts


def aggregate(data_source, venue_id, on_date, now=None) -> OccupancyView:
    return OccupancyAggregator(data_source).aggregate(venue_id, on_date, now=now)


__all__ = [
    # Enums
    "ReservationStatus", "OccupantActivity", "ConflictSeverity",
    "TurnoverRiskLevel", "EndEstimateSource",

    # Errors
    "MalformedRecordError", "InconsistentSnapshotError",

    # Records and models
    "Interval", "TableRef", "LiveSessionRecord", "ReservationRecord",
    "Venue", "VenueTable", "Game", "LiveSession", "Reservation",
    "VenueOccupancySettings",

    # Schemas
    "OccupancyConfig", "OccupancyViewResponse",

    # Engine
    "ResolvedOccupant", "Conflict", "TurnoverRisk", "EstimatedEnd",
    "OccupancyDataSource", "SqlAlchemyOccupancyRepository", "SnapshotDataSource",
    "OccupancyAggregator", "OccupancyView", "TableOccupancy",
    "resolve", "detect_conflicts", "evaluate_risk", "aggregate", "build_alerts",

    # Routers
    "occupancy_router",
]
