# backend/modules/occupancy/routes/occupancy_routes.py

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.config import get_settings
from core.database import get_db
from ..schemas.occupancy_schemas import (
    ConflictResponse,
    OccupancyAlertResponse,
    OccupancyViewResponse,
    ResolvedOccupantResponse,
    TableOccupancyResponse,
    TurnoverRiskResponse,
)
from ..services.alert_service import occupancy_alert_service
from ..services.occupancy_aggregator import OccupancyAggregator, OccupancyView
from ..services.occupancy_repository import SqlAlchemyOccupancyRepository

router = APIRouter(prefix="/api/v1/occupancy", tags=["Table Occupancy"])


def get_clock() -> Optional[datetime]:
    """Current venue-local time; overridden in tests"""
    return None


def get_aggregator(db: Session = Depends(get_db)) -> OccupancyAggregator:
    return OccupancyAggregator(SqlAlchemyOccupancyRepository(db), get_settings())


def _occupant_response(entry, now: datetime) -> Optional[ResolvedOccupantResponse]:
    occupant = entry.occupant
    if occupant is None:
        return None
    return ResolvedOccupantResponse(
        session_id=occupant.session_id,
        game_id=occupant.game_id,
        activity=occupant.activity,
        occupied_since=occupant.occupied_since,
        elapsed_minutes=occupant.elapsed_minutes(now),
        elapsed_label=occupant.elapsed_label(now),
        has_duplicates=occupant.has_duplicates,
        superseded_session_ids=list(occupant.superseded_session_ids),
    )


def to_view_response(view: OccupancyView) -> OccupancyViewResponse:
    tables = [
        TableOccupancyResponse(
            table_id=table_id,
            label=entry.table.label,
            occupant=_occupant_response(entry, view.evaluated_at),
            conflicts=[ConflictResponse.model_validate(c) for c in entry.conflicts],
            risk=(
                TurnoverRiskResponse.model_validate(entry.risk) if entry.risk else None
            ),
        )
        for table_id, entry in view.items()
    ]
    return OccupancyViewResponse(
        venue_id=view.venue_id,
        date=view.date,
        evaluated_at=view.evaluated_at,
        config=view.config,
        tables=tables,
        conflict_count=len(view.conflicts),
        duplicate_session_table_ids=view.duplicate_session_table_ids,
    )


@router.get("/venues/{venue_id}", response_model=OccupancyViewResponse)
def get_venue_occupancy(
    venue_id: int,
    on_date: Optional[date] = Query(None, alias="date"),
    aggregator: OccupancyAggregator = Depends(get_aggregator),
    now: Optional[datetime] = Depends(get_clock),
):
    """
    Occupancy view for every active table of a venue

    Defaults to today. Live sessions only affect the current date.
    """
    now = now or datetime.now()
    view = aggregator.aggregate(venue_id, on_date or now.date(), now=now)
    return to_view_response(view)


@router.get("/venues/{venue_id}/alerts", response_model=List[OccupancyAlertResponse])
def get_venue_occupancy_alerts(
    venue_id: int,
    on_date: Optional[date] = Query(None, alias="date"),
    aggregator: OccupancyAggregator = Depends(get_aggregator),
    now: Optional[datetime] = Depends(get_clock),
):
    """Conflicts, turnover risks and duplicate check-ins, most severe first"""
    now = now or datetime.now()
    view = aggregator.aggregate(venue_id, on_date or now.date(), now=now)
    return [
        OccupancyAlertResponse.model_validate(alert)
        for alert in occupancy_alert_service.build_alerts(view)
    ]
