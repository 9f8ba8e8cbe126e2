# backend/modules/occupancy/schemas/occupancy_schemas.py

from typing import List, Optional
from datetime import date, datetime
from pydantic import BaseModel, Field, ConfigDict, model_validator

from core.config import Settings
from ..enums.occupancy_enums import (
    ConflictSeverity,
    EndEstimateSource,
    OccupantActivity,
    TurnoverRiskLevel,
)


class OccupancyConfig(BaseModel):
    """Venue configuration consumed by the occupancy engine"""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    buffer_minutes: int = Field(15, gt=0)
    default_session_duration_minutes: int = Field(120, gt=0)
    risk_lookahead_minutes: int = Field(120, gt=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "OccupancyConfig":
        return cls(
            buffer_minutes=settings.occupancy_buffer_minutes,
            default_session_duration_minutes=settings.occupancy_default_session_duration_minutes,
            risk_lookahead_minutes=settings.occupancy_risk_lookahead_minutes,
        )


# Response Schemas
class IntervalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    start: str
    end: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def format_times(cls, data):
        # Accept Interval objects directly
        if hasattr(data, "start") and hasattr(data, "date") and not isinstance(data, dict):
            return {
                "date": data.date,
                "start": data.start.strftime("%H:%M"),
                "end": data.end.strftime("%H:%M") if data.end is not None else None,
            }
        return data


class ResolvedOccupantResponse(BaseModel):
    """Current occupant of a table"""

    model_config = ConfigDict(from_attributes=True)

    session_id: int
    game_id: Optional[int] = None
    activity: OccupantActivity
    occupied_since: datetime
    elapsed_minutes: int
    elapsed_label: str
    has_duplicates: bool
    superseded_session_ids: List[int] = []


class ConflictResponse(BaseModel):
    """Double-booking between two reservations"""

    model_config = ConfigDict(from_attributes=True)

    table_id: int
    reservation_a_id: int
    reservation_b_id: int
    overlap_minutes: int
    overlap: IntervalResponse
    severity: ConflictSeverity


class TurnoverRiskResponse(BaseModel):
    """Risk the table is not ready for its next booking"""

    model_config = ConfigDict(from_attributes=True)

    table_id: int
    current_session_end_estimate: datetime
    end_estimate_source: EndEstimateSource
    is_estimated: bool
    next_reservation_id: int
    next_reservation_start: datetime
    buffer_minutes: int
    required_buffer_minutes: int
    risk_level: TurnoverRiskLevel
    session_id: Optional[int] = None
    current_reservation_id: Optional[int] = None


class TableOccupancyResponse(BaseModel):
    table_id: int
    label: str
    occupant: Optional[ResolvedOccupantResponse] = None
    conflicts: List[ConflictResponse] = []
    risk: Optional[TurnoverRiskResponse] = None


class OccupancyViewResponse(BaseModel):
    """Consolidated occupancy for every active table of a venue"""

    venue_id: int
    date: date
    evaluated_at: datetime
    config: OccupancyConfig
    tables: List[TableOccupancyResponse]
    conflict_count: int
    duplicate_session_table_ids: List[int] = []


class OccupancyAlertResponse(BaseModel):
    """Dashboard alert item"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    severity: str
    table_id: int
    title: str
    message: str
    reservation_ids: List[int] = []
    session_ids: List[int] = []
