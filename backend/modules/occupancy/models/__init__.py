from .occupancy_models import (
    Venue,
    VenueTable,
    Game,
    LiveSession,
    Reservation,
    VenueOccupancySettings,
)
from .interval import Interval, minutes_between, format_duration
from .snapshot_models import TableRef, LiveSessionRecord, ReservationRecord

__all__ = [
    "Venue",
    "VenueTable",
    "Game",
    "LiveSession",
    "Reservation",
    "VenueOccupancySettings",
    "Interval",
    "minutes_between",
    "format_duration",
    "TableRef",
    "LiveSessionRecord",
    "ReservationRecord",
]
