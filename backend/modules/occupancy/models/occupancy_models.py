# backend/modules/occupancy/models/occupancy_models.py

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    Date,
    DateTime,
    Time,
    ForeignKey,
    Enum as SQLEnum,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from core.database import Base
from core.mixins import TimestampMixin
from ..enums.occupancy_enums import ReservationStatus


class Venue(Base, TimestampMixin):
    """A café location operating tables"""

    __tablename__ = "venues"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    timezone = Column(String(64), nullable=False, default="America/Los_Angeles")

    tables = relationship("VenueTable", back_populates="venue")
    occupancy_settings = relationship(
        "VenueOccupancySettings", uselist=False, back_populates="venue"
    )


class VenueTable(Base, TimestampMixin):
    """A physical table guests check in to"""

    __tablename__ = "venue_tables"

    id = Column(Integer, primary_key=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False)
    label = Column(String(50), nullable=False)
    capacity = Column(Integer)
    is_active = Column(Boolean, nullable=False, default=True)

    venue = relationship("Venue", back_populates="tables")
    sessions = relationship("LiveSession", back_populates="table")
    reservations = relationship("Reservation", back_populates="table")

    __table_args__ = (
        UniqueConstraint("venue_id", "label", name="uix_venue_table_label"),
    )


class Game(Base, TimestampMixin):
    """A game in the venue library"""

    __tablename__ = "games"

    id = Column(Integer, primary_key=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False)
    title = Column(String(200), nullable=False)
    max_time_minutes = Column(Integer)  # Published max play time


class LiveSession(Base, TimestampMixin):
    """
    Guest check-in at a table.

    created_at is the check-in time; started_at is reset when a game is
    assigned. Rows with ended_at IS NULL are active. Duplicate active rows
    for one table can exist after double check-ins or client retries.
    """

    __tablename__ = "live_sessions"

    id = Column(Integer, primary_key=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False)
    table_id = Column(Integer, ForeignKey("venue_tables.id"), nullable=False)
    game_id = Column(Integer, ForeignKey("games.id"))

    started_at = Column(DateTime)
    ended_at = Column(DateTime)

    table = relationship("VenueTable", back_populates="sessions")
    game = relationship("Game")

    __table_args__ = (
        Index("ix_live_sessions_table_active", "table_id", "ended_at"),
    )


class Reservation(Base, TimestampMixin):
    """Table booking for a slot on one venue-local date"""

    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False)
    table_id = Column(Integer, ForeignKey("venue_tables.id"))  # Nullable until assigned

    reservation_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    status = Column(SQLEnum(ReservationStatus), nullable=False, default=ReservationStatus.PENDING)
    party_size = Column(Integer, nullable=False)

    guest_name = Column(String(100), nullable=False)
    guest_email = Column(String(100))
    guest_phone = Column(String(20))
    game_id = Column(Integer, ForeignKey("games.id"))  # Pre-booked game

    table = relationship("VenueTable", back_populates="reservations")

    __table_args__ = (
        CheckConstraint("party_size > 0", name="chk_reservation_party_size"),
        Index("ix_reservations_table_date", "table_id", "reservation_date"),
    )


class VenueOccupancySettings(Base, TimestampMixin):
    """Per-venue overrides for the occupancy engine"""

    __tablename__ = "venue_occupancy_settings"

    id = Column(Integer, primary_key=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, unique=True)

    buffer_minutes = Column(Integer, nullable=False, default=15)
    default_session_duration_minutes = Column(Integer, nullable=False, default=120)
    risk_lookahead_minutes = Column(Integer, nullable=False, default=120)

    venue = relationship("Venue", back_populates="occupancy_settings")
