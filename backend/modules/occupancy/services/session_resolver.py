# backend/modules/occupancy/services/session_resolver.py

"""
Resolve the single occupant of a table from its active session rows.

Storage can hold more than one active session per table (double check-in,
client retries). Instead of failing, the rows are put in a total order and the
head wins:

1. sessions with a game assigned ("playing") before those without ("browsing")
2. latest started_at (falling back to created_at) first
3. latest created_at, then highest id, so equal timestamps still resolve
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Tuple
import logging

from ..enums.occupancy_enums import OccupantActivity
from ..exceptions.occupancy_exceptions import InconsistentSnapshotError
from ..models.interval import format_duration, minutes_between
from ..models.snapshot_models import LiveSessionRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedOccupant:
    """The authoritative occupant of one table"""

    table_id: int
    session: LiveSessionRecord
    has_duplicates: bool = False
    superseded_session_ids: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def session_id(self) -> int:
        return self.session.id

    @property
    def game_id(self) -> Optional[int]:
        return self.session.game_id

    @property
    def activity(self) -> OccupantActivity:
        if self.session.is_playing:
            return OccupantActivity.PLAYING
        return OccupantActivity.BROWSING

    @property
    def occupied_since(self) -> datetime:
        return self.session.effective_start

    def elapsed_minutes(self, now: datetime) -> int:
        return max(0, minutes_between(self.occupied_since, now))

    def elapsed_label(self, now: datetime) -> str:
        return format_duration(self.elapsed_minutes(now))


class SessionResolver:
    """Picks one occupant per table from possibly duplicated session rows"""

    @staticmethod
    def _priority_key(session: LiveSessionRecord):
        # Sorted descending: True > False puts playing sessions first
        return (
            session.is_playing,
            session.effective_start,
            session.created_at,
            session.id,
        )

    def resolve(
        self, sessions: Iterable[LiveSessionRecord]
    ) -> Optional[ResolvedOccupant]:
        """
        Resolve the occupant for one table.

        Args:
            sessions: all active sessions recorded for the table

        Returns:
            ResolvedOccupant, or None when the table has no live sessions

        Raises:
            MalformedRecordError: a session is missing its table id
            InconsistentSnapshotError: sessions belong to different tables or
                the same session appears twice
        """
        sessions = list(sessions)
        if not sessions:
            return None

        for session in sessions:
            session.validate()

        table_ids = {s.table_id for s in sessions}
        if len(table_ids) > 1:
            raise InconsistentSnapshotError(
                "sessions from several tables passed to one resolution",
                {"table_ids": sorted(table_ids)},
            )

        session_ids = [s.id for s in sessions]
        if len(set(session_ids)) != len(session_ids):
            raise InconsistentSnapshotError(
                "duplicate session id in resolution input",
                {"session_ids": sorted(session_ids)},
            )

        ordered = sorted(sessions, key=self._priority_key, reverse=True)
        winner, superseded = ordered[0], ordered[1:]
        table_id = winner.table_id

        if superseded:
            logger.warning(
                f"Table {table_id} has {len(sessions)} active sessions; "
                f"resolved to session {winner.id}, superseded "
                f"{[s.id for s in superseded]}"
            )

        return ResolvedOccupant(
            table_id=table_id,
            session=winner,
            has_duplicates=bool(superseded),
            superseded_session_ids=tuple(s.id for s in superseded),
        )


# Create singleton service
session_resolver = SessionResolver()
