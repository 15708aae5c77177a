# backend/helpdesk/repositories/presence_repository.py
"""
Presence segment repository.

Window queries take UTC instants; the local-day arithmetic lives in
core.timezone_utils and the services.
"""

from datetime import datetime
import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.presence import StaffPresence
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PresenceSegmentRepository(BaseRepository[StaffPresence]):
    """Data access for StaffPresence rows."""

    def __init__(self, db: Session):
        super().__init__(db, StaffPresence)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(StaffPresence.status),
            joinedload(StaffPresence.office_location),
        )

    def get_segments_in_window(
        self, user_id: str, window_start: datetime, window_end: datetime
    ) -> List[StaffPresence]:
        """Segments whose start and end both fall inside the window, earliest first."""
        query = self._apply_eager_loading(
            self._build_query().filter(
                StaffPresence.user_id == user_id,
                StaffPresence.start_at >= window_start,
                StaffPresence.end_at <= window_end,
            )
        ).order_by(StaffPresence.start_at.asc())
        return self._execute_query(query)

    def delete_segments_in_window(
        self, user_id: str, window_start: datetime, window_end: datetime
    ) -> int:
        """Delete a user's segments fully inside the window; returns row count."""
        try:
            deleted = (
                self.db.query(StaffPresence)
                .filter(
                    StaffPresence.user_id == user_id,
                    StaffPresence.start_at >= window_start,
                    StaffPresence.end_at <= window_end,
                )
                .delete(synchronize_session=False)
            )
            self.db.flush()
            return int(deleted or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting segments for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to delete presence segments: {str(e)}")

    def get_segments_active_at(
        self, instant: datetime, user_ids: Optional[Sequence[str]] = None
    ) -> List[StaffPresence]:
        """Segments whose [start_at, end_at] contains the instant, latest start first."""
        query = self._build_query().filter(
            StaffPresence.start_at <= instant,
            StaffPresence.end_at >= instant,
        )
        if user_ids is not None:
            query = query.filter(StaffPresence.user_id.in_(list(user_ids)))
        query = self._apply_eager_loading(query).order_by(StaffPresence.start_at.desc())
        return self._execute_query(query)

    def create_segment(
        self,
        *,
        user_id: str,
        status_id: str,
        office_location_id: Optional[str],
        notes: Optional[str],
        start_at: datetime,
        end_at: datetime,
    ) -> StaffPresence:
        return self.create(
            user_id=user_id,
            status_id=status_id,
            office_location_id=office_location_id,
            notes=notes,
            start_at=start_at,
            end_at=end_at,
        )
