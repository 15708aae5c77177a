# backend/helpdesk/services/presence_query_service.py
"""
Presence Query Service.

Read paths over stored segments (single day, week view, who is in right
now) plus the owner-checked single segment delete.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.constants import WEEK_SCHEDULE_TYPE
from ..core.exceptions import (
    NotFoundException,
    PresenceValidationException,
    SegmentOwnershipException,
)
from ..core.timezone_utils import (
    ensure_utc,
    format_local_date,
    local_day_window,
    local_today,
    parse_local_date,
    utc_to_local_date,
    utc_to_local_time,
)
from ..models.presence import StaffPresence
from ..repositories.factory import RepositoryFactory
from ..repositories.presence_repository import PresenceSegmentRepository
from ..schemas.presence import INVALID_DATE_MESSAGE
from .base import BaseService
from .presence_validation import ValidationError

logger = logging.getLogger(__name__)

WEEK_LENGTH_DAYS = 7


def _parse_date(value: str, field_name: str) -> date:
    try:
        return parse_local_date(value)
    except ValueError:
        raise PresenceValidationException(
            [ValidationError(field_name, INVALID_DATE_MESSAGE)], message="Invalid date"
        ) from None


@dataclass(frozen=True)
class DaySegment:
    id: str
    status_code: str
    status_label: str
    status_color: Optional[str]
    status_icon: Optional[str]
    office_code: Optional[str]
    office_name: Optional[str]
    from_: str
    to: str
    notes: Optional[str]
    created_at: Optional[datetime]


@dataclass(frozen=True)
class WeekScheduleEntry:
    id: str
    status: str
    type: str
    time_range: str
    location: Optional[str]
    notes: Optional[str]


@dataclass
class WeekDay:
    date: str
    day_of_week: str
    month: str
    day_number: int
    schedules: List[WeekScheduleEntry] = field(default_factory=list)


@dataclass(frozen=True)
class CurrentPresence:
    user_id: str
    status: str
    status_code: str
    office_location: Optional[str]
    notes: Optional[str]
    start_at: datetime
    end_at: datetime


class PresenceQueryService(BaseService):
    """Day, week and current-presence projections of stored segments."""

    def __init__(self, db: Session, repository: Optional[PresenceSegmentRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_presence_segment_repository(db)

    @BaseService.measure_operation("get_day")
    def get_day(
        self, user_id: str, date_str: str, *, tz_name: Optional[str] = None
    ) -> List[DaySegment]:
        """
        Get a user's segments for one local day, earliest first.

        Args:
            user_id: Segment owner
            date_str: Local date "YYYY-MM-DD"
            tz_name: Timezone of the date (defaults to the configured one)
        """
        _parse_date(date_str, "date")
        window = local_day_window(date_str, tz_name)
        rows = self.repository.get_segments_in_window(user_id, window.start, window.end)
        return [self._to_day_segment(row, tz_name) for row in rows]

    @BaseService.measure_operation("get_week_view")
    def get_week_view(
        self,
        user_id: str,
        start_date: Optional[str] = None,
        *,
        tz_name: Optional[str] = None,
    ) -> List[WeekDay]:
        """
        Seven consecutive local days starting at ``start_date`` (today by default).

        One range query covers the whole week; segments are bucketed by the
        local date their start instant falls on.
        """
        first = _parse_date(start_date, "start_date") if start_date else local_today(tz_name)
        days = [first + timedelta(days=offset) for offset in range(WEEK_LENGTH_DAYS)]

        week: Dict[str, WeekDay] = {}
        for day in days:
            key = format_local_date(day)
            week[key] = WeekDay(
                date=key,
                day_of_week=day.strftime("%A"),
                month=day.strftime("%b"),
                day_number=day.day,
            )

        range_start = local_day_window(format_local_date(days[0]), tz_name).start
        range_end = local_day_window(format_local_date(days[-1]), tz_name).end
        rows = self.repository.get_segments_in_window(user_id, range_start, range_end)

        for row in rows:
            bucket = week.get(utc_to_local_date(row.start_at, tz_name))
            if bucket is None:
                continue
            bucket.schedules.append(self._to_schedule_entry(row, tz_name))

        return list(week.values())

    @BaseService.measure_operation("get_current_presences")
    def get_current_presences(
        self,
        user_ids: Optional[Sequence[str]] = None,
        *,
        now: Optional[datetime] = None,
    ) -> List[CurrentPresence]:
        """
        One entry per user whose segment covers ``now``.

        When a user has several covering segments the one that started
        latest wins.
        """
        if user_ids is not None and len(user_ids) == 0:
            return []

        instant = ensure_utc(now) if now else datetime.now(timezone.utc)
        rows = self.repository.get_segments_active_at(instant, user_ids)

        seen = set()
        presences: List[CurrentPresence] = []
        for row in rows:
            if row.user_id in seen:
                continue
            seen.add(row.user_id)
            presences.append(
                CurrentPresence(
                    user_id=row.user_id,
                    status=row.status.label,
                    status_code=row.status.code,
                    office_location=row.office_location.name if row.office_location else None,
                    notes=row.notes,
                    start_at=ensure_utc(row.start_at),
                    end_at=ensure_utc(row.end_at),
                )
            )
        return presences

    @BaseService.measure_operation("delete_segment")
    def delete_segment(self, user_id: str, segment_id: str) -> None:
        """
        Delete one of the caller's own segments.

        Raises:
            NotFoundException: No segment with that id
            SegmentOwnershipException: The segment belongs to someone else
        """
        segment = self.repository.get_by_id(segment_id, load_relationships=False)
        if segment is None:
            raise NotFoundException("Segment not found", code="SEGMENT_NOT_FOUND")
        if segment.user_id != user_id:
            self.logger.warning(
                "User %s attempted to delete segment %s owned by %s",
                user_id,
                segment_id,
                segment.user_id,
            )
            raise SegmentOwnershipException(segment_id)

        with self.transaction():
            self.repository.delete(segment_id)

        self.log_operation("delete_segment", user_id=user_id, segment_id=segment_id)

    @staticmethod
    def _to_day_segment(row: StaffPresence, tz_name: Optional[str]) -> DaySegment:
        office = row.office_location
        return DaySegment(
            id=row.id,
            status_code=row.status.code,
            status_label=row.status.label,
            status_color=row.status.color,
            status_icon=row.status.icon,
            office_code=office.code if office else None,
            office_name=office.name if office else None,
            from_=utc_to_local_time(row.start_at, tz_name),
            to=utc_to_local_time(row.end_at, tz_name),
            notes=row.notes,
            created_at=ensure_utc(row.created_at) if row.created_at else None,
        )

    @staticmethod
    def _to_schedule_entry(row: StaffPresence, tz_name: Optional[str]) -> WeekScheduleEntry:
        office_name = row.office_location.name if row.office_location else None
        label = f"{row.status.label} - {office_name}" if office_name else row.status.label
        time_range = (
            f"{utc_to_local_time(row.start_at, tz_name)} - {utc_to_local_time(row.end_at, tz_name)}"
        )
        return WeekScheduleEntry(
            id=row.id,
            status=label,
            type=WEEK_SCHEDULE_TYPE,
            time_range=time_range,
            location=office_name,
            notes=row.notes,
        )


__all__ = [
    "CurrentPresence",
    "DaySegment",
    "PresenceQueryService",
    "WeekDay",
    "WeekScheduleEntry",
]
