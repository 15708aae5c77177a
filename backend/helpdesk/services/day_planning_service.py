# backend/helpdesk/services/day_planning_service.py
"""
Day Planning Service.

Replaces a user's presence for one local day, or the same plan over a
range of days, inside a single transaction. Each day is a full
replacement: every segment lying inside the local-day window is deleted
and the requested set is inserted in its place.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import BusinessRuleException, PresenceValidationException
from ..core.timezone_utils import date_range, local_day_window, local_to_utc
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.presence_repository import PresenceSegmentRepository
from ..schemas.presence import PlanDayRequest
from .base import BaseService
from .presence_registry import OfficeSnapshot, PresenceRegistry, StatusSnapshot
from .presence_validation import ValidationError, errors_from_pydantic, validate_plan_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedSegment:
    """A freshly written segment with its catalog entries attached."""

    id: str
    date: str
    status_id: str
    office_location_id: Optional[str]
    notes: Optional[str]
    start_time: str
    end_time: str
    start_at: datetime
    end_at: datetime
    status: StatusSnapshot
    office_location: Optional[OfficeSnapshot]


class DayPlanningService(BaseService):
    """Writes day plans for staff presence."""

    def __init__(
        self,
        db: Session,
        registry: PresenceRegistry,
        repository: Optional[PresenceSegmentRepository] = None,
    ):
        super().__init__(db)
        self.registry = registry
        self.repository = repository or RepositoryFactory.create_presence_segment_repository(db)

    def _convert_times(
        self, plan: PlanDayRequest, dates: List[str], tz_name: Optional[str]
    ) -> Dict[str, List[Tuple[datetime, datetime]]]:
        """
        UTC bounds of every segment on every planned day.

        A range that is valid on the wall clock can collapse or run backwards
        when it sits in a spring-forward gap; those are reported against the
        segment's end time.
        """
        instants: Dict[str, List[Tuple[datetime, datetime]]] = {}
        errors: List[ValidationError] = []
        for day in dates:
            bounds = []
            for index, segment in enumerate(plan.segments):
                start_at = local_to_utc(day, segment.from_, tz_name)
                end_at = local_to_utc(day, segment.to, tz_name)
                if end_at <= start_at:
                    errors.append(
                        ValidationError(
                            f"segments[{index}].to",
                            f"Time range {segment.from_}–{segment.to} does not exist on "
                            f"{day} because of a daylight saving time change",
                        )
                    )
                bounds.append((start_at, end_at))
            instants[day] = bounds
        if errors:
            prometheus_metrics.record_validation_failure("business")
            raise PresenceValidationException(errors)
        return instants

    def _coerce_request(
        self, request: Union[PlanDayRequest, Mapping[str, Any]]
    ) -> PlanDayRequest:
        if isinstance(request, PlanDayRequest):
            return request
        try:
            return PlanDayRequest.model_validate(dict(request))
        except PydanticValidationError as exc:
            prometheus_metrics.record_validation_failure("schema")
            raise PresenceValidationException(errors_from_pydantic(exc)) from exc

    @BaseService.measure_operation("plan_day")
    def plan_day(
        self,
        user_id: str,
        request: Union[PlanDayRequest, Mapping[str, Any]],
        *,
        tz_name: Optional[str] = None,
        all_days: bool = False,
    ) -> List[PlannedSegment]:
        """
        Replace the user's segments on ``request.date`` (through
        ``request.repeat_until`` when given) with ``request.segments``.

        Args:
            user_id: Owner of the plan
            request: Parsed request, or a raw mapping to parse
            tz_name: Timezone the dates and times are expressed in
            all_days: Return every day's segments instead of only the first day's

        Returns:
            Created segments ordered by day, then by request order

        Raises:
            PresenceValidationException: Schema or business rule violations
            BusinessRuleException: A catalog entry vanished mid-transaction
        """
        plan = self._coerce_request(request)
        lookup = self.registry.lookup(self.db)

        errors = validate_plan_day(plan, lookup)
        if errors:
            prometheus_metrics.record_validation_failure("business")
            self.logger.info(
                "Plan for %s on %s rejected with %d error(s)", user_id, plan.date, len(errors)
            )
            raise PresenceValidationException(errors)

        dates = date_range(plan.date, plan.repeat_until)
        max_days = settings.presence_max_range_days
        if len(dates) > max_days:
            prometheus_metrics.record_validation_failure("range")
            raise PresenceValidationException(
                [ValidationError("repeat_until", f"Cannot plan more than {max_days} days at once")]
            )
        instants = self._convert_times(plan, dates, tz_name)

        self.log_operation(
            "plan_day",
            user_id=user_id,
            date=plan.date,
            repeat_until=plan.repeat_until,
            days=len(dates),
            segments=len(plan.segments),
        )

        planned: List[PlannedSegment] = []
        with self.transaction():
            for day in dates:
                window = local_day_window(day, tz_name)
                removed = self.repository.delete_segments_in_window(
                    user_id, window.start, window.end
                )
                self.logger.debug("Cleared %d segment(s) for %s on %s", removed, user_id, day)

                for segment, (start_at, end_at) in zip(plan.segments, instants[day]):
                    status = lookup.resolve_status(segment.status_code)
                    if status is None:
                        raise BusinessRuleException(
                            f'Status "{segment.status_code}" not found or inactive'
                        )
                    office = None
                    if segment.office_code:
                        office = lookup.resolve_office(segment.office_code)
                        if office is None:
                            raise BusinessRuleException(
                                f'Office "{segment.office_code}" not found or inactive'
                            )

                    row = self.repository.create_segment(
                        user_id=user_id,
                        status_id=status.id,
                        office_location_id=office.id if office else None,
                        notes=segment.notes,
                        start_at=start_at,
                        end_at=end_at,
                    )
                    planned.append(
                        PlannedSegment(
                            id=row.id,
                            date=day,
                            status_id=status.id,
                            office_location_id=office.id if office else None,
                            notes=segment.notes,
                            start_time=segment.from_,
                            end_time=segment.to,
                            start_at=row.start_at,
                            end_at=row.end_at,
                            status=status,
                            office_location=office,
                        )
                    )

        prometheus_metrics.record_days_planned(len(dates))
        if all_days:
            return planned
        return [segment for segment in planned if segment.date == dates[0]]


__all__ = ["DayPlanningService", "PlannedSegment"]
