# backend/helpdesk/schemas/presence.py
"""
Presence schemas.

Request models enforce the input shape (date/time formats, non-empty
segment list, note length). Business rules such as overlaps and the daily
cap are checked by the validation engine afterwards.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.constants import (
    CODE_MAX_LENGTH,
    COLOR_PATTERN,
    DATE_REGEX,
    LABEL_MAX_LENGTH,
    NOTES_MAX_LENGTH,
    TIME_REGEX,
)
from ..core.timezone_utils import parse_local_date
from ._strict_base import StrictRequestModel

INVALID_TIME_MESSAGE = "Invalid time format. Use HH:mm"
INVALID_DATE_MESSAGE = "Invalid date format. Use YYYY-MM-DD"


def _check_local_date(value: str) -> str:
    if not DATE_REGEX.match(value):
        raise ValueError(INVALID_DATE_MESSAGE)
    try:
        parse_local_date(value)
    except ValueError:
        raise ValueError(INVALID_DATE_MESSAGE) from None
    return value


# ----- Requests -----


class SegmentInput(StrictRequestModel):
    """One planned block on a local day, in "HH:mm" wall-clock times."""

    status_code: str = Field(..., description="Status catalog code")
    office_code: Optional[str] = Field(None, description="Office catalog code")
    from_: str = Field(..., alias="from", description="Local start time HH:mm")
    to: str = Field(..., description="Local end time HH:mm")
    notes: Optional[str] = Field(None, max_length=NOTES_MAX_LENGTH)

    @field_validator("status_code")
    @classmethod
    def _status_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Status code is required")
        return v.strip()

    @field_validator("office_code")
    @classmethod
    def _blank_office_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("from_", "to")
    @classmethod
    def _strict_time(cls, v: str) -> str:
        if not TIME_REGEX.match(v):
            raise ValueError(INVALID_TIME_MESSAGE)
        return v


class PlanDayRequest(StrictRequestModel):
    """Plan one local day, optionally repeated through ``repeat_until``."""

    user_id: Optional[str] = Field(
        None, description="Target user; only administrators may plan for someone else"
    )
    date: str = Field(..., description="Local date YYYY-MM-DD")
    segments: List[SegmentInput]
    repeat_until: Optional[str] = Field(None, description="Inclusive last local date")

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "date": "2025-01-20",
                "segments": [
                    {"status_code": "REMOTE", "from": "09:00", "to": "12:00"},
                    {
                        "status_code": "AVAILABLE",
                        "office_code": "NEWPORT_BEACH",
                        "from": "12:00",
                        "to": "17:00",
                    },
                ],
                "repeat_until": "2025-01-24",
            }
        },
    )

    @field_validator("date")
    @classmethod
    def _valid_date(cls, v: str) -> str:
        return _check_local_date(v)

    @field_validator("repeat_until")
    @classmethod
    def _valid_repeat_until(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return _check_local_date(v)

    @field_validator("segments")
    @classmethod
    def _at_least_one(cls, v: List[SegmentInput]) -> List[SegmentInput]:
        if not v:
            raise ValueError("At least one segment is required")
        return v


class StatusTypeCreate(StrictRequestModel):
    code: str = Field(..., min_length=1, max_length=CODE_MAX_LENGTH)
    label: str = Field(..., min_length=1, max_length=LABEL_MAX_LENGTH)
    category: str = Field("presence", max_length=50)
    requires_office: bool = False
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    icon: Optional[str] = Field(None, max_length=50)
    is_active: bool = True


class StatusTypeUpdate(StrictRequestModel):
    id: str
    label: Optional[str] = Field(None, min_length=1, max_length=LABEL_MAX_LENGTH)
    category: Optional[str] = Field(None, max_length=50)
    requires_office: Optional[bool] = None
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    icon: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None


class OfficeLocationCreate(StrictRequestModel):
    code: str = Field(..., min_length=1, max_length=CODE_MAX_LENGTH)
    name: str = Field(..., min_length=1, max_length=LABEL_MAX_LENGTH)
    is_active: bool = True


class OfficeLocationUpdate(StrictRequestModel):
    id: str
    name: Optional[str] = Field(None, min_length=1, max_length=LABEL_MAX_LENGTH)
    is_active: Optional[bool] = None


# ----- Responses -----


class StatusInfo(BaseModel):
    code: str
    label: str
    requires_office: bool
    color: Optional[str] = None
    icon: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class OfficeInfo(BaseModel):
    code: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class PlannedSegmentResponse(BaseModel):
    """A segment written by plan-day, enriched with catalog data."""

    id: str
    date: str
    status_id: str
    office_location_id: Optional[str] = None
    notes: Optional[str] = None
    start_time: str
    end_time: str
    status: StatusInfo
    office_location: Optional[OfficeInfo] = None

    model_config = ConfigDict(from_attributes=True)


class PlanDayResponse(BaseModel):
    success: bool = True
    date: str
    segments: List[PlannedSegmentResponse]


class DaySegmentResponse(BaseModel):
    """A stored segment projected to local time."""

    id: str
    status_code: str
    status_label: str
    status_color: Optional[str] = None
    status_icon: Optional[str] = None
    office_code: Optional[str] = None
    office_name: Optional[str] = None
    from_: str = Field(..., serialization_alias="from")
    to: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DaySegmentsResponse(BaseModel):
    date: str
    segments: List[DaySegmentResponse]


class WeekScheduleEntryResponse(BaseModel):
    id: str
    status: str
    type: str
    time_range: str
    location: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class WeekDayResponse(BaseModel):
    date: str
    day_of_week: str
    month: str
    day_number: int
    schedules: List[WeekScheduleEntryResponse]

    model_config = ConfigDict(from_attributes=True)


class WeekViewResponse(BaseModel):
    days: List[WeekDayResponse]


class CurrentPresenceResponse(BaseModel):
    user_id: str
    status: str
    status_code: str
    office_location: Optional[str] = None
    notes: Optional[str] = None
    start_at: datetime
    end_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentPresencesResponse(BaseModel):
    presences: List[CurrentPresenceResponse]


class StatusOption(BaseModel):
    code: str
    label: str
    color: Optional[str] = None
    icon: Optional[str] = None
    requires_office: bool


class OfficeOption(BaseModel):
    code: str
    name: str


class PresenceOptionsResponse(BaseModel):
    statuses: List[StatusOption]
    offices: List[OfficeOption]


class StatusTypeResponse(BaseModel):
    id: str
    code: str
    label: str
    category: str
    requires_office: bool
    color: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class OfficeLocationResponse(BaseModel):
    id: str
    code: str
    name: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class DeleteSegmentResponse(BaseModel):
    success: bool = True
    id: str
