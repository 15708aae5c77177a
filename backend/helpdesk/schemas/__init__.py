# backend/helpdesk/schemas/__init__.py
"""Pydantic schemas for the presence API."""

from .presence import (
    CurrentPresenceResponse,
    CurrentPresencesResponse,
    DaySegmentResponse,
    DaySegmentsResponse,
    DeleteSegmentResponse,
    OfficeInfo,
    OfficeLocationCreate,
    OfficeLocationResponse,
    OfficeLocationUpdate,
    OfficeOption,
    PlanDayRequest,
    PlanDayResponse,
    PlannedSegmentResponse,
    PresenceOptionsResponse,
    SegmentInput,
    StatusInfo,
    StatusOption,
    StatusTypeCreate,
    StatusTypeResponse,
    StatusTypeUpdate,
    WeekDayResponse,
    WeekScheduleEntryResponse,
    WeekViewResponse,
)

__all__ = [
    "CurrentPresenceResponse",
    "CurrentPresencesResponse",
    "DaySegmentResponse",
    "DaySegmentsResponse",
    "DeleteSegmentResponse",
    "OfficeInfo",
    "OfficeLocationCreate",
    "OfficeLocationResponse",
    "OfficeLocationUpdate",
    "OfficeOption",
    "PlanDayRequest",
    "PlanDayResponse",
    "PlannedSegmentResponse",
    "PresenceOptionsResponse",
    "SegmentInput",
    "StatusInfo",
    "StatusOption",
    "StatusTypeCreate",
    "StatusTypeResponse",
    "StatusTypeUpdate",
    "WeekDayResponse",
    "WeekScheduleEntryResponse",
    "WeekViewResponse",
]
