# backend/helpdesk/services/presence_validation.py
"""
Presence validation engine.

Pure rule checks over one day's planned segments. Every applicable problem
is collected and returned together as ``ValidationError`` entries tagged
with the request field they belong to; nothing here touches the database
except through the ``CatalogLookup`` it is handed.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from ..core.config import settings
from ..core.constants import TIME_REGEX
from ..core.timezone_utils import crosses_midnight, parse_local_date
from ..schemas.presence import INVALID_TIME_MESSAGE, PlanDayRequest, SegmentInput
from .presence_registry import CatalogLookup

MIDNIGHT_MESSAGE = "Time range cannot cross midnight. End time must be after start time."


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for an "HH:mm" string."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def calculate_duration(from_: str, to: str) -> int:
    return time_to_minutes(to) - time_to_minutes(from_)


def calculate_total_minutes(segments: Sequence[SegmentInput]) -> int:
    return sum(calculate_duration(s.from_, s.to) for s in segments)


def calculate_remaining_minutes(
    segments: Sequence[SegmentInput], max_day_minutes: Optional[int] = None
) -> int:
    cap = settings.presence_max_day_minutes if max_day_minutes is None else max_day_minutes
    return max(0, cap - calculate_total_minutes(segments))


def format_duration(minutes: int) -> str:
    """Render minutes as "8h", "30m" or "1h 30m"."""
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def ranges_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # Half-open: touching ranges do not overlap
    return a_start < b_end and b_start < a_end


def validate_segments(
    segments: Sequence[SegmentInput],
    lookup: CatalogLookup,
    *,
    max_day_minutes: Optional[int] = None,
) -> List[ValidationError]:
    """
    Check one day's segments.

    Per segment, in order: time format, midnight crossing, status, office
    requirement, office existence. A segment failing format or midnight
    checks is left out of the overlap and cap arithmetic. Overlap and cap
    checks then run across all remaining segments.

    Args:
        segments: Planned segments for a single local day
        lookup: Catalog resolver (usually the registry bound to a session)
        max_day_minutes: Daily cap override

    Returns:
        All errors found; empty when the plan is valid
    """
    cap = settings.presence_max_day_minutes if max_day_minutes is None else max_day_minutes
    errors: List[ValidationError] = []
    timed: List[tuple] = []

    for i, segment in enumerate(segments):
        prefix = f"segments[{i}]"

        bad_format = False
        if not TIME_REGEX.match(segment.from_ or ""):
            errors.append(ValidationError(f"{prefix}.from", INVALID_TIME_MESSAGE))
            bad_format = True
        if not TIME_REGEX.match(segment.to or ""):
            errors.append(ValidationError(f"{prefix}.to", INVALID_TIME_MESSAGE))
            bad_format = True
        if bad_format:
            continue

        if crosses_midnight(segment.from_, segment.to):
            errors.append(ValidationError(f"{prefix}.to", MIDNIGHT_MESSAGE))
            continue

        timed.append(
            (i, segment, time_to_minutes(segment.from_), time_to_minutes(segment.to))
        )

        status = lookup.resolve_status(segment.status_code)
        if status is None:
            errors.append(
                ValidationError(
                    f"{prefix}.status_code",
                    f'Status "{segment.status_code}" not found or inactive',
                )
            )
            continue

        if status.requires_office and not segment.office_code:
            errors.append(
                ValidationError(
                    f"{prefix}.office_code",
                    f'Status "{status.label}" requires an office location',
                )
            )

        if segment.office_code and lookup.resolve_office(segment.office_code) is None:
            errors.append(
                ValidationError(
                    f"{prefix}.office_code",
                    f'Office "{segment.office_code}" not found or inactive',
                )
            )

    for a in range(len(timed)):
        i, first, first_start, first_end = timed[a]
        for b in range(a + 1, len(timed)):
            j, _second, second_start, second_end = timed[b]
            if ranges_overlap(first_start, first_end, second_start, second_end):
                errors.append(
                    ValidationError(
                        f"segments[{j}]",
                        f"Overlaps with segment {i + 1} ({first.from_}–{first.to})",
                    )
                )

    total = sum(end - start for _, _, start, end in timed)
    if total > cap:
        errors.append(
            ValidationError(
                "segments",
                f"Total duration {total / 60:.1f}h exceeds daily cap of {cap / 60:.1f}h",
            )
        )

    return errors


def validate_repeat_range(
    date_str: str, repeat_until: str, *, max_range_days: Optional[int] = None
) -> List[ValidationError]:
    max_days = settings.presence_max_range_days if max_range_days is None else max_range_days
    start = parse_local_date(date_str)
    end = parse_local_date(repeat_until)

    errors: List[ValidationError] = []
    if end < start:
        errors.append(ValidationError("repeat_until", "End date must be after start date"))
    if end > start + timedelta(days=max_days):
        errors.append(ValidationError("repeat_until", f"Range cannot exceed {max_days} days"))
    return errors


def validate_plan_day(
    request: PlanDayRequest,
    lookup: CatalogLookup,
    *,
    max_day_minutes: Optional[int] = None,
    max_range_days: Optional[int] = None,
) -> List[ValidationError]:
    """Segment rules plus repeat-range rules, reported together."""
    errors = validate_segments(request.segments, lookup, max_day_minutes=max_day_minutes)
    if request.repeat_until:
        errors.extend(
            validate_repeat_range(
                request.date, request.repeat_until, max_range_days=max_range_days
            )
        )
    return errors


def _field_path(loc: Sequence[Any]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif part == "from_":
            path += ".from" if path else "from"
        else:
            path += f".{part}" if path else str(part)
    return path


def errors_from_pydantic(exc: PydanticValidationError) -> List[ValidationError]:
    """Translate schema errors into the same field/message shape."""
    errors: List[ValidationError] = []
    for item in exc.errors():
        message = str(item.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        errors.append(ValidationError(_field_path(item.get("loc", ())) or "body", message))
    return errors


__all__ = [
    "MIDNIGHT_MESSAGE",
    "ValidationError",
    "calculate_duration",
    "calculate_remaining_minutes",
    "calculate_total_minutes",
    "errors_from_pydantic",
    "format_duration",
    "ranges_overlap",
    "time_to_minutes",
    "validate_plan_day",
    "validate_repeat_range",
    "validate_segments",
]
