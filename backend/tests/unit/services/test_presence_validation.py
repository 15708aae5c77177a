# backend/tests/unit/services/test_presence_validation.py
"""
Unit tests for the presence validation engine.

Catalog lookups are served by an in-memory fake so these tests exercise the
rules alone.
"""

from typing import Dict, Optional

from pydantic import ValidationError as PydanticValidationError
import pytest

from helpdesk.schemas.presence import PlanDayRequest, SegmentInput
from helpdesk.services.presence_registry import OfficeSnapshot, StatusSnapshot
from helpdesk.services.presence_validation import (
    MIDNIGHT_MESSAGE,
    ValidationError,
    calculate_remaining_minutes,
    calculate_total_minutes,
    errors_from_pydantic,
    format_duration,
    ranges_overlap,
    time_to_minutes,
    validate_plan_day,
    validate_segments,
)


class FakeLookup:
    def __init__(self) -> None:
        self.statuses: Dict[str, StatusSnapshot] = {
            "AVAILABLE": StatusSnapshot(
                id="st-available",
                code="AVAILABLE",
                label="Available",
                category="presence",
                requires_office=True,
                color="#22c55e",
                icon="Check",
            ),
            "REMOTE": StatusSnapshot(
                id="st-remote",
                code="REMOTE",
                label="Remote",
                category="presence",
                requires_office=False,
                color=None,
                icon=None,
            ),
        }
        self.offices: Dict[str, OfficeSnapshot] = {
            "NEWPORT_BEACH": OfficeSnapshot(id="of-nb", code="NEWPORT_BEACH", name="Newport Beach")
        }

    def resolve_status(self, code: str) -> Optional[StatusSnapshot]:
        return self.statuses.get(code)

    def resolve_office(self, code: str) -> Optional[OfficeSnapshot]:
        return self.offices.get(code)


def seg(status_code: str, from_: str, to: str, office_code: Optional[str] = None) -> SegmentInput:
    return SegmentInput.model_validate(
        {"status_code": status_code, "office_code": office_code, "from": from_, "to": to}
    )


@pytest.fixture
def lookup() -> FakeLookup:
    return FakeLookup()


class TestDailyCap:
    def test_exactly_480_minutes_is_accepted(self, lookup):
        assert validate_segments([seg("REMOTE", "09:00", "17:00")], lookup, max_day_minutes=480) == []

    def test_481_minutes_is_rejected(self, lookup):
        errors = validate_segments([seg("REMOTE", "09:00", "17:01")], lookup, max_day_minutes=480)

        assert errors == [
            ValidationError("segments", "Total duration 8.0h exceeds daily cap of 8.0h")
        ]

    def test_cap_sums_across_segments(self, lookup):
        segments = [seg("REMOTE", "06:00", "11:00"), seg("REMOTE", "12:00", "16:30")]

        errors = validate_segments(segments, lookup, max_day_minutes=480)

        assert [e.field for e in errors] == ["segments"]
        assert errors[0].message == "Total duration 9.5h exceeds daily cap of 8.0h"


class TestOverlap:
    def test_adjacent_segments_do_not_overlap(self, lookup):
        segments = [
            seg("REMOTE", "09:00", "12:00"),
            seg("AVAILABLE", "12:00", "17:00", office_code="NEWPORT_BEACH"),
        ]

        assert validate_segments(segments, lookup, max_day_minutes=480) == []

    def test_partial_overlap_names_earlier_segment(self, lookup):
        segments = [seg("REMOTE", "09:00", "12:00"), seg("REMOTE", "11:00", "15:00")]

        errors = validate_segments(segments, lookup, max_day_minutes=480)

        assert errors == [ValidationError("segments[1]", "Overlaps with segment 1 (09:00–12:00)")]

    def test_contained_segment_overlaps(self, lookup):
        segments = [seg("REMOTE", "09:00", "15:00"), seg("REMOTE", "10:00", "11:00")]

        errors = validate_segments(segments, lookup, max_day_minutes=480)

        assert [e.field for e in errors] == ["segments[1]"]

    def test_every_overlapping_pair_is_reported(self, lookup):
        segments = [
            seg("REMOTE", "09:00", "10:00"),
            seg("REMOTE", "09:30", "10:30"),
            seg("REMOTE", "09:45", "11:00"),
        ]

        errors = validate_segments(segments, lookup, max_day_minutes=480)

        assert [(e.field, e.message) for e in errors] == [
            ("segments[1]", "Overlaps with segment 1 (09:00–10:00)"),
            ("segments[2]", "Overlaps with segment 1 (09:00–10:00)"),
            ("segments[2]", "Overlaps with segment 2 (09:30–10:30)"),
        ]


class TestMidnightCrossing:
    def test_crossing_midnight_is_rejected(self, lookup):
        errors = validate_segments([seg("REMOTE", "22:00", "02:00")], lookup)

        assert errors == [ValidationError("segments[0].to", MIDNIGHT_MESSAGE)]

    def test_zero_duration_is_rejected(self, lookup):
        errors = validate_segments([seg("REMOTE", "09:00", "09:00")], lookup)

        assert errors == [ValidationError("segments[0].to", MIDNIGHT_MESSAGE)]

    def test_crossing_segment_skips_status_and_overlap_checks(self, lookup):
        segments = [seg("NOPE", "22:00", "08:00"), seg("REMOTE", "07:00", "09:00")]

        errors = validate_segments(segments, lookup, max_day_minutes=480)

        assert errors == [ValidationError("segments[0].to", MIDNIGHT_MESSAGE)]


class TestCatalogRules:
    def test_office_required_when_status_requires_it(self, lookup):
        errors = validate_segments([seg("AVAILABLE", "09:00", "12:00")], lookup)

        assert errors == [
            ValidationError(
                "segments[0].office_code", 'Status "Available" requires an office location'
            )
        ]

    def test_office_optional_for_other_statuses(self, lookup):
        assert validate_segments([seg("REMOTE", "09:00", "12:00")], lookup) == []

    def test_unknown_status(self, lookup):
        errors = validate_segments(
            [seg("NOPE", "09:00", "12:00", office_code="ATLANTIS")], lookup
        )

        assert errors == [
            ValidationError("segments[0].status_code", 'Status "NOPE" not found or inactive')
        ]

    def test_unknown_office(self, lookup):
        errors = validate_segments(
            [seg("AVAILABLE", "09:00", "12:00", office_code="ATLANTIS")], lookup
        )

        assert errors == [
            ValidationError("segments[0].office_code", 'Office "ATLANTIS" not found or inactive')
        ]

    def test_unknown_status_still_counts_towards_overlap(self, lookup):
        segments = [seg("NOPE", "09:00", "12:00"), seg("REMOTE", "11:00", "13:00")]

        errors = validate_segments(segments, lookup)

        assert [e.field for e in errors] == ["segments[0].status_code", "segments[1]"]


class TestFormatBackstop:
    def test_malformed_times_are_reported_and_skipped(self, lookup):
        bad = SegmentInput.model_construct(
            status_code="REMOTE", office_code=None, from_="9:00", to="25:00", notes=None
        )

        errors = validate_segments([bad, seg("REMOTE", "09:00", "12:00")], lookup)

        assert errors == [
            ValidationError("segments[0].from", "Invalid time format. Use HH:mm"),
            ValidationError("segments[0].to", "Invalid time format. Use HH:mm"),
        ]


class TestPlanDayValidation:
    def _request(self, **overrides) -> PlanDayRequest:
        payload = {
            "date": "2025-01-20",
            "segments": [{"status_code": "REMOTE", "from": "09:00", "to": "17:00"}],
        }
        payload.update(overrides)
        return PlanDayRequest.model_validate(payload)

    def test_valid_repeat_range(self, lookup):
        request = self._request(repeat_until="2025-02-19")

        assert validate_plan_day(request, lookup, max_range_days=30) == []

    def test_repeat_until_before_date(self, lookup):
        request = self._request(repeat_until="2025-01-19")

        errors = validate_plan_day(request, lookup, max_range_days=30)

        assert errors == [ValidationError("repeat_until", "End date must be after start date")]

    def test_repeat_range_too_long(self, lookup):
        request = self._request(repeat_until="2025-02-20")

        errors = validate_plan_day(request, lookup, max_range_days=30)

        assert errors == [ValidationError("repeat_until", "Range cannot exceed 30 days")]

    def test_all_errors_reported_together(self, lookup):
        request = self._request(
            repeat_until="2025-01-01",
            segments=[
                {"status_code": "AVAILABLE", "from": "09:00", "to": "12:00"},
                {"status_code": "REMOTE", "from": "11:00", "to": "20:00"},
            ],
        )

        errors = validate_plan_day(request, lookup, max_day_minutes=480, max_range_days=30)

        assert [e.field for e in errors] == [
            "segments[0].office_code",
            "segments[1]",
            "segments",
            "repeat_until",
        ]


class TestSchemaErrorTranslation:
    def test_field_paths_and_messages(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            PlanDayRequest.model_validate(
                {
                    "date": "2025-02-30",
                    "segments": [{"status_code": "REMOTE", "from": "9:00", "to": "12:00"}],
                }
            )

        errors = errors_from_pydantic(exc_info.value)

        assert ValidationError("date", "Invalid date format. Use YYYY-MM-DD") in errors
        assert ValidationError("segments[0].from", "Invalid time format. Use HH:mm") in errors

    def test_empty_segment_list(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            PlanDayRequest.model_validate({"date": "2025-01-20", "segments": []})

        assert errors_from_pydantic(exc_info.value) == [
            ValidationError("segments", "At least one segment is required")
        ]


class TestHelpers:
    def test_time_to_minutes(self):
        assert time_to_minutes("00:00") == 0
        assert time_to_minutes("09:30") == 570
        assert time_to_minutes("23:59") == 1439

    def test_totals_and_remaining(self):
        segments = [seg("REMOTE", "09:00", "12:00"), seg("REMOTE", "13:00", "14:30")]

        assert calculate_total_minutes(segments) == 270
        assert calculate_remaining_minutes(segments, max_day_minutes=480) == 210
        assert calculate_remaining_minutes(segments, max_day_minutes=200) == 0

    @pytest.mark.parametrize(
        "minutes,expected", [(480, "8h"), (30, "30m"), (90, "1h 30m"), (0, "0m")]
    )
    def test_format_duration(self, minutes, expected):
        assert format_duration(minutes) == expected

    def test_ranges_overlap_is_half_open(self):
        assert ranges_overlap(540, 720, 660, 900)
        assert not ranges_overlap(540, 720, 720, 1020)
