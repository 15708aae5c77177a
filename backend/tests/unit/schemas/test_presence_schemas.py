# backend/tests/unit/schemas/test_presence_schemas.py
"""Request/response schema tests for the presence API."""

from pydantic import ValidationError
import pytest

from helpdesk.schemas.presence import (
    DaySegmentResponse,
    PlanDayRequest,
    SegmentInput,
    StatusTypeCreate,
)


class TestSegmentInput:
    def test_accepts_from_alias_and_field_name(self):
        by_alias = SegmentInput.model_validate({"status_code": "REMOTE", "from": "09:00", "to": "10:00"})
        by_name = SegmentInput(status_code="REMOTE", from_="09:00", to="10:00")

        assert by_alias.from_ == by_name.from_ == "09:00"

    def test_blank_office_code_is_none(self):
        segment = SegmentInput.model_validate(
            {"status_code": "REMOTE", "office_code": "  ", "from": "09:00", "to": "10:00"}
        )

        assert segment.office_code is None

    @pytest.mark.parametrize("value", ["9:00", "24:00", "12:60", "noon", "12:00:00"])
    def test_rejects_malformed_times(self, value):
        with pytest.raises(ValidationError) as exc_info:
            SegmentInput.model_validate({"status_code": "REMOTE", "from": value, "to": "23:00"})

        assert "Invalid time format. Use HH:mm" in str(exc_info.value)

    def test_notes_length_limit(self):
        with pytest.raises(ValidationError):
            SegmentInput.model_validate(
                {"status_code": "REMOTE", "from": "09:00", "to": "10:00", "notes": "x" * 501}
            )

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            SegmentInput.model_validate(
                {"status_code": "REMOTE", "from": "09:00", "to": "10:00", "color": "red"}
            )


class TestPlanDayRequest:
    def _payload(self, **overrides):
        payload = {
            "date": "2025-01-20",
            "segments": [{"status_code": "REMOTE", "from": "09:00", "to": "17:00"}],
        }
        payload.update(overrides)
        return payload

    def test_valid_request(self):
        request = PlanDayRequest.model_validate(self._payload(repeat_until="2025-01-24"))

        assert request.repeat_until == "2025-01-24"
        assert request.user_id is None

    @pytest.mark.parametrize("value", ["2025-02-30", "2025-1-20", "20-01-2025"])
    def test_rejects_invalid_dates(self, value):
        with pytest.raises(ValidationError):
            PlanDayRequest.model_validate(self._payload(date=value))

    def test_rejects_invalid_repeat_until(self):
        with pytest.raises(ValidationError):
            PlanDayRequest.model_validate(self._payload(repeat_until="2025-13-01"))

    def test_requires_segments(self):
        with pytest.raises(ValidationError) as exc_info:
            PlanDayRequest.model_validate(self._payload(segments=[]))

        assert "At least one segment is required" in str(exc_info.value)


def test_day_segment_serializes_from_key():
    segment = DaySegmentResponse(
        id="01HZZZZZZZZZZZZZZZZZZZZZZZ",
        status_code="REMOTE",
        status_label="Remote",
        from_="09:00",
        to="12:00",
    )

    dumped = segment.model_dump(by_alias=True)

    assert dumped["from"] == "09:00"
    assert "from_" not in dumped


def test_status_color_must_be_hex():
    with pytest.raises(ValidationError):
        StatusTypeCreate(code="X", label="X", color="green")
