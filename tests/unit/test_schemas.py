"""Tests for session_scheduler/models/schemas.py

Covers the create/update payload rules:
- title length
- start/end ordering, timezone-aware comparison
- participant count, email validity and de-duplication
- aggregated error message
"""

import pytest

from session_scheduler.errors import ValidationError
from session_scheduler.models.schemas import RecordingStatus, Session, validate_insert_event


def _payload(**overrides) -> dict:
    payload = {
        "title": "Geometry",
        "startTime": "2024-06-01T10:00",
        "endTime": "2024-06-01T11:00",
        "timezone": "UTC",
        "participants": [],
    }
    payload.update(overrides)
    return payload


# ─────────────────────────────────────────────────────────────────────────────
# Time Range
# ─────────────────────────────────────────────────────────────────────────────


class TestTimeRange:
    def test_end_after_start_passes(self):
        event = validate_insert_event(_payload())
        assert event.start_time == "2024-06-01T10:00"
        assert event.end_time == "2024-06-01T11:00"

    @pytest.mark.parametrize("end", ["2024-06-01T10:00", "2024-06-01T09:59", "2024-05-31T23:00"])
    def test_equal_or_inverted_times_fail_on_end_time(self, end):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(_payload(endTime=end))

        message = exc_info.value.message
        assert "End time must be after start time" in message
        assert "endTime" in message

    def test_naive_start_uses_event_timezone_against_aware_end(self):
        """10:00 in New York is 14:00Z, so 14:30Z is later."""
        event = validate_insert_event(
            _payload(startTime="2024-06-01T10:00", endTime="2024-06-01T14:30Z", timezone="America/New_York")
        )
        assert event.timezone == "America/New_York"

    def test_unparseable_time_fails(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(_payload(startTime="next tuesday"))
        assert "Start time is not a valid date and time" in exc_info.value.message

    def test_offset_and_seconds_are_accepted(self):
        event = validate_insert_event(_payload(startTime="2024-06-01T10:00:30+02:00", endTime="2024-06-01T11:00+02:00"))
        assert event.start_time == "2024-06-01T10:00:30+02:00"

    @pytest.mark.parametrize("field", ["startTime", "endTime"])
    def test_date_without_time_fails(self, field):
        payload = _payload(startTime="2024-06-01T00:00", endTime="2024-06-02T00:00")
        payload[field] = "2024-06-01" if field == "startTime" else "2024-06-02"

        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(payload)

        assert "must include a time of day" in exc_info.value.message

    def test_missing_end_time_fails(self):
        payload = _payload()
        del payload["endTime"]
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(payload)
        assert "endTime" in exc_info.value.message


# ─────────────────────────────────────────────────────────────────────────────
# Title / Timezone
# ─────────────────────────────────────────────────────────────────────────────


class TestTitleAndTimezone:
    def test_empty_title_fails(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(_payload(title=""))
        assert "Session title is required" in exc_info.value.message

    def test_title_of_100_chars_passes(self):
        assert validate_insert_event(_payload(title="x" * 100)).title == "x" * 100

    def test_title_of_101_chars_fails(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(_payload(title="x" * 101))
        assert "Title must be 100 characters or less" in exc_info.value.message

    def test_blank_timezone_fails(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(_payload(timezone=" "))
        assert "Timezone is required" in exc_info.value.message


# ─────────────────────────────────────────────────────────────────────────────
# Participants
# ─────────────────────────────────────────────────────────────────────────────


class TestParticipants:
    def test_six_valid_participants_pass(self):
        emails = [f"student{i}@school.org" for i in range(6)]
        assert validate_insert_event(_payload(participants=emails)).participants == emails

    def test_seven_participants_fail(self):
        emails = [f"student{i}@school.org" for i in range(7)]
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(_payload(participants=emails))
        assert "Maximum 6 participants allowed" in exc_info.value.message

    @pytest.mark.parametrize("position", [0, 2, 4])
    def test_one_malformed_address_fails(self, position):
        emails = [f"student{i}@school.org" for i in range(5)]
        emails[position] = "not-an-email"
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(_payload(participants=emails))
        assert "Invalid email address" in exc_info.value.message

    @pytest.mark.parametrize("entry", ["Tutor <a@school.org>", "<a@school.org>"])
    def test_display_name_form_fails(self, entry):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(_payload(participants=[entry]))
        assert f"Invalid email address: {entry}" in exc_info.value.message

    def test_surrounding_whitespace_is_trimmed(self):
        assert validate_insert_event(_payload(participants=[" a@school.org "])).participants == ["a@school.org"]

    def test_duplicates_are_dropped_case_insensitively(self):
        event = validate_insert_event(_payload(participants=["Ann@school.org", "ann@school.org", "bo@school.org"]))
        assert event.participants == ["Ann@school.org", "bo@school.org"]

    def test_participants_default_to_empty(self):
        payload = _payload()
        del payload["participants"]
        assert validate_insert_event(payload).participants == []


# ─────────────────────────────────────────────────────────────────────────────
# Aggregated Message / Serialization
# ─────────────────────────────────────────────────────────────────────────────


class TestMessagesAndSerialization:
    def test_all_problems_reported_together(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_insert_event(_payload(title="", timezone="", participants=["bad"]))

        message = exc_info.value.message
        assert message.startswith("Validation error: ")
        assert "Session title is required" in message
        assert "Timezone is required" in message
        assert "Invalid email address" in message

    def test_snake_case_names_are_accepted(self):
        event = validate_insert_event(
            {
                "title": "Geometry",
                "start_time": "2024-06-01T10:00",
                "end_time": "2024-06-01T11:00",
                "timezone": "UTC",
            }
        )
        assert event.end_time == "2024-06-01T11:00"

    def test_session_serializes_camel_case(self):
        session = Session(
            id="evt1",
            title="Geometry",
            start_time="2024-06-01T10:00:00",
            end_time="2024-06-01T11:00:00",
            meet_link="https://zoom.us/j/1",
        )
        data = session.model_dump(mode="json", by_alias=True)

        assert data["meetLink"] == "https://zoom.us/j/1"
        assert data["recordingStatus"] == RecordingStatus.NOT_AVAILABLE.value
        assert data["recordingUrl"] is None
