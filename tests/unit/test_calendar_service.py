"""Tests for session_scheduler/services/calendar_service.py and drive_service.py

The googleapiclient resource is a MagicMock; failures are real HttpError
instances so the status mapping is exercised end to end.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError

from session_scheduler.errors import AuthError, NotFoundError, UpstreamError
from session_scheduler.services.calendar_service import CalendarService, MockCalendarService, execute
from session_scheduler.services.drive_service import DriveService


def _http_error(status: int, message: str = "backendError") -> HttpError:
    resp = SimpleNamespace(status=status, reason=message)
    content = ('{"error": {"code": %d, "message": "%s"}}' % (status, message)).encode()
    return HttpError(resp, content)


def _request(result=None, error=None) -> MagicMock:
    request = MagicMock()
    if error is not None:
        request.execute.side_effect = error
    else:
        request.execute.return_value = result
    return request


# ─────────────────────────────────────────────────────────────────────────────
# Error Mapping
# ─────────────────────────────────────────────────────────────────────────────


class TestExecute:
    def test_success_returns_body(self):
        assert execute(_request({"id": "evt1"}), "get_event") == {"id": "evt1"}

    @pytest.mark.parametrize("status", [404, 410])
    def test_missing_event_is_not_found(self, status):
        with pytest.raises(NotFoundError, match="evt1"):
            execute(_request(error=_http_error(status, "Not Found")), "get_event", event_id="evt1")

    def test_404_without_event_is_upstream(self):
        with pytest.raises(UpstreamError) as exc_info:
            execute(_request(error=_http_error(404, "Not Found")), "list_events")
        assert exc_info.value.upstream_status == 404

    def test_401_is_auth_error(self):
        with pytest.raises(AuthError):
            execute(_request(error=_http_error(401, "Invalid Credentials")), "list_events")

    def test_server_error_keeps_reason_and_status(self):
        with pytest.raises(UpstreamError) as exc_info:
            execute(_request(error=_http_error(503, "backendError")), "insert_event")

        assert exc_info.value.upstream_status == 503
        assert "backendError" in exc_info.value.message
        assert exc_info.value.status_code == 500

    def test_network_failure_is_upstream(self):
        with pytest.raises(UpstreamError, match="unreachable"):
            execute(_request(error=TimeoutError("timed out")), "list_events")


# ─────────────────────────────────────────────────────────────────────────────
# CalendarService
# ─────────────────────────────────────────────────────────────────────────────


class TestCalendarService:
    def test_list_events_follows_pages(self):
        svc = MagicMock()
        svc.events.return_value.list.return_value.execute.side_effect = [
            {"items": [{"id": "a"}], "nextPageToken": "p2"},
            {"items": [{"id": "b"}]},
        ]

        events = CalendarService(svc).list_events("2024-04-20T09:00:00Z", "2025-05-20T09:00:00Z")

        assert [e["id"] for e in events] == ["a", "b"]
        calls = svc.events.return_value.list.call_args_list
        assert calls[0].kwargs["pageToken"] is None
        assert calls[1].kwargs["pageToken"] == "p2"
        assert calls[0].kwargs["singleEvents"] is True
        assert calls[0].kwargs["orderBy"] == "startTime"

    def test_insert_with_conference_requests_meet(self):
        svc = MagicMock()
        svc.events.return_value.insert.return_value.execute.return_value = {"id": "evt1"}
        body = {"summary": "Algebra Review"}

        CalendarService(svc).insert_event(body, with_conference=True)

        kwargs = svc.events.return_value.insert.call_args.kwargs
        assert kwargs["conferenceDataVersion"] == 1
        assert kwargs["sendUpdates"] == "all"
        solution = kwargs["body"]["conferenceData"]["createRequest"]["conferenceSolutionKey"]
        assert solution == {"type": "hangoutsMeet"}

    def test_insert_without_conference(self):
        svc = MagicMock()
        svc.events.return_value.insert.return_value.execute.return_value = {"id": "evt1"}

        CalendarService(svc).insert_event({"summary": "Algebra Review"})

        kwargs = svc.events.return_value.insert.call_args.kwargs
        assert "conferenceDataVersion" not in kwargs
        assert "conferenceData" not in kwargs["body"]

    def test_delete_missing_event(self):
        svc = MagicMock()
        svc.events.return_value.delete.return_value.execute.side_effect = _http_error(410, "Resource has been deleted")

        with pytest.raises(NotFoundError):
            CalendarService(svc).delete_event("gone")

    def test_organizer_is_primary_calendar(self):
        svc = MagicMock()
        svc.calendarList.return_value.list.return_value.execute.return_value = {
            "items": [
                {"id": "holidays@group.v.calendar.google.com", "summary": "Holidays"},
                {"id": "tutor@school.org", "summary": "Tutor", "primary": True},
            ]
        }

        assert CalendarService(svc).get_organizer() == {"email": "tutor@school.org", "name": "Tutor"}


class TestMockCalendarService:
    def test_update_keeps_identity_and_conference_link(self):
        calendar = MockCalendarService()
        event = calendar.insert_event({"summary": "A", "start": {"dateTime": "2024-06-01T10:00:00"}}, with_conference=True)

        updated = calendar.update_event(event["id"], {"summary": "B"}, with_conference=True)

        assert updated["id"] == event["id"]
        assert updated["hangoutLink"] == event["hangoutLink"]
        assert updated["summary"] == "B"

    def test_missing_event(self):
        with pytest.raises(NotFoundError):
            MockCalendarService().get_event("nope")


# ─────────────────────────────────────────────────────────────────────────────
# DriveService
# ─────────────────────────────────────────────────────────────────────────────


class TestDriveService:
    def test_lists_recent_videos(self):
        svc = MagicMock()
        svc.files.return_value.list.return_value.execute.return_value = {
            "files": [
                {
                    "id": "f1",
                    "name": "abc-defg-hij (2024-06-01 10:02 GMT)",
                    "webViewLink": "https://drive.google.com/file/d/f1/view",
                    "createdTime": "2024-06-01T10:05:00.000Z",
                },
                {"id": "f2", "name": "no timestamp"},
            ]
        }

        since = datetime(2024, 5, 1, tzinfo=timezone.utc)
        candidates = DriveService(svc).list_recent_recordings(since)

        assert [c.file_id for c in candidates] == ["f1"]
        assert candidates[0].created_time == datetime(2024, 6, 1, 10, 5, tzinfo=timezone.utc)
        query = svc.files.return_value.list.call_args.kwargs["q"]
        assert "mimeType contains 'video/'" in query
        assert "createdTime > '2024-05-01T00:00:00Z'" in query
