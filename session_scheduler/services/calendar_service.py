"""
Google Calendar API wrapper with mock fallback.
"""

from __future__ import annotations

import copy
import os
import random
import string
import uuid
from typing import Any, Optional

from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from session_scheduler.errors import AuthError, NotFoundError, UpstreamError
from session_scheduler.utils.datetime_utils import event_start, to_aware
from session_scheduler.utils.logger import get_logger

log = get_logger("services.calendar")

CALENDAR_ID = "primary"


def load_credentials(token_file: str, scopes: list[str]):
    """Authorized-user credentials written by ``session-scheduler-auth``."""
    from google.oauth2.credentials import Credentials
    from google.auth.transport.requests import Request

    if not os.path.exists(token_file):
        raise AuthError(f"Google token not found at {token_file}; run session-scheduler-auth first")

    creds = Credentials.from_authorized_user_file(token_file, scopes)
    if not creds.valid:
        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
            except RefreshError as exc:
                raise AuthError(f"Google token refresh failed: {exc}") from exc
            with open(token_file, "w") as f:
                f.write(creds.to_json())
        else:
            raise AuthError("Google token is invalid; run session-scheduler-auth again")
    return creds


def build_google_service(api: str, version: str, token_file: str, scopes: list[str]):
    from googleapiclient.discovery import build

    creds = load_credentials(token_file, scopes)
    return build(api, version, credentials=creds, cache_discovery=False)


def execute(request, action: str, event_id: Optional[str] = None) -> Any:
    """Run a googleapiclient request, translating failures into our errors."""
    try:
        return request.execute()
    except HttpError as exc:
        status = exc.resp.status
        if event_id is not None and status in (404, 410):
            raise NotFoundError(f"Event {event_id} not found") from exc
        if status == 401:
            raise AuthError(f"Google rejected the credentials during {action}") from exc
        reason = getattr(exc, "reason", None) or str(exc)
        log.error("%s failed: %s %s", action, status, reason)
        raise UpstreamError(f"Calendar API error during {action}: {reason}", upstream_status=status) from exc
    except RefreshError as exc:
        raise AuthError(f"Google token refresh failed during {action}: {exc}") from exc
    except (TimeoutError, OSError) as exc:
        log.error("%s failed: %s", action, exc)
        raise UpstreamError(f"Calendar API unreachable during {action}: {exc}") from exc


class CalendarService:
    """Thin wrapper around the Calendar v3 ``events`` and ``calendarList`` resources."""

    def __init__(self, service):
        self._svc = service

    @classmethod
    def from_token_file(cls, token_file: str, scopes: list[str]) -> "CalendarService":
        return cls(build_google_service("calendar", "v3", token_file, scopes))

    # ── read ──────────────────────────────────────────
    def list_events(self, time_min: str, time_max: str) -> list[dict]:
        events: list[dict] = []
        page_token = None
        while True:
            result = execute(
                self._svc.events().list(
                    calendarId=CALENDAR_ID,
                    timeMin=time_min,
                    timeMax=time_max,
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                ),
                "list_events",
            )
            events.extend(result.get("items", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                return events

    def get_event(self, event_id: str) -> dict:
        return execute(
            self._svc.events().get(calendarId=CALENDAR_ID, eventId=event_id),
            "get_event",
            event_id=event_id,
        )

    def get_organizer(self) -> dict:
        result = execute(self._svc.calendarList().list(), "get_organizer")
        primary = next((c for c in result.get("items", []) if c.get("primary")), None) or {}
        return {"email": primary.get("id") or CALENDAR_ID, "name": primary.get("summary")}

    # ── write ─────────────────────────────────────────
    def insert_event(self, body: dict, with_conference: bool = False) -> dict:
        kwargs = {"calendarId": CALENDAR_ID, "body": body, "sendUpdates": "all"}
        if with_conference:
            body.setdefault("conferenceData", {
                "createRequest": {
                    "requestId": uuid.uuid4().hex,
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            })
            kwargs["conferenceDataVersion"] = 1
        event = execute(self._svc.events().insert(**kwargs), "insert_event")
        log.info("Created event %s", event.get("id"))
        return event

    def update_event(self, event_id: str, body: dict, with_conference: bool = False) -> dict:
        kwargs = {"calendarId": CALENDAR_ID, "eventId": event_id, "body": body, "sendUpdates": "all"}
        if with_conference:
            kwargs["conferenceDataVersion"] = 1
        event = execute(self._svc.events().update(**kwargs), "update_event", event_id=event_id)
        log.info("Updated event %s", event_id)
        return event

    def delete_event(self, event_id: str) -> None:
        execute(
            self._svc.events().delete(calendarId=CALENDAR_ID, eventId=event_id, sendUpdates="all"),
            "delete_event",
            event_id=event_id,
        )
        log.info("Deleted event %s", event_id)


def _meet_code() -> str:
    part = lambda n: "".join(random.choices(string.ascii_lowercase, k=n))  # noqa: E731
    return f"{part(3)}-{part(4)}-{part(3)}"


class MockCalendarService:
    """In-memory calendar shaped like Calendar v3 event resources."""

    def __init__(self, organizer_email: str = ""):
        self._events: dict[str, dict] = {}
        self._organizer_email = organizer_email or "organizer@example.com"
        log.info("Calendar running in MOCK mode")

    def list_events(self, time_min: str, time_max: str) -> list[dict]:
        lo, hi = to_aware(time_min), to_aware(time_max)
        found = []
        for event in self._events.values():
            start = event_start(event)
            if start is not None and lo <= start < hi:
                found.append((start, copy.deepcopy(event)))
        found.sort(key=lambda pair: pair[0])
        return [e for _, e in found]

    def get_event(self, event_id: str) -> dict:
        if event_id not in self._events:
            raise NotFoundError(f"Event {event_id} not found")
        return copy.deepcopy(self._events[event_id])

    def get_organizer(self) -> dict:
        return {"email": self._organizer_email, "name": "Mock Calendar"}

    def insert_event(self, body: dict, with_conference: bool = False) -> dict:
        eid = f"mock_{uuid.uuid4().hex[:10]}"
        event = copy.deepcopy(body)
        event.update({"id": eid, "htmlLink": f"mock://{eid}", "status": "confirmed"})
        event.setdefault("eventType", "default")
        if with_conference:
            link = f"https://meet.google.com/{_meet_code()}"
            event["hangoutLink"] = link
            event["conferenceData"] = {"entryPoints": [{"entryPointType": "video", "uri": link}]}
        self._events[eid] = event
        log.info("MOCK created event %s: %s", eid, body.get("summary"))
        return copy.deepcopy(event)

    def update_event(self, event_id: str, body: dict, with_conference: bool = False) -> dict:
        existing = self.get_event(event_id)
        event = copy.deepcopy(body)
        event.update({k: existing[k] for k in ("id", "htmlLink", "status", "eventType") if k in existing})
        if with_conference and "hangoutLink" in existing:
            event["hangoutLink"] = existing["hangoutLink"]
        self._events[event_id] = event
        log.info("MOCK updated event %s", event_id)
        return copy.deepcopy(event)

    def delete_event(self, event_id: str) -> None:
        if self._events.pop(event_id, None) is None:
            raise NotFoundError(f"Event {event_id} not found")
        log.info("MOCK deleted event %s", event_id)
