"""
Session lifecycle: one calendar event plus its backing video meeting.

The two halves live in independent services, so create / update / delete are
not atomic. The calendar event is authoritative; meeting-side failures that
do not block the calendar operation are logged and ignored.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from session_scheduler.models.schemas import (
    InsertEvent,
    Organizer,
    RecordingStatus,
    Session,
    validate_insert_event,
)
from session_scheduler.services.pairing import PairingStrategy
from session_scheduler.utils.datetime_utils import event_time, rfc3339, with_seconds
from session_scheduler.utils.logger import get_logger

log = get_logger("services.orchestrator")

LOOKBACK = timedelta(days=30)
LOOKAHEAD = timedelta(days=365)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_session(event: dict) -> bool:
    # out-of-office, focus time, working location... are not sessions
    return event.get("eventType") in (None, "default")


class SessionOrchestrator:
    def __init__(self, calendar, pairing: PairingStrategy, clock: Optional[Callable[[], datetime]] = None):
        self._calendar = calendar
        self._pairing = pairing
        self._clock = clock or _utcnow

    @property
    def pairing(self) -> PairingStrategy:
        return self._pairing

    # ── read ──────────────────────────────────────────
    def get_organizer(self) -> Organizer:
        return Organizer(**self._calendar.get_organizer())

    def list_sessions(self) -> list[Session]:
        now = self._clock()
        since = now - LOOKBACK
        events = self._calendar.list_events(time_min=rfc3339(since), time_max=rfc3339(now + LOOKAHEAD))
        events = [e for e in events if _is_session(e)]

        pairs = [
            (e, self._to_session(e, self._pairing.visible_description(e), self._pairing.meet_link(e)))
            for e in events
        ]
        self._pairing.attach_recordings(pairs, since)
        log.info("Listed %d sessions", len(pairs))
        return [session for _, session in pairs]

    # ── write ─────────────────────────────────────────
    def create(self, payload: Any) -> Session:
        data = validate_insert_event(payload)

        meeting = self._pairing.provision(data)
        body = self._event_body(data, self._pairing.stored_description(data.description, meeting))
        try:
            event = self._calendar.insert_event(body, with_conference=self._pairing.conferencing)
        except Exception:
            if meeting is not None:
                log.error("Calendar insert failed after meeting %s was created", meeting.meeting_id)
                self._pairing.release(meeting)
            raise

        meet_link = meeting.join_url if meeting else self._pairing.meet_link(event)
        log.info("Created session %s (%s)", event.get("id"), data.title)
        return self._to_session(event, data.description or None, meet_link)

    def update(self, event_id: str, payload: Any) -> Session:
        data = validate_insert_event(payload)
        existing = self._calendar.get_event(event_id)

        body = self._event_body(data, None)
        meet_link = self._pairing.preserve(existing, body, data.description)
        event = self._calendar.update_event(event_id, body, with_conference=self._pairing.conferencing)

        log.info("Updated session %s", event_id)
        return self._to_session(event, data.description or None, meet_link)

    def delete(self, event_id: str) -> None:
        existing = self._calendar.get_event(event_id)
        self._pairing.teardown(existing)
        self._calendar.delete_event(event_id)
        log.info("Deleted session %s", event_id)

    def close(self) -> None:
        self._pairing.close()

    # ── helpers ───────────────────────────────────────
    @staticmethod
    def _event_body(data: InsertEvent, description: Optional[str]) -> dict:
        body = {
            "summary": data.title,
            "start": {"dateTime": with_seconds(data.start_time), "timeZone": data.timezone},
            "end": {"dateTime": with_seconds(data.end_time), "timeZone": data.timezone},
            "attendees": [{"email": e} for e in data.participants],
        }
        if description is not None:
            body["description"] = description
        return body

    @staticmethod
    def _to_session(event: dict, description: Optional[str], meet_link: Optional[str]) -> Session:
        start = event.get("start") or {}
        return Session(
            id=event.get("id", ""),
            title=event.get("summary") or "Untitled Session",
            start_time=event_time(start),
            end_time=event_time(event.get("end")),
            timezone=start.get("timeZone") or "UTC",
            participants=[a["email"] for a in event.get("attendees", []) if a.get("email")],
            description=description,
            meet_link=meet_link,
            recording_status=RecordingStatus.NOT_AVAILABLE,
        )
