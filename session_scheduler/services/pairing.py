"""
How a calendar event gets its video meeting.

ZoomPairing   - create a Zoom meeting first and record it in the event
                description (the calendar event is the source of truth).
MeetPairing   - let Google Calendar attach a Meet conference itself.

A deployment picks one; events created under one are not understood by the
other beyond their plain calendar fields.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Optional

from session_scheduler.errors import SchedulerError
from session_scheduler.models.schemas import InsertEvent, RecordingStatus, Session
from session_scheduler.services.meeting_marker import (
    MeetingMarker,
    embed_marker,
    parse_marker,
    parse_meeting_id,
    strip_marker,
)
from session_scheduler.services.recording_matcher import match_recording
from session_scheduler.utils.datetime_utils import duration_minutes, with_seconds
from session_scheduler.utils.logger import get_logger

log = get_logger("services.pairing")


def native_meet_link(event: dict) -> Optional[str]:
    """Conference link Google attached to the event, if any."""
    if event.get("hangoutLink"):
        return event["hangoutLink"]
    entry_points = (event.get("conferenceData") or {}).get("entryPoints") or []
    for ep in entry_points:
        if ep.get("entryPointType") == "video" and ep.get("uri"):
            return ep["uri"]
    return entry_points[0].get("uri") if entry_points else None


class PairingStrategy(ABC):
    name: str = ""
    # ask Calendar to create conference data on insert
    conferencing: bool = False

    @abstractmethod
    def provision(self, data: InsertEvent) -> Optional[MeetingMarker]:
        """Create the backing meeting ahead of the calendar event, if this strategy does that."""

    @abstractmethod
    def stored_description(self, description: Optional[str], meeting: Optional[MeetingMarker]) -> str:
        ...

    def release(self, meeting: MeetingMarker) -> None:
        """Undo ``provision`` after the calendar insert failed."""

    @abstractmethod
    def preserve(self, existing: dict, body: dict, description: Optional[str]) -> Optional[str]:
        """Copy the existing pairing into an update ``body``; returns the meet link."""

    @abstractmethod
    def meet_link(self, event: dict) -> Optional[str]:
        ...

    def visible_description(self, event: dict) -> Optional[str]:
        return (event.get("description") or "").strip() or None

    def teardown(self, event: dict) -> None:
        """Remove the backing meeting of an event about to be deleted."""

    def close(self) -> None:
        pass

    @abstractmethod
    def attach_recordings(self, pairs: list[tuple[dict, Session]], since: datetime) -> None:
        ...


class ZoomPairing(PairingStrategy):
    name = "zoom"

    def __init__(self, meetings, lookup_workers: int = 4):
        self._meetings = meetings
        self._workers = max(1, lookup_workers)

    def provision(self, data: InsertEvent) -> MeetingMarker:
        meeting = self._meetings.create_meeting(
            topic=data.title,
            start_time=with_seconds(data.start_time),
            duration_minutes=duration_minutes(data.start_time, data.end_time, data.timezone),
            timezone=data.timezone,
        )
        return MeetingMarker(meeting_id=meeting.id, join_url=meeting.join_url)

    def stored_description(self, description: Optional[str], meeting: Optional[MeetingMarker]) -> str:
        if meeting is None:
            return description or ""
        return embed_marker(description, meeting)

    def release(self, meeting: MeetingMarker) -> None:
        try:
            self._meetings.delete_meeting(meeting.meeting_id)
            log.info("Rolled back orphaned Zoom meeting %s", meeting.meeting_id)
        except SchedulerError as exc:
            log.warning("Could not roll back orphaned Zoom meeting %s: %s", meeting.meeting_id, exc)
        except Exception:
            log.exception("Unexpected error rolling back Zoom meeting %s", meeting.meeting_id)

    def preserve(self, existing: dict, body: dict, description: Optional[str]) -> Optional[str]:
        marker = parse_marker(existing.get("description"))
        body["description"] = self.stored_description(description, marker)
        if marker:
            return marker.join_url
        return native_meet_link(existing)

    def meet_link(self, event: dict) -> Optional[str]:
        marker = parse_marker(event.get("description"))
        if marker:
            return marker.join_url
        return native_meet_link(event)

    def visible_description(self, event: dict) -> Optional[str]:
        return strip_marker(event.get("description"))

    def teardown(self, event: dict) -> None:
        meeting_id = parse_meeting_id(event.get("description"))
        if not meeting_id:
            return
        try:
            self._meetings.delete_meeting(meeting_id)
        except SchedulerError as exc:
            log.warning("Could not delete Zoom meeting %s: %s", meeting_id, exc)
        except Exception:
            log.exception("Unexpected error deleting Zoom meeting %s", meeting_id)

    def attach_recordings(self, pairs: list[tuple[dict, Session]], since: datetime) -> None:
        targets = [(parse_meeting_id(event.get("description")), session) for event, session in pairs]
        targets = [(mid, session) for mid, session in targets if mid]
        if not targets:
            return

        with ThreadPoolExecutor(max_workers=min(self._workers, len(targets))) as pool:
            results = list(pool.map(self._lookup, [mid for mid, _ in targets]))

        for (_, session), result in zip(targets, results):
            if result is None:
                continue
            if result.share_url:
                session.recording_status = RecordingStatus.AVAILABLE
                session.recording_url = result.share_url
            elif result.error:
                session.recording_error = result.error

    def close(self) -> None:
        self._meetings.close()

    def _lookup(self, meeting_id: str):
        try:
            return self._meetings.get_recording_status(meeting_id)
        except SchedulerError as exc:
            log.warning("Could not fetch recording for meeting %s: %s", meeting_id, exc)
            return None
        except Exception:
            log.exception("Unexpected error fetching recording for meeting %s", meeting_id)
            return None


class MeetPairing(PairingStrategy):
    name = "google_meet"
    conferencing = True

    def __init__(self, recordings=None):
        self._recordings = recordings

    def provision(self, data: InsertEvent) -> None:
        return None

    def stored_description(self, description: Optional[str], meeting: Optional[MeetingMarker]) -> str:
        return description or ""

    def preserve(self, existing: dict, body: dict, description: Optional[str]) -> Optional[str]:
        body["description"] = description or ""
        if existing.get("conferenceData"):
            body["conferenceData"] = existing["conferenceData"]
        return native_meet_link(existing)

    def meet_link(self, event: dict) -> Optional[str]:
        return native_meet_link(event)

    def attach_recordings(self, pairs: list[tuple[dict, Session]], since: datetime) -> None:
        if self._recordings is None or not pairs:
            return
        try:
            candidates = self._recordings.list_recent_recordings(since)
        except SchedulerError as exc:
            log.warning("Could not list recent recordings: %s", exc)
            return

        for event, session in pairs:
            match = match_recording(event, candidates, meet_link=session.meet_link)
            if match:
                log.debug("Event %s matched recording %s by %s", session.id, match.candidate.name, match.reason)
                session.recording_status = RecordingStatus.AVAILABLE
                session.recording_url = match.candidate.web_view_link
