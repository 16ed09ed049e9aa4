"""
Google Drive lookup for Meet recordings.
"""

from __future__ import annotations

from datetime import datetime

from session_scheduler.services.calendar_service import build_google_service, execute
from session_scheduler.services.recording_matcher import RecordingCandidate
from session_scheduler.utils.datetime_utils import rfc3339, to_aware
from session_scheduler.utils.logger import get_logger

log = get_logger("services.drive")

RECORDING_PAGE_SIZE = 100


def _candidate(item: dict) -> RecordingCandidate:
    return RecordingCandidate(
        file_id=item.get("id", ""),
        name=item.get("name") or "Recording",
        web_view_link=item.get("webViewLink", ""),
        created_time=to_aware(item["createdTime"]),
    )


class DriveService:
    def __init__(self, service):
        self._svc = service

    @classmethod
    def from_token_file(cls, token_file: str, scopes: list[str]) -> "DriveService":
        return cls(build_google_service("drive", "v3", token_file, scopes))

    def list_recent_recordings(self, since: datetime) -> list[RecordingCandidate]:
        """Video files created after ``since``, newest first, one page."""
        query = (
            "mimeType contains 'video/' and trashed = false "
            f"and createdTime > '{rfc3339(since)}'"
        )
        result = execute(
            self._svc.files().list(
                q=query,
                fields="files(id, name, webViewLink, mimeType, createdTime)",
                orderBy="createdTime desc",
                pageSize=RECORDING_PAGE_SIZE,
            ),
            "list_recent_recordings",
        )
        files = [f for f in result.get("files", []) if f.get("createdTime")]
        log.debug("Drive returned %d recording candidates", len(files))
        return [_candidate(f) for f in files]


class MockDriveService:
    def __init__(self, candidates: list[RecordingCandidate] | None = None):
        self.candidates = list(candidates or [])

    def list_recent_recordings(self, since: datetime) -> list[RecordingCandidate]:
        return [c for c in self.candidates if c.created_time > since]
