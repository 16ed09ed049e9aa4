"""
Zoom REST API client (server-to-server OAuth) with mock fallback.
"""

from __future__ import annotations

import itertools
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

import httpx

from session_scheduler.errors import AuthError, UpstreamError
from session_scheduler.utils.logger import get_logger

log = get_logger("services.zoom")

ZOOM_API_BASE = "https://api.zoom.us/v2"
ZOOM_OAUTH_URL = "https://zoom.us/oauth/token"

# tokens this close to expiry are treated as already expired
TOKEN_EXPIRY_MARGIN_SECONDS = 60


@dataclass(frozen=True)
class ZoomCredentials:
    account_id: str
    client_id: str
    client_secret: str

    @property
    def configured(self) -> bool:
        return bool(self.account_id and self.client_id and self.client_secret)


class TokenCache:
    """``(token, expires_at)`` owned by one ZoomService; ``lock`` serializes refreshes."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at: float = 0.0
        self.lock = threading.Lock()

    def get(self) -> Optional[str]:
        if self._token and self._clock() < self._expires_at - TOKEN_EXPIRY_MARGIN_SECONDS:
            return self._token
        return None

    def set(self, token: str, expires_in: float) -> None:
        self._token = token
        self._expires_at = self._clock() + expires_in

    def clear(self) -> None:
        self._token = None
        self._expires_at = 0.0
        log.info("Zoom token cache cleared")


@dataclass
class ZoomResponse:
    ok: bool
    status: int
    data: Optional[dict] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ZoomMeeting:
    id: str
    join_url: str
    start_url: str = ""
    password: str = ""


class RecordingIssue(str, Enum):
    RATE_LIMITED = "rate_limited"
    NEEDS_REAUTH = "needs_reauth"
    PLAN_RESTRICTED = "plan_restricted"
    NOT_FOUND = "not_found"
    PROCESSING = "processing"
    UPSTREAM_ERROR = "upstream_error"
    NOT_SHAREABLE = "not_shareable"

    @property
    def message(self) -> str:
        return _ISSUE_MESSAGES[self]


_ISSUE_MESSAGES = {
    RecordingIssue.RATE_LIMITED: "Too many requests - please try again later.",
    RecordingIssue.NEEDS_REAUTH: "Authentication failed - please reconnect Zoom.",
    RecordingIssue.PLAN_RESTRICTED: "Recording sharing requires Zoom Pro or recording:write scope.",
    RecordingIssue.NOT_FOUND: "Recording not found.",
    RecordingIssue.PROCESSING: "Recording processing - please try again later.",
    RecordingIssue.UPSTREAM_ERROR: "Zoom service error - please try again later.",
    RecordingIssue.NOT_SHAREABLE: "Recording exists but cannot be shared publicly.",
}


def issue_for_status(status: Optional[int]) -> RecordingIssue:
    if status == 429:
        return RecordingIssue.RATE_LIMITED
    if status == 401:
        return RecordingIssue.NEEDS_REAUTH
    if status in (400, 403):
        return RecordingIssue.PLAN_RESTRICTED
    if status == 404:
        return RecordingIssue.NOT_FOUND
    if status in (500, 502, 503):
        return RecordingIssue.UPSTREAM_ERROR
    return RecordingIssue.NOT_SHAREABLE


@dataclass
class RecordingResult:
    share_url: Optional[str] = None
    password: Optional[str] = None
    issue: Optional[RecordingIssue] = None
    error_code: Optional[int] = None

    @property
    def error(self) -> Optional[str]:
        return self.issue.message if self.issue else None


class ZoomService:
    """Meeting provider backed by the Zoom REST API."""

    def __init__(
        self,
        credentials: ZoomCredentials,
        token_cache: Optional[TokenCache] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = 15.0,
        api_base: str = ZOOM_API_BASE,
        oauth_url: str = ZOOM_OAUTH_URL,
    ):
        self._credentials = credentials
        self._cache = token_cache or TokenCache()
        self._client = client or httpx.Client(timeout=timeout)
        self._api_base = api_base.rstrip("/")
        self._oauth_url = oauth_url

    def close(self) -> None:
        self._client.close()

    # ── auth ──────────────────────────────────────────
    def acquire_access_token(self, force_refresh: bool = False) -> str:
        if not force_refresh:
            token = self._cache.get()
            if token:
                return token

        with self._cache.lock:
            # another caller may have refreshed while we waited
            if not force_refresh:
                token = self._cache.get()
                if token:
                    return token
            token, expires_in = self._exchange_credentials()
            self._cache.set(token, expires_in)
            return token

    def _exchange_credentials(self) -> tuple[str, float]:
        creds = self._credentials
        if not creds.configured:
            raise AuthError("Zoom API credentials not configured")

        log.info("Fetching new Zoom access token...")
        try:
            resp = self._client.post(
                self._oauth_url,
                params={"grant_type": "account_credentials", "account_id": creds.account_id},
                auth=(creds.client_id, creds.client_secret),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.TimeoutException as exc:
            raise UpstreamError("Zoom token request timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Zoom token request failed: {exc}") from exc

        if resp.status_code >= 400:
            log.error("Zoom token error: %s %s", resp.status_code, resp.text)
            raise AuthError(f"Failed to get Zoom access token: {resp.status_code}")

        try:
            data = resp.json()
            token, expires_in = data["access_token"], float(data.get("expires_in", 3600))
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            log.error("Unreadable Zoom token response: %s %s", resp.status_code, resp.text[:200])
            raise AuthError("Zoom token response was not understood") from exc
        log.info("Zoom access token obtained")
        return token, expires_in

    # ── transport ─────────────────────────────────────
    def _invoke(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
        retry_on_auth: bool = True,
    ) -> ZoomResponse:
        token = self.acquire_access_token()
        try:
            resp = self._client.request(
                method,
                f"{self._api_base}{path}",
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"Zoom {method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Zoom {method} {path} failed: {exc}") from exc

        if resp.status_code == 401:
            if retry_on_auth:
                log.info("Zoom returned 401, refreshing token and retrying")
                self._cache.clear()
                return self._invoke(method, path, json=json, retry_on_auth=False)
            raise AuthError("Zoom rejected a freshly issued access token")

        if resp.status_code >= 400:
            return ZoomResponse(ok=False, status=resp.status_code, error=resp.text)

        if resp.status_code == 204 or not resp.content:
            return ZoomResponse(ok=True, status=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"Zoom {method} {path} returned a non-JSON body", upstream_status=resp.status_code
            ) from exc
        if not isinstance(data, dict):
            raise UpstreamError(f"Zoom {method} {path} returned unexpected JSON", upstream_status=resp.status_code)
        return ZoomResponse(ok=True, status=resp.status_code, data=data)

    # ── meetings ──────────────────────────────────────
    def create_meeting(self, topic: str, start_time: str, duration_minutes: int, timezone: str) -> ZoomMeeting:
        result = self._invoke(
            "POST",
            "/users/me/meetings",
            json={
                "topic": topic,
                "type": 2,
                "start_time": start_time,
                "duration": duration_minutes,
                "timezone": timezone,
                "settings": {
                    "host_video": True,
                    "participant_video": True,
                    "join_before_host": True,
                    "mute_upon_entry": False,
                    "waiting_room": False,
                    "auto_recording": "cloud",
                },
            },
        )
        if not result.ok or not result.data:
            log.error("Zoom meeting creation failed: %s %s", result.status, result.error)
            raise UpstreamError(f"Failed to create Zoom meeting: {result.status}", upstream_status=result.status)

        data = result.data
        if "id" not in data or not data.get("join_url"):
            raise UpstreamError("Zoom meeting response lacks id or join_url", upstream_status=result.status)
        log.info("Zoom meeting created: %s", data["id"])
        return ZoomMeeting(
            id=str(data["id"]),
            join_url=data["join_url"],
            start_url=data.get("start_url", ""),
            password=data.get("password", ""),
        )

    def delete_meeting(self, meeting_id: str) -> None:
        result = self._invoke("DELETE", f"/meetings/{meeting_id}")
        if result.status == 404:
            log.info("Zoom meeting already deleted or not found: %s", meeting_id)
            return
        if not result.ok:
            log.error("Zoom meeting deletion failed: %s %s %s", meeting_id, result.status, result.error)
            raise UpstreamError(f"Failed to delete Zoom meeting: {result.status}", upstream_status=result.status)
        log.info("Zoom meeting deleted: %s", meeting_id)

    # ── recordings ────────────────────────────────────
    def get_recording_status(self, meeting_id: str) -> RecordingResult:
        try:
            return self._recording_status(meeting_id)
        except AuthError:
            return RecordingResult(issue=RecordingIssue.NEEDS_REAUTH, error_code=401)
        except UpstreamError as exc:
            log.warning("Recording lookup for %s failed: %s", meeting_id, exc)
            return RecordingResult(issue=RecordingIssue.UPSTREAM_ERROR, error_code=exc.upstream_status)

    def _recording_status(self, meeting_id: str) -> RecordingResult:
        path = f"/meetings/{meeting_id}/recordings"
        result = self._invoke("GET", path)

        if not result.ok:
            if result.status == 404:
                log.debug("No recording for meeting %s", meeting_id)
                return RecordingResult()
            log.error("Failed to fetch recording %s: %s %s", meeting_id, result.status, result.error)
            return RecordingResult(issue=issue_for_status(result.status), error_code=result.status)

        data = result.data or {}
        if data.get("share_url"):
            return RecordingResult(share_url=data["share_url"], password=data.get("password"))

        if not data.get("recording_files"):
            return RecordingResult()

        sharing = self._enable_public_sharing(meeting_id)
        if not sharing.ok:
            log.warning("Recording for %s exists but public sharing could not be enabled", meeting_id)
            return RecordingResult(issue=issue_for_status(sharing.status), error_code=sharing.status or 500)

        retry = self._invoke("GET", path)
        if not retry.ok:
            log.warning("GET after enabling sharing failed for %s: %s", meeting_id, retry.status)
            return RecordingResult(issue=issue_for_status(retry.status), error_code=retry.status)
        if retry.data and retry.data.get("share_url"):
            log.info("Recording share URL obtained after enabling sharing: %s", meeting_id)
            return RecordingResult(share_url=retry.data["share_url"], password=retry.data.get("password"))

        return RecordingResult(issue=RecordingIssue.PROCESSING, error_code=202)

    def _enable_public_sharing(self, meeting_id: str) -> ZoomResponse:
        log.info("Enabling public recording sharing for meeting %s", meeting_id)
        return self._invoke(
            "PATCH",
            f"/meetings/{meeting_id}/recordings/settings",
            json={
                "share_recording": "publicly",
                "recording_authentication": False,
                "viewer_download": True,
                "on_demand": False,
                "password": "",
            },
        )


class MockZoomService:
    """In-memory stand-in used when MOCK_ZOOM=true."""

    def __init__(self):
        self._ids = itertools.count(81000000001)
        self.meetings: dict[str, ZoomMeeting] = {}
        self.recordings: dict[str, str] = {}
        log.info("Zoom running in MOCK mode")

    def create_meeting(self, topic: str, start_time: str, duration_minutes: int, timezone: str) -> ZoomMeeting:
        mid = str(next(self._ids))
        meeting = ZoomMeeting(
            id=mid,
            join_url=f"https://zoom.us/j/{mid}",
            start_url=f"https://zoom.us/s/{mid}",
            password="mock",
        )
        self.meetings[mid] = meeting
        log.info("MOCK created Zoom meeting %s (%s, %d min)", mid, topic, duration_minutes)
        return meeting

    def delete_meeting(self, meeting_id: str) -> None:
        self.meetings.pop(meeting_id, None)
        log.info("MOCK deleted Zoom meeting %s", meeting_id)

    def get_recording_status(self, meeting_id: str) -> RecordingResult:
        return RecordingResult(share_url=self.recordings.get(meeting_id))

    def close(self) -> None:
        pass
