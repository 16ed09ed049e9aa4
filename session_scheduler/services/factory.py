"""
Wires the services together from ``Settings``.
"""

from __future__ import annotations

from session_scheduler.services.calendar_service import CalendarService, MockCalendarService
from session_scheduler.services.drive_service import DriveService, MockDriveService
from session_scheduler.services.orchestrator import SessionOrchestrator
from session_scheduler.services.pairing import MeetPairing, PairingStrategy, ZoomPairing
from session_scheduler.services.zoom_service import MockZoomService, ZoomCredentials, ZoomService
from session_scheduler.utils.logger import get_logger

log = get_logger("services.factory")

PAIRING_STRATEGIES = ("zoom", "google_meet")


def build_calendar(settings):
    if settings.MOCK_CALENDAR:
        return MockCalendarService(organizer_email=settings.SENDER_EMAIL)
    return CalendarService.from_token_file(settings.GOOGLE_TOKEN_FILE, settings.GOOGLE_SCOPES)


def build_meetings(settings):
    if settings.MOCK_ZOOM:
        return MockZoomService()
    credentials = ZoomCredentials(
        account_id=settings.ZOOM_ACCOUNT_ID,
        client_id=settings.ZOOM_CLIENT_ID,
        client_secret=settings.ZOOM_CLIENT_SECRET,
    )
    return ZoomService(credentials, timeout=settings.ZOOM_TIMEOUT_SECONDS)


def build_pairing(settings) -> PairingStrategy:
    strategy = settings.PAIRING_STRATEGY
    if strategy == "zoom":
        return ZoomPairing(build_meetings(settings), lookup_workers=settings.RECORDING_LOOKUP_WORKERS)
    if strategy == "google_meet":
        if settings.MOCK_CALENDAR:
            return MeetPairing(MockDriveService())
        return MeetPairing(DriveService.from_token_file(settings.GOOGLE_TOKEN_FILE, settings.GOOGLE_SCOPES))
    raise ValueError(f"PAIRING_STRATEGY must be one of {PAIRING_STRATEGIES}, got {strategy!r}")


def build_orchestrator(settings) -> SessionOrchestrator:
    pairing = build_pairing(settings)
    log.info("Using %s pairing (mock calendar=%s)", pairing.name, settings.MOCK_CALENDAR)
    return SessionOrchestrator(build_calendar(settings), pairing)
