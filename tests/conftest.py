"""Shared test fixtures for the session scheduler tests.

- In-memory calendar / Zoom / Drive services
- Orchestrators wired with a fixed clock for both pairing strategies
- A valid create/update payload

Usage:
    def test_something(zoom_orchestrator, valid_payload):
        session = zoom_orchestrator.create(valid_payload)
        ...
"""

from datetime import datetime, timezone

import pytest

from session_scheduler.services.calendar_service import MockCalendarService
from session_scheduler.services.drive_service import MockDriveService
from session_scheduler.services.orchestrator import SessionOrchestrator
from session_scheduler.services.pairing import MeetPairing, ZoomPairing
from session_scheduler.services.zoom_service import MockZoomService


# ─────────────────────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────────────────────

FIXED_NOW = datetime(2024, 5, 20, 9, 0, tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────────────────────
# Service Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def calendar() -> MockCalendarService:
    return MockCalendarService(organizer_email="tutor@example.com")


@pytest.fixture
def zoom() -> MockZoomService:
    return MockZoomService()


@pytest.fixture
def drive() -> MockDriveService:
    return MockDriveService()


# ─────────────────────────────────────────────────────────────────────────────
# Orchestrator Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def zoom_orchestrator(calendar, zoom) -> SessionOrchestrator:
    """Orchestrator using Zoom meetings recorded in the event description."""
    return SessionOrchestrator(calendar, ZoomPairing(zoom, lookup_workers=2), clock=lambda: FIXED_NOW)


@pytest.fixture
def meet_orchestrator(calendar, drive) -> SessionOrchestrator:
    """Orchestrator using Calendar-native Google Meet conferencing."""
    return SessionOrchestrator(calendar, MeetPairing(drive), clock=lambda: FIXED_NOW)


# ─────────────────────────────────────────────────────────────────────────────
# Payload Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def valid_payload() -> dict:
    return {
        "title": "Algebra Review",
        "startTime": "2024-06-01T10:00",
        "endTime": "2024-06-01T11:00",
        "timezone": "UTC",
        "participants": ["a@x.com"],
        "description": "Chapter 4 exercises",
    }
