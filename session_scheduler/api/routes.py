from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, HTTPException, Response

from session_scheduler.config import settings
from session_scheduler.models.schemas import ErrorResponse, HealthResponse, Organizer, Session
from session_scheduler.services.orchestrator import SessionOrchestrator
from session_scheduler.utils.logger import get_logger

log = get_logger("api.routes")

router = APIRouter(
    prefix="/api",
    tags=["sessions"],
    responses={code: {"model": ErrorResponse} for code in (400, 404, 500)},
)

# injected at startup from main.py
_orchestrator: SessionOrchestrator | None = None


def inject_dependencies(orchestrator: SessionOrchestrator | None):
    global _orchestrator
    _orchestrator = orchestrator


def _require_orchestrator() -> SessionOrchestrator:
    if _orchestrator is None:
        raise HTTPException(status_code=503, detail="Scheduler not initialised yet")
    return _orchestrator


# Handlers are plain ``def``: the Google and Zoom clients block, so FastAPI
# runs them in its thread pool.

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  GET /api/organizer
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.get("/organizer", response_model=Organizer, response_model_exclude_none=True)
def get_organizer():
    """Calendar identity every session is created under."""
    return _require_orchestrator().get_organizer()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  GET /api/events
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.get("/events", response_model=list[Session])
def list_events():
    """Sessions from 30 days ago to a year ahead, by start time."""
    return _require_orchestrator().list_sessions()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  POST /api/events
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.post("/events", response_model=Session, status_code=201)
def create_event(payload: dict[str, Any] = Body(...)):
    log.info("POST /api/events  title=%s", str(payload.get("title"))[:80])
    return _require_orchestrator().create(payload)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  PUT /api/events/{event_id}
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.put("/events/{event_id}", response_model=Session)
def update_event(event_id: str, payload: dict[str, Any] = Body(...)):
    log.info("PUT /api/events/%s", event_id)
    return _require_orchestrator().update(event_id, payload)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  DELETE /api/events/{event_id}
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.delete("/events/{event_id}", status_code=204, response_class=Response)
def delete_event(event_id: str):
    log.info("DELETE /api/events/%s", event_id)
    _require_orchestrator().delete(event_id)
    return Response(status_code=204)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  GET /api/health
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(
        status="ok" if _orchestrator is not None else "starting",
        calendar="mock" if settings.MOCK_CALENDAR else "live",
        meetings="mock" if settings.MOCK_ZOOM else "live",
        pairing=_orchestrator.pairing.name if _orchestrator is not None else "unknown",
    )
