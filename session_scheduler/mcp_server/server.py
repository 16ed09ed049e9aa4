"""
MCP Server: session scheduling tools over the MCP protocol.
Runs over stdio, so stdout belongs to the protocol and logs go to stderr.
"""

from __future__ import annotations

import json

from mcp.server.fastmcp import FastMCP

from session_scheduler.config import settings
from session_scheduler.errors import SchedulerError
from session_scheduler.services.factory import build_orchestrator
from session_scheduler.services.orchestrator import SessionOrchestrator
from session_scheduler.utils.logger import get_logger

log = get_logger("mcp.server")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  ORCHESTRATOR (built on first tool call)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_orchestrator: SessionOrchestrator | None = None


def _get_orchestrator() -> SessionOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator(settings)
    return _orchestrator


def _error(exc: SchedulerError) -> str:
    return json.dumps({"error": exc.message, "status": exc.status_code})


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  MCP SERVER + TOOLS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

mcp = FastMCP("Session Scheduler")


@mcp.tool()
def get_organizer() -> str:
    """Return the calendar identity sessions are created under."""
    try:
        return _get_orchestrator().get_organizer().model_dump_json(by_alias=True, exclude_none=True)
    except SchedulerError as exc:
        return _error(exc)


@mcp.tool()
def list_sessions() -> str:
    """List tutoring sessions from 30 days ago to a year ahead, ordered by start time."""
    try:
        sessions = _get_orchestrator().list_sessions()
        return json.dumps([s.model_dump(mode="json", by_alias=True) for s in sessions])
    except SchedulerError as exc:
        return _error(exc)


@mcp.tool()
def create_session(
    title: str,
    start_time: str,
    end_time: str,
    timezone: str,
    participants: list[str],
    description: str = "",
) -> str:
    """
    Create a tutoring session with a backing video meeting.

    Args:
        title: Session title (max 100 characters)
        start_time: Local start, YYYY-MM-DDTHH:MM
        end_time: Local end, YYYY-MM-DDTHH:MM
        timezone: IANA timezone e.g. Europe/London
        participants: Up to 6 attendee emails
        description: Optional description
    """
    payload = {
        "title": title,
        "startTime": start_time,
        "endTime": end_time,
        "timezone": timezone,
        "participants": participants,
        "description": description or None,
    }
    try:
        session = _get_orchestrator().create(payload)
        log.info("✅ Session created: %s", session.id)
        return session.model_dump_json(by_alias=True)
    except SchedulerError as exc:
        log.warning("❌ create_session failed: %s", exc.message)
        return _error(exc)


@mcp.tool()
def update_session(
    event_id: str,
    title: str,
    start_time: str,
    end_time: str,
    timezone: str,
    participants: list[str],
    description: str = "",
) -> str:
    """
    Replace the details of an existing session. The video meeting is kept.

    Args:
        event_id: Calendar event id returned by create_session / list_sessions
        title: Session title (max 100 characters)
        start_time: Local start, YYYY-MM-DDTHH:MM
        end_time: Local end, YYYY-MM-DDTHH:MM
        timezone: IANA timezone
        participants: Up to 6 attendee emails
        description: Optional description
    """
    payload = {
        "title": title,
        "startTime": start_time,
        "endTime": end_time,
        "timezone": timezone,
        "participants": participants,
        "description": description or None,
    }
    try:
        return _get_orchestrator().update(event_id, payload).model_dump_json(by_alias=True)
    except SchedulerError as exc:
        return _error(exc)


@mcp.tool()
def delete_session(event_id: str) -> str:
    """
    Delete a session and its video meeting; attendees are notified.

    Args:
        event_id: Calendar event id
    """
    try:
        _get_orchestrator().delete(event_id)
        return json.dumps({"deleted": event_id})
    except SchedulerError as exc:
        return _error(exc)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  ENTRY POINT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def main() -> None:
    log.info("🚀 MCP Session Server starting (stdio transport)")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
