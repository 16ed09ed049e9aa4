"""
Embeds the Zoom meeting pairing in a Calendar event description.

The description is the only place the pairing is stored, so it has to survive
edits made directly in Google Calendar. Two trailing lines are appended:

    Zoom Meeting: https://zoom.us/j/123
    [ZoomMeetingId:123]

Nothing outside this module should know that format.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_LINK_RE = re.compile(r"Zoom Meeting: (https://[^\s]+)")
_ID_RE = re.compile(r"\[ZoomMeetingId:(\d+)\]")
_LINK_LINE_RE = re.compile(r"\s*Zoom Meeting: https://[^\s]+")
_ID_LINE_RE = re.compile(r"\s*\[ZoomMeetingId:\d+\]")


@dataclass(frozen=True)
class MeetingMarker:
    meeting_id: str
    join_url: str


def parse_marker(description: Optional[str]) -> Optional[MeetingMarker]:
    if not description:
        return None
    id_match = _ID_RE.search(description)
    link_match = _LINK_RE.search(description)
    if not id_match or not link_match:
        return None
    return MeetingMarker(meeting_id=id_match.group(1), join_url=link_match.group(1))


def parse_meeting_id(description: Optional[str]) -> Optional[str]:
    """The id tag alone; enough to clean up a meeting whose link line was edited away."""
    if not description:
        return None
    m = _ID_RE.search(description)
    return m.group(1) if m else None


def strip_marker(description: Optional[str]) -> Optional[str]:
    if not description:
        return None
    cleaned = _ID_LINE_RE.sub("", _LINK_LINE_RE.sub("", description, count=1), count=1)
    return cleaned.strip() or None


def embed_marker(description: Optional[str], marker: MeetingMarker) -> str:
    return (
        f"{description or ''}"
        f"\n\nZoom Meeting: {marker.join_url}"
        f"\n[ZoomMeetingId:{marker.meeting_id}]"
    )
