"""
Heuristic association between a Calendar event and a recording file.

Google Meet drops recordings into Drive without any reference back to the
calendar event, so the best we can do is a time window plus name checks.
A match means "likely", never "certain".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from session_scheduler.utils.datetime_utils import event_start

MATCH_WINDOW = timedelta(hours=48)
TITLE_PREFIX_LENGTH = 20

_MEET_CODE_RE = re.compile(r"meet\.google\.com/([a-z]{3}-[a-z]{4}-[a-z]{3})", re.IGNORECASE)
_GENERIC_NAME_RE = re.compile(r"meet[ _-]?recording|-\s*recording$", re.IGNORECASE)


@dataclass(frozen=True)
class RecordingCandidate:
    file_id: str
    name: str
    web_view_link: str
    created_time: datetime


@dataclass(frozen=True)
class MatchResult:
    candidate: RecordingCandidate
    reason: str


def meet_code(link: Optional[str]) -> Optional[str]:
    if not link:
        return None
    m = _MEET_CODE_RE.search(link)
    return m.group(1).lower() if m else None


def _shares_meeting_code(event: dict, meet_link: Optional[str], candidate: RecordingCandidate) -> bool:
    code = meet_code(meet_link)
    if not code:
        return False
    name = candidate.name.lower()
    return code in name or code.replace("-", "") in name


def _shares_title_prefix(event: dict, meet_link: Optional[str], candidate: RecordingCandidate) -> bool:
    title = (event.get("summary") or "").strip().lower()
    if not title:
        return False
    return candidate.name.strip().lower().startswith(title[:TITLE_PREFIX_LENGTH])


def _looks_like_recording(event: dict, meet_link: Optional[str], candidate: RecordingCandidate) -> bool:
    return bool(_GENERIC_NAME_RE.search(candidate.name.strip()))


Predicate = Callable[[dict, Optional[str], RecordingCandidate], bool]

# rank order; the first satisfied predicate names the match
PREDICATES: list[tuple[str, Predicate]] = [
    ("meeting_code", _shares_meeting_code),
    ("title_prefix", _shares_title_prefix),
    ("generic_recording", _looks_like_recording),
]


def within_window(start: datetime, candidate: RecordingCandidate, window: timedelta = MATCH_WINDOW) -> bool:
    return abs(candidate.created_time - start) <= window


def match_recording(
    event: dict,
    candidates: Iterable[RecordingCandidate],
    meet_link: Optional[str] = None,
    window: timedelta = MATCH_WINDOW,
) -> Optional[MatchResult]:
    """First candidate inside the window that satisfies any predicate."""
    start = event_start(event)
    if start is None:
        return None
    for candidate in candidates:
        if not within_window(start, candidate, window):
            continue
        for reason, predicate in PREDICATES:
            if predicate(event, meet_link, candidate):
                return MatchResult(candidate=candidate, reason=reason)
    return None
