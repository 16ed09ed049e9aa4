"""
Pydantic v2 request / response models for every endpoint.

Python attributes are snake_case; the wire format is camelCase.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from session_scheduler.errors import ValidationError
from session_scheduler.utils.datetime_utils import is_date_only, to_aware

MAX_TITLE_LENGTH = 100
MAX_PARTICIPANTS = 6


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Events ────────────────────────────────────────────
class InsertEvent(_CamelModel):
    """Body of POST /api/events and PUT /api/events/{id}."""

    title: str
    timezone: str
    start_time: str
    end_time: str
    participants: list[str] = Field(default_factory=list)
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_length(cls, v: str) -> str:
        if len(v) < 1:
            raise PydanticCustomError("title_required", "Session title is required")
        if len(v) > MAX_TITLE_LENGTH:
            raise PydanticCustomError("title_too_long", "Title must be 100 characters or less")
        return v

    @field_validator("timezone")
    @classmethod
    def _timezone_present(cls, v: str) -> str:
        if not v.strip():
            raise PydanticCustomError("timezone_required", "Timezone is required")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def _parseable(cls, v: str, info: ValidationInfo) -> str:
        label = "Start time" if info.field_name == "start_time" else "End time"
        if not v.strip():
            raise PydanticCustomError("time_required", "{label} is required", {"label": label})
        try:
            to_aware(v)
        except ValueError:
            raise PydanticCustomError("time_invalid", "{label} is not a valid date and time", {"label": label})
        if is_date_only(v):
            raise PydanticCustomError("time_missing", "{label} must include a time of day", {"label": label})
        return v

    @field_validator("end_time")
    @classmethod
    def _after_start(cls, v: str, info: ValidationInfo) -> str:
        start = info.data.get("start_time")
        if start is None:
            return v
        tz_name = info.data.get("timezone")
        if to_aware(v, tz_name) <= to_aware(start, tz_name):
            raise PydanticCustomError("end_before_start", "End time must be after start time")
        return v

    @field_validator("participants")
    @classmethod
    def _valid_participants(cls, v: list[str]) -> list[str]:
        if len(v) > MAX_PARTICIPANTS:
            raise PydanticCustomError("too_many_participants", "Maximum 6 participants allowed")
        seen: set[str] = set()
        unique = []
        for address in v:
            invalid = PydanticCustomError("invalid_email", "Invalid email address: {address}", {"address": address})
            try:
                _, normalized = validate_email(address)
            except PydanticCustomError:
                raise invalid
            # bare addresses only; "Name <addr>" is not an attendee email
            if normalized.lower() != address.strip().lower():
                raise invalid
            key = normalized.lower()
            if key not in seen:
                seen.add(key)
                unique.append(address.strip())
        return unique


class RecordingStatus(str, Enum):
    NOT_AVAILABLE = "not_available"
    AVAILABLE = "available"


class Session(_CamelModel):
    """A calendar event plus its backing meeting, as shown to the organizer."""

    id: str
    title: str
    start_time: str
    end_time: str
    timezone: str = "UTC"
    participants: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    meet_link: Optional[str] = None
    recording_status: RecordingStatus = RecordingStatus.NOT_AVAILABLE
    recording_url: Optional[str] = None
    recording_error: Optional[str] = None


# ── Organizer ─────────────────────────────────────────
class Organizer(_CamelModel):
    email: str
    name: Optional[str] = None


# ── Errors / health ───────────────────────────────────
class ErrorResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    calendar: str = "unknown"
    meetings: str = "unknown"
    pairing: str = "unknown"


# ── validation entry point ────────────────────────────
def format_validation_error(exc: PydanticValidationError) -> str:
    """One human-readable line for every problem found."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f'{err["msg"]} at "{loc}"' if loc else err["msg"])
    return "Validation error: " + "; ".join(parts)


def validate_insert_event(payload: Any) -> InsertEvent:
    if isinstance(payload, InsertEvent):
        return payload
    try:
        return InsertEvent.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(format_validation_error(exc)) from exc
