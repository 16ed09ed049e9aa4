"""
Error taxonomy shared by the services, the HTTP routes and the MCP tools.
"""

from __future__ import annotations

from typing import Optional


class SchedulerError(Exception):
    """Base class; ``status_code`` is the HTTP status the API answers with."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulerError):
    """Bad input. Raised before any external call is made."""

    status_code = 400


class NotFoundError(SchedulerError):
    status_code = 404


class AuthError(SchedulerError):
    """Credential or token failure that survived one refresh-and-retry."""

    status_code = 500


class UpstreamError(SchedulerError):
    """Any other calendar / meeting / storage service failure, timeouts included."""

    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
