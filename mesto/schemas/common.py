"""
Shared schemas: URL validation, error/health/message envelopes.
"""

import re
from typing import Any, Optional

from pydantic import BaseModel, Field

# http(s) URL with a dotted host and an optional path/query; mirrors the link
# pattern the Mesto frontend validates avatars and card images against
URL_PATTERN = re.compile(
    r"^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"([-a-zA-Z0-9()@:%_+.~#?&/=]*)$"
)


def validate_url(value: str) -> str:
    """Reject anything that is not a well-formed http(s) URL."""
    if not URL_PATTERN.match(value):
        raise ValueError("must be a valid http(s) URL")
    return value


class MessageResponse(BaseModel):
    """Plain acknowledgement body for sign-in, sign-out and card deletion."""
    message: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "forbidden")
        message: Human-readable description for display to users
        details: Optional extra context (only for validation errors)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
