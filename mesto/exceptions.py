"""
Mesto Backend - Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for every error kind the API returns.
Why:   Services raise domain errors; global handlers (registered in main.py)
       turn them into structured JSON with the matching status code.
How:   Each exception carries a user-facing message and an optional context
       dict. Context is logged server-side and never returned to the client.

Exception Hierarchy:
    MestoError (base)
    ├── ValidationError       → 400 Bad Request
    ├── AuthenticationError   → 401 Unauthorized (no/invalid/expired token, bad login)
    ├── AuthorizationError    → 403 Forbidden (valid identity, not the owner)
    ├── NotFoundError         → 404 Not Found
    ├── ConflictError         → 409 Conflict (duplicate email)
    └── DatabaseError         → 500 Internal Server Error
        └── StoreTimeoutError → 503 Service Unavailable (retry later)

Nothing in the backend retries. Every error ends the request with exactly
one response; retrying is the caller's decision.
"""

from typing import Any, Dict, List, Optional, Sequence


class MestoError(Exception):
    """
    Base exception for all Mesto application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MestoError):
    """
    Raised when client input fails validation.

    Unlike `context`, `details` is safe to return: it lists the offending
    fields as [{"field": ..., "message": ...}].
    """

    def __init__(
        self,
        message: str = "Invalid request data",
        details: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.details = details or []

    @classmethod
    def from_errors(cls, errors: Sequence[Dict[str, Any]]) -> "ValidationError":
        """Build from pydantic/FastAPI error dicts (`loc`, `msg`, ...)."""
        details = [
            {
                "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
                "message": err.get("msg", "invalid value"),
            }
            for err in errors
        ]
        return cls(details=details)


class AuthenticationError(MestoError):
    """
    Raised when the caller cannot be identified.

    Covers a missing cookie, a malformed/tampered/expired token and failed
    sign-in. The message never says which of these happened: an expired
    token looks exactly like no token, and an unknown email looks exactly
    like a wrong password.
    """

    def __init__(
        self,
        message: str = "Authorization required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(MestoError):
    """
    Raised when an authenticated caller is not allowed to mutate a resource.

    Distinct from AuthenticationError: the identity is known and valid, it
    just does not own the target.
    """

    def __init__(
        self,
        message: str = "You can only modify your own resources",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MestoError):
    """Raised when a referenced id does not exist in the store."""

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(MestoError):
    """Raised when a write violates a uniqueness constraint (e.g. duplicate email)."""

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(MestoError):
    """
    Raised when store operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Driver errors,
        SQL text and constraint names go to the log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreTimeoutError(DatabaseError):
    """Raised when a single store call exceeds `store_timeout_seconds`."""

    def __init__(
        self,
        timeout: float,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["timeout"] = timeout
        super().__init__(
            message="The database did not respond in time. Please try again.",
            context=ctx,
        )
        self.retry_after = max(1, int(timeout))
