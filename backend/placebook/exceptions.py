"""
PlaceBook Backend: Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions, one per error scenario.
How:   Each exception carries a user-facing message, an optional context dict
       (logged, never returned) and the HTTP status code it maps to.
       A single handler in main.py renders any PlaceBookError as
       ``{"message": ...}`` with that status code.
Who:   Raised by services and middleware; caught by the global handler.

Exception Hierarchy:
    PlaceBookError (base)             → 500
    ├── InvalidInputError             → 422 Unprocessable Entity
    ├── GeocodingError                → 422 (address could not be resolved)
    ├── NotFoundError                 → 404 Not Found
    ├── NotAuthorizedError            → 401 (caller is not the owner)
    ├── AuthenticationError           → 403 (missing/invalid token, bad login)
    ├── RateLimitExceededError        → 429 Too Many Requests
    ├── DatabaseError                 → 500
    ├── FileStorageError              → 500
    ├── GeocodingServiceError         → 500 (geocoder unreachable / refused)
    └── TokenError                    → 500 (token could not be issued)
"""

from typing import Any, Dict, Optional

INVALID_INPUT_MESSAGE = "Invalid inputs passed, please check your data."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


class PlaceBookError(Exception):
    """
    Base exception for all PlaceBook application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status used by the global exception handler
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = UNKNOWN_ERROR_MESSAGE,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidInputError(PlaceBookError):
    """
    Raised when client input fails validation.

    When:    Empty title, short description, malformed email, bad upload.
    HTTP:    422 Unprocessable Entity
    """

    status_code = 422

    def __init__(
        self,
        message: str = INVALID_INPUT_MESSAGE,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class GeocodingError(PlaceBookError):
    """Raised when an address is empty or the geocoder returns no result."""

    status_code = 422

    def __init__(
        self,
        message: str = "Could not find location for the specified address.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PlaceBookError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception so the route stays free of status-code logic.
    """

    status_code = 404

    def __init__(
        self,
        message: str = "Could not find the requested resource.",
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource:
            ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class NotAuthorizedError(PlaceBookError):
    """Raised when an authenticated caller acts on a place they do not own."""

    status_code = 401

    def __init__(
        self,
        message: str = "You are not allowed to modify this place.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(PlaceBookError):
    """
    Raised when the caller's identity cannot be established.

    When:    Missing/invalid/expired bearer token, unknown email or wrong
             password at login. Login uses one message for both branches.
    HTTP:    403 Forbidden
    """

    status_code = 403

    def __init__(
        self,
        message: str = "Authentication failed.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(PlaceBookError):
    """Raised when a client exceeds the per-IP limit on auth endpoints."""

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(PlaceBookError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the SQLAlchemy
    error type goes into ``context`` and is logged server-side only.
    """

    def __init__(
        self,
        message: str = "Something went wrong, please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(PlaceBookError):
    """Raised when an uploaded image cannot be written to disk."""

    def __init__(
        self,
        message: str = "Could not store the uploaded image, please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GeocodingServiceError(PlaceBookError):
    """Raised when the geocoding API is unreachable or rejects the request."""

    def __init__(
        self,
        message: str = "Could not look up the address right now, please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TokenError(PlaceBookError):
    """Raised when a bearer token cannot be issued."""

    def __init__(
        self,
        message: str = "Could not complete the request, please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
