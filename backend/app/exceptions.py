"""
DiveLog Backend: Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the error scenarios of the dive log.
Why:   Each exception maps to one HTTP status code in the global handlers
       (registered in main.py), so services never build HTTP responses.
How:   Every exception carries a human-readable message and a context dict.
       The handlers decide which parts of the context reach the client.
Who:   Raised by repositories, services and route dependencies.

Exception Hierarchy:
    DiveLogError (base)
    ├── ValidationError          → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── StorageError             → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests
"""

from typing import Any, Dict, Optional


class DiveLogError(Exception):
    """
    Base exception for all DiveLog application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional structured info; handlers choose what to expose
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DiveLogError):
    """
    Raised when client input fails validation.

    When:    Missing or non-integer user_id, malformed ids, empty batch,
             blank search query, unparseable datetime in strict mode.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(DiveLogError):
    """
    Raised when a requested resource does not exist.

    Dives are looked up by (id, user_id), so a dive owned by someone else is
    reported as not found rather than forbidden.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(DiveLogError):
    """
    Raised when a write would violate a uniqueness rule.

    When:
        - a dive already exists for the same user, calendar date and location
        - a dive site with the same name already exists within 100 m
        - a dive site that is still referenced by dives is deleted
    HTTP:    409 Conflict

    The whole context is returned to the client as `details`, so dive
    conflicts expose the `date` and `location` the client sent.
    """

    def __init__(
        self,
        message: str = "The request conflicts with existing data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(DiveLogError):
    """
    Raised when the database fails underneath a repository call.

    HTTP:    500 Internal Server Error

    The client always gets a generic message; the context (operation name,
    driver error text) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(DiveLogError):
    """
    A client exceeded the per-IP request rate limit.

    Built, not raised, by RateLimitMiddleware, which renders it as a
    429 Too Many Requests with a Retry-After header.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
