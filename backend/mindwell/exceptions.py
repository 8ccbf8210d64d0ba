"""
MindWell Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for each failure class of a request.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by validators, dependencies, services and repositories;
       caught by the global handlers.

Exception Hierarchy:
    MindWellError (base)
    ├── ValidationError            → 400 Bad Request
    │   └── DuplicateUsernameError → 400 Bad Request
    ├── UnauthorizedError          → 401 Unauthorized
    ├── ForbiddenError             → 403 Forbidden
    ├── NotFoundError              → 404 Not Found
    ├── PaymentStateError          → 409 Conflict
    ├── RateLimitExceededError     → 429 Too Many Requests
    ├── ExternalServiceError       → 500 Internal Server Error
    │   └── CircuitBreakerOpenError→ 503 Service Unavailable
    └── DatabaseError              → 500 Internal Server Error

Propagation:
    Validation failures terminate at the route boundary before any store call.
    Ownership / not-found failures terminate after a single store read and
    before any mutating store call. Nothing is retried automatically except
    the payment processor call inside StripeService.
"""

from typing import Any, Dict, Optional


class MindWellError(Exception):
    """
    Base exception for all MindWell application errors.

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


class ValidationError(MindWellError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, wrong types, mood outside the enumeration,
             unknown fields in a partial update.
    HTTP:    400 Bad Request

    The message stays generic ("Invalid data"); the offending field is kept
    in `context` for the server log only.
    """

    def __init__(
        self,
        message: str = "Invalid data",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateUsernameError(ValidationError):
    """
    Raised when a username is already taken (case-insensitive).

    HTTP:    400 Bad Request
    """

    def __init__(self, username: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["username"] = username
        super().__init__(message="Username already exists", field="username", context=ctx)


class UnauthorizedError(MindWellError):
    """
    Raised when a request carries no valid identity.

    When:    Missing, malformed or expired bearer token; token for a deleted user;
             wrong login credentials.
    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(MindWellError):
    """
    Raised when the authenticated identity does not own the referenced entity.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MindWellError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PATCH/DELETE /api/journal-entries/{id} with an unknown id,
             store updates against an unknown user/entry/payment id.
    HTTP:    404 Not Found
    """

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
        self.resource = resource


class PaymentStateError(MindWellError):
    """
    Raised on an illegal payment status transition.

    When:    e.g. a failure notification for a payment that already granted premium.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        current: str,
        requested: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update({"current": current, "requested": requested})
        super().__init__(
            message=f"Payment cannot move from '{current}' to '{requested}'",
            context=ctx,
        )
        self.current = current
        self.requested = requested


class ExternalServiceError(MindWellError):
    """
    Raised when the payment processor call failed or is unconfigured.

    HTTP:    500 Internal Server Error
    The message is returned as-is; it is written to be safe for clients
    (e.g. "Stripe is not configured").
    """

    def __init__(
        self,
        message: str = "Payment processor request failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CircuitBreakerOpenError(ExternalServiceError):
    """
    Raised when the payment processor circuit breaker is OPEN.

    When:    After cb_failure_threshold consecutive processor failures.
    HTTP:    503 Service Unavailable (Retry-After header)

    State machine:
        CLOSED (normal) → failures increment counter
        → After N failures → OPEN (reject all calls for recovery_time seconds)
        → After recovery_time → HALF-OPEN (allow one test call)
        → Test succeeds → CLOSED; test fails → OPEN again
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            "Payment service is temporarily unavailable due to repeated failures. "
            f"Please retry in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time


class DatabaseError(MindWellError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. SQL text,
        constraint names and driver errors are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(MindWellError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (Retry-After header)
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
