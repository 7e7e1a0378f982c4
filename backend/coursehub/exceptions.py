"""
CourseHub Backend: Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and the auth dependencies; caught by global handlers.

Exception Hierarchy:
    CourseHubError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class CourseHubError(Exception):
    """
    Base exception for all CourseHub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for 400/429)
    """

    status_code = 500
    error_code = "server_error"
    # Only client-fixable errors echo their context back in "details"
    expose_details = False

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def to_body(self, request_id: str = "") -> Dict[str, Any]:
        """Render the JSON error envelope shared by handlers and middleware."""
        body: Dict[str, Any] = {
            "success": False,
            "error": self.error_code,
            "message": self.message,
        }
        if self.expose_details and self.context:
            body["details"] = self.context
        body["request_id"] = request_id
        return body


class ValidationError(CourseHubError):
    """
    Raised when client input breaks a business rule.

    What:    Category not allowed for the caller's role, empty chat message,
             messaging oneself, and similar.
    HTTP:    400 Bad Request

    Schema-level problems (wrong types, missing fields) never get here;
    FastAPI answers those with 422 before the service runs.
    """

    status_code = 400
    error_code = "validation_error"
    expose_details = True

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


class AuthenticationError(CourseHubError):
    """
    Raised when the bearer token is missing, malformed, expired, or names
    a user that no longer exists.

    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(CourseHubError):
    """
    Raised when an authenticated user fails a role, membership or
    ownership check.

    When:    Editing someone else's post, reading a course one is not
             enrolled in, pinning without being the course instructor.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Access denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CourseHubError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that
    into this exception so the handler can answer 404.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(CourseHubError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic.
        The driver error, statement and parameters are logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(CourseHubError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    Response includes:
        - retry_after: Seconds until the rate limit window resets
        - Retry-After header for HTTP-compliant clients
    """

    status_code = 429
    error_code = "rate_limit_exceeded"
    expose_details = True

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
