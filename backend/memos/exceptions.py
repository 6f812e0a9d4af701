"""
Memos Backend — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{"error": message, ...}` JSON bodies with the matching status.
Who:   Raised by services, schemas helpers and routes; caught by global handlers.

Exception Hierarchy:
    MemosError (base)
    ├── ValidationError       → 400 Bad Request
    ├── AuthenticationError   → 401 Unauthorized
    ├── NotFoundError         → 404 Not Found
    ├── ConflictError         → 409 Conflict
    └── DatabaseError         → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class MemosError(Exception):
    """
    Base exception for all Memos application errors.

    Attributes:
        message:  User-facing error description (returned as `error`)
        context:  Additional debug info (logged, returned only for 400s)
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MemosError):
    """
    Raised when client input fails validation.

    When:    Bad id, empty or oversized content, bad tag name, malformed date,
             malformed JSON body, out-of-range page/limit.
    HTTP:    400 Bad Request
    """

    status_code = 400
    code = "validation_error"

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


class AuthenticationError(MemosError):
    """Raised when POST /api/auth/verify receives the wrong password."""

    status_code = 401
    code = "authentication_failed"

    def __init__(
        self,
        message: str = "Invalid password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MemosError):
    """
    Raised when a requested resource does not exist or is in the wrong state.

    When:    Unknown memo/tag id, deleting a memo already in the trash,
             restoring a memo that is not in the trash, updating a deleted memo.
    HTTP:    404 Not Found
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        message: str = "The requested resource was not found",
        resource: Optional[str] = None,
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource:
            ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(MemosError):
    """
    Raised when a write would break a uniqueness rule.

    When:    POST /api/tags with a name that already exists.
    HTTP:    409 Conflict
    """

    status_code = 409
    code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(MemosError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    exception type is kept in context and logged server-side.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
