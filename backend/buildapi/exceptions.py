"""
Build API — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the three failure classes of the API.
Why:   Services raise these instead of building error responses; global
       handlers (registered in main.py) turn them into the fixed JSON bodies
       clients rely on.
How:   Each exception carries a client-safe `message` and an optional
       `context` dict that is logged but never returned.

Exception Hierarchy:
    BuildApiError (base)
    ├── ValidationError   → 400 {"error": "Aggregate name is required"}
    ├── NotFoundError     → 404 {"error": "Aggregate not found"}
    └── DatabaseError     → 500 {"error": "Internal server error"}

No retries: a failed insert may already have consumed an autoincrement id,
so none of these are treated as transient.
"""

from typing import Any, Dict, Optional


class BuildApiError(Exception):
    """
    Base exception for all Build API application errors.

    Attributes:
        message:  Error description (safe to return in an API response)
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


class ValidationError(BuildApiError):
    """
    Raised when client input fails validation.

    When:    `name` missing or empty on create/update, or a malformed body.
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


class NotFoundError(BuildApiError):
    """
    Raised when a requested resource does not exist.

    When:    Get, update or delete targeting an id with no row.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "Aggregate",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource_id = resource_id


class DatabaseError(BuildApiError):
    """
    Raised when the store fails.

    HTTP:    500 Internal Server Error

    The message returned to the client is always the generic one set by the
    handler; `message` and `context` (SQL error text, ids) go to the log.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
