"""
Recortes Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for each error scenario.
Why:   Targeted error handling with the right HTTP status codes and messages
       that never leak provider or database internals to the client.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into
       the JSON error envelope.
Who:   Raised by services, the validator and the identity resolver.

Exception Hierarchy:
    RecortesError (base)          → status_code carried on the class
    ├── ValidationError           → 400 Bad Request
    ├── AuthError                 → 401 Unauthorized
    ├── NotFoundError             → 404 Not Found
    ├── StorageError              → 500 Internal Server Error (upload path)
    └── DatabaseError             → 500 Internal Server Error

Blob deletion failures are deliberately absent: they are logged as warnings
by the blob store and never raised (see services/blob_store.py).
"""

from typing import Any, Dict, List, Optional


class RecortesError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status used by the catch-all handler
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RecortesError):
    """
    Raised when client input fails validation.

    Two shapes:
        - Field-level errors from the Request Validator: `errors` holds
          [{"field": "body.sku", "issue": "SKU is required"}, ...]
        - Ad hoc checks (missing image, malformed id): plain message only

    Example response:
        {
            "error": "validation_error",
            "message": "Validation failed",
            "errors": [{"field": "body.displayOrder", "issue": "..."}]
        }
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors or []


class AuthError(RecortesError):
    """
    Raised when the bearer credential is missing or cannot be verified.

    The `reason` distinguishes missing_header / missing_token / invalid_token
    for the server log only. The client always receives the same message so
    that probing cannot tell a malformed header from a rejected token.
    """

    status_code = 401
    error_code = "unauthorized"

    MISSING_HEADER = "missing_header"
    MISSING_TOKEN = "missing_token"
    INVALID_TOKEN = "invalid_token"

    def __init__(
        self,
        reason: str = INVALID_TOKEN,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        ctx["reason"] = reason
        super().__init__(message="Invalid or missing authentication credentials", context=ctx)
        self.reason = reason


class NotFoundError(RecortesError):
    """
    Raised when a requested resource does not exist for the caller.

    Ownership failures raise this too: a cut owned by someone else is
    reported exactly like a cut that was never created.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = dict(context or {})
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StorageError(RecortesError):
    """
    Raised when the object store rejects an upload.

    Fatal for the request: the cut row is never written when its image
    could not be stored.
    """

    def __init__(
        self,
        message: str = "Failed to store the uploaded image. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(RecortesError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the SQLAlchemy
    error type is kept in `context` for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
