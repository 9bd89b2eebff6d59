"""
SpecialStandard Backend — Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions, one per failure class.
How:   Each exception carries a client-safe message and an optional context
       dict. Global handlers (registered in main.py) turn them into
       structured JSON responses with the matching HTTP status code.
Who:   Raised by repositories, services and dependencies.

Exception Hierarchy:
    SpecialStandardError (base)
    ├── ValidationError           → 400 Bad Request
    ├── AuthenticationError       → 401 Unauthorized
    ├── NotFoundError             → 404 Not Found
    ├── ConstraintViolationError  → 400 (foreign key, check, not null) / 409 (unique)
    ├── UpstreamServiceError      → relayed 4xx, otherwise 502
    ├── TransportError            → 503 Service Unavailable
    └── InternalError             → 500 Internal Server Error

Query building and row mapping never choose a status code: repositories
translate driver errors into this taxonomy exactly once, and main.py maps
the taxonomy to HTTP.
"""

from typing import Any, Dict, Optional


class SpecialStandardError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SpecialStandardError):
    """
    Raised when client input fails validation.

    When:    Bad UUID, non-positive page/limit, unparseable date, weak password,
             end before start, empty PATCH body.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "page must be a positive integer",
            "details": {"field": "page"}
        }
    """

    status_code = 400
    error_code = "validation_error"

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


class AuthenticationError(SpecialStandardError):
    """Missing or invalid credentials (401)."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SpecialStandardError):
    """
    Raised when a requested record does not exist.

    When:    A single-row lookup, update or delete matched zero rows.
    HTTP:    404 Not Found

    The driver reports "no rows" as a `None` row or a `DELETE 0` command
    tag; repositories convert both into this exception.
    """

    status_code = 404
    error_code = "not_found"

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


class ConstraintViolationError(SpecialStandardError):
    """
    Raised when the store rejects a write because of an integrity constraint.

    Kinds (from the SQLSTATE code, never from the message text):
        foreign_key  23503  → 400 "invalid reference"
        unique       23505  → 409 "conflict"
        check        23514  → 400
        not_null     23502  → 400

    Never retried: constraint violations are not transient.
    """

    FOREIGN_KEY = "foreign_key"
    UNIQUE = "unique"
    CHECK = "check"
    NOT_NULL = "not_null"

    _MESSAGES = {
        FOREIGN_KEY: "The request references a record that does not exist",
        UNIQUE: "A record with the same values already exists",
        CHECK: "The request violates a data constraint",
        NOT_NULL: "A required field is missing",
    }

    def __init__(
        self,
        kind: str,
        constraint: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["kind"] = kind
        if constraint:
            ctx["constraint"] = constraint
        super().__init__(
            message=message or self._MESSAGES.get(kind, "Constraint violation"),
            context=ctx,
        )
        self.kind = kind
        self.constraint = constraint

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return 409 if self.kind == self.UNIQUE else 400

    @property
    def error_code(self) -> str:  # type: ignore[override]
        return "conflict" if self.kind == self.UNIQUE else "invalid_reference"


class UpstreamServiceError(SpecialStandardError):
    """
    Raised when an external collaborator (identity provider, S3, Resend)
    answers but refuses the request.

    Client errors reported by the collaborator (4xx) are relayed with the
    same status so that, e.g., a duplicate signup reads as 400. Anything
    else becomes 502.
    """

    error_code = "upstream_error"

    def __init__(
        self,
        message: str = "An external service rejected the request",
        status_code: Optional[int] = None,
        service: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if service:
            ctx["service"] = service
        super().__init__(message=message, context=ctx)
        self.upstream_status = status_code
        self.service = service

    @property
    def status_code(self) -> int:  # type: ignore[override]
        if self.upstream_status is not None and 400 <= self.upstream_status < 500:
            return self.upstream_status
        return 502


class TransportError(SpecialStandardError):
    """
    Raised when talking to the store or an external HTTP collaborator fails
    at the transport level: connection refused or reset, timeout, cancelled
    statement.

    HTTP:    503 Service Unavailable. Not retried automatically for writes.
    """

    status_code = 503
    error_code = "service_unavailable"

    def __init__(
        self,
        message: str = "A backing service is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InternalError(SpecialStandardError):
    """
    Raised for programmer or schema-drift errors: row decode mismatches and
    unclassified store errors.

    HTTP:    500. The client only sees a generic message; details are logged.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
