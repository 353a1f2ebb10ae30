"""Error Hierarchy — typed, categorized exceptions for all Tunely failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope used by every error handler
    - No internal details leaked in user-facing messages
    - Nothing in the core retries; every operation is retryable by its caller

Design Decisions:
    - Single hierarchy with TunelyError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    PERMISSION = "permission"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    artist_id: str | None = None
    session_id: str | None = None
    item_id: str | None = None
    debug_info: dict[str, Any] | None = None


class TunelyError(Exception):
    """Base exception for all Tunely errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "artist_id": self.context.artist_id,
                    "session_id": self.context.session_id,
                    "item_id": self.context.item_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidInputError(TunelyError):
    """Request payload is malformed (empty title, bad limit, bad handle)."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_INPUT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class InvalidAmountError(TunelyError):
    """Tip amount is zero, negative, or not a finite number."""
    def __init__(self, amount: object, context: ErrorContext | None = None):
        super().__init__(
            f"Tip amount must be greater than zero (got {amount})",
            "INVALID_AMOUNT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.amount = amount


class ResourceNotFoundError(TunelyError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str,
        context: ErrorContext | None = None, detail: str = "not found",
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' {detail}",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type


class SessionClosedError(TunelyError):
    """Admission, snapshot, or completion against an inactive or unknown session."""
    def __init__(self, session_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.session_id = session_id
        super().__init__(
            "This session is not accepting requests",
            "SESSION_CLOSED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 409,
        )


class SessionNotActiveError(TunelyError):
    """Ending a session that has already ended."""
    def __init__(self, session_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.session_id = session_id
        super().__init__(
            "Session has already ended",
            "SESSION_NOT_ACTIVE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 409,
        )


class ConflictError(TunelyError):
    """Concurrent write lost a race the store could not serialize, or a unique value is taken."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class UnauthenticatedError(TunelyError):
    """Performer route called without an artist identity."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Artist identity required",
            "UNAUTHENTICATED", ErrorCategory.PERMISSION,
            ErrorSeverity.ERROR, context, 401,
        )


class ForbiddenError(TunelyError):
    """Artist acting on a session or item it does not own."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.PERMISSION,
            ErrorSeverity.ERROR, context, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(TunelyError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ViewSyncError(TunelyError):
    """Viewer gave up polling after repeated transport failures."""
    def __init__(self, message: str, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            f"View polling failed after {attempts} attempt(s): {message}",
            "VIEW_SYNC_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.attempts = attempts
