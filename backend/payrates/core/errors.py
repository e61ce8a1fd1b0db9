"""Error Hierarchy — typed, categorized exceptions for every rate-management failure.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Validation errors (400) never reach the store
    - DuplicateDateError is a CreateFailureError: callers catching the general
      create failure also catch the duplicate case
    - to_response() produces the REST envelope; to_notification() produces the
      operator-facing (summary, detail) pair
    - Nothing here is fatal: every error is local to one workflow and retryable

Design Decisions:
    - Single hierarchy with PayRatesError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from payrates.core.domain_types import Notification, NotificationSeverity


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    STORE = "store"
    DATABASE = "database"
    TRANSPORT = "transport"
    WORKFLOW = "workflow"


_NOTIFICATION_SEVERITY = {
    ErrorSeverity.INFO: NotificationSeverity.INFO,
    ErrorSeverity.WARNING: NotificationSeverity.WARNING,
    ErrorSeverity.ERROR: NotificationSeverity.ERROR,
    ErrorSeverity.CRITICAL: NotificationSeverity.ERROR,
}


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: int | None = None
    effective_from: date | None = None
    debug_info: dict[str, Any] | None = None


class PayRatesError(Exception):
    """Base exception for all PayRates errors."""

    summary = "Error"

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
                    "user_id": self.context.user_id,
                    "effective_from": (
                        self.context.effective_from.isoformat()
                        if self.context.effective_from else None
                    ),
                },
            }
        }

    def to_notification(self) -> Notification:
        """Convert to an operator notification; the detail is the message verbatim."""
        return Notification(
            severity=_NOTIFICATION_SEVERITY[self.severity],
            summary=self.summary,
            detail=self.message,
        )


# ─── Validation (400-level) ─────────────────────────────────────

class InvalidInputError(PayRatesError):
    """Local validation failed; identifies the offending field."""
    summary = "Invalid input"

    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_INPUT", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class UserNotFoundError(PayRatesError):
    """User identifier does not resolve to a known user."""
    summary = "Unknown user"

    def __init__(self, user_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_id = user_id
        super().__init__(
            f"User '{user_id}' not found",
            "USER_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.user_id = user_id


class RateRecordNotFoundError(PayRatesError):
    """No record exists for the (user_id, effective_from) key."""
    summary = "Unknown rate"

    def __init__(
        self, user_id: int, effective_from: date, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.user_id = user_id
        ctx.effective_from = effective_from
        super().__init__(
            f"No hourly rate for user '{user_id}' effective from {effective_from.isoformat()}",
            "RATE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class WorkflowStateError(PayRatesError):
    """Operation not permitted in the workflow's current phase."""
    summary = "Busy"

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "WORKFLOW_STATE", ErrorCategory.WORKFLOW,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Remote Operation Failures ──────────────────────────────────

class LoadFailureError(PayRatesError):
    """Rate history could not be retrieved."""
    summary = "Load failed"

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "LOAD_FAILED", ErrorCategory.STORE,
            ErrorSeverity.ERROR, context, 502,
        )


class CreateFailureError(PayRatesError):
    """The store rejected a new rate record."""
    summary = "Create failed"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        code: str = "CREATE_FAILED",
        category: ErrorCategory = ErrorCategory.STORE,
        http_status: int = 502,
    ):
        super().__init__(
            message, code, category, ErrorSeverity.ERROR, context, http_status,
        )


class DuplicateDateError(CreateFailureError):
    """A record with the same effective_from already exists for the user."""

    def __init__(
        self, user_id: int, effective_from: date, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.user_id = user_id
        ctx.effective_from = effective_from
        super().__init__(
            f"User '{user_id}' already has an hourly rate effective from "
            f"{effective_from.isoformat()}",
            ctx, "DUPLICATE_DATE", ErrorCategory.CONFLICT, 409,
        )
        self.user_id = user_id
        self.effective_from = effective_from


class UpdateFailureError(PayRatesError):
    """The store rejected an hourly rate amendment."""
    summary = "Update failed"

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "UPDATE_FAILED", ErrorCategory.STORE,
            ErrorSeverity.ERROR, context, 502,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(PayRatesError):
    """Database operation failed."""
    summary = "Store error"

    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class StoreUnavailableError(PayRatesError):
    """Remote store unreachable or answered with an unexpected status."""
    summary = "Store unavailable"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "STORE_UNAVAILABLE", ErrorCategory.TRANSPORT,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.status_code = status_code
