"""Error Hierarchy: typed, categorized exceptions for every catalog failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are local to one request; infrastructure errors
      (500-level) come from the store or from startup
    - to_response() produces the REST envelope used by every error handler
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with CatalogError base: one FastAPI handler catches all
    - PersistenceError carries a kind (transient | permanent) instead of two
      classes, so callers branch on `retryable` without isinstance chains
"""

from dataclasses import dataclass, field
from enum import Enum
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
    DATABASE = "database"
    STARTUP = "startup"
    UNAVAILABLE = "unavailable"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class PersistenceErrorKind(str, Enum):
    """Transient failures may be retried by the caller; permanent ones may not."""
    TRANSIENT = "transient"
    PERMANENT = "permanent"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resource: str | None = None
    subsystem: str | None = None
    operation: str | None = None


class CatalogError(Exception):
    """Base exception for all catalog service errors."""

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
                    "resource": self.context.resource,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class ClientInputError(CatalogError):
    """Malformed identifier or request body."""
    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: list[dict] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "CLIENT_INPUT_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field
        self.details = details or []

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["field"] = self.field
        if self.details:
            response["error"]["details"] = self.details
        return response


# ─── Infrastructure Errors (500-level) ──────────────────────────

class PersistenceError(CatalogError):
    """A unit of work against the store failed and was rolled back."""
    def __init__(
        self,
        message: str,
        kind: PersistenceErrorKind,
        operation: str,
        constraint_violation: bool = False,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.operation = operation
        if kind is PersistenceErrorKind.TRANSIENT:
            http_status, category = 503, ErrorCategory.DATABASE
        elif constraint_violation:
            http_status, category = 409, ErrorCategory.CONFLICT
        else:
            http_status, category = 500, ErrorCategory.DATABASE
        super().__init__(
            f"Database {operation} failed: {message}",
            "PERSISTENCE_ERROR", category,
            ErrorSeverity.CRITICAL, ctx, http_status,
        )
        self.kind = kind
        self.operation = operation
        self.constraint_violation = constraint_violation

    @property
    def retryable(self) -> bool:
        return self.kind is PersistenceErrorKind.TRANSIENT

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["kind"] = self.kind.value
        response["error"]["retryable"] = self.retryable
        return response


class ServiceNotReadyError(CatalogError):
    """A request arrived before the persistence subsystem was attached."""
    def __init__(self, subsystem: str = "persistence", context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.subsystem = subsystem
        super().__init__(
            f"Subsystem '{subsystem}' is not ready",
            "SERVICE_NOT_READY", ErrorCategory.UNAVAILABLE,
            ErrorSeverity.WARNING, ctx, 503,
        )
        self.subsystem = subsystem


class StartupError(CatalogError):
    """A subsystem failed to initialize. Fatal: the process must not serve traffic."""
    def __init__(
        self, subsystem: str, cause: BaseException, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.subsystem = subsystem
        super().__init__(
            f"Subsystem '{subsystem}' failed to start: {cause}",
            "STARTUP_FAILED", ErrorCategory.STARTUP,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.subsystem = subsystem
        self.cause = cause
