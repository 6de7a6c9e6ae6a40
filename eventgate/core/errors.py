"""Error Hierarchy — typed, categorized exceptions for all eventgate failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are user-correctable; DatabaseError (503) is the only
      class that warrants operator alerting and is always safe to retry
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages (token failure reasons stay
      on the exception for server-side logs)

Design Decisions:
    - Single hierarchy with EventGateError base: FastAPI global handler catches all
    - Scan outcomes and team-add conflicts are NOT exceptions: they are structured
      results (ScanAttempt, AddMemberResult) so UIs render them without alarm
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    INVALID = "invalid"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    POLICY_VIOLATION = "policy_violation"
    AUTHENTICATION = "authentication"
    DATABASE = "database"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str | None = None
    registration_id: str | None = None
    team_id: str | None = None
    checkpoint: str | None = None


class EventGateError(Exception):
    """Base exception for all eventgate errors."""

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

    @property
    def retryable(self) -> bool:
        return self.category == ErrorCategory.DATABASE

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "event_id": self.context.event_id,
                    "registration_id": self.context.registration_id,
                    "team_id": self.context.team_id,
                    "checkpoint": self.context.checkpoint,
                },
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class InvalidTokenError(EventGateError):
    """Token malformed, forged, or bound to a revoked/unknown registration.

    The message is identical for every reason; `reason` is for server logs only.
    """
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            "Invalid or tampered QR code",
            "INVALID_TOKEN", ErrorCategory.INVALID,
            ErrorSeverity.WARNING, context, 400,
        )
        self.reason = reason


class ResourceNotFoundError(EventGateError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type


class ConflictError(EventGateError):
    """Operation collides with existing state (user-correctable)."""
    def __init__(
        self, message: str, code: str = "CONFLICT", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class PolicyViolationError(EventGateError):
    """Event policy forbids the operation (locked, out of order, revoked...)."""
    def __init__(
        self, message: str, code: str = "POLICY_VIOLATION", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.POLICY_VIOLATION,
            ErrorSeverity.WARNING, context, 422,
        )


class UnknownCheckpointError(PolicyViolationError):
    """Checkpoint name is not part of the event's checkpoint sequence."""
    def __init__(self, checkpoint: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.checkpoint = checkpoint
        super().__init__(
            f"Checkpoint '{checkpoint}' is not part of this event",
            "UNKNOWN_CHECKPOINT", ctx,
        )
        self.checkpoint = checkpoint


class ScoreValidationError(EventGateError):
    """Score value rejected before reaching the store."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_SCORE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class AuthenticationRequiredError(EventGateError):
    """Caller identity missing — raised by the API layer only."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authentication required",
            "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class PermissionDeniedError(EventGateError):
    """Caller role lacks the capability — raised by the API layer only."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "PERMISSION_DENIED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(EventGateError):
    """Database operation failed. Nothing was committed; the whole call may be retried."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
