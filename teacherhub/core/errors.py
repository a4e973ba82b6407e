"""Error Hierarchy — typed, categorized exceptions for TeacherHub failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Caller errors (400/404) are recoverable; storage errors (503) are critical
    - to_response() produces the REST envelope; log_extra() the structured log fields
    - No internal details leaked in user-facing messages
    - The mutation engine and query layer never raise these for no-ops or dangling
      references; those are outcomes, not errors

Design Decisions:
    - Single hierarchy with TeacherHubError base: one FastAPI handler covers all
    - ErrorContext as dataclass: where the failure happened (slot key, action,
      request path) travels with the error instead of being re-derived by handlers
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    STORAGE = "storage"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where an error happened. Every field optional."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    storage_key: str | None = None
    action: str | None = None
    path: str | None = None
    user_message: str | None = None


class TeacherHubError(Exception):
    """Base exception for all TeacherHub errors."""

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
    def recoverable(self) -> bool:
        return self.http_status < 500

    def to_response(self) -> dict:
        """REST envelope: {"error": {...}}."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "recoverable": self.recoverable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "action": self.context.action,
                    "path": self.context.path,
                },
            }
        }

    def log_extra(self) -> dict:
        """Fields for logger `extra=` (picked up by JSONFormatter)."""
        extra = {"error_code": self.code}
        if self.context.storage_key:
            extra["storage_key"] = self.context.storage_key
        if self.context.action:
            extra["action"] = self.context.action
        if self.context.path:
            extra["path"] = self.context.path
        return extra


# ─── Caller Errors (400/404) ─────────────────────────────────────

class SnapshotFormatError(TeacherHubError):
    """Raw snapshot text is not JSON, or not a JSON object."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SNAPSHOT_FORMAT_INVALID", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class ResourceNotFoundError(TeacherHubError):
    """Requested record does not exist in the current snapshot."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ActionRejectedError(TeacherHubError):
    """Caller-side precondition failed before dispatch (e.g. score above max)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "ACTION_REJECTED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


# ─── Storage Errors (503) ────────────────────────────────────────

class StorageError(TeacherHubError):
    """Durable slot read/write failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL,
            context or ErrorContext(user_message="Storage is unavailable"),
            503,
        )
        self.operation = operation
