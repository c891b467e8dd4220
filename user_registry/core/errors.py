"""Error Hierarchy — typed, categorized exceptions for all registry failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Input and lookup errors are recoverable; storage errors are critical
    - to_envelope() produces the uniform failure envelope returned by handlers
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with RegistryError base: handlers catch one type at the boundary
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    STORAGE = "storage"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tool_name: str | None = None
    user_message: str | None = None
    retry_after_ms: int | None = None


class RegistryError(Exception):
    """Base exception for all user registry errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def recoverable(self) -> bool:
        return self.severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING, ErrorSeverity.ERROR)

    def to_envelope(self) -> dict:
        """Convert to the uniform failure envelope."""
        return {
            "ok": False,
            "error_code": self.code,
            "message": self.context.user_message or self.message,
        }


# ─── Input Errors ───────────────────────────────────────────────

class ValidationError(RegistryError):
    """Caller-supplied user fields failed shape or email validation."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.field = field


class NotFoundError(RegistryError):
    """Requested user does not exist."""
    def __init__(self, user_id: object, context: ErrorContext | None = None):
        super().__init__(
            f"User '{user_id}' not found",
            "USER_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context,
        )
        self.user_id = user_id


class GenerationParseError(RegistryError):
    """Generated text could not be parsed into a valid user."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Failed to generate user data: {reason}",
            "GENERATION_PARSE_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.reason = reason


class GenerationError(RegistryError):
    """Text generation collaborator failed or returned non-text content."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Failed to generate user data: {reason}",
            "GENERATION_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context,
        )
        self.reason = reason


# ─── Storage Errors ─────────────────────────────────────────────

class CorruptStoreError(RegistryError):
    """Backing file is not a JSON array of well-formed user records."""
    def __init__(self, message: str, path: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or "User store is corrupt"
        super().__init__(
            f"Corrupt user store at {path}: {message}",
            "CORRUPT_STORE", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.path = path


class StoreIOError(RegistryError):
    """Disk operation on the backing file failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or "Failed to save user"
        super().__init__(
            f"Store {operation} failed: {message}",
            "STORE_IO_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.operation = operation


class AnthropicAPIError(RegistryError):
    """Anthropic API call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Anthropic API error ({api_error_type}): {message}",
            "ANTHROPIC_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.api_error_type = api_error_type
