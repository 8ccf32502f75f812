"""Error Hierarchy: typed, categorized exceptions for all sideload failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Input errors (400-level) are recoverable; configuration errors (500-level) are not
    - to_response() produces the REST error envelope
    - Resolver exceptions raised by declarators are NOT wrapped; they propagate as raised

Design Decisions:
    - Single hierarchy with SideloadError base: host app registers one handler (api/error_handlers.py)
    - ErrorContext as dataclass: observability fields without coupling to the logging framework
    - CacheBackendError never reaches callers: RenderCache treats it as a miss
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
    CONFIGURATION = "configuration"
    CACHE = "cache"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    render_id: str | None = None
    type_handle: str | None = None
    entity_id: Any = None
    debug_info: dict[str, Any] | None = None


class SideloadError(Exception):
    """Base exception for all sideload errors."""

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
                    "render_id": self.context.render_id,
                    "type_handle": self.context.type_handle,
                },
            }
        }


# ─── Input Errors (400-level) ───────────────────────────────────

class IdentifierDecodeError(SideloadError):
    """An encoded identifier could not be decoded for its entity type."""
    def __init__(
        self, type_handle: str, reason: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.type_handle = type_handle
        super().__init__(
            f"Failed to decode {type_handle} id: {reason}",
            "ID_DECODE_FAILED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.reason = reason


# ─── Configuration Errors (500-level) ───────────────────────────

class UnknownEntityTypeError(SideloadError):
    """A link or render referenced a type handle with no registered declarator."""
    def __init__(self, type_handle: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.type_handle = type_handle
        super().__init__(
            f"No declarator registered for entity type '{type_handle}'",
            "UNKNOWN_ENTITY_TYPE", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.type_handle = type_handle


class DuplicateEntityTypeError(SideloadError):
    """Two declarators claimed the same type handle."""
    def __init__(self, type_handle: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.type_handle = type_handle
        super().__init__(
            f"Entity type '{type_handle}' is already registered",
            "DUPLICATE_ENTITY_TYPE", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.type_handle = type_handle


# ─── Infrastructure Errors ──────────────────────────────────────

class CacheBackendError(SideloadError):
    """Cache backend read/write failed. Always handled as a cache miss."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cache backend {operation} failed: {message}",
            "CACHE_BACKEND_ERROR", ErrorCategory.CACHE,
            ErrorSeverity.WARNING, context, 500,
        )
        self.operation = operation
