"""Error Hierarchy: typed, categorized exceptions for every outcome the dialect renders.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
      and an http_status
    - to_response() yields {"error": msg} or, for ValidationError only, {"errors": {...}}
    - classify() is total: any exception maps to exactly one ErrorKind

Design Decisions:
    - Backends signal outcomes by raising NotFoundError, PermissionDeniedError or
      ValidationError; anything else is UNCLASSIFIED and becomes a 500
    - PayloadMalformedError and MethodNotAllowedError are raised by the controller
      itself, before the backend is invoked
"""

from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    PERMISSION = "permission"
    REQUEST = "request"
    INTERNAL = "internal"


class ErrorKind(str, Enum):
    """Classification of a backend failure, used by the controller's error mapping."""
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    VALIDATION = "validation"
    INVALID_QUERY = "invalid_query"
    UNCLASSIFIED = "unclassified"


class RestDialectError(Exception):
    """Base exception for all rest-dialect errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the dialect's error body."""
        return {"error": self.message}


# ─── Backend Signals ────────────────────────────────────────────

class NotFoundError(RestDialectError):
    """The requested entity does not exist."""
    def __init__(self, message: str = "data not found"):
        super().__init__(
            message, "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, 404,
        )


class PermissionDeniedError(RestDialectError):
    """The backend refused the operation for the current caller."""
    def __init__(self, message: str = "permission denied"):
        super().__init__(
            message, "PERMISSION_DENIED", ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, 403,
        )


class ValidationError(RestDialectError):
    """Entity failed backend validation. Carries field -> message pairs."""
    def __init__(self, errors: dict[str, str]):
        super().__init__(
            f"Errors: {errors}", "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, 400,
        )
        self.errors = dict(errors)

    def to_response(self) -> dict:
        return {"errors": self.errors}


class InvalidQueryOptionsError(RestDialectError):
    """Query options could not be parsed or were rejected by the backend."""
    def __init__(self, message: str = "invalid query options"):
        super().__init__(
            message, "INVALID_QUERY_OPTIONS", ErrorCategory.REQUEST,
            ErrorSeverity.WARNING, 400,
        )


# ─── Controller Errors ──────────────────────────────────────────

class PayloadMalformedError(RestDialectError):
    """Request body could not be decoded into an entity."""
    def __init__(self, message: str = "Invalid request payload"):
        super().__init__(
            message, "PAYLOAD_MALFORMED", ErrorCategory.REQUEST,
            ErrorSeverity.WARNING, 422,
        )


class MethodNotAllowedError(RestDialectError):
    """Mutation requested on a read-only repository."""
    def __init__(self, message: str = "405 Method Not Allowed"):
        super().__init__(
            message, "METHOD_NOT_ALLOWED", ErrorCategory.REQUEST,
            ErrorSeverity.WARNING, 405,
        )


def classify(exc: BaseException) -> ErrorKind:
    """Classify any exception into exactly one ErrorKind."""
    if isinstance(exc, NotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, PermissionDeniedError):
        return ErrorKind.PERMISSION_DENIED
    if isinstance(exc, ValidationError):
        return ErrorKind.VALIDATION
    if isinstance(exc, InvalidQueryOptionsError):
        return ErrorKind.INVALID_QUERY
    return ErrorKind.UNCLASSIFIED
