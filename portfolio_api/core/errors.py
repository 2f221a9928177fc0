"""
Unified error handling.

Provides:
- The API error taxonomy (validation, not found, unauthorized, rate limited)
- Structured exception capture with request context enrichment
- An error boundary for best-effort operations whose failures must not propagate

Usage:
    # Signal a client error from a store or dependency
    raise NotFound("Post not found")

    # Capture an unexpected exception
    capture_exception(exc, context={"path": request.url.path})

    # Swallow and log failures of a side task
    with error_boundary("contact_notification", contact_id=contact.id):
        send(...)
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import structlog

from portfolio_api.core.context import get_context_dict

logger = structlog.get_logger(__name__)

__all__ = [
    "FieldError",
    "APIError",
    "ValidationFailed",
    "NotFound",
    "Unauthorized",
    "RateLimited",
    "capture_exception",
    "ErrorHandler",
    "error_boundary",
]


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation violation."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class APIError(Exception):
    """Base class for errors rendered directly as JSON error responses."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationFailed(APIError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: List[FieldError], message: Optional[str] = None):
        super().__init__(message)
        self.errors = list(errors)

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body["errors"] = [e.to_dict() for e in self.errors]
        return body


class NotFound(APIError):
    status_code = 404
    default_message = "Resource not found"


class Unauthorized(APIError):
    status_code = 401
    default_message = "Unauthorized"


class RateLimited(APIError):
    status_code = 429
    default_message = "Too many requests. Please try again later."

    def __init__(self, retry_after: int, message: Optional[str] = None):
        super().__init__(message)
        self.retry_after = max(1, int(retry_after))

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body["retry_after"] = self.retry_after
        return body


def capture_exception(
    exc: BaseException,
    context: Optional[Dict[str, Any]] = None,
    level: str = "error",
) -> None:
    """
    Log an exception with structured request context.

    Args:
        exc: Exception to capture
        context: Additional context dict (e.g., {"post_id": 3})
        level: Log level used for the event
    """
    enriched_context = {
        **get_context_dict(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "error_type": type(exc).__name__,
        **(context or {}),
    }

    log_func = getattr(logger, level, logger.error)
    log_func("Exception captured", exc_info=exc, **enriched_context)


class ErrorHandler:
    """
    Context manager for handling errors with automatic capture.

    Usage:
        # Suppress and capture errors
        with ErrorHandler("send_contact_notification", context={"contact_id": 1}):
            resend.Emails.send(...)

        # Re-raise after capturing
        with ErrorHandler("load_post_seeds", context={"path": path}, reraise=True):
            data = json.load(f)

    Args:
        operation: Name of the operation (logged with the error)
        context: Additional context dict
        reraise: Whether to re-raise exception (default: False)
        level: Log level used when capturing
    """

    def __init__(
        self,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
        reraise: bool = False,
        level: str = "error",
    ):
        self.operation = operation
        self.context = context or {}
        self.reraise = reraise
        self.level = level
        self.exception: Optional[BaseException] = None

    def __enter__(self) -> "ErrorHandler":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_val is None:
            return False
        if not isinstance(exc_val, Exception):
            # KeyboardInterrupt, SystemExit and friends always propagate
            return False

        self.exception = exc_val
        capture_exception(
            exc_val,
            context={"operation": self.operation, **self.context},
            level=self.level,
        )
        return not self.reraise

    @property
    def failed(self) -> bool:
        return self.exception is not None


@contextmanager
def error_boundary(operation: str, level: str = "warning", **context):
    """
    Simplified error boundary: captures and suppresses errors.

    Usage:
        with error_boundary("contact_notification", contact_id=7) as boundary:
            send(...)
        if boundary.failed:
            ...
    """
    handler = ErrorHandler(operation, context=context, reraise=False, level=level)
    with handler:
        yield handler
