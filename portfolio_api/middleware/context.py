"""
Request context middleware for log correlation.

Injects a request_id into every request so all log lines emitted while
handling it can be grouped, and writes one access log line per request.

Headers:
- X-Request-ID: Unique ID for this request (generated if not provided)
"""

import re
import time
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from portfolio_api.core.context import (
    clear_context,
    generate_request_id,
    set_client_ip,
    set_request_id,
)
from portfolio_api.core.rate_limit import get_client_ip

logger = structlog.get_logger(__name__)

# Request ID validation to prevent log injection attacks
MAX_ID_LENGTH = 64
SAFE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_\-]+$")


def _validate_id(value: Optional[str]) -> Optional[str]:
    """Return the ID if it is short and made of safe characters, else None."""
    if not value:
        return None
    if len(value) > MAX_ID_LENGTH:
        return None
    if not SAFE_ID_PATTERN.match(value):
        return None
    return value


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Binds request_id (and client IP) to the log context, echoes the ID in
    the X-Request-ID response header, and logs method, path, status and
    duration once the response is ready.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _validate_id(request.headers.get("X-Request-ID")) or generate_request_id()
        client_ip = get_client_ip(request)
        set_request_id(request_id)
        set_client_ip(client_ip)
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )

        start_time = time.perf_counter()
        status_code = 500  # Default to error in case of exception

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            if request.url.path != "/api/health":
                logger.info(
                    "Request completed",
                    status_code=status_code,
                    duration_ms=round(duration_ms, 1),
                    client_ip=client_ip,
                )

            # Clean up context to prevent leaking to next request
            clear_context()
            structlog.contextvars.clear_contextvars()
