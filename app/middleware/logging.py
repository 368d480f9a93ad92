"""
Request Logging Middleware
One log line per request: method, path, status and duration.
"""
import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request and tag the response with an X-Request-ID."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        start = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        # Health probes are noisy
        if request.url.path == "/health":
            logger.debug(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)")
        else:
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"({duration_ms:.1f}ms) [{request_id}]"
            )

        return response
