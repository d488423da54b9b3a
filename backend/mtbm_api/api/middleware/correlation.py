"""
Correlation ID Middleware

Tags each request with a correlation ID for log tracing and writes one
access line per request.
"""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ...utils.logger import correlation_id_var, get_logger
from ...utils.idgen import generate_correlation_id

logger = get_logger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds correlation ID to all requests.

    - Reuses the X-Correlation-Id request header or generates a new ID
    - Sets it in the logging context for the duration of the request
    - Echoes it in the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = (
            request.headers.get("X-Correlation-Id") or generate_correlation_id()
        )
        token = correlation_id_var.set(correlation_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)",
                extra={"action": "http_request", "status": response.status_code}
            )
            response.headers["X-Correlation-Id"] = correlation_id
            return response
        finally:
            correlation_id_var.reset(token)
