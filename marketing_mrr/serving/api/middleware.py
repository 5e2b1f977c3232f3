"""
API Middleware

Request logging with timing information. Dashboard filters are logged with
the request so slow report queries can be traced back to their parameters.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)

REPORT_FILTERS = ("start_date", "end_date", "campaign")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log dashboard requests with their filters and timing"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))
        filters = {k: v for k, v in request.query_params.items() if k in REPORT_FILTERS}

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                **filters,
            )

            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "Request completed",
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response
