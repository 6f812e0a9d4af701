"""
Memos Backend — Access Logging Middleware
==========================================

What:  One log line per HTTP request: method, path, status, duration, client.
How:   Measures wall time around call_next and picks the level from the
       status class (5xx ERROR, 4xx WARNING, otherwise INFO).

Example line:
    2024-01-15T12:00:00 [INFO] memos.access [1a2b3c4d]: GET /api/memos 200 4.1ms from 127.0.0.1

Request bodies are never logged; memo content stays out of the logs.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("memos.access")

QUIET_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        status = response.status_code

        logger.log(
            _level_for(status),
            "%s %s %d %.1fms from %s",
            request.method,
            path,
            status,
            duration_ms,
            client_ip,
            extra={
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
