"""
Memos Backend — Rate Limiting Middleware
=========================================

What:  Per-IP sliding window limiter in front of every API route.
How:   Keeps a deque of request times per client IP; entries older than the
       window are dropped on each request. When the deque is full the
       request is answered with 429 and a Retry-After header.

Limits come from settings (RATE_LIMIT_REQUESTS per RATE_LIMIT_WINDOW
seconds). State is in-process, so each worker process counts separately.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from memos.config import settings
from memos.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Idle IPs are swept once this many distinct clients are being tracked
SWEEP_THRESHOLD = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding window limiter.

    Excluded paths:
        /health and the API docs are never limited.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        clock=time.monotonic,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._clock = clock
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = self._clock()
        window_start = now - self.window_seconds

        hits = self._requests[client_ip]
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= self.max_requests:
            retry_after = int(hits[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(hits),
                self.window_seconds,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": f"Too many requests. Please wait {retry_after} seconds before retrying.",
                    "code": "rate_limit_exceeded",
                    "details": {"retry_after": retry_after},
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)

        if len(self._requests) > SWEEP_THRESHOLD:
            self._sweep(window_start)

        return await call_next(request)

    def _sweep(self, window_start: float) -> None:
        """Forget IPs with no request inside the current window."""
        idle = [ip for ip, hits in self._requests.items() if not hits or hits[-1] <= window_start]
        for ip in idle:
            del self._requests[ip]
        if idle:
            logger.debug("Cleaned up %d inactive IP entries", len(idle))
