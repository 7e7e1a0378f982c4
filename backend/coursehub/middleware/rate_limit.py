"""
CourseHub Backend: Rate Limiting Middleware
===========================================

What:  Per-IP sliding window rate limiter.
How:   Keeps the timestamps of each IP's requests inside the window; a
       request arriving when the window is full is answered with 429 and
       a Retry-After header, without reaching the app.

Algorithm: Sliding window log
    1. Drop timestamps older than now - window
    2. If the remaining count >= limit → 429, retry after the oldest expires
    3. Otherwise record now and continue

State lives in process memory, so limits are per worker process.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from coursehub.config import settings
from coursehub.exceptions import RateLimitExceededError
from coursehub.middleware.request_id import resolve_request_id

logger = logging.getLogger(__name__)

# Sweep idle IPs after this many tracked requests
CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (from settings):
        rate_limit_requests: Max requests per window per IP
        rate_limit_window:   Window duration in seconds

    Health checks and API docs are never limited.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        self._since_cleanup = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window = settings.rate_limit_window
        window_start = now - window

        timestamps = self._requests[client_ip]
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= settings.rate_limit_requests:
            retry_after = int(timestamps[0] + window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                window,
            )
            # Rejected before RequestIDMiddleware runs
            rid = resolve_request_id(request.headers.get("X-Request-ID", ""))
            error = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=error.status_code,
                content=error.to_body(rid),
                headers={"Retry-After": str(retry_after), "X-Request-ID": rid},
            )

        timestamps.append(now)

        self._since_cleanup += 1
        if self._since_cleanup >= CLEANUP_EVERY:
            self._cleanup_inactive_ips(window_start)
            self._since_cleanup = 0

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive:
            del self._requests[ip]
        if inactive:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive))
