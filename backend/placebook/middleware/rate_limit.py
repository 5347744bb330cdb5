"""
PlaceBook Backend: Auth Endpoint Rate Limiting
==============================================

What:  Per-IP sliding window limit on the credential endpoints
       (POST /api/users/login and POST /api/users/signup).
How:   Keeps the timestamps of recent attempts per client IP in memory and
       answers 429 with a Retry-After header once the window is full.
When:  Outermost middleware, so rejected attempts cost nothing downstream.

Algorithm: Sliding Window Log
    1. Drop the client's timestamps older than rate_limit_window
    2. If rate_limit_requests remain, reject with 429
    3. Otherwise record the attempt and let it through

Single-process only: each worker keeps its own counters.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from placebook.config import settings
from placebook.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

LIMITED_ENDPOINTS = frozenset({
    ("POST", "/api/users/login"),
    ("POST", "/api/users/signup"),
})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window limiter for brute-force-prone endpoints.

    Limits are read from settings on every request (rate_limit_requests per
    rate_limit_window seconds).
    """

    # Full sweep of idle IPs after this many recorded attempts
    CLEANUP_INTERVAL = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if (request.method, request.url.path) not in LIMITED_ENDPOINTS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window = settings.rate_limit_window
        window_start = now - window

        attempts = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = attempts

        if len(attempts) >= settings.rate_limit_requests:
            retry_after = int(attempts[0] + window - now) + 1
            exc = RateLimitExceededError(retry_after=retry_after)

            logger.warning(
                "Rate limit exceeded for IP %s on %s: %d attempts in %ds",
                client_ip,
                request.url.path,
                len(attempts),
                window,
            )

            # Middleware sits outside the app's exception handlers
            return JSONResponse(
                status_code=exc.status_code,
                content={"message": exc.message},
                headers={"Retry-After": str(exc.retry_after)},
            )

        attempts.append(now)
        self._recorded += 1
        if self._recorded % self.CLEANUP_INTERVAL == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
