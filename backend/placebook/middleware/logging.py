"""
PlaceBook Backend: Request Logging Middleware
=============================================

What:  One access-log line per HTTP request.
How:   Times the downstream call and logs method, path, status, duration,
       request id and client IP on the ``placebook.access`` logger.
When:  Inside RequestIDMiddleware, so the request id is already set.

Unexpected errors:
    An exception no handler turned into a response is logged with its
    traceback and answered here with 500 ``{"message": ...}``. The response
    then passes back out through RequestID and CORS like any other.

Log level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Request bodies (passwords, images) and the Authorization header are never
logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from placebook.exceptions import UNKNOWN_ERROR_MESSAGE
from placebook.middleware.request_id import request_id_var

logger = logging.getLogger("placebook.access")

# Probed every few seconds; not worth a log line
UNLOGGED_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log with request-id correlation and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("[%s] Unexpected error: %s", rid, str(e), exc_info=True)
            response = JSONResponse(status_code=500, content={"message": UNKNOWN_ERROR_MESSAGE})

        if path in UNLOGGED_PATHS:
            return response

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
