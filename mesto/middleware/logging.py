"""
Mesto Backend - Request Logging Middleware
===========================================

What:  One access log line per request: method, path, status, duration,
       request id, client IP and, for authenticated requests, the user id.
Why:   uvicorn's access log has no request id and no caller identity.

What we DON'T log (privacy):
    request bodies (passwords), cookies (session tokens)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from mesto.middleware.request_id import request_id_var

logger = logging.getLogger("mesto.access")

SKIPPED_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Level by status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
    Health probes are skipped (too noisy).
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # Set by require_identity; absent on public routes and rejected requests
        user_id = getattr(request.state, "user_id", None)

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s user=%s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            user_id or "-",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": str(user_id) if user_id else None,
            },
        )

        return response
