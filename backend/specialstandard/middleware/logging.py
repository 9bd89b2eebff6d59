"""
SpecialStandard Backend — Request Logging Middleware
=====================================================

What:  One access-log line per request on the `specialstandard.access`
       logger: method, path, status, duration, request id, caller.
How:   Times the downstream call and picks the level from the status class
       (5xx ERROR, 4xx WARNING, otherwise INFO). Health probes are skipped.

Never logged: request bodies, cookies, Authorization headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from specialstandard.middleware.request_id import request_id_var

logger = logging.getLogger("specialstandard.access")

SKIPPED_PATHS = frozenset({"/health", "/api/v1/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIPPED_PATHS:
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

        # set by the auth dependency on authenticated routes
        user_id = getattr(request.state, "user_id", None)

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s user=%s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            user_id or "-",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": str(user_id) if user_id else None,
            },
        )
        return response
