"""
VoterReg Backend — Access Log Middleware
=========================================

What:  One log line per HTTP request: method, path, status, duration,
       request id and caller identity.
How:   Times the downstream call and picks the level from the status code
       (5xx ERROR, 4xx WARNING, else INFO).
Who:   Applied to every request via Starlette middleware.
When:  Inside RequestIDMiddleware, so the request id is already set.

What is NOT logged:
    Request bodies and uploaded files. Submissions carry personal data
    (names, birth dates, ID photos); only the caller's X-Auth-Id is recorded.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("voterreg.access")

QUIET_PATHS = ("/health",)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request after the response is produced."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        auth_id = request.headers.get("X-Auth-Id") or "-"
        client_ip = request.client.host if request.client else "unknown"

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] auth=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            auth_id,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "auth_id": auth_id,
            },
        )
        return response
