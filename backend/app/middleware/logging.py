"""
DiveLog Backend: Request Logging Middleware
===========================================

What:  One access-log line per request on the `divelog.access` logger, e.g.

           POST /api/v1/dives user=7 -> 409 in 12.4ms [a1b2c3d4] from 10.0.0.5

How:   Times the downstream call with perf_counter. Structured fields are
       also passed as `extra` for handlers that emit JSON.

Levels:
    5xx          ERROR
    409          INFO     (duplicate dives are an expected outcome of imports)
    other 4xx    WARNING
    otherwise    INFO

Not logged: request bodies (dive notes and buddy names are personal data)
and /health checks.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("divelog.access")

QUIET_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status == 409:
        return logging.INFO
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "user_id": request.query_params.get("user_id", "-"),
            "status": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.log(
            level_for_status(response.status_code),
            "%(method)s %(path)s user=%(user_id)s -> %(status)d in %(duration_ms).1fms "
            "[%(request_id)s] from %(client_ip)s",
            fields,
            extra=fields,
        )
        return response
