"""
DiveLog Backend: Security Headers Middleware
============================================

What:  Adds conservative browser security headers to every response and
       refuses request bodies larger than `max_request_size` (HTTP 413).
Why:   The API is called from a browser frontend; these headers stop MIME
       sniffing, framing and referrer leakage at no cost to the API.

Only the declared Content-Length is checked; chunked uploads without one are
passed through.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, max_request_size: int = 0, **kwargs):
        super().__init__(app, **kwargs)
        self.max_request_size = max_request_size or settings.max_request_size

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_request_size:
            logger.warning(
                "Rejected %s %s: body of %s bytes exceeds %d",
                request.method, request.url.path, declared, self.max_request_size,
            )
            response: Response = JSONResponse(
                status_code=413,
                content={
                    "error": "request_too_large",
                    "message": f"Request body exceeds {self.max_request_size} bytes",
                    "details": {"max_request_size": self.max_request_size},
                },
            )
        else:
            response = await call_next(request)

        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response
