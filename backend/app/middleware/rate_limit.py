"""
DiveLog Backend: Rate Limiting Middleware
=========================================

What:  Per-IP request rate limit (default 100 requests per 60 s).
How:   The middleware only extracts the client key and turns a refusal into
       a 429; counting is delegated to a RateLimitBackend.
When:  First in the middleware chain (rejects abuse before any processing).

Backends:
    InMemoryRateLimitBackend: sliding window over per-key timestamp lists.
        Correct for a single process. Multi-worker deployments need a
        shared backend (e.g. Redis) implementing the same interface.

Algorithm (sliding window):
    1. Drop the key's timestamps older than the window
    2. If the remaining count >= limit, refuse; retry_after is when the
       oldest remaining timestamp leaves the window
    3. Otherwise record `now` and allow
"""

import logging
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    count: int
    retry_after: int = 0


class RateLimitBackend(ABC):
    """Counting strategy behind RateLimitMiddleware."""

    @abstractmethod
    async def hit(self, key: str, now: float) -> RateLimitDecision:
        """Record one request for `key` at `now` if allowed, and report the decision."""
        ...


class InMemoryRateLimitBackend(RateLimitBackend):

    def __init__(self, limit: int, window_seconds: int, cleanup_every: int = 1000):
        self.limit = limit
        self.window = window_seconds
        self.cleanup_every = cleanup_every
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._hits_since_cleanup = 0

    async def hit(self, key: str, now: float) -> RateLimitDecision:
        window_start = now - self.window
        timestamps = [ts for ts in self._requests[key] if ts > window_start]
        self._requests[key] = timestamps

        if len(timestamps) >= self.limit:
            retry_after = int(timestamps[0] + self.window - now) + 1
            return RateLimitDecision(allowed=False, count=len(timestamps), retry_after=retry_after)

        timestamps.append(now)

        self._hits_since_cleanup += 1
        if self._hits_since_cleanup >= self.cleanup_every:
            self._hits_since_cleanup = 0
            self._cleanup_inactive(window_start)

        return RateLimitDecision(allowed=True, count=len(timestamps))

    def tracked_keys(self) -> int:
        return len(self._requests)

    def _cleanup_inactive(self, window_start: float) -> None:
        """Forget keys with no request inside the current window."""
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for key in inactive:
            del self._requests[key]
        if inactive:
            logger.debug("Cleaned up %d inactive rate limit keys", len(inactive))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rejects requests over the limit with HTTP 429 and a Retry-After header.

    Excluded paths: /health and the API docs are always reachable.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, backend: Optional[RateLimitBackend] = None, **kwargs):
        super().__init__(app, **kwargs)
        self.backend = backend or InMemoryRateLimitBackend(
            limit=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window,
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        # Behind a proxy this is the proxy's address unless uvicorn runs with
        # --proxy-headers.
        client_ip = request.client.host if request.client else "unknown"

        decision = await self.backend.hit(client_ip, time.time())
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in window",
                client_ip,
                decision.count,
            )
            exc = RateLimitExceededError(retry_after=decision.retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        return await call_next(request)
