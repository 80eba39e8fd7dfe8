"""
Meeting Summarizer — Rate Limiting Middleware
==============================================

What:  Per-IP sliding-window limit on API requests.
Why:   Every summarize call spends provider quota; one client must not be
       able to burn through it for everyone else.
How:   Timestamps per client IP in memory. On each request, timestamps older
       than RATE_LIMIT_WINDOW are dropped; a client already holding
       RATE_LIMIT_REQUESTS timestamps is rejected with 429 and Retry-After.

Limits:
    Single-process only (state is not shared between workers).
    /health and the API docs are never limited.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from meeting_summarizer.config import settings
from meeting_summarizer.exceptions import RateLimitExceededError
from meeting_summarizer.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class SlidingWindowLimiter:
    """Timestamps per key; limit and window are read from settings on each call."""

    def __init__(self):
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    def hit(self, key: str, now: Optional[float] = None) -> Optional[int]:
        """
        Record a request for `key`.

        Returns:
            None when allowed, otherwise seconds until the oldest request in
            the window expires (the Retry-After value).
        """
        now = time.time() if now is None else now
        window = settings.rate_limit_window
        hits = self._hits[key]
        while hits and hits[0] <= now - window:
            hits.popleft()

        if len(hits) >= settings.rate_limit_requests:
            return int(hits[0] + window - now) + 1

        hits.append(now)
        return None

    def prune(self, now: Optional[float] = None) -> int:
        """Forget keys with no requests inside the window. Returns how many."""
        now = time.time() if now is None else now
        cutoff = now - settings.rate_limit_window
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]
        return len(stale)

    def reset(self) -> None:
        self._hits.clear()

    def __len__(self) -> int:
        return len(self._hits)


class RateLimitMiddleware(BaseHTTPMiddleware):
    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}
    PRUNE_EVERY = 1000

    def __init__(self, app, limiter: Optional[SlidingWindowLimiter] = None):
        super().__init__(app)
        self.limiter = limiter or SlidingWindowLimiter()
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        retry_after = self.limiter.hit(client_ip)

        if retry_after is not None:
            logger.warning(
                "Rate limit exceeded for %s: %d requests per %ds",
                client_ip,
                settings.rate_limit_requests,
                settings.rate_limit_window,
            )
            # Raised exceptions would bypass the app's handlers from here, so
            # the error body is built directly from the exception.
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        self._seen += 1
        if self._seen % self.PRUNE_EVERY == 0:
            pruned = self.limiter.prune()
            if pruned:
                logger.debug("Pruned %d inactive rate-limit entries", pruned)

        return await call_next(request)
