"""
Meeting Summarizer — Request Logging Middleware
================================================

What:  One access-log line per request: method, path, status, duration, client.
Why:   Summarize calls can take seconds while providers fail over; the
       duration per request is the first thing to look at when users
       report slowness.
How:   Wall-clock timing around call_next; log level follows the status class
       (5xx → ERROR, 4xx → WARNING, otherwise INFO).

Never logged: request bodies (transcripts and email addresses are user data).
/health is skipped because probes would drown out real traffic.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from meeting_summarizer.middleware.request_id import request_id_var

logger = logging.getLogger("meeting_summarizer.access")

SKIPPED_PATHS = {"/health"}


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIPPED_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms from %s",
            request.method,
            path,
            response.status_code,
            duration_ms,
            client_ip,
            extra={
                "request_id": request_id_var.get(""),
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
