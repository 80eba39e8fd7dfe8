"""
Meeting Summarizer — Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   The service can only do its job if at least one AI provider answers,
       so provider health drives the overall status.
How:   Runs the concurrent provider probes (bounded by AI_HEALTH_TIMEOUT_MS)
       and folds them into one status.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   at least one provider answered its probe (HTTP 200)
    - degraded:  providers configured, none answering (HTTP 200, flag for monitoring)
    - unhealthy: no provider configured at all (HTTP 503, stop routing traffic)

Email is reported but never affects the status: summaries still work
without SMTP, only sharing does not.
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from meeting_summarizer import __version__
from meeting_summarizer.config import settings
from meeting_summarizer.schemas.summary import HealthResponse
from meeting_summarizer.services.ai_service import ai_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "No AI provider configured", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    report = await ai_service.get_status()
    overall = report.overall
    if overall != "healthy":
        logger.warning(
            "Health check: %s (%s)",
            overall,
            {name: p.status.value for name, p in report.providers.items()},
        )

    body = HealthResponse(
        status=overall,
        version=__version__,
        providers={name: p.status.value for name, p in report.providers.items()},
        configured_providers=sum(1 for p in report.providers.values() if p.configured),
        email="configured" if settings.email_configured else "not_configured",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
