"""
Meeting Summarizer — Service Status Routes
===========================================

What:  Operator-facing status and smoke-test endpoints for the AI providers
       and the SMTP relay.
Why:   /health answers "can this instance take traffic"; these endpoints
       answer "which dependency is broken and what should I do about it".

Route Inventory:
    GET  /api/services/status        AI + email status, overall flag, recommendations
    GET  /api/services/ai/status     provider health + configuration + last used
    GET  /api/services/email/status  SMTP connectivity
    POST /api/services/ai/test       summarize a canned transcript
    POST /api/services/email/test    send a test email to one address
"""

import asyncio
import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter

from meeting_summarizer.config import settings
from meeting_summarizer.schemas.summary import (
    AIStatusResponse,
    AITestResponse,
    AITestResult,
    EmailDeliveryOut,
    EmailStatusOut,
    EmailStatusResponse,
    EmailTestRequest,
    EmailTestResponse,
    ErrorResponse,
    OverallStatus,
    ProviderDescriptionOut,
    ProviderHealthOut,
    Recommendation,
    ServicesOut,
    ServicesStatusResponse,
    SummaryMetadata,
)
from meeting_summarizer.services.ai_service import ai_service
from meeting_summarizer.services.email_service import email_service
from meeting_summarizer.services.status_service import HealthReport, build_recommendations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/services", tags=["Services"])

TEST_TRANSCRIPT = """Test Meeting Transcript

Attendees: John Doe, Jane Smith
Duration: 5 minutes

Discussion:
- Reviewed the AI summarization service test
- Confirmed that the service is working correctly
- Agreed to proceed with implementation

Action Items:
- Complete service testing (Owner: System)
- Verify all components are functional (Owner: System)

Next Steps:
- Continue with normal operations
- Monitor service performance

End of test transcript."""

TEST_INSTRUCTIONS = (
    "Create a brief summary of this test meeting transcript. "
    "Focus on key points and action items."
)


def _provider_entries(report: HealthReport):
    return {name: ProviderHealthOut(**p.to_dict()) for name, p in report.providers.items()}


def _now() -> datetime:
    return datetime.now(timezone.utc)


@router.get(
    "/status",
    response_model=ServicesStatusResponse,
    summary="Status of every external dependency",
)
async def services_status() -> ServicesStatusResponse:
    # Provider probes and the SMTP probe are independent
    report, email_status = await asyncio.gather(
        ai_service.get_status(), email_service.verify_connection()
    )
    ai_ok = bool(report.healthy_providers)
    email_ok = email_status.get("status") == "healthy"

    return ServicesStatusResponse(
        status="healthy" if ai_ok and email_ok else "degraded",
        timestamp=_now(),
        services=ServicesOut(
            ai=_provider_entries(report),
            email=EmailStatusOut(**email_status),
        ),
        overall=OverallStatus(healthy=ai_ok and email_ok, ai=ai_ok, email=email_ok),
        recommendations=[Recommendation(**r) for r in build_recommendations(report, email_status)],
    )


@router.get(
    "/ai/status",
    response_model=AIStatusResponse,
    summary="AI provider health and configuration",
)
async def ai_status() -> AIStatusResponse:
    report = await ai_service.get_status()
    current = ai_service.current_provider()
    return AIStatusResponse(
        timestamp=_now(),
        services=_provider_entries(report),
        configuration=[
            ProviderDescriptionOut.model_validate(d) for d in ai_service.describe_providers()
        ],
        current_service=ProviderDescriptionOut.model_validate(current) if current else None,
    )


@router.get(
    "/email/status",
    response_model=EmailStatusResponse,
    summary="SMTP connectivity",
)
async def email_status() -> EmailStatusResponse:
    status = await email_service.verify_connection()
    return EmailStatusResponse(timestamp=_now(), email_service=EmailStatusOut(**status))


@router.post(
    "/ai/test",
    response_model=AITestResponse,
    responses={
        500: {"description": "AI summarization not configured", "model": ErrorResponse},
        503: {"description": "All AI providers failed", "model": ErrorResponse},
    },
    summary="Summarize a canned transcript",
)
async def test_ai() -> AITestResponse:
    start = time.monotonic()
    result = await ai_service.generate_summary(
        TEST_TRANSCRIPT, TEST_INSTRUCTIONS, deadline=settings.ai_deadline_seconds
    )
    processing_ms = int((time.monotonic() - start) * 1000)
    logger.info("AI test completed by %s in %dms", result.provider_name, processing_ms)

    return AITestResponse(
        result=AITestResult(
            summary=result.content,
            service_used=result.provider_name,
            metadata=SummaryMetadata(
                ai_service=result.provider_name,
                model=result.model,
                tokens_used=result.tokens_used,
                latency_ms=result.latency_ms,
                processing_time_ms=processing_ms,
                attempted_services=result.attempted_count,
            ),
        ),
        timestamp=_now(),
    )


@router.post(
    "/email/test",
    response_model=EmailTestResponse,
    responses={
        400: {"description": "Invalid recipient", "model": ErrorResponse},
        503: {"description": "Email service unavailable", "model": ErrorResponse},
    },
    summary="Send a test email",
)
async def test_email(body: EmailTestRequest) -> EmailTestResponse:
    delivery = await email_service.send_test_email(body.recipient)
    return EmailTestResponse(
        result=EmailDeliveryOut(
            message_id=delivery.message_id,
            recipients=delivery.recipients,
            rejected_recipients=delivery.rejected_recipients,
        ),
        timestamp=_now(),
    )
