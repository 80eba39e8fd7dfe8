"""
Meeting Summarizer — API Route Tests
=====================================

What:  End-to-end HTTP behaviour of every route, in-process (ASGITransport).
How:   The AI facade and SMTP are patched at the service singletons; the
       routing, validation, exception handlers and middleware are real.
"""

from unittest.mock import AsyncMock, patch

import pytest

from meeting_summarizer.config import settings
from meeting_summarizer.exceptions import (
    AllProvidersFailedError,
    ErrorKind,
    NoProvidersConfiguredError,
    ProviderFailure,
    SummarizationTimeoutError,
)
from meeting_summarizer.middleware.rate_limit import SlidingWindowLimiter
from meeting_summarizer.services.ai_service import ai_service
from meeting_summarizer.services.email_service import EmailDeliveryResult, email_service
from meeting_summarizer.services.status_service import HealthReport, HealthStatus, ProviderHealth


def report(**statuses) -> HealthReport:
    providers = {}
    for name, status in statuses.items():
        configured = status is not HealthStatus.UNCONFIGURED
        providers[name] = ProviderHealth(
            configured=configured,
            reachable=status is HealthStatus.HEALTHY,
            status=status,
        )
    return HealthReport(providers=providers)


@pytest.fixture
def mock_generate(summarization_result):
    with patch.object(
        ai_service,
        "generate_summary",
        AsyncMock(return_value=summarization_result("## Summary\n- Shipped v2", "Groq")),
    ) as mocked:
        yield mocked


@pytest.fixture
def mock_status():
    with patch.object(ai_service, "get_status", AsyncMock()) as mocked:
        yield mocked


# ══════════════════════════════════════════════════════════════════════════
# Upload
# ══════════════════════════════════════════════════════════════════════════


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_and_fetch(self, test_client):
        response = await test_client.post(
            "/api/upload",
            files={"transcript": ("standup.txt", b"Alice: shipped it", "text/plain")},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["file"]["original_name"] == "standup.txt"
        assert body["file"]["word_count"] == 3
        assert body["file"]["preview"] == "Alice: shipped it"

        fetched = await test_client.get(f"/api/file/{body['file']['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["file"]["content"] == "Alice: shipped it"

    @pytest.mark.asyncio
    async def test_wrong_type_rejected(self, test_client):
        response = await test_client.post(
            "/api/upload",
            files={"transcript": ("slides.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_missing_file(self, test_client):
        response = await test_client.get("/api/file/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


# ══════════════════════════════════════════════════════════════════════════
# Summaries
# ══════════════════════════════════════════════════════════════════════════


class TestSummarize:

    @pytest.mark.asyncio
    async def test_inline_transcript(self, test_client, mock_generate):
        response = await test_client.post(
            "/api/summarize",
            json={"transcript": "Alice: shipped v2", "instructions": "bullets"},
        )

        assert response.status_code == 201
        summary = response.json()["summary"]
        assert summary["content"] == "## Summary\n- Shipped v2"
        assert summary["metadata"]["ai_service"] == "Groq"
        assert summary["edited"] is False
        mock_generate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_from_uploaded_file(self, test_client, mock_generate):
        upload = await test_client.post(
            "/api/upload",
            files={"transcript": ("notes.md", b"# Sync\nBob: done", "text/markdown")},
        )
        file_id = upload.json()["file"]["id"]

        response = await test_client.post("/api/summarize", json={"file_id": file_id})

        assert response.status_code == 201
        assert response.json()["summary"]["source_file"]["original_name"] == "notes.md"
        assert mock_generate.await_args.args[0] == "# Sync\nBob: done"

    @pytest.mark.asyncio
    async def test_requires_transcript_or_file(self, test_client, mock_generate):
        response = await test_client.post("/api/summarize", json={"instructions": "x"})

        assert response.status_code == 422
        mock_generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_providers_failed_is_503_with_breakdown(self, test_client):
        error = AllProvidersFailedError(
            failures=[
                ProviderFailure("Groq", ErrorKind.TIMEOUT, "timeout"),
                ProviderFailure("OpenAI", ErrorKind.RATE_LIMITED, "quota"),
            ]
        )
        with patch.object(ai_service, "generate_summary", AsyncMock(side_effect=error)):
            response = await test_client.post("/api/summarize", json={"transcript": "hello"})

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "30"
        body = response.json()
        assert body["error"] == "all_providers_failed"
        assert body["details"]["retryable"] is True
        assert [f["provider"] for f in body["details"]["failures"]] == ["Groq", "OpenAI"]
        assert body["details"]["failures"][0]["kind"] == "timeout"

    @pytest.mark.asyncio
    async def test_no_providers_is_non_retryable_500(self, test_client):
        with patch.object(
            ai_service, "generate_summary", AsyncMock(side_effect=NoProvidersConfiguredError())
        ):
            response = await test_client.post("/api/summarize", json={"transcript": "hello"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "configuration_error"
        assert body["details"]["retryable"] is False
        assert "Retry-After" not in response.headers

    @pytest.mark.asyncio
    async def test_deadline_is_504(self, test_client):
        with patch.object(
            ai_service,
            "generate_summary",
            AsyncMock(side_effect=SummarizationTimeoutError(deadline=5)),
        ):
            response = await test_client.post("/api/summarize", json={"transcript": "hello"})

        assert response.status_code == 504
        assert response.json()["error"] == "summarization_timeout"

    @pytest.mark.asyncio
    async def test_get_and_edit(self, test_client, sample_summary):
        got = await test_client.get(f"/api/summary/{sample_summary.id}")
        assert got.status_code == 200
        assert got.json()["summary"]["metadata"]["tokens_used"] == 150

        edited = await test_client.put(
            f"/api/summary/{sample_summary.id}", json={"content": "  New text  "}
        )
        assert edited.status_code == 200
        summary = edited.json()["summary"]
        assert summary["content"] == "New text"
        assert summary["original_content"] == "## Key points\n- Budget approved"
        assert summary["edited"] is True

    @pytest.mark.asyncio
    async def test_blank_edit_rejected(self, test_client, sample_summary):
        response = await test_client.put(
            f"/api/summary/{sample_summary.id}", json={"content": "   "}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_summary(self, test_client):
        response = await test_client.get("/api/summary/missing")
        assert response.status_code == 404


# ══════════════════════════════════════════════════════════════════════════
# Sharing
# ══════════════════════════════════════════════════════════════════════════


class TestShare:

    @pytest.mark.asyncio
    async def test_share_and_fetch_record(self, test_client, sample_summary):
        delivery = EmailDeliveryResult(
            message_id="<abc@example.test>",
            recipients=["ann@example.com"],
            rejected_recipients=[],
        )
        with patch.object(
            email_service, "send_summary_email", AsyncMock(return_value=delivery)
        ) as send:
            response = await test_client.post(
                "/api/share",
                json={
                    "summary_id": sample_summary.id,
                    "recipients": ["Ann@Example.com"],
                    "subject": "  Weekly sync  ",
                },
            )

        assert response.status_code == 200
        share = response.json()["share"]
        assert share["recipients"] == ["ann@example.com"]
        assert share["subject"] == "Weekly sync"
        assert share["message_id"] == "<abc@example.test>"
        assert send.await_args.kwargs["subject"] == "Weekly sync"
        assert len(sample_summary.share_history) == 1

        fetched = await test_client.get(f"/api/share/{share['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["share"]["summary_id"] == sample_summary.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"recipients": []},
            {"recipients": [f"u{i}@example.com" for i in range(51)]},
            {"recipients": ["a@example.com"], "subject": "s" * 201},
            {"recipients": ["a@example.com"], "custom_message": "m" * 1001},
        ],
    )
    async def test_request_limits(self, test_client, sample_summary, payload):
        response = await test_client.post(
            "/api/share", json={"summary_id": sample_summary.id, **payload}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_summary(self, test_client):
        response = await test_client.post(
            "/api/share", json={"summary_id": "missing", "recipients": ["a@example.com"]}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_smtp_not_configured_is_503(self, test_client, sample_summary):
        response = await test_client.post(
            "/api/share",
            json={"summary_id": sample_summary.id, "recipients": ["a@example.com"]},
        )

        assert response.status_code == 503
        assert response.json()["error"] == "email_service_unavailable"

    @pytest.mark.asyncio
    async def test_unknown_share_record(self, test_client):
        response = await test_client.get("/api/share/missing")
        assert response.status_code == 404


# ══════════════════════════════════════════════════════════════════════════
# Service Status & Health
# ══════════════════════════════════════════════════════════════════════════


class TestServiceStatus:

    @pytest.mark.asyncio
    async def test_overall_status(self, test_client, mock_status):
        mock_status.return_value = report(Groq=HealthStatus.HEALTHY, OpenAI=HealthStatus.UNCONFIGURED)

        response = await test_client.get("/api/services/status")

        assert response.status_code == 200
        body = response.json()
        # SMTP is not configured in the test environment
        assert body["status"] == "degraded"
        assert body["overall"] == {"healthy": False, "ai": True, "email": False}
        assert body["services"]["ai"]["OpenAI"]["status"] == "unconfigured"
        assert body["services"]["email"]["status"] == "not_configured"
        services = {r["service"] for r in body["recommendations"]}
        assert {"ai", "OpenAI", "email"} <= services

    @pytest.mark.asyncio
    async def test_ai_status_includes_configuration(self, test_client, mock_status):
        mock_status.return_value = report(Groq=HealthStatus.HEALTHY, OpenAI=HealthStatus.HEALTHY)

        response = await test_client.get("/api/services/ai/status")

        body = response.json()
        assert [c["name"] for c in body["configuration"]] == ["Groq", "OpenAI"]
        assert body["current_service"] is None
        assert body["services"]["Groq"]["reachable"] is True

    @pytest.mark.asyncio
    async def test_email_status(self, test_client):
        response = await test_client.get("/api/services/email/status")

        assert response.status_code == 200
        assert response.json()["email_service"]["configured"] is False

    @pytest.mark.asyncio
    async def test_ai_smoke_test(self, test_client, mock_generate):
        with patch.object(settings, "ai_deadline_seconds", 7.5):
            response = await test_client.post("/api/services/ai/test")

        assert response.status_code == 200
        body = response.json()
        assert body["result"]["service_used"] == "Groq"
        assert "Test Meeting Transcript" in mock_generate.await_args.args[0]
        assert mock_generate.await_args.kwargs["deadline"] == 7.5

    @pytest.mark.asyncio
    async def test_email_smoke_test_unconfigured(self, test_client):
        response = await test_client.post(
            "/api/services/email/test", json={"recipient": "ops@example.com"}
        )
        assert response.status_code == 503


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client, mock_status):
        mock_status.return_value = report(Groq=HealthStatus.HEALTHY, OpenAI=HealthStatus.UNREACHABLE)

        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["providers"] == {"Groq": "healthy", "OpenAI": "unreachable"}
        assert body["configured_providers"] == 2
        assert body["email"] == "not_configured"

    @pytest.mark.asyncio
    async def test_degraded_when_nothing_answers(self, test_client, mock_status):
        mock_status.return_value = report(Groq=HealthStatus.UNREACHABLE, OpenAI=HealthStatus.ERROR)

        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_unhealthy_without_configured_providers(self, test_client, mock_status):
        mock_status.return_value = report(
            Groq=HealthStatus.UNCONFIGURED, OpenAI=HealthStatus.UNCONFIGURED
        )

        response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


# ══════════════════════════════════════════════════════════════════════════
# Middleware
# ══════════════════════════════════════════════════════════════════════════


class TestMiddleware:

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/summary/missing", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"

    @pytest.mark.asyncio
    async def test_rate_limited_response_carries_request_id(self, test_client):
        with patch.object(settings, "rate_limit_requests", 1):
            await test_client.get("/api/summary/missing")
            response = await test_client.get(
                "/api/summary/missing", headers={"X-Request-ID": "trace-429"}
            )

        assert response.status_code == 429
        assert response.headers["X-Request-ID"] == "trace-429"
        assert response.headers["Retry-After"]
        body = response.json()
        assert body["error"] == "rate_limit_exceeded"
        assert body["request_id"] == "trace-429"

    def test_sliding_window_limiter(self):
        limiter = SlidingWindowLimiter()
        with patch("meeting_summarizer.middleware.rate_limit.settings") as mock_settings:
            mock_settings.rate_limit_requests = 2
            mock_settings.rate_limit_window = 60

            assert limiter.hit("1.2.3.4", now=1000) is None
            assert limiter.hit("1.2.3.4", now=1010) is None
            assert limiter.hit("1.2.3.4", now=1020) == 41
            # Other clients are unaffected
            assert limiter.hit("5.6.7.8", now=1020) is None
            # Oldest hit has left the window
            assert limiter.hit("1.2.3.4", now=1061) is None

            assert limiter.prune(now=2000) == 2
            assert len(limiter) == 0
