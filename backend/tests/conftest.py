"""
Meeting Summarizer — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (scripted providers, clean
       stores, an in-process API client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Autouse (every test):
    └── clean_state: empties the in-memory stores and registry hints

    Function-scoped:
    ├── fake_provider: ScriptedProvider class (no network)
    ├── provider_config: ProviderConfig factory
    ├── sample_summary: a stored SummaryRecord
    └── test_client: HTTPX AsyncClient bound to the FastAPI app
"""

import asyncio
import os
from typing import List, Optional, Sequence, Union

# Override settings for testing BEFORE any package imports
# Provider keys are fake; every outbound call in the suite is mocked
os.environ["GROQ_API_KEY"] = "test-groq-key"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SUMMARY_RETRY_WAIT"] = "0"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
for _var in ("SMTP_HOST", "SMTP_USER", "SMTP_PASS", "EMAIL_FROM", "AI_DEADLINE_SECONDS"):
    os.environ.pop(_var, None)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from meeting_summarizer.config import ProviderConfig  # noqa: E402
from meeting_summarizer.exceptions import ProviderError  # noqa: E402
from meeting_summarizer.models.records import AIMetadata, SummaryRecord  # noqa: E402
from meeting_summarizer.services.llm_base import (  # noqa: E402
    ProviderAdapter,
    ProviderDescription,
    SummarizationRequest,
    SummarizationResult,
)
from meeting_summarizer.services.store import (  # noqa: E402
    share_store,
    summary_store,
    transcript_store,
)


# ══════════════════════════════════════════════════════════════════════════
# Scripted Provider
# ══════════════════════════════════════════════════════════════════════════

Outcome = Union[str, ProviderError]


class ScriptedProvider(ProviderAdapter):
    """
    A ProviderAdapter that replays a script instead of calling a network.

    Each summarize() call pops the next outcome (the last one repeats):
    a string becomes the summary content, a ProviderError is raised.
    health may be True/False, an exception to raise, or "hang" to sleep
    past the health timeout.
    """

    def __init__(
        self,
        name: str,
        outcomes: Sequence[Outcome] = ("summary",),
        configured: bool = True,
        health: Union[bool, str, Exception] = True,
        health_timeout: float = 0.05,
        delay: float = 0.0,
    ):
        self.name = name
        self._outcomes: List[Outcome] = list(outcomes)
        self._configured = configured
        self._health = health
        self._health_timeout = health_timeout
        self._delay = delay
        self.summarize_calls = 0
        self.health_calls = 0

    @property
    def configured(self) -> bool:
        return self._configured

    @property
    def health_timeout(self) -> float:
        return self._health_timeout

    async def summarize(self, transcript_text: str, instructions: str = "") -> SummarizationResult:
        SummarizationRequest(transcript_text, instructions)
        self.summarize_calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, ProviderError):
            raise outcome
        return SummarizationResult(
            content=outcome, provider_name=self.name, tokens_used=42, latency_ms=5, model="test-model"
        )

    async def check_health(self) -> bool:
        self.health_calls += 1
        if self._health == "hang":
            await asyncio.sleep(self._health_timeout * 20)
            return True
        if isinstance(self._health, Exception):
            raise self._health
        return bool(self._health)

    def describe_status(self) -> ProviderDescription:
        return ProviderDescription(
            name=self.name,
            configured=self._configured,
            model="test-model",
            base_url="https://example.test/v1",
            timeout_ms=1000,
        )


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture(autouse=True)
def clean_state():
    """Every test starts with empty stores and no 'last used provider'."""
    from meeting_summarizer.services.ai_service import ai_service

    transcript_store.clear()
    summary_store.clear()
    share_store.clear()
    ai_service.registry.last_success_index = None
    yield
    transcript_store.clear()
    summary_store.clear()
    share_store.clear()


@pytest.fixture
def fake_provider():
    return ScriptedProvider


@pytest.fixture
def provider_config():
    def _make(name: str = "Groq", credential: str = "key", **overrides) -> ProviderConfig:
        values = {
            "name": name,
            "credential": credential,
            "base_url": f"https://{name.lower()}.test/v1",
            "model": f"{name.lower()}-model",
            "timeout_ms": 2_000,
            "health_timeout_ms": 500,
        }
        values.update(overrides)
        return ProviderConfig(**values)

    return _make


@pytest.fixture
def sample_summary() -> SummaryRecord:
    record = SummaryRecord(
        content="## Key points\n- Budget approved",
        original_content="## Key points\n- Budget approved",
        instructions="",
        transcript_length=120,
        ai_metadata=AIMetadata(
            ai_service="Groq",
            model="llama3-8b-8192",
            tokens_used=150,
            latency_ms=800,
            processing_time_ms=820,
            attempted_services=1,
        ),
    )
    summary_store.put(record.id, record)
    return record


@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    ASGITransport does not run the lifespan, so the startup configuration
    check is exercised separately in test_config.py.
    """
    from meeting_summarizer.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def make_result(content: str = "summary", provider: str = "Groq", attempted: int = 1,
                failures: Optional[tuple] = None) -> SummarizationResult:
    return SummarizationResult(
        content=content,
        provider_name=provider,
        tokens_used=100,
        latency_ms=250,
        model="test-model",
        attempted_count=attempted,
        failures=failures or (),
    )


@pytest.fixture
def summarization_result():
    return make_result
