"""
Meeting Summarizer — Summarization Provider Interface
======================================================

What:  The contract every summarization provider adapter implements, plus the
       value types that flow across it.
Why:   The failover orchestrator and status aggregator only ever talk to this
       interface, so adding a provider means adding an adapter, nothing else.
How:   Concrete adapters (see chat_completion_service.py) subclass
       ProviderAdapter and implement summarize() / check_health() /
       describe_status(). Adapters hold immutable configuration only.

Design Decision:
    The set of adapters is closed (Groq, OpenAI) and each one is a stateless
    client. Nothing here keeps counters or caches: two concurrent requests can
    share the same adapter instance without locking.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Tuple

from meeting_summarizer.exceptions import ProviderFailure, ValidationError

# Used whenever the caller leaves the instructions empty.
DEFAULT_INSTRUCTIONS = """Please provide a comprehensive summary of this meeting transcript. Include:
1. Key discussion points
2. Decisions made
3. Action items and assignments
4. Next steps

Format the response in clear sections with bullet points where appropriate."""

SYSTEM_PROMPT = (
    "You are a helpful assistant that specializes in summarizing meeting transcripts."
)


@dataclass(frozen=True)
class SummarizationRequest:
    """
    One summarization call: the transcript and the (possibly empty) instructions.

    Raises ValidationError on construction when the transcript is blank, so no
    adapter ever builds a network request for it.
    """

    transcript_text: str
    instructions: str = ""

    def __post_init__(self):
        if not self.transcript_text or not self.transcript_text.strip():
            raise ValidationError(
                message="Transcript text must not be empty",
                field="transcript",
            )

    @property
    def effective_instructions(self) -> str:
        return self.instructions.strip() or DEFAULT_INSTRUCTIONS

    def build_prompt(self) -> str:
        return f"{self.effective_instructions}\n\nTranscript:\n{self.transcript_text}"


@dataclass(frozen=True)
class SummarizationResult:
    """
    A successful summary, owned by the caller once returned.

    attempted_count and failures are filled in by the failover orchestrator:
    attempted_count is the 1-indexed position (among configured providers) of
    the provider that produced this result, failures the recorded errors of
    the providers tried before it.
    """

    content: str
    provider_name: str
    tokens_used: int = 0
    latency_ms: int = 0
    model: str = ""
    attempted_count: int = 1
    failures: Tuple[ProviderFailure, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ProviderDescription:
    """Static, I/O-free description of an adapter for status endpoints."""

    name: str
    configured: bool
    model: str
    base_url: str
    timeout_ms: int


class ProviderAdapter(ABC):
    """
    Abstract interface for one external summarization backend.

    Contract:
        - summarize() returns a SummarizationResult or raises a ProviderError
          subclass (never a raw httpx/network exception).
        - check_health() returns a bool and never raises.
        - describe_status() is pure and synchronous.
    """

    name: str = "provider"

    @property
    @abstractmethod
    def configured(self) -> bool:
        """True iff the adapter has a non-empty credential."""
        ...

    @property
    @abstractmethod
    def health_timeout(self) -> float:
        """Seconds a health check may take before it counts as unreachable."""
        ...

    @abstractmethod
    async def summarize(
        self, transcript_text: str, instructions: str = ""
    ) -> SummarizationResult:
        """
        Summarize a transcript with one outbound call to the provider.

        Raises:
            ValidationError: transcript empty after trimming (no network call made)
            ProviderTimeoutError / RateLimitedError / InvalidCredentialsError /
            ProviderUnavailableError / ProviderError: provider-side failure
        """
        ...

    @abstractmethod
    async def check_health(self) -> bool:
        """Lightweight connectivity and credential probe."""
        ...

    @abstractmethod
    def describe_status(self) -> ProviderDescription:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} configured={self.configured}>"
