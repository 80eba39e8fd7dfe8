"""
Meeting Summarizer — AI Service Facade
=======================================

What:  The single entry point the rest of the app uses for AI summarization:
       generate_summary() for the summarize path, get_status() for health.
Why:   Routes and services should not know about registries, adapters or
       failover; they hand over plain transcript text and get plain content.
How:   Built once at import time from settings (registry → orchestrator +
       status aggregator), then shared read-only by every request.

Boundary:
    Only AllProvidersFailedError, NoProvidersConfiguredError and
    SummarizationTimeoutError (caller deadline) leave generate_summary().
"""

import asyncio
import logging
from typing import List, Optional, Sequence

import httpx

from meeting_summarizer.config import ProviderConfig, settings
from meeting_summarizer.exceptions import SummarizationTimeoutError
from meeting_summarizer.services.failover import FailoverOrchestrator
from meeting_summarizer.services.llm_base import ProviderDescription, SummarizationResult
from meeting_summarizer.services.provider_registry import ProviderRegistry
from meeting_summarizer.services.status_service import HealthReport, StatusAggregator

logger = logging.getLogger(__name__)


class AIService:
    """Summarization with provider failover, plus provider health reporting."""

    def __init__(self, registry: ProviderRegistry):
        self.registry = registry
        self.orchestrator = FailoverOrchestrator(registry)
        self.status_aggregator = StatusAggregator(registry)

    @classmethod
    def from_configs(
        cls,
        configs: Sequence[ProviderConfig],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AIService":
        return cls(ProviderRegistry.build(configs, transport=transport))

    async def generate_summary(
        self,
        transcript_text: str,
        instructions: str = "",
        deadline: Optional[float] = None,
    ) -> SummarizationResult:
        """
        Summarize a transcript, failing over between providers.

        Args:
            deadline: Optional seconds for the whole failover sequence. When it
                      expires the in-flight provider call is cancelled and no
                      further provider is tried.
        """
        call = self.orchestrator.generate_summary(transcript_text, instructions)
        if deadline is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=deadline)
        except asyncio.TimeoutError:
            logger.error("Summary generation exceeded deadline of %.1fs", deadline)
            raise SummarizationTimeoutError(deadline=deadline)

    async def get_status(self) -> HealthReport:
        return await self.status_aggregator.gather_status()

    def describe_providers(self) -> List[ProviderDescription]:
        return [adapter.describe_status() for adapter in self.registry.all()]

    def current_provider(self) -> Optional[ProviderDescription]:
        """The provider that produced the most recent summary, if any."""
        adapter = self.registry.last_successful
        return adapter.describe_status() if adapter else None


ai_service = AIService.from_configs(settings.provider_configs())
