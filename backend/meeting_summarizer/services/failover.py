"""
Meeting Summarizer — Failover Orchestrator
===========================================

What:  Tries each configured provider in registry order until one returns a
       summary; aggregates the failures otherwise.
Why:   One provider being rate-limited, down, or misconfigured should not
       surface to the user while another provider can still do the job.
How:   Sequential attempts, one outbound call at a time. Each individual
       ProviderError is recorded and swallowed; only AllProvidersFailedError
       or NoProvidersConfiguredError leave this module.

Ordering:
    Fixed registry order, no "fastest first" or sticky reordering. Every call
    gets its own attempt sequence and starts from the first provider, so
    concurrent requests never share a cursor.

Retry Policy:
    None inside this boundary. Each provider gets one attempt per call; the
    caller (summary_service.py) may retry the whole orchestrated call.

Cancellation:
    asyncio.CancelledError is not an Exception subclass, so it propagates out
    of the in-flight adapter call untouched and no further provider is tried.
"""

import dataclasses
import logging
import uuid
from typing import List

from meeting_summarizer.exceptions import (
    AllProvidersFailedError,
    InvalidCredentialsError,
    NoProvidersConfiguredError,
    ProviderError,
    ProviderFailure,
)
from meeting_summarizer.services.llm_base import SummarizationRequest, SummarizationResult
from meeting_summarizer.services.provider_registry import ProviderRegistry

logger = logging.getLogger(__name__)


class FailoverOrchestrator:
    """
    Ordered failover across the providers of a ProviderRegistry.

    Stateless apart from the registry it reads; safe to share between
    concurrent requests.
    """

    def __init__(self, registry: ProviderRegistry):
        self.registry = registry

    async def generate_summary(
        self, transcript_text: str, instructions: str = ""
    ) -> SummarizationResult:
        """
        Summarize with the first provider that succeeds.

        Args:
            transcript_text: Meeting transcript; must be non-empty after trim.
            instructions:    Custom instructions; empty → default prompt.

        Returns:
            SummarizationResult annotated with attempted_count (1-indexed
            position among configured providers) and the failures recorded
            on the way.

        Raises:
            ValidationError:            blank transcript (before any attempt)
            NoProvidersConfiguredError: nothing to try (no network call made)
            AllProvidersFailedError:    every configured provider failed once
        """
        # Validate once up front so a blank transcript never counts as N provider failures
        request = SummarizationRequest(transcript_text, instructions or "")

        if not self.registry.configured():
            logger.error("Summary requested but no AI provider is configured")
            raise NoProvidersConfiguredError()

        call_id = str(uuid.uuid4())[:8]
        failures: List[ProviderFailure] = []
        attempted = 0

        for index, adapter in enumerate(self.registry.all()):
            if not adapter.configured:
                logger.debug("[%s] Skipping %s - not configured", call_id, adapter.name)
                continue

            attempted += 1
            logger.info(
                "[%s] Attempting summary with %s (attempt %d)",
                call_id,
                adapter.name,
                attempted,
            )
            try:
                result = await adapter.summarize(
                    request.transcript_text, request.instructions
                )
            except ProviderError as e:
                failure = e.to_failure()
                failures.append(failure)
                if isinstance(e, InvalidCredentialsError):
                    logger.error(
                        "[%s] %s rejected credentials: %s", call_id, adapter.name, e.message
                    )
                else:
                    logger.warning(
                        "[%s] %s failed (%s): %s",
                        call_id,
                        adapter.name,
                        failure.kind.value,
                        e.message,
                    )
                continue

            self.registry.record_success(index)
            logger.info(
                "[%s] Summary generated by %s after %d attempt(s)",
                call_id,
                result.provider_name,
                attempted,
            )
            return dataclasses.replace(
                result,
                provider_name=adapter.name,
                attempted_count=attempted,
                failures=tuple(failures),
            )

        logger.error(
            "[%s] All %d configured AI providers failed: %s",
            call_id,
            attempted,
            "; ".join(f"{f.provider_name}={f.kind.value}" for f in failures),
        )
        raise AllProvidersFailedError(failures=failures)
