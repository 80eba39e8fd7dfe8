"""
Meeting Summarizer — Summary Service (Business Logic Orchestrator)
===================================================================

What:  Coordinates the transcript → AI summary → store workflow, plus summary
       retrieval and editing.
Why:   Keeps business rules (length limits, edit semantics, retry policy) out
       of route handlers and out of the AI core.
How:   Composes FileService (uploaded transcripts), AIService (failover core)
       and the in-memory summary store.
Who:   Called by the summarize routes and the AI test endpoint.

Orchestration Flow (POST /api/summarize):
    ┌──────────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │ Resolve text │───▶│ Length      │───▶│ AIService    │───▶│  Store   │
    │ (inline/file)│    │ checks      │    │ (+ retry)    │    │ (memory) │
    └──────────────┘    └─────────────┘    └──────────────┘    └──────────┘

Retry Policy:
    The AI core attempts each provider exactly once. This layer may re-run
    the whole orchestrated call with a fixed delay (tenacity), and only when
    every provider failed. NoProvidersConfigured, validation errors and the
    caller deadline are never retried.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from meeting_summarizer.config import settings
from meeting_summarizer.exceptions import AllProvidersFailedError, ValidationError
from meeting_summarizer.models.records import AIMetadata, SourceFileRef, SummaryRecord
from meeting_summarizer.services.ai_service import AIService, ai_service
from meeting_summarizer.services.file_service import FileService, file_service
from meeting_summarizer.services.llm_base import SummarizationResult
from meeting_summarizer.services.store import InMemoryStore, summary_store

logger = logging.getLogger(__name__)


class SummaryService:
    """
    Business logic layer for summaries.

    Responsibilities:
        - create_summary(): transcript → provider failover → stored record
        - get_summary():    lookup with not-found handling
        - update_summary(): user edits, original content preserved

    Args are overridable so tests can wire a fake AIService and private stores.
    """

    def __init__(
        self,
        ai: Optional[AIService] = None,
        files: Optional[FileService] = None,
        store: Optional[InMemoryStore[SummaryRecord]] = None,
    ):
        self.ai = ai if ai is not None else ai_service
        self.files = files if files is not None else file_service
        self.store = store if store is not None else summary_store

    async def create_summary(
        self,
        transcript: Optional[str] = None,
        file_id: Optional[str] = None,
        instructions: str = "",
    ) -> SummaryRecord:
        """
        Generate and store a summary.

        Args:
            transcript:   Inline transcript text (ignored when file_id is given)
            file_id:      ID of an uploaded transcript
            instructions: Custom instructions; empty → default structure

        Raises:
            NotFoundError:              file_id does not exist
            ValidationError:            blank or over-long transcript
            AllProvidersFailedError:    still failing after the retry budget
            NoProvidersConfiguredError: no provider has a credential
            SummarizationTimeoutError:  AI_DEADLINE_SECONDS expired
        """
        source_file: Optional[SourceFileRef] = None
        if file_id:
            uploaded = self.files.get_file(file_id)
            text = uploaded.content
            source_file = SourceFileRef(
                id=uploaded.id, original_name=uploaded.original_name, size=uploaded.size
            )
        else:
            text = transcript or ""

        self._validate_transcript(text)
        instructions = (instructions or "").strip()

        start = time.monotonic()
        result = await self._generate_with_retry(text, instructions)
        processing_ms = int((time.monotonic() - start) * 1000)

        content = result.content.strip()
        record = SummaryRecord(
            content=content,
            original_content=content,
            instructions=instructions,
            transcript_length=len(text),
            source_file=source_file,
            ai_metadata=AIMetadata(
                ai_service=result.provider_name,
                model=result.model,
                tokens_used=result.tokens_used,
                latency_ms=result.latency_ms,
                processing_time_ms=processing_ms,
                attempted_services=result.attempted_count,
            ),
        )
        self.store.put(record.id, record)

        logger.info(
            "Summary %s created by %s in %dms (%d chars from %d-char transcript)",
            record.id,
            result.provider_name,
            processing_ms,
            len(content),
            len(text),
        )
        return record

    def _validate_transcript(self, text: str) -> None:
        if not text.strip():
            raise ValidationError(
                message="Transcript content is empty.",
                field="transcript",
            )
        if len(text) > settings.max_transcript_length:
            raise ValidationError(
                message=(
                    f"Transcript is too long ({len(text)} characters). "
                    f"Maximum is {settings.max_transcript_length} characters."
                ),
                field="transcript",
                context={
                    "length": len(text),
                    "max_length": settings.max_transcript_length,
                },
            )

    async def _generate_with_retry(
        self, text: str, instructions: str
    ) -> SummarizationResult:
        """
        Run the orchestrated call under a fixed-delay retry.

        Settings are read per call (not at decoration time) so tests and
        operators can change SUMMARY_RETRY_* without re-importing.
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(AllProvidersFailedError),
            stop=stop_after_attempt(settings.summary_retry_attempts),
            wait=wait_fixed(settings.summary_retry_wait),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self.ai.generate_summary(
                    text, instructions, deadline=settings.ai_deadline_seconds
                )

    def get_summary(self, summary_id: str) -> SummaryRecord:
        return self.store.require(summary_id)

    def update_summary(self, summary_id: str, content: str) -> SummaryRecord:
        """
        Replace the summary text with the user's edit.

        The provider's original text stays in original_content so the UI can
        show whether (and how) the summary was edited.
        """
        record = self.store.require(summary_id)

        edited = (content or "").strip()
        if not edited:
            raise ValidationError(
                message="Summary content cannot be empty.",
                field="content",
            )
        if len(edited) > settings.max_summary_length:
            raise ValidationError(
                message=(
                    f"Summary is too long ({len(edited)} characters). "
                    f"Maximum is {settings.max_summary_length} characters."
                ),
                field="content",
                context={"length": len(edited), "max_length": settings.max_summary_length},
            )

        record.content = edited
        record.last_modified = datetime.now(timezone.utc)
        logger.info("Summary %s edited (%d chars)", summary_id, len(edited))
        return record


summary_service = SummaryService()
