"""
Meeting Summarizer — Summary Routes
====================================

What:  POST /api/summarize, GET /api/summary/{id}, PUT /api/summary/{id}.
Why:   The core feature: turn a transcript into a structured summary, then
       let the user review and edit it before sharing.
How:   Thin handlers; SummaryService owns the workflow and the failover core
       owns provider selection.

Error responses (handled by global exception handlers):
    400  blank/over-long transcript, empty or over-long edit
    404  unknown file_id or summary id
    500  no AI provider configured (not retryable)
    503  every provider failed (Retry-After set)
    504  whole-call deadline expired
"""

import logging

from fastapi import APIRouter

from meeting_summarizer.models.records import SummaryRecord
from meeting_summarizer.schemas.summary import (
    ErrorResponse,
    SourceFile,
    SummarizeRequest,
    SummaryMetadata,
    SummaryOut,
    SummaryResponse,
    SummaryUpdateRequest,
)
from meeting_summarizer.services.summary_service import summary_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Summaries"])


def to_summary_out(record: SummaryRecord) -> SummaryOut:
    return SummaryOut(
        id=record.id,
        content=record.content,
        original_content=record.original_content,
        instructions=record.instructions,
        source_file=SourceFile.model_validate(record.source_file) if record.source_file else None,
        created_at=record.created_at,
        last_modified=record.last_modified,
        word_count=record.word_count,
        edited=record.edited,
        metadata=SummaryMetadata.model_validate(record.ai_metadata),
    )


@router.post(
    "/summarize",
    status_code=201,
    response_model=SummaryResponse,
    responses={
        400: {"description": "Invalid transcript", "model": ErrorResponse},
        404: {"description": "Uploaded file not found", "model": ErrorResponse},
        500: {"description": "AI summarization not configured", "model": ErrorResponse},
        503: {"description": "All AI providers failed", "model": ErrorResponse},
        504: {"description": "Summary generation timed out", "model": ErrorResponse},
    },
    summary="Generate a meeting summary",
    description=(
        "Summarize inline transcript text or a previously uploaded file. "
        "Providers are tried in configured order until one succeeds."
    ),
)
async def summarize(body: SummarizeRequest) -> SummaryResponse:
    logger.info(
        "Summarize request: source=%s, instructions=%d chars",
        "file" if body.file_id else "inline",
        len(body.instructions),
    )
    record = await summary_service.create_summary(
        transcript=body.transcript,
        file_id=body.file_id,
        instructions=body.instructions,
    )
    return SummaryResponse(summary=to_summary_out(record))


@router.get(
    "/summary/{summary_id}",
    response_model=SummaryResponse,
    responses={404: {"description": "Summary not found", "model": ErrorResponse}},
    summary="Get a summary",
)
async def get_summary(summary_id: str) -> SummaryResponse:
    return SummaryResponse(summary=to_summary_out(summary_service.get_summary(summary_id)))


@router.put(
    "/summary/{summary_id}",
    response_model=SummaryResponse,
    responses={
        400: {"description": "Empty or too long", "model": ErrorResponse},
        404: {"description": "Summary not found", "model": ErrorResponse},
    },
    summary="Save an edited summary",
)
async def update_summary(summary_id: str, body: SummaryUpdateRequest) -> SummaryResponse:
    record = summary_service.update_summary(summary_id, body.content)
    return SummaryResponse(summary=to_summary_out(record))
