"""
Meeting Summarizer — Transcript Upload Routes
==============================================

What:  POST /api/upload (multipart transcript upload) and GET /api/file/{id}.
Why:   Long transcripts are easier to upload as files than to paste; the
       returned id is then passed as file_id to POST /api/summarize.
How:   Reads the upload into memory (bounded by MAX_FILE_SIZE) and delegates
       validation and storage to FileService.

Security Checks (this route):
    - File type: .txt, .md, .rtf only
    - File size: Content-Length header and actual byte count
    - Encoding:  must decode as UTF-8
"""

import logging

from fastapi import APIRouter, File, UploadFile

from meeting_summarizer.schemas.summary import ErrorResponse, UploadedFile, UploadResponse
from meeting_summarizer.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Upload"])


@router.post(
    "/upload",
    status_code=201,
    response_model=UploadResponse,
    responses={
        400: {"description": "Invalid file type, size or encoding", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
    },
    summary="Upload a meeting transcript",
)
async def upload_transcript(
    transcript: UploadFile = File(
        ...,
        description="Transcript text file (.txt, .md or .rtf, max 10MB)",
    ),
) -> UploadResponse:
    """
    Store an uploaded transcript and return its id, preview and word count.

    Error responses (handled by global exception handlers):
        HTTP 400: Invalid file type, size or encoding (ValidationError)
    """
    content = await transcript.read()
    logger.info(
        "Received upload: filename=%s, size=%d bytes",
        transcript.filename or "unknown",
        len(content),
    )
    try:
        record = file_service.validate_and_store(
            filename=transcript.filename or "transcript.txt",
            content=content,
            content_length=transcript.size,
        )
    finally:
        await transcript.close()

    return UploadResponse(file=UploadedFile.model_validate(record))


@router.get(
    "/file/{file_id}",
    response_model=UploadResponse,
    responses={404: {"description": "File not found", "model": ErrorResponse}},
    summary="Get an uploaded transcript",
)
async def get_file(file_id: str) -> UploadResponse:
    record = file_service.get_file(file_id)
    return UploadResponse(file=UploadedFile.model_validate(record))
