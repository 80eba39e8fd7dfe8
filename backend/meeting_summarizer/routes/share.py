"""
Meeting Summarizer — Share Routes
==================================

What:  POST /api/share emails a summary; GET /api/share/{id} returns the record.
Who:   Called by the frontend share dialog after the user reviews the summary.
"""

import logging

from fastapi import APIRouter

from meeting_summarizer.schemas.summary import ErrorResponse, ShareOut, ShareRequest, ShareResponse
from meeting_summarizer.services.share_service import share_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Share"])


@router.post(
    "/share",
    response_model=ShareResponse,
    responses={
        400: {"description": "Invalid recipients", "model": ErrorResponse},
        404: {"description": "Summary not found", "model": ErrorResponse},
        503: {"description": "Email service unavailable", "model": ErrorResponse},
    },
    summary="Share a summary by email",
)
async def share_summary(body: ShareRequest) -> ShareResponse:
    record = await share_service.share_summary(
        summary_id=body.summary_id,
        recipients=body.recipients,
        subject=body.subject,
        custom_message=body.custom_message,
        sender_name=body.sender_name,
    )
    return ShareResponse(share=ShareOut.model_validate(record))


@router.get(
    "/share/{share_id}",
    response_model=ShareResponse,
    responses={404: {"description": "Share record not found", "model": ErrorResponse}},
    summary="Get a share record",
)
async def get_share(share_id: str) -> ShareResponse:
    return ShareResponse(share=ShareOut.model_validate(share_service.get_share(share_id)))
