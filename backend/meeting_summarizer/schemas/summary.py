"""
Meeting Summarizer — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between frontend and backend.
Why:   Strict input validation, automatic serialization, and OpenAPI docs.
How:   FastAPI validates request bodies against these models (422 on schema
       errors) and serializes responses through them.

Schemas are separate from the in-memory records (models/records.py) so the
API can change independently of how records are kept.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# ══════════════════════════════════════════════════════════════════════════
# Transcript Upload
# ══════════════════════════════════════════════════════════════════════════


class UploadedFile(BaseModel):
    id: str = Field(description="Identifier to pass as file_id when summarizing")
    original_name: str
    size: int = Field(description="Size in bytes")
    uploaded_at: datetime
    content: str = Field(description="Full decoded transcript text")
    preview: str = Field(description="First 500 characters of the transcript")
    word_count: int

    model_config = {"from_attributes": True}


class UploadResponse(BaseModel):
    success: bool = True
    file: UploadedFile


# ══════════════════════════════════════════════════════════════════════════
# Summaries
# ══════════════════════════════════════════════════════════════════════════


class SummarizeRequest(BaseModel):
    """
    Either inline transcript text or the id of a previously uploaded file.
    When both are given, the uploaded file wins.
    """

    transcript: Optional[str] = Field(default=None, description="Transcript text")
    file_id: Optional[str] = Field(default=None, description="ID from POST /api/upload")
    instructions: str = Field(
        default="",
        max_length=2000,
        description="Custom summarization instructions (empty = default structure)",
    )

    @model_validator(mode="after")
    def require_content(self) -> "SummarizeRequest":
        if not self.file_id and not (self.transcript and self.transcript.strip()):
            raise ValueError("Either transcript content or file_id must be provided")
        return self


class SourceFile(BaseModel):
    id: str
    original_name: str
    size: int

    model_config = {"from_attributes": True}


class SummaryMetadata(BaseModel):
    ai_service: str = Field(description="Provider that produced the summary")
    model: str
    tokens_used: int
    latency_ms: int = Field(description="Provider round-trip time")
    processing_time_ms: int = Field(description="End-to-end time including failover")
    attempted_services: int = Field(description="Providers tried, including the successful one")

    model_config = {"from_attributes": True}


class SummaryOut(BaseModel):
    id: str
    content: str
    original_content: str
    instructions: str
    source_file: Optional[SourceFile] = None
    created_at: datetime
    last_modified: datetime
    word_count: int
    edited: bool
    metadata: SummaryMetadata

    model_config = {"from_attributes": True}


class SummaryResponse(BaseModel):
    success: bool = True
    summary: SummaryOut


class SummaryUpdateRequest(BaseModel):
    content: str = Field(description="Edited summary text")


# ══════════════════════════════════════════════════════════════════════════
# Sharing
# ══════════════════════════════════════════════════════════════════════════


class ShareRequest(BaseModel):
    summary_id: str
    recipients: List[str] = Field(min_length=1, max_length=50)
    subject: Optional[str] = Field(default=None, max_length=200)
    custom_message: Optional[str] = Field(default=None, max_length=1000)
    sender_name: Optional[str] = Field(default=None, max_length=100)

    @field_validator("subject", "custom_message", "sender_name")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class ShareOut(BaseModel):
    id: str
    summary_id: str
    recipients: List[str]
    rejected_recipients: List[str]
    subject: str
    custom_message: str
    sender_name: str
    sent_at: datetime
    message_id: str
    status: str

    model_config = {"from_attributes": True}


class ShareResponse(BaseModel):
    success: bool = True
    share: ShareOut


# ══════════════════════════════════════════════════════════════════════════
# Service Status
# ══════════════════════════════════════════════════════════════════════════


class ProviderHealthOut(BaseModel):
    configured: bool
    reachable: bool
    status: str = Field(description="healthy, unreachable, unconfigured, or error")
    detail: Optional[str] = None


class ProviderDescriptionOut(BaseModel):
    name: str
    configured: bool
    model: str
    base_url: str
    timeout_ms: int

    model_config = {"from_attributes": True}


class EmailStatusOut(BaseModel):
    configured: bool
    connected: bool
    status: str = Field(description="healthy, error, or not_configured")
    message: str
    error: Optional[str] = None
    configuration: Optional[Dict[str, object]] = None


class Recommendation(BaseModel):
    type: str = Field(description="critical, error, warning, info, or success")
    service: str
    message: str
    action: str


class OverallStatus(BaseModel):
    healthy: bool
    ai: bool
    email: bool


class ServicesOut(BaseModel):
    ai: Dict[str, ProviderHealthOut]
    email: EmailStatusOut


class ServicesStatusResponse(BaseModel):
    status: str = Field(description="healthy or degraded")
    timestamp: datetime
    services: ServicesOut
    overall: OverallStatus
    recommendations: List[Recommendation]


class AIStatusResponse(BaseModel):
    status: str = "success"
    timestamp: datetime
    services: Dict[str, ProviderHealthOut]
    configuration: List[ProviderDescriptionOut]
    current_service: Optional[ProviderDescriptionOut] = None


class EmailStatusResponse(BaseModel):
    status: str = "success"
    timestamp: datetime
    email_service: EmailStatusOut


class AITestResult(BaseModel):
    summary: str
    service_used: str
    metadata: SummaryMetadata


class AITestResponse(BaseModel):
    status: str = "success"
    message: str = "AI service test completed successfully"
    result: AITestResult
    timestamp: datetime


class EmailTestRequest(BaseModel):
    recipient: str = Field(min_length=1)


class EmailDeliveryOut(BaseModel):
    message_id: str
    recipients: List[str]
    rejected_recipients: List[str]


class EmailTestResponse(BaseModel):
    status: str = "success"
    message: str = "Test email sent successfully"
    result: EmailDeliveryOut
    timestamp: datetime


# ══════════════════════════════════════════════════════════════════════════
# Errors & Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for every API error.

    Example:
        {
            "error": "all_providers_failed",
            "message": "AI summarization is temporarily unavailable. Please try again later.",
            "details": {"failures": [{"provider": "Groq", "kind": "timeout", ...}]},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response for load balancers and monitoring.
    Why:   The service is only useful if at least one AI provider answers,
           so provider health drives the overall status.
    """

    status: str = Field(description="healthy, degraded, or unhealthy")
    version: str
    providers: Dict[str, str] = Field(description="Provider name → health status")
    configured_providers: int
    email: str = Field(description="configured or not_configured")
    uptime_seconds: float
