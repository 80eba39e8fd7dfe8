"""
Meeting Summarizer — In-Memory Records
=======================================

What:  The records kept by the keyed stores: uploaded transcripts, summaries,
       and share (email) records.
Why:   Persistence is out of scope; these are plain dataclasses held in a
       process-local map (see services/store.py) and lost on restart.

Record Lifecycle:
    TranscriptFile  created by POST /api/upload, read by POST /api/summarize
    SummaryRecord   created by POST /api/summarize, edited by PUT /api/summary/{id}
    ShareRecord     created by POST /api/share, appended to the summary's history
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

PREVIEW_LENGTH = 500


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def count_words(text: str) -> int:
    return len(text.split())


@dataclass
class TranscriptFile:
    original_name: str
    size: int
    content: str
    mime_type: str = "text/plain"
    id: str = field(default_factory=_new_id)
    uploaded_at: datetime = field(default_factory=_now)

    @property
    def word_count(self) -> int:
        return count_words(self.content)

    @property
    def preview(self) -> str:
        if len(self.content) <= PREVIEW_LENGTH:
            return self.content
        return self.content[:PREVIEW_LENGTH] + "..."


@dataclass(frozen=True)
class SourceFileRef:
    """Which uploaded file a summary was generated from."""

    id: str
    original_name: str
    size: int


@dataclass(frozen=True)
class AIMetadata:
    """Provenance of a generated summary."""

    ai_service: str
    model: str
    tokens_used: int
    latency_ms: int
    processing_time_ms: int
    attempted_services: int


@dataclass(frozen=True)
class ShareHistoryEntry:
    share_id: str
    recipients: List[str]
    sent_at: datetime


@dataclass
class SummaryRecord:
    """
    A generated (and possibly edited) summary.

    original_content is the text the provider returned and never changes;
    content is what the user last saved.
    """

    content: str
    original_content: str
    instructions: str
    transcript_length: int
    ai_metadata: AIMetadata
    source_file: Optional[SourceFileRef] = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    last_modified: datetime = field(default_factory=_now)
    share_history: List[ShareHistoryEntry] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return count_words(self.content)

    @property
    def edited(self) -> bool:
        return self.content != self.original_content


@dataclass
class ShareRecord:
    summary_id: str
    recipients: List[str]
    rejected_recipients: List[str]
    subject: str
    custom_message: str
    sender_name: str
    message_id: str
    status: str = "sent"
    id: str = field(default_factory=_new_id)
    sent_at: datetime = field(default_factory=_now)
