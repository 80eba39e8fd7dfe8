"""
Meeting Summarizer — Transcript Upload Service
===============================================

What:  Validates uploaded transcript files and keeps them in the transcript store.
Why:   Centralizes upload checks so the route handler stays thin.
How:   Extension check, size check, UTF-8 decode, non-empty check, then a
       TranscriptFile record is put into the in-memory store.
Who:   Called by POST /api/upload; SummaryService reads stored files back.

Validation order (cheapest first):
    1. Extension: no content read needed
    2. Size: Content-Length header, then actual byte count
    3. Decode: must be valid UTF-8 text (a BOM is tolerated)
    4. Emptiness: whitespace-only files are rejected
"""

import logging
from pathlib import Path
from typing import Optional

from meeting_summarizer.config import settings
from meeting_summarizer.exceptions import ValidationError
from meeting_summarizer.models.records import TranscriptFile
from meeting_summarizer.services.store import InMemoryStore, transcript_store

logger = logging.getLogger(__name__)

# What: Allowed transcript extensions and the MIME type recorded for each
ALLOWED_TYPES = {
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".rtf": "application/rtf",
}
ALLOWED_EXTENSIONS = set(ALLOWED_TYPES)


class FileService:
    """
    Upload validation and lookup for transcript files.

    Args:
        store: Override the transcript store (used in tests).
    """

    def __init__(self, store: Optional[InMemoryStore[TranscriptFile]] = None):
        self.store = store if store is not None else transcript_store

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized extension (lowercase with dot).
        Raises ValidationError if it is not an allowed transcript type.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"Invalid file type '{ext or filename}'. "
                    f"Only {', '.join(sorted(ALLOWED_EXTENSIONS))} files are allowed."
                ),
                field="transcript",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Check the Content-Length header first (cheap), then the real size,
        since some clients send inaccurate headers.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="transcript",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=(
                    f"File size ({actual_size / (1024 * 1024):.1f}MB) "
                    f"exceeds maximum of {max_mb:.0f}MB."
                ),
                field="transcript",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def decode_content(self, content: bytes) -> str:
        """Decode as UTF-8 and reject blank files."""
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValidationError(
                message="The uploaded file is not valid UTF-8 text.",
                field="transcript",
                context={"position": e.start},
            )

        if not text.strip():
            raise ValidationError(
                message="The uploaded file appears to be empty.",
                field="transcript",
            )
        return text

    def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> TranscriptFile:
        """
        Complete validation pipeline, then store the transcript.

        Returns:
            The stored TranscriptFile (its id is what the client sends back
            as file_id when requesting a summary).
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        text = self.decode_content(content)

        record = TranscriptFile(
            original_name=filename,
            size=len(content),
            content=text,
            mime_type=ALLOWED_TYPES[ext],
        )
        self.store.put(record.id, record)

        logger.info(
            "Transcript stored: %s (%d bytes, %d words) as %s",
            filename,
            record.size,
            record.word_count,
            record.id,
        )
        return record

    def get_file(self, file_id: str) -> TranscriptFile:
        return self.store.require(file_id)


file_service = FileService()
