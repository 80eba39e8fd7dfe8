"""
Meeting Summarizer — Share Service
===================================

What:  Emails a stored summary and records who it was sent to.
How:   SummaryService lookup → EmailService delivery → ShareRecord stored and
       appended to the summary's share history.
"""

import logging
from typing import Optional, Sequence

from meeting_summarizer.models.records import ShareHistoryEntry, ShareRecord
from meeting_summarizer.services.email_service import EmailService, default_subject, email_service
from meeting_summarizer.services.store import InMemoryStore, share_store
from meeting_summarizer.services.summary_service import SummaryService, summary_service

logger = logging.getLogger(__name__)


class ShareService:
    def __init__(
        self,
        summaries: Optional[SummaryService] = None,
        email: Optional[EmailService] = None,
        store: Optional[InMemoryStore[ShareRecord]] = None,
    ):
        self.summaries = summaries if summaries is not None else summary_service
        self.email = email if email is not None else email_service
        self.store = store if store is not None else share_store

    async def share_summary(
        self,
        summary_id: str,
        recipients: Sequence[str],
        subject: Optional[str] = None,
        custom_message: Optional[str] = None,
        sender_name: Optional[str] = None,
    ) -> ShareRecord:
        """
        Raises:
            NotFoundError:     unknown summary_id (checked before any SMTP work)
            ValidationError:   recipient list rejected
            EmailServiceError: SMTP not configured or delivery failed
        """
        summary = self.summaries.get_summary(summary_id)
        logger.info("Sharing summary %s with %d recipient(s)", summary_id, len(recipients))

        delivery = await self.email.send_summary_email(
            recipients,
            summary,
            subject=subject,
            custom_message=custom_message,
            sender_name=sender_name,
        )

        record = ShareRecord(
            summary_id=summary_id,
            recipients=delivery.recipients,
            rejected_recipients=delivery.rejected_recipients,
            subject=subject or default_subject(summary),
            custom_message=custom_message or "",
            sender_name=sender_name or self.email.config.email_from_name,
            message_id=delivery.message_id,
        )
        self.store.put(record.id, record)
        summary.share_history.append(
            ShareHistoryEntry(
                share_id=record.id,
                recipients=list(delivery.recipients),
                sent_at=record.sent_at,
            )
        )
        logger.info("Summary %s shared as %s (message %s)", summary_id, record.id, record.message_id)
        return record

    def get_share(self, share_id: str) -> ShareRecord:
        return self.store.require(share_id)


share_service = ShareService()
