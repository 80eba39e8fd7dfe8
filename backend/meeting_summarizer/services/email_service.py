"""
Meeting Summarizer — Email Delivery Service
============================================

What:  Validates recipient lists, renders summary emails, and sends them over SMTP.
Why:   Sharing a summary is the last step of the workflow; delivery problems
       must surface as clean 4xx/503 errors, never as raw SMTP tracebacks.
How:   Jinja2 templates (HTML autoescaped, plus a plain-text alternative)
       rendered into an email.message.EmailMessage, sent with smtplib on a
       worker thread (asyncio.to_thread) so the event loop never blocks.

Configuration:
    SMTP_HOST, SMTP_USER, SMTP_PASS and EMAIL_FROM must all be set.
    SMTP_SECURE=true → implicit TLS (port 465); otherwise STARTTLS when
    the server offers it.
"""

import asyncio
import logging
import re
import smtplib
import ssl
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from meeting_summarizer.config import Settings, settings
from meeting_summarizer.exceptions import EmailServiceError, ValidationError
from meeting_summarizer.models.records import AIMetadata, SummaryRecord

logger = logging.getLogger(__name__)

# RFC 5322-ish local part, RFC 1035 labels for the domain
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
MAX_EMAIL_LENGTH = 254  # RFC 5321

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_templates = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(enabled_extensions=("html.j2",), default_for_string=False),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class EmailDeliveryResult:
    message_id: str
    recipients: List[str]
    rejected_recipients: List[str] = field(default_factory=list)


def default_subject(summary: SummaryRecord) -> str:
    return f"Meeting Summary - {summary.created_at.strftime('%Y-%m-%d')}"


class EmailService:
    """
    SMTP delivery for summary sharing.

    Args:
        config: Settings override (tests build their own Settings instance)
    """

    def __init__(self, config: Optional[Settings] = None):
        self._config = config

    @property
    def config(self) -> Settings:
        return self._config if self._config is not None else settings

    def is_configured(self) -> bool:
        return self.config.email_configured

    # ══════════════════════════════════════════════════════════════════════
    # Recipient validation
    # ══════════════════════════════════════════════════════════════════════

    def validate_emails(self, emails: Sequence[str]) -> Tuple[List[str], List[str]]:
        """
        Normalize and check a recipient list.

        Returns:
            (valid, errors): valid addresses are trimmed, lower-cased and
            de-duplicated in input order; errors holds one message per
            rejected entry. Exceeding the recipient limit rejects the list.
        """
        max_recipients = self.config.email_max_recipients
        if len(emails) > max_recipients:
            return [], [
                f"Too many recipients. Maximum {max_recipients} allowed, got {len(emails)}"
            ]

        valid: List[str] = []
        errors: List[str] = []
        for raw in emails:
            email = (raw or "").strip().lower()
            if not email:
                errors.append("Empty email address found")
            elif len(email) > MAX_EMAIL_LENGTH:
                errors.append(f"Email address too long: {email[:50]}...")
            elif not EMAIL_PATTERN.match(email):
                errors.append(f"Invalid email format: {email}")
            elif email in valid:
                errors.append(f"Duplicate email address: {email}")
            else:
                valid.append(email)
        return valid, errors

    # ══════════════════════════════════════════════════════════════════════
    # Rendering
    # ══════════════════════════════════════════════════════════════════════

    def _template_context(self, summary: SummaryRecord, custom_message: str) -> Dict[str, object]:
        return {
            "content": summary.content,
            "instructions": summary.instructions or "Default summary",
            "created_at": summary.created_at.strftime("%Y-%m-%d %H:%M UTC"),
            "source_file": summary.source_file.original_name if summary.source_file else None,
            "ai_service": summary.ai_metadata.ai_service,
            "custom_message": custom_message,
        }

    def render_html(self, summary: SummaryRecord, custom_message: str = "") -> str:
        context = self._template_context(summary, custom_message)
        return _templates.get_template("share_email.html.j2").render(**context)

    def render_text(self, summary: SummaryRecord, custom_message: str = "") -> str:
        context = self._template_context(summary, custom_message)
        return _templates.get_template("share_email.txt.j2").render(**context).strip()

    # ══════════════════════════════════════════════════════════════════════
    # SMTP
    # ══════════════════════════════════════════════════════════════════════

    def _connect(self) -> smtplib.SMTP:
        """Open and authenticate a connection; closed again if any step fails."""
        cfg = self.config
        if cfg.smtp_secure:
            smtp: smtplib.SMTP = smtplib.SMTP_SSL(
                cfg.smtp_host,
                cfg.smtp_port,
                timeout=cfg.email_timeout,
                context=ssl.create_default_context(),
            )
        else:
            smtp = smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.email_timeout)
        try:
            if not cfg.smtp_secure:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls(context=ssl.create_default_context())
                    smtp.ehlo()
            smtp.login(cfg.smtp_user, cfg.smtp_pass)
        except BaseException:
            smtp.close()
            raise
        return smtp

    @staticmethod
    def _disconnect(smtp: smtplib.SMTP) -> None:
        try:
            smtp.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.debug("SMTP QUIT failed, closing socket: %s", str(e))
            smtp.close()

    def _verify_sync(self) -> None:
        smtp = self._connect()
        try:
            smtp.noop()
        finally:
            self._disconnect(smtp)

    def _send_sync(self, message: EmailMessage) -> Dict[str, Tuple[int, bytes]]:
        smtp = self._connect()
        try:
            return smtp.send_message(message)
        finally:
            self._disconnect(smtp)

    async def verify_connection(self) -> Dict[str, object]:
        """
        Connect and authenticate without sending anything.

        Returns a status dict for the service status endpoints; never raises.
        """
        if not self.is_configured():
            return {
                "configured": False,
                "connected": False,
                "status": "not_configured",
                "message": "Email service not configured",
            }

        cfg = self.config
        configuration = {
            "host": cfg.smtp_host,
            "port": cfg.smtp_port,
            "secure": cfg.smtp_secure,
            "from": cfg.email_from,
            "max_recipients": cfg.email_max_recipients,
        }
        try:
            await asyncio.to_thread(self._verify_sync)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("SMTP verification against %s failed: %s", cfg.smtp_host, e)
            return {
                "configured": True,
                "connected": False,
                "status": "error",
                "message": "Email service connection failed",
                "error": str(e),
                "configuration": configuration,
            }
        return {
            "configured": True,
            "connected": True,
            "status": "healthy",
            "message": "Email configuration is valid",
            "configuration": configuration,
        }

    async def send_summary_email(
        self,
        recipients: Sequence[str],
        summary: SummaryRecord,
        subject: Optional[str] = None,
        custom_message: Optional[str] = None,
        sender_name: Optional[str] = None,
    ) -> EmailDeliveryResult:
        """
        Send a summary to a list of recipients.

        Raises:
            EmailServiceError: SMTP not configured, unreachable, or refused the message
            ValidationError:   any recipient is invalid, or none remain
        """
        if not self.is_configured():
            raise EmailServiceError(
                message=(
                    "Email service is not properly configured. "
                    "Please contact the administrator."
                )
            )

        valid, errors = self.validate_emails(recipients)
        if errors:
            raise ValidationError(
                message=f"Email validation failed: {', '.join(errors)}",
                field="recipients",
                context={"errors": errors},
            )
        if not valid:
            raise ValidationError(
                message="No valid email addresses provided",
                field="recipients",
            )

        cfg = self.config
        custom_message = custom_message or ""
        message = EmailMessage()
        message["From"] = formataddr((sender_name or cfg.email_from_name, cfg.email_from))
        message["To"] = ", ".join(valid)
        message["Subject"] = subject or default_subject(summary)
        message["Message-ID"] = make_msgid(domain=cfg.email_from.rpartition("@")[2] or None)
        message["X-Mailer"] = "AI Meeting Notes Summarizer"
        message.set_content(self.render_text(summary, custom_message))
        message.add_alternative(self.render_html(summary, custom_message), subtype="html")

        try:
            refused = await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send summary %s via %s: %s", summary.id, cfg.smtp_host, e)
            raise EmailServiceError(
                message="Failed to send email. Please try again later.",
                context={"smtp_error": str(e)},
            )

        rejected = sorted(refused)
        delivered = [r for r in valid if r not in refused]
        logger.info(
            "Summary %s emailed to %d recipient(s), %d rejected",
            summary.id,
            len(delivered),
            len(rejected),
        )
        return EmailDeliveryResult(
            message_id=str(message["Message-ID"]),
            recipients=delivered,
            rejected_recipients=rejected,
        )

    async def send_test_email(self, recipient: str) -> EmailDeliveryResult:
        """Send a canned summary to one address to prove delivery works end to end."""
        sample = SummaryRecord(
            content=(
                "This is a test email from the Meeting Summarizer.\n\n"
                "If you received this, email delivery is configured correctly."
            ),
            original_content="",
            instructions="Test email",
            transcript_length=0,
            ai_metadata=AIMetadata(
                ai_service="",
                model="",
                tokens_used=0,
                latency_ms=0,
                processing_time_ms=0,
                attempted_services=0,
            ),
        )
        return await self.send_summary_email(
            [recipient], sample, subject="Meeting Summarizer - Test Email"
        )


email_service = EmailService()
