"""
Meeting Summarizer — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every error scenario the API surfaces.
Why:   Custom exceptions let global handlers (registered in main.py) map each
       failure to the right HTTP status without try/except blocks in routes.
How:   Each exception carries a user-safe message and an optional context dict
       (logged, never returned verbatim for server-side errors).

Exception Hierarchy:
    MeetingSummarizerError (base)
    ├── ValidationError              → 400 Bad Request
    ├── NotFoundError                → 404 Not Found
    ├── RateLimitExceededError       → 429 Too Many Requests (our own API)
    ├── ProviderError                → internal only (folded into AllProvidersFailed)
    │   ├── ProviderTimeoutError
    │   ├── RateLimitedError
    │   ├── InvalidCredentialsError
    │   └── ProviderUnavailableError
    ├── AllProvidersFailedError      → 503 Service Unavailable (retryable)
    ├── NoProvidersConfiguredError   → 500 configuration error (not retryable)
    ├── SummarizationTimeoutError    → 504 Gateway Timeout
    └── EmailServiceError            → 503 Service Unavailable

Provider errors:
    A single provider failing is a local recovery detail: the failover
    orchestrator records it and moves on. Only the two terminal kinds
    (AllProvidersFailed, NoProvidersConfigured) leave the AI core.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class ErrorKind(str, Enum):
    """Shared taxonomy for summarization failures, independent of provider."""

    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    INVALID_CREDENTIALS = "invalid_credentials"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    PROVIDER_ERROR = "provider_error"
    ALL_PROVIDERS_FAILED = "all_providers_failed"
    NO_PROVIDERS_CONFIGURED = "no_providers_configured"


@dataclass(frozen=True)
class ProviderFailure:
    """One recorded failed attempt: which provider, what kind, what it said."""

    provider_name: str
    kind: ErrorKind
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "provider": self.provider_name,
            "kind": self.kind.value,
            "message": self.message,
        }


class MeetingSummarizerError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MeetingSummarizerError):
    """
    Raised when client input fails validation.

    When:    Bad file type, empty transcript, too many recipients, content too long.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(MeetingSummarizerError):
    """
    Raised when a requested resource does not exist in the in-memory store.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RateLimitExceededError(MeetingSummarizerError):
    """
    Raised when a client exceeds the per-IP request rate limit of this API.

    Not to be confused with RateLimitedError, which is an upstream provider
    rejecting us for quota reasons.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


# ══════════════════════════════════════════════════════════════════════════
# Provider-level errors (recoverable by the failover orchestrator)
# ══════════════════════════════════════════════════════════════════════════


class ProviderError(MeetingSummarizerError):
    """
    A single summarization provider failed.

    What:    Translates one provider's wire-level failure into the shared
             ErrorKind taxonomy.
    Who:     Raised by provider adapters; caught by the failover orchestrator.
    HTTP:    Never mapped directly. Folded into AllProvidersFailedError.

    The base class doubles as the catch-all kind (PROVIDER_ERROR) and carries
    the provider's own message verbatim.
    """

    kind: ErrorKind = ErrorKind.PROVIDER_ERROR

    def __init__(
        self,
        message: str = "Provider returned an error",
        provider_name: str = "unknown",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["provider"] = provider_name
        ctx["kind"] = self.kind.value
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.provider_name = provider_name
        self.status_code = status_code

    def to_failure(self) -> ProviderFailure:
        return ProviderFailure(
            provider_name=self.provider_name,
            kind=self.kind,
            message=self.message,
        )


class ProviderTimeoutError(ProviderError):
    """Provider did not answer within its configured window, or the connection failed."""

    kind = ErrorKind.TIMEOUT


class RateLimitedError(ProviderError):
    """Provider rejected the call because of quota (HTTP 429)."""

    kind = ErrorKind.RATE_LIMITED


class InvalidCredentialsError(ProviderError):
    """
    Provider rejected our credential (HTTP 401/403).

    Recoverable by trying the next provider, but it is a configuration defect
    and is logged at ERROR level by the orchestrator.
    """

    kind = ErrorKind.INVALID_CREDENTIALS


class ProviderUnavailableError(ProviderError):
    """Provider-side server error (HTTP 5xx)."""

    kind = ErrorKind.PROVIDER_UNAVAILABLE


# ══════════════════════════════════════════════════════════════════════════
# Terminal errors (cross the AI core boundary)
# ══════════════════════════════════════════════════════════════════════════


class AllProvidersFailedError(MeetingSummarizerError):
    """
    Every configured provider was attempted once and failed.

    HTTP:    503 Service Unavailable, with Retry-After.
    Details: The ordered per-provider breakdown, one entry per configured provider.
    """

    kind = ErrorKind.ALL_PROVIDERS_FAILED

    def __init__(
        self,
        failures: Sequence[ProviderFailure],
        retry_after: int = 30,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.failures: List[ProviderFailure] = list(failures)
        ctx = context or {}
        ctx["failures"] = [f.to_dict() for f in self.failures]
        message = "AI summarization is temporarily unavailable. Please try again later."
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class NoProvidersConfiguredError(MeetingSummarizerError):
    """
    No summarization provider has a credential.

    A configuration defect rather than a transient failure: the startup check
    refuses to boot in this state, and /health reports it as unhealthy.
    HTTP:    500, not retryable.
    """

    kind = ErrorKind.NO_PROVIDERS_CONFIGURED

    def __init__(
        self,
        message: str = (
            "AI summarization is not configured. Set GROQ_API_KEY or OPENAI_API_KEY."
        ),
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SummarizationTimeoutError(MeetingSummarizerError):
    """
    The caller's deadline for the whole orchestrated call expired.

    HTTP:    504 Gateway Timeout
    """

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        deadline: float,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["deadline_seconds"] = deadline
        super().__init__(
            message=(
                "Summary generation timed out. Please try again with a shorter transcript."
            ),
            context=ctx,
        )
        self.deadline = deadline


class EmailServiceError(MeetingSummarizerError):
    """
    SMTP is not configured, unreachable, or refused the message.

    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        message: str = "Failed to send email. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
