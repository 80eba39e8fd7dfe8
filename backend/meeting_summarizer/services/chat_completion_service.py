"""
Meeting Summarizer — Chat Completion Provider Adapters
=======================================================

What:  Concrete provider adapters for OpenAI-compatible chat completion APIs
       (Groq and OpenAI).
Why:   Both providers speak the same wire protocol, so a single adapter class
       handles the request/response format and error translation; the
       variants only differ in name and defaults.
How:   One httpx.AsyncClient per call (adapters stay stateless), a POST to
       /chat/completions for summaries and a GET to /models for health checks.

Error Translation:
    httpx.TimeoutException, overall timeout → ProviderTimeoutError
    httpx.DecodingError                     → ProviderError
    other httpx.RequestError                → ProviderTimeoutError
    HTTP 401, 403                           → InvalidCredentialsError
    HTTP 429                                → RateLimitedError
    HTTP 5xx                                → ProviderUnavailableError
    any other non-2xx, bad body, no content → ProviderError (message verbatim)
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional, Tuple, Type

import httpx

from meeting_summarizer.config import ProviderConfig
from meeting_summarizer.exceptions import (
    InvalidCredentialsError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RateLimitedError,
)
from meeting_summarizer.services.llm_base import (
    SYSTEM_PROMPT,
    ProviderAdapter,
    ProviderDescription,
    SummarizationRequest,
    SummarizationResult,
)

logger = logging.getLogger(__name__)


class ChatCompletionAdapter(ProviderAdapter):
    """
    Adapter for one OpenAI-compatible chat completion endpoint.

    Attributes are set once in __init__ and never reassigned. The optional
    transport is injected by tests (httpx.MockTransport); production calls go
    over the default HTTPS transport.
    """

    name = "ChatCompletion"

    def __init__(
        self,
        config: ProviderConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config
        self._transport = transport
        self.name = config.name

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def configured(self) -> bool:
        return self._config.configured

    @property
    def timeout(self) -> float:
        return self._config.timeout_ms / 1000

    @property
    def health_timeout(self) -> float:
        return self._config.health_timeout_ms / 1000

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            headers={"Authorization": f"Bearer {self._config.credential}"},
            timeout=timeout,
            transport=self._transport,
        )

    def _build_payload(self, request: SummarizationRequest) -> Dict[str, Any]:
        return {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": request.build_prompt()},
            ],
            "max_tokens": self._config.max_output_tokens,
            "temperature": self._config.temperature,
        }

    async def summarize(
        self, transcript_text: str, instructions: str = ""
    ) -> SummarizationResult:
        """
        Generate a summary with a single POST to {base_url}/chat/completions.

        Flow:
            1. Validate locally (blank transcript → ValidationError, no I/O)
            2. Refuse if no credential (InvalidCredentialsError, no I/O)
            3. POST, timing the round trip
            4. Map non-2xx statuses and transport failures to ProviderError kinds
            5. Extract content; empty content is a failure, not a success
        """
        request = SummarizationRequest(transcript_text, instructions or "")

        if not self.configured:
            raise InvalidCredentialsError(
                message=f"{self.name} API key not configured",
                provider_name=self.name,
            )

        start = time.perf_counter()
        try:
            # httpx timeouts apply per phase; wait_for caps the whole round trip
            response = await asyncio.wait_for(
                self._post_completion(self._build_payload(request)), timeout=self.timeout
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise ProviderTimeoutError(
                message=f"{self.name} service timeout after {self.timeout:.0f}s",
                provider_name=self.name,
                context={"error_type": type(e).__name__},
            ) from e
        except httpx.DecodingError as e:
            raise ProviderError(
                message=f"{self.name} returned an undecodable response body",
                provider_name=self.name,
                context={"error_type": type(e).__name__},
            ) from e
        except httpx.RequestError as e:
            raise ProviderTimeoutError(
                message=f"{self.name} connection failed: {e}",
                provider_name=self.name,
                context={"error_type": type(e).__name__},
            ) from e

        latency_ms = int((time.perf_counter() - start) * 1000)

        if response.is_error:
            raise self._translate_status(response)

        content, tokens_used = self._parse_completion(response)
        logger.info(
            "%s summary completed in %dms (%d tokens, %d chars)",
            self.name,
            latency_ms,
            tokens_used,
            len(content),
        )
        return SummarizationResult(
            content=content,
            provider_name=self.name,
            tokens_used=tokens_used,
            latency_ms=latency_ms,
            model=self._config.model,
        )

    async def _post_completion(self, payload: Dict[str, Any]) -> httpx.Response:
        async with self._client(self.timeout) as client:
            return await client.post("/chat/completions", json=payload)

    def _translate_status(self, response: httpx.Response) -> ProviderError:
        """Map a non-2xx response to the shared error taxonomy."""
        status = response.status_code
        error_cls: Type[ProviderError]
        if status in (401, 403):
            error_cls = InvalidCredentialsError
            message = f"Invalid {self.name} API key"
        elif status == 429:
            error_cls = RateLimitedError
            message = f"{self.name} rate limit exceeded - please try again later"
        elif status >= 500:
            error_cls = ProviderUnavailableError
            message = f"{self.name} service temporarily unavailable"
        else:
            error_cls = ProviderError
            message = _extract_error_message(response)
        return error_cls(message=message, provider_name=self.name, status_code=status)

    def _parse_completion(self, response: httpx.Response) -> Tuple[str, int]:
        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                message=f"{self.name} returned a malformed completion",
                provider_name=self.name,
                status_code=response.status_code,
                context={"error_type": type(e).__name__},
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise ProviderError(
                message=f"{self.name} returned empty content",
                provider_name=self.name,
                status_code=response.status_code,
            )

        return content.strip(), _total_tokens(body.get("usage"))

    async def check_health(self) -> bool:
        """
        GET {base_url}/models with the short health timeout.

        Why /models: it validates both connectivity and the credential
        without consuming completion tokens.
        """
        if not self.configured:
            return False
        try:
            async with self._client(self.health_timeout) as client:
                response = await client.get("/models")
            return response.status_code == 200
        except Exception as e:
            logger.warning("%s health check failed: %s", self.name, str(e))
            return False

    def describe_status(self) -> ProviderDescription:
        return ProviderDescription(
            name=self.name,
            configured=self.configured,
            model=self._config.model,
            base_url=self._config.base_url,
            timeout_ms=self._config.timeout_ms,
        )


class GroqAdapter(ChatCompletionAdapter):
    """Groq's OpenAI-compatible endpoint (primary provider)."""

    name = "Groq"


class OpenAIAdapter(ChatCompletionAdapter):
    """OpenAI chat completions (fallback provider)."""

    name = "OpenAI"


# Closed set of provider variants, keyed by the configured provider name.
ADAPTER_TYPES: Dict[str, Type[ChatCompletionAdapter]] = {
    "Groq": GroqAdapter,
    "OpenAI": OpenAIAdapter,
}


def build_adapter(
    config: ProviderConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ChatCompletionAdapter:
    """Instantiate the adapter variant for a provider configuration record."""
    try:
        adapter_cls = ADAPTER_TYPES[config.name]
    except KeyError:
        raise ValueError(
            f"Unknown provider '{config.name}'. Known providers: {sorted(ADAPTER_TYPES)}"
        ) from None
    return adapter_cls(config, transport=transport)


def _total_tokens(usage: Any) -> int:
    """usage.total_tokens as a non-negative int; 0 when absent or unusable."""
    if not isinstance(usage, dict):
        return 0
    try:
        return max(int(usage.get("total_tokens") or 0), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def _extract_error_message(response: httpx.Response) -> str:
    """Provider error message verbatim, falling back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if body.get("message"):
            return str(body["message"])
    return response.text or f"HTTP {response.status_code}"
