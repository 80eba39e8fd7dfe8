"""
Meeting Summarizer — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
       The AI core never sees raw environment strings: it receives a typed,
       ordered list of ProviderConfig records built here.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
When:  Loaded once at module import time; validated before the app starts.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

# Provider names accepted in AI_PROVIDER_ORDER, mapped to the settings prefix
# that holds their credential/model/base URL.
KNOWN_PROVIDERS = {"groq": "Groq", "openai": "OpenAI"}


class ProviderConfig(BaseModel):
    """
    Immutable configuration for one summarization provider.

    What:  The startup-time contract consumed by the provider registry.
    Why:   Adapters are stateless clients; everything they need is fixed here.
    Note:  An empty credential keeps the provider visible in status reports
           but excludes it from failover attempts.
    """

    name: str
    credential: str = ""
    base_url: str
    model: str
    timeout_ms: int = Field(default=30_000, gt=0)
    max_output_tokens: int = Field(default=2000, gt=0)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    health_timeout_ms: int = Field(default=5_000, gt=0)

    model_config = {"frozen": True}

    @property
    def configured(self) -> bool:
        return bool(self.credential.strip())


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development except the provider
    credentials: at least one of GROQ_API_KEY / OPENAI_API_KEY must be set
    for the app to start.
    """

    # ── AI Providers ──────────────────────────────────────────────────────
    # What: Credentials and endpoints for the OpenAI-compatible chat APIs
    # Why both: Groq is fast and cheap; OpenAI is the fallback
    groq_api_key: str = Field(default="", description="Groq API key")
    groq_model: str = Field(default="llama3-8b-8192")
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1")

    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_model: str = Field(default="gpt-3.5-turbo")
    openai_base_url: str = Field(default="https://api.openai.com/v1")

    # What: Comma-separated fallback order
    # Why configurable: Lets an operator put the cheaper provider first
    ai_provider_order: str = Field(default="groq,openai")

    # What: Per-call limits shared by every provider
    # Why health timeout < summarize timeout: status checks must stay snappy
    ai_timeout_ms: int = Field(default=30_000, ge=1_000, le=300_000)
    ai_health_timeout_ms: int = Field(default=5_000, ge=500, le=60_000)
    ai_max_output_tokens: int = Field(default=2000, ge=64, le=32_000)
    ai_temperature: float = Field(default=0.3, ge=0.0, le=2.0)

    # What: Optional deadline for the whole failover sequence (seconds)
    # None = bounded only by the per-provider timeouts
    ai_deadline_seconds: Optional[float] = Field(default=None, gt=0)

    # ── Caller-side Retry ─────────────────────────────────────────────────
    # What: Fixed-delay retries of the whole orchestrated call
    # Only AllProvidersFailed is retried; configuration errors never are
    summary_retry_attempts: int = Field(default=2, ge=1, le=5)
    summary_retry_wait: float = Field(default=2.0, ge=0.0, le=60.0)

    # ── Content Limits ────────────────────────────────────────────────────
    max_file_size: int = Field(default=10_485_760, ge=1_024, le=52_428_800)
    max_transcript_length: int = Field(default=50_000, ge=100)
    max_summary_length: int = Field(default=20_000, ge=100)

    # ── Email (SMTP) ──────────────────────────────────────────────────────
    smtp_host: str = Field(default="")
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_user: str = Field(default="")
    smtp_pass: str = Field(default="")
    # What: Implicit TLS (port 465). False = STARTTLS on a plain connection
    smtp_secure: bool = Field(default=False)
    email_from: str = Field(default="")
    email_from_name: str = Field(default="Meeting Summarizer")
    email_max_recipients: int = Field(default=10, ge=1, le=50)
    email_timeout: int = Field(default=10, ge=1, le=120)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("ai_provider_order")
    @classmethod
    def validate_provider_order(cls, v: str) -> str:
        """Rejects unknown or duplicated provider names."""
        names = [name.strip().lower() for name in v.split(",") if name.strip()]
        if not names:
            raise ValueError("ai_provider_order must name at least one provider")
        unknown = [n for n in names if n not in KNOWN_PROVIDERS]
        if unknown:
            raise ValueError(
                f"Unknown provider(s) {unknown}. Must be among: {sorted(KNOWN_PROVIDERS)}"
            )
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate provider in ai_provider_order: {v}")
        return ",".join(names)

    # ── Rate Limiting ─────────────────────────────────────────────────────
    rate_limit_requests: int = Field(default=100, ge=10, le=10000)
    rate_limit_window: int = Field(default=3600, ge=60, le=86400)  # seconds

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    # ── Derived Configuration ─────────────────────────────────────────────

    def provider_configs(self) -> List[ProviderConfig]:
        """
        Build the ordered provider configuration list for the registry.

        Order follows ai_provider_order; every known provider named there is
        included whether or not its credential is set.
        """
        configs = []
        for key in self.ai_provider_order.split(","):
            configs.append(
                ProviderConfig(
                    name=KNOWN_PROVIDERS[key],
                    credential=getattr(self, f"{key}_api_key"),
                    base_url=getattr(self, f"{key}_base_url").rstrip("/"),
                    model=getattr(self, f"{key}_model"),
                    timeout_ms=self.ai_timeout_ms,
                    max_output_tokens=self.ai_max_output_tokens,
                    temperature=self.ai_temperature,
                    health_timeout_ms=self.ai_health_timeout_ms,
                )
            )
        return configs

    @property
    def email_configured(self) -> bool:
        return all([self.smtp_host, self.smtp_user, self.smtp_pass, self.email_from])

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        Why:   Zero configured providers would make every summary request fail;
               refuse to start instead of discovering it on the first request.
        """
        errors = []
        if not any(cfg.configured for cfg in self.provider_configs()):
            errors.append(
                "No AI provider is configured. Set GROQ_API_KEY and/or OPENAI_API_KEY."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


settings = Settings()
