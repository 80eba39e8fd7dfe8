"""
Meeting Summarizer — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error mapping
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn meeting_summarizer.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────┐ ┌────────────┐ ┌─────────┐ ┌──────┐ ┌──────┐ │
    │  │ Req ID │→│ Rate Limit │→│ Logging │→│ GZip │→│ CORS │ │
    │  └────────┘ └────────────┘ └─────────┘ └──────┘ └──────┘ │
    │                                                          │
    │  Routes:                                                 │
    │  /api/upload  /api/summarize  /api/summary/{id}          │
    │  /api/share   /api/services/* /health                    │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400  NotFound→404  NoProviders→500           │
    │  AllProvidersFailed→503  Email→503  Deadline→504         │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration check (fatal without any provider) → ready
    Shutdown: log only; nothing is persisted
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from meeting_summarizer import __version__
from meeting_summarizer.config import settings
from meeting_summarizer.exceptions import (
    AllProvidersFailedError,
    EmailServiceError,
    MeetingSummarizerError,
    NoProvidersConfiguredError,
    NotFoundError,
    RateLimitExceededError,
    SummarizationTimeoutError,
    ValidationError,
)
from meeting_summarizer.middleware.logging import RequestLoggingMiddleware
from meeting_summarizer.middleware.rate_limit import RateLimitMiddleware
from meeting_summarizer.middleware.request_id import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from meeting_summarizer.routes import health, services_status, share, summarize, upload
from meeting_summarizer.services.ai_service import ai_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure stdout logging for the whole application.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s

    The request_id field comes from RequestIDLogFilter, attached to the
    handler so records from every logger (ours and third-party) carry it.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Per-request noise; our access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup sequence:
        1. Setup logging
        2. Validate configuration; zero configured providers is fatal
        3. Log provider order and email availability

    Refusing to start beats serving an API whose every summary call fails.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Meeting Summarizer %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.critical("Configuration error: %s", str(e))
        logger.critical("Fix the configuration and restart the server.")
        raise

    for desc in ai_service.describe_providers():
        logger.info(
            "AI provider %s: %s (model %s)",
            desc.name,
            "configured" if desc.configured else "NOT configured",
            desc.model,
        )
    if not settings.email_configured:
        logger.warning("SMTP is not configured; summary sharing is disabled")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Meeting Summarizer shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    return {
        "error": error,
        "message": message,
        "details": details,
        "request_id": request_id_var.get(""),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto HTTP responses.

    Handler hierarchy:
        ValidationError            → 400 (client can fix the input)
        NotFoundError              → 404
        RateLimitExceededError     → 429 + Retry-After
        NoProvidersConfiguredError → 500 configuration_error (do not retry)
        AllProvidersFailedError    → 503 + Retry-After, per-provider breakdown
        EmailServiceError          → 503
        SummarizationTimeoutError  → 504
        MeetingSummarizerError     → 500 (catch-all for custom errors)
        Exception                  → 500 (stack trace logged, never returned)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s", exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=429,
            content=_error_body("rate_limit_exceeded", exc.message, exc.context),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(NoProvidersConfiguredError)
    async def handle_no_providers(request: Request, exc: NoProvidersConfiguredError):
        logger.error("Summarization requested with no provider configured")
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "configuration_error", exc.message, {"retryable": False}
            ),
        )

    @app.exception_handler(AllProvidersFailedError)
    async def handle_all_failed(request: Request, exc: AllProvidersFailedError):
        logger.error("All AI providers failed: %s", exc.context.get("failures"))
        return JSONResponse(
            status_code=503,
            content=_error_body(
                "all_providers_failed",
                exc.message,
                {"failures": exc.context["failures"], "retryable": True},
            ),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(EmailServiceError)
    async def handle_email_error(request: Request, exc: EmailServiceError):
        # SMTP details stay in the log
        logger.error("Email service error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=503,
            content=_error_body("email_service_unavailable", exc.message),
        )

    @app.exception_handler(SummarizationTimeoutError)
    async def handle_timeout(request: Request, exc: SummarizationTimeoutError):
        return JSONResponse(
            status_code=504,
            content=_error_body("summarization_timeout", exc.message, exc.context),
        )

    @app.exception_handler(MeetingSummarizerError)
    async def handle_app_error(request: Request, exc: MeetingSummarizerError):
        logger.error("Unhandled application error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Meeting Summarizer API",
        description=(
            "Upload or paste meeting transcripts, get structured AI summaries with "
            "automatic failover between providers, edit them, and share by email."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition (last added runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(upload.router)
    app.include_router(summarize.router)
    app.include_router(share.router)
    app.include_router(services_status.router)
    app.include_router(health.router)

    return app


app = create_app()
