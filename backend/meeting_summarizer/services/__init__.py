# Services package init
"""
Meeting Summarizer — Services Layer
====================================

What:  Business logic between routes (HTTP) and the in-memory stores.

Service Inventory:
    AI core (provider failover):
    - llm_base:                Request/result types and the ProviderAdapter interface
    - chat_completion_service: Groq / OpenAI adapters over httpx
    - provider_registry:       Ordered, immutable adapter set
    - failover:                Sequential failover across configured providers
    - status_service:          Concurrent provider health checks
    - ai_service:              Facade used by everything outside the core

    Application:
    - file_service:    Transcript upload validation
    - summary_service: Transcript → summary workflow, edits, caller-side retry
    - email_service:   Recipient validation, templated SMTP delivery
    - share_service:   Summary sharing and share records
    - store:           Keyed in-memory stores
"""
