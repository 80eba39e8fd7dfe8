"""
Meeting Summarizer — Application Package Initializer
=====================================================

What: Backend for turning meeting transcripts into structured summaries
      and sharing them by email.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Workflow, validation, email
    ├─────────────────────────────────────┤
    │      AI Core (Provider Failover)    │  ← Adapters, registry, orchestrator
    ├─────────────────────────────────────┤
    │    Records & Schemas (Data Shapes)  │  ← Dataclasses + Pydantic
    └─────────────────────────────────────┘

    Summaries, uploads and share records live in process memory only.
"""

__version__ = "1.0.0"
