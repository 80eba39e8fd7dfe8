# Middleware package init
"""
Meeting Summarizer — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID FIRST: every response, 429s included, carries X-Request-ID
    2. Rate Limit: reject abusive clients before any route work
    3. Logging: method, path, status and duration per request
"""
