# Routes package init
"""
Meeting Summarizer — API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource.

Route Inventory:
    - upload.py:          POST /api/upload, GET /api/file/{id}
    - summarize.py:       POST /api/summarize, GET/PUT /api/summary/{id}
    - share.py:           POST /api/share, GET /api/share/{id}
    - services_status.py: /api/services/* status and smoke tests
    - health.py:          GET /health

Design Principle:
    Routes stay THIN. They extract data from the request, call a service,
    and shape the response. Errors propagate to the global handlers in main.py.
"""
