# Middleware package init
"""
Memos Backend — Middleware Package
===================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → [Preflight] → Route

    - Request ID runs first so even 429 responses carry X-Request-ID
    - Rate limiting rejects floods before they are logged or routed
    - CORS answers browser preflights; Preflight answers any other OPTIONS
"""
