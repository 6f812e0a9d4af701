# Routes package init
"""
Memos Backend — API Routes Package
===================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource; handlers stay thin and
       delegate to services.

Route Inventory:
    - memos.py:   GET/POST /api/memos, PUT/DELETE /api/memos/{id},
                  GET /api/memos/deleted, PUT /api/memos/{id}/restore
    - tags.py:    GET/POST /api/tags, DELETE /api/tags/{id}
    - auth.py:    POST /api/auth/verify
    - client.py:  GET / (HTML client)
    - health.py:  GET /health
"""
