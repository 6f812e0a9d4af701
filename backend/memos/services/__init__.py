# Services package init
"""
Memos Backend — Services Layer
===============================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services receive an AsyncSession per call, apply validation and query
       building, and return response schemas. They raise MemosError subclasses
       that the global handlers turn into HTTP responses.

Service Inventory:
    - MemoService: list/search/paginate, create, update, soft delete, restore, trash
    - TagService:  list with usage counts, create, delete, upsert-by-name
    - AuthService: password check for the client login gate
"""
