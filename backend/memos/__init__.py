"""
Memos Backend — Package Initializer
====================================

Single-user note taking service: memos with tags, a trash, search and a
bundled browser client.

Architecture Note:
    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Business Logic)      │  ← memo/tag/auth rules
    ├─────────────────────────────────────┤
    │    Models & Schemas (Data)          │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database (Persistence)          │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes parse ids and query strings, services own the queries and raise
    MemosError subclasses, global handlers in main.py turn those into JSON.
"""

__version__ = "1.0.0"
