"""
Memos Backend — Pydantic Request/Response Schemas
==================================================

What:  Pydantic models defining the JSON contract between the client and API.
How:   FastAPI validates request bodies against the payload models and
       serializes responses through the response models (camelCase aliases).
Who:   Used by route handlers and services.

Envelopes:
    {"memos": [...], "pagination": {"page", "limit", "total", "totalPages"}}
    {"memo": {...}}   {"tag": {...}}   {"tags": [...]}
    {"success": true, "message": "..."}
    {"error": "...", "code": "...", "request_id": "..."}
"""

import math
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from memos.validators import clean_content, clean_tag_name, clean_tag_names


class CamelModel(BaseModel):
    """Response base: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Models: what the client sends in JSON bodies
# ══════════════════════════════════════════════════════════════════════════


class MemoPayload(BaseModel):
    """
    Body of POST /api/memos and PUT /api/memos/{id}.

    tags:
        None (or absent) leaves an existing memo's tags untouched on update;
        a list replaces them. Names are trimmed and de-duplicated.
    """

    content: str = Field(description="Memo text, 1-10000 characters after trimming")
    tags: Optional[List[str]] = Field(default=None, description="Tag names to attach")

    @field_validator("content", mode="before")
    @classmethod
    def validate_content(cls, v: Any) -> str:
        return clean_content(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        return clean_tag_names(v)


class TagPayload(BaseModel):
    """Body of POST /api/tags."""

    name: Any = Field(default=None, validate_default=True, description="Tag name, 1-50 characters")

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> str:
        if v is None or v == "":
            raise ValueError("Tag name is required")
        return clean_tag_name(v)


class AuthPayload(BaseModel):
    """Body of POST /api/auth/verify."""

    password: str = Field(description="Shared secret configured as MEMOS_PASSWORD")


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class MemoOut(CamelModel):
    """A memo with the names of its tags (sorted)."""

    id: int
    content: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_memo(cls, memo) -> "MemoOut":
        return cls(
            id=memo.id,
            content=memo.content,
            created_at=memo.created_at,
            updated_at=memo.updated_at,
            deleted_at=memo.deleted_at,
            tags=memo.tag_names,
        )


class Pagination(CamelModel):
    """
    Offset pagination state.

    total_pages = ceil(total / limit); 0 when there is nothing to show.
    """

    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))


class MemoListResponse(CamelModel):
    memos: List[MemoOut]
    pagination: Pagination


class MemoResponse(CamelModel):
    memo: MemoOut


class TagOut(CamelModel):
    """A tag; memo_count counts live (not deleted) memos carrying it."""

    id: int
    name: str
    created_at: datetime
    memo_count: int = 0


class TagListResponse(CamelModel):
    tags: List[TagOut]


class TagResponse(CamelModel):
    tag: TagOut


class SuccessResponse(CamelModel):
    success: bool = True
    message: str


class AuthResponse(CamelModel):
    success: bool
    token: str


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body shared by every endpoint.

    Example:
        {
            "error": "Content cannot be empty",
            "code": "validation_error",
            "request_id": "1a2b3c4d"
        }
    """

    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """GET /health: process liveness plus a database round trip."""

    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float
