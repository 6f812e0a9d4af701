"""
Memos Backend — Tag Route Handlers
===================================

What:  GET/POST /api/tags and DELETE /api/tags/{id}.
How:   Thin wrappers around TagService.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from memos.database import get_db_session
from memos.schemas.memo import (
    ErrorResponse,
    SuccessResponse,
    TagListResponse,
    TagPayload,
    TagResponse,
)
from memos.services.tag_service import tag_service
from memos.validators import parse_id

router = APIRouter(prefix="/api", tags=["Tags"])


@router.get(
    "/tags",
    response_model=TagListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List tags with the number of live memos using each",
)
async def list_tags(db: AsyncSession = Depends(get_db_session)) -> TagListResponse:
    return await tag_service.list_tags(db)


@router.post(
    "/tags",
    status_code=201,
    response_model=TagResponse,
    responses={
        400: {"description": "Invalid tag name", "model": ErrorResponse},
        409: {"description": "Tag already exists", "model": ErrorResponse},
    },
    summary="Create a tag",
)
async def create_tag(
    payload: TagPayload,
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    tag = await tag_service.create_tag(db, payload)
    return TagResponse(tag=tag)


@router.delete(
    "/tags/{tag_id}",
    response_model=SuccessResponse,
    responses={
        400: {"description": "Invalid ID", "model": ErrorResponse},
        404: {"description": "Tag not found", "model": ErrorResponse},
    },
    summary="Delete a tag and detach it from all memos",
)
async def delete_tag(
    tag_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    return await tag_service.delete_tag(db, parse_id(tag_id))
