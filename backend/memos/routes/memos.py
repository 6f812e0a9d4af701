"""
Memos Backend — Memo Route Handlers
====================================

What:  CRUD, search, trash and restore endpoints for memos.
How:   Extracts path/query/body input, validates ids, delegates to MemoService.
Who:   Called by the bundled HTML client (and any other JSON client).
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from memos.database import get_db_session
from memos.schemas.memo import (
    ErrorResponse,
    MemoListResponse,
    MemoPayload,
    MemoResponse,
    SuccessResponse,
)
from memos.services.memo_service import DEFAULT_PAGE_SIZE, MAX_PAGE, MAX_PAGE_SIZE, memo_service
from memos.validators import parse_id

router = APIRouter(prefix="/api", tags=["Memos"])

_errors = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    404: {"description": "Memo not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get(
    "/memos",
    response_model=MemoListResponse,
    responses={400: _errors[400], 500: _errors[500]},
    summary="List, search and filter memos",
)
async def list_memos(
    date: str | None = Query(default=None, description="Only memos created on this day (YYYY-MM-DD)"),
    search: str | None = Query(default=None, description="Case-insensitive substring of the content"),
    tag: str | None = Query(default=None, description="Only memos carrying this tag name"),
    page: int = Query(default=1, ge=1, le=MAX_PAGE, description="1-based page number"),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
    db: AsyncSession = Depends(get_db_session),
) -> MemoListResponse:
    """
    List live memos, newest first.

    Example:
        GET /api/memos?tag=work&search=meeting&page=2&limit=10
    """
    return await memo_service.list_memos(
        db=db,
        date=date,
        search=search,
        tag=tag,
        page=page,
        limit=limit,
    )


@router.get(
    "/memos/deleted",
    response_model=MemoListResponse,
    responses={400: _errors[400], 500: _errors[500]},
    summary="List memos in the trash",
)
async def list_deleted_memos(
    page: int = Query(default=1, ge=1, le=MAX_PAGE),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db_session),
) -> MemoListResponse:
    return await memo_service.list_deleted(db=db, page=page, limit=limit)


@router.post(
    "/memos",
    status_code=201,
    response_model=MemoResponse,
    responses={400: _errors[400]},
    summary="Create a memo",
)
async def create_memo(
    payload: MemoPayload,
    db: AsyncSession = Depends(get_db_session),
) -> MemoResponse:
    memo = await memo_service.create_memo(db=db, payload=payload)
    return MemoResponse(memo=memo)


@router.put(
    "/memos/{memo_id}",
    response_model=MemoResponse,
    responses=_errors,
    summary="Update a memo's content and tags",
)
async def update_memo(
    memo_id: str,
    payload: MemoPayload,
    db: AsyncSession = Depends(get_db_session),
) -> MemoResponse:
    """Omitting `tags` keeps the current tags; `[]` removes them all."""
    memo = await memo_service.update_memo(db=db, memo_id=parse_id(memo_id), payload=payload)
    return MemoResponse(memo=memo)


@router.delete(
    "/memos/{memo_id}",
    response_model=SuccessResponse,
    responses=_errors,
    summary="Move a memo to the trash",
)
async def delete_memo(
    memo_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await memo_service.delete_memo(db=db, memo_id=parse_id(memo_id))
    return SuccessResponse(message="Memo deleted")


@router.put(
    "/memos/{memo_id}/restore",
    response_model=MemoResponse,
    responses=_errors,
    summary="Restore a memo from the trash",
)
async def restore_memo(
    memo_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MemoResponse:
    memo = await memo_service.restore_memo(db=db, memo_id=parse_id(memo_id))
    return MemoResponse(memo=memo)
