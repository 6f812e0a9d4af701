"""
Memos Backend — Memo Service (Business Logic)
==============================================

What:  Listing/search/pagination, create, update, soft delete, restore and
       trash listing for memos.
How:   Builds SQLAlchemy statements from the filters present; relies on the
       per-request session for a single transaction per operation.
Who:   Called by route handlers in routes/memos.py.

Listing (GET /api/memos):
    WHERE deleted_at IS NULL
      [AND created_at >= :day_start AND created_at < :next_day]   ?date=
      [AND lower(content) LIKE lower(:term) ESCAPE '\\']          ?search=
      [AND EXISTS (memo_tags JOIN tags WHERE tags.name = :tag)]   ?tag=
    ORDER BY created_at DESC, id DESC LIMIT :limit OFFSET :offset

    The COUNT query reuses the same WHERE clause, so `total` always agrees
    with what paging through the list would show. Tags of the page arrive in
    one IN query (selectin relationship).
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from memos.config import settings
from memos.exceptions import DatabaseError, NotFoundError
from memos.models.memo import Memo, Tag, utcnow
from memos.schemas.memo import MemoListResponse, MemoOut, MemoPayload, Pagination
from memos.services.tag_service import tag_service
from memos.validators import escape_like, parse_date

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# Keeps (page - 1) * limit inside the database OFFSET range
MAX_PAGE = 1_000_000


class MemoService:
    """
    Business logic layer for memo operations.

    Error Handling Strategy:
        Input problems surface as ValidationError before any query runs.
        Missing or wrong-state rows raise NotFoundError. Failures inside
        read queries are wrapped in DatabaseError; failures inside writes
        propagate so the session dependency rolls the transaction back.
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_memos(
        self,
        db: AsyncSession,
        date: Optional[str] = None,
        search: Optional[str] = None,
        tag: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> MemoListResponse:
        """
        List live memos matching every filter present, newest first.

        Args:
            date:   YYYY-MM-DD; calendar day in settings.timezone
            search: case-insensitive substring of content, wildcards literal
            tag:    exact tag name
            page:   1-based page number
            limit:  page size

        Raises:
            ValidationError: malformed date (→ 400)
            DatabaseError:   query failed (→ 500)
        """
        conditions = [Memo.deleted_at.is_(None)]

        if date:
            start, end = self.day_bounds(parse_date(date))
            conditions.append(Memo.created_at >= start)
            conditions.append(Memo.created_at < end)

        if search:
            conditions.append(Memo.content.ilike(f"%{escape_like(search)}%", escape="\\"))

        if tag:
            conditions.append(Memo.tags.any(Tag.name == tag))

        return await self._paginate(
            db,
            conditions,
            order_by=(Memo.created_at.desc(), Memo.id.desc()),
            page=page,
            limit=limit,
        )

    async def list_deleted(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> MemoListResponse:
        """List the trash, most recently deleted first."""
        return await self._paginate(
            db,
            [Memo.deleted_at.is_not(None)],
            order_by=(Memo.deleted_at.desc(), Memo.id.desc()),
            page=page,
            limit=limit,
        )

    async def _paginate(
        self,
        db: AsyncSession,
        conditions: list,
        order_by: Tuple,
        page: int,
        limit: int,
    ) -> MemoListResponse:
        query = (
            select(Memo)
            .where(*conditions)
            .order_by(*order_by)
            .limit(limit)
            .offset((page - 1) * limit)
        )
        count_query = select(func.count(Memo.id)).where(*conditions)

        try:
            memos = (await db.execute(query)).scalars().all()
            total = (await db.execute(count_query)).scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing memos: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve memos. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return MemoListResponse(
            memos=[MemoOut.from_memo(memo) for memo in memos],
            pagination=Pagination.build(page=page, limit=limit, total=total),
        )

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_memo(self, db: AsyncSession, payload: MemoPayload) -> MemoOut:
        """
        Insert a memo and attach its tags.

        The id comes back from the INSERT itself (flush), so concurrent
        creates can never swap each other's tags.
        """
        now = utcnow()
        memo = Memo(content=payload.content, created_at=now, updated_at=now, deleted_at=None)
        memo.tags = await tag_service.resolve(db, payload.tags or [], now)
        db.add(memo)
        await db.flush()

        logger.info("Memo %d created with %d tag(s)", memo.id, len(memo.tags))
        return MemoOut.from_memo(memo)

    async def update_memo(
        self,
        db: AsyncSession,
        memo_id: int,
        payload: MemoPayload,
    ) -> MemoOut:
        """
        Replace a live memo's content and, when given, its whole tag set.

        Raises:
            NotFoundError: memo missing or in the trash (→ 404)
        """
        memo = await db.scalar(
            select(Memo).where(Memo.id == memo_id, Memo.deleted_at.is_(None))
        )
        if memo is None:
            raise NotFoundError("Memo not found", resource="memo", resource_id=memo_id)

        now = utcnow()
        memo.content = payload.content
        memo.updated_at = now
        if payload.tags is not None:
            memo.tags = await tag_service.resolve(db, payload.tags, now)
        await db.flush()

        logger.info("Memo %d updated", memo.id)
        return MemoOut.from_memo(memo)

    async def delete_memo(self, db: AsyncSession, memo_id: int) -> None:
        """
        Move a live memo to the trash.

        Raises:
            NotFoundError: memo missing or already deleted (→ 404)
        """
        result = await db.execute(
            update(Memo)
            .where(Memo.id == memo_id, Memo.deleted_at.is_(None))
            .values(deleted_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(
                "Memo not found or already deleted", resource="memo", resource_id=memo_id
            )
        logger.info("Memo %d moved to trash", memo_id)

    async def restore_memo(self, db: AsyncSession, memo_id: int) -> MemoOut:
        """
        Bring a memo back from the trash.

        Raises:
            NotFoundError: memo missing or not deleted (→ 404)
        """
        result = await db.execute(
            update(Memo)
            .where(Memo.id == memo_id, Memo.deleted_at.is_not(None))
            .values(deleted_at=None, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(
                "Memo not found or not deleted", resource="memo", resource_id=memo_id
            )

        memo = await db.scalar(
            select(Memo)
            .where(Memo.id == memo_id)
            .execution_options(populate_existing=True)
        )
        logger.info("Memo %d restored", memo_id)
        return MemoOut.from_memo(memo)

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def day_bounds(day: date) -> Tuple[datetime, datetime]:
        """[start, end) of a calendar day in the configured zone, as UTC."""
        tz = settings.tzinfo
        start = datetime.combine(day, time.min, tzinfo=tz)
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
        return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


# ── Singleton Instance ────────────────────────────────────────────────────
memo_service = MemoService()
