"""
Memos Backend — Tag Service
============================

What:  Tag listing with usage counts, explicit create/delete, and the
       insert-if-missing resolution used when memos carry tag names.
Who:   Called by the tag routes and by MemoService.

Upsert:
    resolve() issues one `INSERT ... ON CONFLICT (name) DO NOTHING` for all
    names, then one SELECT to read their ids. Two requests attaching the same
    new tag at once both succeed and end up pointing at the same row.
"""

import logging
from datetime import datetime
from typing import Dict, List, Sequence

from sqlalchemy import and_, delete, func, insert, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from memos.exceptions import ConflictError, DatabaseError, NotFoundError
from memos.models.memo import Memo, Tag, memo_tags, utcnow
from memos.schemas.memo import SuccessResponse, TagListResponse, TagOut, TagPayload

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class TagService:
    """
    Business logic for tags.

    Responsibilities:
        - list_tags():  every tag with its count of live memos, by name
        - create_tag(): explicit creation, 409 on duplicates
        - delete_tag(): hard delete together with its memo associations
        - resolve():    names -> Tag rows, creating the missing ones
    """

    async def list_tags(self, db: AsyncSession) -> TagListResponse:
        """
        Query plan:
            SELECT tags.*, COUNT(memos.id) FROM tags
            LEFT JOIN memo_tags ON memo_tags.tag_id = tags.id
            LEFT JOIN memos ON memos.id = memo_tags.memo_id AND memos.deleted_at IS NULL
            GROUP BY tags.id ORDER BY tags.name
        """
        live_memo = and_(memo_tags.c.memo_id == Memo.id, Memo.deleted_at.is_(None))
        stmt = (
            select(Tag, func.count(Memo.id).label("memo_count"))
            .outerjoin(memo_tags, memo_tags.c.tag_id == Tag.id)
            .outerjoin(Memo, live_memo)
            .group_by(Tag.id)
            .order_by(Tag.name)
        )
        try:
            rows = (await db.execute(stmt)).all()
        except SQLAlchemyError as e:
            logger.error("Database error listing tags: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve tags. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return TagListResponse(
            tags=[
                TagOut(id=tag.id, name=tag.name, created_at=tag.created_at, memo_count=count)
                for tag, count in rows
            ]
        )

    async def create_tag(self, db: AsyncSession, payload: TagPayload) -> TagOut:
        """
        Create a tag by name.

        Raises:
            ConflictError: a tag with this name already exists (→ 409)
        """
        existing = await db.scalar(select(Tag.id).where(Tag.name == payload.name))
        if existing is not None:
            raise ConflictError("Tag already exists", context={"name": payload.name})

        tag = Tag(name=payload.name, created_at=utcnow())
        db.add(tag)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same name
            raise ConflictError("Tag already exists", context={"name": payload.name})

        logger.info("Tag created: %s (id=%d)", tag.name, tag.id)
        return TagOut(id=tag.id, name=tag.name, created_at=tag.created_at, memo_count=0)

    async def delete_tag(self, db: AsyncSession, tag_id: int) -> SuccessResponse:
        """Delete a tag and detach it from every memo."""
        await db.execute(delete(memo_tags).where(memo_tags.c.tag_id == tag_id))
        result = await db.execute(
            delete(Tag)
            .where(Tag.id == tag_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("Tag not found", resource="tag", resource_id=tag_id)

        logger.info("Tag %d deleted", tag_id)
        return SuccessResponse(message="Tag deleted")

    async def resolve(
        self,
        db: AsyncSession,
        names: Sequence[str],
        now: datetime | None = None,
    ) -> List[Tag]:
        """
        Return Tag rows for the given (already cleaned, de-duplicated) names,
        inserting any that do not exist yet. Order follows `names`.
        """
        if not names:
            return []

        now = now or utcnow()
        rows = [{"name": name, "created_at": now} for name in names]
        dialect = db.get_bind().dialect.name
        upsert = _UPSERT_INSERTS.get(dialect)

        if upsert is not None:
            await db.execute(
                upsert(Tag.__table__).values(rows).on_conflict_do_nothing(index_elements=["name"])
            )
        else:
            present = set(
                (await db.execute(select(Tag.name).where(Tag.name.in_(names)))).scalars()
            )
            missing = [row for row in rows if row["name"] not in present]
            if missing:
                await db.execute(insert(Tag.__table__).values(missing))

        found = (await db.execute(select(Tag).where(Tag.name.in_(names)))).scalars().all()
        by_name: Dict[str, Tag] = {tag.name: tag for tag in found}
        return [by_name[name] for name in names if name in by_name]


# ── Singleton Instance ────────────────────────────────────────────────────
tag_service = TagService()
