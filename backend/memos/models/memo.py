"""
Memos Backend — SQLAlchemy Models
==================================

What:  ORM models for the `memos`, `tags` and `memo_tags` tables.
How:   Declarative models on the shared Base; Alembic reads the same metadata.
Who:   Used by MemoService / TagService for CRUD and by Alembic for migrations.

Table layout:
    memos ──< memo_tags >── tags

    - memos.deleted_at:  NULL for live memos; set on soft delete
    - tags.name:         unique, at most 50 characters
    - memo_tags:         composite primary key, both sides ON DELETE CASCADE

Timestamps are stored in UTC. SQLite has no timezone-aware column type, so
UTCDateTime normalises on the way in and re-attaches UTC on the way out.
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from memos.database import Base

TAG_NAME_MAX_LENGTH = 50


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """DateTime column that always hands back timezone-aware UTC values."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


# ── Association Table ─────────────────────────────────────────────────────
memo_tags = Table(
    "memo_tags",
    Base.metadata,
    Column("memo_id", Integer, ForeignKey("memos.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    Index("idx_memo_tags_tag_id", "tag_id"),
)


class Tag(Base):
    """A named label attachable to many memos."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(TAG_NAME_MAX_LENGTH),
        nullable=False,
        unique=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"


class Memo(Base):
    """
    A single note.

    Lifecycle:
        1. Created by POST /api/memos (deleted_at = NULL)
        2. Content and tag set replaced by PUT /api/memos/{id}
        3. Soft-deleted by DELETE (deleted_at = now); immutable while deleted
        4. Restored by PUT /api/memos/{id}/restore (deleted_at = NULL)

    Query Patterns:
        - Live memos, newest first: WHERE deleted_at IS NULL ORDER BY created_at DESC
        - Trash: WHERE deleted_at IS NOT NULL ORDER BY deleted_at DESC
    """

    __tablename__ = "memos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(timezone=True),
        nullable=True,
        default=None,
    )

    # selectin: one IN query loads the tags of every memo in a result page
    tags: Mapped[List[Tag]] = relationship(
        secondary=memo_tags,
        lazy="selectin",
        order_by=Tag.name,
    )

    __table_args__ = (
        Index("idx_memos_created_at", "created_at"),
        Index("idx_memos_deleted_at", "deleted_at"),
    )

    @property
    def tag_names(self) -> List[str]:
        return sorted(tag.name for tag in self.tags)

    def __repr__(self) -> str:
        return (
            f"<Memo(id={self.id}, deleted={self.deleted_at is not None}, "
            f"created_at='{self.created_at}')>"
        )
