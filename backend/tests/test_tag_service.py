"""
Memos Backend — Tag Service Tests
==================================

What:  Tests for TagService listing, create/delete and name resolution.
How:   Real SQLite database per test via the db_session fixture.
"""

import pytest
from sqlalchemy import func, select

from memos.exceptions import ConflictError, NotFoundError
from memos.models.memo import Tag, memo_tags
from memos.schemas.memo import MemoPayload, TagPayload
from memos.services.memo_service import MemoService
from memos.services.tag_service import TagService


class TestListTags:
    def setup_method(self):
        self.service = TagService()
        self.memos = MemoService()

    @pytest.mark.asyncio
    async def test_counts_only_live_memos(self, db_session):
        await self.memos.create_memo(db_session, MemoPayload(content="one", tags=["work"]))
        trashed = await self.memos.create_memo(
            db_session, MemoPayload(content="two", tags=["work", "idea"])
        )
        await self.memos.delete_memo(db_session, trashed.id)
        await self.service.create_tag(db_session, TagPayload(name="empty"))

        result = await self.service.list_tags(db_session)
        counts = {tag.name: tag.memo_count for tag in result.tags}

        assert counts == {"empty": 0, "idea": 0, "work": 1}

    @pytest.mark.asyncio
    async def test_sorted_by_name(self, db_session):
        for name in ("zeta", "alpha", "mid"):
            await self.service.create_tag(db_session, TagPayload(name=name))

        result = await self.service.list_tags(db_session)

        assert [tag.name for tag in result.tags] == ["alpha", "mid", "zeta"]


class TestCreateTag:
    def setup_method(self):
        self.service = TagService()

    @pytest.mark.asyncio
    async def test_create_trims_name(self, db_session):
        tag = await self.service.create_tag(db_session, TagPayload(name="  reading "))

        assert tag.id > 0
        assert tag.name == "reading"
        assert tag.memo_count == 0

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, db_session):
        await self.service.create_tag(db_session, TagPayload(name="work"))

        with pytest.raises(ConflictError, match="Tag already exists"):
            await self.service.create_tag(db_session, TagPayload(name="work"))


class TestDeleteTag:
    def setup_method(self):
        self.service = TagService()
        self.memos = MemoService()

    @pytest.mark.asyncio
    async def test_delete_detaches_from_memos(self, db_session):
        memo = await self.memos.create_memo(
            db_session, MemoPayload(content="tagged", tags=["work", "keep"])
        )
        work_id = await db_session.scalar(select(Tag.id).where(Tag.name == "work"))

        result = await self.service.delete_tag(db_session, work_id)

        assert result.success is True
        remaining = await db_session.scalar(
            select(func.count()).select_from(memo_tags).where(memo_tags.c.tag_id == work_id)
        )
        assert remaining == 0

        listed = await self.memos.list_memos(db_session)
        assert [m.id for m in listed.memos] == [memo.id]

    @pytest.mark.asyncio
    async def test_delete_missing_tag(self, db_session):
        with pytest.raises(NotFoundError, match="Tag not found"):
            await self.service.delete_tag(db_session, 4242)


class TestResolve:
    def setup_method(self):
        self.service = TagService()

    @pytest.mark.asyncio
    async def test_creates_missing_and_reuses_existing(self, db_session):
        existing = await self.service.create_tag(db_session, TagPayload(name="old"))

        tags = await self.service.resolve(db_session, ["new", "old"])

        assert [tag.name for tag in tags] == ["new", "old"]
        assert tags[1].id == existing.id
        total = await db_session.scalar(select(func.count(Tag.id)))
        assert total == 2

    @pytest.mark.asyncio
    async def test_resolving_twice_returns_same_rows(self, db_session):
        first = await self.service.resolve(db_session, ["a", "b"])
        second = await self.service.resolve(db_session, ["b", "a"])

        assert {t.name: t.id for t in first} == {t.name: t.id for t in second}

    @pytest.mark.asyncio
    async def test_empty_names(self, db_session):
        assert await self.service.resolve(db_session, []) == []
