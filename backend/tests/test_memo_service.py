"""
Memos Backend — Memo Service Tests
===================================

What:  Tests for MemoService against a real (throwaway) SQLite database.
How:   Calls the service with the db_session fixture; rows are inserted
       directly when a test needs control over timestamps.

What we test:
    ✅ Create trims content and de-duplicates tags
    ✅ Listing hides the trash under every filter
    ✅ Search is case-insensitive and treats % and _ literally
    ✅ Date filter covers exactly one calendar day in the configured zone
    ✅ Pagination totals and out-of-range pages
    ✅ Update replaces or keeps tags; deleted memos cannot be updated
    ✅ Delete/restore state transitions
"""

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from memos.config import settings
from memos.exceptions import NotFoundError, ValidationError
from memos.models.memo import Memo, memo_tags
from memos.schemas.memo import MemoPayload
from memos.services.memo_service import MemoService


def payload(content="hello", tags=None):
    return MemoPayload(content=content, tags=tags)


async def add_memo(db, content, created_at, deleted_at=None):
    memo = Memo(content=content, created_at=created_at, updated_at=created_at, deleted_at=deleted_at)
    db.add(memo)
    await db.flush()
    return memo


class TestCreateMemo:
    def setup_method(self):
        self.service = MemoService()

    @pytest.mark.asyncio
    async def test_create_trims_and_attaches_tags(self, db_session):
        memo = await self.service.create_memo(db_session, payload("  hello  ", ["work", "idea"]))

        assert memo.id > 0
        assert memo.content == "hello"
        assert memo.tags == ["idea", "work"]
        assert memo.deleted_at is None
        assert memo.created_at == memo.updated_at

    @pytest.mark.asyncio
    async def test_duplicate_tag_names_make_one_association(self, db_session):
        memo = await self.service.create_memo(db_session, payload("hello", ["a", "a", " a "]))

        count = await db_session.scalar(
            select(func.count()).select_from(memo_tags).where(memo_tags.c.memo_id == memo.id)
        )
        assert count == 1
        assert memo.tags == ["a"]

    @pytest.mark.asyncio
    async def test_consecutive_creates_get_their_own_tags(self, db_session):
        first = await self.service.create_memo(db_session, payload("one", ["x"]))
        second = await self.service.create_memo(db_session, payload("two", ["y"]))

        assert first.id != second.id
        assert first.tags == ["x"]
        assert second.tags == ["y"]

    @pytest.mark.asyncio
    async def test_create_without_tags(self, db_session):
        memo = await self.service.create_memo(db_session, payload("no tags"))
        assert memo.tags == []


class TestListMemos:
    def setup_method(self):
        self.service = MemoService()

    @pytest.mark.asyncio
    async def test_newest_first(self, db_session):
        base = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
        await add_memo(db_session, "older", base)
        await add_memo(db_session, "newer", base + timedelta(hours=1))

        result = await self.service.list_memos(db_session)

        assert [m.content for m in result.memos] == ["newer", "older"]

    @pytest.mark.asyncio
    async def test_deleted_memos_never_listed(self, db_session):
        live = await self.service.create_memo(db_session, payload("visible note", ["work"]))
        gone = await self.service.create_memo(db_session, payload("visible too", ["work"]))
        await self.service.delete_memo(db_session, gone.id)

        today = datetime.now(timezone.utc).astimezone(settings.tzinfo).date().isoformat()
        for filters in (
            {},
            {"search": "visible"},
            {"tag": "work"},
            {"date": today},
            {"search": "visible", "tag": "work", "date": today},
        ):
            result = await self.service.list_memos(db_session, **filters)
            assert [m.id for m in result.memos] == [live.id], filters
            assert result.pagination.total == 1

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, db_session):
        await self.service.create_memo(db_session, payload("Hello World"))

        result = await self.service.list_memos(db_session, search="hello WORLD")

        assert result.pagination.total == 1

    @pytest.mark.asyncio
    async def test_search_wildcards_are_literal(self, db_session):
        await self.service.create_memo(db_session, payload("100% done"))
        await self.service.create_memo(db_session, payload("1000 done"))
        await self.service.create_memo(db_session, payload("snake_case"))
        await self.service.create_memo(db_session, payload("snakeXcase"))

        percent = await self.service.list_memos(db_session, search="0%")
        underscore = await self.service.list_memos(db_session, search="e_c")

        assert [m.content for m in percent.memos] == ["100% done"]
        assert [m.content for m in underscore.memos] == ["snake_case"]

    @pytest.mark.asyncio
    async def test_tag_filter_exact_name(self, db_session):
        tagged = await self.service.create_memo(db_session, payload("a", ["work"]))
        await self.service.create_memo(db_session, payload("b", ["workshop"]))

        result = await self.service.list_memos(db_session, tag="work")

        assert [m.id for m in result.memos] == [tagged.id]

    @pytest.mark.asyncio
    async def test_date_filter_covers_one_day(self, db_session):
        await add_memo(db_session, "day before", datetime(2024, 2, 29, 23, 59, 59, tzinfo=timezone.utc))
        await add_memo(db_session, "start", datetime(2024, 3, 1, 0, 0, 0, tzinfo=timezone.utc))
        await add_memo(db_session, "end", datetime(2024, 3, 1, 23, 59, 59, tzinfo=timezone.utc))
        await add_memo(db_session, "day after", datetime(2024, 3, 2, 0, 0, 0, tzinfo=timezone.utc))

        result = await self.service.list_memos(db_session, date="2024-03-01")

        assert sorted(m.content for m in result.memos) == ["end", "start"]

    @pytest.mark.asyncio
    async def test_malformed_date_rejected(self, db_session):
        with pytest.raises(ValidationError, match="Invalid date format"):
            await self.service.list_memos(db_session, date="2024-13-40")

    @pytest.mark.asyncio
    async def test_pagination(self, db_session):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for i in range(25):
            await add_memo(db_session, f"memo {i}", base + timedelta(minutes=i))

        third = await self.service.list_memos(db_session, page=3, limit=10)
        beyond = await self.service.list_memos(db_session, page=4, limit=10)

        assert len(third.memos) == 5
        assert third.pagination.total == 25
        assert third.pagination.total_pages == 3
        assert beyond.memos == []
        assert beyond.pagination.total == 25
        assert beyond.pagination.total_pages == 3

    @pytest.mark.asyncio
    async def test_empty_database(self, db_session):
        result = await self.service.list_memos(db_session)

        assert result.memos == []
        assert result.pagination.total == 0
        assert result.pagination.total_pages == 0


class TestDayBounds:
    def test_utc_day(self, monkeypatch):
        monkeypatch.setattr(settings, "timezone", "UTC")

        start, end = MemoService.day_bounds(date(2024, 3, 1))

        assert start == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert end == datetime(2024, 3, 2, tzinfo=timezone.utc)

    def test_configured_zone(self, monkeypatch):
        monkeypatch.setattr(settings, "timezone", "Asia/Tokyo")

        start, end = MemoService.day_bounds(date(2024, 3, 1))

        # Tokyo is UTC+9 with no DST
        assert start == datetime(2024, 2, 29, 15, tzinfo=timezone.utc)
        assert end == datetime(2024, 3, 1, 15, tzinfo=timezone.utc)


class TestUpdateMemo:
    def setup_method(self):
        self.service = MemoService()

    @pytest.mark.asyncio
    async def test_update_replaces_content_and_tags(self, db_session):
        memo = await self.service.create_memo(db_session, payload("draft", ["a", "b"]))

        updated = await self.service.update_memo(db_session, memo.id, payload(" final ", ["c"]))

        assert updated.content == "final"
        assert updated.tags == ["c"]
        assert updated.updated_at >= memo.updated_at
        assert updated.created_at == memo.created_at

    @pytest.mark.asyncio
    async def test_update_without_tags_keeps_them(self, db_session):
        memo = await self.service.create_memo(db_session, payload("draft", ["a", "b"]))

        updated = await self.service.update_memo(db_session, memo.id, payload("final"))

        assert updated.tags == ["a", "b"]

    @pytest.mark.asyncio
    async def test_update_with_empty_list_clears_tags(self, db_session):
        memo = await self.service.create_memo(db_session, payload("draft", ["a"]))

        updated = await self.service.update_memo(db_session, memo.id, payload("final", []))

        assert updated.tags == []

    @pytest.mark.asyncio
    async def test_update_missing_memo(self, db_session):
        with pytest.raises(NotFoundError, match="Memo not found"):
            await self.service.update_memo(db_session, 999, payload("x"))

    @pytest.mark.asyncio
    async def test_update_deleted_memo(self, db_session):
        memo = await self.service.create_memo(db_session, payload("draft"))
        await self.service.delete_memo(db_session, memo.id)

        with pytest.raises(NotFoundError):
            await self.service.update_memo(db_session, memo.id, payload("x"))


class TestDeleteAndRestore:
    def setup_method(self):
        self.service = MemoService()

    @pytest.mark.asyncio
    async def test_delete_twice(self, db_session):
        memo = await self.service.create_memo(db_session, payload("bye"))

        await self.service.delete_memo(db_session, memo.id)
        with pytest.raises(NotFoundError, match="already deleted"):
            await self.service.delete_memo(db_session, memo.id)

    @pytest.mark.asyncio
    async def test_delete_missing(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete_memo(db_session, 12345)

    @pytest.mark.asyncio
    async def test_restore_live_memo_fails(self, db_session):
        memo = await self.service.create_memo(db_session, payload("still here"))

        with pytest.raises(NotFoundError, match="not deleted"):
            await self.service.restore_memo(db_session, memo.id)

    @pytest.mark.asyncio
    async def test_restore_brings_memo_back(self, db_session):
        memo = await self.service.create_memo(db_session, payload("round trip", ["keep"]))
        await self.service.delete_memo(db_session, memo.id)

        restored = await self.service.restore_memo(db_session, memo.id)
        listed = await self.service.list_memos(db_session)

        assert restored.deleted_at is None
        assert restored.tags == ["keep"]
        assert [m.id for m in listed.memos] == [memo.id]

    @pytest.mark.asyncio
    async def test_trash_lists_most_recently_deleted_first(self, db_session):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        await add_memo(db_session, "deleted first", base, deleted_at=base + timedelta(days=1))
        await add_memo(db_session, "deleted later", base, deleted_at=base + timedelta(days=2))
        await add_memo(db_session, "live", base)

        trash = await self.service.list_deleted(db_session)

        assert [m.content for m in trash.memos] == ["deleted later", "deleted first"]
        assert all(m.deleted_at is not None for m in trash.memos)
        assert trash.pagination.total == 2
