from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from campusdesk.config import load_settings
from campusdesk.database import db
from campusdesk.database.directory import CampusDirectory, StudentRecord


class _FakePool:
    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


def _directory(conn):
    pool = _FakePool(conn)

    async def getter():
        return pool

    return CampusDirectory(pool_getter=getter)


@pytest.mark.asyncio
async def test_get_student_maps_row():
    conn = AsyncMock()
    conn.fetchrow.return_value = {
        "student_id": "STU001",
        "name": None,
        "fees_pending": None,
        "scholarships": None,
        "marks": 80,
        "attendance": None,
    }

    student = await _directory(conn).get_student("STU001")

    assert student == StudentRecord(
        student_id="STU001", name="STU001", fees_pending=0.0, scholarships=(), marks=80.0, attendance=None
    )
    assert conn.fetchrow.await_args.args[1] == "STU001"


@pytest.mark.asyncio
async def test_unknown_ids_return_none():
    conn = AsyncMock()
    conn.fetchrow.return_value = None
    directory = _directory(conn)

    assert await directory.get_student("X") is None
    assert await directory.get_parent("X") is None
    assert await directory.get_mentor("X") is None


@pytest.mark.asyncio
async def test_reminders_query_includes_generic_target():
    conn = AsyncMock()
    conn.fetch.return_value = [{"type": "fee", "message": "Pay by 10th", "target_id": "STU001"}]

    reminders = await _directory(conn).list_reminders("STU001", limit=3)

    assert reminders[0].message == "Pay by 10th"
    assert conn.fetch.await_args.args[1:] == (["STU001", "GENERIC"], 3)


@pytest.mark.asyncio
async def test_list_faqs():
    conn = AsyncMock()
    conn.fetch.return_value = [{"question": "Q", "answer": "A", "category": "General"}]

    rows = await _directory(conn).list_faqs(limit=10)

    assert [(r.question, r.answer, r.category) for r in rows] == [("Q", "A", "General")]


@pytest.mark.asyncio
async def test_get_pool_before_init_raises():
    with pytest.raises(RuntimeError, match="not initialized"):
        await db.get_pool()


@pytest.mark.asyncio
async def test_failed_health_check_closes_pool(monkeypatch):
    pool = AsyncMock()
    pool.fetchval.side_effect = ConnectionError("refused")
    monkeypatch.setattr(db.asyncpg, "create_pool", AsyncMock(return_value=pool))
    monkeypatch.setattr(db, "_pool", None)

    with pytest.raises(ConnectionError):
        await db.init_db_pool(load_settings())

    pool.close.assert_awaited_once()
    assert db._pool is None
