import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Tuple

import asyncpg

from campusdesk.database.db import get_pool

log = logging.getLogger(__name__)

PoolGetter = Callable[[], Awaitable[asyncpg.Pool]]


@dataclass(frozen=True)
class StudentRecord:
    student_id: str
    name: str
    fees_pending: float
    scholarships: Tuple[str, ...]
    marks: Optional[float]
    attendance: Optional[float]


@dataclass(frozen=True)
class ParentRecord:
    parent_id: str
    name: str
    relation: Optional[str]
    student_id: str


@dataclass(frozen=True)
class MentorRecord:
    mentor_id: str
    name: str
    field: Optional[str]
    mentees: Tuple[str, ...]


@dataclass(frozen=True)
class ReminderRecord:
    type: str
    message: str
    target_id: str


@dataclass(frozen=True)
class FaqRow:
    question: str
    answer: str
    category: Optional[str]


def _num(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


class CampusDirectory:
    """Read-only lookups against the campus Postgres database.

    Every lookup returns a frozen record or ``None`` when the identifier is
    unknown. Storage errors propagate; callers decide how to degrade.
    """

    def __init__(self, pool_getter: PoolGetter = get_pool):
        self._pool_getter = pool_getter

    async def _fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        pool = await self._pool_getter()
        async with pool.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def _fetch(self, query: str, *args: Any) -> List[asyncpg.Record]:
        pool = await self._pool_getter()
        async with pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def get_student(self, student_id: str) -> Optional[StudentRecord]:
        row = await self._fetchrow(
            """
            SELECT student_id, name, fees_pending, scholarships, marks, attendance
            FROM students
            WHERE student_id = $1
            """,
            student_id,
        )
        if row is None:
            return None
        return StudentRecord(
            student_id=row["student_id"],
            name=row["name"] or row["student_id"],
            fees_pending=_num(row["fees_pending"]) or 0.0,
            scholarships=tuple(row["scholarships"] or ()),
            marks=_num(row["marks"]),
            attendance=_num(row["attendance"]),
        )

    async def get_parent(self, parent_id: str) -> Optional[ParentRecord]:
        row = await self._fetchrow(
            "SELECT parent_id, name, relation, student_id FROM parents WHERE parent_id = $1",
            parent_id,
        )
        if row is None:
            return None
        return ParentRecord(
            parent_id=row["parent_id"],
            name=row["name"],
            relation=row["relation"],
            student_id=row["student_id"],
        )

    async def get_mentor(self, mentor_id: str) -> Optional[MentorRecord]:
        row = await self._fetchrow(
            "SELECT mentor_id, name, field, mentees FROM mentors WHERE mentor_id = $1",
            mentor_id,
        )
        if row is None:
            return None
        return MentorRecord(
            mentor_id=row["mentor_id"],
            name=row["name"],
            field=row["field"] or None,
            mentees=tuple(row["mentees"] or ()),
        )

    async def find_mentors(self, field: Optional[str] = None, limit: int = 5) -> List[MentorRecord]:
        if field:
            rows = await self._fetch(
                """
                SELECT mentor_id, name, field, mentees
                FROM mentors
                WHERE field ILIKE $1
                ORDER BY name
                LIMIT $2
                """,
                f"%{field}%",
                limit,
            )
        else:
            rows = await self._fetch(
                "SELECT mentor_id, name, field, mentees FROM mentors ORDER BY name LIMIT $1",
                limit,
            )
        return [
            MentorRecord(
                mentor_id=r["mentor_id"],
                name=r["name"],
                field=r["field"] or None,
                mentees=tuple(r["mentees"] or ()),
            )
            for r in rows
        ]

    async def list_reminders(self, target_id: Optional[str] = None, limit: int = 5) -> List[ReminderRecord]:
        # GENERIC reminders go to everyone.
        targets = ["GENERIC"] if not target_id else [target_id, "GENERIC"]
        rows = await self._fetch(
            """
            SELECT type, message, target_id
            FROM reminders
            WHERE target_id = ANY($1::text[])
            ORDER BY created_at DESC
            LIMIT $2
            """,
            targets,
            limit,
        )
        return [ReminderRecord(type=r["type"], message=r["message"], target_id=r["target_id"]) for r in rows]

    async def list_faqs(self, limit: int = 500) -> List[FaqRow]:
        rows = await self._fetch(
            "SELECT question, answer, category FROM faqs ORDER BY created_at LIMIT $1",
            limit,
        )
        log.debug("Fetched %d FAQ rows from Postgres", len(rows))
        return [FaqRow(question=r["question"], answer=r["answer"], category=r["category"]) for r in rows]
