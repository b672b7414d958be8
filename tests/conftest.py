from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Sequence

import pytest

from campusdesk.database.directory import (
    FaqRow,
    MentorRecord,
    ParentRecord,
    ReminderRecord,
    StudentRecord,
)
from campusdesk.faq.models import FAQEntry, FaqOrigin, KeywordEntry, KeywordOrigin


class FakeSource:
    """FAQ source returning canned entries, raising, or stalling."""

    def __init__(
        self,
        origin: FaqOrigin,
        entries: Sequence[FAQEntry] = (),
        *,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.origin = origin
        self.entries = list(entries)
        self.error = error
        self.delay = delay
        self.calls = 0

    async def fetch(self) -> List[FAQEntry]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.entries)


class FakeKeywordFeed:
    def __init__(self, entries: Sequence[KeywordEntry] = (), *, error: Optional[Exception] = None):
        self.origin = KeywordOrigin.FEED
        self.entries = list(entries)
        self.error = error
        self.calls = 0

    async def fetch(self) -> List[KeywordEntry]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.entries)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeDirectory:
    """In-memory stand-in for CampusDirectory."""

    def __init__(self):
        self.students: Dict[str, StudentRecord] = {}
        self.parents: Dict[str, ParentRecord] = {}
        self.mentors: Dict[str, MentorRecord] = {}
        self.reminders: List[ReminderRecord] = []
        self.faqs: List[FaqRow] = []

    async def get_student(self, student_id: str) -> Optional[StudentRecord]:
        return self.students.get(student_id)

    async def get_parent(self, parent_id: str) -> Optional[ParentRecord]:
        return self.parents.get(parent_id)

    async def get_mentor(self, mentor_id: str) -> Optional[MentorRecord]:
        return self.mentors.get(mentor_id)

    async def find_mentors(self, field: Optional[str] = None, limit: int = 5) -> List[MentorRecord]:
        found = [m for m in self.mentors.values() if not field or field.lower() in (m.field or "").lower()]
        return found[:limit]

    async def list_reminders(self, target_id: Optional[str] = None, limit: int = 5) -> List[ReminderRecord]:
        targets = {"GENERIC", target_id}
        return [r for r in self.reminders if r.target_id in targets][:limit]

    async def list_faqs(self, limit: int = 500) -> List[FaqRow]:
        return self.faqs[:limit]


def faq(question: str, answer: str, source: FaqOrigin = FaqOrigin.LOCAL) -> FAQEntry:
    return FAQEntry(question=question, answer=answer, source=source)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def directory() -> FakeDirectory:
    d = FakeDirectory()
    d.students["STU001"] = StudentRecord(
        student_id="STU001",
        name="Asha Rao",
        fees_pending=12000,
        scholarships=("Merit",),
        marks=78,
        attendance=91.5,
    )
    d.parents["PARENT001"] = ParentRecord(
        parent_id="PARENT001", name="Ravi Rao", relation="Father", student_id="STU001"
    )
    d.mentors["MENTOR001"] = MentorRecord(
        mentor_id="MENTOR001", name="Dr. Mehta", field="Artificial Intelligence", mentees=("STU001", "STU002")
    )
    d.reminders.append(ReminderRecord(type="fee", message="Fee due on the 10th", target_id="STU001"))
    d.reminders.append(ReminderRecord(type="event", message="Techfest registrations open", target_id="GENERIC"))
    return d
