import logging
from typing import Awaitable, Callable, Dict, Mapping, Optional

from campusdesk.database.directory import CampusDirectory, StudentRecord

log = logging.getLogger(__name__)

Handler = Callable[[Mapping[str, str]], Awaitable[str]]

COUNSELING_TEXT = (
    "🧠 Our campus counselor is available Mon-Fri, 10am-5pm in the Student Wellness Centre. "
    "You can also book a confidential session through the student portal."
)
DISTRESS_TEXT = (
    "🚨 I'm really sorry you're going through this. You are not alone. "
    "Please call the 24x7 mental health helpline at 1800-599-0019 (KIRAN) right now, "
    "or reach the campus counselor on duty. If you are in immediate danger, call 112."
)
MARKETPLACE_TEXT = (
    "🛒 The student marketplace lists second-hand books, laptops and lab equipment. "
    "Open the Marketplace tab in the student portal to browse or post an item."
)
RECORDS_UNAVAILABLE_TEXT = "⚠️ I can't reach student records right now. Please try again in a few minutes."
FIELD_NOT_SET = "field not set"


def _money(amount: float) -> str:
    return f"₹{amount:,.0f}"


def _pct(value: Optional[float]) -> str:
    return f"{value:g}%" if value is not None else "N/A"


def _num(value: Optional[float]) -> str:
    return f"{value:g}" if value is not None else "N/A"


def _param(params: Mapping[str, str], *names: str) -> str:
    for name in names:
        value = (params.get(name) or "").strip()
        if value:
            return value
    return ""


def format_finance(student: StudentRecord) -> str:
    scholarships = ", ".join(student.scholarships) if student.scholarships else "None"
    if student.fees_pending > 0:
        status = f"Fees pending: {_money(student.fees_pending)}"
    else:
        status = "No dues pending ✅"
    return (
        f"💰 Finance Summary for {student.name} ({student.student_id})\n"
        f"{status}\n"
        f"Scholarships: {scholarships}"
    )


class IntentHandlers:
    """Structured intent handlers backed by the campus directory."""

    def __init__(self, directory: CampusDirectory):
        self.directory = directory

    def table(self) -> Dict[str, Handler]:
        return {
            "FinanceIntent": self.finance,
            "ParentStatusIntent": self.parent_status,
            "MentorStatusIntent": self.mentor_status,
            "ReminderIntent": self.reminders,
            "MentorshipIntent": self.mentorship,
            "MarketplaceIntent": self.marketplace,
            "CounselingIntent": self.counseling,
            "DistressIntent": self.distress,
        }

    async def finance(self, params: Mapping[str, str]) -> str:
        student_id = _param(params, "studentId", "student_id")
        if not student_id:
            return "Please provide your Student ID (e.g. STU001) so I can check your finance details."

        student = await self.directory.get_student(student_id)
        if student is None:
            return f"❌ No student found with ID {student_id}. Please check the ID and try again."
        return format_finance(student)

    async def parent_status(self, params: Mapping[str, str]) -> str:
        parent_id = _param(params, "parentId", "parent_id")
        if not parent_id:
            return "Please provide your Parent ID (e.g. PARENT001) to open the parent dashboard."

        parent = await self.directory.get_parent(parent_id)
        if parent is None:
            return f"❌ No parent found with ID {parent_id}."

        student = await self.directory.get_student(parent.student_id)
        if student is None:
            return f"❌ The student linked to {parent_id} ({parent.student_id}) was not found."

        fees = _money(student.fees_pending) if student.fees_pending > 0 else "None"
        return (
            f"👪 Parent Dashboard for {parent.name}\n"
            f"Student: {student.name} ({student.student_id})\n"
            f"Attendance: {_pct(student.attendance)}\n"
            f"Marks: {_num(student.marks)}\n"
            f"Fees pending: {fees}"
        )

    async def mentor_status(self, params: Mapping[str, str]) -> str:
        mentor_id = _param(params, "mentorId", "mentor_id")
        if not mentor_id:
            return "Please provide your Mentor ID (e.g. MENTOR001) to open the mentor dashboard."

        mentor = await self.directory.get_mentor(mentor_id)
        if mentor is None:
            return f"❌ No mentor found with ID {mentor_id}."

        mentees = ", ".join(mentor.mentees) if mentor.mentees else "No mentees assigned yet"
        return (
            f"🧑‍🏫 Mentor Dashboard for {mentor.name} ({mentor.field or FIELD_NOT_SET})\n"
            f"Mentees ({len(mentor.mentees)}): {mentees}"
        )

    async def reminders(self, params: Mapping[str, str]) -> str:
        student_id = _param(params, "studentId", "student_id") or None
        items = await self.directory.list_reminders(student_id)
        if not items:
            return "📭 No reminders for you right now."
        lines = [f"• [{r.type}] {r.message}" for r in items]
        return "⏰ Your reminders:\n" + "\n".join(lines)

    async def mentorship(self, params: Mapping[str, str]) -> str:
        field = _param(params, "field", "subject") or None
        mentors = await self.directory.find_mentors(field)
        if not mentors:
            topic = f" for {field}" if field else ""
            return f"No mentors available{topic} right now. Please check back later."
        lines = [f"• {m.name} ({m.field or FIELD_NOT_SET})" for m in mentors]
        topic = f" for {field}" if field else ""
        return f"🤝 Available mentors{topic}:\n" + "\n".join(lines)

    async def marketplace(self, params: Mapping[str, str]) -> str:
        return MARKETPLACE_TEXT

    async def counseling(self, params: Mapping[str, str]) -> str:
        return COUNSELING_TEXT

    async def distress(self, params: Mapping[str, str]) -> str:
        return DISTRESS_TEXT
