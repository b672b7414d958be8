import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence

from campusdesk.database.directory import CampusDirectory
from campusdesk.errors import SourceUnavailable
from campusdesk.faq.models import FAQEntry, FaqOrigin
from campusdesk.services.sheets import SheetsClient, rows_as_records

log = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"


class FaqSource(Protocol):
    origin: FaqOrigin

    async def fetch(self) -> Sequence[FAQEntry]:
        ...


def _entry(origin: FaqOrigin, question: Any, answer: Any, category: Any = None) -> Optional[FAQEntry]:
    q = str(question or "").strip()
    a = str(answer or "").strip()
    if not q or not a:
        return None
    cat = str(category).strip() if category else None
    return FAQEntry(question=q, answer=a, source=origin, category=cat or None)


class LocalFileSource:
    """FAQ pairs from a JSON file: ``[{"question": ..., "answer": ..., "category": ...}, ...]``."""

    origin = FaqOrigin.LOCAL

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def fetch(self) -> List[FAQEntry]:
        if not self.path.exists():
            log.warning("Local FAQ file %s not found, skipping.", self.path)
            return []

        text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SourceUnavailable(self.origin.value, f"invalid JSON in {self.path}: {exc}") from exc
        if not isinstance(raw, list):
            raise SourceUnavailable(self.origin.value, f"{self.path} must contain a JSON list")

        entries = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            e = _entry(self.origin, item.get("question"), item.get("answer"), item.get("category"))
            if e is not None:
                entries.append(e)
        return entries


class DirectoryFaqSource:
    """FAQ rows stored in the campus database."""

    origin = FaqOrigin.STRUCTURED_STORE

    def __init__(self, directory: CampusDirectory, limit: int = 500):
        self.directory = directory
        self.limit = limit

    async def fetch(self) -> List[FAQEntry]:
        rows = await self.directory.list_faqs(limit=self.limit)
        entries = []
        for row in rows:
            e = _entry(self.origin, row.question, row.answer, row.category)
            if e is not None:
                entries.append(e)
        return entries


class _SheetSource:
    origin: FaqOrigin

    def __init__(self, client: SheetsClient, sheet_id: str | None, cell_range: str):
        self.client = client
        self.sheet_id = sheet_id
        self.cell_range = cell_range

    async def fetch(self) -> List[FAQEntry]:
        # Missing credentials are a valid, empty state.
        if not self.sheet_id or not self.client.configured:
            log.warning("Missing sheet id or GOOGLE_API_KEY, skipping %s.", self.origin.value)
            return []
        values = await self.client.get_values(self.sheet_id, self.cell_range)
        return self._to_entries(values)

    def _to_entries(self, values: List[List[str]]) -> List[FAQEntry]:
        raise NotImplementedError


class HeaderSheetSource(_SheetSource):
    """Sheet whose first row names the columns (Question, Answer, Category)."""

    origin = FaqOrigin.FEED_A

    def _to_entries(self, values: List[List[str]]) -> List[FAQEntry]:
        entries = []
        for rec in rows_as_records(values):
            e = _entry(self.origin, rec.get("question"), rec.get("answer"), rec.get("category") or DEFAULT_CATEGORY)
            if e is not None:
                entries.append(e)
        return entries


class ColumnSheetSource(_SheetSource):
    """Sheet read positionally: column A question, B answer, C category; row 1 is skipped."""

    origin = FaqOrigin.FEED_B

    def _to_entries(self, values: List[List[str]]) -> List[FAQEntry]:
        entries = []
        for row in values[1:]:
            cells = list(row) + [""] * (3 - len(row))
            e = _entry(self.origin, cells[0], cells[1], cells[2] or DEFAULT_CATEGORY)
            if e is not None:
                entries.append(e)
        return entries
