import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from rapidfuzz import fuzz

from campusdesk.errors import SourceUnavailable
from campusdesk.faq.models import KeywordEntry, KeywordMatch, KeywordOrigin, MatchType, parse_keywords
from campusdesk.services.sheets import SheetsClient, rows_as_records

log = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 0.6


class KeywordFeed(Protocol):
    origin: KeywordOrigin

    async def fetch(self) -> Sequence[KeywordEntry]:
        ...


def _rows_to_entries(rows: List[Dict[str, Any]], origin: KeywordOrigin) -> List[KeywordEntry]:
    entries = []
    for row in rows:
        keywords = parse_keywords(str(row.get("keywords") or ""))
        answer = str(row.get("answer") or "").strip()
        if not keywords or not answer:
            continue
        entries.append(KeywordEntry(keywords=keywords, answer=answer, source=origin))
    return entries


class LocalKeywordFile:
    """Keyword rows from a JSON file: ``[{"Keywords": "wifi, internet", "Answer": "..."}]``."""

    origin = KeywordOrigin.LOCAL

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def fetch(self) -> List[KeywordEntry]:
        if not self.path.exists():
            log.warning("No local keyword file at %s, skipping.", self.path)
            return []
        text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SourceUnavailable(self.origin.value, f"invalid JSON in {self.path}: {exc}") from exc
        if not isinstance(raw, list):
            raise SourceUnavailable(self.origin.value, f"{self.path} must contain a JSON list")
        rows = [{str(k).lower(): v for k, v in item.items()} for item in raw if isinstance(item, dict)]
        return _rows_to_entries(rows, self.origin)


class SheetKeywordFeed:
    """Keyword tab of a spreadsheet with ``Keywords`` and ``Answer`` header columns."""

    origin = KeywordOrigin.FEED

    def __init__(self, client: SheetsClient, sheet_id: str | None, cell_range: str = "Keywords!A:B"):
        self.client = client
        self.sheet_id = sheet_id
        self.cell_range = cell_range

    async def fetch(self) -> List[KeywordEntry]:
        if not self.sheet_id or not self.client.configured:
            log.warning("Missing keyword sheet id or GOOGLE_API_KEY, skipping keyword FAQs from sheets.")
            return []
        values = await self.client.get_values(self.sheet_id, self.cell_range)
        return _rows_to_entries(rows_as_records(values), self.origin)


class KeywordStore:
    """In-memory keyword entries, loaded once and kept until refreshed."""

    def __init__(self, feeds: Sequence[KeywordFeed], *, fetch_timeout: float = 10.0):
        self.feeds = tuple(feeds)
        self.fetch_timeout = fetch_timeout
        self._entries: Tuple[KeywordEntry, ...] = ()
        self._loaded = False
        self._loaded_at: Optional[datetime] = None
        self._lock = asyncio.Lock()

    @property
    def entries(self) -> Tuple[KeywordEntry, ...]:
        return self._entries

    async def _fetch_feed(self, feed: KeywordFeed) -> List[KeywordEntry]:
        try:
            return list(await asyncio.wait_for(feed.fetch(), timeout=self.fetch_timeout))
        except asyncio.TimeoutError:
            log.error("Keyword feed %s timed out after %.1fs", feed.origin.value, self.fetch_timeout)
        except Exception as e:
            log.error("Error loading keyword FAQs from %s: %s", feed.origin.value, e)
        return []

    async def load(self) -> Tuple[KeywordEntry, ...]:
        """Fetch every feed and replace the stored batch. Never raises."""
        batches = await asyncio.gather(*(self._fetch_feed(f) for f in self.feeds))
        self._entries = tuple(e for batch in batches for e in batch)
        self._loaded = True
        self._loaded_at = datetime.now(timezone.utc)
        log.info("Loaded %d keyword FAQs", len(self._entries))
        return self._entries

    async def ensure_loaded(self) -> Tuple[KeywordEntry, ...]:
        if self._loaded:
            return self._entries
        async with self._lock:
            if not self._loaded:
                await self.load()
        return self._entries

    async def refresh(self) -> int:
        async with self._lock:
            entries = await self.load()
        return len(entries)

    def stats(self) -> Dict[str, Any]:
        return {
            "entries": len(self._entries),
            "loaded": self._loaded,
            "last_refresh": self._loaded_at.isoformat() if self._loaded_at else None,
        }


def similarity(a: str, b: str) -> float:
    """Best alignment of the shorter string against windows of the longer one, in [0, 1]."""
    return fuzz.partial_ratio(a, b) / 100.0


class KeywordResolver:
    """Exact substring pass over keyword tags, then a fuzzy pass if nothing hit."""

    def __init__(self, store: KeywordStore, *, fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD):
        self.store = store
        self.fuzzy_threshold = fuzzy_threshold

    @staticmethod
    def exact_match(query_lower: str, entries: Sequence[KeywordEntry]) -> Optional[KeywordMatch]:
        for entry in entries:
            if any(kw in query_lower for kw in entry.keywords):
                return KeywordMatch(
                    answer=entry.answer,
                    matched=entry.keywords,
                    score=1.0,
                    match_type=MatchType.EXACT,
                    source=entry.source,
                )
        return None

    def fuzzy_match(self, query_lower: str, entries: Sequence[KeywordEntry]) -> Optional[KeywordMatch]:
        best: Optional[Tuple[float, KeywordEntry, str]] = None
        for entry in entries:
            for kw in entry.keywords:
                s = similarity(query_lower, kw)
                if best is None or s > best[0]:
                    best = (s, entry, kw)

        if best is None or best[0] < self.fuzzy_threshold:
            return None
        s, entry, kw = best
        return KeywordMatch(
            answer=entry.answer,
            matched=(kw,),
            score=s,
            match_type=MatchType.FUZZY,
            source=entry.source,
        )

    async def find_keyword_faq(self, query: str) -> Optional[KeywordMatch]:
        if not query or not query.strip():
            return None

        entries = await self.store.ensure_loaded()
        if not entries:
            return None

        lower = query.lower()
        match = self.exact_match(lower, entries) or self.fuzzy_match(lower, entries)
        if match:
            log.debug("Keyword %s match %s (%.2f) for %r", match.match_type.value, match.matched, match.score, query)
        return match

    async def answer(self, query: str) -> Optional[str]:
        match = await self.find_keyword_faq(query)
        return match.answer if match else None
