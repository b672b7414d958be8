import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from campusdesk.faq.models import FAQEntry
from campusdesk.faq.sources import FaqSource

log = logging.getLogger(__name__)

DEFAULT_TTL_S = 5 * 60
DEFAULT_FETCH_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class AggregationCache:
    timestamp: float
    entries: Tuple[FAQEntry, ...]
    refreshed_at: Optional[datetime] = None
    failed_sources: Tuple[str, ...] = field(default_factory=tuple)

    def is_valid(self, now: float, ttl: float) -> bool:
        return bool(self.entries) and (now - self.timestamp) < ttl


_EMPTY = AggregationCache(timestamp=float("-inf"), entries=())


class SourceAggregator:
    """
    Merges FAQ entries from independently failing sources behind a TTL cache.

    Sources are queried in the order given; a failing or slow source
    contributes nothing. The cache snapshot is immutable and swapped with
    a single assignment, so concurrent readers never see a partial merge.
    """

    def __init__(
        self,
        sources: Sequence[FaqSource],
        *,
        ttl: float = DEFAULT_TTL_S,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.sources = tuple(sources)
        self.ttl = ttl
        self.fetch_timeout = fetch_timeout
        self._clock = clock
        self._cache = _EMPTY
        self._refresh_count = 0

    @property
    def snapshot(self) -> AggregationCache:
        return self._cache

    async def _fetch_one(self, source: FaqSource) -> Tuple[Tuple[FAQEntry, ...], bool]:
        name = source.origin.value
        try:
            entries = await asyncio.wait_for(source.fetch(), timeout=self.fetch_timeout)
        except asyncio.TimeoutError:
            log.error("FAQ source %s timed out after %.1fs", name, self.fetch_timeout)
            return (), False
        except Exception as e:
            log.error("Error loading FAQs from %s: %s", name, e)
            return (), False
        log.debug("FAQ source %s returned %d entries", name, len(entries))
        return tuple(entries), True

    async def load_all(self, force: bool = False) -> Tuple[FAQEntry, ...]:
        cache = self._cache
        if not force and cache.is_valid(self._clock(), self.ttl):
            return cache.entries

        results = await asyncio.gather(*(self._fetch_one(s) for s in self.sources))

        merged: list[FAQEntry] = []
        failed: list[str] = []
        for source, (entries, ok) in zip(self.sources, results):
            merged.extend(entries)
            if not ok:
                failed.append(source.origin.value)

        self._cache = AggregationCache(
            timestamp=self._clock(),
            entries=tuple(merged),
            refreshed_at=datetime.now(timezone.utc),
            failed_sources=tuple(failed),
        )
        self._refresh_count += 1

        log.info(
            "FAQ pool refreshed: %d entries from %d sources (failed: %s)",
            len(merged),
            len(self.sources),
            ", ".join(failed) or "none",
        )
        return self._cache.entries

    async def refresh(self) -> int:
        entries = await self.load_all(force=True)
        return len(entries)

    def stats(self) -> Dict[str, Any]:
        cache = self._cache
        by_source: Dict[str, int] = {s.origin.value: 0 for s in self.sources}
        for e in cache.entries:
            by_source[e.source.value] = by_source.get(e.source.value, 0) + 1
        return {
            "entries": len(cache.entries),
            "by_source": by_source,
            "last_refresh": cache.refreshed_at.isoformat() if cache.refreshed_at else None,
            "refresh_count": self._refresh_count,
            "failed_sources": list(cache.failed_sources),
            "ttl_seconds": self.ttl,
        }
