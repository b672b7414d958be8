from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

DEFAULT_MAX_LOGS = 500


@dataclass(frozen=True)
class ChatLogEntry:
    query: str
    response: str
    intent: str
    match_source: str
    latency_ms: float
    error: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ChatLog:
    """
    Keeps the most recent dispatches in memory for performance metrics.

    Older entries fall off once ``max_logs`` is reached, so ``stats()`` always
    describes a recent window rather than the whole process lifetime.
    """

    def __init__(self, max_logs: int = DEFAULT_MAX_LOGS):
        self._entries: Deque[ChatLogEntry] = deque(maxlen=max_logs)

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, entry: ChatLogEntry) -> None:
        self._entries.append(entry)

    def recent(self, limit: int = 20) -> List[ChatLogEntry]:
        """Newest first."""
        return list(reversed(self._entries))[:limit]

    def stats(self) -> Dict[str, Any]:
        entries = list(self._entries)
        if not entries:
            return {
                "total": 0,
                "avg_latency_ms": 0,
                "error_count": 0,
                "unanswered": 0,
                "intents": {},
                "sources": {},
            }

        return {
            "total": len(entries),
            "avg_latency_ms": round(sum(e.latency_ms for e in entries) / len(entries)),
            "error_count": sum(1 for e in entries if e.match_source == "error"),
            "unanswered": sum(1 for e in entries if e.match_source == "none"),
            "intents": dict(Counter(e.intent for e in entries)),
            "sources": dict(Counter(e.match_source for e in entries)),
        }
