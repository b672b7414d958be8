from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class FaqOrigin(str, Enum):
    LOCAL = "local"
    STRUCTURED_STORE = "structured-store"
    FEED_A = "feed-a"
    FEED_B = "feed-b"


class KeywordOrigin(str, Enum):
    LOCAL = "local-keywords"
    FEED = "feed-keywords"


class MatchType(str, Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"


@dataclass(frozen=True)
class FAQEntry:
    question: str
    answer: str
    source: FaqOrigin
    category: Optional[str] = None


@dataclass(frozen=True)
class KeywordEntry:
    keywords: Tuple[str, ...]
    answer: str
    source: KeywordOrigin = KeywordOrigin.FEED


@dataclass(frozen=True)
class FaqMatch:
    entry: FAQEntry
    score: float


@dataclass(frozen=True)
class KeywordMatch:
    answer: str
    matched: Tuple[str, ...]
    score: float
    match_type: MatchType
    source: KeywordOrigin


def parse_keywords(raw: str) -> Tuple[str, ...]:
    """Split a comma-delimited keyword cell into lower-cased, trimmed, de-duplicated tokens."""
    seen: list[str] = []
    for token in (raw or "").lower().split(","):
        token = token.strip()
        if token and token not in seen:
            seen.append(token)
    return tuple(seen)
