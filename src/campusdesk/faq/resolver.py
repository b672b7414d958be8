import logging
from typing import Optional

from campusdesk.faq.aggregator import SourceAggregator
from campusdesk.faq.models import FaqMatch
from campusdesk.faq.scoring import ScoringWeights, score

log = logging.getLogger(__name__)

DEFAULT_MIN_SCORE = 0.5


class FaqResolver:
    """Picks the single best FAQ entry for a free-text query.

    Full linear scan of the aggregated pool on every call; ties keep the
    first maximum in pool order.
    """

    def __init__(
        self,
        aggregator: SourceAggregator,
        *,
        min_score: float = DEFAULT_MIN_SCORE,
        weights: ScoringWeights = ScoringWeights(),
    ):
        self.aggregator = aggregator
        self.min_score = min_score
        self.weights = weights

    async def find_best_faq(self, query: str) -> Optional[FaqMatch]:
        if not query or not query.strip():
            return None

        pool = await self.aggregator.load_all()
        if not pool:
            return None

        best: Optional[FaqMatch] = None
        for entry in pool:
            s = score(query, entry.question, entry.answer, self.weights)
            if best is None or s > best.score:
                best = FaqMatch(entry=entry, score=s)

        if best is None or best.score < self.min_score:
            log.debug("No FAQ above %.2f for %r", self.min_score, query)
            return None

        log.debug("FAQ match %.2f (%s) for %r", best.score, best.entry.source.value, query)
        return best

    async def answer(self, query: str) -> Optional[str]:
        match = await self.find_best_faq(query)
        return match.entry.answer if match else None
