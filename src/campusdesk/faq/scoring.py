"""
Deterministic relevance heuristic for FAQ candidates.

score = containment bonus (query is a substring of the question)
      + share of query tokens found in the question
      + answer_weight * share of query tokens found in the answer
"""
import re
from dataclasses import dataclass
from typing import List

_NON_WORD = re.compile(r"[^\w\s]")

DEFAULT_CONTAINMENT_BONUS = 2.0
DEFAULT_ANSWER_WEIGHT = 0.5


@dataclass(frozen=True)
class ScoringWeights:
    containment_bonus: float = DEFAULT_CONTAINMENT_BONUS
    answer_weight: float = DEFAULT_ANSWER_WEIGHT

    @property
    def max_score(self) -> float:
        return self.containment_bonus + 1.0 + self.answer_weight


def tokenize(text: str) -> List[str]:
    return _NON_WORD.sub(" ", (text or "").lower()).split()


def score(
    query: str,
    candidate_question: str,
    candidate_answer: str,
    weights: ScoringWeights = ScoringWeights(),
) -> float:
    query_tokens = tokenize(query)
    if not query_tokens:
        return 0.0

    total = 0.0
    if query.lower() in (candidate_question or "").lower():
        total += weights.containment_bonus

    question_tokens = set(tokenize(candidate_question))
    hits = sum(1 for t in query_tokens if t in question_tokens)
    total += hits / len(query_tokens)

    answer_tokens = set(tokenize(candidate_answer))
    answer_hits = sum(1 for t in query_tokens if t in answer_tokens)
    total += (answer_hits / len(query_tokens)) * weights.answer_weight

    return total
