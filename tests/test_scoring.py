import pytest

from campusdesk.faq.scoring import ScoringWeights, score, tokenize


def test_tokenize_lowercases_and_splits_on_punctuation():
    assert tokenize("What's the FEE-deadline?") == ["what", "s", "the", "fee", "deadline"]
    assert tokenize("  ") == []
    assert tokenize("?!") == []


def test_empty_query_scores_zero():
    assert score("", "What is SIH?", "Smart India Hackathon") == 0.0
    assert score("?? !!", "What is SIH?", "Smart India Hackathon") == 0.0


def test_containment_is_case_insensitive():
    s = score("what is sih", "What is SIH?", "Smart India Hackathon")
    # bonus 2 + all three tokens in the question, none in the answer
    assert s == pytest.approx(3.0)


def test_containment_adds_exactly_the_bonus():
    with_containment = score("fees due", "When are fees due", "")
    without = score("due fees", "When are fees due", "")
    assert with_containment - without == pytest.approx(2.0)


def test_answer_overlap_is_weighted_half():
    s = score("library fine", "Where is the library?", "The fine is 5 per day")
    assert s == pytest.approx(0.5 + 0.25)


def test_query_tokens_counted_with_repeats():
    # "fee fee hostel": two of three query tokens are in the question
    s = score("fee fee hostel", "Fee structure", "")
    assert s == pytest.approx(2 / 3)


def test_maximum_score():
    s = score("hostel fees", "hostel fees", "hostel fees")
    assert s == pytest.approx(3.5)
    assert ScoringWeights().max_score == pytest.approx(3.5)


def test_custom_weights():
    weights = ScoringWeights(containment_bonus=1.0, answer_weight=0.0)
    assert score("bus pass", "How do I get a bus pass", "bus pass office", weights) == pytest.approx(2.0)


@pytest.mark.parametrize(
    "query,question,answer",
    [
        ("wifi", "How to connect wifi?", "Use the portal"),
        ("random words", "What is SIH?", "Smart India Hackathon"),
        ("x", "", ""),
    ],
)
def test_score_is_never_negative(query, question, answer):
    assert score(query, question, answer) >= 0.0
