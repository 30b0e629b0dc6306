from datetime import timedelta

from flashchar.application.stats import StatsCalculator
from flashchar.domain.models import ResultType, Review


def _review(i: int, result: ResultType, now) -> Review:
    return Review(
        id=f"r{i}",
        card_id="a",
        reviewed_at=now + timedelta(minutes=i),
        answer_ms=1000,
        result_type=result,
        status_before=0,
        status_after=0,
        attempt_number=1,
        fast_eligible=False,
    )


def test_accuracy_and_best_streak(now, make_card):
    C, W = ResultType.CORRECT, ResultType.WRONG
    pattern = [C, C, W, C, C, C, W]
    reviews = [_review(i, r, now) for i, r in enumerate(pattern)]
    reviews.reverse()  # log order must not matter

    result = StatsCalculator().compute(reviews, [make_card("a"), make_card("b")], due_count=1)

    assert result.total_reviews == 7
    assert result.correct == 5
    assert result.accuracy_percent == 71
    assert result.best_streak == 3
    assert result.total_cards == 2
    assert result.due_cards == 1


def test_no_reviews():
    result = StatsCalculator().compute([], [])
    assert result.accuracy_percent == 0
    assert result.best_streak == 0
