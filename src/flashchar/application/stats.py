"""
Review statistics calculator.

This is a pure computation module with no I/O.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from flashchar.domain.models import Card, ResultType, Review


@dataclass
class ReviewStats:
    total_reviews: int
    correct: int
    accuracy_percent: int  # 0 when there are no reviews
    best_streak: int  # Longest run of consecutive correct answers
    total_cards: int
    due_cards: int


class StatsCalculator:
    """
    Computes study statistics from the review log and card set.

    Stateless and side-effect free.
    """

    def compute(
        self, reviews: Iterable[Review], cards: Iterable[Card], due_count: int = 0
    ) -> ReviewStats:
        ordered = sorted(reviews, key=lambda r: r.reviewed_at)
        correct = sum(1 for r in ordered if r.result_type == ResultType.CORRECT)
        total = len(ordered)

        return ReviewStats(
            total_reviews=total,
            correct=correct,
            accuracy_percent=int(correct / total * 100 + 0.5) if total else 0,
            best_streak=self._best_streak(ordered),
            total_cards=sum(1 for _ in cards),
            due_cards=due_count,
        )

    def _best_streak(self, ordered: list[Review]) -> int:
        running = 0
        best = 0
        for review in ordered:
            running = running + 1 if review.result_type == ResultType.CORRECT else 0
            best = max(best, running)
        return best
