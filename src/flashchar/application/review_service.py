"""
Review Service: application layer orchestrator for a study sitting.

Ties the scheduler and the session queue to the persistence ports:
picks the due set, grades the head card, persists the updated card and
appends the review log entry.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from ulid import ULID

from flashchar.domain.errors import CardNotFoundError, SessionFinishedError
from flashchar.domain.models import (
    Card,
    ResultType,
    Review,
    SessionCardState,
    SessionState,
    Settings,
)
from flashchar.domain.ports import CardRepository, ReviewLog, SettingsStore

from .scheduler import (
    interval_hours_for_status,
    is_fast_eligible,
    next_status_on_correct,
    speed_threshold_for_status,
    status_on_wrong,
)
from .session_queue import current_card_id, initialize_session, mark_correct, mark_wrong

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradeOutcome:
    """Result of grading one attempt."""

    card: Card  # Updated card, ready to persist
    review: Review
    session: SessionState  # Session advanced past the graded attempt

    @property
    def correct(self) -> bool:
        return self.review.result_type == ResultType.CORRECT

    @property
    def fast_eligible(self) -> bool:
        return self.review.fast_eligible


def generate_review_id() -> str:
    return str(ULID())


def grade_card(
    card: Card,
    session: SessionState,
    correct: bool,
    answer_ms: int,
    settings: Settings,
    now: datetime,
) -> GradeOutcome:
    """
    Apply one graded attempt to a card and advance the session.

    A correct answer reschedules the card from `now`; a wrong answer keeps
    its due date so it stays due for immediate re-study.

    Args:
        card: The card at the head of the session queue.
        session: Current session state.
        correct: Whether the learner answered correctly.
        answer_ms: Measured time from showing the front to flipping.
        settings: Study settings.
        now: Grading time (timezone-aware).

    Returns:
        GradeOutcome with the updated card, the review entry and the next session.

    Raises:
        SessionFinishedError / NotQueueHeadError: card is not the queue head.
    """
    state = session.card_state.get(card.id, SessionCardState())
    status_before = card.status

    if correct:
        threshold = speed_threshold_for_status(status_before, settings)
        fast = is_fast_eligible(state.was_wrong_this_session, answer_ms / 1000, threshold)
        status_after = next_status_on_correct(status_before, fast, settings)
        due_at = now + timedelta(hours=interval_hours_for_status(status_after, settings))
        next_session = mark_correct(session, card.id)
        updated = replace(
            card,
            status=status_after,
            due_at=due_at,
            streak=card.streak + 1,
            last_reviewed_at=now,
            last_answer_ms=answer_ms,
            updated_at=now,
        )
    else:
        fast = False
        status_after = status_on_wrong(status_before, settings)
        next_session = mark_wrong(session, card.id)
        updated = replace(
            card,
            status=status_after,
            streak=0,
            lapses=card.lapses + 1,
            last_reviewed_at=now,
            last_answer_ms=answer_ms,
            updated_at=now,
        )

    review = Review(
        id=generate_review_id(),
        card_id=card.id,
        reviewed_at=now,
        answer_ms=answer_ms,
        result_type=ResultType.CORRECT if correct else ResultType.WRONG,
        status_before=status_before,
        status_after=status_after,
        attempt_number=state.attempts_this_session + 1,
        fast_eligible=fast,
    )
    return GradeOutcome(card=updated, review=review, session=next_session)


class ReviewService:
    """
    Application service for running review sittings.

    Follows Dependency Inversion: depends on the persistence ports,
    not concrete adapter implementations.
    """

    def __init__(
        self,
        cards: CardRepository,
        reviews: ReviewLog,
        settings_store: SettingsStore,
    ):
        self._cards = cards
        self._reviews = reviews
        self._settings_store = settings_store

    async def due_cards(self, now: datetime | None = None) -> list[Card]:
        """
        Cards whose due date has passed, in store order.
        """
        now = now or datetime.now(timezone.utc)
        return [card for card in await self._cards.list_cards() if card.due_at <= now]

    async def start_session(self, now: datetime | None = None) -> SessionState:
        due = await self.due_cards(now)
        logger.info(f"Starting sitting with {len(due)} due cards")
        return initialize_session(due)

    async def grade(
        self,
        session: SessionState,
        correct: bool,
        answer_ms: int,
        now: datetime | None = None,
    ) -> GradeOutcome:
        """
        Grade the card at the head of the session and persist the result.
        """
        card_id = current_card_id(session)
        if card_id is None:
            raise SessionFinishedError()

        card = await self._cards.get_card(card_id)
        if card is None:
            raise CardNotFoundError(card_id)

        now = now or datetime.now(timezone.utc)
        settings = await self._settings_store.load_settings()
        outcome = grade_card(card, session, correct, answer_ms, settings, now)

        await self._cards.save_card(outcome.card)
        await self._reviews.append_review(outcome.review)

        logger.debug(
            f"Graded {card_id}: {outcome.review.result_type.value} "
            f"status {outcome.review.status_before} -> {outcome.review.status_after} "
            f"fast={outcome.fast_eligible}"
        )
        return outcome
