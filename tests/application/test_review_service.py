from dataclasses import replace
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from flashchar.application.review_service import ReviewService, grade_card
from flashchar.application.session_queue import initialize_session, mark_wrong
from flashchar.domain.errors import CardNotFoundError, NotQueueHeadError, SessionFinishedError
from flashchar.domain.models import ResultType, WrongBehavior


@pytest.fixture
def mock_repo(settings):
    repo = AsyncMock()
    repo.load_settings.return_value = settings
    return repo


class TestGradeCard:
    def test_correct_fast_promotes_and_reschedules(self, make_card, settings, now):
        card = make_card("a", status=2, streak=3)
        session = initialize_session([card])

        outcome = grade_card(card, session, True, 2500, settings, now)

        assert outcome.card.status == 3
        assert outcome.card.due_at == now + timedelta(hours=48)
        assert outcome.card.streak == 4
        assert outcome.card.last_answer_ms == 2500
        assert outcome.card.last_reviewed_at == now
        assert outcome.fast_eligible is True
        assert outcome.session.queue == ()

    def test_correct_slow_stays(self, make_card, settings, now):
        card = make_card("a", status=2)
        outcome = grade_card(card, initialize_session([card]), True, 3001, settings, now)

        assert outcome.card.status == 2
        assert outcome.card.due_at == now + timedelta(hours=24)
        assert outcome.fast_eligible is False

    def test_step_zero_promotes_even_when_slow(self, make_card, settings, now):
        card = make_card("a")
        outcome = grade_card(card, initialize_session([card]), True, 60_000, settings, now)

        assert outcome.card.status == 1
        assert outcome.card.due_at == now + timedelta(hours=12)

    def test_wrong_keeps_due_date_and_requeues(self, make_card, settings, now):
        due = now - timedelta(days=2)
        card = make_card("a", status=4, streak=5, lapses=1, due_at=due)
        session = initialize_session([card, make_card("b")])

        outcome = grade_card(card, session, False, 900, settings, now)

        assert outcome.card.due_at == due
        assert outcome.card.status == 4
        assert outcome.card.streak == 0
        assert outcome.card.lapses == 2
        assert outcome.review.result_type == ResultType.WRONG
        assert outcome.review.fast_eligible is False
        assert outcome.session.queue == ("b", "a")

    def test_wrong_applies_wrong_behavior(self, make_card, settings, now):
        card = make_card("a", status=4)
        reset = replace(settings, wrong_behavior=WrongBehavior.RESET_ZERO)

        outcome = grade_card(card, initialize_session([card]), False, 900, reset, now)
        assert outcome.card.status == 0
        assert outcome.review.status_before == 4
        assert outcome.review.status_after == 0

    def test_fast_blocked_after_earlier_wrong(self, make_card, settings, now):
        card = make_card("a", status=2)
        session = mark_wrong(initialize_session([card]), "a")

        outcome = grade_card(card, session, True, 100, settings, now)

        assert outcome.fast_eligible is False
        assert outcome.card.status == 2
        assert outcome.review.attempt_number == 2

    def test_infinite_zone_uses_rule_threshold(self, make_card, settings, now):
        card = make_card("a", status=13)
        session = initialize_session([card])

        fast = grade_card(card, session, True, 1000, settings, now)
        slow = grade_card(card, session, True, 1001, settings, now)

        assert fast.card.status == 14
        assert fast.card.due_at == now + timedelta(days=475)
        assert slow.card.status == 13

    def test_non_head_card_rejected(self, make_card, settings, now):
        a, b = make_card("a"), make_card("b")
        with pytest.raises(NotQueueHeadError):
            grade_card(b, initialize_session([a, b]), True, 100, settings, now)


class TestReviewService:
    @pytest.mark.asyncio
    async def test_due_cards_filters_by_due_date(self, mock_repo, make_card, now):
        past = make_card("past", due_at=now - timedelta(minutes=1))
        exact = make_card("exact", due_at=now)
        future = make_card("future", due_at=now + timedelta(minutes=1))
        mock_repo.list_cards.return_value = [future, past, exact]

        service = ReviewService(mock_repo, mock_repo, mock_repo)
        due = await service.due_cards(now)

        assert [c.id for c in due] == ["past", "exact"]

    @pytest.mark.asyncio
    async def test_start_session(self, mock_repo, make_card, now):
        mock_repo.list_cards.return_value = [make_card("a"), make_card("b")]
        service = ReviewService(mock_repo, mock_repo, mock_repo)

        session = await service.start_session(now)
        assert session.queue == ("a", "b")

    @pytest.mark.asyncio
    async def test_grade_persists_card_and_review(self, mock_repo, make_card, now):
        card = make_card("a")
        mock_repo.get_card.return_value = card
        service = ReviewService(mock_repo, mock_repo, mock_repo)

        outcome = await service.grade(initialize_session([card]), True, 1200, now)

        mock_repo.get_card.assert_awaited_once_with("a")
        mock_repo.save_card.assert_awaited_once_with(outcome.card)
        mock_repo.append_review.assert_awaited_once_with(outcome.review)
        assert outcome.review.card_id == "a"
        assert outcome.review.attempt_number == 1

    @pytest.mark.asyncio
    async def test_grade_finished_session(self, mock_repo):
        service = ReviewService(mock_repo, mock_repo, mock_repo)

        with pytest.raises(SessionFinishedError):
            await service.grade(initialize_session([]), True, 100)
        mock_repo.save_card.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_grade_missing_card(self, mock_repo, make_card):
        mock_repo.get_card.return_value = None
        service = ReviewService(mock_repo, mock_repo, mock_repo)

        with pytest.raises(CardNotFoundError):
            await service.grade(initialize_session([make_card("gone")]), True, 100)
        mock_repo.append_review.assert_not_awaited()
