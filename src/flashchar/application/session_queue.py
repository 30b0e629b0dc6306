"""
Session queue for one review sitting.

Cards are presented in the order given. A wrong answer sends the card to
the back of the queue so every other queued card gets a turn first; a
correct answer removes it. The sitting ends when the queue is empty.

Every transition returns a new SessionState; the input is never mutated.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from flashchar.domain.errors import NotQueueHeadError, SessionFinishedError
from flashchar.domain.models import Card, SessionCardState, SessionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionProgress:
    total: int
    reviewed: int
    remaining: int
    percent: int


def initialize_session(due_cards: Iterable[Card]) -> SessionState:
    """
    Start a sitting over the given due cards, preserving their order.

    An empty input yields a session that is already finished.
    """
    cards = list(due_cards)
    queue = tuple(card.id for card in cards)
    card_state = {card.id: SessionCardState() for card in cards}
    logger.debug(f"Session started with {len(queue)} cards")
    return SessionState(queue=queue, card_state=card_state)


def current_card_id(session: SessionState) -> str | None:
    return session.queue[0] if session.queue else None


def is_finished(session: SessionState) -> bool:
    return not session.queue


def mark_wrong(session: SessionState, card_id: str) -> SessionState:
    """
    Requeue the head card at the tail and flag it as wrong this sitting.

    Raises:
        SessionFinishedError: The queue is already empty.
        NotQueueHeadError: card_id is not the current head.
    """
    _require_head(session, card_id)
    current = session.card_state.get(card_id, SessionCardState())
    return SessionState(
        queue=session.queue[1:] + (card_id,),
        card_state={
            **session.card_state,
            card_id: SessionCardState(
                attempts_this_session=current.attempts_this_session + 1,
                was_wrong_this_session=True,
            ),
        },
    )


def mark_correct(session: SessionState, card_id: str) -> SessionState:
    """
    Remove the head card. Its wrong flag is kept for fast-eligibility gating.

    Raises:
        SessionFinishedError: The queue is already empty.
        NotQueueHeadError: card_id is not the current head.
    """
    _require_head(session, card_id)
    current = session.card_state.get(card_id, SessionCardState())
    return SessionState(
        queue=session.queue[1:],
        card_state={
            **session.card_state,
            card_id: SessionCardState(
                attempts_this_session=current.attempts_this_session + 1,
                was_wrong_this_session=current.was_wrong_this_session,
            ),
        },
    )


def session_progress(session: SessionState, total: int) -> SessionProgress:
    """
    Progress through a sitting that started with `total` cards.

    Requeued cards count as remaining, so progress can stand still.
    """
    remaining = len(session.queue)
    reviewed = max(0, total - remaining)
    percent = round(reviewed / total * 100) if total else 0
    return SessionProgress(total=total, reviewed=reviewed, remaining=remaining, percent=percent)


def _require_head(session: SessionState, card_id: str) -> None:
    if not session.queue:
        raise SessionFinishedError(card_id)
    head = session.queue[0]
    if head != card_id:
        raise NotQueueHeadError(card_id, head)
