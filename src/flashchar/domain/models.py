"""
Domain models for cards, reviews, scheduling settings and study sessions.

These are pure data structures with no I/O or external dependencies.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType


class CardField(str, Enum):
    CHARACTERS = "characters"
    PINYIN = "pinyin"
    MEANING = "meaning"


class SlowCorrectCapMode(str, Enum):
    """What happens to a ladder card answered correctly but slowly."""

    STAY = "stay"
    DEMOTE_ONE = "demoteOne"
    CUSTOM = "custom"


class WrongBehavior(str, Enum):
    """Policy applied to a card's status on a wrong answer."""

    NONE = "none"
    LAPSE_ONE = "lapseOne"
    RESET_ZERO = "resetZero"


class DedupeImportMode(str, Enum):
    MERGE = "merge"
    KEEP_BOTH = "keepBoth"


class ResultType(str, Enum):
    CORRECT = "correct"
    WRONG = "wrong"


@dataclass(frozen=True)
class Card:
    """
    A single flashcard and its scheduling state.

    Attributes:
        id: Stable card identifier (ULID).
        status: Mastery step. An index into the ladder, or beyond it.
        due_at: Moment after which the card is eligible for review.
        streak: Consecutive correct answers.
        lapses: Total wrong answers.
        last_answer_ms: Last measured response latency.
    """

    id: str
    characters: str
    meaning: str
    due_at: datetime
    created_at: datetime
    updated_at: datetime
    pinyin: str | None = None
    status: int = 0
    streak: int = 0
    lapses: int = 0
    last_reviewed_at: datetime | None = None
    last_answer_ms: int | None = None

    def field_value(self, card_field: CardField) -> str:
        return getattr(self, card_field.value) or ""


@dataclass(frozen=True)
class Review:
    """
    A single append-only review log entry.

    Attributes:
        card_id: The card that was graded.
        answer_ms: Time from showing the front to flipping the card.
        status_before: Card status before grading.
        status_after: Card status after grading.
        attempt_number: 1-based attempt count within the sitting.
        fast_eligible: Whether the answer qualified as fast.
    """

    id: str
    card_id: str
    reviewed_at: datetime
    answer_ms: int
    result_type: ResultType
    status_before: int
    status_after: int
    attempt_number: int
    fast_eligible: bool


@dataclass(frozen=True)
class StepConfig:
    """
    One rung of the mastery ladder.

    Attributes:
        step: Status value this rung applies to. Unique within a ladder.
        interval_hours: Interval granted on a qualifying correct answer.
        speed_threshold_sec: Inclusive upper bound on response time to count as fast.
        slow_correct_cap_mode: Rule for correct-but-slow answers.
        slow_correct_target: Target status when the cap mode is custom.
    """

    step: int
    interval_hours: float
    speed_threshold_sec: float = math.inf
    slow_correct_cap_mode: SlowCorrectCapMode = SlowCorrectCapMode.STAY
    slow_correct_target: int | None = None


@dataclass(frozen=True)
class InfiniteRuleConfig:
    """
    Geometric-growth rule for statuses beyond the ladder.

    interval_days = min(max_interval_days, round(base_interval_days * growth_factor ** n))
    where n = status - start_step.
    """

    start_step: int
    fast_threshold_sec: float
    base_interval_days: float
    growth_factor: float
    max_interval_days: float


@dataclass(frozen=True)
class Settings:
    """
    Immutable study settings threaded through every scheduling call.

    Display and text-to-speech fields are carried untouched for the
    presentation layer.
    """

    steps: tuple[StepConfig, ...]
    infinite_rule: InfiniteRuleConfig
    front_fields: tuple[CardField, ...] = (CardField.CHARACTERS,)
    back_fields: tuple[CardField, ...] = (CardField.PINYIN, CardField.MEANING)
    wrong_behavior: WrongBehavior = WrongBehavior.NONE
    dedupe_import_mode: DedupeImportMode = DedupeImportMode.MERGE
    tts_voice_name: str | None = None
    tts_rate: float = 1.0
    tts_pitch: float = 1.0


@dataclass(frozen=True)
class SessionCardState:
    attempts_this_session: int = 0
    was_wrong_this_session: bool = False


@dataclass(frozen=True)
class SessionState:
    """
    Ordering state for one review sitting.

    Each queued id appears once. Transitions never mutate an instance;
    they build a new one. `card_state` is a read-only view and is left out
    of the hash.
    """

    queue: tuple[str, ...] = ()
    card_state: Mapping[str, SessionCardState] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "card_state", MappingProxyType(dict(self.card_state)))
