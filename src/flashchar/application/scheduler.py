"""
Spaced-repetition scheduler.

Pure, side-effect-free decision logic. Given a card's status and the
outcome of one attempt, computes the next status and the next due interval.
Every function is total for a well-formed Settings value: malformed ladders
degrade to documented fallbacks instead of raising.
"""

import logging
import math

from flashchar.domain.constants import (
    DEFAULT_SPEED_THRESHOLD_SEC,
    GAP_FALLBACK_HOURS,
    HOURS_PER_DAY,
    MIN_INTERVAL_HOURS,
)
from flashchar.domain.ladder import (
    FiniteStep,
    InfiniteStep,
    UnconfiguredStep,
    lookup_step,
    resolve_step,
)
from flashchar.domain.models import (
    InfiniteRuleConfig,
    Settings,
    SlowCorrectCapMode,
    StepConfig,
    WrongBehavior,
)

logger = logging.getLogger(__name__)

__all__ = [
    "interval_hours_for_status",
    "is_fast_eligible",
    "lookup_step",
    "next_status_on_correct",
    "speed_threshold_for_status",
    "status_on_wrong",
]


def is_fast_eligible(
    was_wrong_this_session: bool, flip_time_sec: float, threshold_sec: float
) -> bool:
    """
    A correct answer is fast when it came within the threshold (inclusive)
    and the card has not been answered wrongly earlier in the sitting.
    """
    return not was_wrong_this_session and flip_time_sec <= threshold_sec


def speed_threshold_for_status(status: int, settings: Settings) -> float:
    """
    Response-time threshold (seconds) used to judge a correct answer as fast.

    The infinite-zone threshold applies from start_step upward; below it the
    rung's own threshold is used, or one second when no rung matches.
    """
    if status >= settings.infinite_rule.start_step:
        return settings.infinite_rule.fast_threshold_sec

    config = lookup_step(status, settings)
    if config is None:
        return DEFAULT_SPEED_THRESHOLD_SEC
    return config.speed_threshold_sec


def interval_hours_for_status(status: int, settings: Settings) -> float:
    """
    Hours until a card at this status is due again.

    Args:
        status: The card's status after grading.
        settings: Study settings holding the ladder and infinite rule.

    Returns:
        The rung's interval verbatim for ladder statuses, a fixed 24 hours for
        unconfigured gaps below the infinite zone, and the geometric formula
        (rounded to whole days, capped, at least one hour) in the infinite zone.
    """
    rule = resolve_step(status, settings)

    if isinstance(rule, FiniteStep):
        return rule.config.interval_hours

    if isinstance(rule, UnconfiguredStep):
        logger.debug(
            f"No ladder rung for status {status}; using {GAP_FALLBACK_HOURS}h fallback"
        )
        return GAP_FALLBACK_HOURS

    days = _infinite_interval_days(rule.rule, rule.offset)
    return max(MIN_INTERVAL_HOURS, days * HOURS_PER_DAY)


def _infinite_interval_days(rule: InfiniteRuleConfig, offset: int) -> float:
    try:
        days = _round_half_up(rule.base_interval_days * float(rule.growth_factor) ** offset)
    except OverflowError:
        logger.debug(f"Interval growth overflowed at offset {offset}; capping")
        return rule.max_interval_days
    return min(rule.max_interval_days, days)


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; 474.5 must become 475.
    return math.floor(value + 0.5)


def next_status_on_correct(status: int, fast_eligible: bool, settings: Settings) -> int:
    """
    Status after a correct answer.

    - Ladder step 0 always promotes to 1, whatever the speed.
    - Other ladder rungs promote when fast, otherwise apply the rung's cap mode.
    - The infinite zone promotes when fast, otherwise stays.
    - Unconfigured gaps never move.
    """
    rule = resolve_step(status, settings)

    if isinstance(rule, FiniteStep):
        if rule.config.step == 0:
            return 1
        if fast_eligible:
            return status + 1
        return _apply_slow_cap(status, rule.config)

    if isinstance(rule, InfiniteStep):
        return status + 1 if fast_eligible else status

    return status


def _apply_slow_cap(status: int, config: StepConfig) -> int:
    mode = config.slow_correct_cap_mode
    if mode == SlowCorrectCapMode.DEMOTE_ONE:
        return max(0, status - 1)
    if mode == SlowCorrectCapMode.CUSTOM:
        if config.slow_correct_target is None:
            logger.debug(f"Custom cap on step {config.step} has no target; staying")
            return status
        return config.slow_correct_target
    return status


def status_on_wrong(status: int, settings: Settings) -> int:
    """Status after a wrong answer, per the configured wrong behavior."""
    if settings.wrong_behavior == WrongBehavior.LAPSE_ONE:
        return max(0, status - 1)
    if settings.wrong_behavior == WrongBehavior.RESET_ZERO:
        return 0
    return status
