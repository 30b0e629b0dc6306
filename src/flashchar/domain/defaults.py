"""Factory for the default study settings.

Each call builds a fresh value; there is no shared module-level instance.
"""

import math

from .constants import (
    DEFAULT_BASE_INTERVAL_DAYS,
    DEFAULT_GROWTH_FACTOR,
    DEFAULT_INFINITE_FAST_THRESHOLD_SEC,
    DEFAULT_INFINITE_START_STEP,
    DEFAULT_MAX_INTERVAL_DAYS,
)
from .models import InfiniteRuleConfig, Settings, StepConfig

# (step, interval_hours, speed_threshold_sec)
_DEFAULT_LADDER = [
    (0, 4, math.inf),
    (1, 12, 8),
    (2, 24, 3),
    (3, 48, 2),
    (4, 72, 1),
    (5, 72, 1),
    (6, 168, 1),
    (7, 336, 1),
    (8, 720, 1),
    (9, 1440, 1),
    (10, 2880, 1),
    (11, 5760, 1),
    (12, 8760, 1),
]


def default_steps() -> tuple[StepConfig, ...]:
    return tuple(
        StepConfig(step=step, interval_hours=hours, speed_threshold_sec=threshold)
        for step, hours, threshold in _DEFAULT_LADDER
    )


def default_infinite_rule() -> InfiniteRuleConfig:
    return InfiniteRuleConfig(
        start_step=DEFAULT_INFINITE_START_STEP,
        fast_threshold_sec=DEFAULT_INFINITE_FAST_THRESHOLD_SEC,
        base_interval_days=DEFAULT_BASE_INTERVAL_DAYS,
        growth_factor=DEFAULT_GROWTH_FACTOR,
        max_interval_days=DEFAULT_MAX_INTERVAL_DAYS,
    )


def default_settings() -> Settings:
    return Settings(steps=default_steps(), infinite_rule=default_infinite_rule())
