"""
Classification of a card status against the configured ladder.

A status falls into exactly one region:
- FiniteStep: an explicit ladder rung matches.
- InfiniteStep: no rung matches and status >= infinite_rule.start_step.
- UnconfiguredStep: no rung matches and status is below the infinite zone.
"""

from dataclasses import dataclass

from .models import InfiniteRuleConfig, Settings, StepConfig


@dataclass(frozen=True)
class FiniteStep:
    config: StepConfig


@dataclass(frozen=True)
class InfiniteStep:
    rule: InfiniteRuleConfig
    offset: int  # status - rule.start_step


@dataclass(frozen=True)
class UnconfiguredStep:
    status: int


StepRule = FiniteStep | InfiniteStep | UnconfiguredStep


def lookup_step(status: int, settings: Settings) -> StepConfig | None:
    """Exact match of status against the ladder."""
    for config in settings.steps:
        if config.step == status:
            return config
    return None


def resolve_step(status: int, settings: Settings) -> StepRule:
    """
    Resolve which rule set governs a status.

    A ladder rung wins even when it sits at or above the infinite start step.
    """
    config = lookup_step(status, settings)
    if config is not None:
        return FiniteStep(config)

    rule = settings.infinite_rule
    if status >= rule.start_step:
        return InfiniteStep(rule=rule, offset=status - rule.start_step)

    return UnconfiguredStep(status)
