"""Plain-dict codecs for domain records.

Datetimes are stored as ISO-8601 strings and enums as their values.
Decoders tolerate missing optional keys so older documents still load.
"""

import math
from datetime import datetime, timezone
from typing import Any

from flashchar.domain.defaults import default_settings
from flashchar.domain.models import (
    Card,
    CardField,
    DedupeImportMode,
    InfiniteRuleConfig,
    ResultType,
    Review,
    Settings,
    SlowCorrectCapMode,
    StepConfig,
    WrongBehavior,
)


def format_dt(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    # Accept the trailing "Z" written by JavaScript's toISOString()
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------- Cards ----------


def card_to_dict(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "characters": card.characters,
        "pinyin": card.pinyin,
        "meaning": card.meaning,
        "status": card.status,
        "due_at": format_dt(card.due_at),
        "created_at": format_dt(card.created_at),
        "updated_at": format_dt(card.updated_at),
        "last_reviewed_at": format_dt(card.last_reviewed_at),
        "last_answer_ms": card.last_answer_ms,
        "streak": card.streak,
        "lapses": card.lapses,
    }


def card_from_dict(data: dict[str, Any]) -> Card:
    return Card(
        id=str(data["id"]),
        characters=data["characters"],
        pinyin=data.get("pinyin"),
        meaning=data["meaning"],
        status=int(data.get("status", 0)),
        due_at=parse_dt(data["due_at"]),
        created_at=parse_dt(data["created_at"]),
        updated_at=parse_dt(data["updated_at"]),
        last_reviewed_at=parse_dt(data.get("last_reviewed_at")),
        last_answer_ms=data.get("last_answer_ms"),
        streak=int(data.get("streak", 0)),
        lapses=int(data.get("lapses", 0)),
    )


# ---------- Reviews ----------


def review_to_dict(review: Review) -> dict[str, Any]:
    return {
        "id": review.id,
        "card_id": review.card_id,
        "reviewed_at": format_dt(review.reviewed_at),
        "answer_ms": review.answer_ms,
        "result_type": review.result_type.value,
        "status_before": review.status_before,
        "status_after": review.status_after,
        "attempt_number": review.attempt_number,
        "fast_eligible": review.fast_eligible,
    }


def review_from_dict(data: dict[str, Any]) -> Review:
    return Review(
        id=str(data["id"]),
        card_id=str(data["card_id"]),
        reviewed_at=parse_dt(data["reviewed_at"]),
        answer_ms=int(data["answer_ms"]),
        result_type=ResultType(data["result_type"]),
        status_before=int(data["status_before"]),
        status_after=int(data["status_after"]),
        attempt_number=int(data["attempt_number"]),
        fast_eligible=bool(data["fast_eligible"]),
    )


# ---------- Settings ----------


def step_to_dict(step: StepConfig) -> dict[str, Any]:
    return {
        "step": step.step,
        "interval_hours": step.interval_hours,
        "speed_threshold_sec": step.speed_threshold_sec,
        "slow_correct_cap_mode": step.slow_correct_cap_mode.value,
        "slow_correct_target": step.slow_correct_target,
    }


def step_from_dict(data: dict[str, Any]) -> StepConfig:
    threshold = data.get("speed_threshold_sec")
    return StepConfig(
        step=int(data["step"]),
        interval_hours=float(data["interval_hours"]),
        speed_threshold_sec=math.inf if threshold is None else float(threshold),
        slow_correct_cap_mode=SlowCorrectCapMode(data.get("slow_correct_cap_mode", "stay")),
        slow_correct_target=data.get("slow_correct_target"),
    )


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    rule = settings.infinite_rule
    return {
        "front_fields": [f.value for f in settings.front_fields],
        "back_fields": [f.value for f in settings.back_fields],
        "steps": [step_to_dict(s) for s in settings.steps],
        "wrong_behavior": settings.wrong_behavior.value,
        "infinite_rule": {
            "start_step": rule.start_step,
            "fast_threshold_sec": rule.fast_threshold_sec,
            "base_interval_days": rule.base_interval_days,
            "growth_factor": rule.growth_factor,
            "max_interval_days": rule.max_interval_days,
        },
        "tts_voice_name": settings.tts_voice_name,
        "tts_rate": settings.tts_rate,
        "tts_pitch": settings.tts_pitch,
        "dedupe_import_mode": settings.dedupe_import_mode.value,
    }


def settings_from_dict(data: dict[str, Any] | None) -> Settings:
    """
    Decode settings, filling any missing field from the defaults.
    """
    base = settings_to_dict(default_settings())
    merged = {**base, **(data or {})}
    rule = {**base["infinite_rule"], **(merged.get("infinite_rule") or {})}

    return Settings(
        front_fields=tuple(CardField(f) for f in merged["front_fields"]),
        back_fields=tuple(CardField(f) for f in merged["back_fields"]),
        steps=tuple(step_from_dict(s) for s in merged["steps"]),
        wrong_behavior=WrongBehavior(merged["wrong_behavior"]),
        infinite_rule=InfiniteRuleConfig(
            start_step=int(rule["start_step"]),
            fast_threshold_sec=float(rule["fast_threshold_sec"]),
            base_interval_days=float(rule["base_interval_days"]),
            growth_factor=float(rule["growth_factor"]),
            max_interval_days=float(rule["max_interval_days"]),
        ),
        tts_voice_name=merged.get("tts_voice_name"),
        tts_rate=float(merged["tts_rate"]),
        tts_pitch=float(merged["tts_pitch"]),
        dedupe_import_mode=DedupeImportMode(merged["dedupe_import_mode"]),
    )
