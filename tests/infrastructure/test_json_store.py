import json
import math
from dataclasses import replace

import pytest

from flashchar.domain.defaults import default_settings
from flashchar.domain.errors import FlashcharError, StoreCorruptError
from flashchar.domain.models import CardField, ResultType, Review, WrongBehavior
from flashchar.infrastructure.adapters.json_store import JsonStudyRepository


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "data" / "deck.json"


@pytest.mark.asyncio
async def test_missing_file_is_empty(store_path):
    repo = JsonStudyRepository(store_path)
    assert await repo.list_cards() == []
    assert await repo.list_reviews() == []
    assert not store_path.exists()


@pytest.mark.asyncio
async def test_save_and_reload_cards(store_path, make_card):
    repo = JsonStudyRepository(store_path)
    await repo.save_card(make_card("a", pinyin="gǔ"))
    await repo.save_card(make_card("b"))
    await repo.save_card(replace(make_card("a", pinyin="gǔ"), status=4))

    reloaded = JsonStudyRepository(store_path)
    cards = await reloaded.list_cards()
    assert [c.id for c in cards] == ["a", "b"]
    assert cards[0].status == 4
    assert cards[0] == replace(make_card("a", pinyin="gǔ"), status=4)
    assert await reloaded.get_card("missing") is None
    assert (await reloaded.find_by_characters("b")).id == "b"


@pytest.mark.asyncio
async def test_reviews_are_appended(store_path, now):
    repo = JsonStudyRepository(store_path)
    review = Review(
        id="r1",
        card_id="a",
        reviewed_at=now,
        answer_ms=800,
        result_type=ResultType.CORRECT,
        status_before=0,
        status_after=1,
        attempt_number=1,
        fast_eligible=True,
    )
    await repo.append_review(review)
    await repo.append_review(replace(review, id="r2"))

    reviews = await JsonStudyRepository(store_path).list_reviews()
    assert [r.id for r in reviews] == ["r1", "r2"]
    assert reviews[0] == review


@pytest.mark.asyncio
async def test_settings_default_and_round_trip(store_path):
    repo = JsonStudyRepository(store_path)
    loaded = await repo.load_settings()
    assert loaded == default_settings()
    assert store_path.exists()

    changed = replace(
        loaded,
        wrong_behavior=WrongBehavior.RESET_ZERO,
        front_fields=(CardField.MEANING,),
        tts_voice_name="Ting-Ting",
    )
    await repo.save_settings(changed)

    reloaded = await JsonStudyRepository(store_path).load_settings()
    assert reloaded == changed
    assert reloaded.steps[0].speed_threshold_sec == math.inf


@pytest.mark.asyncio
async def test_partial_settings_are_merged_with_defaults(store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_text(
        json.dumps(
            {
                "cards": [],
                "settings": {"wrong_behavior": "lapseOne", "infinite_rule": {"growth_factor": 2}},
            }
        )
    )

    settings = await JsonStudyRepository(store_path).load_settings()
    defaults = default_settings()

    assert settings.wrong_behavior == WrongBehavior.LAPSE_ONE
    assert settings.infinite_rule.growth_factor == 2
    assert settings.infinite_rule.start_step == defaults.infinite_rule.start_step
    assert settings.steps == defaults.steps
    assert settings.front_fields == defaults.front_fields


@pytest.mark.asyncio
async def test_reads_javascript_timestamps(store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_text(
        json.dumps(
            {
                "cards": [
                    {
                        "id": "a",
                        "characters": "古",
                        "meaning": "ancient",
                        "due_at": "2024-03-01T12:00:00.000Z",
                        "created_at": "2024-03-01T12:00:00.000Z",
                        "updated_at": "2024-03-01T12:00:00.000Z",
                    }
                ]
            }
        )
    )

    card = await JsonStudyRepository(store_path).get_card("a")
    assert card.due_at.tzinfo is not None
    assert card.status == 0
    assert card.pinyin is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "doc, read",
    [
        ({"settings": {"wrong_behavior": "bogus"}}, "load_settings"),
        ({"settings": {"steps": [{"step": 0}]}}, "load_settings"),
        ({"cards": [{"id": "a", "characters": "古"}]}, "list_cards"),
        ({"cards": [{"id": "a", "characters": "古", "meaning": "x", "due_at": 5}]}, "get_card"),
        ({"reviews": [{"id": "r1", "card_id": "a", "result_type": "maybe"}]}, "list_reviews"),
    ],
)
async def test_corrupt_records_raise_store_error(store_path, doc, read):
    store_path.parent.mkdir(parents=True)
    store_path.write_text(json.dumps(doc))
    repo = JsonStudyRepository(store_path)
    args = ("a",) if read == "get_card" else ()

    with pytest.raises(StoreCorruptError):
        await getattr(repo, read)(*args)


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["{not json", "[1, 2]"])
async def test_unreadable_document_raises_store_error(store_path, text):
    store_path.parent.mkdir(parents=True)
    store_path.write_text(text)

    with pytest.raises(StoreCorruptError) as exc:
        await JsonStudyRepository(store_path).list_cards()
    assert isinstance(exc.value, FlashcharError)


@pytest.mark.asyncio
async def test_numeric_settings_decode_as_floats(store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_text(
        json.dumps(
            {
                "settings": {
                    "steps": [{"step": 0, "interval_hours": 4}],
                    "infinite_rule": {
                        "base_interval_days": 365,
                        "growth_factor": 2,
                        "max_interval_days": 3650,
                    },
                }
            }
        )
    )

    settings = await JsonStudyRepository(store_path).load_settings()
    rule = settings.infinite_rule

    assert isinstance(settings.steps[0].interval_hours, float)
    assert isinstance(rule.base_interval_days, float)
    assert isinstance(rule.growth_factor, float)
    assert isinstance(rule.max_interval_days, float)
