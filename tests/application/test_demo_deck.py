import pytest

from flashchar.application.demo_deck import DEMO_CARDS, seed_demo_cards_if_empty
from flashchar.infrastructure.adapters.json_store import JsonStudyRepository


@pytest.mark.asyncio
async def test_seeds_empty_collection(tmp_path, now):
    repo = JsonStudyRepository(tmp_path / "deck.json")

    added = await seed_demo_cards_if_empty(repo, now)

    cards = await repo.list_cards()
    assert added == len(DEMO_CARDS) == 30
    assert [c.characters for c in cards] == [d.characters for d in DEMO_CARDS]
    assert all(c.status == 0 and c.due_at == now for c in cards)
    assert len({c.id for c in cards}) == 30


@pytest.mark.asyncio
async def test_leaves_existing_collection_alone(tmp_path, now, make_card):
    repo = JsonStudyRepository(tmp_path / "deck.json")
    await repo.save_card(make_card("mine"))

    assert await seed_demo_cards_if_empty(repo, now) == 0
    assert [c.id for c in await repo.list_cards()] == ["mine"]


def test_demo_cards_are_distinct_and_complete():
    assert len({d.characters for d in DEMO_CARDS}) == len(DEMO_CARDS)
    assert all(d.pinyin and d.meaning for d in DEMO_CARDS)
