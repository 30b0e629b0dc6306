"""Starter deck for an empty collection."""

import logging
from datetime import datetime, timezone

from flashchar.domain.ports import CardRepository

from .card_io import CardDraft, make_card

logger = logging.getLogger(__name__)

DEMO_CARDS: tuple[CardDraft, ...] = tuple(
    CardDraft(characters=characters, pinyin=pinyin, meaning=meaning)
    for characters, pinyin, meaning in (
        ("古", "gǔ", "ancient"),
        ("亡", "wáng", "to perish"),
        ("状", "zhuàng", "condition"),
        ("鲁", "lǔ", "crude"),
        ("疗", "liáo", "to treat"),
        ("操", "cāo", "to operate"),
        ("遗", "yí", "to leave behind"),
        ("判", "pàn", "to judge"),
        ("响", "xiǎng", "sound"),
        ("网", "wǎng", "net"),
        ("箱", "xiāng", "box"),
        ("货", "huò", "goods"),
        ("围", "wéi", "to surround"),
        ("签", "qiān", "to sign"),
        ("牌", "pái", "card"),
        ("户", "hù", "household"),
        ("寻", "xún", "to search"),
        ("质", "zhì", "quality"),
        ("供", "gōng", "to supply"),
        ("奖", "jiǎng", "prize"),
        ("袋", "dài", "bag"),
        ("胡", "hú", "reckless"),
        ("脏", "zāng", "dirty"),
        ("堂", "táng", "hall"),
        ("曼", "màn", "graceful"),
        ("效", "xiào", "effect"),
        ("露", "lù", "to reveal"),
        ("替", "tì", "to replace"),
        ("娜", "nà", "elegant"),
        ("座", "zuò", "seat"),
    )
)


async def seed_demo_cards_if_empty(repo: CardRepository, now: datetime | None = None) -> int:
    """
    Add the starter deck when the collection has no cards.

    Returns:
        Number of cards added; 0 when the collection already had cards.
    """
    if await repo.list_cards():
        logger.debug("Collection is not empty; skipping demo deck")
        return 0

    now = now or datetime.now(timezone.utc)
    for draft in DEMO_CARDS:
        await repo.save_card(make_card(draft, now))

    logger.info(f"Seeded {len(DEMO_CARDS)} demo cards")
    return len(DEMO_CARDS)
