"""Card import and export.

Supports a loose CSV dialect (optional header; 2 or 3 columns) and
JSON arrays of {characters, pinyin, meaning} objects.
"""

import csv
import io
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from ulid import ULID

from flashchar.application.utils.serialization import card_to_dict, format_dt
from flashchar.domain.constants import CSV_EXPORT_HEADER, CSV_HEADER_MARKERS
from flashchar.domain.errors import ImportFormatError
from flashchar.domain.models import Card, DedupeImportMode
from flashchar.domain.ports import CardRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardDraft:
    """Card content parsed from an import, before it gets an id or schedule."""

    characters: str
    meaning: str
    pinyin: str | None = None


@dataclass
class ImportResult:
    added: int = 0
    merged: int = 0


def generate_card_id() -> str:
    """Generate a stable card ID using ULID."""
    return str(ULID())


def make_card(draft: CardDraft, now: datetime | None = None) -> Card:
    """New cards start at status 0 and are due immediately."""
    now = now or datetime.now(timezone.utc)
    return Card(
        id=generate_card_id(),
        characters=draft.characters,
        pinyin=draft.pinyin,
        meaning=draft.meaning,
        status=0,
        due_at=now,
        created_at=now,
        updated_at=now,
    )


# ---------- Parsing ----------


def parse_csv(text: str) -> list[CardDraft]:
    """
    Parse CSV rows of `characters,meaning` or `characters,pinyin,meaning`.

    A first line mentioning "characters" or "meaning" is treated as a header.
    Rows without characters or meaning are dropped.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return []

    header = lines[0].lower()
    if any(marker in header for marker in CSV_HEADER_MARKERS):
        lines = lines[1:]

    drafts: list[CardDraft] = []
    for line in lines:
        # One record per line; quoted fields never span lines
        try:
            cols = [c.strip() for c in next(csv.reader([line]))]
        except csv.Error as e:
            logger.debug(f"Skipped unreadable CSV line {line!r}: {e}")
            continue
        if len(cols) == 2:
            characters, pinyin, meaning = cols[0], "", cols[1]
        elif len(cols) >= 3:
            characters, pinyin, meaning = cols[0], cols[1], cols[2]
        else:
            continue

        if not characters or not meaning:
            continue
        drafts.append(CardDraft(characters=characters, meaning=meaning, pinyin=pinyin or None))
    return drafts


def parse_json(text: str) -> list[CardDraft]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"Invalid JSON: {e}") from e

    if not isinstance(payload, list):
        raise ImportFormatError("JSON import must be an array of card objects")

    drafts: list[CardDraft] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        characters = str(item.get("characters") or "").strip()
        meaning = str(item.get("meaning") or "").strip()
        if not characters or not meaning:
            continue
        pinyin = str(item.get("pinyin") or "").strip()
        drafts.append(CardDraft(characters=characters, meaning=meaning, pinyin=pinyin or None))
    return drafts


def parse_import(text: str) -> list[CardDraft]:
    """Parse either format; JSON is recognised by a leading '['."""
    if text.strip().startswith("["):
        return parse_json(text)
    return parse_csv(text)


async def import_drafts(
    drafts: Iterable[CardDraft],
    repo: CardRepository,
    mode: DedupeImportMode,
    now: datetime | None = None,
) -> ImportResult:
    """
    Store parsed drafts.

    In merge mode a draft whose characters already exist updates that card's
    content and keeps its scheduling state; otherwise a new card is added.
    """
    now = now or datetime.now(timezone.utc)
    result = ImportResult()

    for draft in drafts:
        existing = None
        if mode == DedupeImportMode.MERGE:
            existing = await repo.find_by_characters(draft.characters)

        if existing is not None:
            await repo.save_card(
                replace(
                    existing,
                    characters=draft.characters,
                    pinyin=draft.pinyin,
                    meaning=draft.meaning,
                    updated_at=now,
                )
            )
            result.merged += 1
        else:
            await repo.save_card(make_card(draft, now))
            result.added += 1

    logger.info(f"Imported cards: {result.added} added, {result.merged} merged")
    return result


def search_cards(cards: Iterable[Card], query: str | None) -> list[Card]:
    """Case-insensitive substring match over characters, pinyin and meaning."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(cards)
    return [c for c in cards if needle in f"{c.characters} {c.pinyin or ''} {c.meaning}".lower()]


# ---------- Export ----------


def to_csv(cards: Iterable[Card]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_EXPORT_HEADER)
    for c in cards:
        writer.writerow(
            [c.id, c.characters, c.pinyin or "", c.meaning, c.status, format_dt(c.due_at)]
        )
    return buf.getvalue().rstrip("\n")


def to_json(cards: Iterable[Card]) -> str:
    return json.dumps([card_to_dict(c) for c in cards], indent=2, ensure_ascii=False)
