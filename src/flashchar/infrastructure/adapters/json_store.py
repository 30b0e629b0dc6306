"""
JSON Study Repository: infrastructure adapter for a single JSON document.

Implements the card, review and settings ports on top of one file:

    {"version": 1, "cards": [...], "reviews": [...], "settings": {...}}

The document is loaded lazily and rewritten atomically after every change.
"""

import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from flashchar.application.utils.serialization import (
    card_from_dict,
    card_to_dict,
    review_from_dict,
    review_to_dict,
    settings_from_dict,
    settings_to_dict,
)
from flashchar.domain.errors import StoreCorruptError
from flashchar.domain.models import Card, Review, Settings
from flashchar.domain.ports import CardRepository, ReviewLog, SettingsStore

logger = logging.getLogger(__name__)

STORE_VERSION = 1

T = TypeVar("T")


class JsonStudyRepository(CardRepository, ReviewLog, SettingsStore):
    """
    File-backed store for cards, the review log and study settings.

    Not safe for concurrent writers: two processes sharing a file will
    overwrite each other's changes.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._doc: dict[str, Any] | None = None

    # ---------- Document I/O ----------

    def _load(self) -> dict[str, Any]:
        if self._doc is not None:
            return self._doc

        if self.path.exists():
            text = self.path.read_text(encoding="utf-8")
            try:
                doc = json.loads(text) if text.strip() else {}
            except json.JSONDecodeError as e:
                raise StoreCorruptError(self.path, f"invalid JSON ({e})") from e
            if not isinstance(doc, dict):
                raise StoreCorruptError(self.path, "top level is not an object")
            logger.debug(f"Loaded store from {self.path}")
        else:
            doc = {}
            logger.debug(f"No store at {self.path}; starting empty")

        doc.setdefault("version", STORE_VERSION)
        doc.setdefault("cards", [])
        doc.setdefault("reviews", [])
        doc.setdefault("settings", None)
        self._doc = doc
        return doc

    def _flush(self) -> None:
        doc = self._load()
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _decode(self, decode: Callable[[Any], T], raw: Any, what: str) -> T:
        try:
            return decode(raw)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StoreCorruptError(self.path, f"bad {what}: {e}") from e

    # ---------- CardRepository ----------

    async def list_cards(self) -> list[Card]:
        return [self._decode(card_from_dict, c, "card") for c in self._load()["cards"]]

    async def get_card(self, card_id: str) -> Card | None:
        for raw in self._load()["cards"]:
            if raw.get("id") == card_id:
                return self._decode(card_from_dict, raw, "card")
        return None

    async def find_by_characters(self, characters: str) -> Card | None:
        for raw in self._load()["cards"]:
            if raw.get("characters") == characters:
                return self._decode(card_from_dict, raw, "card")
        return None

    async def save_card(self, card: Card) -> None:
        cards = self._load()["cards"]
        encoded = card_to_dict(card)
        for i, raw in enumerate(cards):
            if raw.get("id") == card.id:
                cards[i] = encoded
                break
        else:
            cards.append(encoded)
        self._flush()

    # ---------- ReviewLog ----------

    async def append_review(self, review: Review) -> None:
        self._load()["reviews"].append(review_to_dict(review))
        self._flush()

    async def list_reviews(self) -> list[Review]:
        return [self._decode(review_from_dict, r, "review") for r in self._load()["reviews"]]

    # ---------- SettingsStore ----------

    async def load_settings(self) -> Settings:
        doc = self._load()
        if doc["settings"] is None:
            settings = settings_from_dict(None)
            doc["settings"] = settings_to_dict(settings)
            self._flush()
            return settings
        return self._decode(settings_from_dict, doc["settings"], "settings")

    async def save_settings(self, settings: Settings) -> None:
        self._load()["settings"] = settings_to_dict(settings)
        self._flush()
