"""
Settings boundary: validates study settings before they are accepted.

A rejected update leaves the stored settings untouched.
"""

import logging
from collections import Counter

from flashchar.domain.constants import MAX_SIDE_FIELDS, MIN_SIDE_FIELDS
from flashchar.domain.errors import SettingsValidationError
from flashchar.domain.models import Settings
from flashchar.domain.ports import SettingsStore

logger = logging.getLogger(__name__)


def validate_settings(settings: Settings) -> list[str]:
    """
    Check a candidate Settings value.

    Returns:
        A list of human-readable problems; empty when the settings are valid.
    """
    problems: list[str] = []

    for side, fields in (("front", settings.front_fields), ("back", settings.back_fields)):
        if not MIN_SIDE_FIELDS <= len(fields) <= MAX_SIDE_FIELDS:
            problems.append(
                f"{side} fields must have between {MIN_SIDE_FIELDS} and "
                f"{MAX_SIDE_FIELDS} entries (got {len(fields)})"
            )

    if tuple(settings.front_fields) == tuple(settings.back_fields):
        problems.append("front and back fields must differ")

    duplicates = sorted(
        step for step, count in Counter(s.step for s in settings.steps).items() if count > 1
    )
    if duplicates:
        problems.append(f"ladder steps must be unique (duplicated: {duplicates})")

    return problems


class SettingsService:
    """Loads study settings and applies validated updates."""

    def __init__(self, store: SettingsStore):
        self._store = store

    async def load(self) -> Settings:
        return await self._store.load_settings()

    async def update(self, candidate: Settings) -> Settings:
        """
        Persist new settings if they pass validation.

        Raises:
            SettingsValidationError: The candidate is invalid; nothing is saved.
        """
        problems = validate_settings(candidate)
        if problems:
            logger.warning(f"Rejected settings update: {problems}")
            raise SettingsValidationError(problems)

        await self._store.save_settings(candidate)
        logger.info("Settings updated")
        return candidate
